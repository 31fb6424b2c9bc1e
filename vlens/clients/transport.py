"""Registry transport used by package clients.

Clients receive a ``JsonTransport`` at construction and never open
connections themselves. ``HttpxJsonTransport`` is the default adapter.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

import httpx

from vlens.core.errors import TransportError
from vlens.core.models import ResponseSource

if TYPE_CHECKING:
    from vlens.config.schemas import HttpOptions

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class JsonResponse:
    """A decoded registry response."""

    source: ResponseSource
    status: int
    data: Any


class JsonTransport(ABC):
    """Fetches and decodes JSON documents from a registry."""

    @abstractmethod
    async def get_json(
        self,
        url: str,
        query: dict[str, str] | None = None,
        headers: dict[str, str] | None = None,
    ) -> JsonResponse:
        """GET a URL and decode its JSON body.

        Args:
            url: Absolute URL to request
            query: Optional query string parameters
            headers: Optional extra request headers

        Returns:
            The decoded response

        Raises:
            TransportError: On any non-2xx status, network or decode failure.
                ``status`` is set whenever the registry answered.
        """
        ...


class HttpxJsonTransport(JsonTransport):
    """JSON transport backed by ``httpx.AsyncClient``."""

    DEFAULT_TIMEOUT = 30.0  # seconds

    def __init__(
        self,
        http: HttpOptions | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        """Initialize the transport.

        Args:
            http: HTTP options (timeout, SSL verification, default headers)
            transport: Optional httpx transport, e.g. ``httpx.MockTransport``
        """
        self._timeout = http.timeout if http else self.DEFAULT_TIMEOUT
        self._verify = http.strict_ssl if http else True
        self._headers = dict(http.headers) if http else {}
        self._transport = transport

    async def get_json(
        self,
        url: str,
        query: dict[str, str] | None = None,
        headers: dict[str, str] | None = None,
    ) -> JsonResponse:
        request_headers = {"Accept": "application/json", **self._headers, **(headers or {})}
        logger.debug("Making GET request to %s", url)

        try:
            async with httpx.AsyncClient(
                timeout=self._timeout,
                verify=self._verify,
                transport=self._transport,
            ) as client:
                response = await client.get(url, params=query, headers=request_headers)
        except httpx.TimeoutException as e:
            logger.error("Request timed out for %s", url)
            raise TransportError(f"Request timed out for {url}", url=url) from e
        except httpx.HTTPError as e:
            logger.error("Failed to connect to %s: %s", url, e)
            raise TransportError(f"Failed to connect to {url}: {e}", url=url) from e

        if response.status_code >= 400:
            logger.debug("HTTP error %d for %s", response.status_code, url)
            raise TransportError(
                f"HTTP {response.status_code}: {response.reason_phrase} for {url}",
                status=response.status_code,
                url=url,
            )

        try:
            data = response.json()
        except ValueError as e:
            raise TransportError(
                f"Invalid JSON from {url}: {e}",
                status=response.status_code,
                url=url,
            ) from e

        logger.debug("Request successful, status %d", response.status_code)
        return JsonResponse(source=ResponseSource.REMOTE, status=response.status_code, data=data)
