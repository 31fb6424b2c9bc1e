"""Shared fixtures for vlens tests."""

import shutil
import tempfile
from collections.abc import Callable, Generator
from pathlib import Path
from typing import Any

import pytest

from vlens.clients.transport import JsonResponse, JsonTransport
from vlens.core.errors import TransportError
from vlens.core.models import PackageDependency, PackageRequest, RequestedPackage, ResponseSource


class FakeTransport(JsonTransport):
    """Serves canned JSON payloads by URL.

    A route may hold a payload or an exception to raise; unknown URLs
    answer 404. Every call is recorded in ``calls``.
    """

    def __init__(self, routes: dict[str, Any] | None = None):
        self.routes: dict[str, Any] = dict(routes or {})
        self.calls: list[tuple[str, dict[str, str] | None, dict[str, str] | None]] = []

    async def get_json(self, url, query=None, headers=None) -> JsonResponse:
        self.calls.append((url, query, headers))
        if url not in self.routes:
            raise TransportError(f"HTTP 404: Not Found for {url}", status=404, url=url)

        route = self.routes[url]
        if isinstance(route, Exception):
            raise route
        return JsonResponse(source=ResponseSource.REMOTE, status=200, data=route)

    def urls(self) -> list[str]:
        return [url for url, _, _ in self.calls]


@pytest.fixture
def temp_dir() -> Generator[Path, None, None]:
    """Create a temporary directory."""
    path = Path(tempfile.mkdtemp(prefix="vlens_test_"))
    yield path
    if path.exists():
        shutil.rmtree(path)


@pytest.fixture
def transport() -> FakeTransport:
    """A transport with no routes; tests add them."""
    return FakeTransport()


@pytest.fixture
def make_request() -> Callable[..., PackageRequest]:
    """Factory for package requests."""

    def factory(
        provider: str,
        name: str,
        version: str,
        path: str = "/project",
        include_prereleases: bool = True,
        client_data: Any = None,
    ) -> PackageRequest:
        return PackageRequest(
            provider_name=provider,
            include_prereleases=include_prereleases,
            client_data=client_data,
            dependency=PackageDependency(name=name, version=version),
            package=RequestedPackage(name=name, version=version, path=path),
        )

    return factory
