"""In-memory response cache for package clients."""

from __future__ import annotations

import copy
import dataclasses
import logging
import time
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

from vlens.core.errors import PackageClientError, TransportError
from vlens.core.models import PackageDocument, RequestedPackage, ResponseSource

if TYPE_CHECKING:
    from vlens.config.schemas import CachingOptions

logger = logging.getLogger(__name__)

FetchResult = PackageDocument | list[PackageDocument]


@dataclass
class CacheEntry:
    """A cached outcome (document or error) with its expiry time."""

    key: str
    status: int | None
    data: Any
    rejected: bool
    expiry: float


def create_cache_key(package: RequestedPackage) -> str:
    """Build the cache key identifying a requested package."""
    return f"{package.name}@{package.version}_{package.path}"


class ResponseCache:
    """TTL cache of prior fetch outcomes, owned by a single client.

    Entries are overwritten on every fresh fetch and only disappear by
    expiring; there is no size bound. Two concurrent misses for the same
    key both go to the network and the last write wins.
    """

    def __init__(
        self,
        duration_seconds: float,
        enabled: bool = True,
        clock: Callable[[], float] = time.monotonic,
    ):
        """Initialize the cache.

        Args:
            duration_seconds: Time-to-live of each entry
            enabled: Master switch; a zero duration also disables caching
            clock: Monotonic time source
        """
        self._duration = duration_seconds
        self._enabled = enabled
        self._clock = clock
        self._entries: dict[str, CacheEntry] = {}

    @classmethod
    def from_options(cls, options: CachingOptions) -> ResponseCache:
        """Create a cache from caching configuration."""
        return cls(options.duration_seconds, enabled=options.enabled)

    @property
    def duration(self) -> float:
        return self._duration

    @property
    def enabled(self) -> bool:
        return self._enabled and self._duration > 0

    def has_expired(self, key: str) -> bool:
        """Check whether a key is missing or past its expiry."""
        entry = self._entries.get(key)
        if entry is None:
            return True
        return self._clock() >= entry.expiry

    def get(self, key: str) -> CacheEntry | None:
        """Get the entry for a key, expired or not."""
        return self._entries.get(key)

    def set(self, key: str, status: int | None, data: Any, rejected: bool) -> CacheEntry:
        """Store an outcome, replacing any previous entry for the key."""
        entry = CacheEntry(
            key=key,
            status=status,
            data=data,
            rejected=rejected,
            expiry=self._clock() + self._duration,
        )
        self._entries[key] = entry
        return entry

    def clear(self) -> None:
        """Remove all entries."""
        self._entries.clear()

    def __len__(self) -> int:
        return len(self._entries)


def _tag_cached(document: PackageDocument) -> PackageDocument:
    return dataclasses.replace(
        document,
        response=dataclasses.replace(document.response, source=ResponseSource.CACHE),
    )


def _tag_cached_error(error: PackageClientError) -> PackageClientError:
    if isinstance(error, TransportError):
        error = copy.copy(error)
        error.source = ResponseSource.CACHE
    return error


async def fetch_with_cache(
    cache: ResponseCache,
    key: str,
    fetcher: Callable[[], Awaitable[FetchResult]],
) -> FetchResult:
    """Serve a fetch from the cache, or run it and cache the outcome.

    A fresh success is returned tagged with ``ResponseSource.CACHE``; a fresh
    failure is raised again, transport errors carrying the same tag. On a
    miss, ``fetcher`` runs and exactly one entry is written for its outcome,
    success or ``PackageClientError``.

    Args:
        cache: The client's cache
        key: Key from ``create_cache_key``
        fetcher: Coroutine factory performing the network fetch

    Returns:
        The fetched or cached document(s)
    """
    if cache.enabled and not cache.has_expired(key):
        entry = cache.get(key)
        assert entry is not None
        logger.debug("Cache hit for %s", key)
        if entry.rejected:
            raise _tag_cached_error(entry.data)
        if isinstance(entry.data, list):
            return [_tag_cached(document) for document in entry.data]
        return _tag_cached(entry.data)

    try:
        result = await fetcher()
    except PackageClientError as error:
        if cache.enabled:
            cache.set(key, getattr(error, "status", None), error, rejected=True)
        raise

    if cache.enabled:
        first = result[0] if isinstance(result, list) and result else result
        status = first.response.status if isinstance(first, PackageDocument) else None
        cache.set(key, status, result, rejected=False)
    return result
