"""Data model shared by every package client.

A dependency becomes a ``PackageRequest``, a client turns the registry payload
into a ``PackageDocument``, and the orchestrator hands back ``PackageResponse``
objects that pair each document (or error) with the request it answers.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from vlens.core.suggestions import Suggestion


class PackageSource(str, Enum):
    """Where a document's versions came from."""

    REGISTRY = "registry"
    GITHUB = "github"


class ResponseSource(str, Enum):
    """How a response was obtained."""

    REMOTE = "remote"
    CACHE = "cache"
    LOCAL = "local"


class VersionType(str, Enum):
    """Kind of version specifier written in the manifest."""

    FIXED = "fixed"
    RANGE = "range"
    TAG = "tag"
    ALIAS = "alias"
    COMMITTISH = "committish"
    NO_MATCH = "no-match"
    UNSUPPORTED = "unsupported"


@dataclass(frozen=True)
class PackageDependency:
    """A dependency entry as found in a manifest."""

    name: str
    version: str
    path: str = ""


@dataclass(frozen=True)
class RequestedPackage:
    """The package a request asks a client to resolve."""

    name: str
    version: str
    path: str


@dataclass(frozen=True)
class PackageNameVersion:
    """A name/version pair (the resolved side of a document)."""

    name: str
    version: str


@dataclass(frozen=True)
class PackageRequest:
    """Unit of work dispatched to exactly one package client."""

    provider_name: str
    include_prereleases: bool
    client_data: Any
    dependency: PackageDependency
    package: RequestedPackage
    attempt: int = 0


@dataclass(frozen=True)
class ResponseStatus:
    """HTTP-style status metadata attached to a document."""

    source: ResponseSource
    status: int


@dataclass(frozen=True)
class PackageDocument:
    """Provider-neutral view of a registry payload."""

    provider_name: str
    source: PackageSource
    response: ResponseStatus
    type: VersionType | None
    requested: RequestedPackage
    resolved: PackageNameVersion | None
    suggestions: tuple[Suggestion, ...] = ()
    releases: tuple[str, ...] = ()
    prereleases: tuple[str, ...] = ()


@dataclass(frozen=True)
class PackageResponse:
    """Orchestration result: a document or an error, plus its request."""

    request: PackageRequest
    document: PackageDocument | None = None
    error: BaseException | None = field(default=None, compare=False)

    @property
    def rejected(self) -> bool:
        return self.error is not None

    def to_dict(self) -> dict[str, Any]:
        """Serialize to plain data for JSON output."""
        result: dict[str, Any] = {
            "provider": self.request.provider_name,
            "package": {
                "name": self.request.package.name,
                "version": self.request.package.version,
                "path": self.request.package.path,
            },
        }
        if self.error is not None:
            result["error"] = str(self.error)
            return result

        doc = self.document
        assert doc is not None
        result.update(
            {
                "source": doc.source.value,
                "response": {"source": doc.response.source.value, "status": doc.response.status},
                "type": doc.type.value if doc.type else None,
                "resolved": (
                    {"name": doc.resolved.name, "version": doc.resolved.version}
                    if doc.resolved
                    else None
                ),
                "suggestions": [
                    {"name": s.name, "version": s.version, "flags": int(s.flags)}
                    for s in doc.suggestions
                ],
            }
        )
        return result
