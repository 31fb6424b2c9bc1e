"""Errors raised by package clients.

"Package not found" and "no matching tag" are not errors: clients return them
as regular documents (see ``vlens.core.factories``). Only unexpected failures
are raised.
"""

from vlens.core.models import ResponseSource


class PackageClientError(Exception):
    """Base class for package client failures."""

    pass


class TransportError(PackageClientError):
    """A registry request failed (network, HTTP status or payload decoding)."""

    def __init__(
        self,
        message: str,
        status: int | None = None,
        source: ResponseSource = ResponseSource.REMOTE,
        url: str | None = None,
    ):
        self.status = status
        self.source = source
        self.url = url
        super().__init__(message)


class UnknownFileVersionError(PackageClientError):
    """A selections/lock file declares a schema version we cannot read."""

    def __init__(self, path: str, file_version: object):
        self.path = path
        self.file_version = file_version
        super().__init__(f"Unknown selections file version {file_version!r} in {path}")


class InvalidSpecifierError(PackageClientError):
    """A version specifier the provider cannot resolve against a registry."""

    def __init__(self, name: str, version: str, reason: str = "unsupported specifier"):
        self.name = name
        self.version = version
        super().__init__(f"Cannot resolve {name}@{version}: {reason}")
