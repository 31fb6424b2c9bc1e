"""Constructors for documents and responses.

These only shape data and never raise.
"""

from collections.abc import Iterable

from vlens.core.models import (
    PackageDocument,
    PackageRequest,
    PackageResponse,
    PackageSource,
    RequestedPackage,
    ResponseSource,
    ResponseStatus,
    VersionType,
)
from vlens.core.suggestions import (
    Suggestion,
    SuggestionFlags,
    SuggestionStatus,
    create_no_match_suggestions,
)


def create_response_status(source: ResponseSource, status: int) -> ResponseStatus:
    """Create response status metadata."""
    return ResponseStatus(source=source, status=status)


def create_success(request: PackageRequest, document: PackageDocument) -> PackageResponse:
    """Wrap a document as the response to a request."""
    return PackageResponse(request=request, document=document)


def create_error(request: PackageRequest, error: BaseException) -> PackageResponse:
    """Wrap a failure as the response to a request."""
    return PackageResponse(request=request, error=error)


def create_not_found(
    provider_name: str,
    requested: RequestedPackage,
    releases: Iterable[str] | None,
    response: ResponseStatus,
) -> PackageDocument:
    """Create the document for a package the registry does not know.

    Args:
        provider_name: Provider that handled the request
        requested: The package as requested
        releases: Any releases known despite the miss (usually None)
        response: Status metadata, normally a 404

    Returns:
        A document with no suggestions
    """
    return PackageDocument(
        provider_name=provider_name,
        source=PackageSource.REGISTRY,
        response=response,
        type=None,
        requested=requested,
        resolved=None,
        suggestions=(),
        releases=tuple(releases or ()),
    )


def create_no_match(
    provider_name: str,
    source: PackageSource,
    type: VersionType,
    requested: RequestedPackage,
    response: ResponseStatus,
    latest_hint: str | None,
) -> PackageDocument:
    """Create the document for a tag specifier missing from the registry's tags.

    Args:
        provider_name: Provider that handled the request
        source: Where the versions came from
        type: Specifier kind that was requested (usually a tag)
        requested: The package as requested
        response: Status metadata of the registry call
        latest_hint: Version to offer as "latest", if any

    Returns:
        A ``no-match`` document offering the latest version
    """
    return PackageDocument(
        provider_name=provider_name,
        source=source,
        response=response,
        type=VersionType.NO_MATCH,
        requested=requested,
        resolved=None,
        suggestions=tuple(create_no_match_suggestions(latest_hint)),
    )


def create_unsupported(provider_name: str, requested: RequestedPackage) -> PackageDocument:
    """Create the document for a specifier no registry can resolve.

    Local paths, tarball URLs and non-GitHub git urls are ordinary manifest
    entries, so they are reported instead of failing the batch.
    """
    return PackageDocument(
        provider_name=provider_name,
        source=PackageSource.REGISTRY,
        response=create_response_status(ResponseSource.LOCAL, 200),
        type=VersionType.UNSUPPORTED,
        requested=requested,
        resolved=None,
        suggestions=(Suggestion(SuggestionStatus.UNSUPPORTED, "", SuggestionFlags.STATUS),),
    )
