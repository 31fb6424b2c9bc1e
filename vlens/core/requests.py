"""Fan-out of dependency requests to a package client.

All requests of a batch are dispatched at once with no concurrency limit and
no timeout beyond what the transport enforces. Results are collected in the
order requests complete, not in the order dependencies were given.
"""

from __future__ import annotations

import asyncio
import dataclasses
from collections.abc import Iterable
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

from vlens.core.factories import create_error, create_success
from vlens.core.models import (
    PackageDependency,
    PackageDocument,
    PackageRequest,
    PackageResponse,
    RequestedPackage,
)
from vlens.core.suggestions import filter_prerelease_suggestions

if TYPE_CHECKING:
    from vlens.clients.base import PackageClient


@dataclass(frozen=True)
class PackageClientContext:
    """Request-scoped settings shared by every request of a batch.

    ``fail_fast`` decides what a failing dependency does to its batch: when
    True the first failure propagates out of ``execute_dependency_requests``;
    when False it is returned as a rejected ``PackageResponse``.
    """

    include_prereleases: bool = False
    client_data: Any = None
    fail_fast: bool = True


def create_package_request(
    provider_name: str,
    package_path: str,
    dependency: PackageDependency,
    context: PackageClientContext,
) -> PackageRequest:
    """Build the request for one dependency."""
    return PackageRequest(
        provider_name=provider_name,
        include_prereleases=context.include_prereleases,
        client_data=context.client_data,
        dependency=dependency,
        package=RequestedPackage(
            name=dependency.name,
            version=dependency.version,
            path=package_path,
        ),
        attempt=0,
    )


def _respond(request: PackageRequest, document: PackageDocument) -> PackageResponse:
    if request.include_prereleases is False:
        document = dataclasses.replace(
            document,
            suggestions=tuple(filter_prerelease_suggestions(document.suggestions)),
        )
    return create_success(request, document)


async def execute_package_request(
    client: PackageClient,
    request: PackageRequest,
) -> PackageResponse | list[PackageResponse]:
    """Fetch a single request and wrap the outcome.

    Args:
        client: Client that handles the request's provider
        request: The request to execute

    Returns:
        One response, or one per document when the client resolves the
        dependency into several documents

    Raises:
        Exception: Whatever the client raised, after logging it
    """
    client.logger.debug("Queued package: %s", request.package.name)

    try:
        result = await client.fetch_package(request)
    except Exception as error:
        client.logger.error(
            "execute_package_request caught an exception.\n Package: %s@%s (%s)\n Error: %s",
            request.package.name,
            request.package.version,
            request.package.path,
            error,
        )
        raise

    if isinstance(result, list):
        for document in result:
            client.logger.info(
                "Fetched package from %s: %s@%s",
                document.response.source.value,
                request.package.name,
                request.package.version,
            )
        return [_respond(request, document) for document in result]

    client.logger.info(
        "Fetched package from %s: %s@%s",
        result.response.source.value,
        request.package.name,
        request.package.version,
    )
    return _respond(request, result)


async def execute_dependency_requests(
    package_path: str,
    client: PackageClient,
    dependencies: Iterable[PackageDependency],
    context: PackageClientContext,
) -> list[PackageResponse]:
    """Resolve a batch of dependencies concurrently.

    Args:
        package_path: Directory of the manifest the dependencies came from
        client: Client for the manifest's provider
        dependencies: Dependencies to resolve
        context: Settings shared by the batch

    Returns:
        Flattened responses in completion order

    Raises:
        Exception: The first failure, when ``context.fail_fast`` is set
    """
    provider_name = client.provider_name
    results: list[PackageResponse] = []

    async def run(dependency: PackageDependency) -> None:
        request = create_package_request(provider_name, package_path, dependency, context)
        try:
            responses = await execute_package_request(client, request)
        except Exception as error:
            if context.fail_fast:
                raise
            results.append(create_error(request, error))
            return

        if isinstance(responses, list):
            results.extend(responses)
        else:
            results.append(responses)

    await asyncio.gather(*(run(dependency) for dependency in dependencies))
    return results
