"""Main CLI application for vlens."""

import asyncio
import json
import logging
from pathlib import Path
from typing import Annotated, Any

import typer
from rich.console import Console
from rich.logging import RichHandler
from rich.table import Table

from vlens import __version__
from vlens.clients.factory import UnsupportedProviderError, create_package_client, list_providers
from vlens.config.parser import ConfigError, find_config_file, load_config
from vlens.config.schemas import VlensConfig
from vlens.core.errors import PackageClientError
from vlens.core.models import PackageDependency, PackageResponse
from vlens.core.requests import PackageClientContext, execute_dependency_requests
from vlens.core.suggestions import SuggestionFlags

app = typer.Typer(
    name="vlens",
    help="Suggest dependency version updates from package registries",
    add_completion=False,
    no_args_is_help=True,
)

console = Console()
error_console = Console(stderr=True)

logger = logging.getLogger("vlens")

SELECTION_PROVIDERS = ("composer", "dub")


def setup_logging(verbosity: int) -> None:
    """Configure logging based on verbosity level.

    Args:
        verbosity: 0=WARNING, 1=INFO, 2+=DEBUG
    """
    if verbosity == 0:
        level = logging.WARNING
    elif verbosity == 1:
        level = logging.INFO
    else:
        level = logging.DEBUG

    logger.setLevel(level)

    if not logger.handlers:
        handler = RichHandler(
            console=error_console,
            show_time=verbosity >= 2,
            show_path=verbosity >= 3,
            rich_tracebacks=True,
        )
        handler.setLevel(level)
        logger.addHandler(handler)
    else:
        for h in logger.handlers:
            h.setLevel(level)


def print_error(message: str) -> None:
    """Print an error message to stderr."""
    error_console.print(f"[red]Error:[/red] {message}")


def parse_dependency(value: str) -> PackageDependency:
    """Split ``name@spec`` into a dependency.

    The search for the separator starts after the first character so scoped
    npm names (``@types/node@^18``) keep their leading ``@``. A missing spec
    is an empty version.
    """
    index = value.find("@", 1)
    if index == -1:
        return PackageDependency(name=value, version="")
    return PackageDependency(name=value[:index], version=value[index + 1 :])


def get_config(config_path: Path | None, start: Path) -> VlensConfig:
    """Load the explicit config file, or the nearest vlens.yaml."""
    try:
        return load_config(config_path or find_config_file(start))
    except ConfigError as e:
        print_error(str(e))
        raise typer.Exit(1) from e


async def _client_data(provider: str, config: VlensConfig) -> Any:
    if provider != "dotnet":
        return None

    from vlens.clients.transport import HttpxJsonTransport
    from vlens.providers.dotnet import NuGetResourceClient

    resource_client = NuGetResourceClient(config.dotnet, HttpxJsonTransport(config.dotnet.http))
    return await resource_client.fetch_client_data()


async def _suggest(
    provider: str,
    config: VlensConfig,
    package_path: str,
    dependencies: list[PackageDependency],
    include_prereleases: bool,
    fail_fast: bool,
) -> list[PackageResponse]:
    client = create_package_client(provider, config)
    context = PackageClientContext(
        include_prereleases=include_prereleases,
        client_data=await _client_data(provider, config),
        fail_fast=fail_fast,
    )
    return await execute_dependency_requests(package_path, client, dependencies, context)


def _flag_label(flags: SuggestionFlags) -> str:
    return ",".join(flag.name.lower() for flag in SuggestionFlags if flag in flags and flag.name)


def print_responses(responses: list[PackageResponse]) -> None:
    """Render responses as a table, one row per suggestion."""
    table = Table(title="Suggestions")
    table.add_column("Package", style="cyan")
    table.add_column("Requested")
    table.add_column("Suggestion", style="green")
    table.add_column("Version")
    table.add_column("Flags", style="dim")

    for response in responses:
        package = response.request.package
        if response.rejected:
            table.add_row(package.name, package.version, "[red]error[/red]", str(response.error), "")
            continue

        document = response.document
        assert document is not None
        if not document.suggestions:
            table.add_row(package.name, package.version, "[yellow]not found[/yellow]", "", "")
            continue

        for i, suggestion in enumerate(document.suggestions):
            table.add_row(
                package.name if i == 0 else "",
                package.version if i == 0 else "",
                suggestion.name,
                suggestion.version,
                _flag_label(suggestion.flags),
            )

    console.print(table)


@app.callback()
def callback(
    verbose: Annotated[
        int,
        typer.Option(
            "--verbose",
            "-v",
            count=True,
            help="Increase verbosity (-v info, -vv debug)",
        ),
    ] = 0,
) -> None:
    """vlens - dependency version suggestions for npm, composer, dub and NuGet."""
    setup_logging(verbose)


@app.command()
def version() -> None:
    """Show the vlens version."""
    console.print(f"vlens {__version__}")


@app.command()
def providers() -> None:
    """List the registered providers."""
    for name in list_providers():
        console.print(name)


@app.command()
def suggest(
    provider: Annotated[
        str,
        typer.Argument(help="Provider to query (npm, composer, dub, dotnet)"),
    ],
    dependencies: Annotated[
        list[str],
        typer.Argument(help="Dependencies as name@spec"),
    ],
    path: Annotated[
        Path | None,
        typer.Option(
            "--path",
            "-p",
            help="Directory of the manifest (defaults to current directory)",
        ),
    ] = None,
    config_path: Annotated[
        Path | None,
        typer.Option(
            "--config",
            "-c",
            help="Config file (defaults to the nearest vlens.yaml)",
        ),
    ] = None,
    prereleases: Annotated[
        bool,
        typer.Option(
            "--prereleases",
            help="Include prerelease suggestions",
        ),
    ] = False,
    keep_going: Annotated[
        bool,
        typer.Option(
            "--keep-going",
            "-k",
            help="Report failing dependencies instead of aborting the batch",
        ),
    ] = False,
    as_json: Annotated[
        bool,
        typer.Option(
            "--json",
            help="Print responses as JSON",
        ),
    ] = False,
) -> None:
    """Suggest versions for one or more dependencies."""
    package_path = (path or Path.cwd()).resolve()
    config = get_config(config_path, package_path)

    parsed = [parse_dependency(d) for d in dependencies]
    include_prereleases = prereleases or config.include_prereleases
    fail_fast = config.fail_fast and not keep_going

    try:
        responses = asyncio.run(
            _suggest(provider, config, str(package_path), parsed, include_prereleases, fail_fast)
        )
    except UnsupportedProviderError as e:
        print_error(str(e))
        raise typer.Exit(1) from e
    except PackageClientError as e:
        print_error(str(e))
        raise typer.Exit(1) from e

    if as_json:
        console.print_json(json.dumps([r.to_dict() for r in responses]))
    else:
        print_responses(responses)

    if any(r.rejected for r in responses):
        raise typer.Exit(1)


@app.command()
def selections(
    file: Annotated[
        Path,
        typer.Argument(help="composer.lock or dub.selections.json"),
    ],
    provider: Annotated[
        str,
        typer.Option(
            "--provider",
            help="Format of the file (composer or dub)",
        ),
    ],
) -> None:
    """Print the locked versions recorded in a selections file."""
    if provider not in SELECTION_PROVIDERS:
        print_error(f"Unsupported selections provider: {provider}")
        raise typer.Exit(1)

    try:
        if provider == "dub":
            from vlens.providers.dub import read_dub_selections

            locked = {
                name: entry if isinstance(entry, str) else entry.get("version", "")
                for name, entry in (read_dub_selections(file).get("versions") or {}).items()
            }
        else:
            from vlens.providers.composer import read_composer_selections

            locked = read_composer_selections(file)
    except (ConfigError, PackageClientError) as e:
        print_error(str(e))
        raise typer.Exit(1) from e

    if not locked:
        console.print("No locked packages")
        return

    table = Table(title=f"Locked versions ({file.name})")
    table.add_column("Package", style="cyan")
    table.add_column("Version", style="green")
    for name, locked_version in sorted(locked.items()):
        table.add_row(name, locked_version)
    console.print(table)


if __name__ == "__main__":
    app()
