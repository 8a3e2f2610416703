"""Main CLI implementation using Typer."""

import asyncio
from pathlib import Path
from typing import Any, Callable, Coroutine, Optional

import typer
from rich.console import Console
from rich.table import Table

from rootfetch.config import DefinitionLoader
from rootfetch.errors import RootfetchError
from rootfetch.pipeline import acquire
from rootfetch.sources import SourceRegistry
from rootfetch.utils.logging import setup_logging


# Create Typer app
app = typer.Typer(
    name="rootfetch",
    help="Acquire, verify and unpack distribution rootfs images",
    add_completion=False,
)

# Console for rich output
console = Console()


def _run_cli_command(handler: Callable[..., Coroutine[Any, Any, Any]], **kwargs: Any) -> Any:
    """Helper to run an async command with error handling."""
    try:
        return asyncio.run(handler(**kwargs))
    except RootfetchError as e:
        console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(1) from e


async def _pull(
    definition: Path,
    target: Path,
    settings_file: Optional[Path],
    cache_dir: Optional[Path],
    log_level: Optional[str],
    skip_verification: bool,
) -> None:
    loader = DefinitionLoader()
    overrides = {}
    if cache_dir is not None:
        overrides["cache_dir"] = str(cache_dir)
    if log_level is not None:
        overrides["log_level"] = log_level
    settings = await loader.load_settings(settings_file, overrides)
    setup_logging(settings.log_level)

    image_definition = await loader.load_definition(definition)
    if skip_verification:
        source = image_definition.source.copy(update={"skip_verification": True})
        image_definition = image_definition.copy(update={"source": source})

    await acquire(image_definition, target, settings)


async def _validate(definition: Path) -> None:
    loader = DefinitionLoader()
    image_definition = await loader.load_definition(definition)
    SourceRegistry().get_source_class(image_definition.source.downloader)

    table = Table(title=str(definition))
    table.add_column("Field")
    table.add_column("Value")
    table.add_row("distribution", image_definition.image.distribution)
    table.add_row("release", image_definition.image.release)
    table.add_row("architecture", image_definition.image.architecture_mapped)
    table.add_row("downloader", image_definition.source.downloader)
    table.add_row("url", image_definition.source.url)
    table.add_row("keys", ", ".join(image_definition.source.keys) or "-")
    table.add_row("skip_verification", str(image_definition.source.skip_verification))
    console.print(table)
    console.print("[green]Definition is valid[/green]")


@app.command("pull")
def pull_command(
    definition: Path = typer.Argument(..., help="Image definition YAML file"),
    target: Path = typer.Argument(..., help="Directory to unpack the rootfs into"),
    settings_file: Optional[Path] = typer.Option(
        None, "--settings", "-c", help="Settings YAML file"
    ),
    cache_dir: Optional[Path] = typer.Option(
        None, "--cache-dir", help="Download cache directory"
    ),
    log_level: Optional[str] = typer.Option(
        None, "--log-level", "-l", help="Log level"
    ),
    skip_verification: bool = typer.Option(
        False, "--skip-verification", help="Do not verify downloads"
    ),
):
    """Download, verify and unpack a rootfs."""
    _run_cli_command(
        _pull,
        definition=definition,
        target=target,
        settings_file=settings_file,
        cache_dir=cache_dir,
        log_level=log_level,
        skip_verification=skip_verification,
    )
    console.print(f"[green]Rootfs unpacked to {target}[/green]")


@app.command("validate")
def validate_command(
    definition: Path = typer.Argument(..., help="Image definition YAML file"),
):
    """Validate an image definition."""
    _run_cli_command(_validate, definition=definition)


@app.command("sources")
def sources_command():
    """List available source downloaders."""
    table = Table(title="Sources")
    table.add_column("Downloader")
    for name in SourceRegistry().list_sources():
        table.add_row(name)
    console.print(table)


def main():
    """Main entry point for CLI."""
    app()
