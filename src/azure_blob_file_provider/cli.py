"""CLI for azure-blob-file-provider."""

import logging
import shutil
import sys
from pathlib import Path
from typing import Optional

import typer
from pydantic import ValidationError
from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape
from rich.table import Table

from .errors import ProviderError
from .file_info import LocalFileInfo
from .options import BlobProviderOptions
from .provider import AzureBlobFileProvider
from .utils import format_timestamp, humanize_size


app = typer.Typer(help="""\
Look up files in an Azure blob container through a local disk cache.
Options come from --config (YAML) or AZURE_BLOB_FP_* environment variables.""")

console = Console()
err_console = Console(stderr=True)


class _State:
    config: Optional[Path] = None


state = _State()


@app.callback()
def main_callback(
    config: Optional[Path] = typer.Option(None, "--config", "-c", help="YAML options file"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Show debug logging"),
):
    """Global options."""
    state.config = config
    if verbose:
        logging.basicConfig(
            level=logging.DEBUG,
            format="%(message)s",
            handlers=[RichHandler(console=err_console, show_path=False)],
        )


def require_provider() -> AzureBlobFileProvider:
    """Build the provider from --config or the environment, or exit."""
    try:
        if state.config is not None:
            options = BlobProviderOptions.load(state.config)
        else:
            options = BlobProviderOptions.from_env()
        return AzureBlobFileProvider(options)
    except FileNotFoundError as e:
        err_console.print(f"[red]✗[/red] {escape(str(e))}")
        raise typer.Exit(1)
    except (ProviderError, ValidationError) as e:
        err_console.print("[red]CONFIGURATION ERROR[/red]")
        err_console.print(f"   {escape(str(e))}")
        raise typer.Exit(1)


@app.command()
def info(
    path: str = typer.Argument(..., help="File path within the container"),
    ignore_cache: bool = typer.Option(False, "--ignore-cache", help="Bypass the local cache trust window"),
):
    """Show metadata for one file."""
    provider = require_provider()
    file_info = provider.get_file_info(path, ignore_cache=ignore_cache)

    if not file_info.exists:
        err_console.print(f"[red]✗[/red] Not found: {escape(path)}")
        raise typer.Exit(1)

    source = "local cache" if isinstance(file_info, LocalFileInfo) else "remote"
    console.print(f"[bold]{escape(file_info.name)}[/bold]")
    console.print(f"Size:          {humanize_size(file_info.length)} ({file_info.length} bytes)")
    console.print(f"Last modified: {format_timestamp(file_info.last_modified)}")
    console.print(f"Source:        [cyan]{source}[/cyan]")


@app.command()
def ls(
    prefix: str = typer.Argument("", help="Name prefix to list"),
):
    """List files whose name starts with PREFIX."""
    provider = require_provider()
    contents = provider.get_directory_contents(prefix)

    if not contents.exists:
        console.print(f"[dim]No files under '{escape(prefix)}'[/dim]")
        raise typer.Exit(1)

    table = Table(show_header=True, header_style="bold")
    table.add_column("Name", style="cyan")
    table.add_column("Size", justify="right")
    table.add_column("Last modified")
    for file_info in contents:
        table.add_row(
            escape(file_info.name),
            humanize_size(file_info.length),
            format_timestamp(file_info.last_modified),
        )
    console.print(table)


@app.command()
def get(
    path: str = typer.Argument(..., help="File path within the container"),
    output: Optional[Path] = typer.Option(None, "--output", "-o", help="Write to FILE instead of stdout"),
    ignore_cache: bool = typer.Option(False, "--ignore-cache", help="Bypass the local cache trust window"),
):
    """Write a file's content to stdout or --output."""
    provider = require_provider()
    file_info = provider.get_file_info(path, ignore_cache=ignore_cache)

    if not file_info.exists:
        err_console.print(f"[red]✗[/red] Not found: {escape(path)}")
        raise typer.Exit(1)

    with file_info.create_read_stream() as src:
        if output is not None:
            output.parent.mkdir(parents=True, exist_ok=True)
            with open(output, "wb") as dst:
                shutil.copyfileobj(src, dst)
            err_console.print(f"[green]✓[/green] Wrote {humanize_size(file_info.length)} to {escape(str(output))}")
        else:
            shutil.copyfileobj(src, sys.stdout.buffer)
            sys.stdout.buffer.flush()


def main():
    """Entry point for CLI."""
    app()


if __name__ == "__main__":
    main()
