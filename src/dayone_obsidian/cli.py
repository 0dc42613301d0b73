"""CLI interface for dayone-obsidian."""

from __future__ import annotations

import json
import logging
import shutil
from pathlib import Path
from typing import Annotated, Optional

import typer
from rich.console import Console
from rich.logging import RichHandler
from rich.progress import Progress, SpinnerColumn, TextColumn

from dayone_obsidian.config import load_config, merge_cli_overrides
from dayone_obsidian.errors import ConversionError
from dayone_obsidian.loader import load_journal, open_source
from dayone_obsidian.models import MediaCategory
from dayone_obsidian.writer import VaultWriter

app = typer.Typer(
    name="dayone-obsidian",
    help="Convert Day One journal exports into Obsidian Markdown notes.",
)

console = Console()
err_console = Console(stderr=True)


def _setup_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        handlers=[RichHandler(console=err_console, show_path=False)],
        force=True,
    )


def version_callback(value: bool) -> None:
    """Print version and exit."""
    if value:
        from dayone_obsidian import __version__

        console.print(f"dayone-obsidian {__version__}")
        raise typer.Exit()


@app.callback()
def main(
    version: Annotated[
        bool,
        typer.Option(
            "--version",
            "-V",
            help="Show version and exit.",
            callback=version_callback,
            is_eager=True,
        ),
    ] = False,
) -> None:
    """Day One to Obsidian - convert journal exports to a Markdown vault."""
    pass


def _archive_base(archive_path: Path) -> Path:
    """Archive path without the ``.zip`` suffix ``make_archive`` adds back."""
    return archive_path.with_suffix("") if archive_path.suffix == ".zip" else archive_path


def _archive_output(output_dir: Path, archive_path: Path) -> Path:
    """Pack the vault directory into a ZIP archive."""
    base = _archive_base(archive_path)
    base.parent.mkdir(parents=True, exist_ok=True)
    return Path(shutil.make_archive(str(base), "zip", root_dir=output_dir))


@app.command(name="convert")
def convert_cmd(
    input_path: Annotated[
        Path,
        typer.Argument(help="Day One export ZIP file or extracted directory."),
    ],
    output: Annotated[
        Optional[Path],
        typer.Argument(help="Vault directory to create. Defaults to ./vault/"),
    ] = None,
    deduplicate: Annotated[
        Optional[bool],
        typer.Option(
            "--dedup/--no-dedup",
            help="Skip repeated entries (same uuid and same text).",
        ),
    ] = None,
    entries_dir: Annotated[
        Optional[str],
        typer.Option("--entries-dir", help="Folder name for notes inside the vault."),
    ] = None,
    attachments_dir: Annotated[
        Optional[str],
        typer.Option("--attachments-dir", help="Folder name for media inside the vault."),
    ] = None,
    zip_path: Annotated[
        Optional[Path],
        typer.Option(
            "--zip",
            help="Also pack the converted vault into this ZIP archive.",
        ),
    ] = None,
    config_path: Annotated[
        Optional[Path],
        typer.Option(
            "--config",
            "-c",
            help="Path to a .dayone-obsidian.toml config file.",
        ),
    ] = None,
    verbose: Annotated[
        bool,
        typer.Option("--verbose", "-v", help="Log every file copied and written."),
    ] = False,
) -> None:
    """Convert a Day One export into Obsidian notes and attachments."""
    _setup_logging(verbose)

    config = merge_cli_overrides(
        load_config(config_path),
        output_directory=str(output) if output is not None else None,
        entries_dir=entries_dir,
        attachments_dir=attachments_dir,
        deduplicate=deduplicate,
    )
    output_dir = Path(config.output.directory)

    if zip_path is not None and _archive_base(zip_path).resolve().is_relative_to(
        output_dir.resolve()
    ):
        console.print(
            f"[red]Error:[/red] The --zip archive must be outside the output directory {output_dir}"
        )
        raise typer.Exit(1)

    writer = VaultWriter(
        input_path,
        output_dir,
        config.conversion.deduplicate,
        entries_dirname=config.output.entries_dir,
        attachments_dirname=config.output.attachments_dir,
    )

    try:
        with Progress(
            SpinnerColumn(),
            TextColumn("[progress.description]{task.description}"),
            console=console,
        ) as progress:
            progress.add_task("Converting entries...", total=None)
            result = writer.convert()
    except (ConversionError, OSError) as exc:
        console.print(f"[red]Error:[/red] Conversion failed: {exc}")
        raise typer.Exit(1)

    console.print()
    console.print("[bold green]Conversion complete![/bold green]")
    console.print(f"  Entries converted: {result.converted}")
    console.print(f"  Duplicates skipped: {result.duplicates}")
    if result.invalid:
        console.print(f"  [yellow]Unusable entries skipped: {result.invalid}[/yellow]")
    console.print(
        f"  Attachments: {result.attachments_copied} copied, "
        f"{result.attachments_skipped} already present"
    )
    console.print(f"  Output: {result.output_dir}")

    if zip_path is not None:
        try:
            archive = _archive_output(result.output_dir, zip_path)
        except OSError as exc:
            console.print(f"[red]Error:[/red] Could not create archive: {exc}")
            raise typer.Exit(1)
        console.print(f"  Archive: {archive}")


@app.command(name="inspect")
def inspect_cmd(
    input_path: Annotated[
        Path,
        typer.Argument(help="Day One export ZIP file or extracted directory."),
    ],
) -> None:
    """Print a JSON summary of an export without converting it."""
    _setup_logging(False)

    try:
        with open_source(input_path) as source:
            journal = load_journal(source)
            media = {
                category.value: sum(1 for _ in source.media_files(category))
                for category in MediaCategory
            }
    except (ConversionError, OSError) as exc:
        console.print(f"[red]Error:[/red] {exc}")
        raise typer.Exit(1)

    created = sorted(entry.creation_date for entry in journal.entries)
    summary = {
        "documents": journal.documents,
        "entries": len(journal.entries),
        "invalid_entries": journal.invalid,
        "unique_uuids": len({entry.uuid for entry in journal.entries if entry.uuid}),
        "date_range": {
            "start": created[0] if created else None,
            "end": created[-1] if created else None,
        },
        "media": media,
    }
    console.print(json.dumps(summary, indent=2))


if __name__ == "__main__":
    app()
