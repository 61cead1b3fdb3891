"""
CLI Interface
=============
Command-line interface for the DXF sorter.

Usage:
    dxf-sort <pdf_path> [options]
    python -m dxfsort sort <pdf_path> [options]
    python -m dxfsort fragments <pdf_path> --page N
    python -m dxfsort index [--dxf-dir DIR]
    python -m dxfsort info <pdf_path>
"""

from __future__ import annotations

import os
import sys

import click
from rich.console import Console
from rich.panel import Panel
from rich.progress import (
    BarColumn,
    MofNCompleteColumn,
    Progress,
    SpinnerColumn,
    TextColumn,
    TimeElapsedColumn,
)
from rich.table import Table

from . import __version__
from .engine import SortConfig, SortEngine
from .errors import DxfSortError
from .file_index import DEFAULT_KEY_POLICY, KEY_POLICIES, build_index
from .label_extractor import DEFAULT_LAYOUT, LABEL_LAYOUTS, extract_group_label
from .page_source import PdfPageSource
from .reporter import ProgressReporter

console = Console(highlight=False)


@click.group()
@click.version_option(version=__version__, prog_name="dxf-sort")
def cli():
    """DXF Sort: copy cutting files referenced by drawing PDFs into per-label folders."""
    pass


@click.command(name="sort")
@click.argument("pdf_path", type=click.Path())
@click.option(
    "--dxf-dir",
    default="dxf",
    help="Directory holding the cutting file library",
)
@click.option(
    "--output", "-o",
    default="out",
    help="Output directory for the per-label folders",
)
@click.option(
    "--workers", "-j",
    default=4,
    type=click.IntRange(min=1),
    help="Number of pages processed in parallel",
)
@click.option(
    "--label-layout",
    default=DEFAULT_LAYOUT,
    type=click.Choice(sorted(LABEL_LAYOUTS)),
    help="Title block layout the group label is read from",
)
@click.option(
    "--key-policy",
    default=DEFAULT_KEY_POLICY,
    type=click.Choice(list(KEY_POLICIES)),
    help="How cutting file names are turned into lookup keys",
)
@click.option(
    "--page-start",
    default=None,
    type=int,
    help="Start page (1-indexed)",
)
@click.option(
    "--page-end",
    default=None,
    type=int,
    help="End page (1-indexed, inclusive)",
)
@click.option(
    "--log-level",
    default="WARNING",
    type=click.Choice(["DEBUG", "INFO", "WARNING", "ERROR"]),
    help="Logging level",
)
@click.option(
    "--log-file",
    default=None,
    help="Path to log file",
)
@click.option(
    "--no-summary",
    is_flag=True,
    default=False,
    help="Do not print the summary table",
)
@click.option(
    "--json-output",
    is_flag=True,
    default=False,
    help="Output only the JSON run summary to stdout",
)
def sort(
    pdf_path: str,
    dxf_dir: str,
    output: str,
    workers: int,
    label_layout: str,
    key_policy: str,
    page_start: int,
    page_end: int,
    log_level: str,
    log_file: str,
    no_summary: bool,
    json_output: bool,
):
    """Copy the cutting files referenced by a drawing PDF into out/<label>/."""

    if json_output:
        log_level = "ERROR"

    page_range = None
    if page_start is not None or page_end is not None:
        page_range = (page_start or 1, page_end or 99999)

    config = SortConfig(
        dxf_dir=dxf_dir,
        output_dir=output,
        key_policy=key_policy,
        label_layout=label_layout,
        max_workers=workers,
        page_range=page_range,
        log_level=log_level,
        log_file=log_file,
    )

    try:
        engine = SortEngine(config, reporter=ProgressReporter(console, quiet=json_output))

        if json_output:
            summary = engine.run(pdf_path)
            print(summary.model_dump_json(indent=2))
            return

        console.print()
        console.print(
            Panel.fit(
                f"[bold cyan]DXF Sort v{__version__}[/]\n"
                f"[dim]Drawings: {os.path.basename(pdf_path)}[/]",
                border_style="cyan",
            )
        )
        console.print()

        with Progress(
            SpinnerColumn(),
            TextColumn("[progress.description]{task.description}"),
            BarColumn(),
            MofNCompleteColumn(),
            TimeElapsedColumn(),
            console=console,
            transient=True,
        ) as progress:
            task = progress.add_task("Sorting pages...", total=None)

            def on_page(done: int, total: int):
                progress.update(task, completed=done, total=total)

            summary = engine.run(pdf_path, progress_callback=on_page)

        if not no_summary:
            _display_summary(summary)

    except DxfSortError as e:
        console.print(f"[red]Error:[/] {e}")
        sys.exit(1)
    except Exception as e:
        console.print(f"[red]Unexpected error:[/] {e}")
        if log_level == "DEBUG":
            console.print_exception()
        sys.exit(1)


cli.add_command(sort)


@cli.command()
@click.argument("pdf_path", type=click.Path(exists=True))
@click.option("--page", "-p", default=1, type=click.IntRange(min=1), help="Page (1-indexed)")
@click.option(
    "--label-layout",
    default=DEFAULT_LAYOUT,
    type=click.Choice(sorted(LABEL_LAYOUTS)),
    help="Layout used to compute the label",
)
def fragments(pdf_path: str, page: int, label_layout: str):
    """Dump the positioned text fragments of a page (zone calibration)."""

    try:
        with PdfPageSource(pdf_path) as source:
            content = source.read_page(page)
    except DxfSortError as e:
        console.print(f"[red]Error:[/] {e}")
        sys.exit(1)

    table = Table(title=f"Fragments of page {page}", border_style="cyan")
    table.add_column("Text")
    table.add_column("X", justify="right")
    table.add_column("Y", justify="right")

    for fragment in content.fragments:
        table.add_row(fragment.text, f"{fragment.x:.3f}", f"{fragment.y:.3f}")

    console.print()
    console.print(table)
    console.print(
        f"[bold]Label ({label_layout}):[/] "
        f"{extract_group_label(content.fragments, label_layout)}"
    )
    console.print()


@cli.command()
@click.option("--dxf-dir", default="dxf", help="Directory holding the cutting files")
@click.option(
    "--key-policy",
    default=DEFAULT_KEY_POLICY,
    type=click.Choice(list(KEY_POLICIES)),
    help="How cutting file names are turned into lookup keys",
)
@click.option("--list", "list_entries", is_flag=True, default=False, help="List every entry")
def index(dxf_dir: str, key_policy: str, list_entries: bool):
    """Show the cutting file index built from a directory."""

    try:
        file_index = build_index(dxf_dir, key_policy=key_policy)
    except DxfSortError as e:
        console.print(f"[red]Error:[/] {e}")
        sys.exit(1)

    console.print()
    if list_entries:
        table = Table(title="Cutting File Index", border_style="cyan")
        table.add_column("Key", style="bold")
        table.add_column("File")
        for key in sorted(file_index):
            table.add_row(key, os.path.relpath(file_index[key], file_index.root))
        console.print(table)

    console.print(f"[bold]Indexed:[/] {len(file_index)} files in {file_index.root}")
    console.print()


@cli.command()
@click.argument("pdf_path", type=click.Path(exists=True))
def info(pdf_path: str):
    """Display PDF file information."""

    try:
        with PdfPageSource(pdf_path) as source:
            page_count = source.page_count
            metadata = source.metadata
    except DxfSortError as e:
        console.print(f"[red]Error:[/] {e}")
        sys.exit(1)

    console.print()
    table = Table(title="PDF Information", border_style="cyan")
    table.add_column("Property", style="bold")
    table.add_column("Value")

    table.add_row("File", os.path.basename(pdf_path))
    table.add_row("Pages", str(page_count))
    table.add_row(
        "File Size",
        f"{os.path.getsize(pdf_path) / 1024 / 1024:.2f} MB",
    )

    for key in ["title", "author", "subject", "creator", "producer"]:
        val = metadata.get(key, "")
        if val:
            table.add_row(key.title(), val)

    console.print(table)
    console.print()


# ─── Display Helpers ──────────────────────────────────────────────────────────


def _display_summary(summary):
    """Display run counters in a formatted table."""
    console.print()

    table = Table(title="Sort Summary", border_style="green")
    table.add_column("Metric", style="bold")
    table.add_column("Value", justify="right")
    table.add_column("Status", justify="center")

    table.add_row("Source PDF", summary.source_pdf, "")
    table.add_row("Indexed Cutting Files", str(summary.index_size), "")
    table.add_row(
        "Pages Processed",
        f"{summary.pages_processed} / {summary.total_pages}",
        "[green]✓[/]" if summary.pages_processed > 0 else "[yellow]⚠[/]",
    )
    table.add_row("Pages Skipped", str(summary.pages_skipped), "")
    table.add_row("Labels", str(len(summary.labels)), "")
    table.add_row("Files Copied", str(summary.files_copied), "")
    table.add_row("  of which Remapped", str(summary.files_remapped), "")
    table.add_row("Already Present", str(summary.files_present), "")
    table.add_row(
        "Identifiers Not Found",
        str(summary.identifiers_not_found),
        "[green]✓[/]" if summary.identifiers_not_found == 0 else "[red]✗[/]",
    )
    console.print(table)
    console.print()

    if summary.skip_breakdown:
        skip_table = Table(title="Skipped Pages", border_style="yellow")
        skip_table.add_column("Reason", style="bold")
        skip_table.add_column("Count", justify="right")

        for reason, count in sorted(summary.skip_breakdown.items()):
            skip_table.add_row(reason, str(count))

        console.print(skip_table)
        console.print()

    console.print(f"[dim]Completed in {summary.elapsed_seconds:.2f}s[/]")
    console.print()


# ─── Entry point (for python -m dxfsort.cli) ──────────────────────────────────


if __name__ == "__main__":
    cli()
