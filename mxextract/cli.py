"""
Command-line interface for mxextract.

Runs the extraction engine over a model snapshot and writes the resulting
document, or lists the variant tables the engine dispatches on.
"""

import asyncio
from pathlib import Path
from typing import Optional

import typer
from rich.console import Console
from rich.progress import Progress, SpinnerColumn, TextColumn
from rich.table import Table

from mxextract.classification import FAMILIES
from mxextract.config import get_settings
from mxextract.extraction import ACTIVITY_NODES, ProjectExtractor
from mxextract.persist import persist_document
from mxextract.snapshot import load_snapshot
from mxextract.utils.errors import MxExtractException
from mxextract.utils.logging import setup_logging

app = typer.Typer(
    name="mxextract",
    help="Extract application models into a stable JSON document",
    add_completion=False,
)
console = Console()


def _all_families():
    return {**FAMILIES, "activity-node": ACTIVITY_NODES}


@app.callback()
def main():
    """Extract application models into a stable JSON document."""
    try:
        get_settings()
    except MxExtractException as e:
        console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(1)


@app.command()
def extract(
    snapshot: Path = typer.Argument(..., help="Path to a model snapshot JSON file"),
    output: Optional[Path] = typer.Option(
        None,
        "--output",
        "-o",
        help="Output file (defaults to MXEXTRACT_OUTPUT_FILE or app-logic.json)",
    ),
    project_name: Optional[str] = typer.Option(
        None,
        "--project-name",
        "-p",
        help="Project name recorded in the document",
    ),
    log_level: Optional[str] = typer.Option(None, "--log-level", help="Logging level"),
):
    """Extract a model snapshot into an application logic document."""

    async def _extract():
        try:
            if log_level:
                setup_logging(log_level=log_level.upper())

            model = load_snapshot(snapshot)
            extractor = ProjectExtractor()

            with Progress(
                SpinnerColumn(),
                TextColumn("[progress.description]{task.description}"),
                console=console,
            ) as progress:
                progress.add_task("Extracting model...", total=None)
                document = await extractor.extract_project(model, project_name=project_name)

            target = persist_document(document, output or get_settings().output_file)

        except MxExtractException as e:
            console.print(f"[red]Error:[/red] {e}")
            raise typer.Exit(1)

        table = Table(title=f"Extraction of {document.project_name or snapshot.name}")
        table.add_column("Module", style="cyan")
        table.add_column("Entities", justify="right")
        table.add_column("Associations", justify="right")
        table.add_column("Microflows", justify="right")
        for module in document.modules:
            table.add_row(
                module.name,
                str(len(module.domain_model.entities)),
                str(len(module.domain_model.associations)),
                str(len(module.microflows)),
            )
        console.print(table)

        if extractor.warnings:
            console.print(f"\n[yellow]Warnings ({len(extractor.warnings)}):[/yellow]")
            for warning in extractor.warnings:
                where = f"{warning.module}: " if warning.module else ""
                console.print(
                    f"  - {where}{warning.unit_kind} '{warning.unit_name}': {warning.message}"
                )

        console.print(f"\n[green]✓[/green] Extraction complete. Data saved to {target}")

    asyncio.run(_extract())


@app.command()
def kinds(
    family: Optional[str] = typer.Argument(
        None,
        help="Family to show (all families if not specified)",
    ),
):
    """List the variant tables in evaluation order."""
    families = _all_families()
    if family is not None and family not in families:
        console.print(
            f"[red]Error:[/red] Unknown family '{family}'. "
            f"Choose from: {', '.join(sorted(families))}"
        )
        raise typer.Exit(1)

    selected = {family: families[family]} if family else families
    for name, variant_table in selected.items():
        table = Table(title=f"{name} ({len(variant_table)} kinds)")
        table.add_column("#", justify="right", style="dim")
        table.add_column("Kind", style="cyan")
        table.add_column("Structure types")
        for position, (kind, structure_types) in enumerate(variant_table.describe(), 1):
            table.add_row(str(position), kind, ", ".join(structure_types))
        console.print(table)


if __name__ == "__main__":
    app()
