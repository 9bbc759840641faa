"""Tech-pack CLI.

Commands:
- init: Initialize database schema
- merge: Run the Factory Specs merge offline on JSON files
- generate: Enrich and save a product's tech pack from its tech files
- classify: Classify a product description into a category
- web serve: Run the FastAPI service
"""

from __future__ import annotations

import asyncio
import json
from pathlib import Path

import typer
from rich.console import Console
from rich.table import Table

from techpack.canonical.dimensions import get_dimension_mapper
from techpack.classification.classifier import get_classifier
from techpack.config import get_config
from techpack.core.logging import configure_logging
from techpack.db.connection import close_db, get_session, init_db
from techpack.generation.service import ProductNotFoundError, generate_tech_pack_for_product
from techpack.merge.assembler import TechPackAssembler

app = typer.Typer(
    name="techpack",
    help="Tech pack service - Factory Specs merge and tech-pack management",
    no_args_is_help=True,
)

web_cli = typer.Typer(help="Web API")
app.add_typer(web_cli, name="web")

console = Console()


@app.callback()
def _setup_logging(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Debug logging"),
):
    configure_logging(level="DEBUG" if verbose else "WARNING", log_format="text")


@app.command()
def init(
    drop: bool = typer.Option(False, "--drop", help="Drop existing tables"),
):
    """Initialize database schema."""
    config = get_config()
    console.print(f"[bold]Initializing database:[/bold] {config.db.url}")
    if drop:
        console.print("[yellow]Dropping existing tables...[/yellow]")

    async def _init():
        try:
            await init_db(drop=drop)
        finally:
            await close_db()

    asyncio.run(_init())
    console.print("[bold green]✓[/bold green] Database initialized")


def _read_json(path: Path):
    try:
        return json.loads(path.read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError) as e:
        console.print(f"[red]Cannot read {path}: {e}[/red]")
        raise typer.Exit(1) from e


@app.command()
def merge(
    tech_pack_file: Path = typer.Argument(..., help="Existing tech pack (JSON object)"),
    tech_files_file: Path = typer.Argument(..., help="Tech files (JSON array)"),
    output: Path | None = typer.Option(None, "--out", "-o", help="Write merged JSON here"),
    synonyms: Path | None = typer.Option(
        None, "--synonyms", help="YAML dimension synonym table"
    ),
):
    """Merge tech-file analysis into a tech pack without touching the database."""
    tech_pack = _read_json(tech_pack_file)
    tech_files = _read_json(tech_files_file)
    if not isinstance(tech_files, list):
        console.print("[red]Tech files must be a JSON array[/red]")
        raise typer.Exit(1)

    assembler = TechPackAssembler(mapper=get_dimension_mapper(synonyms, reload=True))
    result = assembler.assemble(tech_pack if isinstance(tech_pack, dict) else {}, tech_files)

    table = Table(title="Factory Specs merge")
    table.add_column("Section", style="cyan")
    table.add_column("Count", justify="right")
    for key, value in result.summary.items():
        table.add_row(key, ", ".join(value) if isinstance(value, list) else str(value))
    console.print(table)

    merged = json.dumps(result.tech_pack, indent=2, ensure_ascii=False)
    if output:
        output.write_text(merged, encoding="utf-8")
        console.print(f"[green]✓ Merged tech pack written to {output}[/green]")
    else:
        console.print_json(merged)


@app.command()
def generate(
    product_id: str = typer.Argument(..., help="Product ID"),
    revision_id: str | None = typer.Option(None, "--revision", help="Revision ID"),
    revision_number: int | None = typer.Option(None, "--revision-number"),
):
    """Enrich a product's tech pack from its tech files and save it as active."""

    async def _generate():
        try:
            async with get_session() as session:
                return await generate_tech_pack_for_product(
                    session,
                    product_id,
                    revision_id=revision_id,
                    revision_number=revision_number,
                )
        finally:
            await close_db()

    try:
        result = asyncio.run(_generate())
    except (ProductNotFoundError, ValueError) as e:
        console.print(f"[red]{e}[/red]")
        raise typer.Exit(1) from e

    status = "enriched" if result.enriched else "saved without Factory Specs data"
    console.print(
        f"[bold green]✓[/bold green] Tech pack {result.tech_pack_id} {status} "
        f"({result.files_processed} tech files)"
    )


@app.command()
def classify(description: str = typer.Argument(..., help="Product description")):
    """Classify a product description into category and subcategory."""
    result = asyncio.run(get_classifier().classify(description))
    console.print(
        f"[bold]{result.category}[/bold] / {result.subcategory} "
        f"(confidence {result.confidence:.2f})"
    )


@web_cli.command("serve")
def web_serve(
    host: str = typer.Option("0.0.0.0", help="Host to bind"),
    port: int = typer.Option(8001, help="Port to bind"),
    reload: bool = typer.Option(False, help="Enable autoreload (dev only)"),
):
    """Run the FastAPI service."""
    import uvicorn

    typer.echo(f"Starting tech pack API on http://{host}:{port}")
    uvicorn.run("techpack.web.app:app", host=host, port=port, reload=reload, workers=1)


def main():
    """Entry point for CLI."""
    app()


if __name__ == "__main__":
    main()
