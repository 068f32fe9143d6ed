"""
CLI Main - Typer-based command-line interface.

Usage:
    teamsearch search "seo agency for saas"
    teamsearch index
    teamsearch keywords
    teamsearch serve
"""

from __future__ import annotations

import asyncio
import logging

import typer
from rich.console import Console
from rich.panel import Panel
from rich.progress import Progress, SpinnerColumn, TextColumn
from rich.table import Table

from teamsearch.config import IndexingError, TeamSearchError, get_settings

app = typer.Typer(
    name="teamsearch",
    help="TeamSearch - Hybrid search over the team catalog",
    add_completion=False,
)
console = Console()


@app.callback()
def configure(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Debug logging"),
) -> None:
    """Configure logging for every command."""
    level = logging.DEBUG if verbose else get_settings().log_level.upper()
    logging.basicConfig(level=level, format="%(asctime)s %(levelname)s %(name)s: %(message)s")


@app.command()
def search(
    query: str = typer.Argument(..., help="Search query"),
    limit: int = typer.Option(10, "--limit", "-n", min=1, max=100, help="Number of results"),
    explain: bool = typer.Option(False, "--explain", "-e", help="Show score adjustments"),
) -> None:
    """Search teams with hybrid ranking."""
    asyncio.run(_search_async(query, limit, explain))


async def _search_async(query: str, limit: int, explain: bool) -> None:
    """Async search implementation."""
    from teamsearch.domains.search import RankingOptions, TeamSearchEngine
    from teamsearch.interfaces.api.deps import build_embedder, build_vector_store

    settings = get_settings()
    if not settings.vectors_enabled:
        console.print(
            Panel(
                "Vector search needs JINA_API_KEY (and QDRANT_URL / QDRANT_API_KEY\n"
                "when VECTOR_BACKEND=qdrant).",
                title="Setup Required",
                style="yellow",
            )
        )
        raise typer.Exit(1)

    embedder = build_embedder(settings)
    store = build_vector_store(settings)
    engine = TeamSearchEngine(embedder, store, RankingOptions.from_settings(settings))

    try:
        with Progress(
            SpinnerColumn(),
            TextColumn("[progress.description]{task.description}"),
            console=console,
            transient=True,
        ) as progress:
            progress.add_task("Searching...", total=None)
            ranked = (await engine.rank(query, pool_size=limit))[:limit]
    finally:
        if embedder is not None:
            await embedder.close()
        if store is not None:
            await store.close()

    if not ranked:
        console.print(f"[yellow]No results for:[/yellow] {query}")
        return

    table = Table(title=f"Results for: {query}")
    table.add_column("#", style="dim", justify="right")
    table.add_column("Team", style="cyan")
    table.add_column("Type")
    table.add_column("Score", style="green", justify="right")
    table.add_column("Semantic", justify="right")
    if explain:
        table.add_column("Adjustments", style="dim")

    for position, item in enumerate(ranked, 1):
        row = [
            str(position),
            item.record.display_name,
            item.record.type,
            f"{item.fused_score:.3f}",
            f"{item.semantic_score:.3f}",
        ]
        if explain:
            row.append(", ".join(f"{name} {amount:+.2f}" for name, amount in item.signals.items()))
        table.add_row(*row)

    console.print(table)


@app.command()
def index(
    strict: bool = typer.Option(True, "--strict/--lenient", help="Exit non-zero if any record fails"),
) -> None:
    """Embed the catalog and upsert it into the vector store."""
    asyncio.run(_index_async(strict))


async def _index_async(strict: bool) -> None:
    """Async indexing implementation."""
    from teamsearch.domains.search import CatalogIndexer
    from teamsearch.interfaces.api.deps import build_catalog_source, build_embedder, build_vector_store

    settings = get_settings()
    source = build_catalog_source(settings)
    embedder = build_embedder(settings)
    store = build_vector_store(settings)
    indexer = CatalogIndexer(
        source,
        embedder,
        store,
        batch_size=settings.embedding_batch_size,
        concurrency=settings.index_concurrency,
    )

    try:
        with Progress(
            SpinnerColumn(),
            TextColumn("[progress.description]{task.description}"),
            console=console,
            transient=True,
        ) as progress:
            progress.add_task("Indexing catalog...", total=None)
            report = await indexer.run(strict=strict)
    except IndexingError as e:
        console.print(f"[red]Indexing incomplete:[/red] {e.message}")
        for identity in e.details.get("failed", [])[:20]:
            console.print(f"  [dim]{identity}[/dim]")
        raise typer.Exit(1)
    except TeamSearchError as e:
        console.print(f"[red]Error:[/red] [{e.code.value}] {e.message}")
        raise typer.Exit(1)
    finally:
        await source.close()
        if embedder is not None:
            await embedder.close()
        if store is not None:
            await store.close()

    table = Table(title="Indexing Summary")
    table.add_column("Metric", style="cyan")
    table.add_column("Value", style="green")
    table.add_row("Records", str(report.total))
    table.add_row("Upserted", str(report.upserted))
    table.add_row("Failed", str(len(report.failed)))
    table.add_row("Batches", str(report.batches))
    table.add_row("Duration", f"{report.duration_seconds:.1f}s")
    console.print(table)


@app.command()
def keywords() -> None:
    """List distinct Type and Type2 tags from the catalog."""
    asyncio.run(_keywords_async())


async def _keywords_async() -> None:
    from teamsearch.domains.catalog import collect_keywords
    from teamsearch.interfaces.api.deps import build_catalog_source

    source = build_catalog_source(get_settings())
    try:
        found = collect_keywords(await source.list_records())
    except TeamSearchError as e:
        console.print(f"[red]Error:[/red] [{e.code.value}] {e.message}")
        raise typer.Exit(1)
    finally:
        await source.close()

    console.print(Panel(", ".join(found["type"]) or "-", title="Type"))
    console.print(Panel(", ".join(found["type2"]) or "-", title="Type2"))


@app.command()
def serve(
    host: str | None = typer.Option(None, "--host", "-h", help="Host to bind (default from settings)"),
    port: int | None = typer.Option(None, "--port", "-p", help="Port to bind (default from settings)"),
    reload: bool = typer.Option(False, "--reload", "-r", help="Enable auto-reload"),
) -> None:
    """Start the API server."""
    import uvicorn

    settings = get_settings()
    host = host or settings.api_host
    port = port or settings.api_port

    console.print("\n[green]Starting TeamSearch API server[/green]")
    console.print(f"[dim]http://{host}:{port}[/dim]\n")

    uvicorn.run(
        "teamsearch.interfaces.api:create_app",
        host=host,
        port=port,
        reload=reload,
        factory=True,
    )


@app.command()
def version() -> None:
    """Show version information."""
    from teamsearch import __version__

    console.print(f"TeamSearch v{__version__}")


def main() -> None:
    """CLI entry point."""
    app()


if __name__ == "__main__":
    main()
