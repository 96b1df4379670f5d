"""Import commands: bulk batches with live progress, and single URLs."""

import asyncio
from pathlib import Path
from typing import List, Optional

import typer
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

from ..exceptions import InvalidBatchError
from ..pipeline import (
    BatchOrchestrator,
    BatchSummary,
    ItemSucceeded,
    ProgressChannel,
    ProgressSnapshot,
    SnapshotStatus,
)
from .common import configure_logging, console, load_config_or_exit, resolve_owner


def read_url_file(path: Path) -> List[str]:
    """Read one URL per line, skipping blanks and # comments."""
    urls = []
    for line in path.read_text(encoding="utf-8").splitlines():
        line = line.strip()
        if line and not line.startswith("#"):
            urls.append(line)
    return urls


async def consume_batch(
    channel: ProgressChannel,
    orchestrator: BatchOrchestrator,
) -> List[ProgressSnapshot]:
    """Render live progress while draining the channel."""
    snapshots: List[ProgressSnapshot] = []
    try:
        with Progress(
            SpinnerColumn(),
            TextColumn("[progress.description]{task.description}"),
            BarColumn(),
            MofNCompleteColumn(),
            TimeElapsedColumn(),
            console=console,
        ) as progress:
            task = progress.add_task("Importing", total=channel.total)
            async with channel:
                async for snapshot in channel:
                    snapshots.append(snapshot)
                    mark = "✓" if snapshot.status == SnapshotStatus.SUCCESS else "✗"
                    progress.update(
                        task,
                        completed=snapshot.completed,
                        description=f"{mark} {snapshot.url}",
                    )
    finally:
        await orchestrator.aclose()
    return snapshots


def print_batch_summary(summary: BatchSummary, snapshots: List[ProgressSnapshot]) -> None:
    """Print summary of batch results."""
    style = "green" if summary.all_succeeded else "yellow"
    console.print(Panel(summary.message(), style=style))

    failed = [s for s in snapshots if s.status == SnapshotStatus.FAILED]
    if failed:
        table = Table(title="Failed imports")
        table.add_column("#", style="dim")
        table.add_column("URL", style="blue")
        table.add_column("Error", style="red")
        for snapshot in failed:
            table.add_row(str(snapshot.completed), snapshot.url, snapshot.error or "Unknown error")
        console.print(table)


def import_command(
    urls: Optional[List[str]] = typer.Argument(None, help="URLs to import"),
    url_file: Optional[Path] = typer.Option(
        None,
        "--file",
        "-f",
        help="File with one URL per line",
        exists=True,
        dir_okay=False,
    ),
    owner: Optional[str] = typer.Option(None, "--owner", "-o", help="Owner id"),
    concurrency: Optional[int] = typer.Option(
        None,
        "--concurrency",
        "-j",
        help="Items processed at once (output order is unchanged)",
        min=1,
        max=16,
    ),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Debug logging"),
) -> None:
    """Import a batch of URLs with a live progress bar."""
    config = load_config_or_exit()
    configure_logging(config, verbose)
    owner_id = resolve_owner(config, owner)

    batch = list(urls or [])
    if url_file is not None:
        batch.extend(read_url_file(url_file))

    orchestrator = BatchOrchestrator.from_config(config, concurrency=concurrency)
    try:
        channel = orchestrator.run_batch(batch, owner_id)
    except InvalidBatchError as e:
        asyncio.run(orchestrator.aclose())
        console.print(f"[red]❌ {e}[/red]")
        raise typer.Exit(1)

    try:
        snapshots = asyncio.run(consume_batch(channel, orchestrator))
    except KeyboardInterrupt:
        console.print("\n[yellow]Import interrupted by user[/yellow]")
        raise typer.Exit(130)

    summary = BatchSummary.from_snapshots(snapshots)
    print_batch_summary(summary, snapshots)

    if not summary.all_succeeded:
        raise typer.Exit(1)


async def _import_one(orchestrator: BatchOrchestrator, url: str, owner_id: str):
    try:
        return await orchestrator.import_url(url, owner_id)
    finally:
        await orchestrator.aclose()


def add_command(
    url: str = typer.Argument(..., help="URL to import"),
    owner: Optional[str] = typer.Option(None, "--owner", "-o", help="Owner id"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Debug logging"),
) -> None:
    """Import a single URL and show the stored item."""
    config = load_config_or_exit()
    configure_logging(config, verbose)
    owner_id = resolve_owner(config, owner)

    orchestrator = BatchOrchestrator.from_config(config)
    try:
        with console.status(f"Importing {url}..."):
            outcome = asyncio.run(_import_one(orchestrator, url, owner_id))
    except InvalidBatchError as e:
        console.print(f"[red]❌ {e}[/red]")
        raise typer.Exit(1)
    except Exception as e:
        console.print(f"[red]❌ Import failed: {e}[/red]")
        raise typer.Exit(1)

    if isinstance(outcome, ItemSucceeded):
        item = outcome.item
        console.print(f"[green]✅ Imported: {item.title or item.url}[/green]")
        console.print(f"[dim]id: {item.id}[/dim]")
        return

    console.print(f"[red]❌ Import failed ({outcome.stage.value}): {outcome.error}[/red]")
    if outcome.item_id:
        console.print(f"[dim]id: {outcome.item_id}[/dim]")
    raise typer.Exit(1)
