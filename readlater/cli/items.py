"""Saved item browsing commands."""

import asyncio
from typing import Optional

import typer
from rich.panel import Panel
from rich.table import Table

from ..db import PostgresItemRepository
from ..exceptions import ItemNotFoundError
from ..models import ItemStatus
from .common import configure_logging, console, load_config_or_exit, resolve_owner

items_app = typer.Typer(help="Browse saved items")

STATUS_STYLES = {
    ItemStatus.PENDING: "yellow",
    ItemStatus.PROCESSING: "cyan",
    ItemStatus.COMPLETED: "green",
    ItemStatus.FAILED: "red",
}


async def _list(repository: PostgresItemRepository, owner_id, status, query):
    try:
        return await repository.list_items(owner_id, status=status, query=query)
    finally:
        await repository.aclose()


async def _get(repository: PostgresItemRepository, item_id, owner_id):
    try:
        return await repository.get(item_id, owner_id)
    finally:
        await repository.aclose()


@items_app.command("list")
def items_list(
    status: Optional[ItemStatus] = typer.Option(None, "--status", "-s", help="Filter by status"),
    query: Optional[str] = typer.Option(None, "--query", "-q", help="Title or tag"),
    owner: Optional[str] = typer.Option(None, "--owner", "-o", help="Owner id"),
) -> None:
    """List saved items, newest first."""
    config = load_config_or_exit()
    configure_logging(config, False)
    owner_id = resolve_owner(config, owner)

    repository = PostgresItemRepository(config.get_db_config())
    items = asyncio.run(_list(repository, owner_id, status, query))

    if not items:
        console.print("[yellow]No items found.[/yellow]")
        return

    table = Table(title="Saved Items")
    table.add_column("ID", style="dim")
    table.add_column("Status")
    table.add_column("Title", style="cyan")
    table.add_column("URL", style="blue")
    table.add_column("Saved", style="magenta")

    for item in items:
        style = STATUS_STYLES[item.status]
        table.add_row(
            item.id[:8],
            f"[{style}]{item.status.value.lower()}[/{style}]",
            item.title or "-",
            item.url,
            item.created_at.strftime("%Y-%m-%d %H:%M"),
        )

    console.print(table)


@items_app.command("show")
def items_show(
    item_id: str = typer.Argument(..., help="Item id"),
    owner: Optional[str] = typer.Option(None, "--owner", "-o", help="Owner id"),
) -> None:
    """Show one saved item."""
    config = load_config_or_exit()
    configure_logging(config, False)
    owner_id = resolve_owner(config, owner)

    repository = PostgresItemRepository(config.get_db_config())
    try:
        item = asyncio.run(_get(repository, item_id, owner_id))
    except ItemNotFoundError as e:
        console.print(f"[red]{e}[/red]")
        raise typer.Exit(1)

    published = item.published_at.strftime("%Y-%m-%d") if item.published_at else "-"
    header = (
        f"[bold]{item.title or item.url}[/bold]\n"
        f"URL: {item.url}\n"
        f"Status: {item.status.value.lower()}\n"
        f"Author: {item.author or '-'}  Published: {published}\n"
        f"Image: {item.original_image or '-'}"
    )
    console.print(Panel(header, style=STATUS_STYLES[item.status]))
    if item.content:
        console.print(item.content)
