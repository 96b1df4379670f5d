"""Reconcile command implementation."""

import asyncio
from datetime import datetime, timedelta, timezone
from typing import Optional

import typer

from ..db import PostgresItemRepository
from .common import configure_logging, console, load_config_or_exit, resolve_owner


async def _fail_stale(repository: PostgresItemRepository, owner_id: str, before: datetime):
    try:
        return await repository.fail_stale(owner_id, before)
    finally:
        await repository.aclose()


def reconcile_command(
    older_than: Optional[int] = typer.Option(
        None,
        "--older-than",
        help="Minutes after which an unresolved item counts as stale",
        min=1,
    ),
    owner: Optional[str] = typer.Option(None, "--owner", "-o", help="Owner id"),
) -> None:
    """Mark items stuck in PENDING or PROCESSING as FAILED."""
    config = load_config_or_exit()
    configure_logging(config, False)
    owner_id = resolve_owner(config, owner)

    if older_than is None:
        older_than = config.config.ingestion.stale_after_minutes
    before = datetime.now(timezone.utc) - timedelta(minutes=older_than)

    repository = PostgresItemRepository(config.get_db_config())
    failed = asyncio.run(_fail_stale(repository, owner_id, before))

    if not failed:
        console.print("[green]Nothing to reconcile.[/green]")
        return

    console.print(f"[yellow]Marked {len(failed)} stale item(s) as failed:[/yellow]")
    for item in failed:
        console.print(f"  - {item.url} [dim]({item.id})[/dim]")
