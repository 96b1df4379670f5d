"""Init command implementation."""

import asyncio
from pathlib import Path
from typing import Optional

import typer
from rich.panel import Panel

from ..config import Config, ConfigModel, default_config_path, save_config
from ..db import close_connection_pool, init_database, validate_connection
from ..log import setup_logging
from .common import console


async def _bootstrap_database(db_config: dict) -> bool:
    try:
        if not await validate_connection(db_config):
            return False
        await init_database(db_config)
        return True
    finally:
        await close_connection_pool()


def init_command(
    config_path: Optional[Path] = typer.Option(
        None,
        "--config",
        "-c",
        help="Config file to write (default: ~/.config/readlater/config.yaml)",
    ),
    owner: Optional[str] = typer.Option(None, "--owner", "-o", help="Default owner id"),
    provider: str = typer.Option(
        "firecrawl", "--provider", help="Extraction provider (firecrawl, trafilatura)"
    ),
    db_host: str = typer.Option("localhost", "--db-host", help="Postgres host"),
    db_port: int = typer.Option(5432, "--db-port", help="Postgres port"),
    db_name: str = typer.Option("readlater", "--db-name", help="Database name"),
    db_user: str = typer.Option("readlater", "--db-user", help="Database user"),
    skip_db: bool = typer.Option(False, "--skip-db", help="Only write the config file"),
) -> None:
    """Initialize configuration and database schema."""
    setup_logging("WARNING")
    console.print(Panel.fit("readlater - Initialization", style="bold blue"))

    if config_path is None:
        config_path = default_config_path()

    try:
        config = ConfigModel(
            owner_id=owner,
            postgres={
                "host": db_host,
                "port": db_port,
                "database": db_name,
                "user": db_user,
                "password_env": "READLATER_DB_PASSWORD",
            },
            extraction={"provider": provider},
        )
    except ValueError as e:
        console.print(f"[red]Invalid option: {e}[/red]")
        raise typer.Exit(1)

    save_config(config, config_path)
    console.print(f"✅ Created config: {config_path}")

    if skip_db:
        return

    console.print("\n[bold]Initializing database...[/bold]")
    try:
        ok = asyncio.run(_bootstrap_database(Config(config_path).get_db_config()))
    except Exception as e:
        console.print(f"[red]❌ Failed to initialize database: {e}[/red]")
        raise typer.Exit(1)

    if not ok:
        console.print(
            "[red]❌ Database connection failed![/red]\n"
            "Please ensure Postgres is running and credentials are correct.\n"
            "Set the password via environment variable: "
            "[bold]export READLATER_DB_PASSWORD=your_password[/bold]"
        )
        raise typer.Exit(1)

    console.print(
        Panel(
            f"[green]✅ readlater initialized successfully![/green]\n\n"
            f"Configuration: {config_path}\n\n"
            f"Next steps:\n"
            f"1. Set database password: [bold]export READLATER_DB_PASSWORD=your_password[/bold]\n"
            f"2. Set Firecrawl key: [bold]export FIRECRAWL_API_KEY=your_key[/bold]\n"
            f"3. Run: [bold]readlater import https://example.com/article[/bold]",
            style="green",
        )
    )
