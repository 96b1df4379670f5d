"""Helpers shared by CLI commands."""

from typing import Optional

import typer
from rich.console import Console

from ..config import Config
from ..log import setup_logging

console = Console()


def load_config_or_exit() -> Config:
    """Load configuration, exiting with a hint when it is missing or invalid."""
    config = Config()
    try:
        config.config
    except FileNotFoundError:
        console.print(
            f"[red]Config file not found: {config.config_path}. "
            "Run 'readlater init' first.[/red]"
        )
        raise typer.Exit(1)
    except ValueError as e:
        console.print(f"[red]{e}[/red]")
        raise typer.Exit(1)
    return config


def configure_logging(config: Config, verbose: bool) -> None:
    setup_logging("DEBUG" if verbose else config.config.log_level)


def resolve_owner(config: Config, owner: Optional[str]) -> str:
    """Pick the owner from the command line or the config file."""
    owner_id = owner or config.config.owner_id
    if not owner_id:
        console.print("[red]No owner given. Pass --owner or set owner_id in the config.[/red]")
        raise typer.Exit(1)
    return owner_id
