"""Logging setup."""

import logging
from typing import Optional, Union

from rich.console import Console
from rich.logging import RichHandler


def setup_logging(level: Union[str, int] = "INFO", console: Optional[Console] = None) -> None:
    """Route all package logging through a single rich handler."""
    if isinstance(level, str):
        level = level.upper()

    logging.basicConfig(
        level=level,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[
            RichHandler(
                console=console or Console(stderr=True),
                rich_tracebacks=True,
                show_path=False,
            )
        ],
        force=True,
    )
    # httpx logs every request at INFO
    logging.getLogger("httpx").setLevel(logging.WARNING)
