"""Main CLI application."""

import typer
from dotenv import load_dotenv

# Load .env file if it exists
load_dotenv()

from .ingest import add_command, import_command
from .init import init_command
from .items import items_app
from .reconcile import reconcile_command

app = typer.Typer(
    name="readlater",
    help="Save-for-later library - bulk URL ingestion",
    no_args_is_help=True,
)

# Register commands
app.command("init")(init_command)
app.command("import")(import_command)
app.command("add")(add_command)
app.command("reconcile")(reconcile_command)
app.add_typer(items_app, name="items", help="Browse saved items")


if __name__ == "__main__":
    app()
