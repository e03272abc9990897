"""
tasktrack CLI - init-db command.
"""

import sqlite3

import typer
from rich.console import Console

from tasktrack.core.config.loader import load_config
from tasktrack.core.db.connection import init_db

console = Console()


def init_db_command(
    force: bool = typer.Option(
        False,
        "--force",
        "-f",
        help="Delete the existing database and start empty",
    ),
) -> None:
    """
    Create the database file and schema.

    Safe to run repeatedly; existing data is kept unless --force is given.
    """
    try:
        path = load_config().database.path
    except ValueError as e:
        console.print(f"[red]Error:[/red] Invalid configuration: {e}")
        raise typer.Exit(1)

    if force and not typer.confirm(f"Delete all data in {path}?", default=False):
        raise typer.Exit(1)

    try:
        init_db(path, force_recreate=force).close()
    except (sqlite3.Error, OSError) as e:
        console.print(f"[red]Error:[/red] Could not initialize {path}: {e}")
        raise typer.Exit(1)
    console.print(f"[green]✓[/green] Database ready: {path}")
