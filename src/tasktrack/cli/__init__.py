"""
tasktrack CLI - Main application entry point.

This module sets up the Typer CLI application with all subcommands.
"""

import logging

import typer
from rich.console import Console

from tasktrack import __version__
from tasktrack.cli import db, remind, serve
from tasktrack.core.config.loader import load_env_file

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"

app = typer.Typer(
    name="tasktrack",
    help="Project and task tracker with a daily deadline digest",
    no_args_is_help=True,
    add_completion=False,
    context_settings={"help_option_names": ["--help", "-h"]},
)

console = Console()


def configure_logging(debug: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if debug else logging.INFO,
        format=LOG_FORMAT,
        force=True,
    )


@app.callback()
def main(
    ctx: typer.Context,
    debug: bool = typer.Option(
        False,
        "--debug",
        help="Enable debug output with detailed logging",
    ),
) -> None:
    """
    tasktrack - users, projects and tasks over a REST API.

    Quick Start:
        tasktrack init-db            # Create the database
        tasktrack serve              # Start the API and the daily reminder
        tasktrack remind --dry-run   # Show what tomorrow's digest contains
    """
    # Shell variables win over the project .env
    load_env_file()
    configure_logging(debug)

    ctx.obj = {"debug": debug}


app.command(name="serve")(serve.serve)
app.command(name="remind")(remind.remind)
app.command(name="init-db")(db.init_db_command)


@app.command()
def version() -> None:
    """Show tasktrack version and exit."""
    console.print(f"tasktrack version {__version__}")
    raise typer.Exit(0)


def cli_main() -> None:
    """Main CLI entry point."""
    app()


__all__ = ["app", "cli_main"]
