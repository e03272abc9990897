"""
tasktrack CLI - serve command.

Starts the REST API with uvicorn. The daily reminder scheduler runs inside
the app while the server is up.
"""

import logging

import typer
from rich.console import Console

from tasktrack.core.config.loader import load_config
from tasktrack.core.db.connection import init_db

console = Console()
logger = logging.getLogger(__name__)


def serve(
    ctx: typer.Context,
    host: str | None = typer.Option(
        None,
        "--host",
        help="Address to bind (default from config: 127.0.0.1)",
    ),
    port: int | None = typer.Option(
        None,
        "--port",
        "-p",
        help="Port to run the server on (default from config: 5000)",
    ),
    no_scheduler: bool = typer.Option(
        False,
        "--no-scheduler",
        help="Don't run the daily reminder scheduler",
    ),
) -> None:
    """
    Start the API server.

    Examples:
        tasktrack serve                   # http://127.0.0.1:5000
        tasktrack serve --port 8080
        tasktrack serve --no-scheduler    # API only, no daily email
    """
    debug = ctx.obj.get("debug", False) if ctx.obj else False

    import uvicorn

    from tasktrack.api.app import create_app

    try:
        config = load_config()
    except ValueError as e:
        console.print(f"[red]Error:[/red] Invalid configuration: {e}")
        raise typer.Exit(1)

    bind_host = host or config.server.host
    bind_port = port or config.server.port

    init_db(config.database.path).close()

    if not config.mail.is_configured or not config.reminder.recipient:
        console.print(
            "[yellow]Warning:[/yellow] SMTP_HOST or REMINDER_EMAIL not set; "
            "reminder emails will not be delivered"
        )

    fastapi_app = create_app(config, start_scheduler=config.reminder.enabled and not no_scheduler)

    url = f"http://{bind_host}:{bind_port}"
    console.print(f"[bold cyan]Server running at[/bold cyan] {url}")
    console.print(f"[dim]Database: {config.database.path}[/dim]")
    console.print(f"[dim]Docs: {url}/docs[/dim]")
    console.print("\n[dim]Press Ctrl+C to stop[/dim]\n")

    try:
        uvicorn.run(
            fastapi_app,
            host=bind_host,
            port=bind_port,
            log_level="debug" if debug else "info",
        )
    except KeyboardInterrupt:
        console.print("\n[yellow]Server stopped[/yellow]")
        raise typer.Exit(0)
