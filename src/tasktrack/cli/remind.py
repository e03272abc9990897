"""
tasktrack CLI - remind command.

Runs the deadline reminder once, through the same ReminderJob.run() the
daily scheduler uses.
"""

import sqlite3
from datetime import datetime

import typer
from rich.console import Console
from rich.table import Table

from tasktrack.core.config.loader import load_config
from tasktrack.core.exceptions import StorageError
from tasktrack.core.reminders.job import PLACEHOLDER, ReminderJob

console = Console()


def _parse_now(value: str | None) -> datetime | None:
    if value is None:
        return None
    try:
        return datetime.fromisoformat(value)
    except ValueError:
        console.print(f"[red]Error:[/red] --now must be an ISO date or datetime, got {value!r}")
        raise typer.Exit(1)


def remind(
    now: str | None = typer.Option(
        None,
        "--now",
        help="Reference time (ISO 8601) instead of the current time",
    ),
    dry_run: bool = typer.Option(
        False,
        "--dry-run",
        help="Show the tasks that would be sent without sending",
    ),
) -> None:
    """
    Send the "tasks due tomorrow" email now.

    Examples:
        tasktrack remind                          # Send for tomorrow
        tasktrack remind --dry-run                # Just show the tasks
        tasktrack remind --now 2025-06-01T09:00   # Pretend it is June 1st
    """
    reference = _parse_now(now)
    try:
        config = load_config()
    except ValueError as e:
        console.print(f"[red]Error:[/red] Invalid configuration: {e}")
        raise typer.Exit(1)
    job = ReminderJob(config)

    if dry_run:
        target = job.compute_target_date(reference)
        try:
            tasks = job.find_due_tasks(target)
        except (sqlite3.Error, StorageError, OSError) as e:
            console.print(
                f"[red]Error:[/red] Could not read tasks from {config.database.path}: {e}"
            )
            raise typer.Exit(1)
        if not tasks:
            console.print(f"[dim]No tasks due {target.isoformat()}[/dim]")
            return

        table = Table(title=f"Tasks Due Tomorrow ({target.isoformat()})")
        table.add_column("Title", style="bold")
        table.add_column("Description")
        table.add_column("Project")
        table.add_column("Status")
        table.add_column("Deadline")
        for task in tasks:
            table.add_row(
                task.title,
                task.description or PLACEHOLDER,
                task.project_name or PLACEHOLDER,
                task.status,
                task.deadline,
            )
        console.print(table)
        return

    result = job.run(reference)
    day = result.target_date.isoformat()
    if result.skipped:
        console.print(f"[dim]Nothing sent: no tasks due {day}[/dim]")
    elif result.delivered:
        console.print(f"[green]✓[/green] Sent {result.task_count} task(s) due {day}")
    else:
        console.print(
            f"[red]Error:[/red] {result.task_count} task(s) due {day} but the email "
            "was not delivered (see log)"
        )
        raise typer.Exit(1)
