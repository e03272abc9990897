"""
tasktrack - project and task tracker

A REST API over a single-file SQLite database with a daily email digest of
tasks due tomorrow.
"""

__version__ = "0.1.0"

# Re-export core models for convenience
from tasktrack.core.config.models import TrackerConfig
from tasktrack.core.records.models import Project, Task, TaskStatus, User

__all__ = ["TrackerConfig", "Project", "Task", "TaskStatus", "User", "__version__"]
