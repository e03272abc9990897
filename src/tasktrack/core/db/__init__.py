"""
Database layer for tasktrack.

Provides the SQLite schema and connection management for the single-file
store behind the API and the reminder job.

Main components:
- schema.py: SQL schema definitions and migrations
- connection.py: Database connection management and query helpers
"""

from tasktrack.core.db.connection import get_connection, init_db
from tasktrack.core.db.schema import SCHEMA_VERSION, create_schema

__all__ = [
    "get_connection",
    "init_db",
    "create_schema",
    "SCHEMA_VERSION",
]
