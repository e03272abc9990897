"""
FastAPI application for tasktrack.

API Endpoints:
- /api/users, /api/login - User accounts and login
- /api/projects - Project CRUD
- /api/tasks - Task CRUD
- /test-send-email - Run the deadline reminder now

Usage:
    # Run the server
    tasktrack serve

    # Or with uvicorn directly
    uvicorn tasktrack.api.app:create_app --factory --port 5000
"""

from tasktrack.api.app import create_app

__all__ = ["create_app"]
