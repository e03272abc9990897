"""
Task API routes.

- GET /api/tasks - List tasks (optionally ?projectId=...)
- POST /api/tasks - Create a task (projectId, title and status required)
- GET /api/tasks/{id} - Fetch one task
- PUT /api/tasks/{id} - Update a task
- DELETE /api/tasks/{id} - Delete a task

Task bodies use the ``projectId`` key and carry ``tags`` as a JSON list.
"""

from fastapi import APIRouter, Depends, Query, status

from tasktrack.api.deps import get_task_service
from tasktrack.core.records.models import DeleteResult, Task, TaskCreate, TaskUpdate
from tasktrack.core.records.service import TaskService

router = APIRouter()


@router.get("/tasks")
def list_tasks(
    project_id: str | None = Query(default=None, alias="projectId"),
    service: TaskService = Depends(get_task_service),
) -> list[Task]:
    return service.list_all(project_id)


@router.post("/tasks", status_code=status.HTTP_201_CREATED)
def create_task(data: TaskCreate, service: TaskService = Depends(get_task_service)) -> Task:
    """
    Create a task.

    Raises:
        400 if a required field is missing, the status is not one of
        "To Do", "In Progress", "Done", or the project does not exist
    """
    return service.create(data)


@router.get("/tasks/{task_id}")
def get_task(task_id: str, service: TaskService = Depends(get_task_service)) -> Task:
    return service.get(task_id)


@router.put("/tasks/{task_id}")
def update_task(
    task_id: str, data: TaskUpdate, service: TaskService = Depends(get_task_service)
) -> Task:
    return service.update(task_id, data)


@router.delete("/tasks/{task_id}")
def delete_task(task_id: str, service: TaskService = Depends(get_task_service)) -> DeleteResult:
    return service.delete(task_id)
