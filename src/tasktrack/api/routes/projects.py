"""
Project API routes.

- GET /api/projects - List projects
- POST /api/projects - Create a project (name required)
- GET /api/projects/{id} - Fetch one project
- PUT /api/projects/{id} - Update a project
- DELETE /api/projects/{id} - Delete a project and all of its tasks
"""

from fastapi import APIRouter, Depends, status

from tasktrack.api.deps import get_project_service
from tasktrack.core.records.models import DeleteResult, Project, ProjectCreate, ProjectUpdate
from tasktrack.core.records.service import ProjectService

router = APIRouter()


@router.get("/projects")
def list_projects(service: ProjectService = Depends(get_project_service)) -> list[Project]:
    return service.list_all()


@router.post("/projects", status_code=status.HTTP_201_CREATED)
def create_project(
    data: ProjectCreate, service: ProjectService = Depends(get_project_service)
) -> Project:
    return service.create(data)


@router.get("/projects/{project_id}")
def get_project(
    project_id: str, service: ProjectService = Depends(get_project_service)
) -> Project:
    return service.get(project_id)


@router.put("/projects/{project_id}")
def update_project(
    project_id: str,
    data: ProjectUpdate,
    service: ProjectService = Depends(get_project_service),
) -> Project:
    return service.update(project_id, data)


@router.delete("/projects/{project_id}")
def delete_project(
    project_id: str, service: ProjectService = Depends(get_project_service)
) -> DeleteResult:
    """Delete a project. Its tasks are removed by the database cascade."""
    return service.delete(project_id)
