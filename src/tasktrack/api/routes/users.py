"""
User API routes.

Provides endpoints for user accounts and login:
- POST /api/users - Create a user (password is hashed, never returned)
- GET /api/users - List users
- GET /api/users/{id} - Fetch one user
- PUT /api/users/{id} - Update a user
- DELETE /api/users/{id} - Delete a user
- POST /api/login - Check email/password
"""

from fastapi import APIRouter, Depends, status

from tasktrack.api.deps import get_auth_service, get_user_service
from tasktrack.core.auth.service import AuthService
from tasktrack.core.records.models import (
    DeleteResult,
    LoginRequest,
    User,
    UserCreate,
    UserUpdate,
)
from tasktrack.core.records.service import UserService

router = APIRouter()


@router.post("/users", status_code=status.HTTP_201_CREATED)
def create_user(data: UserCreate, service: UserService = Depends(get_user_service)) -> User:
    """
    Create a user.

    Raises:
        400 if a required field is missing or the email is already taken
    """
    return service.create(data)


@router.get("/users")
def list_users(service: UserService = Depends(get_user_service)) -> list[User]:
    return service.list_all()


@router.get("/users/{user_id}")
def get_user(user_id: str, service: UserService = Depends(get_user_service)) -> User:
    return service.get(user_id)


@router.put("/users/{user_id}")
def update_user(
    user_id: str, data: UserUpdate, service: UserService = Depends(get_user_service)
) -> User:
    """Update a user. A new password is re-hashed; omitted fields are kept."""
    return service.update(user_id, data)


@router.delete("/users/{user_id}")
def delete_user(user_id: str, service: UserService = Depends(get_user_service)) -> DeleteResult:
    return service.delete(user_id)


@router.post("/login")
def login(data: LoginRequest, auth: AuthService = Depends(get_auth_service)) -> dict[str, User]:
    """
    Authenticate with email and password.

    Returns:
        {"user": {...}} without the password hash

    Raises:
        400 if email or password is missing, 401 if they don't match
    """
    return {"user": auth.verify(data.email, data.password)}
