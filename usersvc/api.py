"""FastAPI application exposing the user record JSON API."""
from __future__ import annotations

import logging
from datetime import datetime
from typing import Dict, List, Optional

from fastapi import APIRouter, Depends, FastAPI, Response, status
from pydantic import BaseModel, ConfigDict, Field

from .config import load_service_config
from .database import Database
from .errors import register_exception_handlers
from .models import User
from .security import PasswordHasher
from .service import UserService

logger = logging.getLogger("usersvc.api")


class UserPayload(BaseModel):
    """Request body for creating or replacing a user."""

    model_config = ConfigDict(extra="ignore", coerce_numbers_to_str=True)

    name: Optional[str] = None
    email: Optional[str] = None
    age: Optional[int] = None
    password: Optional[str] = None


class UserResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    id: int
    name: Optional[str]
    email: Optional[str]
    age: Optional[int]
    created_at: datetime = Field(alias="createdAt")
    updated_at: datetime = Field(alias="updatedAt")


def user_to_response(user: User) -> UserResponse:
    return UserResponse(
        id=user.id,
        name=user.name,
        email=user.email,
        age=user.age,
        created_at=user.created_at,
        updated_at=user.updated_at,
    )


def register_user_routes(app: FastAPI, service: UserService) -> None:
    """Expose the ``/api/users`` endpoints on the provided application."""

    router = APIRouter(prefix="/api")

    def get_service() -> UserService:
        return service

    @router.post("/users", response_model=UserResponse, status_code=status.HTTP_201_CREATED)
    async def create_user(
        payload: UserPayload,
        users: UserService = Depends(get_service),
    ) -> UserResponse:
        user = await users.create_user(payload.model_dump(exclude_unset=True))
        return user_to_response(user)

    @router.get("/users", response_model=List[UserResponse])
    async def list_users(users: UserService = Depends(get_service)) -> List[UserResponse]:
        return [user_to_response(user) for user in await users.list_users()]

    @router.get("/users/{user_id}", response_model=UserResponse)
    async def get_user(user_id: str, users: UserService = Depends(get_service)) -> UserResponse:
        return user_to_response(await users.get_user(user_id))

    @router.put("/users/{user_id}", response_model=UserResponse)
    async def update_user(
        user_id: str,
        payload: UserPayload,
        users: UserService = Depends(get_service),
    ) -> UserResponse:
        user = await users.update_user(user_id, payload.model_dump(exclude_unset=True))
        return user_to_response(user)

    @router.delete("/users/{user_id}", status_code=status.HTTP_204_NO_CONTENT)
    async def delete_user(user_id: str, users: UserService = Depends(get_service)) -> Response:
        await users.delete_user(user_id)
        return Response(status_code=status.HTTP_204_NO_CONTENT)

    app.include_router(router)


def create_app(
    *,
    database: Database | None = None,
    hasher: PasswordHasher | None = None,
) -> FastAPI:
    """Instantiate the FastAPI application around an explicitly provided store."""

    if database is None:
        settings = load_service_config()
        db = Database(settings.database_path, timeout=settings.database_timeout)
        hasher = hasher or PasswordHasher(settings.bcrypt_rounds)
    else:
        db = database
    db.initialize()

    service = UserService(db, hasher or PasswordHasher())

    app = FastAPI(
        title="User Record Service",
        version="1.0.0",
        description="CRUD API for user records with hashed credentials.",
    )
    app.state.database = db
    app.state.service = service

    register_exception_handlers(app)

    @app.get("/healthz")
    async def healthcheck() -> Dict[str, str]:
        return {"status": "ok"}

    register_user_routes(app, service)
    logger.debug("User API ready with database at %s", db.path)

    return app


__all__ = ["UserPayload", "UserResponse", "create_app", "register_user_routes", "user_to_response"]
