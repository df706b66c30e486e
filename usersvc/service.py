"""User record lifecycle: create, read, update and delete with password protection."""

from __future__ import annotations

import logging
import re
import sqlite3
from functools import partial
from typing import Any, Dict, List, Mapping

import anyio

from .database import Database, DuplicateEmailError
from .errors import BadRequest, Conflict, NotFound, ServerError
from .models import User
from .security import PasswordHasher

logger = logging.getLogger("usersvc.service")

_USER_ID_PATTERN = re.compile(r"[+-]?[0-9]+")

USER_FIELDS = ("name", "email", "age", "password")

# SQLite INTEGER is a signed 64-bit value.
_MAX_USER_ID = 2**63 - 1
_MIN_USER_ID = -(2**63)


class UserService:
    """Maps user operations onto the store and the hashing policy.

    The service keeps no state between calls besides its collaborators.
    Store access and hashing run in worker threads.
    """

    def __init__(self, database: Database, hasher: PasswordHasher) -> None:
        self._database = database
        self._hasher = hasher

    @staticmethod
    def parse_user_id(raw: str) -> int:
        """Parse a path segment as a base-10 user id or raise :class:`BadRequest`."""

        candidate = raw.strip()
        if not _USER_ID_PATTERN.fullmatch(candidate):
            raise BadRequest("Invalid user ID")
        user_id = int(candidate, 10)
        if not _MIN_USER_ID <= user_id <= _MAX_USER_ID:
            raise BadRequest("Invalid user ID")
        return user_id

    async def _hash_password(self, password: object) -> str:
        if password is None:
            raise BadRequest("Password is required")
        if not isinstance(password, str):
            raise BadRequest("Password must be a string")
        try:
            return await anyio.to_thread.run_sync(self._hasher.hash, password)
        except ValueError as exc:
            raise BadRequest(str(exc)) from exc

    async def create_user(self, payload: Mapping[str, Any]) -> User:
        password_hash = await self._hash_password(payload.get("password"))
        email = payload.get("email")

        try:
            user = await anyio.to_thread.run_sync(
                partial(
                    self._database.create_user,
                    name=payload.get("name"),
                    email=email,
                    age=payload.get("age"),
                    password_hash=password_hash,
                )
            )
        except DuplicateEmailError as exc:
            logger.info("Rejected user creation for %s: email already exists", email)
            raise Conflict(str(exc)) from exc
        except (ValueError, OverflowError, sqlite3.Error) as exc:
            logger.warning("Failed to create user: %s", exc)
            raise BadRequest(str(exc)) from exc

        logger.info("Created user %s <%s>", user.id, user.email)
        return user

    async def list_users(self) -> List[User]:
        try:
            return await anyio.to_thread.run_sync(self._database.list_users)
        except sqlite3.Error as exc:
            logger.exception("Failed to list users")
            raise BadRequest(str(exc)) from exc

    async def get_user(self, raw_id: str) -> User:
        user_id = self.parse_user_id(raw_id)
        logger.debug("Fetching user %s", user_id)

        try:
            user = await anyio.to_thread.run_sync(self._database.get_user, user_id)
        except sqlite3.Error as exc:
            logger.exception("Failed to fetch user %s", user_id)
            raise ServerError("An error occurred while fetching the user.") from exc

        if user is None:
            logger.info("User %s not found", user_id)
            raise NotFound("User not found")
        return user

    async def update_user(self, raw_id: str, payload: Mapping[str, Any]) -> User:
        """Overwrite every supplied field of a user, re-hashing its password."""

        user_id = self.parse_user_id(raw_id)
        fields: Dict[str, object] = {key: payload[key] for key in USER_FIELDS if key in payload}
        fields["password"] = await self._hash_password(payload.get("password"))

        try:
            updated = await anyio.to_thread.run_sync(
                partial(self._database.update_user, user_id, **fields)
            )
            if not updated:
                logger.info("User %s not found for update", user_id)
                raise NotFound("User not found")
            user = await anyio.to_thread.run_sync(self._database.get_user, user_id)
        except DuplicateEmailError as exc:
            logger.info("Rejected update of user %s: email already exists", user_id)
            raise Conflict(str(exc)) from exc
        except (ValueError, OverflowError, sqlite3.Error) as exc:
            logger.warning("Failed to update user %s: %s", user_id, exc)
            raise BadRequest(str(exc)) from exc

        if user is None:
            # Deleted between the update and the re-read.
            raise NotFound("User not found")

        logger.info("Updated user %s", user_id)
        return user

    async def delete_user(self, raw_id: str) -> None:
        user_id = self.parse_user_id(raw_id)

        try:
            deleted = await anyio.to_thread.run_sync(self._database.delete_user, user_id)
        except (OverflowError, sqlite3.Error) as exc:
            logger.warning("Failed to delete user %s: %s", user_id, exc)
            raise BadRequest(str(exc)) from exc

        if not deleted:
            logger.info("User %s not found for deletion", user_id)
            raise NotFound("User not found")
        logger.info("Deleted user %s", user_id)


__all__ = ["USER_FIELDS", "UserService"]
