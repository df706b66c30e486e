"""SQLite-backed persistence for user records."""
from __future__ import annotations

import sqlite3
from contextlib import contextmanager
from datetime import datetime, timezone
from pathlib import Path
from typing import Iterator, List, Optional

from .models import User

DEFAULT_TIMEOUT = 5.0

_USER_COLUMNS = 'id, name, email, age, "createdAt", "updatedAt"'

# Request field -> column name. ``password`` always holds a hash.
_UPDATABLE_COLUMNS = {
    "name": "name",
    "email": "email",
    "age": "age",
    "password": "password",
}


class DuplicateEmailError(ValueError):
    """Raised when a write would violate the unique index on ``email``."""


def _ensure_directory(path: Path) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)


def resolve_database_path(env_value: Optional[str]) -> Path:
    """Resolve the on-disk path for the user database."""

    if env_value:
        return Path(env_value).expanduser().resolve(strict=False)
    base_dir = Path(__file__).resolve().parent.parent / "data"
    return (base_dir / "users.sqlite3").resolve(strict=False)


def _current_timestamp() -> datetime:
    return datetime.now(timezone.utc)


def _serialize_datetime(value: datetime) -> str:
    return value.isoformat()


def _parse_datetime(value: str) -> datetime:
    return datetime.fromisoformat(value)


def _translate_integrity_error(exc: sqlite3.IntegrityError) -> ValueError:
    message = str(exc)
    if "UNIQUE" in message and "email" in message:
        return DuplicateEmailError("Email already exists.")
    return ValueError(message)


class Database:
    """Thin wrapper around SQLite for the ``Users`` table."""

    def __init__(self, path: Path, *, timeout: float = DEFAULT_TIMEOUT) -> None:
        _ensure_directory(path)
        self._path = path
        self._timeout = timeout

    @property
    def path(self) -> Path:
        return self._path

    @property
    def timeout(self) -> float:
        return self._timeout

    @contextmanager
    def _connect(self) -> Iterator[sqlite3.Connection]:
        conn = sqlite3.connect(self._path, timeout=self._timeout, check_same_thread=False)
        conn.row_factory = sqlite3.Row
        try:
            with conn:
                yield conn
        finally:
            conn.close()

    def initialize(self) -> None:
        """Create the ``Users`` table and its indexes if they do not already exist."""

        with self._connect() as conn:
            conn.executescript(
                """
                CREATE TABLE IF NOT EXISTS "Users" (
                    id INTEGER PRIMARY KEY AUTOINCREMENT,
                    name TEXT,
                    email TEXT UNIQUE,
                    age INTEGER,
                    password TEXT,
                    "createdAt" TEXT NOT NULL,
                    "updatedAt" TEXT NOT NULL
                );
                """
            )

    # ------------------------------------------------------------------
    # User management
    # ------------------------------------------------------------------
    def create_user(
        self,
        *,
        name: Optional[str],
        email: Optional[str],
        age: Optional[int],
        password_hash: str,
    ) -> User:
        """Insert a new user and return it without its password."""

        now = _serialize_datetime(_current_timestamp())
        with self._connect() as conn:
            try:
                cursor = conn.execute(
                    """
                    INSERT INTO "Users" (name, email, age, password, "createdAt", "updatedAt")
                    VALUES (?, ?, ?, ?, ?, ?)
                    """,
                    (name, email, age, password_hash, now, now),
                )
            except sqlite3.IntegrityError as exc:
                raise _translate_integrity_error(exc) from exc
            user_id = cursor.lastrowid

        user = self.get_user(user_id)
        if user is None:
            raise RuntimeError("Failed to load user after creation")
        return user

    def list_users(self) -> List[User]:
        with self._connect() as conn:
            rows = conn.execute(f'SELECT {_USER_COLUMNS} FROM "Users" ORDER BY id').fetchall()
        return [self._row_to_user(row) for row in rows]

    def get_user(self, user_id: int) -> Optional[User]:
        with self._connect() as conn:
            row = conn.execute(
                f'SELECT {_USER_COLUMNS} FROM "Users" WHERE id = ?',
                (user_id,),
            ).fetchone()
        if row is None:
            return None
        return self._row_to_user(row)

    def find_user_by_email(self, email: str) -> Optional[User]:
        with self._connect() as conn:
            row = conn.execute(
                f'SELECT {_USER_COLUMNS} FROM "Users" WHERE email = ?',
                (email,),
            ).fetchone()
        if row is None:
            return None
        return self._row_to_user(row)

    def get_password_hash(self, user_id: int) -> Optional[str]:
        """Return the stored password hash for ``user_id``, if the user exists."""

        with self._connect() as conn:
            row = conn.execute(
                'SELECT password FROM "Users" WHERE id = ?',
                (user_id,),
            ).fetchone()
        if row is None:
            return None
        return row["password"]

    def update_user(self, user_id: int, **fields: object) -> bool:
        """Overwrite the given columns of one user.

        Returns ``False`` when no row matched ``user_id``.
        """

        unknown = set(fields) - set(_UPDATABLE_COLUMNS)
        if unknown:
            raise ValueError(f"Unknown user fields: {', '.join(sorted(unknown))}")

        updates: List[str] = []
        values: List[object] = []
        for key, column in _UPDATABLE_COLUMNS.items():
            if key not in fields:
                continue
            updates.append(f"{column} = ?")
            values.append(fields[key])

        updates.append('"updatedAt" = ?')
        values.append(_serialize_datetime(_current_timestamp()))
        values.append(user_id)
        query = f'UPDATE "Users" SET {", ".join(updates)} WHERE id = ?'

        with self._connect() as conn:
            try:
                cursor = conn.execute(query, values)
            except sqlite3.IntegrityError as exc:
                raise _translate_integrity_error(exc) from exc
            return cursor.rowcount > 0

    def delete_user(self, user_id: int) -> bool:
        with self._connect() as conn:
            cursor = conn.execute('DELETE FROM "Users" WHERE id = ?', (user_id,))
            return cursor.rowcount > 0

    def delete_all_users(self) -> int:
        with self._connect() as conn:
            cursor = conn.execute('DELETE FROM "Users"')
            return cursor.rowcount

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------
    def _row_to_user(self, row: sqlite3.Row) -> User:
        age = row["age"]
        return User(
            id=int(row["id"]),
            name=row["name"],
            email=row["email"],
            age=int(age) if age is not None else None,
            created_at=_parse_datetime(str(row["createdAt"])),
            updated_at=_parse_datetime(str(row["updatedAt"])),
        )


__all__ = ["Database", "DuplicateEmailError", "resolve_database_path"]
