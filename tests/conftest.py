from __future__ import annotations

from pathlib import Path
from typing import Iterator

import pytest
from fastapi.testclient import TestClient

from usersvc.api import create_app
from usersvc.database import Database
from usersvc.security import PasswordHasher


@pytest.fixture()
def database(tmp_path: Path) -> Database:
    db = Database(tmp_path / "users.sqlite3")
    db.initialize()
    return db


@pytest.fixture()
def hasher() -> PasswordHasher:
    # Minimum bcrypt cost keeps the suite fast.
    return PasswordHasher(rounds=4)


@pytest.fixture()
def client(database: Database, hasher: PasswordHasher) -> Iterator[TestClient]:
    app = create_app(database=database, hasher=hasher)
    with TestClient(app) as test_client:
        yield test_client
