from __future__ import annotations

from pathlib import Path

import pytest

from usersvc.database import Database, DuplicateEmailError, resolve_database_path


def _create(database: Database, email: str = "owner@example.com", **overrides):
    fields = {"name": "Owner", "email": email, "age": 40, "password_hash": "hashed-value"}
    fields.update(overrides)
    return database.create_user(**fields)


def test_create_assigns_id_and_timestamps(database: Database) -> None:
    user = _create(database)

    assert user.id > 0
    assert user.name == "Owner"
    assert user.email == "owner@example.com"
    assert user.age == 40
    assert user.created_at == user.updated_at
    assert user.created_at.tzinfo is not None
    assert not hasattr(user, "password")


def test_ids_are_unique(database: Database) -> None:
    first = _create(database, "a@example.com")
    second = _create(database, "b@example.com")
    assert first.id != second.id


def test_duplicate_email_is_rejected_without_partial_write(database: Database) -> None:
    _create(database, "dup@example.com")
    with pytest.raises(DuplicateEmailError):
        _create(database, "dup@example.com", name="Other")

    users = database.list_users()
    assert len(users) == 1
    assert users[0].name == "Owner"


def test_password_hash_is_only_available_explicitly(database: Database) -> None:
    user = _create(database, password_hash="$2b$04$abc")
    assert database.get_password_hash(user.id) == "$2b$04$abc"
    assert database.get_password_hash(user.id + 100) is None


def test_get_and_find_user(database: Database) -> None:
    user = _create(database)
    assert database.get_user(user.id) == user
    assert database.find_user_by_email("owner@example.com") == user
    assert database.get_user(user.id + 1) is None
    assert database.find_user_by_email("missing@example.com") is None


def test_update_overwrites_supplied_fields(database: Database) -> None:
    user = _create(database)

    assert database.update_user(user.id, name="Renamed", age=41, password="new-hash") is True

    refreshed = database.get_user(user.id)
    assert refreshed is not None
    assert refreshed.name == "Renamed"
    assert refreshed.age == 41
    assert refreshed.email == "owner@example.com"
    assert refreshed.updated_at >= user.updated_at
    assert database.get_password_hash(user.id) == "new-hash"


def test_update_can_store_null(database: Database) -> None:
    user = _create(database)
    database.update_user(user.id, age=None)
    refreshed = database.get_user(user.id)
    assert refreshed is not None
    assert refreshed.age is None


def test_update_missing_user_reports_no_rows(database: Database) -> None:
    assert database.update_user(999, name="Nobody") is False


def test_update_to_taken_email_leaves_row_unchanged(database: Database) -> None:
    _create(database, "first@example.com")
    second = _create(database, "second@example.com")

    with pytest.raises(DuplicateEmailError):
        database.update_user(second.id, email="first@example.com")

    assert database.get_user(second.id) == second


def test_update_rejects_unknown_fields(database: Database) -> None:
    user = _create(database)
    with pytest.raises(ValueError):
        database.update_user(user.id, id=5)


def test_delete_user(database: Database) -> None:
    user = _create(database)
    assert database.delete_user(user.id) is True
    assert database.get_user(user.id) is None
    assert database.delete_user(user.id) is False


def test_delete_all_users(database: Database) -> None:
    _create(database, "a@example.com")
    _create(database, "b@example.com")
    assert database.delete_all_users() == 2
    assert database.list_users() == []


def test_initialize_is_idempotent(tmp_path: Path) -> None:
    db = Database(tmp_path / "nested" / "users.sqlite3")
    db.initialize()
    user = _create(db)
    db.initialize()
    assert db.get_user(user.id) == user


def test_resolve_database_path(tmp_path: Path) -> None:
    assert resolve_database_path(str(tmp_path / "x.sqlite3")) == (tmp_path / "x.sqlite3").resolve()
    assert resolve_database_path(None).name == "users.sqlite3"
