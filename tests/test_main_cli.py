from pathlib import Path
from unittest import mock

import httpx

import main
from main import _parse_args


def test_default_command_invokes_serve() -> None:
    args = _parse_args([])
    assert args.command == "serve"


def test_default_command_accepts_options_without_subcommand() -> None:
    args = _parse_args(["--host", "127.0.0.1", "--port", "8080"])
    assert args.command == "serve"
    assert args.host == "127.0.0.1"
    assert args.port == 8080


def test_seed_subcommand_accepts_undo() -> None:
    assert _parse_args(["seed"]).undo is False
    assert _parse_args(["seed", "--undo"]).undo is True


def test_users_subcommand_defaults_to_local_service() -> None:
    args = _parse_args(["users"])
    assert args.command == "users"
    assert args.service_url == "http://localhost:3000"


def test_seed_command_populates_database(tmp_path: Path, monkeypatch, capsys) -> None:
    db_path = tmp_path / "cli.sqlite3"
    monkeypatch.setenv("USERS_DB_PATH", str(db_path))
    monkeypatch.setenv("USERS_BCRYPT_ROUNDS", "4")
    monkeypatch.setenv("USERS_CONFIG", str(tmp_path / "absent.yaml"))

    assert main.main(["seed"]) == 0
    assert "Created 10 demo user(s)." in capsys.readouterr().out

    assert main.main(["seed", "--undo"]) == 0
    assert "Removed 10 user(s)." in capsys.readouterr().out


def test_users_command_prints_listing(capsys) -> None:
    response = httpx.Response(
        200,
        json=[{"id": 1, "name": "Ana", "email": "ana@x.com", "age": 25}],
        request=httpx.Request("GET", "http://localhost:3000/api/users"),
    )
    with mock.patch("httpx.get", return_value=response) as get:
        assert main._list_users("http://localhost:3000/") == 0

    get.assert_called_once_with("http://localhost:3000/api/users", timeout=10.0)
    output = capsys.readouterr().out
    assert "1 user(s) found:" in output
    assert "ana@x.com" in output


def test_users_command_reports_connection_failure(capsys) -> None:
    with mock.patch("httpx.get", side_effect=httpx.ConnectError("refused")):
        assert main._list_users("http://localhost:3000") == 1
    assert "Failed to contact user service" in capsys.readouterr().out
