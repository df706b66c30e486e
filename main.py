"""Command-line interface for the user record service."""

from __future__ import annotations
import argparse
import logging
import sys
from typing import Sequence

from dotenv import load_dotenv

from usersvc.application import build_database, create_application
from usersvc.config import ServiceConfig, load_service_config
from usersvc.database import Database
from usersvc.security import PasswordHasher
from usersvc.seed import clear_users, seed_demo_users

logger = logging.getLogger("usersvc.main")

_DEFAULT_SERVICE_URL = "http://localhost:3000"


def _parse_args(argv: Sequence[str] | None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="User record service utilities")
    subparsers = parser.add_subparsers(dest="command")

    parser.set_defaults(command="serve")

    subparsers.add_parser("init-db", help="Create the Users table if it does not exist")

    serve_parser = subparsers.add_parser("serve", help="Start the HTTP API")
    serve_parser.add_argument("--host", default=None, help="Bind address (default: HOST or 0.0.0.0)")
    serve_parser.add_argument(
        "--port",
        type=int,
        default=None,
        help="Port for the HTTP API (default: PORT or 3000)",
    )

    seed_parser = subparsers.add_parser("seed", help="Insert the demo users")
    seed_parser.add_argument(
        "--undo",
        action="store_true",
        help="Delete every user instead of inserting the demo set",
    )

    users_parser = subparsers.add_parser("users", help="List users from a running service")
    users_parser.add_argument(
        "--service-url",
        default=_DEFAULT_SERVICE_URL,
        help=f"Base URL of a running service (default: {_DEFAULT_SERVICE_URL})",
    )

    args_list = list(argv) if argv is not None else sys.argv[1:]
    known_commands = {"serve", "init-db", "seed", "users"}

    if not args_list:
        args_list = ["serve"]
    else:
        first = args_list[0]
        if first in ("-h", "--help"):
            return parser.parse_args(args_list)
        if first not in known_commands:
            args_list = ["serve", *args_list]

    return parser.parse_args(args_list)


def _serve(*, database: Database, config: ServiceConfig) -> None:
    import uvicorn

    logger.info("Starting user API on http://%s:%s", config.host, config.port)
    app = create_application(config, database=database)
    uvicorn.run(app, host=config.host, port=config.port, log_level=config.log_level.lower())


def _seed(database: Database, config: ServiceConfig, *, undo: bool) -> None:
    if undo:
        removed = clear_users(database)
        print(f"Removed {removed} user(s).")
        return

    created = seed_demo_users(database, PasswordHasher(config.bcrypt_rounds))
    print(f"Created {created} demo user(s).")


def _list_users(service_url: str) -> int:
    import httpx

    endpoint = service_url.rstrip("/") + "/api/users"
    try:
        response = httpx.get(endpoint, timeout=10.0)
    except httpx.HTTPError as exc:
        print(f"Failed to contact user service: {exc}")
        return 1

    if response.status_code != 200:
        print(f"Service responded with {response.status_code}: {response.text.strip()}")
        return 1

    try:
        users = response.json()
    except ValueError:
        print("Service returned an unexpected response format.")
        return 1

    if not users:
        print("No users are currently registered.")
        return 0

    print(f"{len(users)} user(s) found:")
    print(f"{'ID':>4}  {'Name':<24}  {'Email':<32}  Age")
    print("-" * 70)
    for user in users:
        email = user.get("email") or "<no email>"
        name = user.get("name") or ""
        age = user.get("age")
        print(f"{user.get('id', '?'):>4}  {name:<24}  {email:<32}  {age if age is not None else '-'}")
    return 0


def main(argv: Sequence[str] | None = None) -> int:
    """Entry point for CLI usage."""

    load_dotenv()
    args = _parse_args(argv)
    config = load_service_config()

    logging.basicConfig(
        level=getattr(logging, config.log_level, logging.INFO),
        format="%(asctime)s [%(levelname)s] %(message)s",
    )

    if args.command == "users":
        return _list_users(args.service_url)

    if args.command == "serve":
        config = config.with_overrides(host=args.host, port=args.port)

    database = build_database(config)

    if args.command == "serve":
        _serve(database=database, config=config)
    elif args.command == "seed":
        _seed(database, config, undo=args.undo)
    elif args.command == "init-db":
        print("Database initialisation complete.")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
