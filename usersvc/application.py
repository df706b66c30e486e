"""Application factory that wires the configured store into the HTTP API."""
from __future__ import annotations

import logging
from typing import Optional

from fastapi import FastAPI

from .api import create_app
from .config import ServiceConfig, load_service_config
from .database import Database
from .security import PasswordHasher

logger = logging.getLogger("usersvc.application")


def build_database(config: ServiceConfig) -> Database:
    database = Database(config.database_path, timeout=config.database_timeout)
    database.initialize()
    logger.info("Database ready at %s", config.database_path)
    return database


def create_application(
    config: Optional[ServiceConfig] = None,
    *,
    database: Optional[Database] = None,
) -> FastAPI:
    """Create the ASGI application from configuration.

    The store is built once here and handed to the API explicitly.
    """

    settings = config or load_service_config()
    db = database or build_database(settings)
    app = create_app(database=db, hasher=PasswordHasher(settings.bcrypt_rounds))
    app.state.config = settings
    return app


__all__ = ["build_database", "create_application"]
