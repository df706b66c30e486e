"""Demo user records for local development databases."""
from __future__ import annotations

import logging
from typing import Tuple

from .database import Database, DuplicateEmailError
from .security import PasswordHasher

logger = logging.getLogger("usersvc.seed")

# (name, email, age, password)
DEMO_USERS: Tuple[Tuple[str, str, int, str], ...] = (
    ("Ana Souza", "ana.souza@example.com", 25, "senha123"),
    ("Bruno Lima", "bruno.lima@example.com", 30, "senha456"),
    ("Carla Mendes", "carla.mendes@example.com", 22, "senha789"),
    ("Daniel Oliveira", "daniel.oliveira@example.com", 28, "senha101"),
    ("Eduarda Martins", "eduarda.martins@example.com", 35, "senha202"),
    ("Felipe Gonçalves", "felipe.goncalves@example.com", 27, "senha303"),
    ("Gabriela Silva", "gabriela.silva@example.com", 32, "senha404"),
    ("Henrique Santos", "henrique.santos@example.com", 24, "senha505"),
    ("Isabela Ferreira", "isabela.ferreira@example.com", 29, "senha606"),
    ("João Almeida", "joao.almeida@example.com", 31, "senha707"),
)


def seed_demo_users(database: Database, hasher: PasswordHasher) -> int:
    """Insert the demo users, skipping emails that are already taken.

    Returns the number of users created.
    """

    created = 0
    for name, email, age, password in DEMO_USERS:
        if database.find_user_by_email(email) is not None:
            logger.info("Skipping demo user %s: already present", email)
            continue
        try:
            database.create_user(
                name=name,
                email=email,
                age=age,
                password_hash=hasher.hash(password),
            )
        except DuplicateEmailError:
            logger.info("Skipping demo user %s: already present", email)
            continue
        created += 1
    logger.info("Seeded %d demo user(s)", created)
    return created


def clear_users(database: Database) -> int:
    """Delete every user record. Returns the number of rows removed."""

    removed = database.delete_all_users()
    logger.info("Removed %d user(s)", removed)
    return removed


__all__ = ["DEMO_USERS", "clear_users", "seed_demo_users"]
