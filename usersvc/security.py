"""Password hashing policy for stored user credentials."""
from __future__ import annotations

from passlib.context import CryptContext

DEFAULT_BCRYPT_ROUNDS = 10


class PasswordHasher:
    """Salted bcrypt hashing with a fixed cost factor."""

    def __init__(self, rounds: int = DEFAULT_BCRYPT_ROUNDS) -> None:
        if rounds < 4 or rounds > 31:
            raise ValueError("bcrypt rounds must be between 4 and 31")
        self._rounds = rounds
        self._context = CryptContext(schemes=["bcrypt"], deprecated="auto", bcrypt__rounds=rounds)

    @property
    def rounds(self) -> int:
        return self._rounds

    def hash(self, password: str) -> str:
        return self._context.hash(password)

    def verify(self, password: str, hashed: str) -> bool:
        if not hashed:
            return False
        try:
            return self._context.verify(password, hashed)
        except ValueError:
            return False


__all__ = ["DEFAULT_BCRYPT_ROUNDS", "PasswordHasher"]
