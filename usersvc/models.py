"""Domain models for the user record service."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Optional


@dataclass(frozen=True)
class User:
    """A user record as read back from the store.

    The stored password hash is never loaded into this object.
    """

    id: int
    name: Optional[str]
    email: Optional[str]
    age: Optional[int]
    created_at: datetime
    updated_at: datetime


__all__ = ["User"]
