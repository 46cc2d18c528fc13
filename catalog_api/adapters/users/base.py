"""User directory interface.

Handlers and the credential verifier only see this abstraction, so the
in-memory directory can be replaced by a database-backed one.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import datetime


@dataclass(frozen=True)
class UserRecord:
    """A registered user. ``api_key`` is issued once at registration."""

    id: int
    username: str
    email: str
    password_hash: str
    api_key: str
    created_at: datetime


class AbstractUserDirectory(ABC):
    """Interface for user storage."""

    @abstractmethod
    def create_user(self, username: str, email: str, password_hash: str) -> UserRecord:
        """Store a new user and issue its API key.

        Raises:
            ConflictAppError: If the username or email is already registered.
        """
        raise NotImplementedError

    @abstractmethod
    def find_by_api_key(self, api_key: str) -> UserRecord | None:
        raise NotImplementedError

    @abstractmethod
    def find_by_username(self, username: str) -> UserRecord | None:
        raise NotImplementedError

    @abstractmethod
    def count(self) -> int:
        raise NotImplementedError
