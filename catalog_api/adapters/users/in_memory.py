"""In-memory user directory.

Per-process and non-persistent; thread-safe through a single lock since
registrations are rare compared to lookups.
"""

from __future__ import annotations

import logging
import threading
from datetime import datetime, timezone
from typing import Callable

from catalog_api.adapters.users.base import AbstractUserDirectory, UserRecord
from catalog_api.core.errors import ConflictAppError
from catalog_api.core.security import DEFAULT_API_KEY_PREFIX, generate_api_key

logger = logging.getLogger(__name__)


class InMemoryUserDirectory(AbstractUserDirectory):
    """Dictionary-backed user directory with unique username/email/api_key."""

    def __init__(
        self,
        *,
        api_key_prefix: str = DEFAULT_API_KEY_PREFIX,
        key_factory: Callable[[str], str] = generate_api_key,
    ) -> None:
        self._api_key_prefix = api_key_prefix
        self._key_factory = key_factory
        self._lock = threading.Lock()
        self._next_id = 1
        self._by_id: dict[int, UserRecord] = {}
        self._by_username: dict[str, UserRecord] = {}
        self._by_email: dict[str, UserRecord] = {}
        self._by_api_key: dict[str, UserRecord] = {}

    def create_user(self, username: str, email: str, password_hash: str) -> UserRecord:
        username_key = username.lower()
        email_key = email.lower()

        with self._lock:
            if username_key in self._by_username:
                raise ConflictAppError(
                    code="username_taken",
                    message="Username is already registered",
                    details={"field": "username"},
                )
            if email_key in self._by_email:
                raise ConflictAppError(
                    code="email_taken",
                    message="Email is already registered",
                    details={"field": "email"},
                )

            api_key = self._key_factory(self._api_key_prefix)
            while api_key in self._by_api_key:
                api_key = self._key_factory(self._api_key_prefix)

            user = UserRecord(
                id=self._next_id,
                username=username,
                email=email,
                password_hash=password_hash,
                api_key=api_key,
                created_at=datetime.now(timezone.utc),
            )
            self._next_id += 1
            self._by_id[user.id] = user
            self._by_username[username_key] = user
            self._by_email[email_key] = user
            self._by_api_key[api_key] = user

        logger.info("users.created", extra={"user_id": user.id})
        return user

    def find_by_api_key(self, api_key: str) -> UserRecord | None:
        with self._lock:
            return self._by_api_key.get(api_key)

    def find_by_username(self, username: str) -> UserRecord | None:
        with self._lock:
            return self._by_username.get(username.lower())

    def count(self) -> int:
        with self._lock:
            return len(self._by_id)
