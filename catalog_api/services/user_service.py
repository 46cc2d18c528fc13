"""User registration and password login."""

from __future__ import annotations

import logging
from functools import lru_cache

from catalog_api.adapters.users.base import AbstractUserDirectory, UserRecord
from catalog_api.core.security import CredentialVerifier, hash_password, verify_password
from catalog_api.schemas.users import RegisterUserRequest

logger = logging.getLogger(__name__)


@lru_cache(maxsize=1)
def _dummy_hash(rounds: int) -> str:
    return hash_password("not-a-real-password", rounds=rounds)


class UserService:
    """Registers users (bcrypt-hashed passwords) and issues access tokens."""

    def __init__(
        self,
        directory: AbstractUserDirectory,
        verifier: CredentialVerifier,
        *,
        bcrypt_rounds: int = 12,
    ) -> None:
        self._directory = directory
        self._verifier = verifier
        self._bcrypt_rounds = bcrypt_rounds

    def register(self, payload: RegisterUserRequest) -> UserRecord:
        """Create a user; plaintext passwords are never stored.

        Raises:
            ConflictAppError: If the username or email is taken.
        """
        password_hash = hash_password(payload.password, rounds=self._bcrypt_rounds)
        return self._directory.create_user(
            payload.username,
            payload.email,
            password_hash,
        )

    def login(self, username: str, password: str) -> str | None:
        """Return a fresh access token, or None when the credentials are wrong.

        Unknown usernames still pay for one bcrypt check so response timing
        does not reveal which usernames exist.
        """
        user = self._directory.find_by_username(username)
        if user is None:
            verify_password(password, _dummy_hash(self._bcrypt_rounds))
            return None
        if not verify_password(password, user.password_hash):
            return None

        logger.info("users.token_issued", extra={"user_id": user.id})
        return self._verifier.issue_token(user.id)

    @property
    def token_ttl_seconds(self) -> int:
        return self._verifier.token_ttl_seconds
