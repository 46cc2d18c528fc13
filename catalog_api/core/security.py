"""Credential primitives: password hashing, signed tokens and API keys.

Two credential schemes share the ``Authorization: Bearer`` header:

- API keys (``rk_...``): long-lived, opaque, resolved through a user lookup.
- Access tokens: ``<payload>.<signature>`` where ``payload`` is base64url JSON
  ``{user_id, issued_at, expires_at}`` and ``signature`` is the hex
  HMAC-SHA256 of the transported payload text. Stateless; expiry is the only
  invalidation mechanism.

Verification never raises for bad input: every failure mode (unknown key,
bad signature, expired, malformed) collapses into ``None``.
"""

from __future__ import annotations

import base64
import hashlib
import hmac
import json
import secrets
import string
import time
from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Protocol

import bcrypt

DEFAULT_API_KEY_PREFIX = "rk_"
DEFAULT_TOKEN_TTL_SECONDS = 3600
_API_KEY_ALPHABET = string.ascii_lowercase + string.digits
_API_KEY_LENGTH = 32


# ---------------------------------------------------------------------------
# Password hashing
# ---------------------------------------------------------------------------

def hash_password(plaintext: str, *, rounds: int = 12) -> str:
    """Hash a password with bcrypt.

    Raises:
        ValueError: If the password is longer than bcrypt's 72-byte limit.
    """
    encoded = plaintext.encode()
    if len(encoded) > 72:
        raise ValueError("password must be at most 72 bytes")
    return bcrypt.hashpw(encoded, bcrypt.gensalt(rounds=rounds)).decode()


def verify_password(plaintext: str, stored_hash: str) -> bool:
    """Check a password against a stored bcrypt hash.

    A malformed stored hash or an over-long password verifies as False.
    """
    try:
        return bcrypt.checkpw(plaintext.encode(), stored_hash.encode())
    except ValueError:
        return False


# ---------------------------------------------------------------------------
# API key generation
# ---------------------------------------------------------------------------

def generate_api_key(prefix: str = DEFAULT_API_KEY_PREFIX) -> str:
    return prefix + "".join(secrets.choice(_API_KEY_ALPHABET) for _ in range(_API_KEY_LENGTH))


# ---------------------------------------------------------------------------
# Credential verification
# ---------------------------------------------------------------------------

class CredentialKind(str, Enum):
    API_KEY = "api_key"
    TOKEN = "token"


class UserLike(Protocol):
    id: int


ApiKeyLookup = Callable[[str], "UserLike | None"]


@dataclass(frozen=True)
class AuthenticatedIdentity:
    """Identity of a verified caller. Built per request, never cached."""

    user_id: int | str


def _b64encode(raw: bytes) -> str:
    return base64.urlsafe_b64encode(raw).rstrip(b"=").decode("ascii")


def _b64decode(text: str) -> bytes:
    return base64.urlsafe_b64decode(text + "=" * (-len(text) % 4))


class CredentialVerifier:
    """Issue and verify access tokens; resolve API keys through a lookup."""

    def __init__(
        self,
        *,
        signing_secret: str,
        token_ttl_seconds: int = DEFAULT_TOKEN_TTL_SECONDS,
        api_key_prefix: str = DEFAULT_API_KEY_PREFIX,
        clock: Callable[[], float] = time.time,
    ) -> None:
        if not signing_secret:
            raise ValueError("signing_secret must be a non-empty string")
        if token_ttl_seconds < 1:
            raise ValueError("token_ttl_seconds must be >= 1")
        if not api_key_prefix:
            raise ValueError("api_key_prefix must be a non-empty string")

        self._secret = signing_secret.encode()
        self._ttl = token_ttl_seconds
        self._api_key_prefix = api_key_prefix
        self._clock = clock

    @property
    def token_ttl_seconds(self) -> int:
        return self._ttl

    def classify(self, credential: str) -> CredentialKind:
        """Tell API keys from tokens by prefix, before any decoding."""
        if credential.startswith(self._api_key_prefix):
            return CredentialKind.API_KEY
        return CredentialKind.TOKEN

    def issue_token(self, user_id: int | str, now: float | None = None) -> str:
        """Create a signed access token for ``user_id``.

        Args:
            user_id: Subject identifier embedded in the token.
            now: Optional UNIX time override used as ``issued_at``.

        Returns:
            Opaque token string ``<payload>.<signature>``.
        """
        issued_at = self._clock() if now is None else now
        payload = {
            "user_id": user_id,
            "issued_at": issued_at,
            "expires_at": issued_at + self._ttl,
        }
        payload_part = _b64encode(json.dumps(payload, separators=(",", ":")).encode())
        return f"{payload_part}.{self._sign(payload_part)}"

    def verify_token(self, token: str, now: float | None = None) -> dict[str, Any] | None:
        """Return the token payload if signature and expiry check out."""
        try:
            payload_part, sep, signature = token.partition(".")
            if not sep or not payload_part or not signature:
                return None

            expected = self._sign(payload_part)
            if not hmac.compare_digest(expected.encode(), signature.encode()):
                return None

            payload = json.loads(_b64decode(payload_part))
        except (ValueError, TypeError, UnicodeError):
            return None

        if not isinstance(payload, dict):
            return None

        user_id = payload.get("user_id")
        expires_at = payload.get("expires_at")
        if isinstance(user_id, bool) or not isinstance(user_id, (int, str)):
            return None
        if isinstance(expires_at, bool) or not isinstance(expires_at, (int, float)):
            return None

        now = self._clock() if now is None else now
        if now >= expires_at:
            return None
        return payload

    def authenticate(
        self,
        presented_credential: str | None,
        lookup_by_api_key: ApiKeyLookup,
        now: float | None = None,
    ) -> AuthenticatedIdentity | None:
        """Resolve a presented credential to an identity.

        API keys go to ``lookup_by_api_key`` and never expire; anything else
        is verified as a signed token. Returns None for every failure mode.
        Errors raised by the lookup itself propagate.
        """
        if not presented_credential or not isinstance(presented_credential, str):
            return None

        if self.classify(presented_credential) is CredentialKind.API_KEY:
            user = lookup_by_api_key(presented_credential)
            if user is None:
                return None
            return AuthenticatedIdentity(user_id=user.id)

        payload = self.verify_token(presented_credential, now)
        if payload is None:
            return None
        return AuthenticatedIdentity(user_id=payload["user_id"])

    def _sign(self, payload_part: str) -> str:
        return hmac.new(self._secret, payload_part.encode(), hashlib.sha256).hexdigest()
