"""Admission controller interfaces.

The HTTP layer should depend on this abstraction (not the concrete
implementation) so the storage backend can be swapped with minimal changes.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any

RATE_LIMITED = "rate_limited"
BLOCKED = "blocked"


@dataclass(frozen=True)
class AdmissionResult:
    """Result of an admission check.

    Attributes:
        allowed: Whether the request is admitted.
        reason: None when admitted, otherwise ``"rate_limited"`` or ``"blocked"``.
        limit: Max requests per window.
        remaining: Remaining requests in the trailing window (0 when rejected).
        retry_after_seconds: Suggested wait time in seconds when rejected.
    """

    allowed: bool
    reason: str | None
    limit: int
    remaining: int
    retry_after_seconds: int | None


class AbstractAdmissionController(ABC):
    """Interface for per-client admission controllers."""

    def allow(self, client_id: str, now: float | None = None) -> bool:
        """Return True if a request from ``client_id`` is admitted."""
        return self.check(client_id, now).allowed

    @abstractmethod
    def check(self, client_id: str, now: float | None = None) -> AdmissionResult:
        """Run the lockout gate and the sliding window for one request.

        Args:
            client_id: Client identifier (typically the source address).
            now: Optional UNIX time override; defaults to the controller clock.

        Returns:
            AdmissionResult describing the decision.
        """
        raise NotImplementedError

    @abstractmethod
    def record_auth_failure(self, client_id: str, now: float | None = None) -> None:
        """Count one failed authentication attempt for ``client_id``."""
        raise NotImplementedError

    @abstractmethod
    def record_auth_success(self, client_id: str) -> None:
        """Reset the consecutive failure count for ``client_id``."""
        raise NotImplementedError

    @abstractmethod
    def stats(self) -> dict[str, Any]:
        """Return lightweight counters without exposing client ids."""
        raise NotImplementedError

    @abstractmethod
    def reset(self) -> None:
        """Drop all tracked state."""
        raise NotImplementedError
