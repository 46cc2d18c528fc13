"""In-memory sliding-window admission controller with auth-failure lockout.

Notes:
- Per-process only: running multiple workers multiplies the effective limit.
- Thread-safe: each client record has its own lock; the registry lock is only
  held to look up, insert or evict records.
- No background thread: expired timestamps are pruned on each check and idle
  records are swept lazily at most once per ``sweep_interval_seconds``.
"""

from __future__ import annotations

import logging
import math
import threading
import time
from collections import OrderedDict, deque
from contextlib import contextmanager
from dataclasses import dataclass, field
from typing import Any, Callable, Iterator

from catalog_api.adapters.admission.base import (
    BLOCKED,
    RATE_LIMITED,
    AbstractAdmissionController,
    AdmissionResult,
)
from catalog_api.core.logging import fingerprint

logger = logging.getLogger(__name__)


@dataclass(eq=False)
class _ClientRecord:
    """Window and lockout state for one client identifier."""

    lock: threading.Lock = field(default_factory=threading.Lock)
    timestamps: deque[float] = field(default_factory=deque)
    failure_count: int = 0
    blocked_until: float | None = None
    last_seen: float = 0.0
    evicted: bool = False


class InMemoryAdmissionController(AbstractAdmissionController):
    """Admission controller combining a sliding window and a lockout gate.

    The lockout gate is evaluated first: once a client accumulates
    ``lockout_threshold`` consecutive authentication failures it is rejected
    until ``lockout_duration_seconds`` have elapsed, regardless of spare
    window capacity. The first check after the block expires clears the
    failure state and falls through to the sliding window.

    Important:
        This controller is per-process only. If the API runs with multiple
        workers, each worker enforces its own independent limits.
    """

    def __init__(
        self,
        *,
        max_requests: int = 100,
        window_seconds: float = 60,
        lockout_threshold: int = 5,
        lockout_duration_seconds: float = 900,
        max_tracked_clients: int = 10_000,
        sweep_interval_seconds: float = 60,
        clock: Callable[[], float] = time.time,
    ) -> None:
        """Initialize the in-memory admission controller.

        Args:
            max_requests: Maximum admitted requests per sliding window.
            window_seconds: Width of the sliding window in seconds.
            lockout_threshold: Consecutive failures that trigger a lockout.
            lockout_duration_seconds: Block duration once triggered.
            max_tracked_clients: Upper bound on tracked client records.
            sweep_interval_seconds: Minimum spacing between idle sweeps.
            clock: Time source function returning UNIX time in seconds.

        Raises:
            ValueError: If any limit or duration is invalid.
        """
        if max_requests < 1:
            raise ValueError("max_requests must be >= 1")
        if window_seconds <= 0:
            raise ValueError("window_seconds must be > 0")
        if lockout_threshold < 1:
            raise ValueError("lockout_threshold must be >= 1")
        if lockout_duration_seconds <= 0:
            raise ValueError("lockout_duration_seconds must be > 0")
        if max_tracked_clients < 1:
            raise ValueError("max_tracked_clients must be >= 1")
        if sweep_interval_seconds <= 0:
            raise ValueError("sweep_interval_seconds must be > 0")

        self._max_requests = max_requests
        self._window_seconds = window_seconds
        self._lockout_threshold = lockout_threshold
        self._lockout_duration = lockout_duration_seconds
        self._max_tracked_clients = max_tracked_clients
        self._sweep_interval = sweep_interval_seconds
        self._clock = clock

        self._registry_lock = threading.Lock()
        self._records: OrderedDict[str, _ClientRecord] = OrderedDict()
        self._last_sweep: float | None = None
        self._evictions = 0

        self._stats_lock = threading.Lock()
        self._admitted = 0
        self._rate_limited = 0
        self._blocked = 0

    def __repr__(self) -> str:  # pragma: no cover - representation only
        return (
            f"InMemoryAdmissionController(max_requests={self._max_requests}, "
            f"window_seconds={self._window_seconds}, "
            f"lockout_threshold={self._lockout_threshold}, "
            f"lockout_duration_seconds={self._lockout_duration}, "
            f"tracked={len(self._records)})"
        )

    def check(self, client_id: str, now: float | None = None) -> AdmissionResult:
        """Admit or reject one request from ``client_id``.

        Args:
            client_id: Client identifier (e.g., source IP).
            now: Optional UNIX time override.

        Returns:
            AdmissionResult with the decision and window metadata.

        Raises:
            ValueError: If client_id is empty.
        """
        if not client_id:
            raise ValueError("client_id must be a non-empty string")

        now = self._clock() if now is None else now
        self._maybe_sweep(now)

        with self._locked_record(client_id, now) as record:
            if record.failure_count >= self._lockout_threshold:
                if record.blocked_until is not None and now < record.blocked_until:
                    self._count(BLOCKED)
                    return AdmissionResult(
                        allowed=False,
                        reason=BLOCKED,
                        limit=self._max_requests,
                        remaining=0,
                        retry_after_seconds=max(1, math.ceil(record.blocked_until - now)),
                    )
                record.failure_count = 0
                record.blocked_until = None
                logger.info(
                    "admission.lockout_cleared",
                    extra={"client_hash": fingerprint(client_id)},
                )

            self._prune(record, now)

            if len(record.timestamps) < self._max_requests:
                record.timestamps.append(now)
                self._count(None)
                return AdmissionResult(
                    allowed=True,
                    reason=None,
                    limit=self._max_requests,
                    remaining=self._max_requests - len(record.timestamps),
                    retry_after_seconds=None,
                )

            oldest = min(record.timestamps)
            self._count(RATE_LIMITED)
            return AdmissionResult(
                allowed=False,
                reason=RATE_LIMITED,
                limit=self._max_requests,
                remaining=0,
                retry_after_seconds=max(1, math.ceil(oldest + self._window_seconds - now)),
            )

    def record_auth_failure(self, client_id: str, now: float | None = None) -> None:
        """Count one failed authentication attempt.

        Each call counts exactly one failure; callers must call it once per
        failed attempt. Reaching the threshold (re)arms the block.

        Raises:
            ValueError: If client_id is empty.
        """
        if not client_id:
            raise ValueError("client_id must be a non-empty string")

        now = self._clock() if now is None else now

        with self._locked_record(client_id, now) as record:
            record.failure_count += 1
            if record.failure_count >= self._lockout_threshold:
                record.blocked_until = now + self._lockout_duration
                logger.warning(
                    "admission.lockout_triggered",
                    extra={
                        "client_hash": fingerprint(client_id),
                        "failure_count": record.failure_count,
                        "lockout_s": self._lockout_duration,
                    },
                )

    def record_auth_success(self, client_id: str) -> None:
        """Reset the consecutive failure count after a successful login.

        An active block is left in place; it expires on its own.
        """
        with self._registry_lock:
            record = self._records.get(client_id)
        if record is None:
            return

        with record.lock:
            if record.evicted or record.blocked_until is not None:
                return
            record.failure_count = 0

    def stats(self) -> dict[str, Any]:
        """Return lightweight admission metrics without exposing client ids."""

        now = self._clock()
        with self._registry_lock:
            tracked = len(self._records)
            blocked_clients = sum(
                1
                for record in self._records.values()
                if record.blocked_until is not None and now < record.blocked_until
            )
            evictions = self._evictions

        with self._stats_lock:
            return {
                "max_requests": self._max_requests,
                "window_seconds": self._window_seconds,
                "lockout_threshold": self._lockout_threshold,
                "lockout_duration_seconds": self._lockout_duration,
                "tracked_clients": tracked,
                "blocked_clients": blocked_clients,
                "admitted": self._admitted,
                "rejected_rate_limited": self._rate_limited,
                "rejected_blocked": self._blocked,
                "evictions": evictions,
            }

    def reset(self) -> None:
        """Remove all client records and reset counters."""

        with self._registry_lock:
            for record in self._records.values():
                record.evicted = True
            self._records.clear()
            self._last_sweep = None
            self._evictions = 0

        with self._stats_lock:
            self._admitted = 0
            self._rate_limited = 0
            self._blocked = 0

    @contextmanager
    def _locked_record(self, client_id: str, now: float) -> Iterator[_ClientRecord]:
        """Yield the client's record with its lock held.

        A record evicted between lookup and lock acquisition is discarded and
        the lookup retried, so no update lands on an orphaned record.
        """
        while True:
            record = self._get_or_create(client_id, now)
            record.lock.acquire()
            if not record.evicted:
                break
            record.lock.release()

        try:
            yield record
        finally:
            record.last_seen = now
            record.lock.release()

    def _get_or_create(self, client_id: str, now: float) -> _ClientRecord:
        with self._registry_lock:
            record = self._records.get(client_id)
            if record is not None:
                self._records.move_to_end(client_id)
                return record

            record = _ClientRecord(last_seen=now)
            self._records[client_id] = record
            if len(self._records) > self._max_tracked_clients:
                self._evict_over_capacity_locked(now, keep=client_id)
            return record

    def _prune(self, record: _ClientRecord, now: float) -> None:
        # Filter instead of popping from the left: callers may pass explicit
        # timestamps out of order.
        if any(now - ts >= self._window_seconds for ts in record.timestamps):
            record.timestamps = deque(
                ts for ts in record.timestamps if now - ts < self._window_seconds
            )

    def _is_idle(self, record: _ClientRecord, now: float) -> bool:
        if any(now - ts < self._window_seconds for ts in record.timestamps):
            return False
        if self._is_blocked(record, now):
            return False
        if record.failure_count and now - record.last_seen < self._lockout_duration:
            return False
        return True

    def _is_blocked(self, record: _ClientRecord, now: float) -> bool:
        return record.blocked_until is not None and now < record.blocked_until

    def _maybe_sweep(self, now: float) -> None:
        with self._registry_lock:
            if self._last_sweep is None:
                self._last_sweep = now
                return
            if now - self._last_sweep < self._sweep_interval:
                return
            self._last_sweep = now

            swept = 0
            for client_id, record in list(self._records.items()):
                if self._try_evict_locked(client_id, record, now, idle_only=True):
                    swept += 1

        if swept:
            logger.debug("admission.sweep", extra={"evicted": swept})

    def _evict_over_capacity_locked(self, now: float, *, keep: str) -> None:
        # Least recently seen idle records go first, then any record that is
        # not serving a lockout. Blocked clients are never evicted, so the
        # registry may stay above capacity while every record is blocked.
        for idle_only in (True, False):
            for client_id, record in list(self._records.items()):
                if len(self._records) <= self._max_tracked_clients:
                    return
                if client_id == keep:
                    continue
                self._try_evict_locked(client_id, record, now, idle_only=idle_only)

    def _try_evict_locked(
        self,
        client_id: str,
        record: _ClientRecord,
        now: float,
        *,
        idle_only: bool,
    ) -> bool:
        # Never wait on a record lock while holding the registry lock.
        if not record.lock.acquire(blocking=False):
            return False
        try:
            if idle_only and not self._is_idle(record, now):
                return False
            if self._is_blocked(record, now):
                return False
            record.evicted = True
            del self._records[client_id]
            self._evictions += 1
            return True
        finally:
            record.lock.release()

    def _count(self, reason: str | None) -> None:
        with self._stats_lock:
            if reason is None:
                self._admitted += 1
            elif reason == BLOCKED:
                self._blocked += 1
            else:
                self._rate_limited += 1
