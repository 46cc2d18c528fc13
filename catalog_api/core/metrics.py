"""In-process request counters behind ``GET /metrics``.

Aggregates only: no paths with ids, client addresses or credentials are kept.
"""

from __future__ import annotations

import threading
import time
from dataclasses import dataclass, field
from datetime import date, datetime, timezone
from typing import Any, Callable


@dataclass
class RequestStats:
    """Thread-safe totals of served requests.

    Every response counts, including admission rejections; ``error_rate`` is
    the percentage of responses with status >= 400.
    """

    clock: Callable[[], float] = time.time
    _lock: threading.Lock = field(default_factory=threading.Lock, repr=False)
    _total: int = 0
    _errors: int = 0
    _total_duration_ms: float = 0.0
    _today: date | None = None
    _today_count: int = 0

    def record(self, status_code: int, duration_ms: float) -> None:
        day = datetime.fromtimestamp(self.clock(), tz=timezone.utc).date()
        with self._lock:
            self._total += 1
            self._total_duration_ms += duration_ms
            if status_code >= 400:
                self._errors += 1
            if day != self._today:
                self._today = day
                self._today_count = 0
            self._today_count += 1

    def snapshot(self) -> dict[str, Any]:
        today = datetime.fromtimestamp(self.clock(), tz=timezone.utc).date()
        with self._lock:
            total = self._total
            return {
                "total_requests": total,
                "requests_today": self._today_count if self._today == today else 0,
                "avg_response_time_ms": round(self._total_duration_ms / total, 2) if total else 0.0,
                "error_rate": round(self._errors * 100.0 / total, 2) if total else 0.0,
            }

    def reset(self) -> None:
        with self._lock:
            self._total = 0
            self._errors = 0
            self._total_duration_ms = 0.0
            self._today = None
            self._today_count = 0
