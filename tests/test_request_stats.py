"""Tests for the request counters reported by GET /metrics."""

from unittest.mock import Mock

from fastapi.testclient import TestClient

from catalog_api.core.metrics import RequestStats

DAY = 86_400.0


def test_empty_snapshot() -> None:
    stats = RequestStats(clock=Mock(return_value=DAY))

    assert stats.snapshot() == {
        "total_requests": 0,
        "requests_today": 0,
        "avg_response_time_ms": 0.0,
        "error_rate": 0.0,
    }


def test_average_and_error_rate() -> None:
    stats = RequestStats(clock=Mock(return_value=DAY))

    stats.record(200, 10.0)
    stats.record(201, 20.0)
    stats.record(404, 30.0)
    stats.record(500, 40.0)

    snap = stats.snapshot()
    assert snap["total_requests"] == 4
    assert snap["avg_response_time_ms"] == 25.0
    assert snap["error_rate"] == 50.0


def test_requests_today_rolls_over_at_utc_midnight() -> None:
    clock = Mock(return_value=DAY + 10)
    stats = RequestStats(clock=clock)
    stats.record(200, 1.0)
    stats.record(200, 1.0)

    clock.return_value = 2 * DAY + 10
    assert stats.snapshot()["requests_today"] == 0

    stats.record(200, 1.0)
    snap = stats.snapshot()
    assert snap["requests_today"] == 1
    assert snap["total_requests"] == 3


def test_reset_clears_counters() -> None:
    stats = RequestStats(clock=Mock(return_value=DAY))
    stats.record(500, 5.0)

    stats.reset()

    assert stats.snapshot()["total_requests"] == 0


def test_metrics_endpoint_counts_served_requests(client: TestClient) -> None:
    client.get("/health")
    client.get("/v1/products/999")

    body = client.get("/metrics").json()["requests"]

    # The /metrics call itself is still in flight when the snapshot is taken.
    assert body["total_requests"] == 2
    assert body["error_rate"] == 50.0
    assert body["avg_response_time_ms"] >= 0
    assert body["requests_today"] == 2


def test_admission_rejections_are_counted(make_app) -> None:
    client = TestClient(make_app(max_requests=1))

    client.get("/v1/products")
    client.get("/v1/products")

    snap = client.app.state.request_stats.snapshot()
    assert snap["total_requests"] == 2
    assert snap["error_rate"] == 50.0
