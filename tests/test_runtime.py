"""
tests/test_runtime.py
──────────────────────
End-to-end check of LiveFeed on its background loop, with the HTTP and
push transports replaced by in-memory fakes.
"""
import concurrent.futures
import json
import logging
import time

import httpx
import pytest

from config.settings import Settings
from src.runtime import LiveFeed, _log_failure
from src.stream.client import ConnectionState
from tests.fakes import FakeTransport


def _poll(predicate, timeout: float = 3.0) -> None:
    deadline = time.monotonic() + timeout
    while time.monotonic() < deadline:
        if predicate():
            return
        time.sleep(0.01)
    raise AssertionError("condition not reached")


@pytest.fixture
def live_feed(pull_payload):
    requests = []

    def handler(request):
        if request.url.path == "/health":
            if request.url.host == "ingest.test":
                return httpx.Response(503, json={"error": "database unavailable"})
            return httpx.Response(200, json={"status": "ok"})
        requests.append(request)
        return httpx.Response(200, json=pull_payload)

    config = Settings(
        NOTIFIER_API_URL="http://notifier.test",
        INGEST_API_URL="http://ingest.test",
        ALERTS_WS_URL="ws://notifier.test/ws/alerts",
        REFRESH_INTERVAL_S=3600,
        PRUNE_INTERVAL_S=3600,
        WINDOW_DEBOUNCE_S=0.01,
        DEFAULT_WINDOW_HOURS=24,
    )
    transport = FakeTransport()
    feed = LiveFeed(
        config,
        transport=transport,
        http_client=httpx.AsyncClient(transport=httpx.MockTransport(handler)),
    )
    feed.start()
    yield feed, transport, requests
    feed.stop()


class TestLiveFeed:
    def test_initial_snapshot_and_connection(self, live_feed):
        feed, transport, requests = live_feed
        _poll(lambda: len(feed.view().records) == 3)

        view, state = feed.snapshot()
        assert state is ConnectionState.CONNECTED
        assert [r.value for r in view.records] == [5.0, 30.0, 60.0]
        assert requests[0].url.params["hours"] == "24"

    def test_pushed_alert_reaches_view(self, live_feed):
        feed, transport, _ = live_feed
        _poll(lambda: transport.connections and feed.snapshot()[1] is ConnectionState.CONNECTED)

        message = json.dumps(
            {
                "parameter": "PM2.5",
                "value": 300.0,
                "type": "ThresholdExceeded",
                "location": [10.0, 20.0],
                "timestamp": "2024-06-01T12:00:00Z",
            }
        )
        feed._loop.call_soon_threadsafe(transport.connections[0].inbox.put_nowait, message)
        _poll(lambda: feed.view().alerts)

        view = feed.view()
        assert view.alerts[0].record.value == 300.0
        assert view.find(view.alerts[0].id) is not None

    def test_window_change_refetches(self, live_feed):
        feed, _, requests = live_feed
        _poll(lambda: requests)

        assert feed.window_hours() == 24
        feed.change_window(6)
        _poll(lambda: any(r.url.params["hours"] == "6" for r in requests))
        assert feed.view().window_hours == 6
        assert feed.window_hours() == 6

    def test_refresh_now(self, live_feed):
        feed, _, requests = live_feed
        _poll(lambda: len(requests) == 1)
        feed.refresh_now()
        _poll(lambda: len(requests) == 2)

    def test_health_reports_each_service(self, live_feed):
        feed, _, _ = live_feed
        report = feed.health()

        assert report["notifier"] == {"ok": True, "response": {"status": "ok"}}
        assert report["ingest"] == {"ok": False, "error": "database unavailable", "status_code": 503}


class TestRefreshFailureLogging:
    def test_unexpected_error_is_logged(self, caplog):
        future = concurrent.futures.Future()
        future.set_exception(RuntimeError("decoder crashed"))
        with caplog.at_level(logging.ERROR, logger="src.runtime"):
            _log_failure(future)
        assert "On-demand refresh failed" in caplog.text
        assert "decoder crashed" in caplog.text

    def test_success_and_cancel_are_quiet(self, caplog):
        done = concurrent.futures.Future()
        done.set_result(True)
        cancelled = concurrent.futures.Future()
        cancelled.cancel()
        with caplog.at_level(logging.ERROR, logger="src.runtime"):
            _log_failure(done)
            _log_failure(cancelled)
        assert caplog.records == []


class TestLiveFeedNotRunning:
    def test_reads_require_start(self):
        with pytest.raises(RuntimeError):
            LiveFeed().snapshot()

    def test_stop_without_start_is_noop(self):
        LiveFeed().stop()

    def test_window_defaults_before_start(self):
        assert LiveFeed(Settings(DEFAULT_WINDOW_HOURS=48)).window_hours() == 48

    def test_health_requires_start(self):
        with pytest.raises(RuntimeError):
            LiveFeed().health()
