"""
tests/test_fetcher.py
──────────────────────
Tests for the service HTTP clients and the windowed snapshot fetcher,
driven through httpx.MockTransport.
"""
import asyncio
import json
from datetime import datetime, timezone

import httpx
import pytest

from src.data.api import IngestClient, NotifierClient
from src.data.fetcher import SnapshotFetcher
from src.data.models import Measurement
from src.errors import FetchError


def _notifier(handler) -> NotifierClient:
    client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    return NotifierClient("http://notifier.test/", client)


def _fetch(handler, hours: int = 24):
    return asyncio.run(SnapshotFetcher(_notifier(handler)).fetch(hours))


class TestSnapshotFetcher:
    def test_decodes_records_in_order(self, pull_payload):
        records = _fetch(lambda request: httpx.Response(200, json=pull_payload))
        assert [r.value for r in records] == [5.0, 30.0, 60.0]
        assert records[0].detected_at == datetime(2024, 6, 1, 10, 0, tzinfo=timezone.utc)

    def test_sends_window_as_hours_param(self):
        seen = []

        def handler(request):
            seen.append(request.url)
            return httpx.Response(200, json=[])

        _fetch(handler, hours=12)
        assert seen[0].path == "/api/anomalies"
        assert seen[0].params["hours"] == "12"
        assert seen[0].host == "notifier.test"

    def test_null_body_is_empty(self):
        assert _fetch(lambda request: httpx.Response(200, content=b"null")) == []

    def test_non_list_body_fails(self):
        with pytest.raises(FetchError):
            _fetch(lambda request: httpx.Response(200, json={"anomalies": []}))

    def test_error_status_carries_message(self):
        handler = lambda request: httpx.Response(500, json={"error": "Failed to retrieve anomalies"})
        with pytest.raises(FetchError) as info:
            _fetch(handler)
        assert info.value.status_code == 500
        assert info.value.message == "Failed to retrieve anomalies"
        assert str(info.value) == "Failed to retrieve anomalies (status=500)"

    def test_error_status_without_body(self):
        with pytest.raises(FetchError) as info:
            _fetch(lambda request: httpx.Response(503))
        assert info.value.status_code == 503
        assert info.value.message == "Service Unavailable"

    def test_network_failure_has_no_status(self):
        def handler(request):
            raise httpx.ConnectError("connection refused", request=request)

        with pytest.raises(FetchError) as info:
            _fetch(handler)
        assert info.value.status_code is None

    def test_invalid_json_fails(self):
        with pytest.raises(FetchError):
            _fetch(lambda request: httpx.Response(200, content=b"<html>"))

    def test_malformed_elements_dropped(self, pull_payload):
        body = [pull_payload[0], {"id": "broken"}, "garbage", pull_payload[2]]
        records = _fetch(lambda request: httpx.Response(200, json=body))
        assert [r.id for r in records] == [pull_payload[0]["id"], pull_payload[2]["id"]]

    @pytest.mark.parametrize("hours", [0, -6])
    def test_non_positive_window_rejected(self, hours):
        calls = []

        def handler(request):
            calls.append(request)
            return httpx.Response(200, json=[])

        with pytest.raises(ValueError):
            _fetch(handler, hours=hours)
        assert calls == []


class TestServiceClients:
    def test_health(self):
        notifier = _notifier(lambda request: httpx.Response(200, json={"status": "ok"}))
        assert asyncio.run(notifier.health()) == {"status": "ok"}

    def test_ingest_submit_posts_measurement(self, now):
        captured = []

        def handler(request):
            captured.append(request)
            return httpx.Response(201, json={"status": "accepted"})

        ingest = IngestClient(
            "http://ingest.test",
            httpx.AsyncClient(transport=httpx.MockTransport(handler)),
        )
        measurement = Measurement(latitude=45.0, longitude=9.0, parameter="NO2", value=42.0, timestamp=now)

        assert asyncio.run(ingest.submit(measurement)) == {"status": "accepted"}
        request = captured[0]
        assert request.method == "POST"
        assert request.url.path == "/api/data"
        body = json.loads(request.content)
        assert body["parameter"] == "NO2"
        assert body["value"] == 42.0

    def test_ingest_rejection(self, now):
        ingest = IngestClient(
            "http://ingest.test",
            httpx.AsyncClient(
                transport=httpx.MockTransport(lambda request: httpx.Response(400, json={"error": "Invalid data"}))
            ),
        )
        measurement = Measurement(latitude=45.0, longitude=9.0, parameter="NO2", value=42.0, timestamp=now)
        with pytest.raises(FetchError) as info:
            asyncio.run(ingest.submit(measurement))
        assert info.value.status_code == 400
