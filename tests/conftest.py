"""
tests/conftest.py
─────────────────
Shared pytest fixtures for the AQ Monitor test suite.
"""
import os
from datetime import datetime, timedelta, timezone

import pytest

# Keep tests independent of the developer's environment
os.environ.setdefault("RECENCY_HORIZON_S", "3600")
os.environ.setdefault("PROXIMITY_TOLERANCE_DEG", "0.01")

from tests.fakes import FakeClock  # noqa: E402


@pytest.fixture
def now() -> datetime:
    return datetime(2024, 6, 1, 12, 0, 0, tzinfo=timezone.utc)


@pytest.fixture
def clock(now) -> FakeClock:
    return FakeClock(now)


@pytest.fixture
def make_record(now):
    from src.data.models import AnomalyRecord

    def _make(
        id: str = "a-1",
        parameter: str = "PM2.5",
        value: float = 30.0,
        latitude: float = 10.0,
        longitude: float = 20.0,
        minutes_ago: float = 0.0,
        kind: str | None = "ThresholdExceeded",
    ) -> AnomalyRecord:
        return AnomalyRecord(
            id=id,
            parameter=parameter,
            value=value,
            latitude=latitude,
            longitude=longitude,
            detected_at=now - timedelta(minutes=minutes_ago),
            type=kind,
        )

    return _make


@pytest.fixture
def pull_payload() -> list[dict]:
    """Three records as the notifier service returns them."""
    return [
        {
            "id": "5b0e3c1e-0000-4000-8000-000000000001",
            "type": "StatisticalOutlier",
            "parameter": "PM2.5",
            "value": 5.0,
            "latitude": 52.52,
            "longitude": 13.405,
            "detected_at": "2024-06-01T10:00:00Z",
            "air_quality_data_id": "00000000-0000-0000-0000-000000000000",
            "air_quality_data_timestamp": "0001-01-01T00:00:00Z",
        },
        {
            "id": "5b0e3c1e-0000-4000-8000-000000000002",
            "type": "SpikeDetected",
            "parameter": "PM2.5",
            "value": 30.0,
            "latitude": 52.521,
            "longitude": 13.404,
            "detected_at": "2024-06-01T11:00:00Z",
            "air_quality_data_id": "9d1f6a4c-0000-4000-8000-0000000000aa",
            "air_quality_data_timestamp": "2024-06-01T10:59:58Z",
        },
        {
            "id": "5b0e3c1e-0000-4000-8000-000000000003",
            "type": "ThresholdExceeded",
            "parameter": "PM2.5",
            "value": 60.0,
            "latitude": 48.8566,
            "longitude": 2.3522,
            "detected_at": "2024-06-01T11:30:00Z",
        },
    ]
