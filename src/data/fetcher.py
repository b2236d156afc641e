"""
src/data/fetcher.py
───────────────────
Windowed snapshot fetcher: the pull half of the live feed.
"""
from __future__ import annotations

import logging

from src.data.api import NotifierClient
from src.data.models import AnomalyRecord
from src.errors import DecodeError

logger = logging.getLogger(__name__)


class SnapshotFetcher:
    def __init__(self, client: NotifierClient) -> None:
        self._client = client

    async def fetch(self, window_hours: int) -> list[AnomalyRecord]:
        """
        Fetch the anomaly dataset for the last `window_hours` hours.

        Malformed elements are logged and skipped. Transport failures raise
        FetchError; the caller owns the retry policy.
        """
        if window_hours <= 0:
            raise ValueError(f"window_hours must be positive, got {window_hours}")

        raw = await self._client.get_anomalies(window_hours)
        records: list[AnomalyRecord] = []
        for item in raw:
            try:
                records.append(AnomalyRecord.from_pull(item))
            except DecodeError as exc:
                logger.warning("Dropping malformed anomaly record: %s (%s)", exc.message, exc.preview)
        return records
