"""
src/data/reconciler.py
──────────────────────
Single-writer owner of the reconciled anomaly view.

Two producers feed it:
  - refresh()       : windowed pull snapshot, swapped in wholesale
  - ingest_pushed() : pushed alerts, appended to the active-alert list and
                      merged into the pull window when their id is new

Ordering rules:
  - "last call wins": every refresh() takes a token; a result whose token
    is no longer the newest is discarded, even if it resolves last
  - active alerts are newest-received first and age out by received_at

All mutation happens on the event loop that runs start(); readers get
frozen ReconciledView snapshots.
"""
from __future__ import annotations

import asyncio
import bisect
import logging
from collections.abc import Callable, Iterable
from dataclasses import dataclass
from datetime import UTC, datetime, timedelta
from typing import Any, Protocol

from config.settings import settings
from src.data.models import AlertEvent, AnomalyRecord
from src.errors import DecodeError, FetchError, StaleDataWarning

logger = logging.getLogger(__name__)

Observer = Callable[["ReconciledView"], None]


class Fetcher(Protocol):
    async def fetch(self, window_hours: int) -> list[AnomalyRecord]: ...


def _utcnow() -> datetime:
    return datetime.now(tz=UTC)


@dataclass(frozen=True)
class ReconciledView:
    records: tuple[AnomalyRecord, ...]
    alerts: tuple[AlertEvent, ...]
    window_hours: int
    last_refreshed_at: datetime | None = None
    last_error: str | None = None
    stale_warning: StaleDataWarning | None = None
    refreshing: bool = False

    def find(self, record_id: str) -> AnomalyRecord | None:
        for record in self.records:
            if record.id == record_id:
                return record
        return None


def _dedupe_sorted(records: Iterable[AnomalyRecord]) -> tuple[AnomalyRecord, ...]:
    seen: set[str] = set()
    unique: list[AnomalyRecord] = []
    for record in records:
        if record.id in seen:
            continue
        seen.add(record.id)
        unique.append(record)
    unique.sort(key=lambda r: r.detected_at)
    return tuple(unique)


class AnomalyReconciler:
    def __init__(
        self,
        fetcher: Fetcher,
        *,
        window_hours: int | None = None,
        horizon: timedelta | None = None,
        refresh_interval: float | None = None,
        prune_interval: float | None = None,
        debounce: float | None = None,
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        self._fetcher = fetcher
        self._window_hours = window_hours or settings.DEFAULT_WINDOW_HOURS
        self.horizon = horizon or timedelta(seconds=settings.RECENCY_HORIZON_S)
        self.refresh_interval = settings.REFRESH_INTERVAL_S if refresh_interval is None else refresh_interval
        self.prune_interval = settings.PRUNE_INTERVAL_S if prune_interval is None else prune_interval
        self.debounce = settings.WINDOW_DEBOUNCE_S if debounce is None else debounce
        self._clock = clock

        self._records: tuple[AnomalyRecord, ...] = ()
        self._record_ids: frozenset[str] = frozenset()
        self._alerts: list[AlertEvent] = []  # newest received first

        self._token = 0
        self._in_flight = 0
        self._last_refreshed_at: datetime | None = None
        self._last_error: str | None = None

        self._observers: list[Observer] = []
        self._tasks: set[asyncio.Task] = set()
        self._debounce_handle: asyncio.TimerHandle | None = None
        self._running = False

    # ── Pull ──────────────────────────────────────────────────────────────────

    @property
    def window_hours(self) -> int:
        return self._window_hours

    async def refresh(self, window_hours: int | None = None) -> bool:
        """
        Pull a fresh snapshot and swap it in.

        Returns True when this call's result was applied. A failed refresh
        keeps the previous snapshot and records the error; a superseded one
        is dropped silently.
        """
        if window_hours is not None:
            self._window_hours = window_hours
        hours = self._window_hours

        self._token += 1
        token = self._token
        self._in_flight += 1
        try:
            records = await self._fetcher.fetch(hours)
        except FetchError as exc:
            if token != self._token:
                logger.debug("Ignoring failure of superseded refresh #%d", token)
                return False
            self._last_error = str(exc)
            logger.warning("Refresh (%dh) failed, keeping previous snapshot: %s", hours, exc)
            self._notify()
            return False
        finally:
            self._in_flight -= 1

        if token != self._token:
            logger.debug("Discarding superseded refresh #%d (latest is #%d)", token, self._token)
            return False

        self._records = _dedupe_sorted(records)
        self._record_ids = frozenset(r.id for r in self._records)
        self._last_refreshed_at = self._clock()
        self._last_error = None
        logger.info("Refreshed %d anomalies for the last %dh", len(self._records), hours)
        self._notify()
        return True

    def change_window(self, window_hours: int) -> None:
        """Switch the look-back window; refreshes once after the debounce delay."""
        if window_hours <= 0:
            raise ValueError(f"window_hours must be positive, got {window_hours}")
        if window_hours == self._window_hours:
            return
        self._window_hours = window_hours

        if self._debounce_handle is not None:
            self._debounce_handle.cancel()
        loop = asyncio.get_running_loop()
        self._debounce_handle = loop.call_later(self.debounce, self._spawn_refresh)

    def _spawn_refresh(self) -> None:
        self._debounce_handle = None
        self._track(asyncio.get_running_loop().create_task(self.refresh()))

    # ── Push ──────────────────────────────────────────────────────────────────

    def ingest_pushed(self, record: AnomalyRecord, received_at: datetime | None = None) -> AlertEvent:
        event = AlertEvent(record=record, received_at=received_at or self._clock())
        self._alerts.insert(0, event)

        if record.id not in self._record_ids:
            merged = list(self._records)
            bisect.insort(merged, record, key=lambda r: r.detected_at)
            self._records = tuple(merged)
            self._record_ids = self._record_ids | {record.id}

        self._notify()
        return event

    def ingest_payload(self, payload: Any) -> AlertEvent | None:
        """Decode a pushed message and ingest it; malformed payloads are dropped."""
        try:
            record = AnomalyRecord.from_push(payload)
        except DecodeError as exc:
            logger.warning("Dropping malformed pushed alert: %s (%s)", exc.message, exc.preview)
            return None
        return self.ingest_pushed(record)

    # ── Recency ───────────────────────────────────────────────────────────────

    def prune_expired(self, now: datetime | None = None) -> int:
        """Drop alerts received before now - horizon (the boundary itself stays)."""
        cutoff = (now or self._clock()) - self.horizon
        kept = [e for e in self._alerts if e.received_at >= cutoff]
        removed = len(self._alerts) - len(kept)
        if removed:
            self._alerts = kept
        return removed

    # ── Read accessors ────────────────────────────────────────────────────────

    def records(self) -> tuple[AnomalyRecord, ...]:
        return self._records

    def active_alerts(self, now: datetime | None = None) -> tuple[AlertEvent, ...]:
        self.prune_expired(now)
        return tuple(self._alerts)

    def view(self, now: datetime | None = None) -> ReconciledView:
        alerts = self.active_alerts(now)
        warning = None
        if self._last_error is not None and self._last_refreshed_at is not None:
            warning = StaleDataWarning(self._last_error, self._last_refreshed_at)
        return ReconciledView(
            records=self._records,
            alerts=alerts,
            window_hours=self._window_hours,
            last_refreshed_at=self._last_refreshed_at,
            last_error=self._last_error,
            stale_warning=warning,
            refreshing=self._in_flight > 0,
        )

    def subscribe(self, observer: Observer) -> Callable[[], None]:
        self._observers.append(observer)
        return lambda: self._observers.remove(observer)

    def _notify(self) -> None:
        if not self._observers:
            return
        view = self.view()
        for observer in list(self._observers):
            try:
                observer(view)
            except Exception:
                logger.exception("Reconciler observer failed")

    # ── Scheduling ────────────────────────────────────────────────────────────

    async def start(self) -> None:
        """Begin the refresh cadence (first refresh immediately) and pruning tick."""
        if self._running:
            return
        self._running = True
        loop = asyncio.get_running_loop()
        self._track(loop.create_task(self._refresh_loop(), name="reconciler-refresh"))
        self._track(loop.create_task(self._prune_loop(), name="reconciler-prune"))

    async def stop(self) -> None:
        self._running = False
        if self._debounce_handle is not None:
            self._debounce_handle.cancel()
            self._debounce_handle = None
        tasks = list(self._tasks)
        for task in tasks:
            task.cancel()
        await asyncio.gather(*tasks, return_exceptions=True)
        self._tasks.clear()

    def _track(self, task: asyncio.Task) -> None:
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)

    async def _refresh_loop(self) -> None:
        while True:
            try:
                await self.refresh()
            except Exception:
                logger.exception("Unexpected refresh failure")
            await asyncio.sleep(self.refresh_interval)

    async def _prune_loop(self) -> None:
        while True:
            await asyncio.sleep(self.prune_interval)
            if self.prune_expired():
                self._notify()
