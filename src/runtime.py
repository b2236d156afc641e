"""
src/runtime.py
──────────────
LiveFeed: hosts the stream client and reconciler on a private asyncio loop.

Dash callbacks run on Flask worker threads. They never touch the core
objects directly; every read and command is marshalled onto the feed's
loop, so the reconciler keeps a single writer.
"""
from __future__ import annotations

import asyncio
import concurrent.futures
import logging
import threading
from datetime import timedelta
from typing import Any

from config.settings import Settings, settings as default_settings
from src.data.api import IngestClient, NotifierClient, create_async_client
from src.data.fetcher import SnapshotFetcher
from src.data.reconciler import AnomalyReconciler, ReconciledView
from src.errors import FetchError
from src.stream.client import ConnectionState, ResilientStreamClient
from src.stream.transport import StreamTransport

logger = logging.getLogger(__name__)

READ_TIMEOUT_S = 5.0


class LiveFeed:
    def __init__(
        self,
        config: Settings | None = None,
        *,
        transport: StreamTransport | None = None,
        http_client: Any = None,
    ) -> None:
        self.config = config or default_settings
        self._transport = transport
        self._http_client = http_client
        self._loop: asyncio.AbstractEventLoop | None = None
        self._thread: threading.Thread | None = None
        self._ready = threading.Event()
        self.reconciler: AnomalyReconciler | None = None
        self.stream: ResilientStreamClient | None = None
        self.notifier: NotifierClient | None = None
        self.ingest: IngestClient | None = None

    # ── Lifecycle (caller thread) ─────────────────────────────────────────────

    def start(self) -> None:
        if self._thread is not None:
            return
        self._loop = asyncio.new_event_loop()
        self._thread = threading.Thread(target=self._run_loop, name="live-feed", daemon=True)
        self._thread.start()
        asyncio.run_coroutine_threadsafe(self._startup(), self._loop).result(READ_TIMEOUT_S)

    def stop(self) -> None:
        if self._loop is None or self._thread is None:
            return
        self._ready.clear()
        asyncio.run_coroutine_threadsafe(self._shutdown(), self._loop).result(READ_TIMEOUT_S)
        self._loop.call_soon_threadsafe(self._loop.stop)
        self._thread.join(timeout=READ_TIMEOUT_S)
        self._loop.close()
        self._loop = None
        self._thread = None

    def _run_loop(self) -> None:
        asyncio.set_event_loop(self._loop)
        self._loop.run_forever()

    # ── Loop side ─────────────────────────────────────────────────────────────

    async def _startup(self) -> None:
        cfg = self.config
        if self._http_client is None:
            self._http_client = create_async_client(timeout=cfg.HTTP_TIMEOUT_S)
        self.notifier = NotifierClient(cfg.NOTIFIER_API_URL, self._http_client)
        self.ingest = IngestClient(cfg.INGEST_API_URL, self._http_client)
        fetcher = SnapshotFetcher(self.notifier)

        self.reconciler = AnomalyReconciler(
            fetcher,
            window_hours=cfg.DEFAULT_WINDOW_HOURS,
            horizon=timedelta(seconds=cfg.RECENCY_HORIZON_S),
            refresh_interval=cfg.REFRESH_INTERVAL_S,
            prune_interval=cfg.PRUNE_INTERVAL_S,
            debounce=cfg.WINDOW_DEBOUNCE_S,
        )
        self.stream = ResilientStreamClient(
            cfg.ALERTS_WS_URL,
            self._transport,
            base_ms=cfg.RECONNECT_BASE_MS,
            cap_ms=cfg.RECONNECT_CAP_MS,
        )
        self.stream.on_message(self.reconciler.ingest_payload)

        await self.reconciler.start()
        self.stream.connect()
        self._ready.set()
        logger.info("Live feed started (pull=%s, push=%s)", cfg.NOTIFIER_API_URL, cfg.ALERTS_WS_URL)

    async def _shutdown(self) -> None:
        if self.stream is not None:
            await self.stream.close()
        if self.reconciler is not None:
            await self.reconciler.stop()
        await self._http_client.aclose()
        logger.info("Live feed stopped")

    async def _read(self) -> tuple[ReconciledView, ConnectionState]:
        return self.reconciler.view(), self.stream.state

    async def _check_health(self) -> dict[str, dict]:
        async def check(client: NotifierClient | IngestClient) -> dict:
            try:
                return {"ok": True, "response": await client.health()}
            except FetchError as exc:
                return {"ok": False, "error": exc.message, "status_code": exc.status_code}

        notifier, ingest = await asyncio.gather(check(self.notifier), check(self.ingest))
        return {"notifier": notifier, "ingest": ingest}

    # ── Thread-safe facade for Dash callbacks ─────────────────────────────────

    def snapshot(self) -> tuple[ReconciledView, ConnectionState]:
        """Current view and push-channel state."""
        if self._loop is None or not self._ready.is_set():
            raise RuntimeError("LiveFeed is not running")
        future = asyncio.run_coroutine_threadsafe(self._read(), self._loop)
        return future.result(READ_TIMEOUT_S)

    def view(self) -> ReconciledView:
        return self.snapshot()[0]

    def change_window(self, window_hours: int) -> None:
        if self._loop is None or not self._ready.is_set():
            raise RuntimeError("LiveFeed is not running")
        self._loop.call_soon_threadsafe(self.reconciler.change_window, window_hours)

    def refresh_now(self) -> None:
        if self._loop is None or not self._ready.is_set():
            raise RuntimeError("LiveFeed is not running")
        future = asyncio.run_coroutine_threadsafe(self.reconciler.refresh(), self._loop)
        future.add_done_callback(_log_failure)

    def window_hours(self) -> int:
        """Current look-back window; the configured default before start()."""
        if self._loop is None or not self._ready.is_set():
            return self.config.DEFAULT_WINDOW_HOURS
        return self.view().window_hours

    def health(self) -> dict[str, dict]:
        """/health of the notifier and ingest services, each result or its FetchError."""
        if self._loop is None or not self._ready.is_set():
            raise RuntimeError("LiveFeed is not running")
        future = asyncio.run_coroutine_threadsafe(self._check_health(), self._loop)
        return future.result(READ_TIMEOUT_S + self.config.HTTP_TIMEOUT_S)


def _log_failure(future: concurrent.futures.Future) -> None:
    if future.cancelled():
        return
    exc = future.exception()
    if exc is not None:
        logger.error("On-demand refresh failed", exc_info=exc)


feed = LiveFeed()
