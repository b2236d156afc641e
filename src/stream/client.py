"""
src/stream/client.py
────────────────────
Resilient push-channel client.

State machine:
  DISCONNECTED → CONNECTING → CONNECTED → DISCONNECTED (close/error)
               → CONNECTING (after backoff) → ...
  CLOSED only after an explicit close().

Backoff: on every failed or closed transition the attempt counter is
incremented and the next dial waits min(cap_ms, base_ms × 2^attempt).
A successful connect resets the counter to 0.
"""
from __future__ import annotations

import asyncio
import json
import logging
from collections.abc import Awaitable, Callable
from enum import Enum
from typing import Any

from config.settings import settings
from src.errors import DecodeError, TransportError
from src.stream.transport import StreamConnection, StreamTransport, WebSocketTransport

logger = logging.getLogger(__name__)

MessageHandler = Callable[[Any], None]
StateHandler = Callable[["ConnectionState"], None]


class ConnectionState(str, Enum):
    DISCONNECTED = "disconnected"
    CONNECTING = "connecting"
    CONNECTED = "connected"
    CLOSED = "closed"


def backoff_delay_ms(attempt: int, base_ms: int = 1000, cap_ms: int = 30_000) -> int:
    # exponent is clamped so large attempt counts stay cheap
    return min(cap_ms, base_ms * 2 ** min(attempt, 32))


def decode_message(raw: str | bytes) -> Any:
    """Parse one inbound frame; raises DecodeError on bad encoding or JSON."""
    try:
        text = raw.decode("utf-8") if isinstance(raw, (bytes, bytearray)) else raw
        return json.loads(text)
    except (UnicodeDecodeError, json.JSONDecodeError, TypeError) as exc:
        raise DecodeError(f"malformed stream message: {exc}", raw) from exc


class ResilientStreamClient:
    def __init__(
        self,
        url: str,
        transport: StreamTransport | None = None,
        *,
        base_ms: int | None = None,
        cap_ms: int | None = None,
        sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep,
    ) -> None:
        self.url = url
        self._transport = transport or WebSocketTransport()
        self._base_ms = settings.RECONNECT_BASE_MS if base_ms is None else base_ms
        self._cap_ms = settings.RECONNECT_CAP_MS if cap_ms is None else cap_ms
        self._sleep = sleep

        self._state = ConnectionState.DISCONNECTED
        self._attempt = 0
        self._last_delay_ms: int | None = None
        self._last_error: str | None = None
        self._connection: StreamConnection | None = None
        self._task: asyncio.Task | None = None
        self._message_handlers: list[MessageHandler] = []
        self._state_handlers: list[StateHandler] = []

    # ── Status ────────────────────────────────────────────────────────────────

    @property
    def state(self) -> ConnectionState:
        return self._state

    @property
    def is_connected(self) -> bool:
        return self._state is ConnectionState.CONNECTED

    @property
    def attempt(self) -> int:
        return self._attempt

    @property
    def last_delay_ms(self) -> int | None:
        """Delay scheduled before the most recent reconnect."""
        return self._last_delay_ms

    @property
    def last_error(self) -> str | None:
        return self._last_error

    # ── Subscriptions ─────────────────────────────────────────────────────────

    def on_message(self, handler: MessageHandler) -> Callable[[], None]:
        self._message_handlers.append(handler)
        return lambda: self._message_handlers.remove(handler)

    def on_state_change(self, handler: StateHandler) -> Callable[[], None]:
        self._state_handlers.append(handler)
        return lambda: self._state_handlers.remove(handler)

    # ── Lifecycle ─────────────────────────────────────────────────────────────

    def connect(self) -> None:
        """Start the connection supervisor. Must be called on the event loop."""
        if self._state is ConnectionState.CLOSED:
            logger.warning("connect() ignored: stream client for %s is closed", self.url)
            return
        if self._task is not None and not self._task.done():
            return
        self._task = asyncio.get_running_loop().create_task(self._run(), name="stream-client")

    async def close(self) -> None:
        if self._state is ConnectionState.CLOSED:
            return
        self._set_state(ConnectionState.CLOSED)

        task, self._task = self._task, None
        if task is not None and not task.done():
            task.cancel()
            try:
                await task
            except asyncio.CancelledError:
                pass

        conn, self._connection = self._connection, None
        if conn is not None:
            await conn.close()
        logger.info("Stream client for %s closed", self.url)

    async def send(self, payload: Any) -> bool:
        """Best-effort send; dropped unless connected."""
        conn = self._connection
        if self._state is not ConnectionState.CONNECTED or conn is None:
            logger.debug("Dropping outbound message while %s", self._state.value)
            return False
        text = payload if isinstance(payload, str) else json.dumps(payload, default=str)
        try:
            await conn.send(text)
        except TransportError as exc:
            self._last_error = exc.message
            logger.warning("Stream send failed: %s", exc.message)
            return False
        return True

    # ── Internals ─────────────────────────────────────────────────────────────

    def _set_state(self, state: ConnectionState) -> None:
        if state is self._state:
            return
        self._state = state
        for handler in list(self._state_handlers):
            try:
                handler(state)
            except Exception:
                logger.exception("Stream state handler failed")

    def _dispatch(self, raw: str | bytes) -> None:
        try:
            message = decode_message(raw)
        except DecodeError as exc:
            logger.warning("Dropping malformed stream message: %s", exc.preview)
            return
        for handler in list(self._message_handlers):
            try:
                handler(message)
            except Exception:
                logger.exception("Stream message handler failed")

    async def _run(self) -> None:
        while self._state is not ConnectionState.CLOSED:
            self._set_state(ConnectionState.CONNECTING)
            try:
                conn = await self._transport.connect(self.url)
            except TransportError as exc:
                self._last_error = exc.message
                logger.warning("Stream connect failed: %s", exc.message)
            except Exception as exc:
                self._last_error = str(exc)
                logger.exception("Unexpected stream connect failure")
            else:
                await self._serve(conn)

            if self._state is ConnectionState.CLOSED:
                break
            self._set_state(ConnectionState.DISCONNECTED)
            self._attempt += 1
            delay = backoff_delay_ms(self._attempt, self._base_ms, self._cap_ms)
            self._last_delay_ms = delay
            logger.info("Reconnecting to %s in %d ms (attempt %d)", self.url, delay, self._attempt)
            await self._sleep(delay / 1000)

    async def _serve(self, conn: StreamConnection) -> None:
        self._connection = conn
        self._attempt = 0
        self._last_error = None
        self._set_state(ConnectionState.CONNECTED)
        logger.info("Stream connected to %s", self.url)
        try:
            while True:
                self._dispatch(await conn.recv())
        except TransportError as exc:
            self._last_error = exc.message
            logger.warning("Stream disconnected: %s", exc.message)
        except Exception as exc:
            self._last_error = str(exc)
            logger.exception("Unexpected stream receive failure")
        finally:
            if self._connection is conn:
                self._connection = None
                await conn.close()
