"""
src/stream/transport.py
───────────────────────
Push-channel transport seam.

ResilientStreamClient only needs connect/recv/send/close, so tests drive it
with in-memory fakes and production uses WebSocketTransport. Every library
exception is translated into TransportError at this boundary.
"""
from __future__ import annotations

import asyncio
from typing import Protocol

import websockets
from websockets.exceptions import ConnectionClosed, WebSocketException

from src.errors import TransportError


class StreamConnection(Protocol):
    async def recv(self) -> str | bytes: ...

    async def send(self, message: str) -> None: ...

    async def close(self) -> None: ...


class StreamTransport(Protocol):
    async def connect(self, url: str) -> StreamConnection: ...


class _WebSocketConnection:
    def __init__(self, ws) -> None:
        self._ws = ws

    async def recv(self) -> str | bytes:
        try:
            return await self._ws.recv()
        except ConnectionClosed as exc:
            raise TransportError(f"connection closed ({exc})") from exc
        except (OSError, WebSocketException) as exc:
            raise TransportError(str(exc)) from exc

    async def send(self, message: str) -> None:
        try:
            await self._ws.send(message)
        except (OSError, WebSocketException) as exc:
            raise TransportError(str(exc)) from exc

    async def close(self) -> None:
        try:
            await self._ws.close()
        except (OSError, WebSocketException):
            pass  # already gone


class WebSocketTransport:
    def __init__(self, open_timeout: float = 10.0) -> None:
        self.open_timeout = open_timeout

    async def connect(self, url: str) -> StreamConnection:
        try:
            ws = await websockets.connect(url, open_timeout=self.open_timeout)
        except (OSError, asyncio.TimeoutError, WebSocketException) as exc:
            raise TransportError(f"cannot connect to {url}: {exc}") from exc
        return _WebSocketConnection(ws)
