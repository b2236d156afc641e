"""
src/errors.py
─────────────
Error taxonomy for the live anomaly feed.

Transport and decode errors are contained by the component that hits them
and surfaced as status; only NoHistoryAvailable reaches presentation code.
"""
from __future__ import annotations

from datetime import datetime
from typing import Any


class MonitorError(Exception):
    """Base class for feed errors."""


class TransportError(MonitorError):
    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class FetchError(TransportError):
    """Non-success pull response, or a network failure (status_code=None)."""

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code

    def __str__(self) -> str:
        if self.status_code is None:
            return self.message
        return f"{self.message} (status={self.status_code})"


class DecodeError(MonitorError):
    def __init__(self, message: str, payload: Any = None) -> None:
        super().__init__(message)
        self.message = message
        self.payload = payload

    @property
    def preview(self) -> str:
        text = repr(self.payload)
        return text if len(text) <= 120 else text[:117] + "..."


class NoHistoryAvailable(MonitorError):
    def __init__(self, selected: Any) -> None:
        super().__init__(f"No history available for {getattr(selected, 'id', selected)}")
        self.selected = selected


class StaleDataWarning(UserWarning):
    """A refresh failed while an earlier snapshot is still being served."""

    def __init__(self, message: str, last_refreshed_at: datetime | None) -> None:
        super().__init__(message)
        self.message = message
        self.last_refreshed_at = last_refreshed_at

    def __str__(self) -> str:
        if self.last_refreshed_at is None:
            return f"Showing stale data: {self.message}"
        stamp = self.last_refreshed_at.strftime("%H:%M:%S")
        return f"Showing data from {stamp}: {self.message}"
