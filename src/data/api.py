"""
src/data/api.py
───────────────
HTTP clients for the upstream services.

  - NotifierClient : GET /api/anomalies?hours=N, GET /health
  - IngestClient   : POST /api/data, GET /health

Every non-2xx response and every httpx failure becomes a FetchError.
No retries happen here; the reconciler's refresh cadence is the retry.
"""
from __future__ import annotations

from typing import Any

import httpx

from src.data.models import Measurement
from src.errors import FetchError


def create_async_client(
    *,
    timeout: float,
    max_connections: int = 10,
    max_keepalive_connections: int = 5,
) -> httpx.AsyncClient:
    return httpx.AsyncClient(
        timeout=httpx.Timeout(timeout),
        limits=httpx.Limits(
            max_connections=max_connections,
            max_keepalive_connections=max_keepalive_connections,
        ),
        headers={"Content-Type": "application/json"},
    )


def _error_message(response: httpx.Response) -> str:
    try:
        payload = response.json()
    except ValueError:
        payload = None
    if isinstance(payload, dict) and payload.get("error"):
        return str(payload["error"])
    return response.reason_phrase or "Request failed"


class _ServiceClient:
    def __init__(self, base_url: str, client: httpx.AsyncClient) -> None:
        self.base_url = base_url.rstrip("/")
        self._client = client

    async def _request(self, method: str, path: str, **kwargs: Any) -> Any:
        url = f"{self.base_url}{path}"
        try:
            response = await self._client.request(method, url, **kwargs)
        except httpx.HTTPError as exc:
            raise FetchError(f"{method} {path} failed: {exc}") from exc

        if response.is_error:
            raise FetchError(_error_message(response), response.status_code)
        try:
            return response.json()
        except ValueError as exc:
            raise FetchError(f"{method} {path} returned invalid JSON", response.status_code) from exc

    async def health(self) -> dict:
        return await self._request("GET", "/health")


class NotifierClient(_ServiceClient):
    """Query/notification service."""

    async def get_anomalies(self, hours: int) -> list:
        payload = await self._request("GET", "/api/anomalies", params={"hours": hours})
        # Go encodes an empty result slice as null
        if payload is None:
            return []
        if not isinstance(payload, list):
            raise FetchError("Unexpected anomalies payload (expected a list)")
        return payload


class IngestClient(_ServiceClient):
    """Raw measurement ingest service."""

    async def submit(self, measurement: Measurement) -> dict:
        return await self._request(
            "POST",
            "/api/data",
            content=measurement.model_dump_json(),
        )
