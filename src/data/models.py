"""
src/data/models.py
──────────────────
Pydantic v2 data models for anomaly records, alert events, and measurements.

Pull records arrive as:
  {id, parameter, value, latitude, longitude, detected_at,
   type?, air_quality_data_id?, air_quality_data_timestamp?}

Push messages may use the same shape or the compact alert form:
  {parameter, value, type, location: [lat, lon], timestamp}
"""
from __future__ import annotations

import uuid
from datetime import UTC, datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from config.air_quality import AnomalyKind
from src.errors import DecodeError

NIL_UUID = "00000000-0000-0000-0000-000000000000"


def _as_utc(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value.astimezone(UTC)


class AnomalyRecord(BaseModel):
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    id: str
    parameter: str
    value: float = Field(ge=0.0)
    latitude: float = Field(ge=-90.0, le=90.0)
    longitude: float = Field(ge=-180.0, le=180.0)
    detected_at: datetime
    kind: AnomalyKind | None = Field(default=None, alias="type")
    source_data_id: str | None = Field(default=None, alias="air_quality_data_id")
    source_data_timestamp: datetime | None = Field(default=None, alias="air_quality_data_timestamp")

    @field_validator("id", mode="before")
    @classmethod
    def _coerce_id(cls, v: Any) -> Any:
        if isinstance(v, (int, uuid.UUID)):
            return str(v)
        return v

    @field_validator("kind", mode="before")
    @classmethod
    def _blank_kind(cls, v: Any) -> Any:
        return None if v == "" else v

    @field_validator("source_data_id", mode="before")
    @classmethod
    def _blank_source_id(cls, v: Any) -> Any:
        if v is None:
            return None
        v = str(v)
        return None if v in ("", NIL_UUID) else v

    @field_validator("source_data_timestamp", mode="before")
    @classmethod
    def _blank_source_ts(cls, v: Any) -> Any:
        return None if v == "" else v

    @field_validator("detected_at")
    @classmethod
    def _detected_utc(cls, v: datetime) -> datetime:
        return _as_utc(v)

    @field_validator("source_data_timestamp")
    @classmethod
    def _source_ts_utc(cls, v: datetime | None) -> datetime | None:
        # Go marshals an unset time.Time as 0001-01-01T00:00:00Z
        if v is None or v.year <= 1:
            return None
        return _as_utc(v)

    @classmethod
    def from_pull(cls, payload: Any) -> AnomalyRecord:
        """Decode one element of the /api/anomalies response."""
        if not isinstance(payload, dict):
            raise DecodeError("anomaly record must be an object", payload)
        try:
            return cls.model_validate(payload)
        except ValidationError as exc:
            raise DecodeError(f"invalid anomaly record: {exc.error_count()} error(s)", payload) from exc

    @classmethod
    def from_push(cls, payload: Any) -> AnomalyRecord:
        """
        Decode a pushed alert.

        Accepts the full record shape or the compact alert shape. Events
        without an id get a locally assigned one.
        """
        if not isinstance(payload, dict):
            raise DecodeError("pushed alert must be an object", payload)

        data = dict(payload)
        location = data.pop("location", None)
        if location is not None and "latitude" not in data:
            if not isinstance(location, (list, tuple)) or len(location) != 2:
                raise DecodeError("location must be [latitude, longitude]", payload)
            data["latitude"], data["longitude"] = location
        if "detected_at" not in data and "timestamp" in data:
            data["detected_at"] = data["timestamp"]
        if not data.get("id"):
            data["id"] = f"local-{uuid.uuid4()}"

        try:
            return cls.model_validate(data)
        except ValidationError as exc:
            raise DecodeError(f"invalid pushed alert: {exc.error_count()} error(s)", payload) from exc


class AlertEvent(BaseModel):
    """A pushed anomaly plus its local arrival time."""
    model_config = ConfigDict(frozen=True)

    record: AnomalyRecord
    received_at: datetime

    @field_validator("received_at")
    @classmethod
    def _received_utc(cls, v: datetime) -> datetime:
        return _as_utc(v)

    @property
    def id(self) -> str:
        return self.record.id


class Measurement(BaseModel):
    """Raw reading accepted by the ingest service (POST /api/data)."""
    latitude: float = Field(ge=-90.0, le=90.0)
    longitude: float = Field(ge=-180.0, le=180.0)
    parameter: str = Field(min_length=1)
    value: float = Field(ge=0.0)
    timestamp: datetime
