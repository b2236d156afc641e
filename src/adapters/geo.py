"""
src/adapters/geo.py
───────────────────
Map surface input: one point feature per anomaly in the pull window.
"""
from __future__ import annotations

from collections.abc import Iterable

import pandas as pd

from src.analytics.classification import get_value_color
from src.data.models import AnomalyRecord

FEATURE_COLUMNS = ["id", "lat", "lon", "parameter", "value", "color", "timestamp"]


def build_features(records: Iterable[AnomalyRecord]) -> pd.DataFrame:
    """Flatten records into the columns the map layer plots."""
    rows = [
        {
            "id": r.id,
            "lat": r.latitude,
            "lon": r.longitude,
            "parameter": r.parameter,
            "value": r.value,
            "color": get_value_color(r.parameter, r.value),
            "timestamp": r.detected_at,
        }
        for r in records
    ]
    return pd.DataFrame(rows, columns=FEATURE_COLUMNS)


def to_feature_collection(features: pd.DataFrame) -> dict:
    """GeoJSON FeatureCollection for tile renderers that want one."""
    return {
        "type": "FeatureCollection",
        "features": [
            {
                "type": "Feature",
                "properties": {
                    "id": row.id,
                    "parameter": row.parameter,
                    "value": float(row.value),
                    "color": row.color,
                    "detected_at": pd.Timestamp(row.timestamp).isoformat(),
                },
                "geometry": {"type": "Point", "coordinates": [float(row.lon), float(row.lat)]},
            }
            for row in features.itertuples(index=False)
        ],
    }
