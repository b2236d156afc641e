"""
src/adapters/chart_series.py
────────────────────────────
Historical chart input built from correlated records.
"""
from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass

import pandas as pd

from src.analytics.classification import get_value_color
from src.data.models import AnomalyRecord


@dataclass(frozen=True)
class ChartSeries:
    parameter: str
    points: pd.DataFrame  # columns: timestamp, value (ascending)
    color: str

    @property
    def peak(self) -> float:
        return float(self.points["value"].max())


def build_chart_series(records: Sequence[AnomalyRecord]) -> ChartSeries:
    """
    Build an ordered (timestamp, value) series.

    The line color is the tier color of the series maximum.
    """
    if not records:
        raise ValueError("build_chart_series needs at least one record")

    points = pd.DataFrame(
        {"timestamp": [r.detected_at for r in records], "value": [r.value for r in records]}
    )
    points = points.sort_values("timestamp", kind="stable").reset_index(drop=True)
    parameter = records[0].parameter
    return ChartSeries(
        parameter=parameter,
        points=points,
        color=get_value_color(parameter, float(points["value"].max())),
    )
