"""
src/analytics/correlation.py
────────────────────────────
Region correlation: the history behind a selected map point.

A record matches when it carries the same pollutant and both coordinates
lie strictly within `tolerance_deg` of the selection. The bound is per-axis
(a lat/lon box), not a radial distance.
"""
from __future__ import annotations

from collections.abc import Iterable

from config.settings import settings
from src.analytics.classification import normalize_parameter
from src.data.models import AnomalyRecord
from src.errors import NoHistoryAvailable


def is_nearby(a: AnomalyRecord, b: AnomalyRecord, tolerance_deg: float) -> bool:
    return (
        abs(a.latitude - b.latitude) < tolerance_deg
        and abs(a.longitude - b.longitude) < tolerance_deg
    )


def correlate(
    selected: AnomalyRecord,
    records: Iterable[AnomalyRecord],
    tolerance_deg: float | None = None,
) -> list[AnomalyRecord]:
    """
    Return all records at the selected location for the selected pollutant.

    Args:
        selected: Record the user clicked on
        records: Pull window to search (usually ReconciledView.records)
        tolerance_deg: Per-axis proximity bound; defaults to settings

    Returns:
        Matches sorted ascending by detected_at (ties broken by id)

    Raises:
        NoHistoryAvailable: nothing in the window matches
    """
    if tolerance_deg is None:
        tolerance_deg = settings.PROXIMITY_TOLERANCE_DEG
    parameter = normalize_parameter(selected.parameter)

    matches = [
        r for r in records
        if normalize_parameter(r.parameter) == parameter and is_nearby(r, selected, tolerance_deg)
    ]
    if not matches:
        raise NoHistoryAvailable(selected)

    return sorted(matches, key=lambda r: (r.detected_at, r.id))
