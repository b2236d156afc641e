"""
src/adapters/alert_list.py
──────────────────────────
Active-alert panel rows.
"""
from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from datetime import datetime

from config.air_quality import ANOMALY_DESCRIPTIONS, ANOMALY_EMPHASIS
from src.adapters.formatting import format_location, time_ago
from src.analytics.classification import badge_text_color, classify
from src.data.models import AlertEvent


@dataclass(frozen=True)
class AlertItem:
    id: str
    title: str
    tier_label: str
    color: str
    text_color: str
    description: str
    emphasis: str
    location: str
    age: str


def build_alert_items(events: Iterable[AlertEvent], now: datetime) -> list[AlertItem]:
    """One item per event, preserving the newest-first order of the input."""
    items = []
    for event in events:
        r = event.record
        result = classify(r.parameter, r.value)
        items.append(
            AlertItem(
                id=r.id,
                title=f"{r.parameter or 'Unknown'}: {r.value:.1f}",
                tier_label=result.description,
                color=result.color,
                text_color=badge_text_color(r.value),
                description=ANOMALY_DESCRIPTIONS.get(r.kind, r.kind.value) if r.kind else "",
                emphasis=ANOMALY_EMPHASIS.get(r.kind, "") if r.kind else "",
                location=format_location(r.latitude, r.longitude),
                age=time_ago(event.received_at, now),
            )
        )
    return items
