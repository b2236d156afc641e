"""
src/analytics/classification.py
────────────────────────────────
Severity classification for pollutant concentrations.

classify() is total: unknown parameter codes fall back to the PM2.5 table,
and negative values land in the lowest tier through the ≤ chain rather than
being rejected.
"""
from __future__ import annotations

from dataclasses import dataclass

from config.air_quality import (
    BREAKPOINTS,
    DEFAULT_PARAMETER,
    TIER_COLORS,
    TIER_LABELS,
    Breakpoints,
    SeverityTier,
)


@dataclass(frozen=True)
class Classification:
    tier: SeverityTier
    color: str
    description: str


def normalize_parameter(parameter: str | None) -> str:
    """'PM2.5' → 'PM25', 'no2' → 'NO2'."""
    if not parameter:
        return DEFAULT_PARAMETER
    return str(parameter).replace(".", "").strip().upper()


def get_breakpoints(parameter: str | None) -> Breakpoints:
    return BREAKPOINTS.get(normalize_parameter(parameter), BREAKPOINTS[DEFAULT_PARAMETER])


def evaluate_tier(value: float, bands: Breakpoints) -> SeverityTier:
    if value <= bands.good:
        return SeverityTier.GOOD
    if value <= bands.moderate:
        return SeverityTier.MODERATE
    if value <= bands.unhealthy:
        return SeverityTier.UNHEALTHY
    if value <= bands.very_unhealthy:
        return SeverityTier.VERY_UNHEALTHY
    return SeverityTier.HAZARDOUS


def classify(parameter: str | None, value: float) -> Classification:
    tier = evaluate_tier(value, get_breakpoints(parameter))
    return Classification(tier=tier, color=TIER_COLORS[tier], description=TIER_LABELS[tier])


# ── Display helpers ───────────────────────────────────────────────────────────

def get_value_color(parameter: str | None, value: float) -> str:
    return classify(parameter, value).color


def get_quality_description(parameter: str | None, value: float) -> str:
    return classify(parameter, value).description


def badge_text_color(value: float) -> str:
    """Readable text on a tier-colored badge."""
    return "white" if value > 100 else "black"
