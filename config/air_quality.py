"""
config/air_quality.py
─────────────────────
Severity tiers, per-pollutant breakpoints, and display configuration.

Breakpoints are multiples of the WHO air-quality guideline for each
pollutant (µg/m³); e.g. PM2.5 guideline 10 → 25 / 55 / 150 / 250:
  value ≤ good            → Good
  value ≤ moderate        → Moderate
  value ≤ unhealthy       → Unhealthy
  value ≤ very_unhealthy  → Very Unhealthy
  value > very_unhealthy  → Hazardous
"""

from dataclasses import dataclass
from enum import Enum, IntEnum


class SeverityTier(IntEnum):
    GOOD = 0
    MODERATE = 1
    UNHEALTHY = 2
    VERY_UNHEALTHY = 3
    HAZARDOUS = 4


class AnomalyKind(str, Enum):
    THRESHOLD_EXCEEDED = "ThresholdExceeded"
    STATISTICAL_OUTLIER = "StatisticalOutlier"
    SPIKE_DETECTED = "SpikeDetected"
    GEOGRAPHIC_INCONSISTENCY = "GeographicInconsistency"


@dataclass(frozen=True)
class Breakpoints:
    """Four ascending upper bounds; anything above the last is Hazardous."""
    good: float
    moderate: float
    unhealthy: float
    very_unhealthy: float


# ── WHO-based breakpoint table ────────────────────────────────────────────────
BREAKPOINTS: dict[str, Breakpoints] = {
    "PM25": Breakpoints(good=25.0, moderate=55.0, unhealthy=150.0, very_unhealthy=250.0),
    "PM10": Breakpoints(good=50.0, moderate=100.0, unhealthy=200.0, very_unhealthy=400.0),
    "O3": Breakpoints(good=160.0, moderate=200.0, unhealthy=300.0, very_unhealthy=400.0),
    "NO2": Breakpoints(good=100.0, moderate=200.0, unhealthy=400.0, very_unhealthy=600.0),
    "SO2": Breakpoints(good=100.0, moderate=200.0, unhealthy=400.0, very_unhealthy=600.0),
}

DEFAULT_PARAMETER = "PM25"

TIER_COLORS: dict[SeverityTier, str] = {
    SeverityTier.GOOD: "#00E400",
    SeverityTier.MODERATE: "#FFFF00",
    SeverityTier.UNHEALTHY: "#FF7E00",
    SeverityTier.VERY_UNHEALTHY: "#FF0000",
    SeverityTier.HAZARDOUS: "#7F0023",
}

TIER_LABELS: dict[SeverityTier, str] = {
    SeverityTier.GOOD: "Good",
    SeverityTier.MODERATE: "Moderate",
    SeverityTier.UNHEALTHY: "Unhealthy",
    SeverityTier.VERY_UNHEALTHY: "Very Unhealthy",
    SeverityTier.HAZARDOUS: "Hazardous",
}

TIER_RECOMMENDATIONS: dict[SeverityTier, str] = {
    SeverityTier.GOOD: (
        "Air quality is considered satisfactory, and air pollution poses little or no risk."
    ),
    SeverityTier.MODERATE: (
        "Air quality is acceptable; however, for some pollutants there may be a moderate "
        "health concern for a very small number of people."
    ),
    SeverityTier.UNHEALTHY: (
        "Members of sensitive groups may experience health effects. "
        "The general public is not likely to be affected."
    ),
    SeverityTier.VERY_UNHEALTHY: (
        "Health warnings of emergency conditions. "
        "The entire population is more likely to be affected."
    ),
    SeverityTier.HAZARDOUS: "Health alert: everyone may experience more serious health effects.",
}

ANOMALY_DESCRIPTIONS: dict[str, str] = {
    AnomalyKind.THRESHOLD_EXCEEDED: "Exceeded WHO guidelines",
    AnomalyKind.STATISTICAL_OUTLIER: "Statistical anomaly detected",
    AnomalyKind.SPIKE_DETECTED: "Sudden increase in pollutant",
    AnomalyKind.GEOGRAPHIC_INCONSISTENCY: "Inconsistent with nearby readings",
}

# Alert panel emphasis: "danger" | "warning" | ""
ANOMALY_EMPHASIS: dict[str, str] = {
    AnomalyKind.THRESHOLD_EXCEEDED: "danger",
    AnomalyKind.SPIKE_DETECTED: "danger",
    AnomalyKind.STATISTICAL_OUTLIER: "warning",
    AnomalyKind.GEOGRAPHIC_INCONSISTENCY: "warning",
}

# Look-back selector options (hours)
WINDOW_OPTIONS_HOURS: tuple[int, ...] = (6, 12, 24, 48, 72)
