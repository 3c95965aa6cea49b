"""
Market read of the latest volatility level.

The index panel shows, next to the backfilled chart, a one-line
sentiment and a suggested stance for the current reading.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from snapfill.config import InsightThresholds
from snapfill.series import Series


class VolatilityRegime(str, Enum):
    FEAR = "fear"
    CAUTION = "caution"
    STABLE = "stable"


@dataclass(frozen=True)
class VolatilityInsight:
    regime: VolatilityRegime
    level: float
    sentiment: str
    description: str
    stance: str
    stance_description: str


_COPY: dict[VolatilityRegime, tuple[str, str, str, str]] = {
    VolatilityRegime.FEAR: (
        "Extreme Fear",
        "Volatility is very high. Panic selling is possible in this zone.",
        "Aggressive Buy (scaled)",
        "Peak fear often marks a short-term bottom. A chance to accumulate quality names.",
    ),
    VolatilityRegime.CAUTION: (
        "Caution",
        "Uncertainty is rising. Expect wider swings.",
        "Hold / Hedge",
        "Keep cash on hand and focus on risk management. Avoid chasing moves.",
    ),
    VolatilityRegime.STABLE: (
        "Stable",
        "The market is in a relatively calm uptrend.",
        "Trend Following",
        "Ride the momentum, but keep a profit-taking plan ready for a sharp pullback.",
    ),
}


def classify_volatility(
    level: float,
    thresholds: InsightThresholds | None = None,
) -> VolatilityInsight:
    """FEAR at or above thresholds.fear, CAUTION at or above thresholds.caution, else STABLE."""
    thresholds = thresholds or InsightThresholds()
    if level >= thresholds.fear:
        regime = VolatilityRegime.FEAR
    elif level >= thresholds.caution:
        regime = VolatilityRegime.CAUTION
    else:
        regime = VolatilityRegime.STABLE

    sentiment, description, stance, stance_description = _COPY[regime]
    return VolatilityInsight(
        regime=regime,
        level=level,
        sentiment=sentiment,
        description=description,
        stance=stance,
        stance_description=stance_description,
    )


def insight_for_series(series: Series, thresholds: InsightThresholds | None = None) -> VolatilityInsight:
    """Classify the latest value of a backfilled volatility series."""
    return classify_volatility(series.last.value, thresholds)


__all__ = [
    "VolatilityRegime",
    "VolatilityInsight",
    "classify_volatility",
    "insight_for_series",
]
