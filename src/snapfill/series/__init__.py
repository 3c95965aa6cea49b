"""
Sample / Series types shared by both generators.

A Series is produced in one shot and never mutated. Consumers that need
a different anchor regenerate it.

Usage:
    series = generate_monthly_series(150.23, 0.025)
    series.last.value            # 150.23
    series.to_records()          # [{"x": "Sep 20", "y": 146.9}, ...]
    series.to_frame()            # polars DataFrame [date, label, month, value]
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, timedelta
from enum import Enum
from typing import Any, Iterator

import numpy as np
import polars as pl


_MONTHS = (
    "Jan", "Feb", "Mar", "Apr", "May", "Jun",
    "Jul", "Aug", "Sep", "Oct", "Nov", "Dec",
)


# ═══════════════════════════════════════════════════════════════════
#  Degradations
# ═══════════════════════════════════════════════════════════════════

class Degradation(str, Enum):
    """Fallback paths a generator took instead of raising."""
    MISSING_ANCHOR = "missing_anchor"
    UNPARSEABLE_ANCHOR = "unparseable_anchor"
    FLOORED_ANCHOR = "floored_anchor"
    DEGENERATE_TREND = "degenerate_trend"
    NON_POSITIVE_PRICE = "non_positive_price"


class SeriesKind(str, Enum):
    VOLATILITY = "volatility"
    PRICE = "price"


# ═══════════════════════════════════════════════════════════════════
#  Types
# ═══════════════════════════════════════════════════════════════════

def day_label(day: date) -> str:
    """'Oct 19' style label, locale independent."""
    return f"{_MONTHS[day.month - 1]} {day.day}"


def month_label(day: date) -> str:
    return _MONTHS[day.month - 1]


def trailing_days(end: date, n: int) -> list[date]:
    """n consecutive calendar days ending on (and including) end."""
    return [end - timedelta(days=n - 1 - i) for i in range(n)]


@dataclass(frozen=True)
class Sample:
    """One day of a synthetic series. label/month are display only."""
    day: date
    value: float
    label: str = ""
    month: str = ""

    @classmethod
    def at(cls, day: date, value: float) -> "Sample":
        return cls(day=day, value=float(value), label=day_label(day), month=month_label(day))


@dataclass(frozen=True)
class Series:
    """
    Ordered, fixed-length, immutable sequence of Samples.

    anchor is the numeric anchor actually applied (None when the walk
    was left unanchored). degradations lists every fallback taken.
    """
    samples: tuple[Sample, ...]
    kind: SeriesKind
    anchor: float | None = None
    degradations: frozenset[Degradation] = field(default_factory=frozenset)

    def __post_init__(self) -> None:
        for prev, cur in zip(self.samples, self.samples[1:]):
            if cur.day <= prev.day:
                raise ValueError(
                    f"Series days must be strictly increasing: {prev.day} then {cur.day}"
                )

    @classmethod
    def from_values(
        cls,
        days: list[date],
        values: list[float] | np.ndarray,
        kind: SeriesKind,
        anchor: float | None = None,
        degradations: set[Degradation] | frozenset[Degradation] | None = None,
    ) -> "Series":
        if len(days) != len(values):
            raise ValueError(f"{len(days)} days but {len(values)} values")
        return cls(
            samples=tuple(Sample.at(d, v) for d, v in zip(days, values)),
            kind=kind,
            anchor=anchor,
            degradations=frozenset(degradations or ()),
        )

    # ── Sequence protocol ─────────────────────────────────────────

    def __len__(self) -> int:
        return len(self.samples)

    def __iter__(self) -> Iterator[Sample]:
        return iter(self.samples)

    def __getitem__(self, idx: int) -> Sample:
        return self.samples[idx]

    # ── Views ─────────────────────────────────────────────────────

    @property
    def first(self) -> Sample:
        return self.samples[0]

    @property
    def last(self) -> Sample:
        return self.samples[-1]

    @property
    def values(self) -> np.ndarray:
        return np.array([s.value for s in self.samples], dtype=float)

    @property
    def days(self) -> list[date]:
        return [s.day for s in self.samples]

    @property
    def degraded(self) -> bool:
        return bool(self.degradations)

    def deltas(self) -> np.ndarray:
        """Day-over-day differences, length len(self) - 1."""
        return np.diff(self.values)

    # ── Export ────────────────────────────────────────────────────

    def to_records(self, x: str = "label", y: str = "value") -> list[dict[str, Any]]:
        """
        Chart records {"x": ..., "y": ...}.

        x picks the Sample attribute used for the x axis: 'label',
        'month' or 'day' (ISO date string).
        """
        if x not in ("label", "month", "day"):
            raise ValueError(f"Unknown x field '{x}'. Use 'label', 'month' or 'day'.")
        records = []
        for s in self.samples:
            x_val = s.day.isoformat() if x == "day" else getattr(s, x)
            records.append({"x": x_val, "y": getattr(s, y)})
        return records

    def to_frame(self) -> pl.DataFrame:
        return pl.DataFrame({
            "date": self.days,
            "label": [s.label for s in self.samples],
            "month": [s.month for s in self.samples],
            "value": [s.value for s in self.samples],
        })

    def summary(self) -> dict[str, Any]:
        vals = self.values
        return {
            "kind": self.kind.value,
            "length": len(self),
            "start": self.first.day.isoformat() if self.samples else None,
            "end": self.last.day.isoformat() if self.samples else None,
            "first": float(vals[0]) if len(vals) else None,
            "last": float(vals[-1]) if len(vals) else None,
            "min": float(vals.min()) if len(vals) else None,
            "max": float(vals.max()) if len(vals) else None,
            "anchor": self.anchor,
            "degradations": sorted(d.value for d in self.degradations),
        }


__all__ = [
    "Degradation",
    "SeriesKind",
    "Sample",
    "Series",
    "day_label",
    "month_label",
    "trailing_days",
]
