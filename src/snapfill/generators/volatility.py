"""
Mean-reverting walk with tail anchoring.

Builds a year of daily readings for a bounded, mean-reverting quantity
(a VIX-style index), then shifts the whole path by one constant so the
final day equals the live reading. The shift leaves day-over-day moves
intact.

Walk, per day:
    value += (u - 0.5) * 2 * step            u ~ U[0, 1)
    value += (target - value) * reversion
    value  = clamp(value, floor, ceiling)

Anchoring:
    offset = anchor - walk[-1]
    series = max(walk + offset, post_shift_floor)
    series[-1] = anchor

The upper clamp is not reapplied after the shift unless
params.reclamp_upper is set.

Usage:
    series = generate_annual_series(14.3)
    series.last.value     # 14.3
"""

from __future__ import annotations

import math

import numpy as np

from snapfill.anchors import parse_level
from snapfill.config import VolatilityWalkParams
from snapfill.logger.core import SnapfillLogger
from snapfill.series import Degradation, Series, SeriesKind, trailing_days
from snapfill.sources import Clock, NoiseSource, default_clock, default_noise

_TAGS = {"generators", "generators.volatility"}


def mean_reverting_walk(params: VolatilityWalkParams, noise: NoiseSource) -> np.ndarray:
    """Unanchored clamped walk, params.length values, unrounded."""
    draws = noise.uniform_array(params.length)
    values = np.empty(params.length, dtype=float)

    value = params.baseline
    for i, u in enumerate(draws):
        value += (u - 0.5) * 2.0 * params.step
        value += (params.target - value) * params.reversion
        value = min(params.ceiling, max(params.floor, value))
        values[i] = value

    return values


def _resolve_anchor(anchor: float | int | str | None) -> tuple[float | None, Degradation | None]:
    if anchor is None:
        return None, Degradation.MISSING_ANCHOR
    if isinstance(anchor, str):
        parsed = parse_level(anchor)
        if parsed is None:
            return None, Degradation.UNPARSEABLE_ANCHOR
        return parsed, None
    try:
        value = float(anchor)
    except (TypeError, ValueError):
        return None, Degradation.UNPARSEABLE_ANCHOR
    if not math.isfinite(value):
        return None, Degradation.UNPARSEABLE_ANCHOR
    return value, None


def _round(values: np.ndarray, decimals: int | None) -> np.ndarray:
    return values if decimals is None else np.round(values, decimals)


def generate_annual_series(
    anchor: float | int | str | None = None,
    *,
    params: VolatilityWalkParams | None = None,
    noise: NoiseSource | None = None,
    clock: Clock | None = None,
) -> Series:
    """
    Trailing daily volatility history ending today.

    Args:
        anchor: Live reading the last day must equal. None, NaN or an
            unparseable string leaves the walk unanchored.
        params: Walk constants. Default: VolatilityWalkParams().
        noise: Draw source. Default: fresh unseeded SeededNoise.
        clock: Supplies "today". Default: SystemClock.

    Returns:
        Series of params.length samples. Never raises on bad anchors;
        the fallback taken is listed in Series.degradations.
    """
    log = SnapfillLogger.instance()
    params = params or VolatilityWalkParams()
    noise = noise or default_noise()
    clock = clock or default_clock()

    days = trailing_days(clock.today(), params.length)
    walk = _round(mean_reverting_walk(params, noise), params.decimals)

    target, degradation = _resolve_anchor(anchor)
    if target is None:
        if degradation is Degradation.UNPARSEABLE_ANCHOR:
            log.warning(
                f"Unparseable volatility anchor {anchor!r}; using unanchored walk",
                tags=_TAGS,
                anchor=str(anchor),
            )
        else:
            log.notice("No volatility anchor; using unanchored walk", tags=_TAGS)
        return Series.from_values(days, walk, SeriesKind.VOLATILITY, degradations={degradation})

    degradations: set[Degradation] = set()
    offset = target - float(walk[-1])

    shifted = np.maximum(walk + offset, params.post_shift_floor)
    if params.reclamp_upper:
        shifted = np.minimum(shifted, params.ceiling)
    shifted = _round(shifted, params.decimals)

    if target < params.post_shift_floor:
        degradations.add(Degradation.FLOORED_ANCHOR)
        log.warning(
            f"Volatility anchor {target} below floor {params.post_shift_floor}; "
            f"last value pinned to the floor",
            tags=_TAGS,
            anchor=target,
        )
        shifted[-1] = params.post_shift_floor
    else:
        shifted[-1] = target

    log.debug(
        f"Anchored volatility walk: {len(shifted)} days ending {days[-1].isoformat()}",
        tags=_TAGS,
        anchor=target,
        offset=offset,
        raw_last=float(walk[-1]),
    )

    return Series.from_values(
        days, shifted, SeriesKind.VOLATILITY,
        anchor=target, degradations=degradations,
    )
