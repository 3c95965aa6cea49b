"""
Two-point interpolated walk for an instrument price.

The live change rate implies where the price started the window:

    start = current / (1 + change)        (|change| >= flat_threshold)
    start = current * fallback_ratio      (otherwise, so the line isn't flat)

Each day i of n then sits on the straight line from start to current,
with multiplicative noise of at most ±volatility/2 of the trend:

    progress = i / (n - 1)
    trend    = current * progress + start * (1 - progress)
    value    = trend + trend * (u - 0.5) * volatility

The last day is forced to the live price exactly.
"""

from __future__ import annotations

import math

import numpy as np

from snapfill.anchors import parse_change_rate, parse_price
from snapfill.config import PriceWalkParams
from snapfill.logger.core import SnapfillLogger
from snapfill.series import Degradation, Series, SeriesKind, trailing_days
from snapfill.sources import Clock, NoiseSource, default_clock, default_noise

_TAGS = {"generators", "generators.price"}


def is_degenerate_trend(change_rate: float, params: PriceWalkParams | None = None) -> bool:
    """True when the change rate carries no usable trend signal."""
    params = params or PriceWalkParams()
    if not math.isfinite(change_rate):
        return True
    # change_rate <= -1 would put the implied start at infinity or below zero
    return abs(change_rate) < params.flat_threshold or change_rate <= -1.0


def implied_start_price(
    current_price: float,
    change_rate: float,
    params: PriceWalkParams | None = None,
) -> float:
    """Price at the start of the window implied by the live change rate."""
    params = params or PriceWalkParams()
    if is_degenerate_trend(change_rate, params):
        return current_price * params.fallback_ratio
    return current_price / (1.0 + change_rate)


def _coerce(value: float | int | str | None, parse) -> float:
    if value is None or isinstance(value, str):
        return parse(value)
    try:
        return float(value)
    except (TypeError, ValueError):
        return float("nan")


def _price_decimals(price: float, decimals: int) -> int:
    """Rounding precision that keeps sub-unit prices from collapsing to zero."""
    if price >= 1.0:
        return decimals
    return decimals + math.ceil(-math.log10(price))


def generate_monthly_series(
    current_price: float | int | str,
    change_rate: float | int | str = 0.0,
    *,
    params: PriceWalkParams | None = None,
    noise: NoiseSource | None = None,
    clock: Clock | None = None,
) -> Series:
    """
    Trailing daily price history ending today at current_price.

    Args:
        current_price: Live price. Display strings ("$150.23") are parsed.
        change_rate: Signed fraction (0.025 for +2.5%). Display strings
            ("+2.5%") are parsed as percentages.
        params: Walk constants. Default: PriceWalkParams().
        noise: Draw source. Default: fresh unseeded SeededNoise.
        clock: Supplies "today". Default: SystemClock.

    Returns:
        Series of params.length samples whose last value is current_price.
        A non-positive or unparseable price yields an all-zero series.
    """
    log = SnapfillLogger.instance()
    params = params or PriceWalkParams()
    noise = noise or default_noise()
    clock = clock or default_clock()

    days = trailing_days(clock.today(), params.length)
    price = _coerce(current_price, parse_price)
    change = _coerce(change_rate, parse_change_rate)

    if not math.isfinite(price) or price <= 0.0:
        log.warning(
            f"Non-positive or unparseable price {current_price!r}; returning zero series",
            tags=_TAGS,
            price=str(current_price),
        )
        return Series.from_values(
            days, np.zeros(params.length), SeriesKind.PRICE,
            degradations={Degradation.NON_POSITIVE_PRICE},
        )

    degradations: set[Degradation] = set()
    if not math.isfinite(change):
        change = 0.0
    if is_degenerate_trend(change, params):
        degradations.add(Degradation.DEGENERATE_TREND)
        log.debug(
            f"Degenerate change rate {change}; start at {params.fallback_ratio:.0%} of price",
            tags=_TAGS,
            change_rate=change,
        )

    start = implied_start_price(price, change, params)

    progress = np.arange(params.length, dtype=float) / (params.length - 1)
    trend = price * progress + start * (1.0 - progress)
    draws = noise.uniform_array(params.length)
    values = trend + trend * (draws - 0.5) * params.volatility

    if params.decimals is not None:
        values = np.round(values, _price_decimals(price, params.decimals))
    if params.floor is not None:
        values = np.maximum(values, params.floor)
    values[-1] = price

    log.debug(
        f"Interpolated price walk: {params.length} days ending {days[-1].isoformat()}",
        tags=_TAGS,
        price=price,
        change_rate=change,
        start_price=start,
    )

    return Series.from_values(
        days, values, SeriesKind.PRICE,
        anchor=price, degradations=degradations,
    )
