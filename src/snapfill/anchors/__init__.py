"""
Anchor parsing for loosely formatted display strings.

The snapshot fetch layer hands over values the way they are shown on
screen ("14.30", "$150.23", "1,345.50", "+2.5%"). These helpers pull a
number out of them the way a browser's parseFloat would after stripping
decorations: the longest numeric prefix of the stripped text wins, and
anything without one is "unparseable".

Usage:
    parse_level("14.30%")        # 14.3
    parse_level("n/a")           # None
    parse_price("$150.23")       # 150.23
    parse_change_rate("-1.1%")   # -0.011
"""

from __future__ import annotations

import math
import re

from snapfill.logger.core import SnapfillLogger

_LEVEL_STRIP = re.compile(r"[^0-9.+\-]")
_MAGNITUDE_STRIP = re.compile(r"[^0-9.]")
_NUMERIC_PREFIX = re.compile(r"^[+-]?(?:\d+(?:\.\d*)?|\.\d+)")


def _leading_float(text: str) -> float | None:
    match = _NUMERIC_PREFIX.match(text)
    if match is None:
        return None
    return float(match.group(0))


def _coerce_number(value: float | int) -> float | None:
    as_float = float(value)
    return as_float if math.isfinite(as_float) else None


def parse_level(text: str | float | int | None) -> float | None:
    """
    Index/volatility anchor: "14.3", "14.30%", " 13.50 ".

    Returns None when there is nothing numeric to extract, which the
    volatility generator treats as "no anchor".
    """
    if text is None:
        return None
    if isinstance(text, (int, float)):
        return _coerce_number(text)

    stripped = _LEVEL_STRIP.sub("", text)
    value = _leading_float(stripped)
    if value is None:
        SnapfillLogger.instance().debug(
            f"Unparseable level anchor: {text!r}",
            tags={"anchors"},
            raw=text,
        )
    return value


def parse_price(text: str | float | int | None) -> float:
    """
    Price anchor: "$150.23", "1,345.50", "-3.2".

    Unparseable input gives 0.0; the price generator degrades a
    non-positive price to a zero series.
    """
    value = parse_level(text)
    return 0.0 if value is None else value


def parse_change_rate(text: str | float | int | None) -> float:
    """
    Change anchor: "+2.5%" -> 0.025, "-1.1%" -> -0.011.

    The sign is negative iff a literal '-' appears anywhere in the text.
    Numeric inputs are taken as percentages too (2.5 -> 0.025).
    """
    if text is None:
        return 0.0
    if isinstance(text, (int, float)):
        value = _coerce_number(text)
        return 0.0 if value is None else value / 100.0

    negative = "-" in text
    magnitude = _leading_float(_MAGNITUDE_STRIP.sub("", text))
    if magnitude is None:
        SnapfillLogger.instance().debug(
            f"Unparseable change anchor: {text!r}",
            tags={"anchors"},
            raw=text,
        )
        return 0.0
    return (-magnitude if negative else magnitude) / 100.0


def is_negative_change(text: str) -> bool:
    """Display direction of a change string. Anything without '-' is up."""
    return "-" in text


__all__ = [
    "parse_level",
    "parse_price",
    "parse_change_rate",
    "is_negative_change",
]
