"""
Synthetic trailing-history generators.

- volatility: mean-reverting walk shifted so its last day equals a live reading
- price: interpolated walk between an implied start price and the live price
"""

from snapfill.generators.volatility import generate_annual_series, mean_reverting_walk
from snapfill.generators.price import (
    generate_monthly_series,
    implied_start_price,
    is_degenerate_trend,
)

__all__ = [
    "generate_annual_series",
    "mean_reverting_walk",
    "generate_monthly_series",
    "implied_start_price",
    "is_degenerate_trend",
]
