"""
Snapshot records and the glue that backfills them.

The fetch layer returns a JSON report with display strings for every
number. These models validate that shape; the backfill_* helpers pull
the anchors out of it and run the generators.

Usage:
    report = MarketReport.from_json(text)
    panel = backfill_index_panel(report.market_indices)
    movers = backfill_report(report).movers     # {"NVDA": Series, ...}
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from snapfill.anchors import is_negative_change, parse_change_rate, parse_level, parse_price
from snapfill.config import BackfillConfig
from snapfill.errors import ReportError
from snapfill.generators import generate_annual_series, generate_monthly_series
from snapfill.insight import VolatilityInsight, insight_for_series
from snapfill.logger.core import SnapfillLogger
from snapfill.series import Series
from snapfill.sources import Clock, NoiseSource


# ═══════════════════════════════════════════════════════════════════
#  Models
# ═══════════════════════════════════════════════════════════════════

class _CamelModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True)


class MarketIndex(_CamelModel):
    name: str
    value: str
    change: str
    is_positive: bool = Field(True, alias="isPositive")

    @property
    def level(self) -> float | None:
        return parse_level(self.value)


class StockItem(_CamelModel):
    ticker: str
    name: str
    price: str
    change: str

    @property
    def current_price(self) -> float:
        return parse_price(self.price)

    @property
    def change_rate(self) -> float:
        return parse_change_rate(self.change)

    @property
    def is_positive(self) -> bool:
        return not is_negative_change(self.change)


class AiTrend(_CamelModel):
    rising: list[StockItem] = Field(default_factory=list)
    falling: list[StockItem] = Field(default_factory=list)
    summary: str = ""


class MarketReport(_CamelModel):
    report_title: str = Field(alias="reportTitle")
    market_indices: list[MarketIndex] = Field(default_factory=list, alias="marketIndices")
    market_overview: str = Field("", alias="marketOverview")
    gainers: list[StockItem] = Field(default_factory=list)
    losers: list[StockItem] = Field(default_factory=list)
    ai_trend: AiTrend = Field(default_factory=AiTrend, alias="aiTrend")
    economic_context: str = Field("", alias="economicContext")
    conclusion: str = ""
    id: Optional[str] = None
    date: Optional[str] = None

    @classmethod
    def from_json(cls, text: str) -> "MarketReport":
        return cls.model_validate_json(text)

    @classmethod
    def from_file(cls, path: str | Path) -> "MarketReport":
        """Load a saved report. Unreadable or invalid files raise ReportError."""
        path = Path(path)
        try:
            text = path.read_text(encoding="utf-8")
        except OSError as e:
            raise ReportError(str(path), str(e)) from e
        try:
            return cls.from_json(text)
        except ValidationError as e:
            raise ReportError(str(path), f"{e.error_count()} validation error(s)") from e

    def movers(self) -> list[StockItem]:
        """Every instrument in the report, de-duplicated by ticker, in display order."""
        seen: set[str] = set()
        items = []
        for stock in [*self.gainers, *self.losers, *self.ai_trend.rising, *self.ai_trend.falling]:
            if stock.ticker not in seen:
                seen.add(stock.ticker)
                items.append(stock)
        return items


DEFAULT_INDICES: tuple[MarketIndex, ...] = (
    MarketIndex(name="S&P 500", value="5,234.18", change="+1.2%", is_positive=True),
    MarketIndex(name="NASDAQ", value="16,428.82", change="+1.5%", is_positive=True),
    MarketIndex(name="Dow Jones", value="39,150.33", change="-0.4%", is_positive=False),
    MarketIndex(name="USD/KRW", value="1,345.50", change="+0.3%", is_positive=True),
    MarketIndex(name="VIX", value="13.50", change="-1.2%", is_positive=False),
)


# ═══════════════════════════════════════════════════════════════════
#  Index panel
# ═══════════════════════════════════════════════════════════════════

def is_volatility_index(index: MarketIndex) -> bool:
    # the fetch layer sometimes names it in Korean ("변동성 지수")
    return "VIX" in index.name.upper() or "변동성" in index.name


def find_volatility_index(indices: list[MarketIndex] | tuple[MarketIndex, ...]) -> MarketIndex | None:
    for index in indices:
        if is_volatility_index(index):
            return index
    return None


def card_indices(
    indices: list[MarketIndex] | tuple[MarketIndex, ...],
    min_cards: int = 1,
) -> list[MarketIndex]:
    """Indices for the summary cards: everything but the volatility index, unless that leaves too few."""
    cards = [i for i in indices if not is_volatility_index(i)]
    return cards if len(cards) >= min_cards else list(indices)


def backfill_index_panel(
    indices: list[MarketIndex] | tuple[MarketIndex, ...] | None = None,
    config: BackfillConfig | None = None,
    noise: NoiseSource | None = None,
    clock: Clock | None = None,
) -> Series:
    """Year of volatility history anchored on the snapshot's volatility index, if any."""
    config = config or BackfillConfig()
    indices = DEFAULT_INDICES if not indices else indices
    vol_index = find_volatility_index(indices)
    anchor = vol_index.value if vol_index is not None else None

    SnapfillLogger.instance().debug(
        f"Index panel anchor: {anchor!r}",
        tags={"snapshot"},
        index=vol_index.name if vol_index else None,
    )
    return generate_annual_series(anchor, params=config.volatility, noise=noise, clock=clock)


def backfill_instrument(
    stock: StockItem,
    config: BackfillConfig | None = None,
    noise: NoiseSource | None = None,
    clock: Clock | None = None,
) -> Series:
    """Month of price history for one mover."""
    config = config or BackfillConfig()
    return generate_monthly_series(
        stock.current_price,
        stock.change_rate,
        params=config.price,
        noise=noise,
        clock=clock,
    )


# ═══════════════════════════════════════════════════════════════════
#  Whole report
# ═══════════════════════════════════════════════════════════════════

@dataclass
class ReportBackfill:
    panel: Series
    insight: VolatilityInsight
    movers: dict[str, Series] = field(default_factory=dict)

    def summary(self) -> dict:
        return {
            "panel": self.panel.summary(),
            "regime": self.insight.regime.value,
            "movers": {ticker: s.summary() for ticker, s in self.movers.items()},
        }

    def to_json(self) -> str:
        return json.dumps(self.summary(), indent=2, default=str)


def backfill_report(
    report: MarketReport,
    config: BackfillConfig | None = None,
    noise: NoiseSource | None = None,
    clock: Clock | None = None,
) -> ReportBackfill:
    """Index panel, its insight, and a series per mover."""
    config = config or BackfillConfig()
    log = SnapfillLogger.instance()

    panel = backfill_index_panel(report.market_indices, config, noise, clock)
    movers = {
        stock.ticker: backfill_instrument(stock, config, noise, clock)
        for stock in report.movers()
    }

    degraded = sorted(t for t, s in movers.items() if s.degraded)
    log.info(
        f"Backfilled '{report.report_title}': panel + {len(movers)} movers",
        tags={"snapshot"},
        degraded=degraded or None,
    )

    return ReportBackfill(
        panel=panel,
        insight=insight_for_series(panel, config.insight),
        movers=movers,
    )


__all__ = [
    "MarketIndex",
    "StockItem",
    "AiTrend",
    "MarketReport",
    "DEFAULT_INDICES",
    "is_volatility_index",
    "find_volatility_index",
    "card_indices",
    "backfill_index_panel",
    "backfill_instrument",
    "ReportBackfill",
    "backfill_report",
]
