"""
snapfill CLI runner.

Entry point: `snapfill <command> ...`

Commands:
    volatility  year of volatility-index history, optionally anchored
    price       month of price history for one instrument
    report      backfill every chart of a saved snapshot report

Pipeline:
1. Load config (YAML, optional) → BackfillConfig
2. Configure logger from config.logger, or terminal defaults
3. Build noise (seeded when --seed given) and run the generator
4. Print a summary, optionally write the series as CSV
"""

from __future__ import annotations

import sys
from pathlib import Path

from pydantic import ValidationError

from snapfill.config import BackfillConfig
from snapfill.errors import SnapfillError
from snapfill.generators import generate_annual_series, generate_monthly_series
from snapfill.insight import VolatilityInsight, insight_for_series
from snapfill.logger.core import SnapfillLogger
from snapfill.series import Series
from snapfill.snapshot import MarketReport, ReportBackfill, backfill_report
from snapfill.sources import Clock, NoiseSource, SeededNoise


USAGE = (
    "Usage: snapfill volatility [--anchor <level>] [options]\n"
    "       snapfill price --price <price> --change <pct> [options]\n"
    "       snapfill report <report.json> [options]\n"
    "Options: --seed <int> --config <file.yaml> --csv <out.csv>"
)


class BackfillRunner:
    """
    Runs the generators with one config, noise source and clock.

    Usage:
        runner = BackfillRunner(BackfillConfig(), noise=SeededNoise(7))
        series = runner.volatility("14.3")
        series = runner.price("$150.23", "+2.5%")
    """

    def __init__(
        self,
        config: BackfillConfig | None = None,
        noise: NoiseSource | None = None,
        clock: Clock | None = None,
    ):
        self.config = config or BackfillConfig()
        self.noise = noise
        self.clock = clock
        self._log = SnapfillLogger.instance()

    def volatility(self, anchor: float | str | None = None) -> Series:
        self._log.info(f"Volatility backfill (anchor={anchor!r})", tags={"runner"})
        return generate_annual_series(
            anchor, params=self.config.volatility, noise=self.noise, clock=self.clock,
        )

    def insight(self, series: Series) -> VolatilityInsight:
        return insight_for_series(series, self.config.insight)

    def price(self, current_price: float | str, change_rate: float | str) -> Series:
        self._log.info(
            f"Price backfill (price={current_price!r}, change={change_rate!r})",
            tags={"runner"},
        )
        return generate_monthly_series(
            current_price, change_rate,
            params=self.config.price, noise=self.noise, clock=self.clock,
        )

    def report(self, path: str | Path) -> ReportBackfill:
        self._log.info(f"Loading report: {path}", tags={"runner"})
        report = MarketReport.from_file(path)
        return backfill_report(report, self.config, self.noise, self.clock)


def _flag(args: list[str], name: str) -> str | None:
    """Value following `name`, or None when absent or dangling."""
    if name not in args:
        return None
    idx = args.index(name)
    if idx + 1 < len(args):
        return args[idx + 1]
    return None


def _print_series(series: Series) -> None:
    s = series.summary()
    print(f"  days:   {s['start']} → {s['end']} ({s['length']})")
    print(f"  first:  {s['first']:.2f}")
    print(f"  last:   {s['last']:.2f}")
    print(f"  range:  {s['min']:.2f} – {s['max']:.2f}")
    if s["degradations"]:
        print(f"  fallback: {', '.join(s['degradations'])}")


def run_cli(args: list[str] | None = None) -> int:
    """
    CLI entry point. Returns exit code (0 = success, 1 = error).
    """
    if args is None:
        args = sys.argv[1:]

    if len(args) < 1 or args[0] not in ("volatility", "price", "report"):
        print(USAGE)
        return 1

    command = args[0]

    config = BackfillConfig()
    config_path = _flag(args, "--config")
    if config_path is not None:
        if not Path(config_path).exists():
            print(f"Error: Config file not found: {config_path}")
            return 1
        try:
            config = BackfillConfig.from_yaml(config_path)
        except (SnapfillError, ValidationError) as e:
            print(f"Error: {e}")
            return 1

    log = SnapfillLogger.instance()
    if config.logger is not None:
        log.configure(config.logger.model_dump(exclude_none=True))
    else:
        log.configure_defaults()

    noise = None
    seed = _flag(args, "--seed")
    if seed is not None:
        try:
            noise = SeededNoise(int(seed))
        except ValueError:
            print(f"Error: --seed must be an integer, got {seed!r}")
            return 1

    runner = BackfillRunner(config, noise=noise)
    series: Series | None = None

    if command == "volatility":
        series = runner.volatility(_flag(args, "--anchor"))
        insight = runner.insight(series)
        print(f"✓ Volatility backfill ({insight.sentiment})")
        _print_series(series)
        print(f"  stance: {insight.stance}")

    elif command == "price":
        price = _flag(args, "--price")
        if price is None:
            print("Error: --price is required for 'price'")
            return 1
        series = runner.price(price, _flag(args, "--change") or "0%")
        print("✓ Price backfill")
        _print_series(series)

    else:
        if len(args) < 2 or args[1].startswith("--"):
            print("Error: report file required")
            return 1
        report_path = Path(args[1])
        if not report_path.exists():
            print(f"Error: Report file not found: {report_path}")
            return 1
        try:
            result = runner.report(report_path)
        except SnapfillError as e:
            print(f"Error: {e}")
            return 1
        series = result.panel
        print(f"✓ Report backfill ({result.insight.sentiment})")
        _print_series(series)
        for ticker, mover in result.movers.items():
            print(f"  {ticker}: {mover.first.value:.2f} → {mover.last.value:.2f}")

    csv_path = _flag(args, "--csv")
    if csv_path is not None:
        Path(csv_path).parent.mkdir(parents=True, exist_ok=True)
        series.to_frame().write_csv(csv_path)
        print(f"  wrote {csv_path}")

    log.flush()
    return 0


def main() -> None:
    sys.exit(run_cli())


if __name__ == "__main__":
    main()
