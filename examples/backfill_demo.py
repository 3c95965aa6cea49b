"""
Backfill demo.

Walks through both generators with a pinned seed and clock:
1. Volatility panel anchored on a live VIX reading
2. Same anchor, different seed: different path, same last value
3. Price history for one mover from display strings
4. Degraded inputs: no anchor, zero price, flat change

Run:
    python examples/backfill_demo.py
"""

from datetime import date

from snapfill.generators import generate_annual_series, generate_monthly_series
from snapfill.insight import insight_for_series
from snapfill.logger.core import SnapfillLogger
from snapfill.sources import FixedClock, SeededNoise


def main():
    log = SnapfillLogger.instance()
    log.configure_defaults()
    clock = FixedClock(date(2024, 6, 28))

    print("=" * 60)
    print("  snapfill: backfill demo")
    print("=" * 60)

    # ── 1. Volatility panel ───────────────────────────────────
    print("\n[1/4] Volatility panel anchored at 14.3...")
    vix = generate_annual_series("14.30", noise=SeededNoise(42), clock=clock)
    assert vix.last.value == 14.3
    print(f"  ✓ {len(vix)} days, {vix.first.label} → {vix.last.label}")
    print(f"  ✓ range {vix.values.min():.2f} – {vix.values.max():.2f}")
    print(f"  ✓ read: {insight_for_series(vix).sentiment}")

    # ── 2. Same anchor, new path ──────────────────────────────
    print("\n[2/4] Re-render with a fresh seed...")
    again = generate_annual_series(14.3, noise=SeededNoise(7), clock=clock)
    assert again.last.value == vix.last.value
    assert (again.deltas() != vix.deltas()).any()
    print("  ✓ different path, same last value")

    # ── 3. Instrument ─────────────────────────────────────────
    print("\n[3/4] AAPL at $150.23, +2.5%...")
    aapl = generate_monthly_series("$150.23", "+2.5%", noise=SeededNoise(42), clock=clock)
    assert aapl.last.value == 150.23
    print(f"  ✓ start {aapl.first.value:.2f} (implied {150.23 / 1.025:.2f}), end {aapl.last.value:.2f}")

    # ── 4. Degraded inputs ────────────────────────────────────
    print("\n[4/4] Degraded inputs...")
    for label, series in [
        ("no anchor", generate_annual_series(None, clock=clock)),
        ("zero price", generate_monthly_series("$0.00", "+1%", clock=clock)),
        ("flat change", generate_monthly_series(100.0, "0.0%", clock=clock)),
    ]:
        fallbacks = ", ".join(sorted(d.value for d in series.degradations))
        print(f"  ✓ {label}: {len(series)} samples ({fallbacks})")

    print("\nDone.")


if __name__ == "__main__":
    main()
