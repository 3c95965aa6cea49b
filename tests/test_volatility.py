"""
Tests for the mean-reverting volatility walk.

Covers:
- Length, day window, labels
- Exact tail anchoring (numeric and display-string anchors)
- Clamp band when unanchored
- Post-shift floor, optional upper re-clamp
- Missing / unparseable anchors degrade instead of raising
- Seeded reproducibility and shape variation across seeds
"""

import math
from datetime import date, timedelta

import numpy as np
import pytest

from snapfill.config import VolatilityWalkParams
from snapfill.generators import generate_annual_series, mean_reverting_walk
from snapfill.logger.adapters import MemoryAdapter
from snapfill.logger.core import SnapfillLogger
from snapfill.series import Degradation, SeriesKind
from snapfill.sources import FixedClock, SeededNoise, SequenceNoise


TODAY = date(2024, 6, 28)


@pytest.fixture(autouse=True)
def reset_logger():
    SnapfillLogger.reset()
    yield
    SnapfillLogger.reset()


@pytest.fixture
def clock():
    return FixedClock(TODAY)


# ═══════════════════════════════════════════════════════════════════
#  Shape
# ═══════════════════════════════════════════════════════════════════

class TestShape:
    def test_length_365(self, clock):
        series = generate_annual_series(14.3, noise=SeededNoise(1), clock=clock)
        assert len(series) == 365
        assert series.kind == SeriesKind.VOLATILITY

    def test_window_ends_today(self, clock):
        series = generate_annual_series(None, noise=SeededNoise(1), clock=clock)
        assert series.last.day == TODAY
        assert series.first.day == TODAY - timedelta(days=364)

    def test_days_strictly_increasing_no_gaps(self, clock):
        series = generate_annual_series(14.3, noise=SeededNoise(2), clock=clock)
        days = series.days
        assert all(b - a == timedelta(days=1) for a, b in zip(days, days[1:]))
        assert len(set(days)) == 365

    def test_labels(self, clock):
        series = generate_annual_series(14.3, noise=SeededNoise(2), clock=clock)
        assert series.last.label == "Jun 28"
        assert series.last.month == "Jun"

    def test_custom_length(self, clock):
        params = VolatilityWalkParams(length=30)
        series = generate_annual_series(20.0, params=params, noise=SeededNoise(3), clock=clock)
        assert len(series) == 30
        assert series.last.value == 20.0


# ═══════════════════════════════════════════════════════════════════
#  Anchoring
# ═══════════════════════════════════════════════════════════════════

class TestAnchoring:
    def test_anchor_exact(self, clock):
        series = generate_annual_series(14.3, noise=SeededNoise(42), clock=clock)
        assert series[364].value == 14.3
        assert series.anchor == 14.3
        assert not series.degraded

    @pytest.mark.parametrize("anchor", [10.0, 12.77, 14.3, 19.99, 33.333, 60.0, 0.5])
    def test_anchor_exact_for_many_values(self, anchor, clock):
        for seed in range(5):
            series = generate_annual_series(anchor, noise=SeededNoise(seed), clock=clock)
            assert series.last.value == anchor

    def test_display_string_anchor(self, clock):
        series = generate_annual_series("14.30%", noise=SeededNoise(4), clock=clock)
        assert series.last.value == 14.3
        assert series.anchor == 14.3

    def test_shift_preserves_shape(self, clock):
        """Anchored path equals the unanchored path plus one constant (within rounding)."""
        raw = generate_annual_series(None, noise=SeededNoise(9), clock=clock)
        anchored = generate_annual_series(40.0, noise=SeededNoise(9), clock=clock)
        offset = 40.0 - raw.last.value
        np.testing.assert_allclose(anchored.values, raw.values + offset, atol=0.011)
        np.testing.assert_allclose(anchored.deltas(), raw.deltas(), atol=0.021)

    def test_same_anchor_different_shapes(self, clock):
        a = generate_annual_series(14.3, noise=SeededNoise(1), clock=clock)
        b = generate_annual_series(14.3, noise=SeededNoise(2), clock=clock)
        assert a.last.value == b.last.value == 14.3
        assert not np.allclose(a.deltas(), b.deltas())

    def test_unseeded_calls_differ_but_agree_on_anchor(self, clock):
        a = generate_annual_series(14.3, clock=clock)
        b = generate_annual_series(14.3, clock=clock)
        assert a.last.value == b.last.value == 14.3
        assert not np.array_equal(a.values, b.values)

    def test_upper_band_not_reclamped_by_default(self, clock):
        """A high anchor lifts the whole walk above the generation ceiling."""
        series = generate_annual_series(80.0, noise=SeededNoise(5), clock=clock)
        assert series.values.max() > 45.0
        assert series.last.value == 80.0

    def test_reclamp_upper_opt_in(self, clock):
        params = VolatilityWalkParams(reclamp_upper=True)
        series = generate_annual_series(80.0, params=params, noise=SeededNoise(5), clock=clock)
        assert series.values[:-1].max() <= 45.0
        assert series.last.value == 80.0


# ═══════════════════════════════════════════════════════════════════
#  Bounds
# ═══════════════════════════════════════════════════════════════════

class TestBounds:
    @pytest.mark.parametrize("seed", range(10))
    def test_unanchored_within_clamp_band(self, seed, clock):
        series = generate_annual_series(None, noise=SeededNoise(seed), clock=clock)
        assert series.values.min() >= 10.0
        assert series.values.max() <= 45.0

    @pytest.mark.parametrize("anchor", [0.0, 0.3, 2.0, 14.3])
    def test_non_negative_after_shift(self, anchor, clock):
        for seed in range(5):
            series = generate_annual_series(anchor, noise=SeededNoise(seed), clock=clock)
            assert series.values.min() >= 0.0

    def test_low_anchor_floors_history_at_zero(self, clock):
        series = generate_annual_series(0.5, noise=SeededNoise(11), clock=clock)
        assert series.values.min() >= 0.0
        assert series.last.value == 0.5

    def test_negative_anchor_pinned_to_floor(self, clock):
        series = generate_annual_series(-5.0, noise=SeededNoise(11), clock=clock)
        assert series.last.value == 0.0
        assert Degradation.FLOORED_ANCHOR in series.degradations
        assert series.values.min() >= 0.0

    def test_walk_hits_floor_with_downward_draws(self):
        params = VolatilityWalkParams(length=100)
        walk = mean_reverting_walk(params, SequenceNoise([0.0]))
        assert walk.min() == 10.0

    def test_walk_hits_ceiling_with_upward_draws(self):
        params = VolatilityWalkParams(length=200, reversion=0.0)
        walk = mean_reverting_walk(params, SequenceNoise([0.999999]))
        assert walk.max() == 45.0


# ═══════════════════════════════════════════════════════════════════
#  Dynamics
# ═══════════════════════════════════════════════════════════════════

class TestDynamics:
    def test_noiseless_walk_reverts_to_target(self):
        """With zero perturbation the walk decays from baseline toward target."""
        params = VolatilityWalkParams()
        walk = mean_reverting_walk(params, SequenceNoise([0.5]))
        assert walk[0] == pytest.approx(13.5 + (15.0 - 13.5) * 0.02)
        assert np.all(np.diff(walk) > 0)
        assert walk[-1] == pytest.approx(15.0 - 1.5 * 0.98 ** 365)

    def test_single_step_arithmetic(self):
        params = VolatilityWalkParams(length=1 + 1)
        walk = mean_reverting_walk(params, SequenceNoise([0.75, 0.5]))
        # +0.5 perturbation, then 2% toward 15
        expected = 14.0 + (15.0 - 14.0) * 0.02
        assert walk[0] == pytest.approx(expected)

    def test_values_rounded_to_two_decimals(self, clock):
        series = generate_annual_series(None, noise=SeededNoise(6), clock=clock)
        assert all(round(v, 2) == v for v in series.values)

    def test_unrounded_when_decimals_none(self, clock):
        params = VolatilityWalkParams(decimals=None)
        series = generate_annual_series(None, params=params, noise=SeededNoise(6), clock=clock)
        assert any(round(v, 2) != v for v in series.values)

    def test_seeded_reproducible(self, clock):
        a = generate_annual_series(14.3, noise=SeededNoise(42), clock=clock)
        b = generate_annual_series(14.3, noise=SeededNoise(42), clock=clock)
        assert a.values.tolist() == b.values.tolist()
        assert a.days == b.days


# ═══════════════════════════════════════════════════════════════════
#  Degradation
# ═══════════════════════════════════════════════════════════════════

class TestDegradation:
    def test_missing_anchor(self, clock):
        series = generate_annual_series(None, noise=SeededNoise(1), clock=clock)
        assert len(series) == 365
        assert series.anchor is None
        assert series.degradations == frozenset({Degradation.MISSING_ANCHOR})

    @pytest.mark.parametrize("anchor", ["", "n/a", "--", float("nan"), math.inf])
    def test_unparseable_anchor_treated_as_missing(self, anchor, clock):
        series = generate_annual_series(anchor, noise=SeededNoise(1), clock=clock)
        raw = generate_annual_series(None, noise=SeededNoise(1), clock=clock)
        assert len(series) == 365
        assert series.anchor is None
        assert Degradation.UNPARSEABLE_ANCHOR in series.degradations
        assert series.values.tolist() == raw.values.tolist()

    @pytest.mark.parametrize("anchor", [[14.3], object(), {"value": 14.3}])
    def test_non_numeric_anchor_object(self, anchor, clock):
        series = generate_annual_series(anchor, noise=SeededNoise(1), clock=clock)
        assert len(series) == 365
        assert series.anchor is None
        assert series.degradations == frozenset({Degradation.UNPARSEABLE_ANCHOR})

    def test_unparseable_anchor_logged(self, clock):
        log = SnapfillLogger.instance()
        memory = MemoryAdapter()
        log.add_adapter(memory)
        generate_annual_series("n/a", noise=SeededNoise(1), clock=clock)
        records = memory.get_recent(tags={"generators.volatility"})
        assert any("Unparseable" in r.message for r in records)

    def test_anchor_logged_with_offset(self, clock):
        log = SnapfillLogger.instance()
        memory = MemoryAdapter()
        log.add_adapter(memory)
        log.current_level = "DEBUG"
        generate_annual_series(14.3, noise=SeededNoise(1), clock=clock)
        records = memory.get_recent(tags={"generators.volatility"})
        assert records[-1].context["anchor"] == 14.3
        assert "offset" in records[-1].context
