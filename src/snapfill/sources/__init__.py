"""
Injectable noise and time sources for the generators.

Production code draws from an unseeded numpy Generator and reads the
system date; tests pin both so sample sequences and day windows are
exact.

Usage:
    from snapfill.sources import SeededNoise, FixedClock

    noise = SeededNoise(42)
    clock = FixedClock(date(2024, 6, 28))
    series = generate_annual_series(14.3, noise=noise, clock=clock)
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Iterable
from datetime import date

import numpy as np


# ═══════════════════════════════════════════════════════════════════
#  Noise
# ═══════════════════════════════════════════════════════════════════

class NoiseSource(ABC):
    """Supplies uniform draws in [0, 1)."""

    @abstractmethod
    def uniform(self) -> float: ...

    def uniform_array(self, n: int) -> np.ndarray:
        """Draw n values in order. Same stream as n calls to uniform()."""
        return np.array([self.uniform() for _ in range(n)], dtype=float)


class SeededNoise(NoiseSource):
    """
    numpy-backed noise. seed=None gives a fresh OS-entropy stream per
    instance, which is what the dashboard uses on every render.
    """

    def __init__(self, seed: int | None = None):
        self.seed = seed
        self._rng = np.random.default_rng(seed)

    def uniform(self) -> float:
        return float(self._rng.random())

    def uniform_array(self, n: int) -> np.ndarray:
        return self._rng.random(n)


class SequenceNoise(NoiseSource):
    """
    Replays a fixed list of draws, cycling when exhausted.

    SequenceNoise([0.5]) yields a noiseless path: every perturbation
    (u - 0.5) is zero.
    """

    def __init__(self, values: Iterable[float]):
        self._values = [float(v) for v in values]
        if not self._values:
            raise ValueError("SequenceNoise needs at least one value")
        for v in self._values:
            if not 0.0 <= v < 1.0:
                raise ValueError(f"Noise draws must lie in [0, 1), got {v}")
        self._pos = 0

    def uniform(self) -> float:
        v = self._values[self._pos % len(self._values)]
        self._pos += 1
        return v

    @property
    def consumed(self) -> int:
        return self._pos


def default_noise() -> NoiseSource:
    return SeededNoise()


# ═══════════════════════════════════════════════════════════════════
#  Clock
# ═══════════════════════════════════════════════════════════════════

class Clock(ABC):
    """Supplies the calendar day a trailing window ends on."""

    @abstractmethod
    def today(self) -> date: ...


class SystemClock(Clock):
    def today(self) -> date:
        return date.today()


class FixedClock(Clock):
    """Always returns the same day."""

    def __init__(self, day: date | str):
        self._day = date.fromisoformat(day) if isinstance(day, str) else day

    def today(self) -> date:
        return self._day


def default_clock() -> Clock:
    return SystemClock()


__all__ = [
    "NoiseSource",
    "SeededNoise",
    "SequenceNoise",
    "default_noise",
    "Clock",
    "SystemClock",
    "FixedClock",
    "default_clock",
]
