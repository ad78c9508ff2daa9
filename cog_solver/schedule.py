"""Annealing temperature schedule and Metropolis acceptance."""

from __future__ import annotations

import math
from dataclasses import dataclass

import numpy as np

from .constants import T0_SCALE, T_FLOOR, T_MIN_RATIO


@dataclass(frozen=True)
class TemperatureSchedule:
    """Linear decay from `t0` to `t_min` over a wall-clock budget (milliseconds)."""

    t0: float
    t_min: float
    budget_ms: float

    @classmethod
    def from_score(
        cls,
        initial_score: float,
        budget_ms: float,
        *,
        t0_scale: float = T0_SCALE,
        t_min_ratio: float = T_MIN_RATIO,
        t_floor: float = T_FLOOR,
    ) -> "TemperatureSchedule":
        """Derive the schedule from the magnitude of the starting objective.

        `t0 = max(1, |score| * t0_scale)` and `t_min = max(t_floor, t0 * t_min_ratio)`.
        """
        t0 = max(1.0, abs(float(initial_score)) * float(t0_scale))
        t_min = max(float(t_floor), t0 * float(t_min_ratio))
        return cls(t0=t0, t_min=t_min, budget_ms=float(budget_ms))

    def progress(self, elapsed_ms: float) -> float:
        frac = float(elapsed_ms) / max(1.0, self.budget_ms)
        return min(1.0, max(0.0, frac))

    def temperature(self, elapsed_ms: float) -> float:
        return self.t_min + (self.t0 - self.t_min) * (1.0 - self.progress(elapsed_ms))


def metropolis_accept(delta: float, temperature: float, t_min: float, rng: np.random.Generator) -> bool:
    """Decide whether a move with objective change `delta` is kept.

    Improvements are always accepted. Otherwise the move is accepted with
    probability `exp(delta / temperature)`, but only while the temperature is
    above `t_min`; at the floor the walk is strictly greedy and `exp` is not
    evaluated.
    """
    if delta > 0:
        return True
    if temperature <= t_min:
        return False
    return bool(rng.random() < math.exp(delta / temperature))
