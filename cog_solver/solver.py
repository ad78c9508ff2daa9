"""Anytime simulated-annealing search over cog arrangements.

`Solver.solve` runs a time-budgeted annealing walk (random swaps and slot
moves, linear cooling, periodic restarts from a shuffled board), keeps the best
trajectory, compares it with the best result of earlier runs held by a
`SearchSession`, and finally cleans the winner up with the post-processing
passes from `cog_solver.postopt`.

The loop is a coroutine: it awaits the event loop at least every
`SolverConfig.yield_interval_ms` so other tasks stay responsive. Synchronous
callers use `Solver.solve_blocking`.
"""

from __future__ import annotations

import asyncio
import logging
import time
from dataclasses import dataclass
from typing import Callable, Mapping

import numpy as np

from .constants import (
    DEFAULT_SOLVE_TIME_MS,
    RESTART_EVERY,
    SHUFFLE_MOVES,
    SWAP_PROB,
    T0_SCALE,
    T_FLOOR,
    T_MIN_RATIO,
    YIELD_INTERVAL_MS,
)
from .moves import random_move, shuffle
from .postopt import minimize_steps, remove_useless_moves
from .schedule import TemperatureSchedule, metropolis_accept
from .scoring import BoardState, Weights, effective_score

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SolverConfig:
    """Search knobs; defaults match the documented behaviour.

    Raises:
        ValueError: On out-of-range values.
    """

    swap_prob: float = SWAP_PROB
    restart_every: int = RESTART_EVERY
    shuffle_moves: int = SHUFFLE_MOVES
    yield_interval_ms: float = YIELD_INTERVAL_MS
    t0_scale: float = T0_SCALE
    t_min_ratio: float = T_MIN_RATIO
    t_floor: float = T_FLOOR

    def __post_init__(self) -> None:
        if not 0.0 <= float(self.swap_prob) <= 1.0:
            raise ValueError("swap_prob must be in [0, 1]")
        if int(self.restart_every) <= 0:
            raise ValueError("restart_every must be > 0")
        if int(self.shuffle_moves) < 0:
            raise ValueError("shuffle_moves must be >= 0")
        if float(self.yield_interval_ms) < 0.0:
            raise ValueError("yield_interval_ms must be >= 0")
        if float(self.t_floor) <= 0.0:
            raise ValueError("t_floor must be > 0")


@dataclass
class SearchSession:
    """Caller-owned memory of the best arrangement across `solve` calls.

    A later, worse run never discards the stored best; pass the same session to
    every `solve` call that should share it.
    """

    best: BoardState | None = None
    runs: int = 0

    def reset(self) -> None:
        self.best = None
        self.runs = 0


@dataclass(frozen=True)
class SolveStats:
    """Diagnostics of one `solve` call."""

    iterations: int
    transitions: int
    accepted: int
    restarts: int
    best_attempt: int
    best_score: float
    final_score: float
    from_session: bool
    useless_moves_removed: int
    equivalent_swaps: int
    elapsed_ms: float


class Solver:
    """Simulated-annealing solver for a weighted cog objective.

    Args:
        weights: `Weights` or a mapping with `build_rate`, `exp_bonus`,
            `flaggy`, `steps_penalty` (camelCase accepted).
        config: Search knobs.
        clock: Time source in seconds (`time.perf_counter` by default).
    """

    def __init__(
        self,
        weights: Weights | Mapping[str, object] | None = None,
        config: SolverConfig | None = None,
        *,
        clock: Callable[[], float] = time.perf_counter,
    ) -> None:
        self.weights = weights if isinstance(weights, Weights) else Weights.from_mapping(weights)
        self.config = config or SolverConfig()
        self._clock = clock
        self.last_stats: SolveStats | None = None

    def set_weights(
        self,
        build_rate: object = 0,
        exp_bonus: object = 0,
        flaggy: object = 0,
        steps_penalty: object = 0,
    ) -> None:
        self.weights = Weights(build_rate, exp_bonus, flaggy, steps_penalty)  # type: ignore[arg-type]

    def run_weights(self, inventory: BoardState) -> Weights:
        """Weights used for a run on `inventory` (flaggy is ignored without flags)."""
        if len(inventory.flag_pose or ()) == 0:
            return self.weights.without_flaggy()
        return self.weights

    def effective_score(self, state: BoardState, reference: BoardState | None = None) -> float:
        weights = self.run_weights(reference) if reference is not None else self.weights
        return effective_score(state, weights, reference=reference)

    def _now_ms(self) -> float:
        return float(self._clock()) * 1000.0

    async def solve(
        self,
        inventory: BoardState,
        solve_time_ms: float = DEFAULT_SOLVE_TIME_MS,
        *,
        session: SearchSession | None = None,
        seed: int | None = None,
        trace: list[tuple[float, float, float]] | None = None,
    ) -> BoardState:
        """Search for a better arrangement of `inventory` within `solve_time_ms`.

        Args:
            inventory: Starting board; it is cloned and never modified.
            solve_time_ms: Wall-clock budget in milliseconds (<= 0 skips the walk).
            session: Optional best-so-far holder shared across calls.
            seed: Optional RNG seed for reproducible move sampling.
            trace: Optional list receiving `(elapsed_ms, temperature, score)`
                for every accepted move.

        Returns:
            A new board: the best arrangement found, cleaned by the
            post-processing passes.
        """
        cfg = self.config
        weights = self.run_weights(inventory)
        logger.info("Solving with goal: %s", weights)

        def _score(state: BoardState) -> float:
            return effective_score(state, weights, reference=inventory)

        rng = np.random.default_rng(seed)
        budget_ms = float(solve_time_ms)
        start = self._now_ms()
        last_yield = start

        state = inventory.clone()
        # The untouched input competes too, so a run never returns anything worse than it.
        solutions: list[BoardState] = [inventory.clone(), state]
        all_slots = list(inventory.available_slot_keys)
        current_score = _score(state)
        schedule = TemperatureSchedule.from_score(
            current_score,
            budget_ms,
            t0_scale=cfg.t0_scale,
            t_min_ratio=cfg.t_min_ratio,
            t_floor=cfg.t_floor,
        )

        counter = 0
        transitions = 0
        accepted = 0
        restarts = 0

        logger.info("Optimizing (simulated annealing + swap moves)")
        while True:
            now = self._now_ms()
            if now - start >= budget_ms:
                break
            if now - last_yield > cfg.yield_interval_ms:
                await asyncio.sleep(0)
                last_yield = self._now_ms()
            counter += 1

            # Periodic restart from a shuffled copy of the input.
            if counter % cfg.restart_every == 0:
                state = inventory.clone()
                shuffle(state, rng, cfg.shuffle_moves)
                current_score = _score(state)
                solutions.append(state)
                restarts += 1

            move = random_move(state, all_slots, rng, swap_prob=cfg.swap_prob)
            if move is None:
                continue
            transitions += 1

            new_score = _score(state)
            delta = new_score - current_score
            temperature = schedule.temperature(self._now_ms() - start)
            if metropolis_accept(delta, temperature, schedule.t_min, rng):
                current_score = new_score
                accepted += 1
                if trace is not None:
                    trace.append((now - start, temperature, current_score))
            else:
                state.move(*move)

        solutions.append(state)
        logger.info("Tried %d moves (%d performed, %d accepted, %d restarts)", counter, transitions, accepted, restarts)

        scores = [_score(s) for s in solutions]
        best_index = int(np.argmax(scores))
        best = solutions[best_index]
        best_score = scores[best_index]

        from_session = False
        if session is None or session.best is None or _score(session.best) < best_score:
            logger.info("Best solution was attempt %d (score %.6g)", best_index, best_score)
            result = best
        else:
            logger.info("Keeping best solution from an earlier run")
            result = session.best.clone()
            from_session = True

        removed = remove_useless_moves(result)
        swapped = minimize_steps(result)
        if removed or swapped:
            logger.info("Post-processing removed %d useless moves and %d equivalent swaps", removed, swapped)

        if session is not None:
            session.runs += 1
            if not from_session:
                session.best = result.clone()

        self.last_stats = SolveStats(
            iterations=counter,
            transitions=transitions,
            accepted=accepted,
            restarts=restarts,
            best_attempt=best_index,
            best_score=float(best_score),
            final_score=float(_score(result)),
            from_session=from_session,
            useless_moves_removed=removed,
            equivalent_swaps=swapped,
            elapsed_ms=self._now_ms() - start,
        )
        return result

    def solve_blocking(
        self,
        inventory: BoardState,
        solve_time_ms: float = DEFAULT_SOLVE_TIME_MS,
        *,
        session: SearchSession | None = None,
        seed: int | None = None,
        trace: list[tuple[float, float, float]] | None = None,
    ) -> BoardState:
        """Run `solve` to completion on a fresh event loop."""
        return asyncio.run(self.solve(inventory, solve_time_ms, session=session, seed=seed, trace=trace))
