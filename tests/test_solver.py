import asyncio
import itertools

import pytest

from cog_solver.inventory import Cog, Inventory
from cog_solver.scoring import Weights, moved_count
from cog_solver.solver import SearchSession, Solver, SolverConfig


def _fake_clock(step_s: float = 0.001):
    ticks = itertools.count()
    return lambda: next(ticks) * step_s


def _single_spare_board() -> Inventory:
    return Inventory([Cog(key=108, name="Worker", build_rate=10)])


def test_zero_budget_returns_clean_copy_of_input() -> None:
    inv = Inventory([Cog(key=1, name="A", build_rate=5), Cog(key=2, name="B", build_rate=3)])
    solver = Solver({"build_rate": 1})
    result = solver.solve_blocking(inv, 0)
    assert result is not inv
    assert result.score.build_rate == 8.0
    assert moved_count(result) == 0
    assert solver.last_stats is not None
    assert solver.last_stats.iterations == 0
    assert solver.last_stats.best_attempt == 0


def test_solve_never_mutates_input() -> None:
    inv = _single_spare_board()
    solver = Solver(Weights(build_rate=1), clock=_fake_clock())
    solver.solve_blocking(inv, 300, seed=0)
    assert inv.cogs[108].name == "Worker"
    assert inv.score.build_rate == 0.0


def test_solve_places_worker_on_board() -> None:
    inv = _single_spare_board()
    solver = Solver(Weights(build_rate=1), clock=_fake_clock())
    result = solver.solve_blocking(inv, 500, seed=0)
    assert result.score.build_rate == 10.0
    assert moved_count(result) == 1
    stats = solver.last_stats
    assert stats is not None
    assert stats.transitions > 0
    assert stats.final_score == pytest.approx(10.0)


def test_seeded_runs_are_reproducible() -> None:
    cogs = [Cog(key=k, name=f"c{k}", build_rate=k % 5) for k in range(0, 12)]
    cogs.append(Cog(key=30, name="Boost", boost_radius="around", build_radius_boost=25))
    inv = Inventory(cogs, flags=[60])

    def run() -> dict[int, str]:
        solver = Solver(Weights(build_rate=1), clock=_fake_clock())
        result = solver.solve_blocking(inv, 400, seed=42)
        return {k: c.name for k, c in result.cogs.items()}

    assert run() == run()


def test_session_keeps_best_across_runs() -> None:
    inv = _single_spare_board()
    solver = Solver(Weights(build_rate=1), clock=_fake_clock())
    session = SearchSession()

    first = solver.solve_blocking(inv, 500, session=session, seed=0)
    assert first.score.build_rate == 10.0
    assert session.best is not None and session.best is not first

    second = solver.solve_blocking(inv, 0, session=session)
    assert solver.last_stats is not None
    assert solver.last_stats.from_session is True
    assert second.score.build_rate == 10.0
    assert second is not session.best
    assert session.runs == 2

    session.reset()
    assert session.best is None and session.runs == 0


def test_steps_penalty_discourages_pointless_moves() -> None:
    inv = Inventory([Cog(key=0, name="A", build_rate=10), Cog(key=1, name="B", build_rate=3)])
    solver = Solver(Weights(build_rate=1, steps_penalty=1000), clock=_fake_clock())
    result = solver.solve_blocking(inv, 300, seed=5)
    assert moved_count(result) == 0
    assert solver.effective_score(result, inv) == pytest.approx(13.0)


def test_flaggy_weight_ignored_without_flags() -> None:
    solver = Solver(Weights(build_rate=1, flaggy=5))
    assert solver.run_weights(Inventory()).flaggy == 0.0
    assert solver.run_weights(Inventory(flags=[10])).flaggy == 5.0
    assert solver.weights.flaggy == 5.0

    solver.set_weights(build_rate="2", steps_penalty="bad")
    assert solver.weights == Weights(build_rate=2.0)


def test_solve_yields_to_event_loop() -> None:
    inv = _single_spare_board()
    solver = Solver(Weights(build_rate=1), clock=_fake_clock())

    async def _run() -> int:
        ticks = 0
        done = False

        async def ticker() -> None:
            nonlocal ticks
            while not done:
                ticks += 1
                await asyncio.sleep(0)

        task = asyncio.create_task(ticker())
        await solver.solve(inv, 350, seed=1)
        done = True
        await task
        return ticks

    assert asyncio.run(_run()) >= 2


def test_restarts_happen_on_schedule() -> None:
    inv = Inventory([Cog(key=k, name=f"c{k}", build_rate=1) for k in range(4)])
    config = SolverConfig(restart_every=10, shuffle_moves=5)
    solver = Solver(Weights(build_rate=1), config, clock=_fake_clock())
    solver.solve_blocking(inv, 100, seed=0)
    stats = solver.last_stats
    assert stats is not None
    assert stats.restarts == stats.iterations // 10
    assert stats.restarts >= 1


@pytest.mark.parametrize(
    "kwargs",
    [
        {"swap_prob": 1.5},
        {"restart_every": 0},
        {"shuffle_moves": -1},
        {"yield_interval_ms": -1.0},
        {"t_floor": 0.0},
    ],
)
def test_solver_config_validation(kwargs: dict) -> None:
    with pytest.raises(ValueError):
        SolverConfig(**kwargs)


def test_greedy_at_temperature_floor() -> None:
    cogs = [Cog(key=108 + i, name=f"w{i}", build_rate=1 + i) for i in range(6)]
    cogs.append(Cog(key=20, name="Boost", boost_radius="around", build_radius_boost=50))
    inv = Inventory(cogs, spare_slots=8)
    # t_min == t0: the whole walk runs at the floor.
    solver = Solver(Weights(build_rate=1), SolverConfig(t_min_ratio=1.0), clock=_fake_clock())
    trace: list[tuple[float, float, float]] = []
    solver.solve_blocking(inv, 400, seed=3, trace=trace)

    assert trace
    floor = trace[0][1]
    assert all(temp == floor for _, temp, _ in trace)
    scores = [score for _, _, score in trace]
    assert all(b > a for a, b in zip(scores, scores[1:]))


def test_trace_records_accepted_moves() -> None:
    inv = _single_spare_board()
    solver = Solver(Weights(build_rate=1), clock=_fake_clock())
    trace: list[tuple[float, float, float]] = []
    solver.solve_blocking(inv, 300, seed=0, trace=trace)
    stats = solver.last_stats
    assert stats is not None
    assert len(trace) == stats.accepted
    assert all(0.0 <= elapsed < 300.0 for elapsed, _, _ in trace)
