#!/usr/bin/env python3

"""CLI to optimize a cog board JSON and write the solved board."""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path

from cog_solver.board_io import load_board, save_board
from cog_solver.config import default_config_path, load_solve_preset, preset_to_argv
from cog_solver.constants import DEFAULT_SOLVE_TIME_MS, RESTART_EVERY, SHUFFLE_MOVES, SWAP_PROB
from cog_solver.scoring import Weights, moved_count
from cog_solver.solver import SearchSession, Solver, SolverConfig


def main(argv: list[str] | None = None) -> int:
    """Parse flags (after config defaults), solve the board, write JSON, print a summary."""
    argv = list(sys.argv[1:] if argv is None else argv)

    cfg_default = default_config_path()
    pre = argparse.ArgumentParser(add_help=False)
    pre.add_argument("--config", type=Path, default=None)
    pre.add_argument("--no-config", action="store_true")
    pre_args, _ = pre.parse_known_args(argv)
    if pre_args.no_config and pre_args.config is not None:
        raise SystemExit("Use either --config or --no-config, not both.")

    config_path = None if pre_args.no_config else (pre_args.config or cfg_default)
    config_args: list[str] = []
    if config_path is not None:
        try:
            config_args = preset_to_argv(load_solve_preset(config_path))
        except (OSError, TypeError, ValueError) as exc:
            raise SystemExit(f"bad config: {exc}") from exc

    ap = argparse.ArgumentParser(description="Optimize a cog board with simulated annealing.")
    ap.add_argument(
        "--config",
        type=Path,
        default=config_path,
        help="JSON/YAML config with defaults for this command (defaults to configs/solve.json when present).",
    )
    ap.add_argument("--no-config", action="store_true", help="Disable loading the default config (if any).")
    ap.add_argument("board", type=Path, help="Input board JSON")
    ap.add_argument("--out", type=Path, default=None, help="Output board JSON (default: <board>_solved.json)")
    ap.add_argument("--time-ms", type=float, default=DEFAULT_SOLVE_TIME_MS, help="Wall-clock budget per round (ms)")
    ap.add_argument("--rounds", type=int, default=1, help="Solve rounds sharing one search session")
    ap.add_argument("--seed", type=int, default=None, help="RNG seed (round i uses seed + i)")
    ap.add_argument("--weights-build-rate", type=float, default=0.0)
    ap.add_argument("--weights-exp-bonus", type=float, default=0.0)
    ap.add_argument("--weights-flaggy", type=float, default=0.0)
    ap.add_argument("--weights-steps-penalty", type=float, default=0.0, help="Penalty per moved cog")
    ap.add_argument("--swap-prob", type=float, default=SWAP_PROB, help="Probability of a board swap move")
    ap.add_argument("--restart-every", type=int, default=RESTART_EVERY, help="Iterations between restarts")
    ap.add_argument("--shuffle-moves", type=int, default=SHUFFLE_MOVES, help="Random moves per restart shuffle")
    ap.add_argument(
        "--log-level",
        type=str,
        default="WARNING",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Log level for solver diagnostics.",
    )
    ap.add_argument("--pretty", action="store_true", help="Print the step list")
    args = ap.parse_args(config_args + argv)

    if int(args.rounds) <= 0:
        raise SystemExit("--rounds must be >= 1")

    logging.basicConfig(level=getattr(logging, str(args.log_level)), format="%(levelname)s %(name)s: %(message)s")

    board_path = Path(args.board)
    if not board_path.is_file():
        raise SystemExit(f"board not found: {board_path}")
    out = Path(args.out) if args.out is not None else board_path.with_name(board_path.stem + "_solved.json")

    try:
        inventory = load_board(board_path)
        config = SolverConfig(
            swap_prob=float(args.swap_prob),
            restart_every=int(args.restart_every),
            shuffle_moves=int(args.shuffle_moves),
        )
    except (TypeError, ValueError) as exc:
        raise SystemExit(str(exc)) from exc

    weights = Weights(
        build_rate=args.weights_build_rate,
        exp_bonus=args.weights_exp_bonus,
        flaggy=args.weights_flaggy,
        steps_penalty=args.weights_steps_penalty,
    )
    solver = Solver(weights, config)
    session = SearchSession()

    result = inventory
    for i in range(int(args.rounds)):
        seed = None if args.seed is None else int(args.seed) + i
        result = solver.solve_blocking(inventory, float(args.time_ms), session=session, seed=seed)
        stats = solver.last_stats
        if stats is not None:
            print(
                f"round {i + 1}: iterations={stats.iterations} restarts={stats.restarts} "
                f"score={stats.final_score:.6f} from_session={stats.from_session}"
            )

    save_board(out, result, weights=weights, reference=inventory)  # type: ignore[arg-type]

    print(f"wrote: {out}")
    print(f"initial score: {solver.effective_score(inventory, inventory):.6f}")
    print(f"final score: {solver.effective_score(result, inventory):.6f}")
    print(f"moved cogs: {moved_count(result)}")
    if args.pretty:
        for cog in result.moved_cogs():  # type: ignore[attr-defined]
            label = cog.name or f"cog@{cog.initial_key}"
            print(f"  {label}: {cog.initial_key} -> {cog.key}")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
