#!/usr/bin/env python3

"""CLI to score a cog board JSON locally."""

from __future__ import annotations

import argparse
import json
import sys
from pathlib import Path

from cog_solver.board_io import load_board
from cog_solver.scoring import Weights, effective_score, moved_count, normalization


def main(argv: list[str] | None = None) -> int:
    """Parse arguments, score the board, and print JSON to stdout."""
    argv = list(sys.argv[1:] if argv is None else argv)
    ap = argparse.ArgumentParser(description="Score a cog board JSON")
    ap.add_argument("board", type=Path, help="Path to board JSON")
    ap.add_argument("--weights-build-rate", type=float, default=None)
    ap.add_argument("--weights-exp-bonus", type=float, default=None)
    ap.add_argument("--weights-flaggy", type=float, default=None)
    ap.add_argument("--weights-steps-penalty", type=float, default=None)
    ap.add_argument("--pretty", action="store_true", help="Pretty-print JSON")
    args = ap.parse_args(argv)

    if not Path(args.board).is_file():
        raise SystemExit(f"board not found: {args.board}")
    try:
        inventory = load_board(args.board)
    except (TypeError, ValueError) as exc:
        raise SystemExit(str(exc)) from exc

    players, flags = normalization(inventory)
    data: dict = {
        "score": inventory.score.to_json(),
        "moved": moved_count(inventory),
        "players": players,
        "flags": flags,
    }

    given = {
        "build_rate": args.weights_build_rate,
        "exp_bonus": args.weights_exp_bonus,
        "flaggy": args.weights_flaggy,
        "steps_penalty": args.weights_steps_penalty,
    }
    if any(v is not None for v in given.values()):
        weights = Weights.from_mapping({k: v for k, v in given.items() if v is not None})
        if not inventory.flag_pose:
            weights = weights.without_flaggy()
        data["weights"] = weights.to_json()
        data["effective_score"] = effective_score(inventory, weights, reference=inventory)

    if args.pretty:
        print(json.dumps(data, indent=2))
    else:
        print(json.dumps(data))
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
