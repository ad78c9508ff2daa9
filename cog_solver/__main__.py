"""Single entrypoint for solving a cog board (`python -m cog_solver`)."""

from __future__ import annotations

from cog_solver.cli.solve_board import main as cli_main


def main() -> int:
    return int(cli_main())


if __name__ == "__main__":
    raise SystemExit(main())
