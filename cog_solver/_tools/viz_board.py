#!/usr/bin/env python3

"""Draw a cog board JSON as an 8x12 grid.

This is meant for manual inspection of solver output:
- Colors every board cell by the cog's build rate (flags and locked cells are marked).
- Labels cogs by name (or key) and tags players.
- Optionally draws arrows from each moved cog's initial cell to its current cell.
"""

from __future__ import annotations

import argparse
from pathlib import Path

import numpy as np

from cog_solver.constants import BOARD_COLS, BOARD_MAX_KEY, BOARD_ROWS


def _cell_center(key: int) -> tuple[float, float]:
    row, col = divmod(int(key), BOARD_COLS)
    return col + 0.5, row + 0.5


def main(argv: list[str] | None = None) -> int:
    ap = argparse.ArgumentParser(description="Plot a cog board JSON.")
    ap.add_argument("board", type=Path, help="Board JSON (input or solved)")
    ap.add_argument("--out", type=Path, default=None, help="Output image path (default: <board>.png)")
    ap.add_argument("--dpi", type=int, default=150)
    ap.add_argument("--moves", action="store_true", help="Draw arrows for moved cogs that start and end on the board")
    ap.add_argument("--no-labels", action="store_true", help="Skip cog labels")
    ns = ap.parse_args(argv)

    board_path = Path(ns.board).resolve()
    if not board_path.is_file():
        raise SystemExit(f"board not found: {board_path}")

    out = Path(ns.out) if ns.out is not None else board_path.with_suffix(".png")
    out = out.resolve()
    out.parent.mkdir(parents=True, exist_ok=True)

    import matplotlib

    matplotlib.use("Agg")
    import matplotlib.pyplot as plt  # noqa: E402

    from cog_solver.board_io import load_board  # noqa: E402

    try:
        inventory = load_board(board_path)
    except (TypeError, ValueError) as exc:
        raise SystemExit(str(exc)) from exc

    rates = np.full((BOARD_ROWS, BOARD_COLS), np.nan, dtype=float)
    for key, cog in inventory.cogs.items():
        if key <= BOARD_MAX_KEY:
            rates[key // BOARD_COLS, key % BOARD_COLS] = float(cog.build_rate)

    fig, ax = plt.subplots(figsize=(BOARD_COLS * 0.8, BOARD_ROWS * 0.8))
    img = ax.imshow(rates, cmap="viridis", extent=(0, BOARD_COLS, BOARD_ROWS, 0), interpolation="nearest")
    fig.colorbar(img, ax=ax, label="build rate", fraction=0.03)

    for key in inventory.flag_pose:
        row, col = divmod(int(key), BOARD_COLS)
        ax.add_patch(plt.Rectangle((col, row), 1, 1, color="tab:red", alpha=0.6))
        ax.text(col + 0.5, row + 0.5, "F", ha="center", va="center", fontsize=9, color="white")
    for key in sorted(inventory.locked):
        row, col = divmod(int(key), BOARD_COLS)
        ax.add_patch(plt.Rectangle((col, row), 1, 1, color="0.3", hatch="//", alpha=0.6))

    if not ns.no_labels:
        for key, cog in inventory.cogs.items():
            if key > BOARD_MAX_KEY:
                continue
            x, y = _cell_center(key)
            label = (cog.name or str(key))[:8]
            if cog.is_player:
                label += "\n(P)"
            ax.text(x, y, label, ha="center", va="center", fontsize=6, color="white")

    n_arrows = 0
    if ns.moves:
        for cog in inventory.moved_cogs():
            src, dst = int(cog.initial_key), int(cog.key)  # type: ignore[arg-type]
            if src > BOARD_MAX_KEY or dst > BOARD_MAX_KEY:
                continue
            x0, y0 = _cell_center(src)
            x1, y1 = _cell_center(dst)
            ax.annotate("", xy=(x1, y1), xytext=(x0, y0), arrowprops={"arrowstyle": "->", "color": "tab:orange", "lw": 1.2})
            n_arrows += 1

    ax.set_xticks(np.arange(BOARD_COLS + 1))
    ax.set_yticks(np.arange(BOARD_ROWS + 1))
    ax.grid(True, color="white", lw=0.5, alpha=0.5)
    ax.set_xlim(0, BOARD_COLS)
    ax.set_ylim(BOARD_ROWS, 0)
    score = inventory.score
    ax.set_title(
        f"build={score.build_rate:.2f}  exp={score.exp_bonus:.2f}  flaggy={score.flaggy:.2f}  "
        f"moved={len(inventory.moved_cogs())}  arrows={n_arrows}"
    )

    fig.savefig(out, dpi=int(ns.dpi), bbox_inches="tight")
    plt.close(fig)
    print(f"wrote: {out}")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
