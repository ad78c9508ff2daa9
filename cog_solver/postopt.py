"""Deterministic clean-up passes applied to the annealing result.

Both passes keep the raw score snapshot the board had on entry ("goal")
exactly unchanged and only ever lower the number of displaced cogs:
- `remove_useless_moves`: send displaced cogs home when that changes nothing
- `minimize_steps`: swap back pairs of equivalent cogs sitting in each other's home

Each pass rescans from scratch after a change, since one reversion can make
another possible. They run to a fixed point, so a second call is a no-op.
"""

from __future__ import annotations

import logging
from typing import Any

from .scoring import BoardState, cogs_equivalent_for_score, is_displaced, moved_count, scores_match

logger = logging.getLogger(__name__)


def _displaced(state: BoardState) -> list[Any]:
    return [cog for cog in state.cogs.values() if is_displaced(cog)]


def remove_useless_moves(state: BoardState) -> int:
    """Revert every displacement that does not contribute to the score.

    A displaced cog is moved back to its initial key (exchanging with whatever
    sits there). The reversion is kept when all raw score fields still equal
    the goal and the moved count went down; otherwise it is undone.

    Args:
        state: Board to clean in place.

    Returns:
        Number of reversions kept.
    """
    goal = state.score
    removed = 0
    changed = True
    while changed:
        changed = False
        for cog in _displaced(state):
            src = int(cog.key)
            dst = int(cog.initial_key)
            if src == dst:
                continue
            before = moved_count(state)
            state.move(src, dst)
            if scores_match(state.score, goal) and moved_count(state) < before:
                logger.debug("Removed useless move %d to %d", dst, src)
                removed += 1
                changed = True
                continue
            state.move(src, dst)
    return removed


def minimize_steps(state: BoardState) -> int:
    """Swap equivalent cogs that occupy each other's initial key.

    For a pair `(a, b)` with `a` at `b`'s initial key and `b` at `a`'s initial
    key and identical scoring stats, the swap sends both home. It is kept only
    if the goal snapshot is still matched exactly.

    Args:
        state: Board to clean in place.

    Returns:
        Number of swaps kept.
    """
    goal = state.score
    swaps = 0
    changed = True
    while changed:
        changed = False
        moved = _displaced(state)
        for i, a in enumerate(moved):
            for b in moved[i + 1 :]:
                ak, bk = int(a.key), int(b.key)
                if ak != int(b.initial_key) or bk != int(a.initial_key):
                    continue
                if not cogs_equivalent_for_score(a, b):
                    continue
                state.move(ak, bk)
                if scores_match(state.score, goal):
                    logger.info("Step optimization: swapped equivalent cogs at %d and %d (both now in initial position)", ak, bk)
                    swaps += 1
                    changed = True
                    break
                state.move(ak, bk)
            if changed:
                break
    return swaps
