"""Randomized neighbourhood moves for the annealing loop.

Two move kinds are proposed:
- swap: exchange two movable cogs that are both on the board
- slot move: exchange a random slot with a random cog position (may target a vacancy)

Candidates are sampled uniformly from the full key lists and rejected when
ineligible (fixed cog/slot, or a cog on the build shelf). Rejections leave the
board untouched, so the effective move distribution is not uniform over legal
moves.
"""

from __future__ import annotations

from typing import Sequence

import numpy as np

from .constants import BOARD_MAX_KEY, LOCATION_BUILD, SHUFFLE_MOVES, SWAP_PROB
from .scoring import BoardState

Move = tuple[int, int]


def board_cog_keys(state: BoardState) -> list[int]:
    """Keys of non-fixed cogs on the board (`key <= 95`)."""
    keys: list[int] = []
    for key in state.cog_keys:
        if int(key) > BOARD_MAX_KEY:
            continue
        cog = state.get(key)
        if cog is not None and not cog.fixed:
            keys.append(key)
    return keys


def _try_slot_move(state: BoardState, all_slots: Sequence[int], rng: np.random.Generator) -> Move | None:
    cog_keys = state.cog_keys
    if not all_slots or not cog_keys:
        return None
    slot_key = all_slots[int(rng.integers(0, len(all_slots)))]
    cog_key = cog_keys[int(rng.integers(0, len(cog_keys)))]
    slot = state.get(slot_key)
    cog = state.get(cog_key)
    if slot is None or cog is None:
        return None
    if slot.fixed or cog.fixed or cog.position().location == LOCATION_BUILD:
        return None
    state.move(slot_key, cog_key)
    return slot_key, cog_key


def random_move(
    state: BoardState,
    all_slots: Sequence[int],
    rng: np.random.Generator,
    *,
    swap_prob: float = SWAP_PROB,
) -> Move | None:
    """Apply one random move in place.

    Args:
        state: Board to perturb.
        all_slots: Candidate target keys (usually `available_slot_keys`).
        rng: Random generator.
        swap_prob: Probability of attempting a board swap first.

    Returns:
        The key pair that was exchanged (re-applying `state.move(*pair)` undoes
        it), or `None` when the sampled move was ineligible and nothing changed.
    """
    use_swap = rng.random() < swap_prob
    if use_swap:
        board_cogs = board_cog_keys(state)
        if len(board_cogs) >= 2:
            i = int(rng.integers(0, len(board_cogs)))
            j = int(rng.integers(0, len(board_cogs)))
            if j == i:
                j = (j + 1) % len(board_cogs)
            key_a = board_cogs[i]
            key_b = board_cogs[j]
            state.move(key_a, key_b)
            return key_a, key_b
    return _try_slot_move(state, all_slots, rng)


def shuffle(state: BoardState, rng: np.random.Generator, n: int = SHUFFLE_MOVES) -> int:
    """Apply `n` random slot-move attempts (ineligible ones are skipped).

    Returns:
        Number of moves actually applied.
    """
    all_slots = list(state.available_slot_keys)
    applied = 0
    for _ in range(int(n)):
        if _try_slot_move(state, all_slots, rng) is not None:
            applied += 1
    return applied
