"""Objective evaluation for cog arrangements.

This module implements:
- the raw score snapshot shared with board implementations (`ScoreSnapshot`)
- caller weights (`Weights`) with the numeric coercion rules of the solver
- the weighted objective with player/flag normalization (`score_sum`)
- the effective objective, i.e. the weighted score minus a per-moved-cog penalty

The board itself is a collaborator: anything satisfying `BoardState` can be
scored and searched. `cog_solver.inventory.Inventory` is the reference one.
"""

from __future__ import annotations

import math
from dataclasses import asdict, dataclass, replace
from typing import Any, Mapping, Protocol, Sequence

from .constants import DEFAULT_FLAG_COUNT, DEFAULT_PLAYER_COUNT


@dataclass(frozen=True)
class ScoreSnapshot:
    """Raw score accumulators of one arrangement (compared field by field)."""

    build_rate: float = 0.0
    exp_bonus: float = 0.0
    flaggy: float = 0.0
    exp_boost: float = 0.0
    flag_boost: float = 0.0

    def to_json(self) -> dict[str, float]:
        return {k: float(v) for k, v in asdict(self).items()}


class BoardState(Protocol):
    """Board contract consumed by the solver and the post-processing passes."""

    @property
    def score(self) -> ScoreSnapshot: ...

    @property
    def cog_keys(self) -> Sequence[int]: ...

    @property
    def available_slot_keys(self) -> Sequence[int]: ...

    @property
    def cogs(self) -> Mapping[int, Any]: ...

    @property
    def flag_pose(self) -> Sequence[int]: ...

    def clone(self) -> "BoardState": ...

    def get(self, key: int) -> Any: ...

    def move(self, key_a: int, key_b: int) -> None: ...


def _as_number(value: object) -> float:
    try:
        out = float(value)  # type: ignore[arg-type]
    except (TypeError, ValueError):
        return 0.0
    if math.isnan(out):
        return 0.0
    return out


WEIGHT_FIELDS: tuple[str, ...] = ("build_rate", "exp_bonus", "flaggy", "steps_penalty")
WEIGHT_ALIASES: dict[str, str] = {"buildRate": "build_rate", "expBonus": "exp_bonus", "stepsPenalty": "steps_penalty"}


@dataclass(frozen=True)
class Weights:
    """Objective weights; every field defaults to 0 and non-numeric input coerces to 0."""

    build_rate: float = 0.0
    exp_bonus: float = 0.0
    flaggy: float = 0.0
    steps_penalty: float = 0.0

    def __post_init__(self) -> None:
        for name in WEIGHT_FIELDS:
            object.__setattr__(self, name, _as_number(getattr(self, name)))

    @classmethod
    def from_mapping(cls, data: Mapping[str, object] | None) -> "Weights":
        """Build weights from a mapping, accepting snake_case or camelCase keys."""
        if not data:
            return cls()
        values: dict[str, object] = {}
        for key, value in data.items():
            name = WEIGHT_ALIASES.get(str(key), str(key))
            if name in WEIGHT_FIELDS:
                values[name] = value
        return cls(**values)  # type: ignore[arg-type]

    def without_flaggy(self) -> "Weights":
        return replace(self, flaggy=0.0)

    def to_json(self) -> dict[str, float]:
        return asdict(self)


def normalization(reference: BoardState | None) -> tuple[int, int]:
    """Return `(player_count, flag_count)` used to scale the exp and flaggy terms.

    Args:
        reference: Board the counts are taken from. `None` falls back to
            10 players and 4 flags.

    Returns:
        Both counts, floored at 1. An empty flag sequence counts as 4 flags.
    """
    if reference is None:
        return DEFAULT_PLAYER_COUNT, DEFAULT_FLAG_COUNT
    players = sum(1 for cog in reference.cogs.values() if getattr(cog, "is_player", False))
    flags = len(reference.flag_pose or ()) or DEFAULT_FLAG_COUNT
    return max(1, players), max(1, flags)


def score_sum(score: ScoreSnapshot, weights: Weights, reference: BoardState | None = None) -> float:
    """Weighted raw objective of a score snapshot.

    `build_rate·W_build + exp_bonus·W_exp·(exp_boost+P)/P + flaggy·W_flag·(flag_boost+F)/F`
    where `P`/`F` come from `normalization(reference)`.
    """
    player_count, flag_count = normalization(reference)
    res = 0.0
    res += score.build_rate * weights.build_rate
    res += score.exp_bonus * weights.exp_bonus * (score.exp_boost + player_count) / player_count
    res += score.flaggy * weights.flaggy * (score.flag_boost + flag_count) / flag_count
    return float(res)


def is_displaced(cog: Any) -> bool:
    return not getattr(cog, "fixed", False) and int(cog.key) != int(cog.initial_key)


def moved_count(state: BoardState) -> int:
    """Number of non-fixed cogs away from their initial key (proxy for steps to apply)."""
    return sum(1 for cog in state.cogs.values() if is_displaced(cog))


def effective_score(state: BoardState, weights: Weights, *, reference: BoardState | None = None) -> float:
    """Weighted raw score minus `steps_penalty` per moved cog."""
    raw = score_sum(state.score, weights, reference)
    return raw - weights.steps_penalty * moved_count(state)


def scores_match(a: ScoreSnapshot, b: ScoreSnapshot) -> bool:
    """True if every raw accumulator is exactly equal."""
    return (
        a.build_rate == b.build_rate
        and a.flaggy == b.flaggy
        and a.exp_bonus == b.exp_bonus
        and a.exp_boost == b.exp_boost
        and a.flag_boost == b.flag_boost
    )


_EQUIVALENCE_FIELDS: tuple[str, ...] = (
    "build_rate",
    "exp_bonus",
    "flaggy",
    "build_radius_boost",
    "exp_radius_boost",
    "flaggy_radius_boost",
    "flag_boost",
)


def cogs_equivalent_for_score(a: Any, b: Any) -> bool:
    """True if swapping `a` and `b` cannot change any score (same scoring stats)."""
    for name in _EQUIVALENCE_FIELDS:
        if (getattr(a, name, 0) or 0) != (getattr(b, name, 0) or 0):
            return False
    if (getattr(a, "boost_radius", "") or "") != (getattr(b, "boost_radius", "") or ""):
        return False
    return bool(getattr(a, "is_player", False)) == bool(getattr(b, "is_player", False))
