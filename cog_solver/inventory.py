"""Reference cog board: slots, cogs and the NumPy score kernel.

Key layout:
- `0..95`: the 8x12 board (`key = row * 12 + col`)
- `96..107`: build shelf (cogs there are never moved by the solver)
- `108..`: spare storage

Only cogs on the board contribute to the score. Boosters add a percentage to
every board cell covered by their `boost_radius`; coverage tables are built
once per radius with NumPy.
"""

from __future__ import annotations

import copy
import math
from dataclasses import dataclass
from functools import lru_cache
from typing import Iterable

import numpy as np

from .constants import (
    BOARD_COLS,
    BOARD_MAX_KEY,
    BOARD_SIZE,
    BUILD_MAX_KEY,
    BUILD_MIN_KEY,
    DEFAULT_SPARE_SLOTS,
    LOCATION_BOARD,
    LOCATION_BUILD,
    LOCATION_SPARE,
    SPARE_MIN_KEY,
)
from .scoring import ScoreSnapshot

BOOST_RADII: tuple[str, ...] = (
    "adjacent",
    "diagonal",
    "around",
    "up",
    "down",
    "left",
    "right",
    "row",
    "column",
    "corners",
    "everything",
)


@dataclass(frozen=True)
class Position:
    """Zone classification of a key (`row`/`col` are set on the board only)."""

    location: str
    row: int | None = None
    col: int | None = None


def position_for_key(key: int) -> Position:
    key = int(key)
    if 0 <= key <= BOARD_MAX_KEY:
        return Position(LOCATION_BOARD, key // BOARD_COLS, key % BOARD_COLS)
    if BUILD_MIN_KEY <= key <= BUILD_MAX_KEY:
        return Position(LOCATION_BUILD)
    return Position(LOCATION_SPARE)


@dataclass(frozen=True)
class Slot:
    """An empty position. Fixed slots (locked cells, flags) never receive cogs."""

    key: int
    fixed: bool = False

    def position(self) -> Position:
        return position_for_key(self.key)


@dataclass
class Cog:
    """A piece on the board; `key` changes only through `Inventory.move`."""

    key: int
    initial_key: int | None = None
    name: str = ""
    fixed: bool = False
    is_player: bool = False
    build_rate: float = 0.0
    exp_bonus: float = 0.0
    flaggy: float = 0.0
    flag_boost: float = 0.0
    build_radius_boost: float = 0.0
    exp_radius_boost: float = 0.0
    flaggy_radius_boost: float = 0.0
    boost_radius: str = ""

    def __post_init__(self) -> None:
        self.key = int(self.key)
        self.initial_key = self.key if self.initial_key is None else int(self.initial_key)
        self.boost_radius = str(self.boost_radius or "")

    def position(self) -> Position:
        return position_for_key(self.key)


@lru_cache(maxsize=None)
def boost_coverage(radius: str) -> np.ndarray:
    """Return a `(96, 96)` 0/1 matrix: `[src, dst] == 1` if a booster at `src` reaches `dst`.

    Args:
        radius: One of `BOOST_RADII`, or an empty string for "no boost".

    Raises:
        ValueError: If `radius` is not a known boost radius.
    """
    keys = np.arange(BOARD_SIZE)
    rows = keys // BOARD_COLS
    cols = keys % BOARD_COLS
    dr = rows[None, :] - rows[:, None]
    dc = cols[None, :] - cols[:, None]
    adr = np.abs(dr)
    adc = np.abs(dc)

    if radius == "":
        mask = np.zeros((BOARD_SIZE, BOARD_SIZE), dtype=bool)
    elif radius == "adjacent":
        mask = (adr + adc) == 1
    elif radius == "diagonal":
        mask = (adr == 1) & (adc == 1)
    elif radius == "around":
        mask = (np.maximum(adr, adc) == 1)
    elif radius == "up":
        mask = (dc == 0) & (dr < 0) & (dr >= -2)
    elif radius == "down":
        mask = (dc == 0) & (dr > 0) & (dr <= 2)
    elif radius == "left":
        mask = (dr == 0) & (dc < 0) & (dc >= -2)
    elif radius == "right":
        mask = (dr == 0) & (dc > 0) & (dc <= 2)
    elif radius == "row":
        mask = (dr == 0) & (dc != 0)
    elif radius == "column":
        mask = (dc == 0) & (dr != 0)
    elif radius == "corners":
        mask = (adr == 2) & (adc == 2)
    elif radius == "everything":
        mask = ~np.eye(BOARD_SIZE, dtype=bool)
    else:
        raise ValueError(f"Unknown boost radius: {radius!r}")

    out = mask.astype(float)
    out.setflags(write=False)
    return out


def _flag_adjacency(flags: Iterable[int]) -> np.ndarray:
    """Count, for each board key, the flags orthogonally adjacent to it."""
    counts = np.zeros((BOARD_SIZE,), dtype=float)
    adjacent = boost_coverage("adjacent")
    for key in flags:
        counts += adjacent[int(key)]
    counts.setflags(write=False)
    return counts


def _received(contributions: list[np.ndarray]) -> np.ndarray:
    """Per-cell total of boost rows, exactly rounded so booster order never matters."""
    if not contributions:
        return np.zeros((BOARD_SIZE,), dtype=float)
    if len(contributions) == 1:
        return contributions[0]
    stacked = np.vstack(contributions)
    return np.array([math.fsum(col) for col in stacked.T], dtype=float)


class Inventory:
    """Mutable cog arrangement implementing the solver's `BoardState` contract.

    Args:
        cogs: Cogs keyed by their own `key`; keys must be unique.
        flags: Board keys holding flags (fixed, never occupied by cogs).
        locked: Board keys that are unavailable (fixed, never occupied by cogs).
        spare_slots: Number of spare storage keys starting at 108.

    Raises:
        ValueError: On duplicate keys or initial keys, keys outside the known
            slots, or cogs placed on (or starting from) a flag/locked cell.
    """

    def __init__(
        self,
        cogs: Iterable[Cog] = (),
        *,
        flags: Iterable[int] = (),
        locked: Iterable[int] = (),
        spare_slots: int = DEFAULT_SPARE_SLOTS,
    ) -> None:
        spare_slots = int(spare_slots)
        if spare_slots < 0:
            raise ValueError("spare_slots must be >= 0")

        self.flag_pose: list[int] = sorted({int(k) for k in flags})
        self.locked: frozenset[int] = frozenset(int(k) for k in locked)
        self.spare_slots = spare_slots

        for key in (*self.flag_pose, *self.locked):
            if not 0 <= key <= BOARD_MAX_KEY:
                raise ValueError(f"Flag/locked key {key} is not a board key")

        fixed_keys = set(self.flag_pose) | set(self.locked)
        last_key = SPARE_MIN_KEY + spare_slots - 1
        self._slots: dict[int, Slot] = {key: Slot(key, fixed=key in fixed_keys) for key in range(last_key + 1)}
        self._available: tuple[int, ...] = tuple(
            key
            for key, slot in self._slots.items()
            if not slot.fixed and position_for_key(key).location != LOCATION_BUILD
        )
        self._flag_counts = _flag_adjacency(self.flag_pose)

        self.cogs: dict[int, Cog] = {}
        homes: set[int] = set()
        for cog in cogs:
            if cog.key in self.cogs:
                raise ValueError(f"Duplicate cog key: {cog.key}")
            slot = self._slots.get(cog.key)
            if slot is None:
                raise ValueError(f"Cog key {cog.key} is outside the known slots (0..{last_key})")
            if slot.fixed:
                raise ValueError(f"Cog key {cog.key} is a flag or locked cell")
            home = self._slots.get(int(cog.initial_key))  # type: ignore[arg-type]
            if home is None or home.fixed:
                raise ValueError(f"Cog at {cog.key} has initial key {cog.initial_key}, which is not a free slot")
            if cog.initial_key in homes:
                raise ValueError(f"Duplicate initial key: {cog.initial_key}")
            homes.add(int(cog.initial_key))  # type: ignore[arg-type]
            self.cogs[cog.key] = cog
        self._score: ScoreSnapshot | None = None

    def clone(self) -> "Inventory":
        other = copy.copy(self)
        other.flag_pose = list(self.flag_pose)
        other.cogs = {key: copy.copy(cog) for key, cog in self.cogs.items()}
        return other

    @property
    def cog_keys(self) -> list[int]:
        return sorted(self.cogs)

    @property
    def available_slot_keys(self) -> list[int]:
        return list(self._available)

    def get(self, key: int) -> Cog | Slot | None:
        """Return the cog at `key`, else the empty slot, else `None` for unknown keys."""
        key = int(key)
        cog = self.cogs.get(key)
        if cog is not None:
            return cog
        return self._slots.get(key)

    def move(self, key_a: int, key_b: int) -> None:
        """Exchange the occupants of two keys (a cog and a vacancy, or two cogs).

        Applying the same move twice restores the previous arrangement.

        Raises:
            KeyError: If either key is not a known slot.
            ValueError: If a fixed cog would move, or a cog would land on a fixed slot.
        """
        key_a = int(key_a)
        key_b = int(key_b)
        for key in (key_a, key_b):
            if key not in self._slots:
                raise KeyError(f"Unknown position key: {key}")
        if key_a == key_b:
            return

        cog_a = self.cogs.get(key_a)
        cog_b = self.cogs.get(key_b)
        for cog in (cog_a, cog_b):
            if cog is not None and cog.fixed:
                raise ValueError(f"Cog at {cog.key} is fixed")
        if cog_a is not None and self._slots[key_b].fixed:
            raise ValueError(f"Slot {key_b} is fixed")
        if cog_b is not None and self._slots[key_a].fixed:
            raise ValueError(f"Slot {key_a} is fixed")

        self.cogs.pop(key_a, None)
        self.cogs.pop(key_b, None)
        if cog_a is not None:
            cog_a.key = key_b
            self.cogs[key_b] = cog_a
        if cog_b is not None:
            cog_b.key = key_a
            self.cogs[key_a] = cog_b
        self._score = None

    @property
    def score(self) -> ScoreSnapshot:
        if self._score is None:
            self._score = self._compute_score()
        return self._score

    def _compute_score(self) -> ScoreSnapshot:
        build = np.zeros((BOARD_SIZE,), dtype=float)
        flaggy = np.zeros((BOARD_SIZE,), dtype=float)
        flag_boost = np.zeros((BOARD_SIZE,), dtype=float)
        players = np.zeros((BOARD_SIZE,), dtype=bool)
        build_in: list[np.ndarray] = []
        exp_in: list[np.ndarray] = []
        flaggy_in: list[np.ndarray] = []
        exp_bonus: list[float] = []

        for key in sorted(self.cogs):
            if key > BOARD_MAX_KEY:
                continue
            cog = self.cogs[key]
            build[key] = cog.build_rate
            flaggy[key] = cog.flaggy
            flag_boost[key] = cog.flag_boost
            players[key] = bool(cog.is_player)
            exp_bonus.append(float(cog.exp_bonus))
            if not cog.boost_radius:
                continue
            cover = boost_coverage(cog.boost_radius)[key]
            if cog.build_radius_boost:
                build_in.append(float(cog.build_radius_boost) * cover)
            if cog.exp_radius_boost:
                exp_in.append(float(cog.exp_radius_boost) * cover)
            if cog.flaggy_radius_boost:
                flaggy_in.append(float(cog.flaggy_radius_boost) * cover)

        build_pct = _received(build_in)
        flaggy_pct = _received(flaggy_in)
        return ScoreSnapshot(
            build_rate=math.fsum(build * (100.0 + build_pct)) / 100.0,
            exp_bonus=math.fsum(exp_bonus),
            flaggy=math.fsum(flaggy * (100.0 + flaggy_pct)) / 100.0,
            exp_boost=math.fsum(_received(exp_in)[players]),
            flag_boost=math.fsum(flag_boost * self._flag_counts),
        )

    def moved_cogs(self) -> list[Cog]:
        """Non-fixed cogs away from their initial key, ordered by initial key."""
        moved = [cog for cog in self.cogs.values() if not cog.fixed and cog.key != cog.initial_key]
        return sorted(moved, key=lambda c: int(c.initial_key))  # type: ignore[arg-type]

    def __repr__(self) -> str:
        return f"Inventory(cogs={len(self.cogs)}, flags={len(self.flag_pose)}, moved={len(self.moved_cogs())})"
