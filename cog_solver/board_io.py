"""JSON load/save for boards, and the move list between two arrangements.

Board file shape:

    {
      "spare_slots": 24,
      "flags": [30, 41],
      "locked": [0, 11],
      "cogs": [
        {"key": 13, "name": "Ace", "build_rate": 120, "boost_radius": "around",
         "build_radius_boost": 15},
        {"key": 14, "name": "Player 1", "is_player": true, "exp_bonus": 3},
        ...
      ]
    }

Cog fields may also use the camelCase names of the game export
(`buildRate`, `expRadiusBoost`, `isPlayer`, `initialKey`, ...).
"""

from __future__ import annotations

import json
from dataclasses import asdict, fields
from pathlib import Path
from typing import Any, Mapping

from .constants import DEFAULT_SPARE_SLOTS
from .inventory import Cog, Inventory
from .scoring import Weights, effective_score

_COG_FIELDS: frozenset[str] = frozenset(f.name for f in fields(Cog))

_CAMEL_ALIASES: dict[str, str] = {
    "initialKey": "initial_key",
    "isPlayer": "is_player",
    "buildRate": "build_rate",
    "expBonus": "exp_bonus",
    "flagBoost": "flag_boost",
    "buildRadiusBoost": "build_radius_boost",
    "expRadiusBoost": "exp_radius_boost",
    "flaggyRadiusBoost": "flaggy_radius_boost",
    "boostRadius": "boost_radius",
}


def cog_from_json(data: Mapping[str, Any]) -> Cog:
    """Build a `Cog` from a JSON mapping (unknown fields are ignored).

    Raises:
        ValueError: If `key` is missing.
    """
    values: dict[str, Any] = {}
    for raw_key, value in data.items():
        name = _CAMEL_ALIASES.get(str(raw_key), str(raw_key))
        if name in _COG_FIELDS and value is not None:
            values[name] = value
    if "key" not in values:
        raise ValueError(f"cog entry without 'key': {dict(data)!r}")
    for name in ("fixed", "is_player"):
        if name in values:
            values[name] = bool(values[name])
    for name in (
        "build_rate",
        "exp_bonus",
        "flaggy",
        "flag_boost",
        "build_radius_boost",
        "exp_radius_boost",
        "flaggy_radius_boost",
    ):
        if name in values:
            values[name] = float(values[name])
    return Cog(**values)


def board_from_json(data: Mapping[str, Any]) -> Inventory:
    """Build an `Inventory` from a parsed board mapping.

    Raises:
        TypeError: If `cogs` is not a list.
        ValueError: On invalid keys (see `Inventory`).
    """
    cogs = data.get("cogs", [])
    if not isinstance(cogs, list):
        raise TypeError(f"expected 'cogs' to be a list, got {type(cogs).__name__}")
    return Inventory(
        [cog_from_json(c) for c in cogs],
        flags=[int(k) for k in data.get("flags", [])],
        locked=[int(k) for k in data.get("locked", [])],
        spare_slots=int(data.get("spare_slots", DEFAULT_SPARE_SLOTS)),
    )


def load_board(path: Path) -> Inventory:
    """Load a board JSON file."""
    path = Path(path)
    return board_from_json(json.loads(path.read_text(encoding="utf-8")))


def board_steps(inventory: Inventory) -> list[dict[str, Any]]:
    """Moves needed to turn the initial arrangement into the current one."""
    return [
        {"name": cog.name, "from": int(cog.initial_key), "to": int(cog.key)}  # type: ignore[arg-type]
        for cog in inventory.moved_cogs()
    ]


def board_to_json(
    inventory: Inventory,
    *,
    weights: Weights | None = None,
    reference: Inventory | None = None,
) -> dict[str, Any]:
    """Serialize a board, its raw score, and the steps from its initial arrangement.

    With `weights`, the effective score (normalized against `reference`, or the
    board itself) is included as well.
    """
    cogs = []
    for key in inventory.cog_keys:
        cog = inventory.cogs[key]
        entry = {k: v for k, v in asdict(cog).items() if v not in (0.0, "", False) or k in {"key", "initial_key"}}
        cogs.append(entry)

    out: dict[str, Any] = {
        "spare_slots": int(inventory.spare_slots),
        "flags": list(inventory.flag_pose),
        "locked": sorted(inventory.locked),
        "cogs": cogs,
        "score": inventory.score.to_json(),
        "steps": board_steps(inventory),
    }
    if weights is not None:
        ref = reference if reference is not None else inventory
        run_weights = weights if ref.flag_pose else weights.without_flaggy()
        out["weights"] = run_weights.to_json()
        out["effective_score"] = effective_score(inventory, run_weights, reference=ref)
    return out


def save_board(
    path: Path,
    inventory: Inventory,
    *,
    weights: Weights | None = None,
    reference: Inventory | None = None,
) -> None:
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    data = board_to_json(inventory, weights=weights, reference=reference)
    path.write_text(json.dumps(data, indent=2) + "\n", encoding="utf-8")
