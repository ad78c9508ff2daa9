"""Solve presets stored as JSON/YAML files under `configs/`.

A preset holds the defaults of `cog-solve`, optionally under a `solve` section:

    {"solve": {"time_ms": 2000, "rounds": 1, "weights": {"build_rate": 1.0}}}

Every key is checked against the solver options (`SOLVE_OPTIONS`) and the
weight names of `cog_solver.scoring.Weights` (camelCase spellings such as
`stepsPenalty` are accepted), so a typo fails with the offending key instead of
an argparse usage error. The validated preset becomes CLI tokens placed before
the real argv, so flags given on the command line win.

YAML presets require `pyyaml`.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Mapping

from .scoring import WEIGHT_ALIASES, WEIGHT_FIELDS

DEFAULT_CONFIG_NAME: str = "solve.json"
SOLVE_SECTION: str = "solve"

SOLVE_OPTIONS: dict[str, type] = {
    "out": str,
    "time_ms": float,
    "rounds": int,
    "seed": int,
    "swap_prob": float,
    "restart_every": int,
    "shuffle_moves": int,
    "log_level": str,
    "pretty": bool,
}


def repo_root_from_cwd() -> Path:
    """Return the nearest directory (cwd or a parent) holding `pyproject.toml`, else cwd."""
    cwd = Path.cwd().resolve()
    for cand in (cwd, *cwd.parents):
        if (cand / "pyproject.toml").is_file():
            return cand
    return cwd


def default_config_path(filename: str = DEFAULT_CONFIG_NAME) -> Path | None:
    path = (repo_root_from_cwd() / "configs" / filename).resolve()
    return path if path.is_file() else None


def load_config_file(path: Path) -> Any:
    """Parse a JSON or YAML file (by suffix)."""
    path = Path(path)
    raw = path.read_text(encoding="utf-8")
    if path.suffix.lower() in {".yaml", ".yml"}:
        try:
            import yaml  # type: ignore[import-not-found]
        except ImportError as exc:  # pragma: no cover
            raise SystemExit(f"YAML config requires pyyaml: {exc}") from exc
        return yaml.safe_load(raw)
    return json.loads(raw)


def _coerce(name: str, kind: type, value: Any, *, source: Path) -> Any:
    if kind is bool:
        if not isinstance(value, bool):
            raise ValueError(f"{source}: {name!r} must be true or false, got {value!r}")
        return value
    if isinstance(value, (bool, dict, list)):
        raise ValueError(f"{source}: {name!r} expects {kind.__name__}, got {value!r}")
    if kind is int and isinstance(value, float) and not value.is_integer():
        raise ValueError(f"{source}: {name!r} expects an integer, got {value!r}")
    try:
        return kind(value)
    except (TypeError, ValueError) as exc:
        raise ValueError(f"{source}: {name!r} expects {kind.__name__}, got {value!r}") from exc


def load_solve_preset(path: Path) -> dict[str, Any]:
    """Read and validate a solve preset.

    Args:
        path: JSON/YAML file; the `solve` section is used when present,
            otherwise the whole top-level mapping.

    Returns:
        Option name -> coerced value, with weights flattened to
        `weights_<field>`. `null` values are dropped.

    Raises:
        TypeError: If the preset or its `weights` block is not a mapping.
        ValueError: On unknown option or weight names, or values of the wrong kind.
    """
    path = Path(path)
    data = load_config_file(path)
    if not isinstance(data, dict):
        raise TypeError(f"{path}: expected a mapping at top-level, got {type(data).__name__}")
    section = data.get(SOLVE_SECTION, data)
    if not isinstance(section, dict):
        raise TypeError(f"{path}: expected {SOLVE_SECTION!r} to be a mapping, got {type(section).__name__}")

    preset: dict[str, Any] = {}
    for key, value in section.items():
        name = str(key)
        if value is None:
            continue
        if name == "weights":
            if not isinstance(value, dict):
                raise TypeError(f"{path}: expected 'weights' to be a mapping, got {type(value).__name__}")
            for wkey, wvalue in value.items():
                field = WEIGHT_ALIASES.get(str(wkey), str(wkey))
                if field not in WEIGHT_FIELDS:
                    raise ValueError(f"{path}: unknown weight {wkey!r} (known: {', '.join(WEIGHT_FIELDS)})")
                if wvalue is not None:
                    preset[f"weights_{field}"] = _coerce(field, float, wvalue, source=path)
            continue
        kind = SOLVE_OPTIONS.get(name)
        if kind is None:
            known = ", ".join([*SOLVE_OPTIONS, "weights"])
            raise ValueError(f"{path}: unknown option {name!r} (known: {known})")
        preset[name] = _coerce(name, kind, value, source=path)
    return preset


def preset_to_argv(preset: Mapping[str, Any]) -> list[str]:
    """Turn a validated preset into CLI tokens (`True` booleans become bare flags)."""
    argv: list[str] = []
    for name, value in preset.items():
        flag = "--" + name.replace("_", "-")
        if isinstance(value, bool):
            if value:
                argv.append(flag)
            continue
        argv += [flag, str(value)]
    return argv
