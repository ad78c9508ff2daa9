import json
from pathlib import Path

import pytest

from cog_solver.config import load_solve_preset, preset_to_argv


def _write(path: Path, data: object) -> Path:
    path.write_text(json.dumps(data), encoding="utf-8")
    return path


def test_solve_section_is_validated_and_coerced(tmp_path: Path) -> None:
    cfg = _write(
        tmp_path / "solve.json",
        {
            "solve": {"time_ms": 250, "rounds": 2.0, "pretty": True, "seed": None, "weights": {"stepsPenalty": "0.5"}},
            "notes": "ignored outside the solve section",
        },
    )
    preset = load_solve_preset(cfg)
    assert preset == {"time_ms": 250.0, "rounds": 2, "pretty": True, "weights_steps_penalty": 0.5}
    assert preset_to_argv(preset) == ["--time-ms", "250.0", "--rounds", "2", "--pretty", "--weights-steps-penalty", "0.5"]


def test_top_level_mapping_without_section(tmp_path: Path) -> None:
    cfg = _write(tmp_path / "flat.json", {"restart_every": 500, "pretty": False, "weights": {"build_rate": 1}})
    preset = load_solve_preset(cfg)
    assert preset_to_argv(preset) == ["--restart-every", "500", "--weights-build-rate", "1.0"]


@pytest.mark.parametrize(
    "section, message",
    [
        ({"time_mss": 10}, "time_mss"),
        ({"weights": {"bild_rate": 1}}, "bild_rate"),
        ({"rounds": 1.5}, "rounds"),
        ({"pretty": "yes"}, "pretty"),
        ({"time_ms": "soon"}, "time_ms"),
        ({"seed": [1, 2]}, "seed"),
    ],
)
def test_bad_presets_name_the_key(tmp_path: Path, section: dict, message: str) -> None:
    cfg = _write(tmp_path / "bad.json", {"solve": section})
    with pytest.raises(ValueError, match=message):
        load_solve_preset(cfg)


def test_preset_shapes(tmp_path: Path) -> None:
    with pytest.raises(TypeError):
        load_solve_preset(_write(tmp_path / "list.json", [1, 2]))
    with pytest.raises(TypeError):
        load_solve_preset(_write(tmp_path / "section.json", {"solve": ["--time-ms", "10"]}))
    with pytest.raises(TypeError):
        load_solve_preset(_write(tmp_path / "weights.json", {"solve": {"weights": 3}}))


def test_shipped_preset_is_valid() -> None:
    path = Path(__file__).resolve().parents[1] / "configs" / "solve.json"
    preset = load_solve_preset(path)
    assert preset["time_ms"] > 0
    assert "weights_build_rate" in preset


def test_yaml_preset(tmp_path: Path) -> None:
    pytest.importorskip("yaml")
    cfg = tmp_path / "solve.yaml"
    cfg.write_text("solve:\n  time_ms: 75\n  weights:\n    buildRate: 1\n", encoding="utf-8")
    assert preset_to_argv(load_solve_preset(cfg)) == ["--time-ms", "75.0", "--weights-build-rate", "1.0"]
