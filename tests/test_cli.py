import json
from pathlib import Path

import pytest

from cog_solver.cli import score_board, solve_board


def _board(tmp_path: Path) -> Path:
    path = tmp_path / "board.json"
    data = {
        "spare_slots": 4,
        "flags": [30],
        "locked": [95],
        "cogs": [
            {"key": 108, "name": "Worker", "buildRate": 10},
            {"key": 0, "name": "Ace", "build_rate": 5, "boost_radius": "adjacent", "build_radius_boost": 20},
            {"key": 31, "name": "Flagger", "flaggy": 2, "flag_boost": 3},
        ],
    }
    path.write_text(json.dumps(data), encoding="utf-8")
    return path


def test_solve_board_writes_result(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    board = _board(tmp_path)
    out = tmp_path / "out" / "solved.json"
    rc = solve_board.main(
        [str(board), "--no-config", "--out", str(out), "--time-ms", "50", "--seed", "0", "--weights-build-rate", "1", "--rounds", "2"]
    )
    assert rc == 0
    assert out.is_file()
    data = json.loads(out.read_text(encoding="utf-8"))
    assert data["weights"]["build_rate"] == 1.0
    assert data["effective_score"] >= 5.0
    assert isinstance(data["steps"], list)

    printed = capsys.readouterr().out
    assert "round 2:" in printed
    assert f"wrote: {out}" in printed


def test_solve_board_reads_config(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    board = _board(tmp_path)
    cfg = tmp_path / "cfg.json"
    cfg.write_text(json.dumps({"solve": {"time_ms": 0, "weights": {"build_rate": 2}}}), encoding="utf-8")
    rc = solve_board.main([str(board), "--config", str(cfg)])
    assert rc == 0
    out = tmp_path / "board_solved.json"
    data = json.loads(out.read_text(encoding="utf-8"))
    assert data["weights"]["build_rate"] == 2.0
    assert data["steps"] == []
    assert "iterations=0" in capsys.readouterr().out


def test_solve_board_errors(tmp_path: Path) -> None:
    with pytest.raises(SystemExit):
        solve_board.main([str(tmp_path / "missing.json"), "--no-config"])
    with pytest.raises(SystemExit):
        solve_board.main([str(_board(tmp_path)), "--no-config", "--restart-every", "0"])
    with pytest.raises(SystemExit):
        solve_board.main([str(_board(tmp_path)), "--no-config", "--config", str(tmp_path / "c.json")])

    typo = tmp_path / "typo.json"
    typo.write_text(json.dumps({"solve": {"time_mss": 10}}), encoding="utf-8")
    with pytest.raises(SystemExit, match="time_mss"):
        solve_board.main([str(_board(tmp_path)), "--config", str(typo)])

    locked_home = tmp_path / "locked_home.json"
    locked_home.write_text(json.dumps({"locked": [10], "cogs": [{"key": 5, "initial_key": 10}]}), encoding="utf-8")
    with pytest.raises(SystemExit, match="initial key 10"):
        solve_board.main([str(locked_home), "--no-config", "--time-ms", "0"])


def test_score_board_prints_json(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    board = _board(tmp_path)
    assert score_board.main([str(board)]) == 0
    data = json.loads(capsys.readouterr().out)
    assert data["score"]["build_rate"] == 5.0
    assert data["flags"] == 1
    assert data["players"] == 1
    assert "effective_score" not in data

    assert score_board.main([str(board), "--weights-build-rate", "1", "--weights-flaggy", "1"]) == 0
    data = json.loads(capsys.readouterr().out)
    assert data["effective_score"] == pytest.approx(5.0 + 2.0 * (3.0 + 1.0) / 1.0)
