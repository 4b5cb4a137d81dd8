from __future__ import annotations

import json
from pathlib import Path

from typer.testing import CliRunner

from bingo_sheets.cli import app
from bingo_sheets.version import __version__

runner = CliRunner()


def run_args(tmp_path: Path, *extra: str) -> list[str]:
    return [
        "run",
        "--count",
        "4",
        "--seed",
        "3",
        "--out-sheets",
        str(tmp_path / "sheets.json"),
        "--out-report",
        str(tmp_path / "report.json"),
        *extra,
    ]


def test_version():
    result = runner.invoke(app, ["--version"])
    assert result.exit_code == 0
    assert __version__ in result.output


def test_run_writes_sheets_report_and_csv(tmp_path: Path):
    csv_path = tmp_path / "out" / "summary.csv"
    result = runner.invoke(app, run_args(tmp_path, "--summary-csv", str(csv_path)))
    assert result.exit_code == 0, result.output

    data = json.loads((tmp_path / "sheets.json").read_text(encoding="utf-8"))
    assert [s["id"] for s in data["sheets"]] == ["1", "2", "3", "4"]
    assert all(s["grid"][2][2] is None for s in data["sheets"])
    assert data["run_meta"]["seed"] == 3
    assert data["run_meta"]["seed_mode"] == "fixed"
    assert data["sheets_hash"].startswith("sha256:")

    report = json.loads((tmp_path / "report.json").read_text(encoding="utf-8"))
    assert report["ok_free_cells"] is True
    assert csv_path.read_text(encoding="utf-8").startswith("number,total")


def test_run_is_reproducible(tmp_path: Path):
    first, second = tmp_path / "a", tmp_path / "b"
    assert runner.invoke(app, run_args(first)).exit_code == 0
    assert runner.invoke(app, run_args(second)).exit_code == 0
    a = json.loads((first / "sheets.json").read_text(encoding="utf-8"))
    b = json.loads((second / "sheets.json").read_text(encoding="utf-8"))
    assert a["sheets_hash"] == b["sheets_hash"]


def test_run_refuses_overwrite_without_force(tmp_path: Path):
    assert runner.invoke(app, run_args(tmp_path)).exit_code == 0
    assert runner.invoke(app, run_args(tmp_path)).exit_code == 2
    assert runner.invoke(app, run_args(tmp_path, "--force")).exit_code == 0


def test_run_rejects_count_over_maximum(tmp_path: Path):
    result = runner.invoke(
        app, ["run", "--count", "10001", "--out-sheets", str(tmp_path / "s.json")]
    )
    assert result.exit_code == 2
    assert not (tmp_path / "s.json").exists()


def test_dry_run_with_wall_clock_seed():
    result = runner.invoke(app, ["run", "--seed-mode", "time", "--dry-run"])
    assert result.exit_code == 0
    assert "Params hash: sha256:" in result.output
    assert "(time, py_random)" in result.output


def test_bad_seed_mode_is_config_error():
    result = runner.invoke(app, ["run", "--seed-mode", "lunar", "--dry-run"])
    assert result.exit_code == 2


def test_verify_round_trip_and_strict(tmp_path: Path):
    assert runner.invoke(app, run_args(tmp_path)).exit_code == 0
    sheets = tmp_path / "sheets.json"

    result = runner.invoke(
        app, ["verify", "--sheets", str(sheets), "--report", str(tmp_path / "again.json"), "--strict"]
    )
    assert result.exit_code == 0, result.output
    assert (tmp_path / "again.json").exists()

    data = json.loads(sheets.read_text(encoding="utf-8"))
    data["sheets"][0]["grid"][2][2] = 33
    sheets.write_text(json.dumps(data), encoding="utf-8")
    assert runner.invoke(app, ["verify", "--sheets", str(sheets)]).exit_code == 0
    assert runner.invoke(app, ["verify", "--sheets", str(sheets), "--strict"]).exit_code == 1


def test_verify_missing_file(tmp_path: Path):
    result = runner.invoke(app, ["verify", "--sheets", str(tmp_path / "missing.json")])
    assert result.exit_code == 2


def test_non_integer_env_count_is_config_error(monkeypatch):
    monkeypatch.setenv("BINGO_SHEETS_COUNT", "abc")
    result = runner.invoke(app, ["run", "--dry-run"])
    assert result.exit_code == 2
    assert "count must be an integer" in result.output


def test_verify_refuses_existing_report(tmp_path: Path):
    assert runner.invoke(app, run_args(tmp_path)).exit_code == 0
    args = ["verify", "--sheets", str(tmp_path / "sheets.json"), "--report", str(tmp_path / "report.json")]
    assert runner.invoke(app, args).exit_code == 2
    assert runner.invoke(app, [*args, "--force"]).exit_code == 0
