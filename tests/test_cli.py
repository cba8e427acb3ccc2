"""Tests for the command line interface."""

from __future__ import annotations

import json

import pytest
from typer.testing import CliRunner

from battlereport import __version__
from battlereport.cli import app
from battlereport.core.config import reset_config

runner = CliRunner()


def _make_payload() -> dict:
    def snapshot(seconds: int, kills: int) -> dict:
        return {
            "timestamp": f"2025-03-01T20:00:{seconds:02d}Z",
            "entries": [
                {"playerName": "Ace", "score": kills * 10, "kills": kills, "deaths": 0, "teamLabel": "Axis"}
            ],
        }

    return {
        "round": {"mapName": "Hurtgen", "startTime": "2025-03-01T20:00:00Z"},
        "leaderboardSnapshots": [snapshot(0, 0), snapshot(30, 1)],
    }


@pytest.fixture(autouse=True)
def isolated(monkeypatch, tmp_path):
    monkeypatch.chdir(tmp_path)
    monkeypatch.setenv("HOME", str(tmp_path))
    reset_config()
    yield
    reset_config()


@pytest.fixture
def round_file(tmp_path):
    path = tmp_path / "round.json"
    path.write_text(json.dumps(_make_payload()))
    return path


class TestReportCommand:
    def test_report_shows_feed_and_summary(self, round_file):
        result = runner.invoke(app, ["report", str(round_file)])

        assert result.exit_code == 0, result.output
        assert "Battle begins on Hurtgen" in result.output
        assert "FIRST BLOOD" in result.output
        assert "Round Summary" in result.output

    def test_report_writes_json(self, round_file, tmp_path):
        out = tmp_path / "report.json"

        result = runner.invoke(app, ["report", str(round_file), "--output", str(out)])

        assert result.exit_code == 0, result.output
        data = json.loads(out.read_text())
        assert data["summary"]["total_kills"] == 1
        assert data["summary"]["mvp"]["player_name"] == "Ace"

    def test_hide_joins_only_affects_display(self, round_file, tmp_path):
        out = tmp_path / "report.json"

        result = runner.invoke(app, ["report", str(round_file), "--hide-joins", "-o", str(out)])

        assert result.exit_code == 0, result.output
        assert "joined the battle" not in result.output
        types = [e["type"] for e in json.loads(out.read_text())["events"]]
        assert "spawn" in types

    def test_output_without_suffix_uses_default_format(self, round_file, tmp_path):
        result = runner.invoke(app, ["report", str(round_file), "-o", str(tmp_path / "report")])

        assert result.exit_code == 0, result.output
        assert json.loads((tmp_path / "report.json").read_text())["events"]

    def test_unsupported_output_format(self, round_file, tmp_path):
        result = runner.invoke(app, ["report", str(round_file), "-o", str(tmp_path / "r.xml")])

        assert result.exit_code == 1
        assert "Export failed" in result.output

    def test_invalid_payload(self, tmp_path):
        path = tmp_path / "bad.json"
        path.write_text(json.dumps({"leaderboardSnapshots": []}))

        result = runner.invoke(app, ["report", str(path)])

        assert result.exit_code == 1
        assert "Invalid round report" in result.output

    def test_config_file_is_applied(self, round_file, tmp_path):
        config = tmp_path / "custom.yaml"
        config.write_text("highlights:\n  include_mvp: false\n")
        out = tmp_path / "report.json"

        result = runner.invoke(app, ["report", str(round_file), "-c", str(config), "-o", str(out)])

        assert result.exit_code == 0, result.output
        kinds = [h["type"] for h in json.loads(out.read_text())["highlights"]]
        assert "mvp" not in kinds


class TestOtherCommands:
    def test_summary(self, round_file):
        result = runner.invoke(app, ["summary", str(round_file)])

        assert result.exit_code == 0, result.output
        assert "Round Summary" in result.output
        assert "Battle Feed" not in result.output

    def test_init_config(self, tmp_path):
        path = tmp_path / "battlereport.yaml"

        result = runner.invoke(app, ["init-config", str(path)])

        assert result.exit_code == 0, result.output
        assert "narrative:" in path.read_text()

    def test_init_config_refuses_overwrite(self, tmp_path):
        path = tmp_path / "battlereport.yaml"
        path.write_text("keep me")

        result = runner.invoke(app, ["init-config", str(path)])

        assert result.exit_code == 1
        assert path.read_text() == "keep me"

    def test_init_config_force(self, tmp_path):
        path = tmp_path / "battlereport.yaml"
        path.write_text("keep me")

        result = runner.invoke(app, ["init-config", str(path), "--force"])

        assert result.exit_code == 0, result.output
        assert "narrative:" in path.read_text()

    def test_version(self):
        result = runner.invoke(app, ["--version"])

        assert result.exit_code == 0
        assert __version__ in result.output

    def test_info(self):
        result = runner.invoke(app, ["info"])

        assert result.exit_code == 0, result.output
        assert "Lead gap" in result.output
