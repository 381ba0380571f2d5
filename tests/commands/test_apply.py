"""Tests for the apply, parse and say CLI commands."""

from __future__ import annotations

import json
from pathlib import Path

import pytest
from click.testing import CliRunner

from barrowctl.cli import cli
from tests.conftest import HALL_ARMORY


def _snapshot(workspace: Path) -> dict:
    return json.loads((workspace / "barrow.json").read_text(encoding="utf-8"))


@pytest.mark.usefixtures("_isolated_workspace")
class TestApplyCommand:
    def test_apply_from_stdin(self, cli_runner: CliRunner, workspace: Path) -> None:
        result = cli_runner.invoke(cli, ["apply"], input=HALL_ARMORY)
        assert result.exit_code == 0
        assert "apply" in result.output
        assert "Added cavern 'Armory' (armory)." in result.output
        snapshot = _snapshot(workspace)
        assert snapshot["id"] == "Khaz Dum"
        assert [c["id"] for c in snapshot["caverns"]] == ["hall", "armory"]
        assert snapshot["caverns"][1]["position"] == {"x": 9.5, "y": 0.0, "z": 0.0}

    def test_apply_from_file(self, cli_runner: CliRunner, workspace: Path) -> None:
        plan = workspace / "plan.shadax"
        plan.write_text(HALL_ARMORY, encoding="utf-8")
        result = cli_runner.invoke(cli, ["--json", "apply", str(plan)])
        assert result.exit_code == 0
        data = json.loads(result.output)
        assert data["data"]["format"] == "shadax"
        assert data["data"]["applied"] == 5

    def test_apply_instruction_document(self, cli_runner: CliRunner, workspace: Path) -> None:
        doc = {
            "caverns": [
                {"id": "hall", "name": "Great Hall", "role": "central"},
                {"id": "crypt", "direction": "north", "anchor": "hall"},
            ],
            "links": [{"from": "hall", "to": "crypt", "type": "door"}],
            "meta": {"units": "m"},
        }
        result = cli_runner.invoke(
            cli, ["--json", "apply", "--format", "instructions"], input=json.dumps(doc)
        )
        assert result.exit_code == 0
        snapshot = _snapshot(workspace)
        assert snapshot["meta"]["units"] == "m"
        assert snapshot["links"][0]["linkType"] == "door"
        assert snapshot["caverns"][1]["position"] == {"x": 0.0, "y": 0.0, "z": -8.0}

    def test_apply_warnings_go_to_stderr(self, cli_runner: CliRunner) -> None:
        result = cli_runner.invoke(cli, ["apply"], input="CAVERN hall\nmake it cosy\n")
        assert result.exit_code == 0
        assert "WARNING: Skipped line 2: make it cosy" in result.output

    def test_json_mode_keeps_warnings_in_payload(self, cli_runner: CliRunner) -> None:
        result = cli_runner.invoke(cli, ["--json", "apply"], input="make it cosy\n")
        assert result.exit_code == 0
        assert "WARNING:" not in result.output
        data = json.loads(result.output)
        assert "Skipped line 1: make it cosy" in data["warnings"]

    def test_apply_no_layout(self, cli_runner: CliRunner, workspace: Path) -> None:
        result = cli_runner.invoke(cli, ["apply", "--no-layout"], input="CAVERN hall\n")
        assert result.exit_code == 0
        assert "position" not in _snapshot(workspace)["caverns"][0]

    def test_apply_invalid_document(self, cli_runner: CliRunner, workspace: Path) -> None:
        result = cli_runner.invoke(cli, ["apply"], input='{"links": 3}')
        assert result.exit_code == 1
        assert "ERROR" in result.output
        assert "'links' must be a list" in result.output
        assert not (workspace / "barrow.json").exists()

    def test_apply_corrupt_barrow(self, cli_runner: CliRunner, workspace: Path) -> None:
        (workspace / "barrow.json").write_text("[]", encoding="utf-8")
        result = cli_runner.invoke(cli, ["apply"], input="CAVERN hall\n")
        assert result.exit_code == 1
        assert "ERROR" in result.output

    def test_bad_format_choice(self, cli_runner: CliRunner) -> None:
        result = cli_runner.invoke(cli, ["apply", "--format", "yaml"], input="")
        assert result.exit_code == 2


@pytest.mark.usefixtures("_isolated_workspace")
class TestParseCommand:
    def test_parse_lists_commands(self, cli_runner: CliRunner, workspace: Path) -> None:
        result = cli_runner.invoke(cli, ["--json", "parse"], input=HALL_ARMORY)
        assert result.exit_code == 0
        data = json.loads(result.output)
        types = [c["type"] for c in data["data"]["commands"]]
        assert types == ["renameBarrow", "addCavern", "addCavern", "addLink", "addCarddon"]
        assert not (workspace / "barrow.json").exists()

    def test_parse_quiet_prints_json_lines(self, cli_runner: CliRunner) -> None:
        result = cli_runner.invoke(
            cli, ["-q", "parse"], input="LINK hall armory DIR E TYPE door\n"
        )
        assert result.exit_code == 0
        line = json.loads(result.output.strip())
        assert line == {
            "type": "addLink",
            "from": "hall",
            "to": "armory",
            "direction": "E",
            "linkType": "door",
        }

    def test_parse_phrases_format(self, cli_runner: CliRunner) -> None:
        result = cli_runner.invoke(
            cli, ["--json", "parse", "--format", "phrases"], input="list caverns"
        )
        data = json.loads(result.output)
        assert data["data"]["commands"] == [{"type": "listCaverns"}]


@pytest.mark.usefixtures("_isolated_workspace")
class TestSayCommand:
    def test_say_adds_cavern(self, cli_runner: CliRunner, workspace: Path) -> None:
        result = cli_runner.invoke(cli, ["say", "add", "cavern", "Forge", "as", "central"])
        assert result.exit_code == 0
        cavern = _snapshot(workspace)["caverns"][0]
        assert cavern["id"] == "forge"
        assert cavern["role"] == "central"

    def test_say_quoted_phrase(self, cli_runner: CliRunner, workspace: Path) -> None:
        cli_runner.invoke(cli, ["say", "add cavern Hall"])
        result = cli_runner.invoke(cli, ["say", "add cavern Armory size large east of Hall"])
        assert result.exit_code == 0
        armory = _snapshot(workspace)["caverns"][1]
        assert armory["sizeClass"] == "large"
        assert armory["position"] == {"x": 9.5, "y": 0.0, "z": 0.0}

    def test_say_list_renders_table(self, cli_runner: CliRunner) -> None:
        cli_runner.invoke(cli, ["say", "add cavern Great Hall"])
        result = cli_runner.invoke(cli, ["say", "list caverns"])
        assert result.exit_code == 0
        assert "great-hall" in result.output

    def test_say_unrecognized(self, cli_runner: CliRunner) -> None:
        result = cli_runner.invoke(cli, ["say", "dig", "deeper"])
        assert result.exit_code == 1
        assert "Unrecognized phrase" in result.output
