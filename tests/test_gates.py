"""Tests for sprintflow.lib.gates module."""

import json

import pytest
from pathlib import Path
from unittest.mock import patch, MagicMock

from sprintflow.lib.gates import (
    GateCommand,
    GateConfig,
    GateConfigError,
    find_gate_config,
    load_gate_config,
    run_gates,
)


def write_config(worktree: Path, filename: str, content: str) -> Path:
    gates_dir = worktree / ".claude"
    gates_dir.mkdir(parents=True, exist_ok=True)
    path = gates_dir / filename
    path.write_text(content)
    return path


class TestLoadGateConfig:
    """Test find_gate_config / load_gate_config."""

    def test_no_config(self, tmp_path):
        assert find_gate_config(tmp_path) is None
        assert load_gate_config(tmp_path) is None

    def test_yaml_config(self, tmp_path):
        write_config(tmp_path, "quality-gates.yaml", (
            "enabled: true\n"
            "commands:\n"
            "  - name: tests\n"
            "    command: pytest -q\n"
            "  - command: ruff check .\n"
            "    required: false\n"
            "    description: lint\n"
        ))
        config = load_gate_config(tmp_path)
        assert config.enabled is True
        assert config.commands == [
            GateCommand(name="tests", command="pytest -q"),
            GateCommand(name="ruff check .", command="ruff check .", required=False, description="lint"),
        ]

    def test_json_config(self, tmp_path):
        write_config(tmp_path, "quality-gates.json", json.dumps({
            "enabled": True,
            "commands": [{"name": "build", "command": "make"}],
        }))
        config = load_gate_config(tmp_path)
        assert config.enabled
        assert config.commands[0].required is True

    def test_yaml_preferred_over_json(self, tmp_path):
        write_config(tmp_path, "quality-gates.json", '{"enabled": false}')
        yaml_path = write_config(tmp_path, "quality-gates.yaml", "enabled: true\n")
        assert find_gate_config(tmp_path) == yaml_path

    def test_enabled_must_be_true(self, tmp_path):
        write_config(tmp_path, "quality-gates.yml", "commands:\n  - command: make\n")
        assert load_gate_config(tmp_path).enabled is False

    def test_empty_file_is_disabled(self, tmp_path):
        write_config(tmp_path, "quality-gates.yaml", "")
        config = load_gate_config(tmp_path)
        assert config.enabled is False
        assert config.commands == []

    def test_unparseable_raises(self, tmp_path):
        write_config(tmp_path, "quality-gates.yaml", "enabled: [true\n")
        with pytest.raises(GateConfigError):
            load_gate_config(tmp_path)

    def test_wrong_shape_raises(self, tmp_path):
        write_config(tmp_path, "quality-gates.yaml", "enabled: true\ncommands:\n  - name: no-command\n")
        with pytest.raises(GateConfigError):
            load_gate_config(tmp_path)


class TestRunGates:
    """Test run_gates with subprocess mocked."""

    CONFIG = GateConfig(enabled=True, commands=[
        GateCommand(name="lint", command="lint", required=False),
        GateCommand(name="tests", command="tests"),
        GateCommand(name="build", command="build"),
    ])

    @patch("sprintflow.lib.gates.subprocess.run")
    def test_all_pass(self, mock_run, tmp_path):
        mock_run.return_value = MagicMock(returncode=0)
        report = run_gates(tmp_path, self.CONFIG)
        assert report.ok
        assert report.passed == ["lint", "tests", "build"]
        mock_run.assert_any_call("tests", shell=True, cwd=tmp_path)

    @patch("sprintflow.lib.gates.subprocess.run")
    def test_non_required_failure_continues(self, mock_run, tmp_path, caplog):
        mock_run.side_effect = [MagicMock(returncode=1), MagicMock(returncode=0), MagicMock(returncode=0)]
        report = run_gates(tmp_path, self.CONFIG)
        assert report.ok
        assert report.failed == ["lint"]
        assert report.passed == ["tests", "build"]
        assert "Non-required gate failed: lint" in caplog.text

    @patch("sprintflow.lib.gates.subprocess.run")
    def test_required_failure_stops(self, mock_run, tmp_path):
        mock_run.side_effect = [MagicMock(returncode=0), MagicMock(returncode=2)]
        report = run_gates(tmp_path, self.CONFIG)
        assert not report.ok
        assert report.blocked_by == "tests"
        assert mock_run.call_count == 2
