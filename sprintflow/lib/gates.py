"""
Quality gate configuration and runner.

A workstream checkout may carry .claude/quality-gates.yaml (or .yml/.json)
listing shell commands that must pass before the workstream is marked
complete. JSON is valid YAML, so all three are read with yaml.safe_load.

Example:
    enabled: true
    commands:
      - name: tests
        command: pytest -q
      - name: lint
        command: ruff check .
        required: false
"""

import logging
import subprocess
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

import yaml

from sprintflow.lib.validate import ValidationError, validate

logger = logging.getLogger(__name__)

GATES_DIR = ".claude"
GATES_FILENAMES = ("quality-gates.yaml", "quality-gates.yml", "quality-gates.json")


class GateConfigError(Exception):
    """Gate configuration exists but can't be used."""


@dataclass
class GateCommand:
    """One shell command run as a gate."""
    name: str
    command: str
    required: bool = True
    description: str = ""


@dataclass
class GateConfig:
    """Gate configuration for one checkout."""
    enabled: bool = False
    commands: list[GateCommand] = field(default_factory=list)
    source: Optional[Path] = None


@dataclass
class GateReport:
    """Outcome of a gate run."""
    passed: list[str] = field(default_factory=list)
    failed: list[str] = field(default_factory=list)      # Non-required failures
    blocked_by: Optional[str] = None                     # First required failure

    @property
    def ok(self) -> bool:
        return self.blocked_by is None


def find_gate_config(worktree: Path) -> Path | None:
    """First gate config file present in the checkout, in preference order."""
    for filename in GATES_FILENAMES:
        path = Path(worktree) / GATES_DIR / filename
        if path.is_file():
            return path
    return None


def load_gate_config(worktree: Path) -> GateConfig | None:
    """Load the checkout's gate config. None if there is no config file.

    Raises:
        GateConfigError: if the file can't be parsed or has the wrong shape
    """
    path = find_gate_config(worktree)
    if path is None:
        return None

    try:
        data = yaml.safe_load(path.read_text())
    except yaml.YAMLError as e:
        raise GateConfigError(f"Failed to parse {path}: {e}") from e

    if data is None:
        data = {}
    try:
        validate(data, "gates")
    except ValidationError as e:
        raise GateConfigError(f"Invalid gate configuration in {path}: {e}") from e

    commands = [
        GateCommand(
            name=c.get("name") or c["command"],
            command=c["command"],
            required=c.get("required", True),
            description=c.get("description", ""),
        )
        for c in data.get("commands", [])
    ]
    return GateConfig(enabled=data.get("enabled") is True, commands=commands, source=path)


def run_gates(worktree: Path, config: GateConfig) -> GateReport:
    """Run gate commands in the checkout, stopping at the first required failure.

    Command output is passed through to the terminal.
    """
    report = GateReport()
    print(f"Running {len(config.commands)} quality gate(s) in {worktree}")

    for gate in config.commands:
        suffix = f" - {gate.description}" if gate.description else ""
        print(f"\n> {gate.name}{suffix}")
        print(f"  Command: {gate.command}")

        try:
            result = subprocess.run(gate.command, shell=True, cwd=worktree)
            returncode = result.returncode
        except OSError as e:
            logger.error(f"[GATE] {gate.name}: could not start: {e}")
            returncode = -1

        if returncode == 0:
            print(f"  {gate.name} passed")
            report.passed.append(gate.name)
            continue

        print(f"  {gate.name} failed (exit {returncode})")
        if gate.required:
            logger.error(f"[GATE] Required gate failed: {gate.name}")
            report.blocked_by = gate.name
            break

        logger.warning(f"[GATE] Non-required gate failed: {gate.name}")
        report.failed.append(gate.name)

    return report
