"""
Sprint state store.

One JSON document per project root (default .claude/sprint-config.json)
holding the sprint name and one record per workstream. Keys on disk are
camelCase; records in memory are dataclasses.

Only structural shape is checked here. Field-level rules (valid status,
disjoint tasks) are enforced by the writers: the resolver and the FSM.
"""

import json
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

from sprintflow.lib.constants import STATUS_READY
from sprintflow.lib.validate import load_json, validate_before_write

logger = logging.getLogger(__name__)

SCHEMA_NAME = "sprint_config"


class SprintNotFound(Exception):
    """No sprint store exists for the project."""

    def __init__(self, path: Path):
        self.path = path
        super().__init__(
            f"No sprint configuration found at {path}. "
            "Run 'sprint define <document>' first."
        )


class WorkstreamNotFound(Exception):
    """Named workstream is not in the store."""

    def __init__(self, name: str, available: list[str]):
        self.name = name
        self.available = available
        listing = ", ".join(available) if available else "(none)"
        super().__init__(f"Workstream '{name}' not found. Available: {listing}")


@dataclass
class WorkstreamRecord:
    """Persisted state of one workstream."""
    name: str
    status: str = STATUS_READY
    tasks: list[str] = field(default_factory=list)
    worktree: str = ""                   # Relative to project root
    dependencies: list[str] = field(default_factory=list)
    file_conflicts: list[str] = field(default_factory=list)
    completed_at: Optional[str] = None   # UTC ISO timestamp

    @classmethod
    def from_dict(cls, data: dict) -> "WorkstreamRecord":
        return cls(
            name=data["name"],
            status=data.get("status", STATUS_READY),
            tasks=list(data.get("tasks", [])),
            worktree=data.get("worktree", ""),
            dependencies=list(data.get("dependencies", [])),
            file_conflicts=list(data.get("fileConflicts", [])),
            completed_at=data.get("completedAt"),
        )

    def to_dict(self) -> dict:
        data = {
            "name": self.name,
            "status": self.status,
            "tasks": list(self.tasks),
            "worktree": self.worktree,
            "dependencies": list(self.dependencies),
            "fileConflicts": list(self.file_conflicts),
        }
        if self.completed_at:
            data["completedAt"] = self.completed_at
        return data


@dataclass
class SprintConfig:
    """The whole store: sprint name plus workstream records in order."""
    sprint: str
    workstreams: list[WorkstreamRecord] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: dict) -> "SprintConfig":
        return cls(
            sprint=data["sprint"],
            workstreams=[WorkstreamRecord.from_dict(w) for w in data.get("workstreams", [])],
        )

    def to_dict(self) -> dict:
        return {
            "sprint": self.sprint,
            "workstreams": [w.to_dict() for w in self.workstreams],
        }

    @property
    def names(self) -> list[str]:
        return [w.name for w in self.workstreams]


def load_sprint(path: Path) -> SprintConfig | None:
    """Load the store. Returns None if the file doesn't exist.

    Raises:
        ValidationError: if the file is not valid JSON or has the wrong shape
    """
    path = Path(path)
    if not path.exists():
        return None
    return SprintConfig.from_dict(load_json(path, SCHEMA_NAME))


def require_sprint(path: Path) -> SprintConfig:
    """Like load_sprint, but a missing store raises SprintNotFound."""
    config = load_sprint(path)
    if config is None:
        raise SprintNotFound(path)
    return config


def save_sprint(path: Path, config: SprintConfig) -> None:
    """Validate and write the store, creating parent directories."""
    path = Path(path)
    data = config.to_dict()
    validate_before_write(data, SCHEMA_NAME, path)

    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(data, indent=2) + "\n")
    logger.debug(f"[STATE] Saved sprint '{config.sprint}' to {path}")


def delete_sprint(path: Path) -> bool:
    """Remove the store. Returns False if there was nothing to delete."""
    path = Path(path)
    if not path.exists():
        return False
    path.unlink()
    logger.info(f"[STATE] Deleted sprint configuration {path}")
    return True


def find_workstream(config: SprintConfig, name: str) -> WorkstreamRecord:
    """Look up a workstream by name.

    Raises:
        WorkstreamNotFound: carrying the list of valid names
    """
    for ws in config.workstreams:
        if ws.name == name:
            return ws
    raise WorkstreamNotFound(name, config.names)
