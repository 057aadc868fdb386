"""Tests for sprintflow.lib.store module."""

import json

import pytest
from pathlib import Path

from sprintflow.lib.store import (
    SprintConfig,
    SprintNotFound,
    WorkstreamNotFound,
    WorkstreamRecord,
    delete_sprint,
    find_workstream,
    load_sprint,
    require_sprint,
    save_sprint,
)
from sprintflow.lib.validate import ValidationError


def make_sprint() -> SprintConfig:
    return SprintConfig(
        sprint="sprint-7",
        workstreams=[
            WorkstreamRecord(
                name="ui",
                tasks=["TASK-001", "TASK-002"],
                worktree="../worktrees/ui/",
                file_conflicts=["src/app.tsx"],
            ),
            WorkstreamRecord(
                name="api",
                status="completed",
                tasks=["TASK-003"],
                worktree="../worktrees/api/",
                dependencies=["TASK-001"],
                completed_at="2026-01-02T03:04:05+00:00",
            ),
        ],
    )


class TestSaveAndLoad:
    """Test save_sprint / load_sprint."""

    def test_save_creates_parents_and_indents(self, tmp_path):
        path = tmp_path / ".claude" / "sprint-config.json"
        save_sprint(path, make_sprint())

        text = path.read_text()
        assert text.startswith('{\n  "sprint": "sprint-7"')
        data = json.loads(text)
        assert data["workstreams"][0]["fileConflicts"] == ["src/app.tsx"]
        assert "completedAt" not in data["workstreams"][0]
        assert data["workstreams"][1]["completedAt"] == "2026-01-02T03:04:05+00:00"

    def test_load_returns_equal_config(self, tmp_path):
        path = tmp_path / "sprint-config.json"
        save_sprint(path, make_sprint())
        assert load_sprint(path) == make_sprint()

    def test_load_missing_returns_none(self, tmp_path):
        assert load_sprint(tmp_path / "missing.json") is None

    def test_load_invalid_json_raises(self, tmp_path):
        path = tmp_path / "sprint-config.json"
        path.write_text("{not json")
        with pytest.raises(ValidationError):
            load_sprint(path)

    def test_load_wrong_shape_raises(self, tmp_path):
        path = tmp_path / "sprint-config.json"
        path.write_text(json.dumps({"sprint": "s", "workstreams": [{"status": "completed"}]}))
        with pytest.raises(ValidationError):
            load_sprint(path)

    def test_load_keeps_unknown_status(self, tmp_path):
        path = tmp_path / "sprint-config.json"
        path.write_text(json.dumps({"sprint": "s", "workstreams": [{"name": "ui", "status": "bogus"}]}))
        sprint = load_sprint(path)
        assert sprint.workstreams[0].status == "bogus"
        assert sprint.workstreams[0].tasks == []

    def test_save_refuses_invalid(self, tmp_path):
        path = tmp_path / "sprint-config.json"
        bad = SprintConfig(sprint="s", workstreams=[WorkstreamRecord(name="")])
        with pytest.raises(ValidationError):
            save_sprint(path, bad)
        assert not path.exists()


class TestRequireAndDelete:
    """Test require_sprint and delete_sprint."""

    def test_require_missing_raises_with_directive(self, tmp_path):
        with pytest.raises(SprintNotFound) as exc_info:
            require_sprint(tmp_path / "sprint-config.json")
        assert "sprint define" in str(exc_info.value)

    def test_delete(self, tmp_path):
        path = tmp_path / "sprint-config.json"
        save_sprint(path, make_sprint())
        assert delete_sprint(path) is True
        assert not path.exists()
        assert delete_sprint(path) is False


class TestFindWorkstream:
    """Test find_workstream."""

    def test_found(self):
        assert find_workstream(make_sprint(), "api").tasks == ["TASK-003"]

    def test_not_found_lists_names(self):
        with pytest.raises(WorkstreamNotFound) as exc_info:
            find_workstream(make_sprint(), "docs")
        assert exc_info.value.available == ["ui", "api"]
        assert "ui, api" in str(exc_info.value)
