"""
sprint status - Show the state of every workstream in the sprint.
"""

from collections import Counter

from sprintflow.lib.config import ProjectConfig
from sprintflow.lib.constants import (
    EXIT_ERROR,
    EXIT_SUCCESS,
    STATUS_CLEANED,
    STATUS_COMPLETED,
    STATUS_IN_PROGRESS,
    STATUS_READY,
)
from sprintflow.lib.store import load_sprint
from sprintflow.lib.validate import ValidationError

STATUS_ORDER = [STATUS_READY, STATUS_IN_PROGRESS, STATUS_COMPLETED, STATUS_CLEANED]


def cmd_status(args, config: ProjectConfig) -> int:
    """Print workstreams and a per-status summary. Read-only."""
    try:
        sprint = load_sprint(config.store_path)
    except ValidationError as e:
        print(f"ERROR: {e}")
        return EXIT_ERROR

    if sprint is None:
        print(f"ERROR: No sprint configuration found at {config.store_path}")
        print("  Run 'sprint define <document>' first.")
        return EXIT_ERROR

    print(f"Sprint: {sprint.sprint}")
    print("=" * 60)

    for ws in sprint.workstreams:
        worktree = config.resolve_path(ws.worktree)
        missing = "" if worktree.exists() else " (missing)"

        print()
        print(f"{ws.name}")
        print(f"  Status:         {ws.status}")
        print(f"  Tasks:          {', '.join(ws.tasks) if ws.tasks else '(none)'}")
        print(f"  Dependencies:   {', '.join(ws.dependencies) if ws.dependencies else 'None'}")
        print(f"  File conflicts: {', '.join(ws.file_conflicts) if ws.file_conflicts else 'None detected'}")
        print(f"  Worktree:       {worktree}{missing}")
        print(f"  Branch:         {config.branch_for(ws.name)}")
        if ws.completed_at:
            print(f"  Completed at:   {ws.completed_at}")

    counts = Counter(ws.status for ws in sprint.workstreams)
    print()
    print("-" * 60)
    print(f"Total: {len(sprint.workstreams)}")
    for status in STATUS_ORDER:
        print(f"  {status}: {counts.get(status, 0)}")
    # Statuses outside the known set still get counted
    for status, count in sorted(counts.items()):
        if status not in STATUS_ORDER:
            print(f"  {status}: {count}")
    return EXIT_SUCCESS
