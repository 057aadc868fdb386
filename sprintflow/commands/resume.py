"""
sprint resume - Mark a workstream in progress and show where to work.
"""

from sprintflow.lib.config import ProjectConfig
from sprintflow.lib.constants import EXIT_ERROR, EXIT_SUCCESS
from sprintflow.lib.store import SprintNotFound, WorkstreamNotFound
from sprintflow.lib.validate import ValidationError
from sprintflow.workflow.lifecycle import resume_workstream
from sprintflow.workflow.state_machine import InvalidTransition


def cmd_resume(args, config: ProjectConfig) -> int:
    """Move a workstream to in_progress."""
    try:
        record = resume_workstream(config, args.name, reopen=args.reopen)
    except (SprintNotFound, WorkstreamNotFound, ValidationError, InvalidTransition) as e:
        print(f"ERROR: {e}")
        return EXIT_ERROR

    worktree = config.resolve_path(record.worktree)

    print(f"Workstream: {record.name}")
    print("=" * 60)
    print(f"Status:   {record.status}")
    print(f"Branch:   {config.branch_for(record.name)}")
    print(f"Worktree: {worktree}" + ("" if worktree.is_dir() else " (missing)"))
    print()
    print("Tasks:")
    for task_id in record.tasks:
        print(f"  - {task_id}")
    if record.dependencies:
        print()
        print(f"Depends on: {', '.join(record.dependencies)}")

    print()
    if not worktree.is_dir():
        print("Worktree not found. Run 'sprint create' first.")
    else:
        print(f"Work in: cd {worktree}")
    print(f"When done: sprint complete {record.name}")
    return EXIT_SUCCESS
