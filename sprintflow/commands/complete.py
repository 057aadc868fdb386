"""
sprint complete - Run quality gates and mark a workstream completed.
"""

from sprintflow.lib.config import ProjectConfig
from sprintflow.lib.constants import EXIT_ERROR, EXIT_SUCCESS
from sprintflow.lib.gates import GateConfigError
from sprintflow.lib.store import SprintNotFound, WorkstreamNotFound
from sprintflow.lib.validate import ValidationError
from sprintflow.workflow.lifecycle import GateBlocked, complete_workstream
from sprintflow.workflow.state_machine import InvalidTransition


def cmd_complete(args, config: ProjectConfig) -> int:
    """Mark a workstream completed unless a required gate fails."""
    if args.skip_gates:
        print("WARNING: Skipping quality gates (--skip-gates)")

    try:
        record, report = complete_workstream(config, args.name, skip_gates=args.skip_gates)
    except GateBlocked as e:
        print()
        print(f"ERROR: {e}")
        print("  Fix the issue and run 'sprint complete' again.")
        print("  Use --skip-gates to skip (not recommended)")
        return EXIT_ERROR
    except (
        SprintNotFound,
        WorkstreamNotFound,
        ValidationError,
        InvalidTransition,
        GateConfigError,
    ) as e:
        print(f"ERROR: {e}")
        return EXIT_ERROR

    if report:
        print()
        print(f"Quality gates passed: {len(report.passed)}")
        if report.failed:
            print(f"Non-required gates failed: {', '.join(report.failed)}")

    print()
    print(f"WORKSTREAM COMPLETE: {record.name}")
    print("=" * 60)
    print("Tasks:")
    for task_id in record.tasks:
        print(f"  - {task_id}")
    print()
    print(f"Completed at: {record.completed_at}")
    print(f"Worktree:     {record.worktree}")
    print(f"Branch:       {config.branch_for(record.name)}")
    print()
    print(f"Next: merge {config.branch_for(record.name)} into "
          f"{config.integration_branch}, then run 'sprint clean {record.name}'")
    return EXIT_SUCCESS
