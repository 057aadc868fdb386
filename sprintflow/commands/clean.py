"""
sprint clean / clean-all - Remove workstream worktrees and branches.

`sprint clean <name>` cleans one workstream and keeps its record as
merged_and_cleaned. Without a name (or via clean-all) every workstream
is cleaned and the sprint store is deleted.
"""

from sprintflow.lib.config import ProjectConfig
from sprintflow.lib.constants import (
    EXIT_ERROR,
    EXIT_SUCCESS,
    STATUS_CLEANED,
    STATUS_COMPLETED,
)
from sprintflow.lib.store import SprintNotFound, WorkstreamNotFound, load_sprint
from sprintflow.lib.validate import ValidationError
from sprintflow.workflow.lifecycle import (
    CleanupTally,
    RemovalOutcome,
    clean_all,
    clean_workstream,
)

OUTCOME_TEXT = {
    RemovalOutcome.REMOVED: "removed",
    RemovalOutcome.REMOVED_FORCED: "removed (forced)",
    RemovalOutcome.ABSENT: "not found (may already be removed)",
    RemovalOutcome.FAILED: "FAILED",
}


def _print_remote_hint(config: ProjectConfig, names: list[str]) -> None:
    print()
    print("Remote branches are preserved. To delete them:")
    for name in names:
        print(f"  git push origin --delete {config.branch_for(name)}")


def _print_tally(tally: CleanupTally, total: int) -> None:
    print()
    print("CLEANUP SUMMARY")
    print("=" * 60)
    for category, label in (("checkout", "Worktrees"), ("branch", "Branches")):
        print(
            f"{label}: {tally.removed(category)}/{total} removed "
            f"({tally.count(category, RemovalOutcome.REMOVED_FORCED)} forced), "
            f"{tally.count(category, RemovalOutcome.ABSENT)} absent, "
            f"{tally.count(category, RemovalOutcome.FAILED)} failed"
        )

    print()
    if tally.clean:
        print("Verification: no workstream worktrees or branches remain")
        return
    print("Verification: cleanup incomplete")
    for path in tally.remaining_worktrees:
        print(f"  worktree still registered: {path}")
    for branch in tally.remaining_branches:
        print(f"  branch still present: {branch}")


def cmd_clean_all(args, config: ProjectConfig) -> int:
    """Clean every workstream and delete the sprint store."""
    try:
        sprint = load_sprint(config.store_path)
    except ValidationError as e:
        print(f"ERROR: {e}")
        return EXIT_ERROR

    if sprint is None:
        print(f"No sprint configuration at {config.store_path}; nothing to clean.")
        return EXIT_SUCCESS

    print("CLEANING UP ALL SPRINT WORKSTREAMS")
    print("=" * 60)
    print(f"Sprint: {sprint.sprint}")
    print(f"Workstreams: {len(sprint.workstreams)}")

    unfinished = [
        ws for ws in sprint.workstreams
        if ws.status not in (STATUS_COMPLETED, STATUS_CLEANED)
    ]
    if unfinished:
        print()
        print("WARNING: Some workstreams are not completed:")
        for ws in unfinished:
            print(f"  - {ws.name}: {ws.status}")
        print("Proceeding with cleanup anyway...")

    tally = clean_all(config)
    if tally is None:
        print("Sprint configuration disappeared during cleanup; nothing to do.")
        return EXIT_SUCCESS

    print()
    for outcome in tally.outcomes:
        print(f"  {outcome.name}: worktree {OUTCOME_TEXT[outcome.checkout]}, "
              f"branch {OUTCOME_TEXT[outcome.branch]}")
    print()
    print(f"Removed sprint configuration {config.store_path}")

    _print_tally(tally, len(tally.outcomes))
    _print_remote_hint(config, [o.name for o in tally.outcomes])
    return EXIT_SUCCESS


def cmd_clean(args, config: ProjectConfig) -> int:
    """Clean one workstream, or all of them when no name is given."""
    if not args.name:
        return cmd_clean_all(args, config)

    print(f"CLEANING UP WORKSTREAM: {args.name}")
    print("=" * 60)

    try:
        outcome = clean_workstream(config, args.name)
    except (SprintNotFound, WorkstreamNotFound, ValidationError) as e:
        print(f"ERROR: {e}")
        return EXIT_ERROR

    print(f"Worktree: {OUTCOME_TEXT[outcome.checkout]}")
    print(f"Branch:   {config.branch_for(args.name)} {OUTCOME_TEXT[outcome.branch]}")
    print(f"Status:   {outcome.status}")

    if not outcome.ok:
        print()
        print(f"ERROR: Could not remove the worktree for {args.name}; status unchanged.")
        print("  Close anything using the worktree and run 'sprint clean' again.")
        return EXIT_ERROR

    _print_remote_hint(config, [args.name])
    print()
    print("Next: sprint status (to check remaining workstreams)")
    return EXIT_SUCCESS
