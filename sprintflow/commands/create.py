"""
sprint create - Create a branch and worktree for every workstream.
"""

from sprintflow.lib.config import ProjectConfig
from sprintflow.lib.constants import EXIT_ERROR, EXIT_SUCCESS
from sprintflow.lib.store import SprintNotFound
from sprintflow.lib.validate import ValidationError
from sprintflow.workflow.lifecycle import WorkspaceError, create_all


def cmd_create(args, config: ProjectConfig) -> int:
    """Create workspaces for all workstreams in the sprint store."""
    print("CREATING WORKSTREAMS")
    print("=" * 60)

    try:
        results = create_all(config)
    except (SprintNotFound, ValidationError) as e:
        print(f"ERROR: {e}")
        return EXIT_ERROR
    except WorkspaceError as e:
        print(f"ERROR: Failed to create workstreams: {e}")
        return EXIT_ERROR

    for r in results:
        branch_note = "created" if r.branch_created else "already exists"
        worktree_note = "created" if r.worktree_created else "already present"
        print(f"\n{r.name}")
        print(f"   Branch:   {r.branch} ({branch_note})")
        print(f"   Worktree: {r.path} ({worktree_note})")

    print()
    print(f"{len(results)} workstream(s) ready.")
    print()
    print("Next: in each worktree, run 'sprint resume <name>' to start work:")
    for r in results:
        print(f"  sprint resume {r.name}")
    return EXIT_SUCCESS
