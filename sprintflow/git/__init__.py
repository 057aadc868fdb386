"""Git operations for sprintflow.

This module provides clean interfaces for the git commands the lifecycle
orchestrator drives. Commands never shell out to git directly.

Return type conventions:
- Functions returning GitResult: Caller must check .success before using output.
  Examples: create_branch(), delete_branch(), add_worktree(), remove_worktree()
- Functions returning bool: True on success/condition met, False otherwise.
  Examples: branch_exists(), is_primary_worktree()
- Functions returning parsed values (str, list): Return empty/None on failure.
  Examples: get_current_branch() -> None, list_worktrees() -> []
"""

from sprintflow.git.runner import GitResult, run_git
from sprintflow.git.branch import (
    get_current_branch,
    branch_exists,
    list_branches,
    create_branch,
    delete_branch,
    switch_branch,
)
from sprintflow.git.worktree import (
    Worktree,
    parse_worktree_list,
    list_worktrees,
    find_worktree,
    get_primary_worktree,
    is_primary_worktree,
    add_worktree,
    remove_worktree,
    prune_worktrees,
)

__all__ = [
    # runner
    "GitResult",
    "run_git",
    # branch
    "get_current_branch",
    "branch_exists",
    "list_branches",
    "create_branch",
    "delete_branch",
    "switch_branch",
    # worktree
    "Worktree",
    "parse_worktree_list",
    "list_worktrees",
    "find_worktree",
    "get_primary_worktree",
    "is_primary_worktree",
    "add_worktree",
    "remove_worktree",
    "prune_worktrees",
]
