"""Git worktree operations."""

import os
from dataclasses import dataclass
from pathlib import Path

from sprintflow.git.runner import run_git, GitResult


@dataclass
class Worktree:
    """A worktree entry from `git worktree list --porcelain`."""
    path: Path
    head: str | None = None
    branch: str | None = None   # Short name, None when detached or bare
    bare: bool = False
    prunable: bool = False


def _same_path(a: Path, b: Path) -> bool:
    return os.path.realpath(a) == os.path.realpath(b)


def parse_worktree_list(output: str) -> list[Worktree]:
    """Parse porcelain worktree output into Worktree entries.

    Entries are separated by blank lines; the first entry is always the
    primary checkout.
    """
    worktrees = []
    current = None
    for line in output.splitlines():
        if not line.strip():
            current = None
            continue
        key, _, value = line.partition(" ")
        if key == "worktree":
            current = Worktree(path=Path(value))
            worktrees.append(current)
        elif current is None:
            continue
        elif key == "HEAD":
            current.head = value
        elif key == "branch":
            current.branch = value.removeprefix("refs/heads/")
        elif key == "bare":
            current.bare = True
        elif key == "prunable":
            current.prunable = True
    return worktrees


def list_worktrees(repo: Path) -> list[Worktree]:
    """List worktrees registered with the repository. Empty on failure."""
    result = run_git(["worktree", "list", "--porcelain"], repo)
    if not result.success:
        return []
    return parse_worktree_list(result.stdout)


def find_worktree(repo: Path, path: Path) -> Worktree | None:
    """Find the registered worktree at path, if any."""
    for wt in list_worktrees(repo):
        if _same_path(wt.path, path):
            return wt
    return None


def get_primary_worktree(repo: Path) -> Path:
    """Path of the primary checkout (first entry of the worktree list)."""
    worktrees = list_worktrees(repo)
    if worktrees:
        return worktrees[0].path
    return repo


def is_primary_worktree(repo: Path, path: Path) -> bool:
    """True if path is the repository root or its primary checkout."""
    return _same_path(path, repo) or _same_path(path, get_primary_worktree(repo))


def add_worktree(repo: Path, path: Path, branch: str) -> GitResult:
    """Check out an existing branch into a new worktree at path."""
    return run_git(["worktree", "add", str(path), branch], repo)


def remove_worktree(repo: Path, path: Path, force: bool = False) -> GitResult:
    """Remove a registered worktree."""
    args = ["worktree", "remove"]
    if force:
        args.append("--force")
    args.append(str(path))
    return run_git(args, repo)


def prune_worktrees(repo: Path) -> GitResult:
    """Drop registrations whose directories no longer exist."""
    return run_git(["worktree", "prune"], repo)
