"""Git branch operations."""

from pathlib import Path

from sprintflow.git.runner import run_git, GitResult


def get_current_branch(repo: Path) -> str | None:
    """Get the current branch name, or None if detached HEAD."""
    result = run_git(["branch", "--show-current"], repo)
    if result.success:
        return result.stdout.strip() or None
    return None


def branch_exists(repo: Path, branch: str) -> bool:
    """Check if a local branch exists."""
    result = run_git(["show-ref", "--verify", "--quiet", f"refs/heads/{branch}"], repo)
    return result.success


def list_branches(repo: Path) -> list[str]:
    """List local branch names."""
    result = run_git(["branch", "--format=%(refname:short)"], repo)
    if not result.success:
        return []
    return [line.strip() for line in result.stdout.splitlines() if line.strip()]


def create_branch(repo: Path, branch: str, start_point: str) -> GitResult:
    """Create a branch at start_point without checking it out."""
    return run_git(["branch", branch, start_point], repo)


def delete_branch(repo: Path, branch: str) -> GitResult:
    """Force-delete a local branch (unmerged work is discarded)."""
    return run_git(["branch", "-D", branch], repo)


def switch_branch(repo: Path, branch: str) -> GitResult:
    """Switch the checkout at repo to an existing branch."""
    return run_git(["switch", branch], repo)
