"""Git command runner."""

import logging
import subprocess
from dataclasses import dataclass
from pathlib import Path

logger = logging.getLogger(__name__)


@dataclass
class GitResult:
    """Result of a git command."""
    returncode: int
    stdout: str
    stderr: str

    @property
    def success(self) -> bool:
        return self.returncode == 0

    @property
    def error(self) -> str:
        """Best available failure text for log lines."""
        return (self.stderr or self.stdout).strip()


def run_git(args: list[str], cwd: Path) -> GitResult:
    """
    Run a git command against a repository or worktree.

    Args:
        args: Git command arguments (e.g., ["worktree", "list", "--porcelain"])
        cwd: Repository or worktree the command runs against

    Returns:
        GitResult with returncode, stdout and stderr
    """
    cmd = ["git", "-C", str(cwd)] + args
    logger.debug(f"[GIT] {' '.join(cmd)}")
    try:
        result = subprocess.run(cmd, capture_output=True, text=True)
    except FileNotFoundError:
        return GitResult(
            returncode=127,
            stdout="",
            stderr="git executable not found",
        )
    return GitResult(
        returncode=result.returncode,
        stdout=result.stdout,
        stderr=result.stderr,
    )
