"""Tests for sprintflow.git module."""

from pathlib import Path
from unittest.mock import patch, MagicMock

from sprintflow.git.runner import run_git, GitResult
from sprintflow.git.branch import (
    get_current_branch,
    branch_exists,
    list_branches,
    create_branch,
)
from sprintflow.git.worktree import (
    parse_worktree_list,
    list_worktrees,
    get_primary_worktree,
    remove_worktree,
)


class TestGitResult:
    """Test GitResult dataclass."""

    def test_success_when_returncode_zero(self):
        result = GitResult(returncode=0, stdout="ok", stderr="")
        assert result.success is True

    def test_failure_when_returncode_nonzero(self):
        result = GitResult(returncode=1, stdout="", stderr="error")
        assert result.success is False

    def test_error_prefers_stderr(self):
        assert GitResult(returncode=1, stdout="out", stderr=" fatal: x \n").error == "fatal: x"
        assert GitResult(returncode=1, stdout="out\n", stderr="").error == "out"


class TestRunGit:
    """Test run_git function."""

    @patch("sprintflow.git.runner.subprocess.run")
    def test_returns_result_on_success(self, mock_run):
        mock_run.return_value = MagicMock(
            returncode=0,
            stdout="output",
            stderr="",
        )
        result = run_git(["status"], Path("/tmp"))
        assert result.success
        assert result.stdout == "output"
        mock_run.assert_called_once()

    @patch("sprintflow.git.runner.subprocess.run")
    def test_handles_missing_git(self, mock_run):
        mock_run.side_effect = FileNotFoundError()
        result = run_git(["status"], Path("/tmp"))
        assert result.returncode == 127
        assert not result.success

    @patch("sprintflow.git.runner.subprocess.run")
    def test_passes_cwd_with_C_flag(self, mock_run):
        mock_run.return_value = MagicMock(returncode=0, stdout="", stderr="")
        run_git(["worktree", "list", "--porcelain"], Path("/my/repo"))
        call_args = mock_run.call_args[0][0]
        assert call_args == ["git", "-C", "/my/repo", "worktree", "list", "--porcelain"]


class TestBranch:
    """Test branch helpers."""

    @patch("sprintflow.git.branch.run_git")
    def test_current_branch(self, mock_run):
        mock_run.return_value = GitResult(returncode=0, stdout="develop\n", stderr="")
        assert get_current_branch(Path("/tmp")) == "develop"

    @patch("sprintflow.git.branch.run_git")
    def test_current_branch_detached(self, mock_run):
        mock_run.return_value = GitResult(returncode=0, stdout="\n", stderr="")
        assert get_current_branch(Path("/tmp")) is None

    @patch("sprintflow.git.branch.run_git")
    def test_branch_exists_uses_show_ref(self, mock_run):
        mock_run.return_value = GitResult(returncode=1, stdout="", stderr="")
        assert branch_exists(Path("/tmp"), "feature/ui-workstream") is False
        args = mock_run.call_args[0][0]
        assert args == ["show-ref", "--verify", "--quiet", "refs/heads/feature/ui-workstream"]

    @patch("sprintflow.git.branch.run_git")
    def test_list_branches(self, mock_run):
        mock_run.return_value = GitResult(
            returncode=0, stdout="develop\nfeature/ui-workstream\n", stderr=""
        )
        assert list_branches(Path("/tmp")) == ["develop", "feature/ui-workstream"]

    @patch("sprintflow.git.branch.run_git")
    def test_list_branches_empty_on_failure(self, mock_run):
        mock_run.return_value = GitResult(returncode=128, stdout="", stderr="not a repo")
        assert list_branches(Path("/tmp")) == []

    @patch("sprintflow.git.branch.run_git")
    def test_create_branch_does_not_checkout(self, mock_run):
        mock_run.return_value = GitResult(returncode=0, stdout="", stderr="")
        create_branch(Path("/tmp"), "feature/ui-workstream", "develop")
        assert mock_run.call_args[0][0] == ["branch", "feature/ui-workstream", "develop"]


PORCELAIN = """worktree /repo/project
HEAD 1111111111111111111111111111111111111111
branch refs/heads/develop

worktree /repo/worktrees/ui
HEAD 2222222222222222222222222222222222222222
branch refs/heads/feature/ui-workstream

worktree /repo/worktrees/gone
HEAD 3333333333333333333333333333333333333333
detached
prunable gitdir file points to non-existent location
"""


class TestWorktree:
    """Test worktree helpers."""

    def test_parse_porcelain(self):
        worktrees = parse_worktree_list(PORCELAIN)
        assert [str(wt.path) for wt in worktrees] == [
            "/repo/project",
            "/repo/worktrees/ui",
            "/repo/worktrees/gone",
        ]
        assert worktrees[0].branch == "develop"
        assert worktrees[1].branch == "feature/ui-workstream"
        assert worktrees[2].branch is None
        assert worktrees[2].prunable is True

    def test_parse_empty(self):
        assert parse_worktree_list("") == []

    @patch("sprintflow.git.worktree.run_git")
    def test_list_empty_on_failure(self, mock_run):
        mock_run.return_value = GitResult(returncode=128, stdout="", stderr="not a repo")
        assert list_worktrees(Path("/tmp")) == []

    @patch("sprintflow.git.worktree.run_git")
    def test_primary_is_first_entry(self, mock_run):
        mock_run.return_value = GitResult(returncode=0, stdout=PORCELAIN, stderr="")
        assert get_primary_worktree(Path("/elsewhere")) == Path("/repo/project")

    @patch("sprintflow.git.worktree.run_git")
    def test_remove_force_flag(self, mock_run):
        mock_run.return_value = GitResult(returncode=0, stdout="", stderr="")
        remove_worktree(Path("/repo/project"), Path("/repo/worktrees/ui"), force=True)
        assert mock_run.call_args[0][0] == ["worktree", "remove", "--force", "/repo/worktrees/ui"]
