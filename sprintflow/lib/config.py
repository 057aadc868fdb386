"""
Project configuration for sprintflow.

Loads optional overrides from <root>/.claude/sprint.env. Every value has a
default, so a project without the file works out of the box.
"""

import logging
import re
from dataclasses import dataclass
from pathlib import Path

from . import envparse

logger = logging.getLogger(__name__)

CONFIG_DIR = ".claude"
ENV_FILENAME = "sprint.env"

DEFAULT_INTEGRATION_BRANCH = "develop"
DEFAULT_WORKTREES_DIR = "../worktrees"
DEFAULT_BRANCH_PREFIX = "feature/"
DEFAULT_BRANCH_SUFFIX = "-workstream"
DEFAULT_SPRINT_CONFIG_PATH = ".claude/sprint-config.json"

# Conservative subset of git ref-name rules
BRANCH_NAME_PATTERN = re.compile(r'^(?!-)(?!.*\.\.)(?!.*//)[A-Za-z0-9._/-]+(?<![./])$')


@dataclass
class ProjectConfig:
    """Where the sprint lives and how workstream workspaces are named."""
    root: Path                  # Primary checkout of the project repository
    integration_branch: str     # Branch workstream branches are cut from
    worktrees_dir: str          # Relative to root, e.g. "../worktrees"
    branch_prefix: str
    branch_suffix: str
    sprint_config_path: str     # Relative to root

    @property
    def store_path(self) -> Path:
        """Absolute path of the sprint state store."""
        return self.root / self.sprint_config_path

    def branch_for(self, ws_name: str) -> str:
        """Deterministic branch name for a workstream."""
        return f"{self.branch_prefix}{ws_name}{self.branch_suffix}"

    def worktree_for(self, ws_name: str) -> str:
        """Deterministic checkout path for a workstream, relative to root."""
        return f"{self.worktrees_dir.rstrip('/')}/{ws_name}/"

    def resolve_path(self, relative: str) -> Path:
        """Resolve a store-relative path against the project root."""
        return (self.root / relative).resolve()

    def is_workstream_branch(self, branch: str) -> bool:
        """True if branch follows the workstream naming pattern."""
        return (
            branch.startswith(self.branch_prefix)
            and branch.endswith(self.branch_suffix)
            and len(branch) > len(self.branch_prefix) + len(self.branch_suffix)
        )


def get_env_path(root: Path) -> Path:
    return root / CONFIG_DIR / ENV_FILENAME


def load_project_config(root: Path) -> ProjectConfig:
    """Load sprint.env (if present) and return ProjectConfig.

    Raises:
        ValueError: if sprint.env is malformed
    """
    root = Path(root).resolve()
    env = envparse.load_env_optional(get_env_path(root))

    integration_branch = env.get("INTEGRATION_BRANCH", DEFAULT_INTEGRATION_BRANCH).strip()
    if not BRANCH_NAME_PATTERN.match(integration_branch):
        logger.warning(
            f"Unknown INTEGRATION_BRANCH '{integration_branch}', "
            f"defaulting to '{DEFAULT_INTEGRATION_BRANCH}'"
        )
        integration_branch = DEFAULT_INTEGRATION_BRANCH

    return ProjectConfig(
        root=root,
        integration_branch=integration_branch,
        worktrees_dir=env.get("WORKTREES_DIR", DEFAULT_WORKTREES_DIR) or DEFAULT_WORKTREES_DIR,
        branch_prefix=env.get("BRANCH_PREFIX", DEFAULT_BRANCH_PREFIX),
        branch_suffix=env.get("BRANCH_SUFFIX", DEFAULT_BRANCH_SUFFIX),
        sprint_config_path=env.get("SPRINT_CONFIG_PATH", DEFAULT_SPRINT_CONFIG_PATH)
        or DEFAULT_SPRINT_CONFIG_PATH,
    )
