"""Workstream lifecycle: workspaces, status changes, and cleanup.

Every operation takes a ProjectConfig whose root is the primary checkout
of the project. Git state is driven only through sprintflow.git.

Destructive calls are guarded: they never touch the integration branch,
the project root or primary checkout, or anything not derived from a
workstream in the current sprint store.
"""

import logging
import shutil
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from pathlib import Path
from typing import Callable, Optional

from sprintflow.git import (
    add_worktree,
    branch_exists,
    create_branch,
    delete_branch,
    find_worktree,
    get_current_branch,
    get_primary_worktree,
    is_primary_worktree,
    list_branches,
    list_worktrees,
    prune_worktrees,
    remove_worktree,
    switch_branch,
)
from sprintflow.lib.config import ProjectConfig
from sprintflow.lib.gates import GateConfig, GateReport, load_gate_config, run_gates
from sprintflow.lib.store import (
    SprintConfig,
    WorkstreamRecord,
    delete_sprint,
    find_workstream,
    load_sprint,
    require_sprint,
    save_sprint,
)
from sprintflow.workflow.state_machine import (
    InvalidTransition,
    WorkstreamState,
    can_transition,
    get_state,
    transition,
)

logger = logging.getLogger(__name__)

GateRunner = Callable[[Path, GateConfig], GateReport]


class WorkspaceError(Exception):
    """A branch or checkout could not be prepared."""


class GateBlocked(Exception):
    """A required quality gate failed, so the workstream stays open."""

    def __init__(self, ws_name: str, report: GateReport):
        self.ws_name = ws_name
        self.report = report
        super().__init__(f"Required quality gate '{report.blocked_by}' failed for {ws_name}")


class RemovalOutcome(Enum):
    REMOVED = "removed"
    REMOVED_FORCED = "removed_forced"
    ABSENT = "absent"
    FAILED = "failed"


@dataclass
class WorkspaceResult:
    """What create_all did for one workstream."""
    name: str
    branch: str
    path: Path
    branch_created: bool
    worktree_created: bool


@dataclass
class CleanupOutcome:
    """Removal results for one workstream."""
    name: str
    checkout: RemovalOutcome
    branch: RemovalOutcome
    status: Optional[str] = None     # Status after cleanup, single clean only

    @property
    def ok(self) -> bool:
        return self.checkout != RemovalOutcome.FAILED


@dataclass
class CleanupTally:
    """Aggregate results of clean_all."""
    sprint: str
    outcomes: list[CleanupOutcome] = field(default_factory=list)
    remaining_worktrees: list[Path] = field(default_factory=list)
    remaining_branches: list[str] = field(default_factory=list)

    def count(self, category: str, outcome: RemovalOutcome) -> int:
        """Count outcomes for category "checkout" or "branch"."""
        return sum(1 for o in self.outcomes if getattr(o, category) == outcome)

    def removed(self, category: str) -> int:
        """Removed, forced or not."""
        return self.count(category, RemovalOutcome.REMOVED) + self.count(
            category, RemovalOutcome.REMOVED_FORCED
        )

    @property
    def clean(self) -> bool:
        return not self.remaining_worktrees and not self.remaining_branches


# --- Guards ---

def _refuse_path(config: ProjectConfig, sprint: SprintConfig, path: Path) -> str | None:
    """Reason a checkout path must not be touched, or None if it is safe."""
    root = config.root
    if path == root or root.is_relative_to(path):
        return "it is the project root or contains it"
    if is_primary_worktree(root, path):
        return "it is the primary checkout"
    allowed = {config.resolve_path(ws.worktree) for ws in sprint.workstreams}
    if path not in allowed:
        return "it is not a workstream checkout of the current sprint"
    return None


def _refuse_branch(config: ProjectConfig, sprint: SprintConfig, branch: str) -> str | None:
    """Reason a branch must not be deleted, or None if it is safe."""
    if branch == config.integration_branch:
        return "it is the integration branch"
    if branch not in {config.branch_for(ws.name) for ws in sprint.workstreams}:
        return "it is not a workstream branch of the current sprint"
    return None


# --- Creation ---

def ensure_branch(config: ProjectConfig, name: str) -> bool:
    """Create the workstream branch from the integration branch if missing.

    Returns True if the branch was created.

    Raises:
        WorkspaceError: if git refuses to create it
    """
    branch = config.branch_for(name)
    if branch_exists(config.root, branch):
        logger.info(f"[GIT] Branch '{branch}' already exists")
        return False

    result = create_branch(config.root, branch, config.integration_branch)
    if not result.success:
        raise WorkspaceError(f"Failed to create branch '{branch}': {result.error}")
    logger.info(f"[GIT] Created branch '{branch}' from '{config.integration_branch}'")
    return True


def ensure_worktree(config: ProjectConfig, sprint: SprintConfig, record: WorkstreamRecord) -> bool:
    """Make the record's checkout path a worktree bound to its branch.

    Returns True if a worktree was added, False if it was already in place.

    Raises:
        WorkspaceError: if the path is unsafe or git fails
    """
    root = config.root
    branch = config.branch_for(record.name)
    path = config.resolve_path(record.worktree)

    reason = _refuse_path(config, sprint, path)
    if reason:
        raise WorkspaceError(f"Refusing to use {path} for {record.name}: {reason}")

    registered = find_worktree(root, path)
    if registered:
        if registered.branch == branch and path.is_dir():
            logger.info(f"[GIT] Worktree for {record.name} already at {path}")
            return False

        if not path.exists():
            logger.info(f"[GIT] Pruning stale worktree registration for {path}")
            prune_worktrees(root)
        else:
            logger.warning(
                f"[GIT] {path} is checked out on '{registered.branch}', "
                f"replacing with '{branch}'"
            )
            result = remove_worktree(root, path, force=True)
            if not result.success:
                raise WorkspaceError(f"Failed to remove worktree at {path}: {result.error}")
    elif path.exists():
        logger.warning(f"[GIT] Removing unregistered directory at {path}")
        shutil.rmtree(path)

    path.parent.mkdir(parents=True, exist_ok=True)
    result = add_worktree(root, path, branch)
    if not result.success:
        raise WorkspaceError(f"Failed to add worktree at {path}: {result.error}")
    logger.info(f"[GIT] Added worktree {path} on '{branch}'")
    return True


def create_all(config: ProjectConfig) -> list[WorkspaceResult]:
    """Create branch and checkout for every workstream, in store order.

    Idempotent: a second run finds everything in place. The first failure
    aborts the batch.

    Raises:
        SprintNotFound: if there is no store
        WorkspaceError: if the integration branch is missing or git fails
    """
    sprint = require_sprint(config.store_path)

    if not branch_exists(config.root, config.integration_branch):
        raise WorkspaceError(
            f"Integration branch '{config.integration_branch}' does not exist in {config.root}"
        )

    results = []
    for record in sprint.workstreams:
        branch_created = ensure_branch(config, record.name)
        worktree_created = ensure_worktree(config, sprint, record)
        results.append(WorkspaceResult(
            name=record.name,
            branch=config.branch_for(record.name),
            path=config.resolve_path(record.worktree),
            branch_created=branch_created,
            worktree_created=worktree_created,
        ))
    return results


# --- Status changes ---

def resume_workstream(config: ProjectConfig, name: str, reopen: bool = False) -> WorkstreamRecord:
    """Move a workstream to in_progress.

    Completed work needs reopen=True; cleaned work can't be resumed.

    Raises:
        SprintNotFound, WorkstreamNotFound, InvalidTransition
    """
    sprint = require_sprint(config.store_path)
    record = find_workstream(sprint, name)

    if get_state(record) == WorkstreamState.COMPLETED and not reopen:
        raise InvalidTransition(
            record.status,
            WorkstreamState.IN_PROGRESS,
            name,
            hint="Use --reopen to resume completed work",
        )

    transition(record, WorkstreamState.IN_PROGRESS, reason="reopen" if reopen else "resume")
    save_sprint(config.store_path, sprint)
    return record


def complete_workstream(
    config: ProjectConfig,
    name: str,
    skip_gates: bool = False,
    runner: GateRunner = run_gates,
) -> tuple[WorkstreamRecord, GateReport | None]:
    """Mark a workstream completed, running its quality gates first.

    Gates run only when the checkout exists and its gate config is
    enabled. A failed required gate leaves the store untouched.

    Raises:
        SprintNotFound, WorkstreamNotFound, InvalidTransition
        GateConfigError: if the gate config is unreadable
        GateBlocked: if a required gate failed
    """
    sprint = require_sprint(config.store_path)
    record = find_workstream(sprint, name)

    if not can_transition(record, WorkstreamState.COMPLETED):
        raise InvalidTransition(record.status, WorkstreamState.COMPLETED, name)

    report = None
    worktree = config.resolve_path(record.worktree)
    if skip_gates:
        logger.warning(f"[GATE] Skipping quality gates for {name}")
    elif worktree.is_dir():
        gate_config = load_gate_config(worktree)
        if gate_config and gate_config.enabled:
            report = runner(worktree, gate_config)
            if not report.ok:
                raise GateBlocked(name, report)
        else:
            logger.info(f"[GATE] No enabled quality gates in {worktree}")

    transition(record, WorkstreamState.COMPLETED, reason="complete")
    record.completed_at = datetime.now(timezone.utc).isoformat()
    save_sprint(config.store_path, sprint)
    return record, report


# --- Removal ---

def remove_checkout(config: ProjectConfig, sprint: SprintConfig, record: WorkstreamRecord) -> RemovalOutcome:
    """Remove a workstream checkout: graceful first, then forced."""
    root = config.root
    path = config.resolve_path(record.worktree)

    reason = _refuse_path(config, sprint, path)
    if reason:
        logger.error(f"[CLEAN] Refusing to remove {path}: {reason}")
        return RemovalOutcome.FAILED

    if not path.exists():
        logger.info(f"[CLEAN] Worktree not found for {record.name} (may already be removed)")
        if find_worktree(root, path):
            prune_worktrees(root)
        return RemovalOutcome.ABSENT

    result = remove_worktree(root, path)
    if result.success:
        logger.info(f"[CLEAN] Removed worktree {path}")
        return RemovalOutcome.REMOVED

    logger.warning(f"[CLEAN] Graceful removal of {path} failed, forcing: {result.error}")
    result = remove_worktree(root, path, force=True)
    if result.success:
        logger.info(f"[CLEAN] Removed worktree {path} (forced)")
        return RemovalOutcome.REMOVED_FORCED

    logger.error(f"[CLEAN] Failed to remove worktree {path}: {result.error}")
    return RemovalOutcome.FAILED


def remove_branch(config: ProjectConfig, sprint: SprintConfig, record: WorkstreamRecord) -> RemovalOutcome:
    """Delete a workstream branch, moving the primary checkout off it first."""
    root = config.root
    branch = config.branch_for(record.name)

    reason = _refuse_branch(config, sprint, branch)
    if reason:
        logger.error(f"[CLEAN] Refusing to delete branch '{branch}': {reason}")
        return RemovalOutcome.FAILED

    if not branch_exists(root, branch):
        logger.info(f"[CLEAN] Branch '{branch}' not found (may already be deleted)")
        return RemovalOutcome.ABSENT

    primary = get_primary_worktree(root)
    if get_current_branch(primary) == branch:
        result = switch_branch(primary, config.integration_branch)
        if not result.success:
            logger.error(
                f"[CLEAN] Could not switch {primary} to '{config.integration_branch}': {result.error}"
            )
            return RemovalOutcome.FAILED

    result = delete_branch(root, branch)
    if not result.success:
        logger.warning(f"[CLEAN] Failed to delete branch '{branch}': {result.error}")
        return RemovalOutcome.FAILED

    logger.info(f"[CLEAN] Deleted branch '{branch}'")
    return RemovalOutcome.REMOVED


def clean_workstream(config: ProjectConfig, name: str) -> CleanupOutcome:
    """Remove one workstream's checkout and branch, keeping its record.

    The record becomes merged_and_cleaned unless the checkout could not
    be removed, in which case its status is left alone.

    Raises:
        SprintNotFound, WorkstreamNotFound
    """
    sprint = require_sprint(config.store_path)
    record = find_workstream(sprint, name)

    outcome = CleanupOutcome(
        name=name,
        checkout=remove_checkout(config, sprint, record),
        branch=remove_branch(config, sprint, record),
    )

    if outcome.ok:
        transition(record, WorkstreamState.MERGED_AND_CLEANED, reason="clean")
        save_sprint(config.store_path, sprint)
    else:
        logger.error(f"[CLEAN] {name}: checkout still present, status left at {record.status}")

    outcome.status = record.status
    return outcome


def verify_cleanup(config: ProjectConfig) -> tuple[list[Path], list[str]]:
    """Worktrees left besides the primary checkout, and workstream-named branches."""
    worktrees = [wt.path for wt in list_worktrees(config.root)[1:]]
    branches = [b for b in list_branches(config.root) if config.is_workstream_branch(b)]
    return worktrees, branches


def clean_all(config: ProjectConfig) -> CleanupTally | None:
    """Remove every workstream's checkout and branch, then the store.

    Partial failure is counted, not raised. Returns None if there is no
    store to clean.
    """
    sprint = load_sprint(config.store_path)
    if sprint is None:
        return None

    tally = CleanupTally(sprint=sprint.sprint)
    for record in sprint.workstreams:
        tally.outcomes.append(CleanupOutcome(
            name=record.name,
            checkout=remove_checkout(config, sprint, record),
            branch=remove_branch(config, sprint, record),
        ))

    result = prune_worktrees(config.root)
    if not result.success:
        logger.warning(f"[CLEAN] git worktree prune failed: {result.error}")

    delete_sprint(config.store_path)

    tally.remaining_worktrees, tally.remaining_branches = verify_cleanup(config)
    if not tally.clean:
        logger.warning(
            f"[CLEAN] {len(tally.remaining_worktrees)} worktree(s) and "
            f"{len(tally.remaining_branches)} workstream branch(es) remain"
        )
    return tally
