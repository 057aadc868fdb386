"""
Workstream definition resolver.

Turns a backlog without a Workstreams section into a validated, disjoint
task-to-workstream assignment, either from a compact spec string
("ui:TASK-001,TASK-002;api:TASK-003") or through an interactive loop.
Groupings already present in the document pass through untouched.
"""

import copy
import logging
from dataclasses import replace
from pathlib import Path

from sprintflow.lib.backlog import infer_dependencies, slugify, write_workstreams_section
from sprintflow.lib.config import ProjectConfig
from sprintflow.lib.constants import DONE_SENTINEL, STATUS_READY
from sprintflow.lib.store import SprintConfig, WorkstreamRecord, save_sprint
from sprintflow.lib.types import Task, WorkstreamDef

logger = logging.getLogger(__name__)

EXAMPLE_SPEC = "ws1:TASK-001,TASK-002;ws2:TASK-003"
DESCRIPTION_WIDTH = 60


class ResolutionError(Exception):
    """No workstream grouping could be produced."""

    def __init__(self, message: str, directive: str = ""):
        self.directive = directive
        super().__init__(message)


def no_workstreams_directive(document: str = "<document>") -> str:
    """The three ways to define workstreams, for error output."""
    return "\n".join([
        "No workstreams defined. Options:",
        "",
        "1. Use interactive mode:",
        f"   sprint define {document} --interactive",
        "",
        "2. Use flag mode:",
        f'   sprint define {document} --workstreams="{EXAMPLE_SPEC}"',
        "",
        "3. Edit the document manually to add a '## Workstreams' section, then re-run:",
        f"   sprint define {document}",
    ])


class ConsolePrompter:
    """Prompter backed by stdin/stdout. EOF reads as None."""

    def ask(self, message: str) -> str | None:
        try:
            return input(message)
        except EOFError:
            return None

    def say(self, message: str) -> None:
        print(message)


def _claim(raw_ids: list[str], known: set[str], claimed: dict[str, str], group: str) -> list[str]:
    """Filter ids down to known, unclaimed ones, logging each rejection."""
    valid = []
    for task_id in raw_ids:
        if task_id not in known:
            logger.warning(f"Unknown task ID '{task_id}' in workstream '{group}', ignored")
        elif task_id in claimed:
            logger.warning(
                f"Task {task_id} already assigned to '{claimed[task_id]}', "
                f"dropped from '{group}'"
            )
        elif task_id not in valid:
            valid.append(task_id)
    return valid


def _split_ids(text: str) -> list[str]:
    return [part.strip() for part in text.split(",") if part.strip()]


def parse_workstream_spec(spec: str, tasks: list[Task]) -> list[WorkstreamDef]:
    """Parse "name:id,id;name:id" into workstreams.

    Invalid pieces are dropped with a warning: unknown ids, ids claimed by
    an earlier group (first group wins), empty or duplicate names, and
    groups left with no valid ids. May return an empty list.
    """
    known = {t.id for t in tasks}
    claimed: dict[str, str] = {}
    result: list[WorkstreamDef] = []

    text = spec.strip().strip("\"'")
    for chunk in text.split(";"):
        if not chunk.strip():
            continue

        label, sep, ids_text = chunk.partition(":")
        if not sep:
            logger.warning(f"Workstream definition '{chunk.strip()}' has no ':', ignored")
            continue

        name = slugify(label)
        if not name:
            logger.warning(f"Workstream definition '{chunk.strip()}' has an empty name, ignored")
            continue
        if any(ws.name == name for ws in result):
            logger.warning(f"Duplicate workstream name '{name}', later definition ignored")
            continue

        valid = _claim(_split_ids(ids_text), known, claimed, name)
        if not valid:
            logger.warning(f"Workstream '{name}' has no valid tasks, ignored")
            continue

        for task_id in valid:
            claimed[task_id] = name
        result.append(WorkstreamDef(id=str(len(result) + 1), name=name, tasks=valid))

    return result


def define_interactively(tasks: list[Task], prompter) -> list[WorkstreamDef]:
    """Build workstreams by asking for names and task lists.

    The prompter needs ask(message) -> str | None and say(message); None
    from ask means input ended and is treated as 'done'.

    Raises:
        ResolutionError: if finished without any workstream
    """
    known = {t.id for t in tasks}
    claimed: dict[str, str] = {}
    result: list[WorkstreamDef] = []

    prompter.say("\nAvailable tasks:")
    for i, task in enumerate(tasks, 1):
        desc = task.description
        if len(desc) > DESCRIPTION_WIDTH:
            desc = desc[:DESCRIPTION_WIDTH] + "..."
        prompter.say(f"  {i}. {task.id}: {desc}")

    finished = False
    while not finished:
        answer = prompter.ask(
            f"\nWorkstream {len(result) + 1} name (or '{DONE_SENTINEL}' to finish): "
        )
        if answer is None or answer.strip().lower() == DONE_SENTINEL:
            break

        name = slugify(answer)
        if not name:
            prompter.say("Name cannot be empty")
            continue
        if any(ws.name == name for ws in result):
            prompter.say(f"Workstream '{name}' is already defined")
            continue

        while True:
            ids_answer = prompter.ask(
                f'Task IDs for "{name}" (comma-separated, e.g., TASK-001,TASK-002): '
            )
            if ids_answer is None:
                finished = True
                break

            raw_ids = _split_ids(ids_answer)
            valid = _claim(raw_ids, known, claimed, name)
            if valid:
                break
            prompter.say("No valid unassigned task IDs found. Please try again.")

        if finished:
            break

        rejected = [t for t in raw_ids if t not in valid]
        if rejected:
            prompter.say(f"Ignored task IDs: {', '.join(rejected)}")

        for task_id in valid:
            claimed[task_id] = name
        result.append(WorkstreamDef(id=str(len(result) + 1), name=name, tasks=valid))
        prompter.say(f"Workstream '{name}' created with {len(valid)} task(s)")

        remaining = [t.id for t in tasks if t.id not in claimed]
        if remaining:
            prompter.say(f"\nRemaining unassigned tasks: {len(remaining)}")
            for task_id in remaining:
                prompter.say(f"  - {task_id}")
        else:
            prompter.say(f"\nAll tasks assigned. Enter '{DONE_SENTINEL}' to finish.")

    if not result:
        raise ResolutionError("No workstreams defined", no_workstreams_directive())
    return result


def resolve_workstreams(
    tasks: list[Task],
    existing: list[WorkstreamDef],
    spec: str | None = None,
    interactive: bool = False,
    prompter=None,
    document: str = "<document>",
) -> list[WorkstreamDef]:
    """Produce the workstream grouping for a sprint.

    Existing groupings win over every other source. Inputs are never
    mutated; the result is always a new list.

    Raises:
        ResolutionError: if no grouping could be produced
    """
    if existing:
        if spec:
            logger.info("Document already defines workstreams, ignoring --workstreams")
        return copy.deepcopy(existing)

    if spec:
        result = parse_workstream_spec(spec, tasks)
        if not result:
            raise ResolutionError(
                "No valid workstreams in --workstreams value",
                no_workstreams_directive(document),
            )
        return result

    if interactive:
        return define_interactively(tasks, prompter or ConsolePrompter())

    raise ResolutionError("No workstreams defined", no_workstreams_directive(document))


def apply_resolution(
    doc_path: Path,
    tasks: list[Task],
    workstreams: list[WorkstreamDef],
    defined_now: bool,
    config: ProjectConfig,
) -> SprintConfig:
    """Persist a resolved grouping to the document and the sprint store.

    Newly defined workstreams get inferred cross-workstream dependencies
    and a canonical section written into the document.
    """
    doc_path = Path(doc_path)

    if defined_now:
        resolved = [replace(ws, dependencies=infer_dependencies(ws, tasks)) for ws in workstreams]
        write_workstreams_section(doc_path, resolved, tasks)
    else:
        resolved = workstreams

    sprint = SprintConfig(
        sprint=doc_path.stem,
        workstreams=[
            WorkstreamRecord(
                name=ws.name,
                status=STATUS_READY,
                tasks=list(ws.tasks),
                worktree=config.worktree_for(ws.name),
                dependencies=list(ws.dependencies),
                file_conflicts=list(ws.file_conflicts),
            )
            for ws in resolved
        ],
    )
    save_sprint(config.store_path, sprint)
    logger.info(f"[STATE] Sprint '{sprint.sprint}' saved with {len(resolved)} workstream(s)")
    return sprint
