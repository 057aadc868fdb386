"""
Sprint backlog parser for sprintflow.

Extracts tasks and (optionally) workstream groupings from a backlog
document, and writes a canonical Workstreams section back into it.

Parsing is tolerant: lines that don't match are skipped and malformed
annotations leave fields at their defaults. Validation of the result is
the resolver's job.
"""

import logging
import re
from pathlib import Path

from sprintflow.lib.constants import (
    PLACEHOLDER_VALUES,
    TASK_DONE,
    TASK_IN_PROGRESS,
    TASK_TODO,
)
from sprintflow.lib.types import Task, WorkstreamDef

logger = logging.getLogger(__name__)

TASKS_HEADING = "## Tasks"
WORKSTREAMS_HEADING = "## Workstreams"
NOTES_HEADING = "## Notes"
DIVIDER = "---"

# Annotation lines are only looked for this many lines below a checklist entry
ANNOTATION_LOOKAHEAD = 4

SECTION_END_RE = re.compile(r'^#{1,2}\s')
HEADING_RE = re.compile(r'^#{1,6}\s')
CHECKLIST_RE = re.compile(
    r'^[-*]\s+\[\s*([xX]?)\s*\]\s+([A-Za-z][A-Za-z0-9_]*-\d+)\s*:\s*(.+?)\s*$'
)
ANY_CHECKLIST_RE = re.compile(r'^[-*]\s+\[')
ANNOTATION_RE = re.compile(
    r'^(?:[-*]\s+)?(?:\*\*)?(Status|Phase|Dependencies)(?:\*\*)?\s*:(?:\*\*)?\s*(.*?)\s*$',
    re.IGNORECASE,
)
WS_HEADER_RE = re.compile(
    r'^(?:###\s+|\*\*)Workstream(?:\*\*)?\s+(\d+)\s*:\s*([^(]+)'
)
WS_FIELD_RE = re.compile(
    r'^(?:[-*]\s+)?\*\*(Tasks|Dependencies|File Conflicts)\*\*\s*:\s*(.*?)\s*$',
    re.IGNORECASE,
)

TASK_STATUS_ALIASES = {
    "todo": TASK_TODO,
    "to do": TASK_TODO,
    "not started": TASK_TODO,
    "not-started": TASK_TODO,
    "pending": TASK_TODO,
    "in progress": TASK_IN_PROGRESS,
    "in-progress": TASK_IN_PROGRESS,
    "in_progress": TASK_IN_PROGRESS,
    "wip": TASK_IN_PROGRESS,
    "done": TASK_DONE,
    "complete": TASK_DONE,
    "completed": TASK_DONE,
}


def slugify(label: str) -> str:
    """Lower-case a label and collapse whitespace runs into single hyphens."""
    return re.sub(r'\s+', '-', label.strip().lower())


def is_placeholder(value: str) -> bool:
    """True for values like "None", "(to be assigned)" or "None (please review)"."""
    text = value.strip().lower()
    if not text or text in PLACEHOLDER_VALUES:
        return True
    stripped = re.sub(r'\s*\(.*\)\s*$', '', text)
    return not stripped or stripped in PLACEHOLDER_VALUES


def split_csv(value: str) -> list[str]:
    """Split a comma-separated value, dropping blanks and placeholders."""
    if is_placeholder(value):
        return []
    return [part.strip() for part in value.split(',') if not is_placeholder(part)]


def _section_bounds(lines: list[str], heading: str) -> tuple[int, int] | None:
    """(heading index, end index) of a section, or None if it is absent.

    The section runs to the next level-1/2 heading or divider. A repeated
    copy of the same heading does not end it.
    """
    target = heading.lower()
    for i, line in enumerate(lines):
        if line.strip().lower() != target:
            continue
        end = i + 1
        while end < len(lines):
            stripped = lines[end].strip()
            if stripped.lower() != target and (
                SECTION_END_RE.match(stripped) or stripped == DIVIDER
            ):
                break
            end += 1
        return i, end
    return None


def _section_lines(lines: list[str], heading: str) -> list[str]:
    """Body lines of a section, without any repeated heading lines."""
    bounds = _section_bounds(lines, heading)
    if bounds is None:
        return []
    start, end = bounds
    target = heading.lower()
    return [line for line in lines[start + 1:end] if line.strip().lower() != target]


def _apply_annotations(task: Task, following: list[str]) -> None:
    """Fill status/phase/dependencies from the lines under a checklist entry."""
    for line in following:
        stripped = line.strip()
        if not stripped or HEADING_RE.match(stripped) or ANY_CHECKLIST_RE.match(stripped):
            break

        match = ANNOTATION_RE.match(stripped)
        if not match:
            continue

        key = match.group(1).lower()
        value = match.group(2)
        if key == "status":
            normalized = TASK_STATUS_ALIASES.get(value.lower())
            if normalized:
                task.status = normalized
            else:
                logger.debug(f"Unknown status '{value}' for {task.id}, keeping {task.status}")
        elif key == "phase":
            task.phase = value or None
        elif key == "dependencies":
            task.dependencies = split_csv(value)


def parse_tasks(text: str) -> list[Task]:
    """Extract tasks from the Tasks section. Empty list if there is none.

    A repeated task ID keeps its first entry, so N checklist lines give N
    tasks only when their IDs are unique.
    """
    region = _section_lines(text.splitlines(), TASKS_HEADING)
    tasks = []
    seen = set()

    for i, line in enumerate(region):
        match = CHECKLIST_RE.match(line.strip())
        if not match:
            continue

        checked, task_id, description = match.groups()
        if task_id in seen:
            logger.warning(f"Duplicate task ID ignored: {task_id}")
            continue
        seen.add(task_id)

        task = Task(
            id=task_id,
            description=description,
            status=TASK_DONE if checked else TASK_TODO,
        )
        _apply_annotations(task, region[i + 1:i + 1 + ANNOTATION_LOOKAHEAD])
        tasks.append(task)

    return tasks


def parse_workstreams(text: str) -> list[WorkstreamDef]:
    """Extract workstream groupings from the Workstreams section, if any."""
    region = _section_lines(text.splitlines(), WORKSTREAMS_HEADING)
    workstreams = []
    current = None

    for line in region:
        stripped = line.strip()

        header = WS_HEADER_RE.match(stripped)
        if header:
            name = slugify(header.group(2).strip().strip('*'))
            if not name:
                current = None
                continue
            current = WorkstreamDef(id=header.group(1), name=name)
            workstreams.append(current)
            continue

        if current is None:
            continue

        field_match = WS_FIELD_RE.match(stripped)
        if not field_match:
            continue

        key = field_match.group(1).lower()
        values = split_csv(field_match.group(2))
        if key == "tasks":
            current.tasks = values
        elif key == "dependencies":
            current.dependencies = values
        elif key == "file conflicts":
            current.file_conflicts = values

    return workstreams


def parse_backlog(text: str) -> tuple[list[Task], list[WorkstreamDef]]:
    """Parse a backlog document into (tasks, workstreams)."""
    return parse_tasks(text), parse_workstreams(text)


def load_backlog(filepath: Path) -> tuple[list[Task], list[WorkstreamDef]]:
    """Read and parse a backlog document.

    Raises:
        FileNotFoundError: if the document doesn't exist
    """
    path = Path(filepath)
    if not path.is_file():
        raise FileNotFoundError(f"Backlog document not found: {filepath}")
    return parse_backlog(path.read_text())


def infer_dependencies(ws: WorkstreamDef, tasks: list[Task]) -> list[str]:
    """Dependencies of member tasks that live outside the workstream.

    Order is first-seen across the workstream's task list.
    """
    by_id = {t.id: t for t in tasks}
    members = set(ws.tasks)
    deps = []
    for task_id in ws.tasks:
        task = by_id.get(task_id)
        if not task:
            continue
        for dep in task.dependencies:
            if dep not in members and dep not in deps:
                deps.append(dep)
    return deps


def render_workstreams_section(workstreams: list[WorkstreamDef], tasks: list[Task]) -> list[str]:
    """Build the canonical Workstreams section as a list of lines."""
    lines = ["", WORKSTREAMS_HEADING, ""]
    for index, ws in enumerate(workstreams, 1):
        deps = infer_dependencies(ws, tasks)
        lines.append(f"### Workstream {index}: {ws.name}")
        lines.append("")
        lines.append(f"**Tasks**: {', '.join(ws.tasks)}")
        lines.append(f"**Dependencies**: {', '.join(deps) if deps else 'None'}")
        if ws.file_conflicts:
            lines.append(f"**File Conflicts**: {', '.join(ws.file_conflicts)}")
        lines.append("")
    return lines


def _find_insert_index(lines: list[str]) -> int:
    """Index of the trailing notes/divider block, or end of document."""
    start = 0
    # Skip a front-matter block so its opening divider isn't mistaken for the footer
    if lines and lines[0].strip() == DIVIDER:
        for i in range(1, len(lines)):
            if lines[i].strip() == DIVIDER:
                start = i + 1
                break

    for i in range(start, len(lines)):
        stripped = lines[i].strip()
        if stripped == DIVIDER or stripped.startswith(NOTES_HEADING):
            return i
    return len(lines)


def insert_workstreams_section(text: str, section: list[str]) -> str:
    """Place section lines in the document.

    An existing Workstreams heading (e.g. an empty placeholder) is filled
    in place. Otherwise the section goes before the notes/divider block,
    or at the end.
    """
    lines = text.split("\n")
    bounds = _section_bounds(lines, WORKSTREAMS_HEADING)
    if bounds:
        start, end = bounds
        # section starts with a blank separator line the heading already has
        lines[start:end] = section[1:]
    else:
        index = _find_insert_index(lines)
        lines[index:index] = section
    return "\n".join(lines)


def write_workstreams_section(
    filepath: Path,
    workstreams: list[WorkstreamDef],
    tasks: list[Task],
) -> None:
    """Rewrite the backlog document with a canonical Workstreams section."""
    path = Path(filepath)
    content = path.read_text()
    section = render_workstreams_section(workstreams, tasks)
    path.write_text(insert_workstreams_section(content, section))
    logger.info(f"Wrote {len(workstreams)} workstream(s) into {path}")
