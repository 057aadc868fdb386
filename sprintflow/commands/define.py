"""
sprint define - Parse a backlog document and define its workstreams.

Reads tasks (and any existing Workstreams section) from the document,
resolves a grouping if there is none, writes it back, and creates the
sprint store.
"""

import sys
from pathlib import Path

from sprintflow.lib.backlog import load_backlog
from sprintflow.lib.config import ProjectConfig
from sprintflow.lib.constants import EXIT_ERROR, EXIT_SUCCESS
from sprintflow.lib.store import SprintConfig
from sprintflow.lib.validate import ValidationError
from sprintflow.pm.resolver import (
    EXAMPLE_SPEC,
    ResolutionError,
    apply_resolution,
    resolve_workstreams,
)


def _choose_mode(document: str) -> str:
    """Ask how to define workstreams. Returns "interactive", "flag" or "edit"."""
    print("Choose an option:")
    print("  1. Interactive mode (define workstreams now)")
    print(f'  2. Use flag: --workstreams="{EXAMPLE_SPEC}"')
    print("  3. Edit the document manually and re-run")
    print()
    try:
        answer = input("Enter option (1-3): ").strip()
    except EOFError:
        answer = ""

    if answer == "1":
        return "interactive"
    if answer == "2":
        print()
        print("Usage:")
        print(f'  sprint define {document} --workstreams="{EXAMPLE_SPEC}"')
        return "flag"

    print()
    print("Edit the document to add a '## Workstreams' section, then re-run:")
    print(f"  sprint define {document}")
    return "edit"


def print_analysis(sprint: SprintConfig, config: ProjectConfig) -> None:
    """Summarize each workstream and whether it can run in parallel."""
    for index, ws in enumerate(sprint.workstreams, 1):
        parallel_safe = not ws.dependencies
        mode = "parallel safe" if parallel_safe else "sequential"
        marker = "OK" if parallel_safe else "!!"
        print(f"[{marker}] WORKSTREAM {index}: {ws.name} ({len(ws.tasks)} tasks - {mode})")
        print(f"   - Tasks: {', '.join(ws.tasks)}")
        if ws.dependencies:
            print(f"   - Dependencies: {', '.join(ws.dependencies)}")
        conflicts = ", ".join(ws.file_conflicts) if ws.file_conflicts else "None detected"
        print(f"   - File conflicts: {conflicts}")
        print(f"   - Worktree: {ws.worktree}")
        print(f"   - Branch: {config.branch_for(ws.name)}")
        print()


def cmd_define(args, config: ProjectConfig) -> int:
    """Define workstreams for a backlog document and save the sprint store."""
    doc_path = Path(args.document)
    if not doc_path.is_absolute():
        doc_path = config.root / doc_path

    if config.store_path.exists() and not args.force:
        print(f"ERROR: A sprint is already defined at {config.store_path}")
        print("  Run 'sprint clean-all' first, or pass --force to replace it.")
        return EXIT_ERROR

    try:
        tasks, existing = load_backlog(doc_path)
    except FileNotFoundError:
        print(f"ERROR: Backlog document not found: {args.document}")
        return EXIT_ERROR

    if not tasks and not existing:
        print(f"ERROR: No tasks found under '## Tasks' in {args.document}")
        return EXIT_ERROR

    print("SPRINT WORKSTREAM ANALYSIS")
    print("=" * 60)
    print()

    interactive = args.interactive
    if not existing:
        print(f"Found {len(tasks)} tasks, but no workstreams defined.")
        print()
        if not args.workstreams and not interactive and sys.stdin.isatty():
            mode = _choose_mode(args.document)
            if mode != "interactive":
                return EXIT_SUCCESS
            interactive = True
    else:
        print(f"Found {len(tasks)} tasks in {len(existing)} workstream(s).")
        print()

    try:
        workstreams = resolve_workstreams(
            tasks,
            existing,
            spec=args.workstreams,
            interactive=interactive,
            document=args.document,
        )
    except ResolutionError as e:
        print(f"ERROR: {e}")
        if e.directive:
            print()
            print(e.directive)
        return EXIT_ERROR

    defined_now = not existing
    try:
        sprint = apply_resolution(doc_path, tasks, workstreams, defined_now, config)
    except ValidationError as e:
        print(f"ERROR: {e}")
        return EXIT_ERROR

    if defined_now:
        print(f"Defined {len(workstreams)} workstream(s); updated {args.document}")
        print()

    print_analysis(sprint, config)
    print(f"Sprint configuration saved to {config.store_path}")
    print()
    print("Next: sprint create")
    return EXIT_SUCCESS
