"""
Shared data types for sprintflow.

Backlog-level types used by the parser, the resolver, and the section
writer. Persisted workstream records live in store.py.
"""

from dataclasses import dataclass, field
from typing import Optional

from sprintflow.lib.constants import TASK_TODO


@dataclass
class Task:
    """A checklist entry from the Tasks section of a backlog document."""
    id: str                                    # TASK-001
    description: str
    status: str = TASK_TODO                    # todo, in_progress, done
    phase: Optional[str] = None
    dependencies: list[str] = field(default_factory=list)


@dataclass
class WorkstreamDef:
    """A named, disjoint group of tasks before it is persisted."""
    id: str                                    # Ordinal within the sprint: "1", "2"
    name: str                                  # Slug: "backend-api"
    tasks: list[str] = field(default_factory=list)
    dependencies: list[str] = field(default_factory=list)
    file_conflicts: list[str] = field(default_factory=list)
