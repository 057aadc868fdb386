"""
Workstream definition for sprintflow.

Turns a parsed backlog into named, disjoint workstreams and persists
the result to the document and the sprint store.
"""

from sprintflow.pm.resolver import (
    ConsolePrompter,
    ResolutionError,
    apply_resolution,
    define_interactively,
    no_workstreams_directive,
    parse_workstream_spec,
    resolve_workstreams,
)

__all__ = [
    "ConsolePrompter",
    "ResolutionError",
    "apply_resolution",
    "define_interactively",
    "no_workstreams_directive",
    "parse_workstream_spec",
    "resolve_workstreams",
]
