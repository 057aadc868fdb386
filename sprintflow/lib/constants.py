"""Shared constants for sprintflow."""

# Exit codes
EXIT_SUCCESS = 0
EXIT_ERROR = 1
EXIT_USAGE = 2

# Workstream statuses as persisted in the sprint store
STATUS_READY = "ready_to_start"
STATUS_IN_PROGRESS = "in_progress"
STATUS_COMPLETED = "completed"
STATUS_CLEANED = "merged_and_cleaned"

# Task statuses parsed from the backlog
TASK_TODO = "todo"
TASK_IN_PROGRESS = "in_progress"
TASK_DONE = "done"

# Values that mean "no dependencies / nothing here" in backlog documents
PLACEHOLDER_VALUES = frozenset({"(to be assigned)", "none", "-", "n/a"})

# Sentinel that ends the interactive definition loop
DONE_SENTINEL = "done"
