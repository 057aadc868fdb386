#!/usr/bin/env python3
"""sprint CLI entrypoint."""

import sys
import argparse
import logging
from pathlib import Path

from sprintflow.lib.config import load_project_config
from sprintflow.lib.constants import EXIT_USAGE
from sprintflow.commands import define as cmd_define_module
from sprintflow.commands import create as cmd_create_module
from sprintflow.commands import resume as cmd_resume_module
from sprintflow.commands import complete as cmd_complete_module
from sprintflow.commands import clean as cmd_clean_module
from sprintflow.commands import status as cmd_status_module


def get_project_config(args):
    """Load project config for --root, or the current directory."""
    root = Path(args.root) if args.root else Path.cwd()
    if not root.is_dir():
        print(f"ERROR: Project root not found: {root}")
        sys.exit(EXIT_USAGE)
    try:
        return load_project_config(root)
    except ValueError as e:
        print(f"ERROR: {e}")
        sys.exit(EXIT_USAGE)


def cmd_define(args):
    return cmd_define_module.cmd_define(args, get_project_config(args))


def cmd_create(args):
    return cmd_create_module.cmd_create(args, get_project_config(args))


def cmd_resume(args):
    return cmd_resume_module.cmd_resume(args, get_project_config(args))


def cmd_complete(args):
    return cmd_complete_module.cmd_complete(args, get_project_config(args))


def cmd_clean(args):
    return cmd_clean_module.cmd_clean(args, get_project_config(args))


def cmd_clean_all(args):
    return cmd_clean_module.cmd_clean_all(args, get_project_config(args))


def cmd_status(args):
    return cmd_status_module.cmd_status(args, get_project_config(args))


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog='sprint', description='Sprint workstream coordinator')
    parser.add_argument('--root', '-r', help='Project root (default: current directory)')
    parser.add_argument('--verbose', '-v', action='store_true', help='Show progress logging')
    subparsers = parser.add_subparsers(dest='command', required=True)

    # sprint define
    p_define = subparsers.add_parser('define', help='Parse a backlog and define workstreams')
    p_define.add_argument('document', help='Backlog markdown document')
    p_define.add_argument('--workstreams', '-w', metavar='SPEC',
                          help='Inline definition, e.g. "ui:TASK-001,TASK-002;api:TASK-003"')
    p_define.add_argument('--interactive', '-i', action='store_true',
                          help='Define workstreams interactively')
    p_define.add_argument('--force', '-f', action='store_true',
                          help='Replace an existing sprint configuration')
    p_define.set_defaults(func=cmd_define)

    # sprint create
    p_create = subparsers.add_parser('create', help='Create branches and worktrees')
    p_create.set_defaults(func=cmd_create)

    # sprint resume
    p_resume = subparsers.add_parser('resume', help='Mark a workstream in progress')
    p_resume.add_argument('name', help='Workstream name')
    p_resume.add_argument('--reopen', action='store_true', help='Reopen a completed workstream')
    p_resume.set_defaults(func=cmd_resume)

    # sprint complete
    p_complete = subparsers.add_parser('complete', help='Run quality gates and mark completed')
    p_complete.add_argument('name', help='Workstream name')
    p_complete.add_argument('--skip-gates', action='store_true', help='Skip quality gates (not recommended)')
    p_complete.set_defaults(func=cmd_complete)

    # sprint clean
    p_clean = subparsers.add_parser('clean', help='Remove worktree and branch (all if no name)')
    p_clean.add_argument('name', nargs='?', help='Workstream name')
    p_clean.set_defaults(func=cmd_clean)

    # sprint clean-all
    p_clean_all = subparsers.add_parser('clean-all', help='Remove every workstream and the sprint configuration')
    p_clean_all.set_defaults(func=cmd_clean_all)

    # sprint status
    p_status = subparsers.add_parser('status', help='Show workstream status')
    p_status.set_defaults(func=cmd_status)

    return parser


def main(argv=None):
    parser = build_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.INFO if args.verbose else logging.WARNING,
        format='%(levelname)s %(name)s: %(message)s',
        stream=sys.stderr,
    )
    return args.func(args)


if __name__ == '__main__':
    sys.exit(main())
