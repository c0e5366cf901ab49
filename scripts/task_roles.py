#!/usr/bin/env python3
"""
Task Roles CLI - inspect and edit role assignments on markdown task lines.

Usage:
    task_roles.py roles [--json]
    task_roles.py list "Work Tasks.md" [--role drivers] [--json]
    task_roles.py points "- [ ] Task [🚗:: @Ann] more" [--cursor 14]
    task_roles.py assign "Work Tasks.md" 12 drivers @Ann +Acme
"""

import argparse
import json
import logging
import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent))
from lib.task_line.assignments import add_assignees, parse_role_assignments
from lib.task_line.classifier import get_checkbox_prefix, is_task_case_insensitive
from lib.task_line.locator import (
    find_all_legal_insertion_points,
    find_nearest_legal_insertion_point,
    get_existing_roles,
)
from lib.task_line.roles import get_visible_roles, role_to_dict
from utils import atomic_write, load_settings

logger = logging.getLogger(__name__)


def scan_tasks(content: str, roles, symbols: dict) -> list[dict]:
    """
    Collect task lines and their role assignments.

    Rules:
    - Skip lines inside fenced code blocks
    - Line numbers are 1-based
    """
    tasks = []
    in_code_block = False
    for line_no, line in enumerate(content.splitlines(), start=1):
        if line.strip().startswith('```'):
            in_code_block = not in_code_block
            continue
        if in_code_block or not is_task_case_insensitive(line):
            continue

        prefix = get_checkbox_prefix(line)
        assignments = parse_role_assignments(
            line, roles, symbols['person_symbol'], symbols['company_symbol']
        )
        tasks.append({
            'line_num': line_no,
            'status': prefix.rstrip()[-2],
            'text': line[len(prefix):].strip(),
            'roles': {a['role'].id: a['assignees'] for a in assignments},
            'raw_line': line,
        })
    return tasks


def assign_in_file(path: Path, line_no: int, role_id: str, assignees: list[str], settings: dict) -> str:
    """Add assignees for a role to one task line and save the file.

    Returns the updated line.

    Raises:
        ValueError: unknown role, missing file, line out of range or not a task
    """
    roles = get_visible_roles(settings['roles'], settings['hidden_default_roles'])
    role = next((r for r in roles if r.id == role_id), None)
    if role is None:
        raise ValueError(f"Unknown role '{role_id}'. Available: {', '.join(r.id for r in roles)}")
    if not path.exists():
        raise ValueError(f"Tasks file not found: {path}")

    content = path.read_text(encoding='utf-8')
    lines = content.split('\n')
    if line_no < 1 or line_no > len(lines):
        raise ValueError(f"Line {line_no} is out of range (1-{len(lines)}).")

    line = lines[line_no - 1]
    if not is_task_case_insensitive(line):
        raise ValueError(f"Line {line_no} is not a task: {line!r}")

    updated = add_assignees(line, role, assignees, roles, **settings['symbols'])
    lines[line_no - 1] = updated
    atomic_write(path, '\n'.join(lines))
    logger.debug(f"Line {line_no}: {line!r} -> {updated!r}")
    return updated


def cmd_roles(args, settings):
    roles = get_visible_roles(settings['roles'], settings['hidden_default_roles'])
    if args.json:
        print(json.dumps([role_to_dict(r) for r in roles], indent=2, ensure_ascii=False))
        return
    for role in roles:
        shortcut = f" (\\{role.shortcut})" if role.shortcut else ''
        print(f"{role.icon} {role.name} [{role.id}]{shortcut}")


def cmd_list(args, settings):
    path = Path(args.file)
    if not path.exists():
        raise ValueError(f"Tasks file not found: {path}")
    roles = get_visible_roles(settings['roles'], settings['hidden_default_roles'])
    tasks = scan_tasks(path.read_text(encoding='utf-8'), roles, settings['symbols'])
    if args.role:
        tasks = [t for t in tasks if args.role in t['roles']]

    if args.json:
        print(json.dumps(tasks, indent=2, ensure_ascii=False))
        return
    if not tasks:
        print("No matching tasks.")
        return
    icons = {r.id: r.icon for r in roles}
    for task in tasks:
        assigned = ' '.join(
            f"{icons[rid]} {', '.join(names)}" for rid, names in task['roles'].items()
        )
        done = 'x' if task['status'].lower() == 'x' else ' '
        print(f"{task['line_num']:4d}. [{done}] {task['text']}" + (f"  → {assigned}" if assigned else ''))


def cmd_points(args, settings):
    line = args.line
    roles = get_visible_roles(settings['roles'], settings['hidden_default_roles'])
    cursor = len(line) if args.cursor is None else args.cursor
    print(json.dumps({
        'points': find_all_legal_insertion_points(line),
        'nearest': find_nearest_legal_insertion_point(line, cursor),
        'existing_roles': get_existing_roles(line, roles),
    }, ensure_ascii=False))


def cmd_assign(args, settings):
    updated = assign_in_file(Path(args.file), args.line_no, args.role, args.assignees, settings)
    print(f"✅ {updated.strip()}")


def main(argv=None):
    parser = argparse.ArgumentParser(description='Task Roles CLI')
    parser.add_argument('--roles-file', help='JSON roles file (default: $TASK_ROLES_FILE)')
    parser.add_argument('--verbose', action='store_true', help='Debug logging')

    subparsers = parser.add_subparsers(dest='command', required=True)

    roles_parser = subparsers.add_parser('roles', help='List visible roles')
    roles_parser.add_argument('--json', action='store_true')
    roles_parser.set_defaults(func=cmd_roles)

    list_parser = subparsers.add_parser('list', help='List tasks with role assignments')
    list_parser.add_argument('file', help='Markdown file')
    list_parser.add_argument('--role', help='Only tasks with this role id')
    list_parser.add_argument('--json', action='store_true')
    list_parser.set_defaults(func=cmd_list)

    points_parser = subparsers.add_parser('points', help='Show legal insertion points for a line')
    points_parser.add_argument('line', help='Task line text')
    points_parser.add_argument('--cursor', type=int, help='Cursor offset (default: end of line)')
    points_parser.set_defaults(func=cmd_points)

    assign_parser = subparsers.add_parser('assign', help='Assign people/companies to a role on a task line')
    assign_parser.add_argument('file', help='Markdown file')
    assign_parser.add_argument('line_no', type=int, help='1-based line number')
    assign_parser.add_argument('role', help='Role id')
    assign_parser.add_argument('assignees', nargs='+', help='@person or +company')
    assign_parser.set_defaults(func=cmd_assign)

    args = parser.parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(levelname)s: %(message)s",
    )

    try:
        settings = load_settings(Path(args.roles_file) if args.roles_file else None)
        args.func(args, settings)
    except ValueError as e:
        print(f"❌ {e}")
        sys.exit(1)


if __name__ == '__main__':
    main()
