"""Plan the text edits behind role shortcuts and the role picker.

These functions do not touch an editor. They take the current line and
cursor and return the line and cursor the editor should end up with.
"""

import re

from .assignments import legacy_pattern
from .locator import (
    find_nearest_legal_insertion_point,
    find_role_cursor_position,
    get_existing_roles,
)

TRIGGER = "\\"
TASK_BLOCK_LANGUAGES = ("tasks", "dataview")
FENCE = re.compile(r"^```([\w-]*)")


def is_in_task_code_block(lines: list[str], line_number: int) -> bool:
    """Check if ``line_number`` sits inside a ```tasks or ```dataview fence."""
    inside = False
    lang = ""
    for text in lines[:line_number + 1]:
        match = FENCE.match(text.strip())
        if not match:
            continue
        if inside:
            inside = False
            lang = ""
        else:
            inside = True
            lang = match.group(1).lower()
    return inside and lang in TASK_BLOCK_LANGUAGES


def role_placeholder(role, in_code_block: bool = False) -> str:
    """Text inserted for a new role: '[🚗:: ]', or '🚗 = ' inside a query block."""
    if in_code_block:
        return f"{role.icon} = "
    return f"[{role.icon}:: ]"


def placeholder_cursor_offset(role, in_code_block: bool = False) -> int:
    """Cursor offset inside the placeholder; before the ']' for inline fields."""
    placeholder = role_placeholder(role, in_code_block)
    return len(placeholder) if in_code_block else len(placeholder) - 1


def _strip_trigger(line: str, cursor: int, trigger: str) -> tuple[str, int]:
    if trigger and cursor > 0 and line[cursor - 1:cursor] == trigger:
        return line[:cursor - 1] + line[cursor:], cursor - 1
    return line, cursor


def plan_role_selection(line: str, cursor: int, role, in_code_block: bool = False,
                        trigger: str = TRIGGER) -> dict:
    """Replace the trigger before the cursor with the role placeholder."""
    cursor = max(0, min(cursor, len(line)))
    line, cursor = _strip_trigger(line, cursor, trigger)
    placeholder = role_placeholder(role, in_code_block)
    return {
        "line": line[:cursor] + placeholder + line[cursor:],
        "cursor": cursor + placeholder_cursor_offset(role, in_code_block),
    }


def plan_role_insertion(line: str, cursor: int, role, in_code_block: bool = False,
                        trigger: str = TRIGGER) -> dict:
    """
    Plan a direct role shortcut (e.g. backslash + d for Drivers).

    If the role is already on the line the cursor moves into its assignee
    slot, adding ", " after existing assignees. Otherwise a new placeholder
    goes at the nearest legal insertion point, padded with spaces so it does
    not touch neighbouring words or assignments.

    Returns:
        dict with 'line' and 'cursor'
    """
    cursor = max(0, min(cursor, len(line)))
    line, cursor = _strip_trigger(line, cursor, trigger)

    if not in_code_block and role.id in get_existing_roles(line, [role]):
        info = find_role_cursor_position(line, role)
        if info is not None:
            position = info["position"]
            segment = legacy_pattern(role).search(line)
            if segment and segment.start(2) == position:
                # Legacy form: append after its wikilink list
                position = segment.end(2)
                insert = ", "
            elif info["needs_separator"]:
                insert = ", "
            elif position > 0 and not line[position - 1].isspace():
                insert = " "
            else:
                insert = ""
            return {
                "line": line[:position] + insert + line[position:],
                "cursor": position + len(insert),
            }

    placeholder = role_placeholder(role, in_code_block)
    if in_code_block:
        position = cursor
        before, after = "", ""
    else:
        position = find_nearest_legal_insertion_point(line, cursor)
        before = " " if position > 0 and not line[position - 1].isspace() else ""
        after = " " if position < len(line) and not line[position].isspace() else ""

    return {
        "line": line[:position] + before + placeholder + after + line[position:],
        "cursor": position + len(before) + placeholder_cursor_offset(role, in_code_block),
    }
