"""Locate role assignments and legal insertion points on a task line.

Every function here takes one line of text and returns a value; nothing is
mutated and nothing raises for odd input. "Not found" is None or False.
"""

import re

from .brackets import (
    find_closing_bracket,
    is_inside_role_assignment,
    is_inside_wikilink,
    role_assignment_spans,
)
from .classifier import content_start
from .roles import escape_icon


def _dataview_opener(role) -> re.Pattern:
    return re.compile(rf"\[{escape_icon(role.icon)}::\s*")


def _legacy_opener(role) -> re.Pattern:
    return re.compile(rf"{escape_icon(role.icon)}\s+")


def get_existing_roles(line: str, roles) -> list[str]:
    """Return ids of roles already assigned on the line, in role list order.

    A role counts if either its dataview form ``[icon:: ...]`` or its legacy
    form ``icon [[...]]`` appears anywhere on the line.
    """
    existing = []
    for role in roles:
        if role.id in existing:
            continue
        if _dataview_opener(role).search(line):
            existing.append(role.id)
            continue
        if re.search(rf"{escape_icon(role.icon)}\s+\[\[", line):
            existing.append(role.id)
    return existing


def find_role_cursor_position(line: str, role) -> dict | None:
    """Find where new assignees for an existing role should be typed.

    Returns:
        dict with 'position' and 'needs_separator', or None if the role is
        not on the line. For ``[icon:: ...]`` the position is the index of
        the bracket closing the whole assignment; needs_separator is True
        when assignees are already present. For the legacy form the position
        is right after the icon and its whitespace.
    """
    for match in _dataview_opener(role).finditer(line):
        close = find_closing_bracket(line, match.start() + 1)
        if close is None:
            continue
        existing = line[match.end():close].strip()
        return {"position": close, "needs_separator": bool(existing)}

    match = _legacy_opener(role).search(line)
    if match:
        return {"position": match.end(), "needs_separator": False}
    return None


def _is_word_boundary(line: str, position: int) -> bool:
    if position == 0 or position == len(line):
        return True
    before = line[position - 1]
    after = line[position]
    if before.isspace() or after.isspace():
        return True
    # Adjacent to a role assignment or wikilink
    if before == "]" or after == "[":
        return True
    return not (re.match(r"\w", before) and re.match(r"\w", after))


def is_legal_insertion_point(line: str, position: int) -> bool:
    """Check whether a new role assignment can be inserted at ``position``.

    Illegal positions are out of range, before the end of the checkbox
    prefix, inside a role assignment or wikilink, or in the middle of a word.
    Lines without a checkbox have no legal positions.
    """
    if position < 0 or position > len(line):
        return False
    start = content_start(line)
    if start is None or position < start:
        return False
    if is_inside_role_assignment(line, position):
        return False
    if is_inside_wikilink(line, position):
        return False
    return _is_word_boundary(line, position)


def find_all_legal_insertion_points(line: str) -> list[int]:
    """Return the sorted, unique legal positions a caller should consider.

    Candidates are the start of the task content, right after each role
    assignment (when followed by whitespace or the end of the line) and the
    end of the trimmed line.
    """
    candidates = []
    start = content_start(line)
    if start is not None:
        candidates.append(start)

    for _, close in role_assignment_spans(line):
        after = close + 1
        if after == len(line) or line[after].isspace():
            candidates.append(after)

    candidates.append(len(line.rstrip()))

    return sorted({pos for pos in candidates if is_legal_insertion_point(line, pos)})


def find_nearest_legal_insertion_point(line: str, position: int) -> int:
    """Move ``position`` to the closest legal insertion point.

    The position is clamped to the line first. Ties go to the earlier
    position. With no legal candidates the end of the checkbox prefix is
    returned, or 0 for a line without one.
    """
    position = max(0, min(position, len(line)))
    if is_legal_insertion_point(line, position):
        return position

    nearest = None
    best = None
    for candidate in find_all_legal_insertion_points(line):
        distance = abs(candidate - position)
        if best is None or distance < best:
            nearest, best = candidate, distance
    if nearest is not None:
        return nearest

    start = content_start(line)
    return start if start is not None else 0
