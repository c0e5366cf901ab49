"""Parse, format and rewrite role assignments on a task line.

Dataview form:  [🚗:: [[People/Ann|@Ann]], [[Companies/Acme|+Acme]]]
Legacy form:    🚗 [[People/Ann|@Ann]], [[People/Bob|@Bob]]
"""

import re

from .brackets import find_closing_bracket
from .classifier import content_start
from .roles import escape_icon

DEFAULT_PERSON_SYMBOL = "@"
DEFAULT_COMPANY_SYMBOL = "+"
DEFAULT_PERSON_DIRECTORY = "People"
DEFAULT_COMPANY_DIRECTORY = "Companies"

WIKILINK_ALIAS = re.compile(r"\[\[([^\]|]+)\|([^\]]+)\]\]")
_WIKILINK = r"\[\[[^\]]*\]\]"
# One assignee inside an assignment: a whole wikilink or a plain comma part
_ITEM = re.compile(rf"{_WIKILINK}|[^,\[\]]+")

# Markers that start the metadata tail of a task (Tasks plugin emoji,
# inline fields and tags). Role assignments go in front of them.
METADATA_PATTERNS = [
    re.compile(r"[🔺⏫🔼🔽⏬]"),
    re.compile(r"(?:📅|⏳|🛫|➕|✅|🗓️|🔁)"),
    re.compile(r"\[[^\[\]]+?::"),
    re.compile(r"(?<!\S)#[\w-]+"),
]


def parse_assignees(text: str, dataview: bool = True,
                    person_symbol: str = DEFAULT_PERSON_SYMBOL,
                    company_symbol: str = DEFAULT_COMPANY_SYMBOL) -> list[str]:
    """
    Extract assignee display names from assignment text.

    Wikilinks contribute their alias ([[People/Ann|@Ann]] -> @Ann). Dataview
    text without wikilinks is read as a comma separated list of @person and
    +company names.
    """
    aliases = [m.group(2).strip() for m in WIKILINK_ALIAS.finditer(text)]
    if aliases or not dataview:
        return aliases

    assignees = []
    for part in text.split(","):
        part = part.strip()
        if part.startswith(person_symbol) or part.startswith(company_symbol):
            assignees.append(part)
    return assignees


def _dataview_values(line: str, role):
    """Yield the raw text of each terminated [icon:: ...] for ``role``."""
    for match in re.finditer(rf"\[{escape_icon(role.icon)}::\s*", line):
        close = find_closing_bracket(line, match.start() + 1)
        if close is not None:
            yield line[match.end():close]


def legacy_pattern(role) -> re.Pattern:
    """Match a legacy segment; group 2 is the comma separated wikilink list."""
    return re.compile(
        rf"(\s*){escape_icon(role.icon)}\s+({_WIKILINK}(?:\s*,\s*{_WIKILINK})*)"
    )


def parse_role_assignments(line: str, roles,
                           person_symbol: str = DEFAULT_PERSON_SYMBOL,
                           company_symbol: str = DEFAULT_COMPANY_SYMBOL) -> list[dict]:
    """
    Parse role assignments on a line.

    Returns a list of {'role': Role, 'assignees': [...]} in role order. The
    legacy form is only consulted when no dataview assignment is present.
    Assignments without assignees are skipped.
    """
    result = []
    for role in roles:
        for value in _dataview_values(line, role):
            assignees = parse_assignees(value, True, person_symbol, company_symbol)
            if assignees:
                result.append({"role": role, "assignees": assignees})

    if result:
        return result

    for role in roles:
        match = legacy_pattern(role).search(line)
        if match:
            assignees = parse_assignees(match.group(2), False)
            if assignees:
                result.append({"role": role, "assignees": assignees})
    return result


def format_assignee(assignee: str,
                    person_symbol: str = DEFAULT_PERSON_SYMBOL,
                    company_symbol: str = DEFAULT_COMPANY_SYMBOL,
                    person_directory: str = DEFAULT_PERSON_DIRECTORY,
                    company_directory: str = DEFAULT_COMPANY_DIRECTORY) -> str:
    """Turn '@Ann' into '[[People/Ann|@Ann]]'. Existing wikilinks pass through."""
    assignee = assignee.strip()
    if assignee.startswith("[["):
        return assignee
    if assignee.startswith(company_symbol):
        return f"[[{company_directory}/{assignee[len(company_symbol):]}|{assignee}]]"
    if assignee.startswith(person_symbol):
        return f"[[{person_directory}/{assignee[len(person_symbol):]}|{assignee}]]"
    return f"[[{person_directory}/{assignee}|{person_symbol}{assignee}]]"


def format_role_assignments(assignments: list[dict], roles, **symbols) -> str:
    """
    Format assignments as dataview inline fields, ordered by role order.

    Each assignment is {'role_id': str, 'assignees': [...]}. Empty
    assignments and unknown role ids are skipped.
    """
    by_id = {role.id: role for role in roles}
    known = [a for a in assignments if a.get("assignees") and a.get("role_id") in by_id]
    known.sort(key=lambda a: by_id[a["role_id"]].order)

    parts = []
    for assignment in known:
        role = by_id[assignment["role_id"]]
        links = ", ".join(format_assignee(a, **symbols) for a in assignment["assignees"])
        parts.append(f"[{role.icon}:: {links}]")
    return " ".join(parts)


def _tidy(line: str) -> str:
    """Collapse runs of whitespace in the task body, keeping indentation."""
    body = line.lstrip()
    indent = line[:len(line) - len(body)]
    return indent + re.sub(r"\s{2,}", " ", body).strip()


def _remove_dataview(line: str, role) -> str:
    pattern = re.compile(rf"(\s*)\[{escape_icon(role.icon)}::")
    pos = 0
    while True:
        match = pattern.search(line, pos)
        if not match:
            return line
        close = find_closing_bracket(line, match.end(1) + 1)
        if close is None:
            # Unterminated; leave it alone
            pos = match.end()
            continue
        line = line[:match.start()] + line[close + 1:]
        pos = match.start()


def remove_all_role_assignments(line: str, roles) -> str:
    """Strip every dataview and legacy assignment for ``roles`` from the line."""
    for role in roles:
        line = _remove_dataview(line, role)
        line = legacy_pattern(role).sub("", line)
    return _tidy(line)


def find_metadata_index(line: str, start: int = 0) -> int:
    """Index of the first metadata marker at or after ``start``, or -1."""
    index = -1
    for pattern in METADATA_PATTERNS:
        match = pattern.search(line, start)
        if match and (index == -1 or match.start() < index):
            index = match.start()
    return index


def apply_role_assignments_to_line(line: str, assignments: list[dict], roles, **symbols) -> str:
    """Replace the role assignments on a task line.

    Existing assignments for ``roles`` are removed; the new ones are placed
    before the first metadata marker, or at the end of the line.
    """
    text = format_role_assignments(assignments, roles, **symbols)
    clean = remove_all_role_assignments(line, roles)
    if not text:
        return clean

    idx = find_metadata_index(clean, content_start(clean) or 0)
    if idx == -1:
        return _tidy(f"{clean} {text}")
    before = clean[:idx].rstrip()
    after = clean[idx:].lstrip()
    return _tidy(f"{before} {text} {after}")


def _split_items(text: str) -> list[str]:
    return [m.group(0).strip() for m in _ITEM.finditer(text) if m.group(0).strip()]


def _assignment_items(line: str, roles) -> dict:
    """Raw assignee items per role id, from both dataview and legacy segments.

    Unlike parse_role_assignments nothing is dropped: unaliased wikilinks and
    plain names are kept verbatim so a rewrite can reproduce them.
    """
    items = {}
    for role in roles:
        for value in _dataview_values(line, role):
            items.setdefault(role.id, []).extend(_split_items(value))
        for match in legacy_pattern(role).finditer(line):
            items.setdefault(role.id, []).extend(_split_items(match.group(2)))
    return items


def add_assignees(line: str, role, new_assignees: list[str], roles, **symbols) -> str:
    """Add assignees to ``role`` on the line, keeping other assignments.

    Assignees are compared by the link they format to, so 'Ann', '@Ann' and
    '[[People/Ann|@Ann]]' are the same person.
    """
    all_roles = list(roles) if role in roles else [*roles, role]
    current = _assignment_items(line, all_roles)

    merged = current.setdefault(role.id, [])
    seen = {format_assignee(item, **symbols) for item in merged}
    for assignee in new_assignees:
        link = format_assignee(assignee, **symbols)
        if link not in seen:
            seen.add(link)
            merged.append(assignee)

    assignments = [{"role_id": rid, "assignees": names} for rid, names in current.items()]
    return apply_role_assignments_to_line(line, assignments, all_roles, **symbols)
