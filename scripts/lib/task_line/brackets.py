"""Nested bracket scanning for role assignments and wikilinks.

Role assignments look like ``[🚗:: [[People/Ann|@Ann]], @Bob]``. The span ends
at the bracket closing the outermost ``[``, not at the first ``]`` (which may
belong to a wikilink), so every span boundary goes through
``find_closing_bracket``.
"""

import re

# Inline field opener: "[" + key without brackets + "::"
ROLE_OPENER = re.compile(r"\[[^\[\]]+?::\s*")


def find_closing_bracket(line: str, start: int) -> int | None:
    """Find the ']' matching a '[' that was already consumed.

    Scanning starts at ``start`` (the index right after the opening bracket)
    with a depth of 1. Returns the index of the matching ']' or None when the
    span is unterminated.
    """
    depth = 1
    for i in range(max(start, 0), len(line)):
        char = line[i]
        if char == "[":
            depth += 1
        elif char == "]":
            depth -= 1
            if depth == 0:
                return i
    return None


def role_assignment_spans(line: str) -> list[tuple[int, int]]:
    """Return (open, close) bracket indices of every inline field on the line."""
    spans = []
    i = line.find("[")
    while i != -1:
        if ROLE_OPENER.match(line, i):
            close = find_closing_bracket(line, i + 1)
            if close is not None:
                spans.append((i, close))
                i = line.find("[", close + 1)
                continue
        i = line.find("[", i + 1)
    return spans


def is_inside_role_assignment(line: str, position: int) -> bool:
    """True if ``position`` falls after a span's '[' and up to its ']'."""
    return any(start < position <= end for start, end in role_assignment_spans(line))


def wikilink_spans(line: str) -> list[tuple[int, int]]:
    """Return (start, end) of every [[...]] on the line, end exclusive."""
    spans = []
    i = line.find("[[")
    while i != -1:
        close = line.find("]]", i + 2)
        if close == -1:
            break
        spans.append((i, close + 2))
        i = line.find("[[", close + 2)
    return spans


def is_inside_wikilink(line: str, position: int) -> bool:
    return any(start < position < end for start, end in wikilink_spans(line))
