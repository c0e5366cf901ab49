"""Task line detection.

A task prefix is optional indentation, a bullet (-, *, +) or a numbered list
marker ("1."), optional whitespace and a checkbox:

    - [ ] task
    1. [x] task
      * [X] task
"""

import re

# Bullet point or numbered list marker
TASK_PREFIX_PATTERN = r"(?:[-*+]|\d+\.)"

IS_TASK = re.compile(rf"^\s*{TASK_PREFIX_PATTERN}\s*\[[ x]\]")
IS_TASK_CASE_INSENSITIVE = re.compile(rf"^\s*{TASK_PREFIX_PATTERN}\s*\[[ xX]\]")
# Prefix including the whitespace after the checkbox
CHECKBOX_PREFIX = re.compile(rf"^\s*{TASK_PREFIX_PATTERN}\s*\[[ xX]\]\s*")
PARSE_TASK = re.compile(rf"^(\s*){TASK_PREFIX_PATTERN}\s*\[([ x])\]\s*(\S.*)$")


def is_task(line: str) -> bool:
    """Check if a line is a task (lowercase x only)."""
    return IS_TASK.match(line) is not None


def is_task_case_insensitive(line: str) -> bool:
    """Check if a line is a task, accepting [X] as well as [x]."""
    return IS_TASK_CASE_INSENSITIVE.match(line) is not None


def is_task_line(line: str) -> bool:
    """Task detection used by role suggestion triggers."""
    return is_task(line)


def get_checkbox_prefix(line: str) -> str | None:
    """Return the checkbox prefix (with trailing whitespace), or None.

    Its length is where the task content starts.
    """
    match = CHECKBOX_PREFIX.match(line)
    return match.group(0) if match else None


def content_start(line: str) -> int | None:
    prefix = get_checkbox_prefix(line)
    return len(prefix) if prefix is not None else None


def parse_task(line: str) -> dict | None:
    """
    Parse a task line into its components.

    Returns:
        dict with 'indentation', 'status' (raw checkbox character) and
        'content', or None if the line is not a task with content.
    """
    match = PARSE_TASK.match(line)
    if not match:
        return None
    indentation, status, content = match.groups()
    return {
        "indentation": indentation,
        "status": status,
        "content": content,
    }
