#!/usr/bin/env python3
"""
Shared utilities for task role scripts.

Configuration via environment variables:
- TASK_ROLES_FILE: JSON file with custom roles and hidden default roles
- TASK_ROLES_PERSON_SYMBOL: Prefix for people (default: @)
- TASK_ROLES_COMPANY_SYMBOL: Prefix for companies (default: +)
- TASK_ROLES_PERSON_DIR: Vault folder holding people notes (default: People)
- TASK_ROLES_COMPANY_DIR: Vault folder holding company notes (default: Companies)
"""

import json
import logging
import os
import sys
import tempfile
from dataclasses import replace
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent))
from lib.task_line.roles import (
    DEFAULT_ROLES,
    is_icon_unique,
    is_shortcut_in_use,
    role_from_dict,
)

logger = logging.getLogger(__name__)


def get_roles_file() -> Path | None:
    """Roles file from env, or None to use the default roles."""
    explicit = os.getenv('TASK_ROLES_FILE')
    return Path(explicit).expanduser() if explicit else None


def get_symbols() -> dict:
    """Assignee symbols and directories used to format wikilinks."""
    return {
        'person_symbol': os.getenv('TASK_ROLES_PERSON_SYMBOL', '@'),
        'company_symbol': os.getenv('TASK_ROLES_COMPANY_SYMBOL', '+'),
        'person_directory': os.getenv('TASK_ROLES_PERSON_DIR', 'People'),
        'company_directory': os.getenv('TASK_ROLES_COMPANY_DIR', 'Companies'),
    }


def _merge_roles(custom: list) -> list:
    """Default roles overridden by id, then custom roles.

    Roles whose icon or shortcut clashes with an earlier role are dropped.
    """
    by_id = {role.id: role for role in DEFAULT_ROLES}
    for role in custom:
        by_id[role.id] = role

    merged = []
    for role in by_id.values():
        if not is_icon_unique(role.icon, merged):
            logger.warning(f"Skipping role '{role.id}': icon {role.icon} is already used")
            continue
        if role.shortcut and is_shortcut_in_use(role.shortcut, merged):
            logger.warning(f"Role '{role.id}': shortcut '{role.shortcut}' is already used, clearing it")
            role = replace(role, shortcut=None)
        merged.append(role)
    return merged


def load_settings(path: Path | None = None) -> dict:
    """Load role settings.

    Returns dict with keys:
    - roles: list of Role, defaults merged with the roles file
    - hidden_default_roles: list of default role ids to hide
    - symbols: assignee symbols and directories (see get_symbols)

    Raises:
        ValueError: if the roles file cannot be read or is malformed
    """
    path = path or get_roles_file()
    data = {}
    if path is not None:
        if not path.exists():
            raise ValueError(f"Roles file not found: {path}")
        try:
            data = json.loads(path.read_text(encoding='utf-8')) or {}
        except (OSError, json.JSONDecodeError) as e:
            raise ValueError(f"Failed to load roles from {path}: {e}") from e
        if not isinstance(data, dict):
            raise ValueError(f"Roles file must contain a JSON object: {path}")
        logger.debug(f"Loaded roles file {path}")

    custom = [role_from_dict(item) for item in data.get('roles', [])]
    return {
        'roles': _merge_roles(custom),
        'hidden_default_roles': list(data.get('hidden_default_roles', [])),
        'symbols': get_symbols(),
    }


def atomic_write(path: Path, content: str) -> None:
    """Write content atomically via tempfile + rename."""
    fd, tmp_name = tempfile.mkstemp(prefix=f".{path.name}.", suffix='.tmp', dir=str(path.parent))
    try:
        with os.fdopen(fd, 'w', encoding='utf-8') as tmp:
            tmp.write(content)
            tmp.flush()
            os.fsync(tmp.fileno())
        os.replace(tmp_name, path)
    finally:
        if os.path.exists(tmp_name):
            os.unlink(tmp_name)
