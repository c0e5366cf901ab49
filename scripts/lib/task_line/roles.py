"""Role definitions and role list helpers."""

from __future__ import annotations

import re
from dataclasses import asdict, dataclass


@dataclass(frozen=True)
class Role:
    id: str
    name: str
    icon: str
    is_default: bool = False
    order: int = 0
    shortcut: str | None = None


DEFAULT_ROLES = (
    Role("drivers", "Drivers", "🚗", is_default=True, order=1, shortcut="d"),
    Role("approvers", "Approvers", "👍", is_default=True, order=2, shortcut="a"),
    Role("contributors", "Contributors", "👥", is_default=True, order=3, shortcut="c"),
    Role("informed", "Informed", "📢", is_default=True, order=4, shortcut="i"),
)

_DEFAULT_IDS = {role.id for role in DEFAULT_ROLES}


def escape_icon(icon: str) -> str:
    """Escape an icon for embedding in a pattern; icons match literally."""
    return re.escape(icon)


def role_from_dict(data: dict) -> Role:
    """Build a Role from a settings dict, validating id, icon and shortcut."""
    role_id = str(data.get("id") or "").strip()
    icon = str(data.get("icon") or "").strip()
    if not role_id:
        raise ValueError(f"Role is missing an id: {data!r}")
    if not icon:
        raise ValueError(f"Role '{role_id}' is missing an icon.")
    if re.search(r"[\s\[\]:]", icon):
        raise ValueError(f"Role '{role_id}' icon may not contain whitespace, brackets or colons: {icon!r}")

    shortcut = data.get("shortcut") or None
    if shortcut is not None:
        shortcut = str(shortcut).lower()
        if len(shortcut) != 1 or not shortcut.isalpha():
            raise ValueError(f"Role '{role_id}' shortcut must be a single letter: {shortcut!r}")

    return Role(
        id=role_id,
        name=str(data.get("name") or role_id),
        icon=icon,
        is_default=bool(data.get("is_default", role_id in _DEFAULT_IDS)),
        order=int(data.get("order", 0)),
        shortcut=shortcut,
    )


def role_to_dict(role: Role) -> dict:
    return asdict(role)


def get_visible_roles(roles, hidden_default_roles=()) -> list[Role]:
    """Custom roles plus default roles that are not hidden, by display order."""
    hidden = set(hidden_default_roles)
    visible = [r for r in roles if not r.is_default or r.id not in hidden]
    return sorted(visible, key=lambda r: r.order)


def is_icon_unique(icon: str, roles, hidden_default_roles=(), for_role_id: str | None = None) -> bool:
    """Check that no other visible role uses ``icon``."""
    normalized = (icon or "").strip()
    if not normalized:
        return True
    hidden = set(hidden_default_roles)
    for role in roles:
        if for_role_id and role.id == for_role_id:
            continue
        # Hidden default roles give their icon up
        if role.is_default and role.id in hidden:
            continue
        if role.icon == normalized:
            return False
    return True


def is_shortcut_in_use(shortcut: str, roles, exclude_role_id: str | None = None) -> bool:
    key = (shortcut or "").lower()
    if not key:
        return False
    return any(
        r.shortcut is not None and r.shortcut.lower() == key and r.id != exclude_role_id
        for r in roles
    )


def find_role_by_shortcut(key: str, roles) -> Role | None:
    lower = (key or "").lower()
    return next((r for r in roles if r.shortcut == lower), None)
