"""Role picker state, driven by key, click-outside and timer events.

    HIDDEN --open()--> OPEN_UNFILTERED --letter--> OPEN_FILTERED
       ^                    |    ^                      |
       |                    |    +----backspace to ""---+
       +--- Escape / Enter / click outside / timeout ---+
"""

from enum import Enum

from .locator import get_existing_roles
from .roles import get_visible_roles

AUTO_HIDE_SECONDS = 30.0


class State(Enum):
    HIDDEN = "hidden"
    OPEN_UNFILTERED = "open-unfiltered"
    OPEN_FILTERED = "open-filtered"


def available_roles(line: str, roles, hidden_default_roles=()) -> list:
    """Visible roles that are not assigned on the line yet."""
    visible = get_visible_roles(roles, hidden_default_roles)
    existing = set(get_existing_roles(line, visible))
    return [role for role in visible if role.id not in existing]


class RoleSuggestions:
    """Keyboard-driven role picker with prefix filtering by role name."""

    def __init__(self, roles, hidden_default_roles=(), auto_hide: float = AUTO_HIDE_SECONDS):
        self.roles = get_visible_roles(roles, hidden_default_roles)
        self.auto_hide = auto_hide
        self._reset()

    def _reset(self):
        self.state = State.HIDDEN
        self.offered = []
        self.options = []
        self.selected = 0
        self.filter = ""
        self.elapsed = 0.0

    @property
    def is_open(self) -> bool:
        return self.state is not State.HIDDEN

    @property
    def selected_role(self):
        if not self.is_open or not self.options:
            return None
        return self.options[self.selected]

    def open(self, existing_role_ids=()) -> bool:
        """Show the roles not already on the line. False if there are none."""
        if self.is_open:
            self.hide()
        existing = set(existing_role_ids)
        offered = [role for role in self.roles if role.id not in existing]
        if not offered:
            return False
        self.state = State.OPEN_UNFILTERED
        self.offered = offered
        self.options = list(offered)
        return True

    def open_for_line(self, line: str) -> bool:
        return self.open(get_existing_roles(line, self.roles))

    def hide(self):
        self._reset()

    def _set_filter(self, text: str):
        self.filter = text
        self.selected = 0
        if not text:
            self.state = State.OPEN_UNFILTERED
            self.options = list(self.offered)
            return
        self.state = State.OPEN_FILTERED
        matches = [r for r in self.offered if r.name.lower().startswith(text)]
        # No match shows everything again
        self.options = matches or list(self.offered)

    def key(self, key: str):
        """
        Feed a key press.

        Returns the chosen role on Enter, True when the key was consumed and
        False when it should reach the editor.
        """
        if not self.is_open:
            return False

        if key == "Escape":
            self.hide()
            return True
        if key == "ArrowDown":
            self.selected = (self.selected + 1) % len(self.options)
            return True
        if key == "ArrowUp":
            self.selected = (self.selected - 1) % len(self.options)
            return True
        if key == "Enter":
            role = self.selected_role
            self.hide()
            return role
        if key == "Backspace":
            if not self.filter:
                return False
            self._set_filter(self.filter[:-1])
            return True
        if len(key) == 1 and key.isascii() and key.isalpha():
            self._set_filter(self.filter + key.lower())
            return True
        return False

    def click_outside(self):
        self.hide()

    def tick(self, seconds: float):
        """Advance the auto-hide timer."""
        if not self.is_open:
            return
        self.elapsed += seconds
        if self.elapsed >= self.auto_hide:
            self.hide()
