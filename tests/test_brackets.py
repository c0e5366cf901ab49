"""Tests for nested bracket scanning."""

import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).resolve().parent.parent / 'scripts'))

from lib.task_line.brackets import (
    find_closing_bracket,
    is_inside_role_assignment,
    is_inside_wikilink,
    role_assignment_spans,
    wikilink_spans,
)


class TestFindClosingBracket:
    def test_simple(self):
        line = "[🚗:: @john] tail"
        assert find_closing_bracket(line, 1) == line.index("]")

    def test_skips_nested_wikilinks(self):
        line = "[🚗:: [[A|B]], [[C|D]]] tail"
        assert find_closing_bracket(line, 1) == line.index(" tail") - 1

    def test_unterminated(self):
        assert find_closing_bracket("[🚗:: [[People/Ann|@Ann]]", 1) is None
        assert find_closing_bracket("[", 1) is None

    def test_start_past_end(self):
        assert find_closing_bracket("abc", 10) is None


class TestRoleAssignmentSpans:
    def test_checkbox_is_not_a_span(self):
        assert role_assignment_spans("- [ ] Task description") == []

    def test_single_span(self):
        line = "- [ ] Task [🚗:: @user] text"
        assert role_assignment_spans(line) == [(11, 21)]

    def test_adjacent_spans(self):
        line = "- [ ] Task [🚗:: @user][👍:: @boss] text"
        assert role_assignment_spans(line) == [(11, 21), (22, 32)]

    def test_span_with_wikilinks(self):
        line = "- [ ] Task [🚗:: [[People/John|@John]]] text"
        assert role_assignment_spans(line) == [(11, 37)]

    def test_unterminated_span_is_ignored(self):
        assert role_assignment_spans("- [ ] Task [🚗:: [[People/John|@John]]") == []

    def test_any_inline_field_counts(self):
        line = "- [ ] Task [due:: 2025-07-22]"
        assert role_assignment_spans(line) == [(11, len(line) - 1)]


class TestContainment:
    def test_inside_role_assignment(self):
        line = "- [ ] Task [🚗:: @user] text"
        assert is_inside_role_assignment(line, 15)
        assert is_inside_role_assignment(line, 21)  # just before the closing ]
        assert not is_inside_role_assignment(line, 11)  # before the opening [
        assert not is_inside_role_assignment(line, 22)
        assert not is_inside_role_assignment(line, 6)

    def test_between_adjacent_roles(self):
        line = "- [ ] Task [🚗:: @user][👍:: @boss] text"
        assert is_inside_role_assignment(line, 15)
        assert is_inside_role_assignment(line, 27)
        assert not is_inside_role_assignment(line, 22)

    def test_wikilinks(self):
        line = "- [ ] [[Link1]] and [[Link2]] text"
        assert wikilink_spans(line) == [(6, 15), (20, 29)]
        assert is_inside_wikilink(line, 10)
        assert is_inside_wikilink(line, 7)
        assert is_inside_wikilink(line, 14)
        assert is_inside_wikilink(line, 25)
        assert not is_inside_wikilink(line, 6)
        assert not is_inside_wikilink(line, 15)

    def test_wikilink_inside_role(self):
        line = "- [ ] Task [🚗:: [[People/John|@John]]] text"
        assert is_inside_wikilink(line, 25)
        assert not is_inside_wikilink(line, 16)
        assert not is_inside_wikilink(line, 37)

    def test_unclosed_wikilink(self):
        assert wikilink_spans("- [ ] [[Draft") == []
        assert not is_inside_wikilink("- [ ] [[Draft", 9)
