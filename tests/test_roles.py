"""Tests for role definitions and role settings loading."""

import json
import logging
import sys
from pathlib import Path

import pytest

sys.path.insert(0, str(Path(__file__).resolve().parent.parent / 'scripts'))

from lib.task_line.roles import (
    DEFAULT_ROLES,
    Role,
    find_role_by_shortcut,
    get_visible_roles,
    is_icon_unique,
    is_shortcut_in_use,
    role_from_dict,
    role_to_dict,
)
from utils import atomic_write, get_symbols, load_settings


class TestRoleFromDict:
    def test_custom_role(self):
        role = role_from_dict({'id': 'reviewer', 'name': 'Reviewer', 'icon': '🔍', 'order': 5, 'shortcut': 'R'})
        assert role == Role('reviewer', 'Reviewer', '🔍', is_default=False, order=5, shortcut='r')

    def test_default_id_is_default(self):
        assert role_from_dict({'id': 'drivers', 'icon': '🏎️'}).is_default

    def test_round_trip(self):
        assert role_from_dict(role_to_dict(DEFAULT_ROLES[0])) == DEFAULT_ROLES[0]

    @pytest.mark.parametrize('data', [
        {'icon': '🔍'},
        {'id': 'reviewer'},
        {'id': 'reviewer', 'icon': '🔍 x'},
        {'id': 'reviewer', 'icon': '[x]'},
        {'id': 'reviewer', 'icon': '🔍', 'shortcut': 'ab'},
        {'id': 'reviewer', 'icon': '🔍', 'shortcut': '1'},
    ])
    def test_invalid(self, data):
        with pytest.raises(ValueError):
            role_from_dict(data)


class TestRoleHelpers:
    def test_visible_roles_hide_defaults_only(self):
        custom = Role('reviewer', 'Reviewer', '🔍', order=0)
        roles = [*DEFAULT_ROLES, custom]
        visible = get_visible_roles(roles, ['informed', 'reviewer'])
        assert [r.id for r in visible] == ['reviewer', 'drivers', 'approvers', 'contributors']

    def test_icon_unique(self):
        assert not is_icon_unique('🚗', DEFAULT_ROLES)
        assert is_icon_unique('🚗', DEFAULT_ROLES, ['drivers'])
        assert is_icon_unique('🚗', DEFAULT_ROLES, for_role_id='drivers')
        assert is_icon_unique('🔍', DEFAULT_ROLES)
        assert is_icon_unique('  ', DEFAULT_ROLES)

    def test_shortcut_in_use(self):
        assert is_shortcut_in_use('D', DEFAULT_ROLES)
        assert not is_shortcut_in_use('d', DEFAULT_ROLES, exclude_role_id='drivers')
        assert not is_shortcut_in_use('z', DEFAULT_ROLES)

    def test_find_by_shortcut(self):
        assert find_role_by_shortcut('A', DEFAULT_ROLES).id == 'approvers'
        assert find_role_by_shortcut('z', DEFAULT_ROLES) is None


class TestLoadSettings:
    def test_defaults(self, monkeypatch):
        monkeypatch.delenv('TASK_ROLES_FILE', raising=False)
        settings = load_settings()
        assert settings['roles'] == list(DEFAULT_ROLES)
        assert settings['hidden_default_roles'] == []

    def test_roles_file(self, tmp_path, monkeypatch):
        roles_file = tmp_path / 'roles.json'
        roles_file.write_text(json.dumps({
            'roles': [{'id': 'reviewer', 'name': 'Reviewer', 'icon': '🔍', 'order': 5, 'shortcut': 'r'}],
            'hidden_default_roles': ['informed'],
        }))
        monkeypatch.setenv('TASK_ROLES_FILE', str(roles_file))
        settings = load_settings()
        assert [r.id for r in settings['roles']] == ['drivers', 'approvers', 'contributors', 'informed', 'reviewer']
        assert settings['hidden_default_roles'] == ['informed']

    def test_override_default_role(self, tmp_path):
        roles_file = tmp_path / 'roles.json'
        roles_file.write_text(json.dumps({'roles': [{'id': 'drivers', 'name': 'Owners', 'icon': '🧭', 'order': 1}]}))
        settings = load_settings(roles_file)
        assert settings['roles'][0] == Role('drivers', 'Owners', '🧭', is_default=True, order=1)

    def test_duplicate_icon_dropped(self, tmp_path, caplog):
        roles_file = tmp_path / 'roles.json'
        roles_file.write_text(json.dumps({'roles': [{'id': 'cars', 'icon': '🚗'}]}))
        with caplog.at_level(logging.WARNING):
            settings = load_settings(roles_file)
        assert 'cars' not in [r.id for r in settings['roles']]
        assert 'icon 🚗 is already used' in caplog.text

    def test_duplicate_shortcut_cleared(self, tmp_path):
        roles_file = tmp_path / 'roles.json'
        roles_file.write_text(json.dumps({'roles': [{'id': 'deciders', 'icon': '⚖️', 'shortcut': 'd'}]}))
        settings = load_settings(roles_file)
        deciders = next(r for r in settings['roles'] if r.id == 'deciders')
        assert deciders.shortcut is None

    def test_bad_json(self, tmp_path):
        roles_file = tmp_path / 'roles.json'
        roles_file.write_text('{not json')
        with pytest.raises(ValueError, match='Failed to load roles'):
            load_settings(roles_file)

    def test_missing_file(self, tmp_path):
        with pytest.raises(ValueError, match='not found'):
            load_settings(tmp_path / 'missing.json')

    def test_symbols_from_env(self, monkeypatch):
        monkeypatch.setenv('TASK_ROLES_PERSON_SYMBOL', '~')
        monkeypatch.setenv('TASK_ROLES_COMPANY_DIR', 'Orgs')
        symbols = get_symbols()
        assert symbols['person_symbol'] == '~'
        assert symbols['company_directory'] == 'Orgs'
        assert symbols['company_symbol'] == '+'


def test_atomic_write(tmp_path):
    target = tmp_path / 'Tasks.md'
    target.write_text('old')
    atomic_write(target, '- [ ] new 🚗\n')
    assert target.read_text(encoding='utf-8') == '- [ ] new 🚗\n'
    assert [p.name for p in tmp_path.iterdir()] == ['Tasks.md']
