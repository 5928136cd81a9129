"""
Role permission tests for WeddingPro
"""
import pytest
from types import SimpleNamespace

from weddingpro.errors import PermissionDeniedError
from weddingpro.permissions import PERMISSIONS, SYSTEM_ACTOR, can, require


def actor(role, org_id='org-1'):
    return SimpleNamespace(id=f'{role}-id', role=role, org_id=org_id)


def request_in(status, org_id='org-1'):
    return SimpleNamespace(status=status, org_id=org_id)


class TestDropRequestPermissions:

    @pytest.mark.parametrize('role', ['manager', 'admin'])
    @pytest.mark.parametrize('action', ['approve', 'reject', 'escalate'])
    def test_managers_and_admins_act_on_pending(self, role, action):
        assert can(actor(role), action, request_in('pending'))

    @pytest.mark.parametrize('action', ['approve', 'reject'])
    def test_only_admin_resolves_escalated(self, action):
        assert can(actor('admin'), action, request_in('escalated'))
        assert not can(actor('manager'), action, request_in('escalated'))

    @pytest.mark.parametrize('role', ['manager', 'admin', 'system'])
    def test_escalated_cannot_be_escalated_again(self, role):
        subject = SYSTEM_ACTOR if role == 'system' else actor(role)
        assert not can(subject, 'escalate', request_in('escalated'))

    @pytest.mark.parametrize('action', ['approve', 'reject', 'escalate'])
    def test_employee_cannot_decide(self, action):
        assert not can(actor('employee'), action)
        assert not can(actor('employee'), action, request_in('pending'))

    def test_only_employee_creates(self):
        assert can(actor('employee'), 'create')
        assert not can(actor('manager'), 'create')
        assert not can(actor('admin'), 'create')

    def test_system_actor_only_escalates(self):
        assert can(SYSTEM_ACTOR, 'escalate', request_in('pending', org_id='any-org'))
        assert not can(SYSTEM_ACTOR, 'approve', request_in('pending'))
        assert not can(SYSTEM_ACTOR, 'reject', request_in('pending'))

    def test_other_organization_is_denied(self):
        assert not can(actor('admin', org_id='org-1'), 'approve', request_in('pending', org_id='org-2'))


class TestGeneralPermissions:

    def test_unknown_role_or_action_is_denied(self):
        assert not can(actor('caterer'), 'view')
        assert not can(actor('admin'), 'delete_everything')
        assert not can(None, 'view')

    def test_candidate_viewing_is_manager_only(self):
        assert can(actor('manager'), 'view_candidates')
        assert can(actor('admin'), 'view_candidates')
        assert not can(actor('employee'), 'view_candidates')

    def test_require_raises_with_message(self):
        with pytest.raises(PermissionDeniedError) as exc:
            require(actor('employee'), 'assign', message='Only managers can assign')
        assert exc.value.message == 'Only managers can assign'
        assert exc.value.code == 'permission_denied'

    def test_require_passes_silently(self):
        require(actor('manager'), 'assign')

    def test_every_entry_names_a_known_role(self):
        assert {role for role, _ in PERMISSIONS} == {'admin', 'manager', 'employee', 'system'}
