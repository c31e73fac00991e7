"""
Tests for the permission table and the decide() policy engine.
"""
import pytest

from mentorhub.rbac import (
    POLICY_TABLE, Action, Actor, Decision, ResourceType, Role, Snapshot, SubmissionStatus,
    decide, get_capabilities, has_permission,
)

ADMIN = Actor(1, Role.ADMIN)
MENTOR = Actor(2, Role.MENTOR)
PARTICIPANT = Actor(3, Role.PARTICIPANT)
ACTORS = {Role.ADMIN: ADMIN, Role.MENTOR: MENTOR, Role.PARTICIPANT: PARTICIPANT}

# Owned by nobody in ACTORS
FOREIGN = Snapshot(id=10, owner_id=999, status=SubmissionStatus.SUBMITTED)

ALL = {Role.ADMIN, Role.MENTOR, Role.PARTICIPANT}
STAFF = {Role.ADMIN, Role.MENTOR}
ADMIN_ONLY = {Role.ADMIN}
NOBODY = set()

# Roles allowed on an entity they do not own
EXPECTED = {
    ResourceType.PROJECT: {
        Action.VIEW_ANY: STAFF, Action.VIEW: STAFF, Action.CREATE: ADMIN_ONLY,
        Action.UPDATE: ADMIN_ONLY, Action.DELETE: ADMIN_ONLY, Action.DOWNLOAD: STAFF,
    },
    ResourceType.REPORT: {
        Action.VIEW_ANY: STAFF, Action.VIEW: ALL, Action.CREATE: {Role.PARTICIPANT},
        Action.UPDATE: ADMIN_ONLY, Action.DELETE: ADMIN_ONLY, Action.DOWNLOAD: ALL,
    },
    ResourceType.TEST: {
        Action.VIEW_ANY: ALL, Action.VIEW: ALL, Action.CREATE: ADMIN_ONLY,
        Action.UPDATE: ADMIN_ONLY, Action.DELETE: ADMIN_ONLY, Action.DOWNLOAD: ALL,
    },
    ResourceType.QUESTION: {
        Action.VIEW_ANY: STAFF, Action.VIEW: STAFF, Action.CREATE: STAFF,
        Action.UPDATE: STAFF, Action.DELETE: ADMIN_ONLY, Action.DOWNLOAD: STAFF,
    },
    ResourceType.RESOURCE: {
        Action.VIEW_ANY: ALL, Action.VIEW: ALL, Action.CREATE: ADMIN_ONLY,
        Action.UPDATE: ADMIN_ONLY, Action.DELETE: ADMIN_ONLY, Action.DOWNLOAD: ALL,
    },
    ResourceType.USER_TEST_RESULT: {
        Action.VIEW_ANY: ADMIN_ONLY, Action.VIEW: ADMIN_ONLY, Action.CREATE: ADMIN_ONLY,
        Action.UPDATE: ADMIN_ONLY, Action.DELETE: ADMIN_ONLY, Action.DOWNLOAD: ADMIN_ONLY,
    },
    ResourceType.USER: {
        Action.VIEW_ANY: ADMIN_ONLY, Action.VIEW: ADMIN_ONLY, Action.CREATE: NOBODY,
        Action.UPDATE: ADMIN_ONLY, Action.DELETE: ADMIN_ONLY, Action.DOWNLOAD: NOBODY,
    },
}

CELLS = [
    (resource_type, action, role)
    for resource_type, actions in EXPECTED.items()
    for action in actions
    for role in Role
]


def snapshot_for(action):
    return FOREIGN if action.needs_instance else None


class TestPolicyTable:
    """Every cell of the table for non-owners"""

    @pytest.mark.parametrize('resource_type,action,role', CELLS)
    def test_cell(self, resource_type, action, role):
        decision = decide(ACTORS[role], action, resource_type, snapshot_for(action))
        assert decision.allowed == (role in EXPECTED[resource_type][action])

    def test_every_resource_type_is_covered(self):
        assert set(EXPECTED) == set(ResourceType)

    def test_user_has_no_create_or_download_rule(self):
        assert (ResourceType.USER, Action.CREATE) not in POLICY_TABLE
        assert (ResourceType.USER, Action.DOWNLOAD) not in POLICY_TABLE

    @pytest.mark.parametrize('resource_type', [
        resource_type for resource_type in ResourceType
        if (resource_type, Action.DELETE) in POLICY_TABLE
    ])
    def test_admin_may_delete_everything(self, resource_type):
        assert decide(ADMIN, Action.DELETE, resource_type, FOREIGN)


class TestOwnerClauses:
    """Owners get access beyond their role"""

    def owned(self, actor, status=SubmissionStatus.SUBMITTED):
        return Snapshot(id=5, owner_id=actor.id, status=status)

    @pytest.mark.parametrize('resource_type', [ResourceType.PROJECT, ResourceType.REPORT])
    @pytest.mark.parametrize('action', [Action.VIEW, Action.UPDATE, Action.DELETE, Action.DOWNLOAD])
    def test_owner_of_submitted_item(self, resource_type, action):
        assert decide(PARTICIPANT, action, resource_type, self.owned(PARTICIPANT))

    @pytest.mark.parametrize('status', [
        SubmissionStatus.IN_REVIEW, SubmissionStatus.APPROVED, SubmissionStatus.REJECTED
    ])
    def test_owner_loses_edit_rights_after_review(self, status):
        snapshot = self.owned(PARTICIPANT, status)
        assert not decide(PARTICIPANT, Action.UPDATE, ResourceType.PROJECT, snapshot)
        assert not decide(PARTICIPANT, Action.DELETE, ResourceType.REPORT, snapshot)
        assert decide(PARTICIPANT, Action.VIEW, ResourceType.PROJECT, snapshot)

    def test_owner_clause_has_no_role_check(self):
        # A mentor who submitted a report keeps owner rights on it
        assert decide(MENTOR, Action.UPDATE, ResourceType.REPORT, self.owned(MENTOR))

    def test_result_owner_may_view_and_download_only(self):
        snapshot = Snapshot(id=7, owner_id=PARTICIPANT.id)
        assert decide(PARTICIPANT, Action.VIEW, ResourceType.USER_TEST_RESULT, snapshot)
        assert decide(PARTICIPANT, Action.DOWNLOAD, ResourceType.USER_TEST_RESULT, snapshot)
        assert not decide(PARTICIPANT, Action.UPDATE, ResourceType.USER_TEST_RESULT, snapshot)
        assert not decide(PARTICIPANT, Action.DELETE, ResourceType.USER_TEST_RESULT, snapshot)

    def test_user_self(self):
        me = Snapshot(id=PARTICIPANT.id, owner_id=PARTICIPANT.id)
        assert decide(PARTICIPANT, Action.VIEW, ResourceType.USER, me)
        assert decide(PARTICIPANT, Action.UPDATE, ResourceType.USER, me)
        assert not decide(PARTICIPANT, Action.DELETE, ResourceType.USER, me)

    def test_uploader_of_resource_gets_nothing_extra(self):
        snapshot = Snapshot(id=3, owner_id=PARTICIPANT.id)
        assert not decide(PARTICIPANT, Action.UPDATE, ResourceType.RESOURCE, snapshot)


class TestFailClosed:
    """Bad input is denied, never raised"""

    @pytest.mark.parametrize('resource_type,action,role', CELLS)
    def test_unknown_role_denies_everything(self, resource_type, action, role):
        actor = Actor.from_record({'id': 1, 'role': 'Superuser'})
        assert actor.role is None
        assert not decide(actor, action, resource_type, snapshot_for(action))

    @pytest.mark.parametrize('role', [None, '', 42, 'admin', 'ADMIN', ' Admin', 'Admin '])
    def test_role_parsing(self, role):
        actor = Actor.from_record({'id': 1, 'role': role})
        assert actor.role is None

    def test_no_actor(self):
        assert decide(None, Action.VIEW_ANY, ResourceType.TEST) == Decision(False, "invalid role")

    def test_unknown_action_and_resource_type(self):
        assert not decide(ADMIN, 'publish', ResourceType.PROJECT)
        assert not decide(ADMIN, Action.VIEW_ANY, 'invoice')

    def test_instance_action_without_entity(self):
        decision = decide(ADMIN, Action.DELETE, ResourceType.PROJECT)
        assert not decision
        assert decision.reason == "missing resource"

    def test_class_action_ignores_snapshot(self):
        assert decide(ADMIN, Action.CREATE, ResourceType.PROJECT, FOREIGN)


class TestDecide:

    def test_accepts_strings(self):
        assert decide(ADMIN, 'delete', 'project', FOREIGN)
        assert decide(PARTICIPANT, 'viewAny', 'resource')

    def test_is_idempotent(self):
        for resource_type, action, role in CELLS:
            snapshot = snapshot_for(action)
            first = decide(ACTORS[role], action, resource_type, snapshot)
            assert decide(ACTORS[role], action, resource_type, snapshot) == first

    @pytest.mark.parametrize('role', list(Role))
    def test_any_recognized_role_may_view_resources(self, role):
        snapshot = Snapshot(id=1, owner_id=999)
        assert has_permission(ACTORS[role], Action.VIEW, ResourceType.RESOURCE, snapshot)

    def test_null_role_may_not_view_resources(self):
        snapshot = Snapshot(id=1, owner_id=999)
        assert not has_permission(Actor(4, None), Action.VIEW, ResourceType.RESOURCE, snapshot)

    def test_decision_is_falsy_when_denied(self):
        assert not Decision.deny("nope")
        assert Decision.allow()
        assert Decision.deny("nope").to_dict() == {'allowed': False, 'reason': "nope"}


class TestCapabilities:

    def test_participant(self):
        capabilities = get_capabilities(PARTICIPANT)
        assert capabilities['report'] == {'viewAny': False, 'create': True}
        assert capabilities['project'] == {'viewAny': False, 'create': False}
        assert capabilities['resource']['viewAny'] is True

    def test_admin(self):
        capabilities = get_capabilities(ADMIN)
        assert capabilities['user'] == {'viewAny': True, 'create': False}
        assert capabilities['user_test_result'] == {'viewAny': True, 'create': True}

    def test_unknown_role(self):
        capabilities = get_capabilities(Actor(9, None))
        assert not any(flag for flags in capabilities.values() for flag in flags.values())
