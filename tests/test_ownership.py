"""
Tests for ownership predicates, vocabulary parsing and snapshots.
"""
from types import SimpleNamespace

import pytest

from mentorhub.rbac import (
    Actor, ResourceType, Role, Snapshot, SubmissionStatus, can_owner_mutate, can_review,
    is_owner, snapshot_of,
)

OWNER = Actor(3, Role.PARTICIPANT)


class TestCanOwnerMutate:

    def test_owner_of_submitted_item(self):
        assert can_owner_mutate(OWNER, Snapshot(1, owner_id=3, status=SubmissionStatus.SUBMITTED))

    @pytest.mark.parametrize('status', [
        SubmissionStatus.IN_REVIEW, SubmissionStatus.APPROVED, SubmissionStatus.REJECTED, None
    ])
    def test_any_other_status(self, status):
        assert not can_owner_mutate(OWNER, Snapshot(1, owner_id=3, status=status))

    def test_other_actor(self):
        snapshot = Snapshot(1, owner_id=4, status=SubmissionStatus.SUBMITTED)
        assert not can_owner_mutate(OWNER, snapshot)

    def test_missing_pieces(self):
        assert not can_owner_mutate(OWNER, None)
        assert not can_owner_mutate(None, Snapshot(1, owner_id=3, status=SubmissionStatus.SUBMITTED))
        assert not can_owner_mutate(Actor(None, Role.PARTICIPANT),
                                    Snapshot(1, owner_id=None, status=SubmissionStatus.SUBMITTED))


class TestIsOwner:

    def test_match(self):
        assert is_owner(OWNER, Snapshot(9, owner_id=3))

    def test_no_owner_column(self):
        assert not is_owner(OWNER, Snapshot(9))


class TestCanReview:

    @pytest.mark.parametrize('role,expected', [
        (Role.ADMIN, True), (Role.MENTOR, True), (Role.PARTICIPANT, False), (None, False)
    ])
    def test_roles(self, role, expected):
        assert can_review(Actor(1, role), ResourceType.REPORT) is expected

    def test_only_submissions_are_reviewed(self):
        assert not can_review(Actor(1, Role.ADMIN), ResourceType.RESOURCE)


class TestVocabulary:

    def test_role_values(self):
        assert Role.get_all() == ['Participant', 'Mentor', 'Admin']
        assert str(Role.MENTOR) == 'Mentor'

    @pytest.mark.parametrize('value,expected', [
        ('Admin', Role.ADMIN), ('Mentor', Role.MENTOR), (Role.PARTICIPANT, Role.PARTICIPANT),
        ('mentor', None), (' Admin', None),
        ('Superuser', None), (None, None), (3, None),
    ])
    def test_role_parse(self, value, expected):
        assert Role.parse(value) is expected

    def test_status_values(self):
        assert SubmissionStatus.get_all() == ['Soumis', 'En Revue', 'Approuvé', 'Rejeté']
        assert SubmissionStatus.parse('En Revue') is SubmissionStatus.IN_REVIEW
        assert SubmissionStatus.parse('Done') is None


class TestSnapshot:

    def test_from_project_row(self):
        row = SimpleNamespace(id=4, submitted_by=3, status='Approuvé')
        assert snapshot_of(ResourceType.PROJECT, row) == Snapshot(4, 3, SubmissionStatus.APPROVED)

    def test_from_mapping(self):
        snapshot = snapshot_of(ResourceType.RESOURCE, {'id': 2, 'uploaded_by': 1, 'status': 'Soumis'})
        assert snapshot == Snapshot(2, 1, None)

    @pytest.mark.parametrize('resource_type,column', [
        (ResourceType.TEST, 'created_by'),
        (ResourceType.USER_TEST_RESULT, 'user_id'),
    ])
    def test_owner_columns(self, resource_type, column):
        assert snapshot_of(resource_type, {'id': 1, column: 8}).owner_id == 8

    def test_user_owns_itself(self):
        assert snapshot_of(ResourceType.USER, {'id': 5}).owner_id == 5

    def test_question_has_no_owner(self):
        assert snapshot_of(ResourceType.QUESTION, {'id': 1, 'test_id': 2}).owner_id is None

    def test_missing_row(self):
        assert snapshot_of(ResourceType.PROJECT, None) is None

    def test_actor_from_orm_like_record(self):
        actor = Actor.from_record(SimpleNamespace(id=6, role='Mentor', is_verified=1))
        assert actor == Actor(6, Role.MENTOR, True)
        assert actor.to_dict() == {'id': 6, 'role': 'Mentor', 'verified': True}
