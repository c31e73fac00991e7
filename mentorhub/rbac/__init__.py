"""
RBAC (Role-Based Access Control) module for MentorHub

This module decides who may do what on every entity of the platform:
- Participant: submits reports, edits own submissions while still submitted
- Mentor: reviews projects and reports, manages questions
- Admin: manages everything

The rules live in one table (permissions.POLICY_TABLE); decide() evaluates
it and never raises.
"""

from mentorhub.rbac.roles import Role, SubmissionStatus, TestType, QuestionType
from mentorhub.rbac.types import (
    Action,
    Actor,
    Decision,
    ResourceType,
    Snapshot,
    snapshot_of,
)
from mentorhub.rbac.ownership import can_owner_mutate, can_review, is_owner
from mentorhub.rbac.permissions import (
    POLICY_TABLE,
    decide,
    get_capabilities,
    has_permission,
    updatable_fields,
)
from mentorhub.rbac.errors import AccessDenied, FieldsNotAllowed

__all__ = [
    'Role',
    'SubmissionStatus',
    'TestType',
    'QuestionType',
    'Action',
    'Actor',
    'Decision',
    'ResourceType',
    'Snapshot',
    'snapshot_of',
    'can_owner_mutate',
    'can_review',
    'is_owner',
    'POLICY_TABLE',
    'decide',
    'get_capabilities',
    'has_permission',
    'updatable_fields',
    'AccessDenied',
    'FieldsNotAllowed',
]
