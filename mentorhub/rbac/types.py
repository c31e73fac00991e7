"""
Authorization types: actors, actions, resource snapshots and decisions
"""
from dataclasses import dataclass
from enum import Enum
from typing import Any, Optional

from mentorhub.rbac.roles import Role, SubmissionStatus


class Action(str, Enum):
    """Operations an actor can request on a resource"""
    VIEW_ANY = "viewAny"
    VIEW = "view"
    CREATE = "create"
    UPDATE = "update"
    DELETE = "delete"
    DOWNLOAD = "download"

    def __str__(self):
        return self.value

    @property
    def needs_instance(self) -> bool:
        """Whether the action is evaluated against a loaded entity"""
        return self not in (Action.VIEW_ANY, Action.CREATE)


class ResourceType(str, Enum):
    """Resource types protected by the policy engine"""
    PROJECT = "project"
    REPORT = "report"
    TEST = "test"
    QUESTION = "question"
    RESOURCE = "resource"
    USER_TEST_RESULT = "user_test_result"
    USER = "user"

    def __str__(self):
        return self.value

    @property
    def is_submission(self) -> bool:
        return self in (ResourceType.PROJECT, ResourceType.REPORT)


@dataclass(frozen=True)
class Actor:
    """An authenticated identity with a role"""
    id: int
    role: Optional[Role]
    verified: bool = False

    @classmethod
    def from_record(cls, record: Any) -> 'Actor':
        """
        Build an actor from a user row or mapping.

        The role is parsed here, once; an unknown role becomes None.
        """
        if isinstance(record, dict):
            user_id = record.get('id')
            role = record.get('role')
            verified = record.get('is_verified', False)
        else:
            user_id = getattr(record, 'id', None)
            role = getattr(record, 'role', None)
            verified = getattr(record, 'is_verified', False)
        return cls(id=user_id, role=Role.parse(role), verified=bool(verified))

    def to_dict(self) -> dict[str, Any]:
        return {
            'id': self.id,
            'role': self.role.value if self.role else None,
            'verified': self.verified,
        }


@dataclass(frozen=True)
class Snapshot:
    """
    Minimal read-only view of a persisted entity.

    owner_id holds whichever column identifies the owner for the resource
    type (submitted_by, uploaded_by, created_by, user_id, or the user's own
    id). status is only set for projects and reports.
    """
    id: Optional[int]
    owner_id: Optional[int] = None
    status: Optional[SubmissionStatus] = None


@dataclass(frozen=True)
class Decision:
    """Result of a policy evaluation"""
    allowed: bool
    reason: str = ""

    def __bool__(self):
        return self.allowed

    @classmethod
    def allow(cls, reason: str = "allowed") -> 'Decision':
        return cls(True, reason)

    @classmethod
    def deny(cls, reason: str = "denied") -> 'Decision':
        return cls(False, reason)

    def to_dict(self) -> dict[str, Any]:
        return {'allowed': self.allowed, 'reason': self.reason}


# Column holding the owner for each resource type
OWNER_COLUMNS: dict[ResourceType, str] = {
    ResourceType.PROJECT: 'submitted_by',
    ResourceType.REPORT: 'submitted_by',
    ResourceType.TEST: 'created_by',
    ResourceType.RESOURCE: 'uploaded_by',
    ResourceType.USER_TEST_RESULT: 'user_id',
    ResourceType.USER: 'id',
}


def snapshot_of(resource_type: ResourceType, row: Any) -> Optional[Snapshot]:
    """
    Build a snapshot from an ORM row or mapping.

    Returns None for a missing row so that instance-level checks fail closed.
    """
    if row is None:
        return None

    def read(name):
        if isinstance(row, dict):
            return row.get(name)
        return getattr(row, name, None)

    column = OWNER_COLUMNS.get(resource_type)
    owner_id = read(column) if column else None

    status = None
    if resource_type.is_submission:
        status = SubmissionStatus.parse(read('status'))

    return Snapshot(id=read('id'), owner_id=owner_id, status=status)
