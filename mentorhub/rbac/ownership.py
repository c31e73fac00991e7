"""
Ownership and state-gate predicates shared by the policy table
"""
from typing import Optional

from mentorhub.rbac.roles import Role, SubmissionStatus
from mentorhub.rbac.types import Actor, ResourceType, Snapshot

# Only these roles may move a submission through review
REVIEWER_ROLES = frozenset({Role.ADMIN, Role.MENTOR})


def is_owner(actor: Actor, snapshot: Optional[Snapshot]) -> bool:
    """Check if the actor owns the snapshot (submitter, uploader, result user or self)."""
    if actor is None or snapshot is None:
        return False
    if actor.id is None or snapshot.owner_id is None:
        return False
    return actor.id == snapshot.owner_id


def can_owner_mutate(actor: Actor, snapshot: Optional[Snapshot]) -> bool:
    """
    Check if the actor may edit or delete a submission as its owner.

    True only when the actor submitted it and it is still in the
    Submitted state. Once a submission leaves Submitted, the owner loses
    the right to change it.
    """
    if not is_owner(actor, snapshot):
        return False
    return snapshot.status == SubmissionStatus.SUBMITTED


def can_review(actor: Actor, resource_type: ResourceType) -> bool:
    """Check if the actor may change the status and feedback of a submission."""
    if actor is None or actor.role is None:
        return False
    if not resource_type.is_submission:
        return False
    return actor.role in REVIEWER_ROLES
