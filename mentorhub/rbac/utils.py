"""
RBAC utility functions for resolving the current actor and checking access
"""
from typing import Any, Iterable, Optional
import logging

from flask import g, session

from mentorhub.rbac.errors import AccessDenied, FieldsNotAllowed
from mentorhub.rbac.permissions import decide, updatable_fields
from mentorhub.rbac.types import Action, Actor, Decision, ResourceType, snapshot_of

logger = logging.getLogger(__name__)


def get_current_actor() -> Optional[Actor]:
    """
    Get the actor for the logged-in user.

    The role is read from the database, not the session, so a role change
    made by an admin applies to the next request.

    Returns:
        Actor, or None when nobody is logged in or the user no longer exists
    """
    if 'actor' in g:
        return g.actor

    user_id = session.get('user_id')
    if not user_id:
        return None

    from mentorhub.models import UserModel
    user = UserModel.get(user_id)
    if user is None:
        return None

    g.actor = Actor.from_record(user)
    return g.actor


def check_access(actor: Optional[Actor], action: Action, resource_type: ResourceType,
                 row: Any = None) -> Decision:
    """
    Evaluate the policy for a loaded row and raise on denial.

    Raises:
        AccessDenied: when the policy denies the action
    """
    snapshot = snapshot_of(resource_type, row) if action.needs_instance else None
    decision = decide(actor, action, resource_type, snapshot)
    if not decision:
        logger.info(
            f"User {actor.id if actor else None} with role {actor.role if actor else None} "
            f"denied {action} on {resource_type} {getattr(row, 'id', '')}: {decision.reason}"
        )
        raise AccessDenied(decision)
    return decision


def check_fields(actor: Optional[Actor], resource_type: ResourceType, row: Any,
                 fields: Iterable[str]) -> frozenset:
    """
    Make sure every field in the update is one the actor may change.

    Raises:
        AccessDenied: when the update itself is denied
        FieldsNotAllowed: when the payload names fields outside the allowed set
    """
    check_access(actor, Action.UPDATE, resource_type, row)
    allowed = updatable_fields(actor, resource_type, snapshot_of(resource_type, row))
    extra = set(fields) - allowed
    if extra:
        logger.info(f"User {actor.id} attempted to change {sorted(extra)} on {resource_type} {row.id}")
        raise FieldsNotAllowed(extra)
    return allowed
