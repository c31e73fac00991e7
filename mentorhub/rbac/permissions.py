"""
Permission table and policy engine for the RBAC system

Every (resource type, action) pair maps to exactly one Rule. A rule lists
the roles that are always allowed and, optionally, an owner predicate that
grants access to the owner of the entity. Pairs without a rule are denied.
"""
from dataclasses import dataclass
from typing import Callable, Optional
import logging

from mentorhub.rbac.ownership import can_owner_mutate, is_owner
from mentorhub.rbac.roles import Role
from mentorhub.rbac.types import Action, Actor, Decision, ResourceType, Snapshot

logger = logging.getLogger(__name__)

ANY_ROLE = frozenset(Role)
ADMIN = frozenset({Role.ADMIN})
STAFF = frozenset({Role.ADMIN, Role.MENTOR})
PARTICIPANT = frozenset({Role.PARTICIPANT})


@dataclass(frozen=True)
class Rule:
    """A single cell of the permission table"""
    roles: frozenset = frozenset()
    owner: Optional[Callable[[Actor, Snapshot], bool]] = None
    same_as: Optional[Action] = None


# Define the rule for each resource type and action
POLICY_TABLE: dict[tuple[ResourceType, Action], Rule] = {
    # Projects are created by the platform admin and reviewed by staff
    (ResourceType.PROJECT, Action.VIEW_ANY): Rule(STAFF),
    (ResourceType.PROJECT, Action.VIEW): Rule(STAFF, owner=is_owner),
    (ResourceType.PROJECT, Action.CREATE): Rule(ADMIN),
    (ResourceType.PROJECT, Action.UPDATE): Rule(ADMIN, owner=can_owner_mutate),
    (ResourceType.PROJECT, Action.DELETE): Rule(ADMIN, owner=can_owner_mutate),
    (ResourceType.PROJECT, Action.DOWNLOAD): Rule(same_as=Action.VIEW),

    # Reports are submitted by participants; any role may open one
    (ResourceType.REPORT, Action.VIEW_ANY): Rule(STAFF),
    (ResourceType.REPORT, Action.VIEW): Rule(ANY_ROLE, owner=is_owner),
    (ResourceType.REPORT, Action.CREATE): Rule(PARTICIPANT),
    (ResourceType.REPORT, Action.UPDATE): Rule(ADMIN, owner=can_owner_mutate),
    (ResourceType.REPORT, Action.DELETE): Rule(ADMIN, owner=can_owner_mutate),
    (ResourceType.REPORT, Action.DOWNLOAD): Rule(same_as=Action.VIEW),

    (ResourceType.TEST, Action.VIEW_ANY): Rule(ANY_ROLE),
    (ResourceType.TEST, Action.VIEW): Rule(ANY_ROLE),
    (ResourceType.TEST, Action.CREATE): Rule(ADMIN),
    (ResourceType.TEST, Action.UPDATE): Rule(ADMIN),
    (ResourceType.TEST, Action.DELETE): Rule(ADMIN),
    (ResourceType.TEST, Action.DOWNLOAD): Rule(ANY_ROLE),

    (ResourceType.QUESTION, Action.VIEW_ANY): Rule(STAFF),
    (ResourceType.QUESTION, Action.VIEW): Rule(STAFF),
    (ResourceType.QUESTION, Action.CREATE): Rule(STAFF),
    (ResourceType.QUESTION, Action.UPDATE): Rule(STAFF),
    (ResourceType.QUESTION, Action.DELETE): Rule(ADMIN),
    (ResourceType.QUESTION, Action.DOWNLOAD): Rule(same_as=Action.VIEW),

    (ResourceType.RESOURCE, Action.VIEW_ANY): Rule(ANY_ROLE),
    (ResourceType.RESOURCE, Action.VIEW): Rule(ANY_ROLE),
    (ResourceType.RESOURCE, Action.CREATE): Rule(ADMIN),
    (ResourceType.RESOURCE, Action.UPDATE): Rule(ADMIN),
    (ResourceType.RESOURCE, Action.DELETE): Rule(ADMIN),
    (ResourceType.RESOURCE, Action.DOWNLOAD): Rule(same_as=Action.VIEW),

    (ResourceType.USER_TEST_RESULT, Action.VIEW_ANY): Rule(ADMIN),
    (ResourceType.USER_TEST_RESULT, Action.VIEW): Rule(ADMIN, owner=is_owner),
    (ResourceType.USER_TEST_RESULT, Action.CREATE): Rule(ADMIN),
    (ResourceType.USER_TEST_RESULT, Action.UPDATE): Rule(ADMIN),
    (ResourceType.USER_TEST_RESULT, Action.DELETE): Rule(ADMIN),
    (ResourceType.USER_TEST_RESULT, Action.DOWNLOAD): Rule(ADMIN, owner=is_owner),

    # Registration is handled by the auth routes, so users have no create rule
    (ResourceType.USER, Action.VIEW_ANY): Rule(ADMIN),
    (ResourceType.USER, Action.VIEW): Rule(ADMIN, owner=is_owner),
    (ResourceType.USER, Action.UPDATE): Rule(ADMIN, owner=is_owner),
    (ResourceType.USER, Action.DELETE): Rule(ADMIN),
}


def _coerce(enum_cls, value):
    if isinstance(value, enum_cls):
        return value
    try:
        return enum_cls(value)
    except ValueError:
        return None


def decide(actor: Optional[Actor], action: Action | str,
           resource_type: ResourceType | str,
           snapshot: Optional[Snapshot] = None) -> Decision:
    """
    Decide whether an actor may perform an action on a resource.

    Args:
        actor: The authenticated actor
        action: Action enum or action string
        resource_type: ResourceType enum or resource type string
        snapshot: The target entity, required for instance-level actions

    Returns:
        Decision; never raises for unknown roles, actions or missing entities
    """
    if actor is None or not isinstance(actor.role, Role):
        return Decision.deny("invalid role")

    action = _coerce(Action, action)
    resource_type = _coerce(ResourceType, resource_type)
    if action is None or resource_type is None:
        return Decision.deny("unknown action or resource type")

    rule = POLICY_TABLE.get((resource_type, action))
    if rule is None:
        return Decision.deny(f"no rule for {action} on {resource_type}")

    if rule.same_as is not None:
        return decide(actor, rule.same_as, resource_type, snapshot)

    if action.needs_instance and snapshot is None:
        return Decision.deny("missing resource")

    if actor.role in rule.roles:
        return Decision.allow(f"role {actor.role} may {action} {resource_type}")

    if rule.owner is not None and rule.owner(actor, snapshot):
        return Decision.allow(f"owner may {action} {resource_type}")

    logger.debug(f"Denied {action} on {resource_type} for user {actor.id} with role {actor.role}")
    return Decision.deny(f"role {actor.role} may not {action} {resource_type}")


def has_permission(actor: Optional[Actor], action: Action | str,
                   resource_type: ResourceType | str,
                   snapshot: Optional[Snapshot] = None) -> bool:
    """Boolean shortcut for decide()"""
    return decide(actor, action, resource_type, snapshot).allowed


# Fields each caller may change through an update
SUBMISSION_ADMIN_FIELDS = {
    ResourceType.PROJECT: frozenset({'title', 'description', 'file', 'feedback', 'status'}),
    ResourceType.REPORT: frozenset({'title', 'description', 'submission_deadline', 'file',
                                    'feedback', 'status'}),
}
SUBMISSION_OWNER_FIELDS = {
    ResourceType.PROJECT: frozenset({'title', 'description', 'file'}),
    ResourceType.REPORT: frozenset({'title', 'description', 'submission_deadline', 'file'}),
}
UPDATE_FIELDS = {
    ResourceType.TEST: frozenset({'title', 'description', 'type', 'file', 'file_type'}),
    ResourceType.QUESTION: frozenset({'text', 'type', 'options', 'correct_answer', 'file', 'test_id'}),
    ResourceType.RESOURCE: frozenset({'title', 'description', 'file_type', 'file', 'is_published'}),
    ResourceType.USER_TEST_RESULT: frozenset({'score', 'file'}),
}
USER_SELF_FIELDS = frozenset({'first_name', 'last_name', 'email'})
USER_ADMIN_FIELDS = USER_SELF_FIELDS | {'role'}


def updatable_fields(actor: Optional[Actor], resource_type: ResourceType | str,
                     snapshot: Optional[Snapshot]) -> frozenset:
    """
    Get the fields an actor may change on an entity.

    Returns an empty set when the update itself is denied. Owners editing
    their own submission never get status or feedback.
    """
    resource_type = _coerce(ResourceType, resource_type)
    if not decide(actor, Action.UPDATE, resource_type, snapshot):
        return frozenset()

    if resource_type.is_submission:
        if actor.role == Role.ADMIN:
            return SUBMISSION_ADMIN_FIELDS[resource_type]
        return SUBMISSION_OWNER_FIELDS[resource_type]

    if resource_type == ResourceType.USER:
        if actor.role == Role.ADMIN:
            return USER_ADMIN_FIELDS
        return USER_SELF_FIELDS

    return UPDATE_FIELDS[resource_type]


def get_capabilities(actor: Optional[Actor]) -> dict[str, dict[str, bool]]:
    """
    Get the class-level capabilities of an actor.
    This is used by clients to decide which actions to show.
    """
    capabilities = {}
    for resource_type in ResourceType:
        capabilities[resource_type.value] = {
            Action.VIEW_ANY.value: has_permission(actor, Action.VIEW_ANY, resource_type),
            Action.CREATE.value: has_permission(actor, Action.CREATE, resource_type),
        }
    return capabilities
