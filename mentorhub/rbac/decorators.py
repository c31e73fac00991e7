"""
RBAC decorators for route protection
"""
from functools import wraps
import logging

from flask import g

from mentorhub.rbac.permissions import decide
from mentorhub.rbac.types import Action, ResourceType
from mentorhub.rbac.utils import get_current_actor
from mentorhub.utils.responses import forbidden_response, unauthorized_response

logger = logging.getLogger(__name__)


def login_required(f):
    """Decorator to require login for routes."""
    @wraps(f)
    def decorated_function(*args, **kwargs):
        actor = get_current_actor()
        if actor is None:
            logger.info("Unauthorized access attempt")
            return unauthorized_response('Login required')
        return f(*args, **kwargs)
    return decorated_function


def authorize(action: Action | str, resource_type: ResourceType | str):
    """
    Decorator to require a class-level permission (viewAny or create).

    Instance-level actions need the loaded entity and are checked inside
    the route with check_access().

    Example:
        @authorize(Action.CREATE, ResourceType.PROJECT)
        def store():
            ...
    """
    action = Action(action)
    resource_type = ResourceType(resource_type)
    if action.needs_instance:
        raise ValueError(f"{action} needs an entity; use check_access() in the route")

    def decorator(f):
        @wraps(f)
        @login_required
        def decorated_function(*args, **kwargs):
            actor = g.actor
            decision = decide(actor, action, resource_type)
            if not decision:
                logger.info(f"User {actor.id} with role {actor.role} attempted {action} on {resource_type}")
                return forbidden_response()
            return f(*args, **kwargs)
        return decorated_function
    return decorator
