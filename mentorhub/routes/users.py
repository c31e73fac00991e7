from flask import Blueprint, g
import logging

from mentorhub.models import UserModel
from mentorhub.rbac import Action, ResourceType
from mentorhub.rbac.decorators import authorize, login_required
from mentorhub.rbac.utils import check_access, check_fields
from mentorhub.schemas import UserUpdate
from mentorhub.utils.requests import column_values, parse_payload
from mentorhub.utils.responses import (
    deleted_response, not_found_response, server_error_response, success_response,
    validation_error_response,
)

logger = logging.getLogger(__name__)
bp = Blueprint('users', __name__)


@bp.route('', methods=['GET'])
@authorize(Action.VIEW_ANY, ResourceType.USER)
def index():
    users = UserModel.list_all()
    return success_response([UserModel.to_dict(user) for user in users], 'User list')


@bp.route('/<int:user_id>', methods=['GET'])
@login_required
def show(user_id):
    user = UserModel.get(user_id)
    if user is None:
        return not_found_response('User not found')
    check_access(g.actor, Action.VIEW, ResourceType.USER, user)
    return success_response(UserModel.to_dict(user), 'User found')


@bp.route('/<int:user_id>', methods=['PUT'])
@login_required
def update(user_id):
    """Update a profile; only admins may change the role"""
    user = UserModel.get(user_id)
    if user is None:
        return not_found_response('User not found')

    payload = parse_payload(UserUpdate)
    values = column_values(payload)
    check_fields(g.actor, ResourceType.USER, user, values.keys())

    try:
        user = UserModel.update(user, values)
    except ValueError as e:
        return validation_error_response([{'field': 'email', 'message': str(e)}])
    except Exception as e:
        logger.error(f"Error updating user {user_id}: {str(e)}")
        return server_error_response('Failed to update user', error=str(e))

    if 'role' in values:
        logger.info(f"User {g.actor.id} changed the role of user {user_id} to {values['role']}")
    return success_response(UserModel.to_dict(user), 'User updated')


@bp.route('/<int:user_id>', methods=['DELETE'])
@login_required
def destroy(user_id):
    user = UserModel.get(user_id)
    if user is None:
        return not_found_response('User not found')
    check_access(g.actor, Action.DELETE, ResourceType.USER, user)

    try:
        UserModel.delete(user)
    except Exception as e:
        logger.error(f"Error deleting user {user_id}: {str(e)}")
        return server_error_response('Failed to delete user', error=str(e))

    return deleted_response('User deleted')
