from datetime import datetime
from flask import Blueprint, g, send_file
import logging
import os

from mentorhub.models import TestModel, UserModel, UserTestResultModel
from mentorhub.rbac import Action, ResourceType, has_permission
from mentorhub.rbac.decorators import authorize, login_required
from mentorhub.rbac.utils import check_access, check_fields
from mentorhub.schemas import ResultCreate, ResultUpdate
from mentorhub.services import get_file_service
from mentorhub.utils.requests import column_values, parse_payload, uploaded_file
from mentorhub.utils.responses import (
    created_response, deleted_response, not_found_response, server_error_response,
    success_response, validation_error_response,
)

logger = logging.getLogger(__name__)
bp = Blueprint('results', __name__)


@bp.route('', methods=['GET'])
@login_required
def index():
    """All results for admins, otherwise the caller's own results"""
    if has_permission(g.actor, Action.VIEW_ANY, ResourceType.USER_TEST_RESULT):
        results = UserTestResultModel.list_all()
    else:
        results = UserTestResultModel.list_all(user_id=g.actor.id)
    return success_response([UserTestResultModel.to_dict(result) for result in results])


@bp.route('', methods=['POST'])
@authorize(Action.CREATE, ResourceType.USER_TEST_RESULT)
def store():
    payload = parse_payload(ResultCreate)
    errors = []
    if UserModel.get(payload.user_id) is None:
        errors.append({'field': 'user_id', 'message': 'The selected user does not exist'})
    if TestModel.get(payload.test_id) is None:
        errors.append({'field': 'test_id', 'message': 'The selected test does not exist'})
    if errors:
        return validation_error_response(errors)

    values = column_values(payload)
    file = uploaded_file()
    file_service = get_file_service()
    if file is not None:
        try:
            values['file_path'], values['file_type'] = file_service.save(file, 'results')
        except ValueError as e:
            return validation_error_response([{'field': 'file', 'message': str(e)}])

    try:
        result = UserTestResultModel.create(**values, completed_at=datetime.utcnow())
    except Exception as e:
        file_service.delete(values.get('file_path'))
        logger.error(f"Error creating test result: {str(e)}")
        return server_error_response('Failed to create result', error=str(e))

    return created_response(UserTestResultModel.to_dict(result), 'Result created successfully')


@bp.route('/<int:result_id>', methods=['PUT'])
@login_required
def update(result_id):
    result = UserTestResultModel.get(result_id)
    if result is None:
        return not_found_response('Result not found')

    payload = parse_payload(ResultUpdate)
    values = column_values(payload)
    file = uploaded_file()
    check_fields(g.actor, ResourceType.USER_TEST_RESULT, result,
                 set(values) | ({'file'} if file else set()))

    file_service = get_file_service()
    stored = previous = None
    if file is not None:
        try:
            stored, values['file_type'] = file_service.save(file, 'results')
        except ValueError as e:
            return validation_error_response([{'field': 'file', 'message': str(e)}])
        previous, values['file_path'] = result.file_path, stored

    try:
        result = UserTestResultModel.update(result, values)
    except Exception as e:
        file_service.delete(stored)
        logger.error(f"Error updating result {result_id}: {str(e)}")
        return server_error_response('Failed to update result', error=str(e))

    file_service.delete(previous)
    return success_response(UserTestResultModel.to_dict(result), 'Result updated successfully')


@bp.route('/<int:result_id>', methods=['DELETE'])
@login_required
def destroy(result_id):
    result = UserTestResultModel.get(result_id)
    if result is None:
        return not_found_response('Result not found')
    check_access(g.actor, Action.DELETE, ResourceType.USER_TEST_RESULT, result)

    file_path = result.file_path
    try:
        UserTestResultModel.delete(result)
    except Exception as e:
        logger.error(f"Error deleting result {result_id}: {str(e)}")
        return server_error_response('Failed to delete result', error=str(e))
    get_file_service().delete(file_path)

    return deleted_response('Result deleted successfully')


@bp.route('/<int:result_id>/download', methods=['GET'])
@login_required
def download(result_id):
    result = UserTestResultModel.get(result_id)
    if result is None:
        return not_found_response('Result not found')
    check_access(g.actor, Action.DOWNLOAD, ResourceType.USER_TEST_RESULT, result)

    file_service = get_file_service()
    if not file_service.exists(result.file_path):
        return not_found_response('File not found')
    return send_file(file_service.absolute_path(result.file_path), as_attachment=True,
                     download_name=os.path.basename(result.file_path))
