from flask import Blueprint, g, send_file
import logging
import os

from mentorhub.models import TestModel
from mentorhub.rbac import Action, ResourceType
from mentorhub.rbac.decorators import authorize, login_required
from mentorhub.rbac.utils import check_access, check_fields
from mentorhub.schemas import TestCreate, TestUpdate
from mentorhub.services import get_file_service
from mentorhub.utils.requests import column_values, parse_payload, uploaded_file
from mentorhub.utils.responses import (
    created_response, deleted_response, not_found_response, server_error_response,
    success_response, validation_error_response,
)

logger = logging.getLogger(__name__)
bp = Blueprint('tests', __name__)


@bp.route('', methods=['GET'])
@authorize(Action.VIEW_ANY, ResourceType.TEST)
def index():
    tests = TestModel.list_all()
    return success_response([TestModel.to_dict(test) for test in tests])


@bp.route('/<int:test_id>', methods=['GET'])
@login_required
def show(test_id):
    test = TestModel.get(test_id)
    if test is None:
        return not_found_response('Test not found')
    check_access(g.actor, Action.VIEW, ResourceType.TEST, test)
    return success_response(TestModel.to_dict(test))


@bp.route('', methods=['POST'])
@authorize(Action.CREATE, ResourceType.TEST)
def store():
    payload = parse_payload(TestCreate)
    file = uploaded_file()
    if file is None:
        return validation_error_response([{'field': 'file', 'message': 'A file is required'}])

    file_service = get_file_service()
    try:
        file_url, _ = file_service.save(file, 'tests')
    except ValueError as e:
        return validation_error_response([{'field': 'file', 'message': str(e)}])

    try:
        test = TestModel.create(**column_values(payload), file_url=file_url, created_by=g.actor.id)
    except Exception as e:
        file_service.delete(file_url)
        logger.error(f"Error creating test: {str(e)}")
        return server_error_response('Failed to create test', error=str(e))

    return created_response(TestModel.to_dict(test), 'Test created successfully')


@bp.route('/<int:test_id>', methods=['PUT'])
@login_required
def update(test_id):
    test = TestModel.get(test_id)
    if test is None:
        return not_found_response('Test not found')

    payload = parse_payload(TestUpdate)
    values = column_values(payload)
    file = uploaded_file()
    check_fields(g.actor, ResourceType.TEST, test, set(values) | ({'file'} if file else set()))

    file_service = get_file_service()
    stored = previous = None
    if file is not None:
        try:
            stored, extension = file_service.save(file, 'tests')
        except ValueError as e:
            return validation_error_response([{'field': 'file', 'message': str(e)}])
        previous, values['file_url'] = test.file_url, stored
        values.setdefault('file_type', extension)

    try:
        test = TestModel.update(test, values)
    except Exception as e:
        file_service.delete(stored)
        logger.error(f"Error updating test {test_id}: {str(e)}")
        return server_error_response('Failed to update test', error=str(e))

    file_service.delete(previous)
    return success_response(TestModel.to_dict(test), 'Test updated successfully')


@bp.route('/<int:test_id>', methods=['DELETE'])
@login_required
def destroy(test_id):
    """Delete a test together with its questions and results"""
    test = TestModel.get(test_id)
    if test is None:
        return not_found_response('Test not found')
    check_access(g.actor, Action.DELETE, ResourceType.TEST, test)

    files = [test.file_url] + [question.file_url for question in test.questions]
    try:
        TestModel.delete(test)
    except Exception as e:
        logger.error(f"Error deleting test {test_id}: {str(e)}")
        return server_error_response('Failed to delete test', error=str(e))
    file_service = get_file_service()
    for file_url in files:
        file_service.delete(file_url)

    return deleted_response('Test deleted successfully')


@bp.route('/download/<int:test_id>', methods=['GET'])
@login_required
def download(test_id):
    test = TestModel.get(test_id)
    if test is None:
        return not_found_response('Test not found')
    check_access(g.actor, Action.DOWNLOAD, ResourceType.TEST, test)

    file_service = get_file_service()
    if not file_service.exists(test.file_url):
        return not_found_response('File not found')
    return send_file(file_service.absolute_path(test.file_url), as_attachment=True,
                     download_name=os.path.basename(test.file_url))
