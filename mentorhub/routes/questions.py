from flask import Blueprint, g, send_file
import logging
import os

from mentorhub.models import QuestionModel, TestModel
from mentorhub.rbac import Action, ResourceType
from mentorhub.rbac.decorators import authorize, login_required
from mentorhub.rbac.utils import check_access, check_fields
from mentorhub.schemas import QuestionCreate, QuestionUpdate
from mentorhub.services import get_file_service
from mentorhub.utils.requests import column_values, parse_payload, uploaded_file
from mentorhub.utils.responses import (
    created_response, deleted_response, not_found_response, server_error_response,
    success_response, validation_error_response,
)

logger = logging.getLogger(__name__)
bp = Blueprint('questions', __name__)

# Attachments allowed on a question
ALLOWED_EXTENSIONS = {'pdf', 'doc', 'docx', 'png', 'jpg', 'jpeg'}


def unknown_test_response():
    return validation_error_response([{'field': 'test_id', 'message': 'The selected test does not exist'}])


@bp.route('', methods=['GET'])
@authorize(Action.VIEW_ANY, ResourceType.QUESTION)
def index():
    questions = QuestionModel.list_all()
    return success_response([QuestionModel.to_dict(question) for question in questions])


@bp.route('/<int:question_id>', methods=['GET'])
@login_required
def show(question_id):
    question = QuestionModel.get(question_id)
    if question is None:
        return not_found_response('Question not found')
    check_access(g.actor, Action.VIEW, ResourceType.QUESTION, question)
    return success_response(QuestionModel.to_dict(question))


@bp.route('', methods=['POST'])
@authorize(Action.CREATE, ResourceType.QUESTION)
def store():
    payload = parse_payload(QuestionCreate)
    if TestModel.get(payload.test_id) is None:
        return unknown_test_response()

    values = column_values(payload)
    file = uploaded_file()
    file_service = get_file_service(ALLOWED_EXTENSIONS)
    if file is not None:
        try:
            values['file_url'], values['file_type'] = file_service.save(file, 'questions')
        except ValueError as e:
            return validation_error_response([{'field': 'file', 'message': str(e)}])

    try:
        question = QuestionModel.create(**values)
    except Exception as e:
        file_service.delete(values.get('file_url'))
        logger.error(f"Error creating question: {str(e)}")
        return server_error_response('Failed to create question', error=str(e))

    return created_response(QuestionModel.to_dict(question), 'Question created successfully')


@bp.route('/<int:question_id>', methods=['POST'])
@login_required
def update(question_id):
    question = QuestionModel.get(question_id)
    if question is None:
        return not_found_response('Question not found')

    payload = parse_payload(QuestionUpdate)
    values = column_values(payload)
    file = uploaded_file()
    check_fields(g.actor, ResourceType.QUESTION, question, set(values) | ({'file'} if file else set()))

    if values.get('test_id') is not None and TestModel.get(values['test_id']) is None:
        return unknown_test_response()

    file_service = get_file_service(ALLOWED_EXTENSIONS)
    stored = previous = None
    if file is not None:
        try:
            stored, values['file_type'] = file_service.save(file, 'questions')
        except ValueError as e:
            return validation_error_response([{'field': 'file', 'message': str(e)}])
        previous, values['file_url'] = question.file_url, stored

    try:
        question = QuestionModel.update(question, values)
    except Exception as e:
        file_service.delete(stored)
        logger.error(f"Error updating question {question_id}: {str(e)}")
        return server_error_response('Failed to update question', error=str(e))

    file_service.delete(previous)
    return success_response(QuestionModel.to_dict(question), 'Question updated successfully')


@bp.route('/<int:question_id>', methods=['DELETE'])
@login_required
def destroy(question_id):
    question = QuestionModel.get(question_id)
    if question is None:
        return not_found_response('Question not found')
    check_access(g.actor, Action.DELETE, ResourceType.QUESTION, question)

    file_url = question.file_url
    try:
        QuestionModel.delete(question)
    except Exception as e:
        logger.error(f"Error deleting question {question_id}: {str(e)}")
        return server_error_response('Failed to delete question', error=str(e))
    get_file_service().delete(file_url)

    return deleted_response('Question deleted successfully')


@bp.route('/<int:question_id>/download', methods=['GET'])
@login_required
def download(question_id):
    question = QuestionModel.get(question_id)
    if question is None:
        return not_found_response('Question not found')
    check_access(g.actor, Action.DOWNLOAD, ResourceType.QUESTION, question)

    file_service = get_file_service()
    if not file_service.exists(question.file_url):
        return not_found_response('File not found')
    return send_file(file_service.absolute_path(question.file_url), as_attachment=True,
                     download_name=os.path.basename(question.file_url))
