"""
Shared routes for projects and reports

Both entities follow the same review workflow: a file is submitted, the
owner may edit or withdraw it while it is still Submitted, and reviewers
move it through En Revue to Approuvé or Rejeté.
"""
from datetime import datetime
import logging
import os

from flask import Blueprint, g, send_file

from mentorhub.rbac import (
    AccessDenied, Action, Decision, FieldsNotAllowed, ResourceType, can_review, has_permission,
    snapshot_of,
)
from mentorhub.rbac.decorators import authorize, login_required
from mentorhub.rbac.permissions import SUBMISSION_OWNER_FIELDS
from mentorhub.rbac.utils import check_access, check_fields
from mentorhub.schemas import StatusUpdate
from mentorhub.services import aggregate_submissions, get_file_service
from mentorhub.utils.requests import column_values, parse_payload, uploaded_file
from mentorhub.utils.responses import (
    created_response, deleted_response, not_found_response, server_error_response,
    success_response, validation_error_response,
)

logger = logging.getLogger(__name__)


def file_required_response():
    return validation_error_response([{'field': 'file', 'message': 'A file is required'}])


def make_submission_blueprint(name: str, resource_type: ResourceType, model,
                              create_schema, update_schema, label: str,
                              update_route: bool = False) -> Blueprint:
    """
    Build the blueprint for a submission entity.

    Args:
        name: Blueprint name and upload sub-folder, e.g. 'projects'
        resource_type: ResourceType.PROJECT or ResourceType.REPORT
        model: ProjectModel or ReportModel
        create_schema: pydantic model for new submissions
        update_schema: pydantic model for edits
        label: Human readable entity name used in messages
        update_route: Also expose PUT /<id> for edits
    """
    bp = Blueprint(name, __name__)

    def load(item_id):
        return model.get(item_id)

    def visible(rows):
        return [row for row in rows
                if has_permission(g.actor, Action.VIEW, resource_type, snapshot_of(resource_type, row))]

    @bp.route('', methods=['GET'])
    @authorize(Action.VIEW_ANY, resource_type)
    def index():
        rows = model.list_all()
        stats = aggregate_submissions(rows, datetime.utcnow())
        return success_response({
            name: [model.to_dict(row) for row in rows],
            'stats': stats.to_dict(),
        })

    @bp.route('/participant', methods=['GET'])
    @login_required
    def participant_index():
        """Submissions of the logged-in user"""
        rows = visible(model.list_all(submitted_by=g.actor.id))
        stats = aggregate_submissions(rows, datetime.utcnow())
        return success_response({
            name: [model.to_dict(row) for row in rows],
            'stats': stats.to_dict(),
        })

    @bp.route('/<int:item_id>', methods=['GET'])
    @login_required
    def show(item_id):
        row = load(item_id)
        if row is None:
            return not_found_response(f'{label} not found')
        check_access(g.actor, Action.VIEW, resource_type, row)
        return success_response(model.to_dict(row))

    @bp.route('', methods=['POST'])
    @authorize(Action.CREATE, resource_type)
    def store():
        payload = parse_payload(create_schema)
        file = uploaded_file()
        if file is None:
            return file_required_response()

        file_service = get_file_service()
        try:
            file_url, file_type = file_service.save(file, name)
        except ValueError as e:
            return validation_error_response([{'field': 'file', 'message': str(e)}])

        try:
            row = model.create(
                **column_values(payload),
                file_url=file_url,
                file_type=file_type,
                submitted_by=g.actor.id,
                submitted_at=datetime.utcnow(),
            )
        except Exception as e:
            file_service.delete(file_url)
            logger.error(f"Error creating {label.lower()}: {str(e)}")
            return server_error_response(f'Failed to submit {label.lower()}', error=str(e))

        logger.info(f"User {g.actor.id} submitted {resource_type} {row.id}")
        return created_response(model.to_dict(row), f'{label} submitted successfully')

    def edit(item_id, owner_only: bool):
        row = load(item_id)
        if row is None:
            return not_found_response(f'{label} not found')

        payload = parse_payload(update_schema)
        values = column_values(payload)
        file = uploaded_file()
        fields = set(values) | ({'file'} if file is not None else set())

        check_fields(g.actor, resource_type, row, fields)
        if owner_only:
            extra = fields - SUBMISSION_OWNER_FIELDS[resource_type]
            if extra:
                raise FieldsNotAllowed(extra)

        file_service = get_file_service()
        stored = previous = None
        if file is not None:
            try:
                stored, values['file_type'] = file_service.save(file, name)
            except ValueError as e:
                return validation_error_response([{'field': 'file', 'message': str(e)}])
            previous, values['file_url'] = row.file_url, stored

        try:
            row = model.update(row, values)
        except Exception as e:
            # The row still points at the previous file
            file_service.delete(stored)
            logger.error(f"Error updating {resource_type} {item_id}: {str(e)}")
            return server_error_response(f'Failed to update {label.lower()}', error=str(e))

        file_service.delete(previous)
        return success_response(model.to_dict(row), f'{label} updated successfully')

    @bp.route('/admin/edit/<int:item_id>', methods=['POST'])
    @login_required
    def admin_edit(item_id):
        return edit(item_id, owner_only=False)

    @bp.route('/participant/edit/<int:item_id>', methods=['POST'])
    @login_required
    def participant_edit(item_id):
        return edit(item_id, owner_only=True)

    if update_route:
        @bp.route('/<int:item_id>', methods=['PUT'])
        @login_required
        def update(item_id):
            return edit(item_id, owner_only=False)

    @bp.route('/<int:item_id>/status', methods=['PUT'])
    @login_required
    def change_status(item_id):
        """Record a review decision"""
        row = load(item_id)
        if row is None:
            return not_found_response(f'{label} not found')
        if not can_review(g.actor, resource_type):
            logger.info(f"User {g.actor.id} with role {g.actor.role} attempted to review {resource_type} {item_id}")
            raise AccessDenied(Decision.deny("only reviewers change the status"))

        payload = parse_payload(StatusUpdate)
        try:
            model.set_status(item_id, payload.status, payload.feedback)
            row = model.reload(row)
        except Exception as e:
            logger.error(f"Error reviewing {resource_type} {item_id}: {str(e)}")
            return server_error_response('Failed to change status', error=str(e))

        logger.info(f"User {g.actor.id} set {resource_type} {item_id} to {payload.status}")
        return success_response(model.to_dict(row), 'Status updated successfully')

    @bp.route('/download/<int:item_id>', methods=['GET'])
    @login_required
    def download(item_id):
        row = load(item_id)
        if row is None:
            return not_found_response(f'{label} not found')
        check_access(g.actor, Action.DOWNLOAD, resource_type, row)

        file_service = get_file_service()
        if not file_service.exists(row.file_url):
            return not_found_response('File not found')
        return send_file(file_service.absolute_path(row.file_url), as_attachment=True,
                         download_name=os.path.basename(row.file_url))

    @bp.route('/<int:item_id>', methods=['DELETE'])
    @login_required
    def destroy(item_id):
        row = load(item_id)
        if row is None:
            return not_found_response(f'{label} not found')
        check_access(g.actor, Action.DELETE, resource_type, row)

        file_url = row.file_url
        try:
            model.delete(row)
        except Exception as e:
            logger.error(f"Error deleting {resource_type} {item_id}: {str(e)}")
            return server_error_response(f'Failed to delete {label.lower()}', error=str(e))
        get_file_service().delete(file_url)

        return deleted_response(f'{label} deleted successfully')

    return bp
