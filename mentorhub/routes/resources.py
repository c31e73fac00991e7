from flask import Blueprint, g, send_file
import logging
import os

from mentorhub.models import ResourceModel
from mentorhub.rbac import Action, ResourceType
from mentorhub.rbac.decorators import authorize, login_required
from mentorhub.rbac.utils import check_access, check_fields
from mentorhub.schemas import ResourceCreate, ResourceUpdate
from mentorhub.services import aggregate_resources, get_file_service
from mentorhub.utils.requests import column_values, parse_payload, uploaded_file
from mentorhub.utils.responses import (
    created_response, deleted_response, not_found_response, server_error_response,
    success_response, validation_error_response,
)

logger = logging.getLogger(__name__)
bp = Blueprint('resources', __name__)


@bp.route('', methods=['GET'])
@authorize(Action.VIEW_ANY, ResourceType.RESOURCE)
def index():
    """List resources with the publication and download totals"""
    resources = ResourceModel.list_all()
    stats = aggregate_resources(resources)
    return success_response({
        'resources': [ResourceModel.to_dict(resource) for resource in resources],
        'stats': stats.to_dict(),
    }, 'Resource list')


@bp.route('/<int:resource_id>', methods=['GET'])
@login_required
def show(resource_id):
    resource = ResourceModel.get(resource_id)
    if resource is None:
        return not_found_response('Resource not found')
    check_access(g.actor, Action.VIEW, ResourceType.RESOURCE, resource)
    return success_response(ResourceModel.to_dict(resource))


@bp.route('', methods=['POST'])
@authorize(Action.CREATE, ResourceType.RESOURCE)
def store():
    payload = parse_payload(ResourceCreate)
    file = uploaded_file()
    if file is None:
        return validation_error_response([{'field': 'file', 'message': 'A file is required'}])

    file_service = get_file_service()
    try:
        file_url, _ = file_service.save(file, 'resources')
    except ValueError as e:
        return validation_error_response([{'field': 'file', 'message': str(e)}])

    try:
        resource = ResourceModel.create(
            **column_values(payload),
            file_url=file_url,
            uploaded_by=g.actor.id,
            download_count=0
        )
    except Exception as e:
        file_service.delete(file_url)
        logger.error(f"Error creating resource: {str(e)}")
        return server_error_response('Failed to create resource', error=str(e))

    return created_response(ResourceModel.to_dict(resource), 'Resource created successfully')


@bp.route('/<int:resource_id>', methods=['PUT'])
@login_required
def update(resource_id):
    resource = ResourceModel.get(resource_id)
    if resource is None:
        return not_found_response('Resource not found')

    payload = parse_payload(ResourceUpdate)
    values = column_values(payload)
    file = uploaded_file()
    check_fields(g.actor, ResourceType.RESOURCE, resource, set(values) | ({'file'} if file else set()))

    file_service = get_file_service()
    stored = previous = None
    if file is not None:
        try:
            stored, _ = file_service.save(file, 'resources')
        except ValueError as e:
            return validation_error_response([{'field': 'file', 'message': str(e)}])
        previous, values['file_url'] = resource.file_url, stored

    try:
        resource = ResourceModel.update(resource, values)
    except Exception as e:
        file_service.delete(stored)
        logger.error(f"Error updating resource {resource_id}: {str(e)}")
        return server_error_response('Failed to update resource', error=str(e))

    file_service.delete(previous)
    return success_response(ResourceModel.to_dict(resource), 'Resource updated successfully')


@bp.route('/<int:resource_id>', methods=['DELETE'])
@login_required
def destroy(resource_id):
    resource = ResourceModel.get(resource_id)
    if resource is None:
        return not_found_response('Resource not found')
    check_access(g.actor, Action.DELETE, ResourceType.RESOURCE, resource)

    file_url = resource.file_url
    try:
        ResourceModel.delete(resource)
    except Exception as e:
        logger.error(f"Error deleting resource {resource_id}: {str(e)}")
        return server_error_response('Failed to delete resource', error=str(e))
    get_file_service().delete(file_url)

    return deleted_response('Resource deleted successfully')


@bp.route('/download/<int:resource_id>', methods=['GET'])
@bp.route('/<int:resource_id>/download', methods=['GET'])
@login_required
def download(resource_id):
    """Send the file and count the download"""
    resource = ResourceModel.get(resource_id)
    if resource is None:
        return not_found_response('Resource not found')
    check_access(g.actor, Action.DOWNLOAD, ResourceType.RESOURCE, resource)

    file_service = get_file_service()
    if not file_service.exists(resource.file_url):
        return not_found_response('File not found on the server')

    # Counted only once access is granted and the file is there
    count = ResourceModel.increment_download(resource_id)
    if count is None:
        return not_found_response('Resource not found')
    logger.info(f"User {g.actor.id} downloaded resource {resource_id} ({count} downloads)")

    return send_file(file_service.absolute_path(resource.file_url), as_attachment=True,
                     download_name=os.path.basename(resource.file_url))
