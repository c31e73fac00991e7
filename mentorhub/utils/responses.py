"""
Uniform JSON envelope for API responses
"""
from flask import jsonify


def success_response(data=None, message='Operation successful', status=200):
    return jsonify({'status': status, 'message': message, 'data': data}), status


def created_response(data=None, message='Created successfully', status=201):
    return jsonify({'status': status, 'message': message, 'data': data}), status


def deleted_response(message='Deleted successfully', status=200):
    return jsonify({'status': status, 'message': message}), status


def validation_error_response(errors, message='Validation failed.', status=422):
    return jsonify({'status': status, 'message': message, 'errors': errors}), status


def unauthorized_response(message='Not authenticated', status=401):
    return jsonify({'status': status, 'message': message}), status


def forbidden_response(message='Access denied', status=403):
    return jsonify({'status': status, 'message': message}), status


def not_found_response(message='Resource not found', status=404):
    return jsonify({'status': status, 'message': message}), status


def server_error_response(message='Server error', error=None, status=500):
    return jsonify({'status': status, 'message': message, 'error': error}), status
