"""
Route management endpoints.

Routes registered here are wired into live callback capture at the next
restart; until then the /callback fallback still captures their requests.
"""

import logging
from flask import Blueprint, request, jsonify

from src.middleware.ip_whitelist import ip_whitelist_required
from src.routes.capture import RESERVED_PATH_CHARS
from src.storage import DuplicateRoutePathError, get_storage
from src.utils.error_handling import (
    handle_duplicate_route_error,
    handle_exception,
    handle_not_found_error,
    handle_validation_error,
    validate_field_types,
    validate_required_fields
)

logger = logging.getLogger(__name__)

routes_bp = Blueprint('routes', __name__)

ROUTE_FIELD_TYPES = {'path': str, 'name': str, 'description': str}


def validate_route_path(path):
    if not path.startswith('/'):
        return handle_validation_error("Path must start with /")
    if any(char in path for char in RESERVED_PATH_CHARS):
        return handle_validation_error("Path must not contain < or >")
    return None


@routes_bp.route('/routes', methods=['POST'])
@ip_whitelist_required
def create_route():
    """Create a new route."""
    try:
        data = request.get_json(silent=True) or {}

        validation_error = (
            validate_field_types(data, ROUTE_FIELD_TYPES)
            or validate_required_fields(data, ['path', 'name'])
            or validate_route_path(data['path'])
        )
        if validation_error:
            return validation_error

        route = get_storage().save_route({
            'path': data['path'],
            'name': data['name'],
            'description': data.get('description')
        })
        logger.info(f"Created route {route['path']} ({route['id']})")

        return jsonify({
            'success': True,
            'message': 'Route created successfully',
            'data': route
        }), 201

    except DuplicateRoutePathError as e:
        logger.info(f"Rejected duplicate route path {e.path}")
        return handle_duplicate_route_error(e)
    except Exception as e:
        return handle_exception(e, "route creation")


@routes_bp.route('/routes', methods=['GET'])
@ip_whitelist_required
def get_routes():
    """Get all routes, newest first."""
    try:
        return jsonify({
            'success': True,
            'data': get_storage().get_routes()
        }), 200
    except Exception as e:
        return handle_exception(e, "route listing")


@routes_bp.route('/routes/<route_id>', methods=['PUT'])
@ip_whitelist_required
def update_route(route_id):
    """Update the supplied fields of a route."""
    try:
        data = request.get_json(silent=True) or {}

        validation_error = validate_field_types(data, ROUTE_FIELD_TYPES)
        if validation_error:
            return validation_error

        if 'path' in data and data['path'] is not None:
            validation_error = validate_route_path(data['path'])
            if validation_error:
                return validation_error

        if 'name' in data and data['name'] is not None and not data['name'].strip():
            return handle_validation_error("Name must not be empty")

        fields = {key: data[key] for key in ROUTE_FIELD_TYPES if key in data}
        route = get_storage().update_route(route_id, fields)
        if not route:
            return handle_not_found_error("Route", route_id)

        return jsonify({
            'success': True,
            'message': 'Route updated successfully',
            'data': route
        }), 200

    except DuplicateRoutePathError as e:
        return handle_duplicate_route_error(e)
    except Exception as e:
        return handle_exception(e, "route update")


@routes_bp.route('/routes/<route_id>', methods=['DELETE'])
@ip_whitelist_required
def delete_route(route_id):
    """Delete a route."""
    try:
        deleted = get_storage().delete_route(route_id)
        if not deleted:
            return handle_not_found_error("Route", route_id)

        logger.info(f"Deleted route {route_id}")
        return jsonify({
            'success': True,
            'message': 'Route deleted successfully'
        }), 200

    except Exception as e:
        return handle_exception(e, "route deletion")
