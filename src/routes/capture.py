"""
Inbound webhook capture.

Registered routes are mounted under /callback<path> when the app starts and
store the route path; anything else under /callback/ falls through to the
catch-all rule and stores the raw request path.
"""

import logging
from flask import Blueprint, request, jsonify

from src.services.capture import build_callback_data
from src.storage import get_storage
from src.utils.error_handlers import log_request_error
from src.utils.error_handling import handle_exception

logger = logging.getLogger(__name__)

capture_bp = Blueprint('capture', __name__)

CALLBACK_PREFIX = '/callback'
CAPTURE_METHODS = ['GET', 'POST', 'PUT', 'PATCH', 'DELETE', 'HEAD', 'OPTIONS']
# Werkzeug would read these as URL variables
RESERVED_PATH_CHARS = ('<', '>')


def handle_callback(route_path=None, subpath=None):
    """Persist the current request as a callback."""
    try:
        callback = get_storage().save_callback(build_callback_data(request, route_path))
        logger.info(f"Captured {callback['method']} callback {callback['id']} on {callback['route']}")

        return jsonify({
            'success': True,
            'message': 'Callback received and logged',
            'id': callback['id']
        }), 200

    except Exception as e:
        log_request_error(e, {'method': request.method, 'path': request.path, 'ip': request.remote_addr})
        return handle_exception(e, "callback capture")


capture_bp.add_url_rule(
    f'{CALLBACK_PREFIX}/<path:subpath>',
    endpoint='fallback',
    view_func=handle_callback,
    methods=CAPTURE_METHODS
)


def register_callback_routes(app, routes):
    """Mount a capture rule for every registered route. Returns the mounted paths."""
    mounted = []
    for route in routes:
        full_path = f"{CALLBACK_PREFIX}{route['path']}"
        if any(char in route['path'] for char in RESERVED_PATH_CHARS):
            logger.warning(f"Not mounting callback route {full_path}: path contains < or >")
            continue

        try:
            app.add_url_rule(
                full_path,
                endpoint=f"callback_route_{route['id']}",
                view_func=handle_callback,
                defaults={'route_path': route['path']},
                methods=CAPTURE_METHODS
            )
        except ValueError as e:
            logger.error(f"Could not register callback route {full_path}: {str(e)}")
            continue

        mounted.append(full_path)
        logger.info(f"Registered callback route: {full_path}")

    return mounted
