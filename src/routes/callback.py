import logging
from flask import Blueprint, request, jsonify

from src.middleware.ip_whitelist import ip_whitelist_required
from src.storage import CallbackFilters, DEFAULT_LIMIT, DEFAULT_OFFSET, get_storage
from src.utils.error_handling import (
    handle_exception,
    handle_not_found_error,
    handle_validation_error,
    parse_non_negative_int
)

logger = logging.getLogger(__name__)

callback_bp = Blueprint('callback', __name__)


def filters_from_args(args) -> CallbackFilters:
    """Build callback filters from query parameters. Raises ValueError."""
    return CallbackFilters(
        route=args.get('route') or None,
        date=args.get('date') or None,
        start_date=args.get('start_date') or None,
        end_date=args.get('end_date') or None,
        limit=parse_non_negative_int(args.get('limit'), 'limit', DEFAULT_LIMIT),
        offset=parse_non_negative_int(args.get('offset'), 'offset', DEFAULT_OFFSET)
    )


@callback_bp.route('/callbacks', methods=['GET'])
@ip_whitelist_required
def get_callbacks():
    """List stored callbacks with optional route/date filters and pagination."""
    try:
        filters = filters_from_args(request.args)
    except ValueError as e:
        return handle_validation_error(str(e))

    try:
        result = get_storage().get_callbacks(filters)

        return jsonify({
            'success': True,
            **result
        }), 200

    except Exception as e:
        return handle_exception(e, "callback listing")


@callback_bp.route('/callbacks/<callback_id>', methods=['GET'])
@ip_whitelist_required
def get_callback(callback_id):
    """Get a specific callback by ID."""
    try:
        callback = get_storage().get_callback_by_id(callback_id, request.args.get('date') or None)
        if not callback:
            return handle_not_found_error("Callback", callback_id)

        return jsonify({
            'success': True,
            'data': callback
        }), 200

    except Exception as e:
        return handle_exception(e, "callback retrieval")


@callback_bp.route('/callbacks/<callback_id>', methods=['DELETE'])
@ip_whitelist_required
def delete_callback(callback_id):
    """Delete a callback."""
    try:
        deleted = get_storage().delete_callback(callback_id, request.args.get('date') or None)
        if not deleted:
            return handle_not_found_error("Callback", callback_id)

        logger.info(f"Deleted callback {callback_id}")
        return jsonify({
            'success': True,
            'message': 'Callback deleted successfully'
        }), 200

    except Exception as e:
        return handle_exception(e, "callback deletion")
