"""
Standardized Error Handling Utilities

This module provides consistent error response formats and error handling
functions across all API endpoints.
"""

import json
import logging
from typing import Dict, Any, Optional
from flask import jsonify
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from werkzeug.exceptions import HTTPException

from src.storage.exceptions import DuplicateRoutePathError, StorageError

logger = logging.getLogger(__name__)

# Standard error codes
ERROR_CODES = {
    # Client errors (4xx)
    'VALIDATION_ERROR': 'VALIDATION_ERROR',
    'NOT_FOUND': 'NOT_FOUND',
    'CONFLICT': 'CONFLICT',
    'FORBIDDEN': 'FORBIDDEN',
    'BAD_REQUEST': 'BAD_REQUEST',

    # Server errors (5xx)
    'INTERNAL_ERROR': 'INTERNAL_ERROR',
    'DATABASE_ERROR': 'DATABASE_ERROR',
    'STORAGE_ERROR': 'STORAGE_ERROR',

    # Business logic errors
    'ROUTE_PATH_EXISTS': 'ROUTE_PATH_EXISTS'
}

# HTTP status code mapping
STATUS_CODES = {
    'VALIDATION_ERROR': 400,
    'NOT_FOUND': 404,
    'CONFLICT': 409,
    'FORBIDDEN': 403,
    'BAD_REQUEST': 400,
    'INTERNAL_ERROR': 500,
    'DATABASE_ERROR': 500,
    'STORAGE_ERROR': 500,
    'ROUTE_PATH_EXISTS': 409
}


def create_error_response(
    code: str,
    message: str,
    details: Optional[Dict[str, Any]] = None,
    status_code: Optional[int] = None
) -> tuple:
    """
    Create a standardized error response.

    Args:
        code: Error code from ERROR_CODES
        message: Human-readable error message
        details: Additional error details (optional)
        status_code: HTTP status code (optional, defaults to code mapping)

    Returns:
        Tuple of (json_response, status_code)
    """
    if code not in ERROR_CODES:
        logger.warning(f"Unknown error code used: {code}, defaulting to INTERNAL_ERROR")
        code = 'INTERNAL_ERROR'

    http_status = status_code or STATUS_CODES.get(code, 500)

    error_response = {
        'success': False,
        'error': {
            'code': code,
            'message': message
        }
    }

    if details:
        error_response['error']['details'] = details

    return jsonify(error_response), http_status


def handle_validation_error(message: str, details: Optional[Dict[str, Any]] = None) -> tuple:
    """Handle validation errors (400)."""
    return create_error_response('VALIDATION_ERROR', message, details)


def handle_not_found_error(resource: str, resource_id: Optional[str] = None) -> tuple:
    """Handle not found errors (404)."""
    message = f"{resource} not found"
    if resource_id:
        message += f" with id: {resource_id}"
    return create_error_response('NOT_FOUND', message)


def handle_forbidden_error(message: str = "Access denied") -> tuple:
    """Handle forbidden errors (403)."""
    return create_error_response('FORBIDDEN', message)


def handle_duplicate_route_error(error: DuplicateRoutePathError) -> tuple:
    """Handle a route path that is already registered (409)."""
    return create_error_response(
        'ROUTE_PATH_EXISTS',
        "Route path already exists",
        {'path': error.path}
    )


def handle_database_error(error: Exception, operation: str = "database operation") -> tuple:
    """Handle database errors (500)."""
    logger.error(f"Database error during {operation}: {str(error)}")

    if isinstance(error, IntegrityError):
        return create_error_response('CONFLICT', f"Database constraint violation during {operation}")
    return create_error_response('DATABASE_ERROR', f"Database error during {operation}")


def handle_storage_error(error: Exception, operation: str = "storage operation") -> tuple:
    """Handle filesystem and other storage backend errors (500)."""
    logger.error(f"Storage error during {operation}: {str(error)}")
    return create_error_response('STORAGE_ERROR', f"Storage error during {operation}")


def handle_internal_error(error: Exception, operation: str = "operation") -> tuple:
    """Handle internal server errors (500)."""
    logger.exception(f"Internal error during {operation}: {str(error)}")
    return create_error_response('INTERNAL_ERROR', f"An unexpected error occurred during {operation}")


def handle_exception(error: Exception, operation: str = "operation") -> tuple:
    """
    Generic exception handler that categorizes errors and returns appropriate responses.

    Args:
        error: The exception that occurred
        operation: Description of the operation being performed

    Returns:
        Tuple of (json_response, status_code)
    """
    if isinstance(error, HTTPException):
        return create_error_response('BAD_REQUEST', error.description, status_code=error.code)
    elif isinstance(error, DuplicateRoutePathError):
        return handle_duplicate_route_error(error)
    elif isinstance(error, SQLAlchemyError):
        return handle_database_error(error, operation)
    elif isinstance(error, (StorageError, OSError, json.JSONDecodeError)):
        return handle_storage_error(error, operation)
    elif isinstance(error, ValueError):
        return handle_validation_error(str(error))
    else:
        return handle_internal_error(error, operation)


def validate_required_fields(data: Dict[str, Any], required_fields: list) -> Optional[tuple]:
    """
    Validate that required fields are present in request data.

    Args:
        data: Request data dictionary
        required_fields: List of required field names

    Returns:
        Error response tuple if validation fails, None if validation passes
    """
    missing_fields = [field for field in required_fields if not data.get(field)]

    if missing_fields:
        details = {
            'missing_fields': missing_fields,
            'required_fields': required_fields
        }
        return handle_validation_error(
            f"Missing required fields: {', '.join(missing_fields)}",
            details
        )

    return None


def validate_field_types(data: Dict[str, Any], field_types: Dict[str, type]) -> Optional[tuple]:
    """
    Validate that fields have the correct types.

    Args:
        data: Request data dictionary
        field_types: Dictionary mapping field names to expected types

    Returns:
        Error response tuple if validation fails, None if validation passes
    """
    type_errors = []

    for field, expected_type in field_types.items():
        if field in data and data[field] is not None:
            if not isinstance(data[field], expected_type):
                type_errors.append({
                    'field': field,
                    'expected_type': expected_type.__name__,
                    'actual_type': type(data[field]).__name__
                })

    if type_errors:
        details = {'type_errors': type_errors}
        return handle_validation_error(
            f"Invalid field types: {len(type_errors)} field(s) have incorrect types",
            details
        )

    return None


def parse_non_negative_int(value: Optional[str], name: str, default: int) -> int:
    """Parse an optional query parameter as a non-negative integer. Raises ValueError."""
    if value is None or value == '':
        return default
    try:
        number = int(value)
    except (TypeError, ValueError):
        raise ValueError(f"{name} must be an integer")
    if number < 0:
        raise ValueError(f"{name} must not be negative")
    return number
