"""
Request capture: turns an inbound webhook request into raw callback data.

The storage backend assigns id and timestamp; this module only extracts
what the request carried.
"""

import logging
from typing import Any, Dict, Optional

from werkzeug.exceptions import BadRequest

logger = logging.getLogger(__name__)

FORM_CONTENT_TYPES = ('application/x-www-form-urlencoded', 'multipart/form-data')


def _multi_dict_to_dict(values) -> Dict[str, Any]:
    """Flatten a MultiDict, keeping repeated keys as lists."""
    result = {}
    for key in values.keys():
        items = values.getlist(key)
        result[key] = items if len(items) > 1 else items[0]
    return result


def extract_body(request) -> Any:
    """Parse the request body as JSON, form fields or text, whichever applies."""
    if request.is_json:
        try:
            # JSON null is a valid body and comes back as None
            return request.get_json()
        except BadRequest:
            logger.warning(f"Invalid JSON body on {request.path}, storing raw text")

    if request.mimetype in FORM_CONTENT_TYPES:
        return _multi_dict_to_dict(request.form)

    raw = request.get_data(cache=True)
    if not raw:
        return {}
    return raw.decode('utf-8', errors='replace')


def build_callback_data(request, route_path: Optional[str] = None) -> Dict[str, Any]:
    """Build the raw callback data for ``request``.

    ``route_path`` is the registered route the request matched, if any.
    """
    return {
        'route': route_path or request.path,
        'method': request.method.upper(),
        'headers': dict(request.headers),
        'query': _multi_dict_to_dict(request.args),
        'body': extract_body(request),
        'ip': request.remote_addr
    }
