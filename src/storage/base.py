"""
Storage contract shared by all callback storage backends.

Every backend persists two record types, callbacks and routes, and must
return them in the same serialized shape:

    callback: {id, timestamp, route, method, headers, query, body, ip}
    route:    {id, path, name, description, createdAt[, updatedAt]}

Query semantics common to all backends:
- callbacks are ordered by timestamp descending, then id descending
- filters narrow the population, limit/offset window it afterwards
- ``total`` counts the filtered population before pagination
- a filter left as None is no constraint
"""

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Dict, List, Optional, Union

from src.utils.identifiers import generate_id
from src.utils.timezone import get_timezone

logger = logging.getLogger(__name__)

DEFAULT_LIMIT = 100
DEFAULT_OFFSET = 0

ROUTE_UPDATABLE_FIELDS = ('path', 'name', 'description')


@dataclass
class CallbackFilters:
    """Filters accepted by ``get_callbacks``.

    ``date`` selects one calendar day. ``start_date``/``end_date`` are
    inclusive bounds understood by the SQL backends only.
    """
    route: Optional[str] = None
    date: Optional[str] = None
    start_date: Optional[Union[str, datetime]] = None
    end_date: Optional[Union[str, datetime]] = None
    limit: int = DEFAULT_LIMIT
    offset: int = DEFAULT_OFFSET


def callback_page(data: List[Dict[str, Any]], total: int, filters: CallbackFilters) -> Dict[str, Any]:
    return {
        'data': data,
        'total': total,
        'limit': filters.limit,
        'offset': filters.offset
    }


def new_callback_record(data: Dict[str, Any], timestamp: str) -> Dict[str, Any]:
    """Normalize raw capture data into a callback record with a fresh id."""
    return {
        'id': generate_id(),
        'timestamp': timestamp,
        'route': data.get('route'),
        'method': (data.get('method') or '').upper(),
        'headers': data['headers'] if data.get('headers') is not None else {},
        'query': data['query'] if data.get('query') is not None else {},
        'body': data['body'] if 'body' in data else {},
        'ip': data.get('ip')
    }


def new_route_record(route: Dict[str, Any], created_at: str) -> Dict[str, Any]:
    return {
        'id': generate_id(),
        'path': route['path'],
        'name': route['name'],
        'description': route.get('description') or '',
        'createdAt': created_at
    }


def pick_route_updates(fields: Dict[str, Any]) -> Dict[str, Any]:
    """Keep only the route fields that were supplied for an update."""
    return {
        key: fields[key]
        for key in ROUTE_UPDATABLE_FIELDS
        if key in fields and fields[key] is not None
    }


class BaseStorage(ABC):
    """Abstract storage backend."""

    kind = None

    def __init__(self, config):
        self.config = config
        self.timezone_name = config.get('TIMEZONE', 'UTC')
        self.timezone = get_timezone(self.timezone_name)
        self.app = None

    def init_app(self, app):
        """Bind the backend to a Flask app before ``initialize`` runs."""
        self.app = app

    @abstractmethod
    def initialize(self):
        """Create directories/files or tables/indexes. Must be idempotent."""

    @abstractmethod
    def save_callback(self, data: Dict[str, Any]) -> Dict[str, Any]:
        """Assign id and timestamp, persist and return the stored callback."""

    @abstractmethod
    def get_callbacks(self, filters: Optional[CallbackFilters] = None) -> Dict[str, Any]:
        """Return ``{data, total, limit, offset}`` for the filtered callbacks."""

    @abstractmethod
    def get_callback_by_id(self, callback_id: str, date: Optional[str] = None) -> Optional[Dict[str, Any]]:
        """Return the callback or None."""

    @abstractmethod
    def delete_callback(self, callback_id: str, date: Optional[str] = None) -> bool:
        """Return True if a callback was removed."""

    @abstractmethod
    def save_route(self, route: Dict[str, Any]) -> Dict[str, Any]:
        """Persist a new route. Raises DuplicateRoutePathError."""

    @abstractmethod
    def get_routes(self) -> List[Dict[str, Any]]:
        """Return all routes, newest first."""

    @abstractmethod
    def update_route(self, route_id: str, fields: Dict[str, Any]) -> Optional[Dict[str, Any]]:
        """Apply the supplied fields and refresh updatedAt. Returns None if absent."""

    @abstractmethod
    def delete_route(self, route_id: str) -> bool:
        """Return True if a route was removed."""

    def get_callback_dates(self) -> List[str]:
        """Days holding callbacks, newest first. Only day-partitioned backends list them."""
        return []

    def close(self):
        """Release held connections or handles."""

    def __repr__(self):
        return f'<{self.__class__.__name__} ({self.kind})>'
