"""
Flat-file storage backend.

Layout under DB_PATHNAME:
- routes.json: every route
- callbacks/YYYY-MM-DD.json: the callbacks captured on that day (configured timezone)

Each write reads the whole target file, mutates it in memory and rewrites it.
Without a ``date`` filter, reads only look at today's partition.
"""

import json
import logging
import os
import tempfile
import threading
from typing import Any, Dict, List, Optional

from src.storage.base import (
    BaseStorage,
    CallbackFilters,
    callback_page,
    new_callback_record,
    new_route_record,
    pick_route_updates
)
from src.storage.exceptions import DuplicateRoutePathError, StorageInitializationError
from src.utils.timezone import (
    day_name,
    format_timestamp,
    now_in_timezone,
    parse_day,
    parse_timestamp,
    DAY_FORMAT
)

logger = logging.getLogger(__name__)


class LocalStorage(BaseStorage):
    """Stores callbacks and routes as JSON files on the local filesystem."""

    kind = 'local'

    def __init__(self, config):
        super().__init__(config)
        self.data_dir = os.path.abspath(config.get('DB_PATHNAME') or '.db')
        self.callbacks_dir = os.path.join(self.data_dir, 'callbacks')
        self.routes_file = os.path.join(self.data_dir, 'routes.json')
        # Serializes read-modify-write cycles between request threads
        self._lock = threading.RLock()

    def initialize(self):
        try:
            os.makedirs(self.callbacks_dir, exist_ok=True)
            if not os.path.exists(self.routes_file):
                self._write_json(self.routes_file, [])
        except OSError as e:
            logger.error(f"Error initializing local storage at {self.data_dir}: {str(e)}")
            raise StorageInitializationError(f"Cannot initialize local storage at {self.data_dir}: {str(e)}") from e

        if not os.access(self.data_dir, os.W_OK):
            raise StorageInitializationError(f"Local storage directory is not writable: {self.data_dir}")

        logger.info(f"Local storage initialized at {self.data_dir}")

    # File helpers

    def _read_json(self, path: str) -> List[Dict[str, Any]]:
        try:
            with open(path, 'r', encoding='utf-8') as fh:
                return json.load(fh)
        except FileNotFoundError:
            return []

    def _write_json(self, path: str, items: List[Dict[str, Any]]):
        """Replace ``path`` atomically; concurrent readers see the old or the new content, never a partial file."""
        directory = os.path.dirname(path)
        os.makedirs(directory, exist_ok=True)
        fd, tmp_path = tempfile.mkstemp(dir=directory, prefix='.', suffix='.tmp')
        try:
            with os.fdopen(fd, 'w', encoding='utf-8') as fh:
                json.dump(items, fh, indent=2, ensure_ascii=False)
            os.replace(tmp_path, path)
        except Exception:
            if os.path.exists(tmp_path):
                os.remove(tmp_path)
            raise

    def _today(self) -> str:
        return day_name(now_in_timezone(self.timezone), self.timezone)

    def _resolve_day(self, date=None) -> str:
        if not date:
            return self._today()
        return parse_day(date, self.timezone).strftime(DAY_FORMAT)

    def _day_file(self, day: str) -> str:
        return os.path.join(self.callbacks_dir, f'{day}.json')

    def _sort_key(self, field: str):
        return lambda item: (parse_timestamp(item[field], self.timezone), item['id'])

    # Callbacks

    def save_callback(self, data: Dict[str, Any]) -> Dict[str, Any]:
        now = now_in_timezone(self.timezone)
        callback = new_callback_record(data, format_timestamp(now, self.timezone))
        path = self._day_file(day_name(now, self.timezone))

        with self._lock:
            callbacks = self._read_json(path)
            callbacks.append(callback)
            self._write_json(path, callbacks)

        return callback

    def get_callbacks(self, filters: Optional[CallbackFilters] = None) -> Dict[str, Any]:
        filters = filters or CallbackFilters()
        if filters.start_date or filters.end_date:
            logger.debug("start_date/end_date filters are not supported by local storage, use date")

        callbacks = self._read_json(self._day_file(self._resolve_day(filters.date)))

        if filters.route:
            callbacks = [cb for cb in callbacks if cb.get('route') == filters.route]

        callbacks.sort(key=self._sort_key('timestamp'), reverse=True)

        total = len(callbacks)
        page = callbacks[filters.offset:filters.offset + filters.limit]
        return callback_page(page, total, filters)

    def get_callback_by_id(self, callback_id: str, date: Optional[str] = None) -> Optional[Dict[str, Any]]:
        callbacks = self._read_json(self._day_file(self._resolve_day(date)))
        return next((cb for cb in callbacks if cb.get('id') == callback_id), None)

    def delete_callback(self, callback_id: str, date: Optional[str] = None) -> bool:
        path = self._day_file(self._resolve_day(date))

        with self._lock:
            callbacks = self._read_json(path)
            remaining = [cb for cb in callbacks if cb.get('id') != callback_id]
            if len(remaining) == len(callbacks):
                return False
            self._write_json(path, remaining)

        return True

    def get_callback_dates(self) -> List[str]:
        try:
            files = os.listdir(self.callbacks_dir)
        except FileNotFoundError:
            return []

        dates = [name[:-len('.json')] for name in files if name.endswith('.json')]
        return sorted(dates, reverse=True)

    # Routes

    def save_route(self, route: Dict[str, Any]) -> Dict[str, Any]:
        with self._lock:
            routes = self._read_json(self.routes_file)
            if any(r.get('path') == route['path'] for r in routes):
                raise DuplicateRoutePathError(route['path'])

            new_route = new_route_record(route, format_timestamp(now_in_timezone(self.timezone), self.timezone))
            routes.append(new_route)
            self._write_json(self.routes_file, routes)

        return new_route

    def get_routes(self) -> List[Dict[str, Any]]:
        routes = self._read_json(self.routes_file)
        return sorted(routes, key=self._sort_key('createdAt'), reverse=True)

    def update_route(self, route_id: str, fields: Dict[str, Any]) -> Optional[Dict[str, Any]]:
        updates = pick_route_updates(fields)

        with self._lock:
            routes = self._read_json(self.routes_file)
            route = next((r for r in routes if r.get('id') == route_id), None)
            if route is None:
                return None

            new_path = updates.get('path')
            if new_path and any(r.get('path') == new_path and r.get('id') != route_id for r in routes):
                raise DuplicateRoutePathError(new_path)

            route.update(updates)
            route['updatedAt'] = format_timestamp(now_in_timezone(self.timezone), self.timezone)
            self._write_json(self.routes_file, routes)

        return route

    def delete_route(self, route_id: str) -> bool:
        with self._lock:
            routes = self._read_json(self.routes_file)
            remaining = [r for r in routes if r.get('id') != route_id]
            if len(remaining) == len(routes):
                return False
            self._write_json(self.routes_file, remaining)

        return True
