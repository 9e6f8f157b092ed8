"""
SQL storage backend shared by the SQLite, MySQL and PostgreSQL variants.

The variants share the schema in src.models and every query below; they
differ only in the database URI and the engine options they hand to
Flask-SQLAlchemy.

Timestamps are stored as naive UTC and serialized in the configured timezone.
"""

import logging
from abc import abstractmethod
from typing import Any, Dict, List, Optional

from sqlalchemy import delete, func, select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from src.extensions import db
from src.models import CallbackRecord, RouteRecord
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
    day_bounds,
    format_timestamp,
    now_in_timezone,
    parse_bound,
    parse_day,
    to_utc_naive
)

logger = logging.getLogger(__name__)


class SqlStorage(BaseStorage):
    """Storage backed by a relational database through Flask-SQLAlchemy."""

    @abstractmethod
    def database_uri(self) -> str:
        """SQLAlchemy URI of the database this backend talks to."""

    def engine_options(self) -> Dict[str, Any]:
        return {}

    def prepare(self):
        """Hook run before tables are created."""

    def init_app(self, app):
        super().init_app(app)
        app.config['SQLALCHEMY_DATABASE_URI'] = self.database_uri()
        app.config['SQLALCHEMY_ENGINE_OPTIONS'] = self.engine_options()
        db.init_app(app)

    def initialize(self):
        try:
            self.prepare()
            db.create_all()
        except (SQLAlchemyError, OSError) as e:
            logger.error(f"Error initializing {self.kind} storage: {str(e)}")
            raise StorageInitializationError(f"Cannot initialize {self.kind} storage: {str(e)}") from e

        logger.info(f"{self.kind} storage initialized")

    def _now(self):
        return now_in_timezone(self.timezone)

    def _time_bounds(self, filters: CallbackFilters):
        """Inclusive (start, end) in naive UTC. ``date`` becomes its own day range."""
        start = end = None

        if filters.date:
            start, end = day_bounds(parse_day(filters.date, self.timezone), self.timezone)
        if filters.start_date:
            start = parse_bound(filters.start_date, self.timezone)
        if filters.end_date:
            end = parse_bound(filters.end_date, self.timezone, end=True)

        return (
            to_utc_naive(start) if start is not None else None,
            to_utc_naive(end) if end is not None else None
        )

    # Callbacks

    def save_callback(self, data: Dict[str, Any]) -> Dict[str, Any]:
        now = self._now()
        callback = new_callback_record(data, format_timestamp(now, self.timezone))

        db.session.add(CallbackRecord(
            id=callback['id'],
            timestamp=to_utc_naive(now),
            route=callback['route'],
            method=callback['method'],
            headers=callback['headers'],
            query_params=callback['query'],
            body=callback['body'],
            ip=callback['ip']
        ))
        try:
            db.session.commit()
        except SQLAlchemyError:
            db.session.rollback()
            raise

        return callback

    def get_callbacks(self, filters: Optional[CallbackFilters] = None) -> Dict[str, Any]:
        filters = filters or CallbackFilters()

        conditions = []
        if filters.route:
            conditions.append(CallbackRecord.route == filters.route)

        start, end = self._time_bounds(filters)
        if start is not None:
            conditions.append(CallbackRecord.timestamp >= start)
        if end is not None:
            conditions.append(CallbackRecord.timestamp <= end)

        count_stmt = select(func.count()).select_from(CallbackRecord).where(*conditions)
        page_stmt = (
            select(CallbackRecord)
            .where(*conditions)
            .order_by(CallbackRecord.timestamp.desc(), CallbackRecord.id.desc())
            .limit(filters.limit)
            .offset(filters.offset)
        )

        # Count and page share one transaction so total matches the page
        try:
            total = db.session.execute(count_stmt).scalar_one()
            rows = db.session.execute(page_stmt).scalars().all()
            db.session.commit()
        except SQLAlchemyError:
            db.session.rollback()
            raise

        return callback_page([row.to_dict(self.timezone) for row in rows], total, filters)

    def get_callback_by_id(self, callback_id: str, date: Optional[str] = None) -> Optional[Dict[str, Any]]:
        row = db.session.get(CallbackRecord, callback_id)
        return row.to_dict(self.timezone) if row else None

    def delete_callback(self, callback_id: str, date: Optional[str] = None) -> bool:
        try:
            result = db.session.execute(delete(CallbackRecord).where(CallbackRecord.id == callback_id))
            db.session.commit()
        except SQLAlchemyError:
            db.session.rollback()
            raise
        return result.rowcount > 0

    # Routes

    def _path_taken(self, path: str, exclude_id: Optional[str] = None) -> bool:
        stmt = select(RouteRecord.id).where(RouteRecord.path == path)
        if exclude_id:
            stmt = stmt.where(RouteRecord.id != exclude_id)
        return db.session.execute(stmt).first() is not None

    def save_route(self, route: Dict[str, Any]) -> Dict[str, Any]:
        if self._path_taken(route['path']):
            raise DuplicateRoutePathError(route['path'])

        now = self._now()
        new_route = new_route_record(route, format_timestamp(now, self.timezone))

        db.session.add(RouteRecord(
            id=new_route['id'],
            path=new_route['path'],
            name=new_route['name'],
            description=new_route['description'],
            created_at=to_utc_naive(now)
        ))
        try:
            db.session.commit()
        except IntegrityError as e:
            db.session.rollback()
            # Lost a race with a concurrent insert of the same path
            raise DuplicateRoutePathError(route['path']) from e
        except SQLAlchemyError:
            db.session.rollback()
            raise

        return new_route

    def get_routes(self) -> List[Dict[str, Any]]:
        stmt = select(RouteRecord).order_by(RouteRecord.created_at.desc(), RouteRecord.id.desc())
        return [row.to_dict(self.timezone) for row in db.session.execute(stmt).scalars()]

    def update_route(self, route_id: str, fields: Dict[str, Any]) -> Optional[Dict[str, Any]]:
        row = db.session.get(RouteRecord, route_id)
        if row is None:
            return None

        updates = pick_route_updates(fields)
        new_path = updates.get('path')
        if new_path and self._path_taken(new_path, exclude_id=route_id):
            raise DuplicateRoutePathError(new_path)

        for key, value in updates.items():
            setattr(row, key, value)
        row.updated_at = to_utc_naive(self._now())

        try:
            db.session.commit()
        except IntegrityError as e:
            db.session.rollback()
            raise DuplicateRoutePathError(new_path or row.path) from e
        except SQLAlchemyError:
            db.session.rollback()
            raise

        return row.to_dict(self.timezone)

    def delete_route(self, route_id: str) -> bool:
        try:
            result = db.session.execute(delete(RouteRecord).where(RouteRecord.id == route_id))
            db.session.commit()
        except SQLAlchemyError:
            db.session.rollback()
            raise
        return result.rowcount > 0

    def close(self):
        if self.app is None:
            return
        with self.app.app_context():
            db.session.remove()
            db.engine.dispose()
        logger.info(f"{self.kind} storage connections closed")
