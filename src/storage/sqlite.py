import logging
import os

from sqlalchemy import event

from src.extensions import db
from src.storage.sql import SqlStorage

logger = logging.getLogger(__name__)

DATABASE_FILENAME = 'cbdummy.db'


def _on_connect(dbapi_connection, connection_record):
    # Hand transaction control to SQLAlchemy; pysqlite would otherwise skip BEGIN before SELECTs
    dbapi_connection.isolation_level = None
    cursor = dbapi_connection.cursor()
    try:
        # Readers keep their snapshot while writers commit
        cursor.execute('PRAGMA journal_mode=WAL')
    finally:
        cursor.close()


def _on_begin(connection):
    connection.exec_driver_sql('BEGIN')


class SqliteStorage(SqlStorage):
    """Embedded SQLite database stored under DB_PATHNAME."""

    kind = 'sqlite'

    def __init__(self, config):
        super().__init__(config)
        self.db_path = os.path.join(os.path.abspath(config.get('DB_PATHNAME') or '.db'), DATABASE_FILENAME)

    def database_uri(self) -> str:
        # Absolute path, otherwise Flask-SQLAlchemy resolves it against the instance folder
        return f'sqlite:///{self.db_path}'

    def engine_options(self):
        return {'connect_args': {'check_same_thread': False}}

    def prepare(self):
        os.makedirs(os.path.dirname(self.db_path), exist_ok=True)

        # Every transaction, reads included, runs inside an explicit BEGIN so
        # the count and page of a listing see one snapshot
        engine = db.engine
        if not event.contains(engine, 'connect', _on_connect):
            event.listen(engine, 'connect', _on_connect)
            event.listen(engine, 'begin', _on_begin)

        logger.info(f"Using SQLite database at {self.db_path}")
