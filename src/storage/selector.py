"""
Storage selection.

DB_CONNECTION names one backend; exactly one instance is created per app at
startup and kept in ``app.extensions['storage']`` for the process lifetime.
"""

import logging

from flask import current_app

from src.storage.exceptions import UnsupportedStorageError
from src.storage.local import LocalStorage
from src.storage.mysql import MysqlStorage
from src.storage.postgresql import PostgresqlStorage
from src.storage.sqlite import SqliteStorage

logger = logging.getLogger(__name__)

EXTENSION_KEY = 'storage'

BACKEND_CLASSES = {
    'local': LocalStorage,
    'sqlite': SqliteStorage,
    'mysql': MysqlStorage,
    'postgresql': PostgresqlStorage,
    'postgres': PostgresqlStorage,
}

STORAGE_BACKENDS = frozenset(BACKEND_CLASSES)


def create_storage(config):
    """Create a new, uninitialized storage backend for ``config``."""
    connection = (config.get('DB_CONNECTION') or '').strip().lower()
    backend_class = BACKEND_CLASSES.get(connection)
    if backend_class is None:
        raise UnsupportedStorageError(config.get('DB_CONNECTION'))
    return backend_class(config)


def init_storage(app):
    """
    Create, bind and initialize the storage backend for ``app``.

    Raises UnsupportedStorageError or StorageInitializationError; either one
    must stop the app from serving.
    """
    storage = app.extensions.get(EXTENSION_KEY)
    if storage is not None:
        return storage

    storage = create_storage(app.config)
    storage.init_app(app)
    with app.app_context():
        storage.initialize()

    app.extensions[EXTENSION_KEY] = storage
    logger.info(f"Storage initialized ({storage.kind})")
    return storage


def get_storage():
    """Get the storage backend of the current app."""
    return current_app.extensions[EXTENSION_KEY]
