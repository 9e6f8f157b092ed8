from src.storage.base import BaseStorage, CallbackFilters, DEFAULT_LIMIT, DEFAULT_OFFSET
from src.storage.exceptions import (
    StorageError,
    UnsupportedStorageError,
    StorageInitializationError,
    DuplicateRoutePathError
)
from src.storage.local import LocalStorage
from src.storage.sql import SqlStorage
from src.storage.sqlite import SqliteStorage
from src.storage.mysql import MysqlStorage
from src.storage.postgresql import PostgresqlStorage
from src.storage.selector import STORAGE_BACKENDS, create_storage, init_storage, get_storage

__all__ = [
    'BaseStorage', 'CallbackFilters', 'DEFAULT_LIMIT', 'DEFAULT_OFFSET',
    'StorageError', 'UnsupportedStorageError', 'StorageInitializationError', 'DuplicateRoutePathError',
    'LocalStorage', 'SqlStorage', 'SqliteStorage', 'MysqlStorage', 'PostgresqlStorage',
    'STORAGE_BACKENDS', 'create_storage', 'init_storage', 'get_storage'
]
