class StorageError(Exception):
    """Base class for storage errors."""


class UnsupportedStorageError(StorageError):
    """DB_CONNECTION names a backend that does not exist."""

    def __init__(self, connection):
        self.connection = connection
        super().__init__(f"Unsupported database connection type: {connection}")


class StorageInitializationError(StorageError):
    """The storage medium could not be created or reached at startup."""


class DuplicateRoutePathError(StorageError):
    """A route with the same path is already registered."""

    def __init__(self, path):
        self.path = path
        super().__init__(f"Route path already exists: {path}")
