from sqlalchemy.engine import URL

from src.storage.sql import SqlStorage

DEFAULT_PORT = 5432


class PostgresqlStorage(SqlStorage):
    """PostgreSQL server storage through psycopg 3."""

    kind = 'postgresql'

    def database_uri(self) -> str:
        url = URL.create(
            'postgresql+psycopg',
            username=self.config.get('DB_USERNAME') or None,
            password=self.config.get('DB_PASSWORD') or None,
            host=self.config.get('DB_HOSTNAME') or 'localhost',
            port=self.config.get('DB_PORT') or DEFAULT_PORT,
            database=self.config.get('DB_DATABASE')
        )
        return url.render_as_string(hide_password=False)

    def engine_options(self):
        return {
            'pool_size': 10,
            'pool_pre_ping': True,
            'connect_args': {'connect_timeout': 2},
            # Count and page of a listing must read from one snapshot
            'isolation_level': 'REPEATABLE READ'
        }
