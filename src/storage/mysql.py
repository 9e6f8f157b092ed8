from sqlalchemy.engine import URL

from src.storage.sql import SqlStorage

DEFAULT_PORT = 3306


class MysqlStorage(SqlStorage):
    """MySQL server storage through the PyMySQL driver."""

    kind = 'mysql'

    def database_uri(self) -> str:
        url = URL.create(
            'mysql+pymysql',
            username=self.config.get('DB_USERNAME') or None,
            password=self.config.get('DB_PASSWORD') or None,
            host=self.config.get('DB_HOSTNAME') or 'localhost',
            port=self.config.get('DB_PORT') or DEFAULT_PORT,
            database=self.config.get('DB_DATABASE'),
            query={'charset': 'utf8mb4'}
        )
        return url.render_as_string(hide_password=False)

    def engine_options(self):
        # InnoDB already reads at REPEATABLE READ, so count and page see one snapshot
        return {
            'pool_size': 10,
            'pool_pre_ping': True,
            'pool_recycle': 3600
        }
