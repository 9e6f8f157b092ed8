"""
Tests for backend selection and application startup.
"""

import pytest
from flask import Flask

from src.config import ProductionConfig
from src.main import create_app
from src.storage import (
    LocalStorage,
    MysqlStorage,
    PostgresqlStorage,
    SqliteStorage,
    STORAGE_BACKENDS,
    StorageInitializationError,
    UnsupportedStorageError,
    create_storage,
    get_storage,
    init_storage
)
from tests.conftest import make_test_config


@pytest.mark.unit
class TestCreateStorage:
    """Test mapping DB_CONNECTION to a backend class."""

    @pytest.mark.parametrize('connection, expected', [
        ('local', LocalStorage),
        ('sqlite', SqliteStorage),
        ('mysql', MysqlStorage),
        ('postgresql', PostgresqlStorage),
        ('postgres', PostgresqlStorage),
        ('SQLite', SqliteStorage),
        (' local ', LocalStorage),
    ])
    def test_known_backends(self, connection, expected):
        """Test that each supported kind builds its backend."""
        assert isinstance(create_storage({'DB_CONNECTION': connection}), expected)

    @pytest.mark.parametrize('connection', ['mongodb', '', None])
    def test_unknown_backend(self, connection):
        """Test that an unknown kind is rejected."""
        with pytest.raises(UnsupportedStorageError) as exc_info:
            create_storage({'DB_CONNECTION': connection})
        assert exc_info.value.connection == connection

    def test_supported_kinds(self):
        """Test the advertised backend kinds."""
        assert STORAGE_BACKENDS == {'local', 'sqlite', 'mysql', 'postgresql', 'postgres'}


@pytest.mark.integration
class TestInitStorage:
    """Test binding one storage instance to an app."""

    def test_one_instance_per_app(self, tmp_path):
        """Test that repeated init returns the instance created first."""
        app = Flask(__name__)
        app.config.update(make_test_config(tmp_path))

        first = init_storage(app)
        second = init_storage(app)

        assert first is second
        with app.app_context():
            assert get_storage() is first

    def test_app_exposes_selected_backend(self, app, client):
        """Test that the app serves with the configured backend."""
        with app.app_context():
            assert get_storage().kind == 'local'

        response = client.get('/health')
        assert response.status_code == 200
        assert response.get_json()['storage'] == 'local'

    def test_unknown_backend_stops_startup(self, tmp_path):
        """Test that create_app refuses an unknown DB_CONNECTION."""
        with pytest.raises(UnsupportedStorageError):
            create_app('testing', make_test_config(tmp_path, DB_CONNECTION='oracle'))

    def test_unusable_medium_stops_startup(self, tmp_path):
        """Test that create_app refuses a storage path it cannot create."""
        blocker = tmp_path / 'blocker'
        blocker.write_text('')

        with pytest.raises(StorageInitializationError):
            create_app('testing', make_test_config(blocker))

    def test_separate_apps_get_separate_backends(self, tmp_path):
        """Test that two apps do not share a storage instance."""
        app_a = create_app('testing', make_test_config(tmp_path / 'a'))
        app_b = create_app('testing', make_test_config(tmp_path / 'b', DB_CONNECTION='sqlite'))

        assert app_a.extensions['storage'] is not app_b.extensions['storage']
        assert app_b.extensions['storage'].kind == 'sqlite'
        app_b.extensions['storage'].close()


@pytest.mark.unit
class TestProductionConfig:
    """Test production configuration validation."""

    def test_valid_defaults(self, monkeypatch):
        """Test that the default settings validate."""
        monkeypatch.setattr(ProductionConfig, 'DB_CONNECTION', 'local')
        monkeypatch.setattr(ProductionConfig, 'TIMEZONE', 'UTC')
        ProductionConfig.validate_config()

    def test_rejects_unknown_connection(self, monkeypatch):
        """Test that an unknown DB_CONNECTION fails validation."""
        monkeypatch.setattr(ProductionConfig, 'DB_CONNECTION', 'cassandra')
        with pytest.raises(ValueError, match='DB_CONNECTION'):
            ProductionConfig.validate_config()

    def test_rejects_unknown_timezone(self, monkeypatch):
        """Test that an unknown TZ fails validation."""
        monkeypatch.setattr(ProductionConfig, 'DB_CONNECTION', 'local')
        monkeypatch.setattr(ProductionConfig, 'TIMEZONE', 'Mars/Olympus')
        with pytest.raises(ValueError, match='timezone'):
            ProductionConfig.validate_config()

    def test_server_sql_requires_database(self, monkeypatch):
        """Test that MySQL/PostgreSQL need DB_DATABASE."""
        monkeypatch.setattr(ProductionConfig, 'DB_CONNECTION', 'postgresql')
        monkeypatch.setattr(ProductionConfig, 'TIMEZONE', 'UTC')
        monkeypatch.setattr(ProductionConfig, 'DB_DATABASE', '')
        with pytest.raises(ValueError, match='DB_DATABASE'):
            ProductionConfig.validate_config()
