"""
Pytest configuration and fixtures for CB Dummy tests.

This module provides:
- Flask apps bound to a throwaway storage directory
- Storage fixtures for every backend that can run without a server
- Helpers to pin the clock a backend stamps records with
"""

import os
from contextlib import contextmanager
from datetime import datetime
from unittest.mock import patch

import pytest
import pytz

from src.main import create_app
from src.storage import LocalStorage, get_storage


def make_test_config(data_dir, **overrides):
    """Testing overrides pointing storage at ``data_dir``."""
    test_config = {
        'TESTING': True,
        'DB_CONNECTION': 'local',
        'DB_PATHNAME': str(data_dir),
        'TIMEZONE': 'UTC',
        'WHITELIST_IPS': ['127.0.0.1', '::1', 'localhost'],
        'CORS_ORIGINS': ['http://localhost:3000'],
        'LOG_LEVEL': 'DEBUG'
    }
    test_config.update(overrides)
    return test_config


@contextmanager
def frozen_clock(storage, moment):
    """Make ``storage`` stamp new records with ``moment`` (an aware datetime)."""
    target = 'src.storage.local.now_in_timezone' if storage.kind == 'local' else 'src.storage.sql.now_in_timezone'
    with patch(target, side_effect=lambda tz: moment.astimezone(tz)):
        yield


def utc(*args):
    return pytz.UTC.localize(datetime(*args))


@pytest.fixture
def data_dir(tmp_path):
    """Directory the storage backend writes into."""
    return tmp_path / 'data'


@pytest.fixture
def app(data_dir):
    """App with local storage in a temporary directory."""
    app = create_app('testing', make_test_config(data_dir))
    yield app
    with app.app_context():
        get_storage().close()


@pytest.fixture
def client(app):
    """A test client for the app."""
    return app.test_client()


@pytest.fixture
def local_storage(data_dir):
    """Initialized local storage, without an app."""
    storage = LocalStorage({'DB_PATHNAME': str(data_dir), 'TIMEZONE': 'UTC'})
    storage.initialize()
    return storage


@pytest.fixture(params=['local', 'sqlite'])
def storage(request, tmp_path):
    """Every backend that runs without a server, inside an app context."""
    app = create_app('testing', make_test_config(tmp_path / request.param, DB_CONNECTION=request.param))
    with app.app_context():
        backend = get_storage()
        yield backend
        backend.close()


@pytest.fixture
def sample_callback():
    """Raw capture data as the HTTP layer hands it to storage."""
    return {
        'route': '/hook',
        'method': 'POST',
        'headers': {'x': '1'},
        'query': {},
        'body': {'a': 1},
        'ip': '10.0.0.1'
    }


@pytest.fixture
def json_headers():
    """Headers for JSON requests."""
    return {
        'Content-Type': 'application/json'
    }


def server_config(env_var, tmp_path):
    """Storage config for a live server named by ``env_var``, or skip."""
    from sqlalchemy.engine import make_url

    raw_url = os.environ.get(env_var)
    if not raw_url:
        pytest.skip(f"{env_var} is not set")

    url = make_url(raw_url)
    return make_test_config(
        tmp_path,
        DB_HOSTNAME=url.host or 'localhost',
        DB_PORT=url.port,
        DB_USERNAME=url.username or '',
        DB_PASSWORD=url.password or '',
        DB_DATABASE=url.database
    )
