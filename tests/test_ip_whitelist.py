"""
Tests for the IP allow-list on the API and dashboard.
"""

import pytest

from src.main import create_app
from src.middleware.ip_whitelist import is_ip_allowed, normalize_ip
from tests.conftest import make_test_config


@pytest.mark.unit
class TestIpMatching:
    """Test address normalization and matching."""

    @pytest.mark.parametrize('address, expected', [
        ('::1', '127.0.0.1'),
        ('::ffff:192.168.0.5', '192.168.0.5'),
        ('10.0.0.1', '10.0.0.1'),
        ('', ''),
        (None, ''),
    ])
    def test_normalize_ip(self, address, expected):
        """Test normalization of loopback and IPv4-mapped addresses."""
        assert normalize_ip(address) == expected

    def test_exact_match(self):
        """Test that a listed address is allowed."""
        assert is_ip_allowed('10.0.0.1', ['10.0.0.1'])
        assert not is_ip_allowed('10.0.0.2', ['10.0.0.1'])

    def test_mapped_address_matches_plain_entry(self):
        """Test that ::ffff:a.b.c.d matches a.b.c.d."""
        assert is_ip_allowed('::ffff:10.0.0.1', ['10.0.0.1'])

    def test_localhost_entry(self):
        """Test that localhost admits both loopback forms."""
        assert is_ip_allowed('127.0.0.1', ['localhost'])
        assert is_ip_allowed('::1', ['localhost'])
        assert not is_ip_allowed('10.0.0.1', ['localhost'])

    def test_empty_whitelist(self):
        """Test that an empty list admits nobody."""
        assert not is_ip_allowed('127.0.0.1', [])


@pytest.mark.integration
class TestWhitelistedEndpoints:
    """Test the decorator on real endpoints."""

    @pytest.fixture
    def restricted_client(self, data_dir):
        app = create_app('testing', make_test_config(data_dir, WHITELIST_IPS=['192.168.1.10']))
        return app.test_client()

    @pytest.mark.parametrize('path', ['/api/callbacks', '/api/routes', '/', '/callbacks', '/routes'])
    def test_blocked_address(self, restricted_client, path):
        """Test that other addresses get 403."""
        response = restricted_client.get(path)

        assert response.status_code == 403
        body = response.get_json()
        assert body['success'] is False
        assert body['error']['code'] == 'FORBIDDEN'
        assert body['error']['message'] == 'Your IP address is not whitelisted'

    def test_allowed_address(self, restricted_client):
        """Test that a listed address passes."""
        response = restricted_client.get('/api/routes', environ_base={'REMOTE_ADDR': '192.168.1.10'})
        assert response.status_code == 200

    def test_mapped_address_allowed(self, restricted_client):
        """Test an IPv4-mapped IPv6 client."""
        response = restricted_client.get('/api/routes', environ_base={'REMOTE_ADDR': '::ffff:192.168.1.10'})
        assert response.status_code == 200

    def test_blocked_write(self, restricted_client):
        """Test that blocked clients cannot create routes."""
        response = restricted_client.post('/api/routes', json={'path': '/x', 'name': 'X'})
        assert response.status_code == 403
        allowed = restricted_client.get('/api/routes', environ_base={'REMOTE_ADDR': '192.168.1.10'})
        assert allowed.get_json()['data'] == []
