import logging
from functools import wraps
from flask import request, current_app

from src.utils.error_handling import handle_forbidden_error

logger = logging.getLogger(__name__)

LOOPBACK_ADDRESSES = ('127.0.0.1', '::1')


def normalize_ip(address: str) -> str:
    """Map IPv6 loopback and IPv4-mapped IPv6 addresses to plain IPv4."""
    if not address:
        return ''
    if address == '::1':
        return '127.0.0.1'
    if address.startswith('::ffff:'):
        return address[len('::ffff:'):]
    return address


def is_ip_allowed(address: str, whitelist) -> bool:
    normalized = normalize_ip(address)
    for entry in whitelist:
        if entry == 'localhost' and normalized in LOOPBACK_ADDRESSES:
            return True
        if entry in (normalized, address):
            return True
    return False


def ip_whitelist_required(f):
    """Reject requests whose remote address is not in WHITELIST_IPS."""
    @wraps(f)
    def decorated_function(*args, **kwargs):
        client_ip = request.remote_addr or ''
        if not is_ip_allowed(client_ip, current_app.config.get('WHITELIST_IPS', [])):
            logger.warning(f"Blocked request from non-whitelisted IP: {client_ip}")
            return handle_forbidden_error("Your IP address is not whitelisted")
        return f(*args, **kwargs)

    return decorated_function
