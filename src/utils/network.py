import logging
import socket

logger = logging.getLogger(__name__)


def get_local_ip_address() -> str:
    """Get the first non-loopback IPv4 address of this host, or 127.0.0.1."""
    sock = socket.socket(socket.AF_INET, socket.SOCK_DGRAM)
    try:
        # No packet is sent; connecting a UDP socket only selects the outbound interface
        sock.connect(('10.255.255.255', 1))
        address = sock.getsockname()[0]
    except OSError as e:
        logger.debug(f"Could not resolve local IP address: {str(e)}")
        address = '127.0.0.1'
    finally:
        sock.close()

    if address.startswith('127.'):
        return '127.0.0.1'
    return address
