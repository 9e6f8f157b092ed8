import secrets
import string
import time

_ALPHABET = string.digits + string.ascii_lowercase
_SUFFIX_LENGTH = 9


def generate_id() -> str:
    """
    Generate a record id: millisecond epoch followed by a random base36 suffix.

    Ids created later sort after earlier ones at millisecond resolution.
    """
    millis = int(time.time() * 1000)
    suffix = ''.join(secrets.choice(_ALPHABET) for _ in range(_SUFFIX_LENGTH))
    return f"{millis:013d}{suffix}"
