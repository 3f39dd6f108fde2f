"""
Veracode HMAC-SHA-256 request signing.

This module computes the value of the ``Authorization`` header expected by
the Veracode APIs. The signature is derived through a four stage HMAC chain:

    k1  = HMAC-SHA256(secret, nonce)
    k2  = HMAC-SHA256(k1, timestamp)
    k3  = HMAC-SHA256(k2, "vcode_request_version_1")
    sig = HMAC-SHA256(k3, "id=...&host=...&url=...&method=...")

Everything here is pure computation; nonce and timestamp can be injected
so that a signature is reproducible.
"""

import binascii
import hashlib
import hmac
import os
import re
import time
from typing import Dict, Optional
from urllib.parse import urlsplit

from .constants import (
    AUTH_SCHEME,
    DEFAULT_MAX_AGE,
    HEADER_FORMAT,
    NONCE_SIZE,
    REQUEST_VERSION_STRING,
    SIGNING_DATA_FORMAT,
)
from .exceptions import InvalidSignatureError, SigningError

_HEADER_PATTERN = re.compile(
    r"^(?P<scheme>\S+) id=(?P<id>[^,]+),ts=(?P<ts>\d+),"
    r"nonce=(?P<nonce>[0-9A-Fa-f]+),sig=(?P<sig>[0-9A-Fa-f]+)$"
)


def current_timestamp() -> str:
    """Return milliseconds since epoch as a decimal string."""
    return str(time.time_ns() // 1_000_000)


def generate_nonce(size: int = NONCE_SIZE) -> bytes:
    """Return ``size`` fresh random bytes."""
    return os.urandom(size)


def hmac256(message: bytes, key: bytes) -> bytes:
    """Single HMAC-SHA256 application."""
    return hmac.new(key, message, hashlib.sha256).digest()


def calculate_signature(key: bytes, nonce: bytes, timestamp: bytes, data: bytes) -> bytes:
    """
    Run the four stage HMAC chain and return the 32 byte signature.

    Args:
        key: Decoded API key secret
        nonce: Random request nonce
        timestamp: Millisecond timestamp as ASCII bytes
        data: Canonical signing data

    Returns:
        Raw signature bytes
    """
    encrypted_nonce = hmac256(nonce, key)
    encrypted_timestamp = hmac256(timestamp, encrypted_nonce)
    signing_key = hmac256(REQUEST_VERSION_STRING.encode('ascii'), encrypted_timestamp)
    return hmac256(data, signing_key)


def strip_region(api_credential: str) -> str:
    """
    Drop a ``{region}-`` prefix from a key id or secret.

    Only the first ``-`` separates the prefix; later dashes stay in the value.
    """
    _, sep, value = api_credential.partition('-')
    return value if sep else api_credential


def decode_secret(api_key_secret: str) -> bytes:
    """Decode a hex encoded secret, raising SigningError when it is not hex."""
    try:
        return binascii.unhexlify(strip_region(api_key_secret))
    except (binascii.Error, ValueError) as e:
        raise SigningError(f"API key secret is not valid hex: {e}") from e


def request_uri(url: str) -> str:
    """Return path and query of ``url`` exactly as they appear in it."""
    parts = urlsplit(url)
    path = parts.path or '/'
    if parts.query:
        return f"{path}?{parts.query}"
    return path


def build_signing_data(api_key_id: str, url: str, method: str) -> str:
    """Build the canonical ``id=...&host=...&url=...&method=...`` string."""
    return SIGNING_DATA_FORMAT.format(
        key_id=api_key_id,
        host=urlsplit(url).hostname or '',
        url=request_uri(url),
        method=method,
    )


def format_authorization_header(api_key_id: str, timestamp: str, nonce: bytes, signature: bytes) -> str:
    """Render the Authorization header value with uppercase hex fields."""
    return HEADER_FORMAT.format(
        scheme=AUTH_SCHEME,
        key_id=api_key_id,
        timestamp=timestamp,
        nonce=nonce.hex().upper(),
        signature=signature.hex().upper(),
    )


def calculate_authorization_header(
    url: str,
    method: str,
    api_key_id: str,
    api_key_secret: str,
    nonce: Optional[bytes] = None,
    timestamp: Optional[str] = None,
) -> str:
    """
    Return the value for the Authorization header of a request.

    Region markers are removed from both the key id and the secret before
    they take part in the signature.

    Args:
        url: Fully resolved request URL
        method: HTTP method
        api_key_id: API key id, optionally region prefixed
        api_key_secret: Hex encoded API key secret, optionally region prefixed
        nonce: Fixed nonce (a fresh one is generated when omitted)
        timestamp: Fixed millisecond timestamp (current time when omitted)

    Returns:
        Authorization header value

    Raises:
        SigningError: If the key id is empty or the secret is not valid hex
    """
    if not api_key_id:
        raise SigningError("API key id cannot be empty")

    key_id = strip_region(api_key_id)
    secret = decode_secret(api_key_secret)

    if nonce is None:
        nonce = generate_nonce()
    if timestamp is None:
        timestamp = current_timestamp()

    data = build_signing_data(key_id, url, method.upper())
    signature = calculate_signature(secret, nonce, timestamp.encode('ascii'), data.encode('utf-8'))

    return format_authorization_header(key_id, timestamp, nonce, signature)


def parse_authorization_header(value: str) -> Dict[str, str]:
    """
    Parse an Authorization header produced by calculate_authorization_header.

    Returns:
        Dictionary with 'id', 'ts', 'nonce' and 'sig'

    Raises:
        InvalidSignatureError: If the header is malformed or uses another scheme
    """
    match = _HEADER_PATTERN.match(value or '')
    if not match:
        raise InvalidSignatureError("Invalid authorization header format")

    if match.group('scheme') != AUTH_SCHEME:
        raise InvalidSignatureError(f"Unsupported authorization scheme: {match.group('scheme')}")

    return {
        'id': match.group('id'),
        'ts': match.group('ts'),
        'nonce': match.group('nonce'),
        'sig': match.group('sig'),
    }


def verify_authorization_header(
    value: str,
    url: str,
    method: str,
    api_key_secret: str,
    max_age: int = DEFAULT_MAX_AGE,
) -> bool:
    """
    Recompute the signature of a received request and compare it.

    Args:
        value: Authorization header value
        url: Request URL as received
        method: HTTP method
        api_key_secret: Hex encoded secret for the key id in the header
        max_age: Allowed clock difference in seconds

    Returns:
        True if the signature matches and the timestamp is fresh
    """
    try:
        fields = parse_authorization_header(value)
        nonce = bytes.fromhex(fields['nonce'])
    except (InvalidSignatureError, ValueError):
        return False

    age = abs(time.time() - int(fields['ts']) / 1000)
    if age > max_age:
        return False

    try:
        expected = calculate_authorization_header(
            url, method, fields['id'], api_key_secret, nonce=nonce, timestamp=fields['ts']
        )
    except SigningError:
        return False

    # Use constant-time comparison to prevent timing attacks
    return hmac.compare_digest(expected, value)
