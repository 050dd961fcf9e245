"""
Canonical request signing.

The canonical string is every ``key=value`` pair concatenated in ascending
key order with no separator between pairs. It is signed with HMAC-SHA1 keyed
by the base64-decoded secret and the digest is returned as standard base64.
"""

import base64
import binascii
import hashlib
import hmac
from typing import Mapping

from ..errors import AuthError


def canonical_string(params: Mapping[str, str]) -> str:
    """Concatenate sorted ``key=value`` pairs."""
    return "".join(f"{key}={params[key]}" for key in sorted(params))


def decode_secret(secret: str) -> bytes:
    """
    Decode a standard base64 secret.

    Raises:
        AuthError: If the secret is not valid base64
    """
    try:
        return base64.b64decode(secret, validate=True)
    except (binascii.Error, ValueError) as e:
        raise AuthError("Secret is not valid base64", details={"reason": str(e)}) from e


def sign(params: Mapping[str, str], secret: str) -> str:
    """
    Compute the request signature.

    Args:
        params: Parameter name to string value
        secret: Base64-encoded shared secret

    Returns:
        Base64-encoded HMAC-SHA1 digest of the canonical string

    Raises:
        AuthError: If the secret is malformed
    """
    key = decode_secret(secret)
    digest = hmac.new(key, canonical_string(params).encode("utf-8"), hashlib.sha1).digest()
    return base64.b64encode(digest).decode("ascii")
