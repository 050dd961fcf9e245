"""
Authentication Module - Black Box Interface

Purpose: Authorize outbound requests
Interface: sign(), AuthStrategy, AuthFactory.build()
Hidden: Canonicalization, HMAC details, nonce generation

Either scheme can be swapped for the other without affecting the
transport or the pagination engine.
"""

from .factory import AuthFactory
from .interfaces import AuthStrategy
from .signer import canonical_string, sign
from .strategies import SecretParamAuth, SignedRequestAuth

__all__ = [
    "AuthFactory",
    "AuthStrategy",
    "SecretParamAuth",
    "SignedRequestAuth",
    "canonical_string",
    "sign",
]
