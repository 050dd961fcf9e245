"""
Error taxonomy shared by every module.

Failures at the authentication/retrieval boundary are values, not process
terminating conditions: the pagination engine and the token verifier return
these objects, while the one-call wrappers raise them.
"""

from typing import Any, Dict, Optional


class GigyaError(Exception):
    """Base error for the accounts client."""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        self.message = message
        self.details = details or {}
        super().__init__(message)


class TransportError(GigyaError):
    """Network or IO failure while talking to the service."""


class DecodeError(GigyaError):
    """Malformed response body or malformed base64 segment."""

    def __init__(
        self,
        message: str,
        field: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
    ):
        self.field = field
        super().__init__(message, details)


class APIError(GigyaError):
    """The service answered with a non-zero errorCode."""

    def __init__(
        self,
        error_code: int,
        reason: str,
        call_id: Optional[str] = None,
        total_count: Optional[int] = None,
        details: Optional[Dict[str, Any]] = None,
    ):
        self.error_code = error_code
        self.reason = reason
        self.call_id = call_id
        self.total_count = total_count
        super().__init__(f"API error {error_code}: {reason}", details)


class AuthError(GigyaError):
    """Malformed secret or key material."""


class FormatError(GigyaError):
    """Structurally malformed token."""


class VerificationError(GigyaError):
    """Signature does not match the signed content."""


class TokenExpiredError(VerificationError):
    """Token signature is valid but its exp/nbf window does not cover now."""


class KeyUnavailableError(GigyaError):
    """The published signing key could not be fetched or is unusable."""
