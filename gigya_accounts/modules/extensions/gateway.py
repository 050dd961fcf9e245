"""
Extension gateway.

Inbound extension calls carry a signed token. The gateway fetches the
published key, verifies the token, validates its claims into the typed
request variant and only then hands it to the handler.
"""

import logging
from typing import Callable, Optional, Protocol

from pydantic import ValidationError

from .models import ExtensionRequest, ExtensionResponse, extension_request_adapter
from ..api.models import PublicKeyResponse
from ..errors import DecodeError, GigyaError, KeyUnavailableError
from ..tokens.verify import TokenVerifier, decode_claims

logger = logging.getLogger(__name__)

KeySource = Callable[[], PublicKeyResponse]

KEY_FIELDS = ("modulus", "exponent")


class ExtensionHandler(Protocol):
    """Protocol for extension handlers - business rules live behind this."""

    def handle(self, request: ExtensionRequest) -> ExtensionResponse:
        ...


class ApproveAllHandler:
    """Handler that lets every operation proceed unchanged."""

    def handle(self, request: ExtensionRequest) -> ExtensionResponse:
        logger.info(f"Approving {request.extension_point} (callID={request.call_id})")
        return ExtensionResponse.ok()


def parse_extension_request(claims: dict) -> ExtensionRequest:
    """
    Validate token claims into the matching request variant.

    Raises:
        DecodeError: If the extension point is unknown or the fields are invalid
    """
    try:
        return extension_request_adapter.validate_python(claims)
    except ValidationError as e:
        errors = e.errors()
        loc = errors[0].get("loc", ()) if errors else ()
        raise DecodeError(
            f"invalid extension request: {errors[0]['msg'] if errors else e}",
            field=".".join(str(part) for part in loc) or None,
            details={"extensionPoint": claims.get("extensionPoint")},
        ) from e


class ExtensionGateway:
    """
    Verify-then-dispatch for inbound extension calls.

    The key is fetched through ``key_source`` on every call; nothing about it
    outlives the request.
    """

    def __init__(
        self,
        key_source: KeySource,
        handler: Optional[ExtensionHandler] = None,
        max_exponent_bits: Optional[int] = None,
    ):
        """
        Initialize gateway.

        Args:
            key_source: Returns the service's published key (e.g.
                AccountsClient.get_jwt_public_key)
            handler: Business rules (ApproveAllHandler if not provided)
            max_exponent_bits: Optional exponent bound passed to the verifier
        """
        self.key_source = key_source
        self.handler = handler or ApproveAllHandler()
        self.max_exponent_bits = max_exponent_bits

    def process(self, jws: str) -> ExtensionResponse:
        """
        Handle one inbound call.

        Raises:
            FormatError, DecodeError: Malformed token or claims
            AuthError, VerificationError: Token not signed by the service
            TokenExpiredError: Signed token outside its exp/nbf window
            KeyUnavailableError: Published key could not be fetched or decoded
        """
        try:
            key = self.key_source()
        except GigyaError as e:
            raise KeyUnavailableError(
                f"signing key unavailable: {e}", details={"cause": type(e).__name__}
            ) from e

        verifier = TokenVerifier.from_public_key_response(
            key, max_exponent_bits=self.max_exponent_bits
        )
        valid, error = verifier.verify_token(jws)
        if isinstance(error, DecodeError) and error.field in KEY_FIELDS:
            # The published key is broken, not the caller's token
            raise KeyUnavailableError(
                f"published key is malformed: {error}", details={"field": error.field}
            ) from error
        if not valid:
            logger.warning(f"Rejected extension call: {error}")
            raise error

        request = parse_extension_request(decode_claims(jws))
        logger.debug(f"Dispatching {request.extension_point} (callID={request.call_id})")
        return self.handler.handle(request)
