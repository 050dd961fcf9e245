"""
RSA signature verification for tokens issued by the service.

The service publishes its signing key as two base64url strings: the modulus
``n`` and the exponent ``e``, each the big-endian bytes of an unsigned
integer. Tokens are compact JWS strings (``header.payload.signature``) signed
with RS256.

The exponent is zero-extended into an 8-byte buffer and read as an unsigned
integer. Anything wider than the buffer is rejected; within it there is no
bound unless ``max_exponent_bits`` is given.
"""

import base64
import binascii
import logging
from typing import Any, Dict, Optional, Tuple

import jwt
from cryptography.exceptions import InvalidSignature
from cryptography.hazmat.primitives import hashes
from cryptography.hazmat.primitives.asymmetric import padding, rsa, utils

from ..api.models import PublicKeyResponse
from ..errors import (
    AuthError,
    DecodeError,
    FormatError,
    GigyaError,
    TokenExpiredError,
    VerificationError,
)

logger = logging.getLogger(__name__)

EXPONENT_BUFFER_BYTES = 8

VerifyResult = Tuple[bool, Optional[GigyaError]]


def b64url_decode(value: str, field: str) -> bytes:
    """
    Decode a base64url string, with or without padding.

    Raises:
        DecodeError: Naming ``field`` if the value is not valid base64url
    """
    standard = value.replace("-", "+").replace("_", "/")
    standard += "=" * (-len(standard) % 4)
    try:
        return base64.b64decode(standard, validate=True)
    except (binascii.Error, ValueError) as e:
        raise DecodeError(f"failed to decode base64 {field}: {e}", field=field) from e


def exponent_from_bytes(data: bytes) -> int:
    """Read an exponent zero-extended into the fixed-width buffer."""
    if len(data) > EXPONENT_BUFFER_BYTES:
        raise AuthError(
            f"exponent is {len(data)} bytes, buffer holds {EXPONENT_BUFFER_BYTES}",
            details={"length": len(data)},
        )
    return int.from_bytes(data.rjust(EXPONENT_BUFFER_BYTES, b"\x00"), "big")


def build_public_key(
    modulus: bytes, exponent: bytes, max_exponent_bits: Optional[int] = None
) -> rsa.RSAPublicKey:
    """
    Reconstruct an RSA public key from raw big-endian components.

    Raises:
        AuthError: If the key material is unusable
    """
    n = int.from_bytes(modulus, "big")
    e = exponent_from_bytes(exponent)

    if max_exponent_bits is not None and e.bit_length() > max_exponent_bits:
        raise AuthError(
            f"exponent exceeds {max_exponent_bits} bits",
            details={"bits": e.bit_length()},
        )

    try:
        return rsa.RSAPublicNumbers(e, n).public_key()
    except ValueError as err:
        raise AuthError(f"invalid RSA public key: {err}") from err


def verify_rsa_signature(
    token: str, n: str, e: str, max_exponent_bits: Optional[int] = None
) -> VerifyResult:
    """
    Verify an RS256 token against base64url modulus and exponent.

    Args:
        token: Compact token ``header.payload.signature``
        n: base64url modulus
        e: base64url exponent
        max_exponent_bits: Reject exponents wider than this (unchecked if None)

    Returns:
        (True, None) if the signature is valid, otherwise (False, error) where
        error is FormatError, DecodeError, AuthError or VerificationError
    """
    parts = token.split(".")
    if len(parts) != 3:
        return False, FormatError(
            "invalid token format", details={"segments": len(parts)}
        )
    header, payload, signature_b64 = parts

    try:
        b64url_decode(header, "header")
        b64url_decode(payload, "payload")
        signature = b64url_decode(signature_b64, "signature")
        modulus = b64url_decode(n, "modulus")
        exponent = b64url_decode(e, "exponent")
        public_key = build_public_key(modulus, exponent, max_exponent_bits)
    except GigyaError as err:
        return False, err

    hasher = hashes.Hash(hashes.SHA256())
    hasher.update(f"{header}.{payload}".encode("ascii"))
    digest = hasher.finalize()

    try:
        public_key.verify(
            signature, digest, padding.PKCS1v15(), utils.Prehashed(hashes.SHA256())
        )
    except (InvalidSignature, ValueError):
        return False, VerificationError("signature verification failed")

    return True, None


def decode_claims(token: str) -> Dict[str, Any]:
    """
    Return a token's payload claims without checking its signature.

    Only call this on a token that already passed ``verify_rsa_signature``.
    The ``exp`` and ``nbf`` claims are still enforced when present.

    Raises:
        TokenExpiredError: If the token is expired or not yet valid
        DecodeError: If the payload is not a JSON object
    """
    try:
        return jwt.decode(
            token,
            options={"verify_signature": False, "verify_exp": True, "verify_nbf": True},
        )
    except (jwt.ExpiredSignatureError, jwt.ImmatureSignatureError) as e:
        raise TokenExpiredError(f"token outside its validity window: {e}") from e
    except jwt.InvalidTokenError as e:
        raise DecodeError(f"failed to decode token claims: {e}", field="payload") from e


class TokenVerifier:
    """
    Verifies tokens against one published key.

    Holds only the encoded key strings; the integer key is rebuilt on every
    verification and dropped afterwards.
    """

    def __init__(
        self,
        n: str,
        e: str,
        kid: Optional[str] = None,
        max_exponent_bits: Optional[int] = None,
    ):
        self.n = n
        self.e = e
        self.kid = kid
        self.max_exponent_bits = max_exponent_bits

    @classmethod
    def from_public_key_response(
        cls, response: PublicKeyResponse, max_exponent_bits: Optional[int] = None
    ) -> "TokenVerifier":
        return cls(response.n, response.e, kid=response.kid, max_exponent_bits=max_exponent_bits)

    def verify_token(self, token: str) -> VerifyResult:
        valid, error = verify_rsa_signature(token, self.n, self.e, self.max_exponent_bits)
        if not valid:
            logger.debug(f"Token rejected (kid={self.kid}): {error}")
        return valid, error
