"""
Unit tests for RS256 token verification against published n/e components.
"""

import time

import pytest

from gigya_accounts.modules.api.models import PublicKeyResponse
from gigya_accounts.modules.errors import (
    AuthError,
    DecodeError,
    FormatError,
    TokenExpiredError,
    VerificationError,
)
from gigya_accounts.modules.tokens import (
    TokenVerifier,
    b64url_decode,
    decode_claims,
    verify_rsa_signature,
)
from gigya_accounts.modules.tokens.verify import exponent_from_bytes

from conftest import b64url, b64url_to_bytes, int_to_b64url, make_token


@pytest.fixture
def token(rsa_private_key):
    return make_token(rsa_private_key, {"sub": "uid-1", "iss": "https://fidm.gigya.com/jwt/3_test/"})


def flip_bit(segment: str, index: int = 0) -> str:
    """Flip one bit of a segment's decoded bytes and re-encode it."""
    raw = bytearray(b64url_to_bytes(segment))
    raw[index] ^= 0x01
    return b64url(bytes(raw))


# =============================================================================
# Base64url decoding
# =============================================================================

def test_b64url_decode_exponent():
    """Test the common exponent encoding decodes to 65537."""
    data = b64url_decode("AQAB", "exponent")

    assert data == b"\x01\x00\x01"
    assert exponent_from_bytes(data) == 65537


@pytest.mark.parametrize("value,expected", [
    ("_-8", b"\xff\xef"),
    ("_-8=", b"\xff\xef"),
    ("", b""),
])
def test_b64url_decode_accepts_url_alphabet_and_optional_padding(value, expected):
    """Test '-' and '_' map to '+' and '/' and padding is optional."""
    assert b64url_decode(value, "payload") == expected


def test_b64url_decode_rejects_invalid_characters():
    """Test invalid characters raise DecodeError naming the field."""
    with pytest.raises(DecodeError) as exc_info:
        b64url_decode("ab$d", "signature")

    assert exc_info.value.field == "signature"


def test_exponent_zero_extended():
    """Test short exponents are read as big-endian unsigned integers."""
    assert exponent_from_bytes(b"\x03") == 3
    assert exponent_from_bytes(b"\x01" * 8) == int.from_bytes(b"\x01" * 8, "big")


def test_exponent_longer_than_buffer_rejected():
    """Test an exponent wider than 8 bytes is a key error."""
    with pytest.raises(AuthError):
        exponent_from_bytes(b"\x01" * 9)


# =============================================================================
# verify_rsa_signature
# =============================================================================

def test_valid_token(token, public_components):
    """Test a token signed by the published key verifies."""
    n, e = public_components

    assert verify_rsa_signature(token, n, e) == (True, None)


def test_tampered_payload(token, public_components):
    """Test flipping a payload bit fails verification."""
    n, e = public_components
    header, payload, signature = token.split(".")

    tampered = ".".join([header, flip_bit(payload, 2), signature])
    valid, error = verify_rsa_signature(tampered, n, e)

    assert valid is False
    assert isinstance(error, VerificationError)


def test_tampered_header(token, public_components):
    """Test flipping a header bit fails verification."""
    n, e = public_components
    header, payload, signature = token.split(".")

    valid, error = verify_rsa_signature(".".join([flip_bit(header, 3), payload, signature]), n, e)

    assert valid is False
    assert isinstance(error, VerificationError)


def test_tampered_signature(token, public_components):
    """Test flipping a signature bit fails verification."""
    n, e = public_components
    header, payload, signature = token.split(".")

    valid, error = verify_rsa_signature(".".join([header, payload, flip_bit(signature, 10)]), n, e)

    assert valid is False
    assert isinstance(error, VerificationError)


def test_truncated_signature(token, public_components):
    """Test a signature of the wrong length fails verification."""
    n, e = public_components
    header, payload, signature = token.split(".")
    short = b64url(b64url_to_bytes(signature)[:-1])

    valid, error = verify_rsa_signature(".".join([header, payload, short]), n, e)

    assert valid is False
    assert isinstance(error, VerificationError)


def test_wrong_key(token, other_private_key):
    """Test a token checked against an unrelated key fails."""
    numbers = other_private_key.public_key().public_numbers()

    valid, error = verify_rsa_signature(token, int_to_b64url(numbers.n), int_to_b64url(numbers.e))

    assert valid is False
    assert isinstance(error, VerificationError)


@pytest.mark.parametrize("bad_token,segments", [
    ("abc.def", 2),
    ("a.b.c.d", 4),
    ("no-dots", 1),
    ("", 1),
])
def test_wrong_segment_count(public_components, bad_token, segments):
    """Test anything other than three segments is a format error."""
    n, e = public_components

    valid, error = verify_rsa_signature(bad_token, n, e)

    assert valid is False
    assert isinstance(error, FormatError)
    assert error.details["segments"] == segments


@pytest.mark.parametrize("position,field", [
    (0, "header"),
    (1, "payload"),
    (2, "signature"),
])
def test_bad_alphabet_in_segment(token, public_components, position, field):
    """Test a segment outside the base64url alphabet is a decode error naming it."""
    n, e = public_components
    parts = token.split(".")
    parts[position] = "bad$segment"

    valid, error = verify_rsa_signature(".".join(parts), n, e)

    assert valid is False
    assert isinstance(error, DecodeError)
    assert error.field == field


def test_bad_modulus_encoding(token, public_components):
    """Test an undecodable modulus is reported as such."""
    _, e = public_components

    valid, error = verify_rsa_signature(token, "not*base64", e)

    assert valid is False
    assert isinstance(error, DecodeError)
    assert error.field == "modulus"


def test_bad_exponent_encoding(token, public_components):
    """Test an undecodable exponent is reported as such."""
    n, _ = public_components

    valid, error = verify_rsa_signature(token, n, "AQ#B")

    assert valid is False
    assert isinstance(error, DecodeError)
    assert error.field == "exponent"


def test_oversized_exponent(token, public_components):
    """Test a 9-byte exponent is a key error."""
    n, _ = public_components

    valid, error = verify_rsa_signature(token, n, b64url(b"\x01" * 9))

    assert valid is False
    assert isinstance(error, AuthError)


def test_empty_modulus(token, public_components):
    """Test a zero modulus cannot form a key."""
    _, e = public_components

    valid, error = verify_rsa_signature(token, "", e)

    assert valid is False
    assert isinstance(error, AuthError)


def test_max_exponent_bits(token, public_components):
    """Test the optional exponent bound."""
    n, e = public_components

    valid, error = verify_rsa_signature(token, n, e, max_exponent_bits=16)
    assert valid is False
    assert isinstance(error, AuthError)

    assert verify_rsa_signature(token, n, e, max_exponent_bits=32) == (True, None)


# =============================================================================
# Claims and TokenVerifier
# =============================================================================

def test_decode_claims(token):
    """Test claims are read from the payload."""
    assert decode_claims(token)["sub"] == "uid-1"


def test_decode_claims_non_json_payload():
    """Test a payload that is not JSON raises DecodeError."""
    bogus = ".".join([b64url(b'{"alg":"RS256"}'), b64url(b"not json"), b64url(b"sig")])

    with pytest.raises(DecodeError) as exc_info:
        decode_claims(bogus)

    assert exc_info.value.field == "payload"


def test_token_verifier_from_public_key_response(token, public_components):
    """Test a verifier built from a key response verifies tokens."""
    n, e = public_components
    response = PublicKeyResponse.model_validate(
        {"errorCode": 0, "n": n, "e": e, "kid": "test-kid", "alg": "RS256"}
    )

    verifier = TokenVerifier.from_public_key_response(response)

    assert verifier.kid == "test-kid"
    assert verifier.verify_token(token) == (True, None)


def test_token_verifier_reports_errors(public_components):
    """Test the verifier returns errors rather than raising."""
    n, e = public_components

    valid, error = TokenVerifier(n, e).verify_token("abc.def")

    assert valid is False
    assert isinstance(error, FormatError)


def test_decode_claims_expired(rsa_private_key):
    """Test an expired token is rejected even though its signature is not rechecked."""
    expired = make_token(rsa_private_key, {"sub": "uid-1", "exp": int(time.time()) - 60})

    with pytest.raises(TokenExpiredError):
        decode_claims(expired)


def test_decode_claims_not_yet_valid(rsa_private_key):
    """Test a token whose nbf lies in the future is rejected."""
    early = make_token(rsa_private_key, {"sub": "uid-1", "nbf": int(time.time()) + 600})

    with pytest.raises(TokenExpiredError):
        decode_claims(early)


def test_decode_claims_within_window(rsa_private_key):
    """Test a token inside its exp window decodes."""
    fresh = make_token(rsa_private_key, {"sub": "uid-1", "exp": int(time.time()) + 600})

    assert decode_claims(fresh)["sub"] == "uid-1"
