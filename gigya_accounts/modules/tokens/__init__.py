"""
Tokens Module - Black Box Interface

Purpose: Verify tokens signed by the identity service
Interface: verify_rsa_signature(), TokenVerifier, decode_claims()
Hidden: base64url handling, key reconstruction, PKCS#1 v1.5 details
"""

from .verify import TokenVerifier, b64url_decode, decode_claims, verify_rsa_signature

__all__ = ["TokenVerifier", "b64url_decode", "decode_claims", "verify_rsa_signature"]
