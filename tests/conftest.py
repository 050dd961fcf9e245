"""
Shared pytest fixtures for gigya_accounts tests.

This module provides common fixtures including:
- FakeTransport: scripted responses for a single call sequence
- FakeSearchService: a cursor-paging accounts.search double
- RSA key material and RS256 token minting
"""

import base64
import json
import os
import re
import sys
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Tuple, Union

import jwt
import pytest
from cryptography.hazmat.primitives.asymmetric import rsa

# Add parent directory to path for imports
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from gigya_accounts.config.provider import ClientConfig  # noqa: E402
from gigya_accounts.modules.accounts import AccountsClient  # noqa: E402


# =============================================================================
# Transport doubles
# =============================================================================

@dataclass
class RecordedCall:
    """A request the code under test submitted."""
    method: str
    params: Dict[str, str]


class FakeTransport:
    """
    Transport returning scripted bodies in order.

    Each scripted item is either response bytes/dict (returned) or an
    exception instance (raised).
    """

    def __init__(self, responses: Optional[List[Union[bytes, dict, Exception]]] = None):
        self.responses = list(responses or [])
        self.calls: List[RecordedCall] = []

    def queue(self, response: Union[bytes, dict, Exception]) -> None:
        self.responses.append(response)

    def submit(self, method: str, params: Dict[str, str]) -> bytes:
        self.calls.append(RecordedCall(method, dict(params)))
        if not self.responses:
            raise AssertionError(f"Unexpected call to {method}")
        response = self.responses.pop(0)
        if isinstance(response, Exception):
            raise response
        if isinstance(response, dict):
            return json.dumps(response).encode("utf-8")
        return response


def envelope(**fields) -> dict:
    """Successful response envelope with extra fields."""
    body = {
        "callId": "call-1",
        "errorCode": 0,
        "apiVersion": 2,
        "statusCode": 200,
        "statusReason": "OK",
        "time": "2024-11-11T04:02:49.461Z",
    }
    body.update(fields)
    return body


def search_body(accounts: List[dict], total: int, next_cursor: str = "") -> dict:
    return envelope(
        results=accounts,
        objectsCount=len(accounts),
        totalCount=total,
        nextCursor=next_cursor,
    )


@dataclass
class FakeSearchService:
    """
    accounts.search double that pages through ``total`` synthetic accounts.

    Honors the ``limit`` clause of the first query and issues a fresh cursor
    per page. ``fail_on_page`` scripts a failure for a given 1-based page.
    """
    total: int
    cursor_prefix: str = "cursor-"
    fail_on_page: Dict[int, Exception] = field(default_factory=dict)
    calls: List[RecordedCall] = field(default_factory=list)
    _cursors: Dict[str, Tuple[int, int]] = field(default_factory=dict)

    def submit(self, method: str, params: Dict[str, str]) -> bytes:
        assert method == "accounts.search"
        self.calls.append(RecordedCall(method, dict(params)))

        page_number = len(self.calls)
        if page_number in self.fail_on_page:
            raise self.fail_on_page[page_number]

        if "cursorId" in params:
            offset, limit = self._cursors.pop(params["cursorId"])
        else:
            match = re.search(r" limit (\d+)$", params["query"])
            offset, limit = 0, int(match.group(1))

        end = min(offset + limit, self.total)
        accounts = [{"UID": f"uid-{i}"} for i in range(offset, end)]

        next_cursor = ""
        if end < self.total:
            next_cursor = f"{self.cursor_prefix}{page_number}"
            self._cursors[next_cursor] = (end, limit)

        return json.dumps(search_body(accounts, self.total, next_cursor)).encode("utf-8")


# =============================================================================
# Configuration and client fixtures
# =============================================================================

SECRET = base64.b64encode(b"shared-secret-bytes").decode("ascii")


@pytest.fixture
def client_config():
    """Create a test client configuration."""
    return ClientConfig(
        api_key="3_test-api-key",
        user_key="test-user-key",
        secret=SECRET,
        api_domain="accounts.test.gigya.com",
    )


@pytest.fixture
def fake_transport():
    """Create an empty scripted transport."""
    return FakeTransport()


@pytest.fixture
def accounts_client(client_config, fake_transport):
    """Create an AccountsClient wired to the scripted transport."""
    return AccountsClient(client_config, transport=fake_transport)


# =============================================================================
# RSA key material
# =============================================================================

def int_to_b64url(value: int) -> str:
    """Encode an unsigned integer as unpadded base64url big-endian bytes."""
    raw = value.to_bytes((value.bit_length() + 7) // 8, "big")
    return base64.urlsafe_b64encode(raw).rstrip(b"=").decode("ascii")


def b64url(data: bytes) -> str:
    return base64.urlsafe_b64encode(data).rstrip(b"=").decode("ascii")


def b64url_to_bytes(value: str) -> bytes:
    return base64.urlsafe_b64decode(value + "=" * (-len(value) % 4))


@pytest.fixture(scope="session")
def rsa_private_key():
    """Generate an RSA key pair for token signing."""
    return rsa.generate_private_key(public_exponent=65537, key_size=2048)


@pytest.fixture(scope="session")
def other_private_key():
    """Generate an unrelated RSA key pair."""
    return rsa.generate_private_key(public_exponent=65537, key_size=2048)


@pytest.fixture(scope="session")
def public_components(rsa_private_key):
    """Published (n, e) of the signing key as base64url strings."""
    numbers = rsa_private_key.public_key().public_numbers()
    return int_to_b64url(numbers.n), int_to_b64url(numbers.e)


@pytest.fixture
def extension_claims():
    """Claims of an OnBeforeAccountsRegister extension call."""
    return {
        "apiKey": "3_test-api-key",
        "callID": "3aa65ea84e7c422f8238e08ad64b81e6",
        "extensionPoint": "OnBeforeAccountsRegister",
        "data": {
            "params": {"email": "someone@example.com", "lang": "en"},
            "context": {"clientIP": "203.0.113.7"},
        },
    }


def make_token(private_key, claims: Dict[str, Any], kid: str = "test-kid") -> str:
    """Create an RS256 token."""
    return jwt.encode(claims, private_key, algorithm="RS256", headers={"kid": kid})
