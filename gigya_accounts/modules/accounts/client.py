"""
Accounts API client.

Every vendor method goes through the same pipeline: authorize the
parameters, submit them through the transport, decode the JSON envelope and
raise APIError when the service reports a non-zero errorCode.
"""

import json
import logging
import re
from typing import Any, Dict, List, Mapping, Optional, Type, TypeVar

from pydantic import ValidationError

from ..api.models import (
    Account,
    AccountInfoResponse,
    APIResponse,
    PublicKeyResponse,
    SearchResponse,
)
from ..auth.factory import AuthFactory
from ..auth.interfaces import AuthStrategy
from ..errors import APIError, DecodeError
from ..transport.http import HttpTransport
from ..transport.interfaces import Transport
from ...config.provider import ClientConfig

logger = logging.getLogger(__name__)

R = TypeVar("R", bound=APIResponse)


def encode_value(value: Any) -> str:
    """Encode a parameter value the way the service expects it on the form."""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (dict, list)):
        return json.dumps(value, separators=(",", ":"))
    return str(value)


def encode_params(params: Mapping[str, Any]) -> Dict[str, str]:
    """Drop None values and encode the rest."""
    return {key: encode_value(value) for key, value in params.items() if value is not None}


def diagnose_body(body: bytes, fields: List[str]) -> Dict[str, Any]:
    """
    Best-effort description of what a response body holds for ``fields``.

    Used only in verbose error mode to point at the offending field when a
    response fails to decode.
    """
    text = body.decode("utf-8", errors="replace")
    try:
        document = json.loads(text)
    except ValueError:
        # Not JSON at all: scan the raw text for the field names.
        found = {}
        for name in fields:
            match = re.search(rf'"{re.escape(name)}"\s*:\s*(.{{0,40}})', text)
            if match:
                found[name] = match.group(1)
        return {"json": False, "fields": found, "excerpt": text[:200]}

    if not isinstance(document, dict):
        return {"json": True, "top_level_type": type(document).__name__}

    return {
        "json": True,
        "fields": {
            name: type(document[name]).__name__ if name in document else "missing"
            for name in fields
        },
    }


class AccountsClient:
    """
    Client for the accounts API.

    Built from an immutable ClientConfig. Changing credentials means building
    a new config and a new client.
    """

    def __init__(
        self,
        config: ClientConfig,
        transport: Optional[Transport] = None,
        auth: Optional[AuthStrategy] = None,
    ):
        """
        Initialize client.

        Args:
            config: Client configuration
            transport: Transport implementation (HttpTransport if not provided)
            auth: Authorization strategy (from config.auth_scheme if not provided)
        """
        self.config = config
        self.transport = transport or HttpTransport(config)
        self.auth = auth or AuthFactory.build(config)

    def request(self, method: str, params: Mapping[str, Any], model: Type[R]) -> R:
        """
        Authorize, submit and decode one call without checking errorCode.

        Raises:
            TransportError: On network failure
            DecodeError: If the body does not decode into ``model``
        """
        authorized = self.auth.authorize(encode_params(params))
        body = self.transport.submit(method, authorized)
        return self.decode(method, body, model)

    def call(self, method: str, params: Mapping[str, Any], model: Type[R] = APIResponse) -> R:
        """
        Perform one call and raise on an application error.

        Raises:
            TransportError: On network failure
            DecodeError: If the body does not decode into ``model``
            APIError: If the service reports a non-zero errorCode
        """
        response = self.request(method, params, model)
        if not response.ok:
            total = getattr(response, "total_count", None)
            logger.warning(
                f"{method} failed with error {response.error_code}: {response.reason} "
                f"(callId={response.call_id})"
            )
            raise APIError(
                response.error_code,
                response.reason,
                call_id=response.call_id,
                total_count=total,
                details={"method": method, "status_code": response.status_code},
            )
        return response

    def decode(self, method: str, body: bytes, model: Type[R]) -> R:
        """Decode a response body into ``model``."""
        try:
            return model.model_validate_json(body)
        except ValidationError as e:
            errors = e.errors()
            loc = errors[0].get("loc", ()) if errors else ()
            field = ".".join(str(part) for part in loc) or None
            details: Dict[str, Any] = {"method": method, "errors": len(errors)}
            if self.config.verbose_errors:
                aliases = [
                    info.alias or name for name, info in model.model_fields.items()
                ]
                details["diagnostics"] = diagnose_body(body, aliases)
            raise DecodeError(
                f"Failed to decode {method} response"
                + (f" at field '{field}'" if field else ""),
                field=field,
                details=details,
            ) from e

    # Vendor methods

    def search_page(
        self,
        query: Optional[str] = None,
        cursor_id: Optional[str] = None,
        open_cursor: bool = False,
    ) -> SearchResponse:
        """
        Fetch one page of accounts.search.

        Args:
            query: Search expression (first page only)
            cursor_id: Cursor handle from a previous page
            open_cursor: Ask the service to open a server-side cursor
        """
        params: Dict[str, Any] = {"query": query, "cursorId": cursor_id}
        if open_cursor:
            params["openCursor"] = True
        return self.call("accounts.search", params, SearchResponse)

    def get_account_info(
        self, uid: str, include: Optional[str] = None, extra_profile_fields: Optional[str] = None
    ) -> AccountInfoResponse:
        """Fetch one account by UID."""
        return self.call(
            "accounts.getAccountInfo",
            {"UID": uid, "include": include, "extraProfileFields": extra_profile_fields},
            AccountInfoResponse,
        )

    def set_account_info(
        self,
        uid: str,
        profile: Optional[Dict[str, Any]] = None,
        data: Optional[Dict[str, Any]] = None,
        preferences: Optional[Dict[str, Any]] = None,
        is_lite: Optional[bool] = None,
    ) -> str:
        """
        Update an account.

        Returns:
            UID reported by the service, or the requested UID if none was echoed
        """
        response = self.call(
            "accounts.setAccountInfo",
            {
                "UID": uid,
                "profile": profile,
                "data": data,
                "preferences": preferences,
                "isLite": is_lite,
            },
            AccountInfoResponse,
        )
        return response.uid or uid

    def import_full_account(self, account: Account) -> str:
        """
        Import a complete account.

        Top-level keys of ``account`` become request parameters; nested
        objects are sent as JSON.
        """
        response = self.call("accounts.importFullAccount", account, AccountInfoResponse)
        return response.uid or account.get("UID", "")

    def delete_account(self, uid: str) -> APIResponse:
        """Delete an account by UID."""
        return self.call("accounts.deleteAccount", {"UID": uid})

    def get_jwt_public_key(self) -> PublicKeyResponse:
        """
        Fetch the key the service signs its tokens with.

        Raises:
            DecodeError: If the response lacks the modulus or exponent
        """
        response = self.call("accounts.getJWTPublicKey", {}, PublicKeyResponse)
        for name in ("n", "e"):
            if not getattr(response, name):
                raise DecodeError(
                    f"accounts.getJWTPublicKey response has no '{name}'",
                    field=name,
                    details={"kid": response.kid},
                )
        return response

    def close(self):
        """Close the underlying transport if it supports closing."""
        close = getattr(self.transport, "close", None)
        if close:
            close()

    def __enter__(self):
        return self

    def __exit__(self, *args):
        self.close()
