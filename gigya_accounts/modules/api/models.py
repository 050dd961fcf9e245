"""
Accounts API data models.

Response envelopes mirror only the fields the client acts on. Account
records stay opaque dictionaries: their schema belongs to the site's
configuration, not to this client.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from ..errors import GigyaError

Account = Dict[str, Any]


# Response Models (API Output)


class APIResponse(BaseModel):
    """Fields common to every accounts API response."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    call_id: Optional[str] = Field(None, alias="callId")
    error_code: int = Field(..., alias="errorCode")
    api_version: Optional[int] = Field(None, alias="apiVersion")
    status_code: Optional[int] = Field(None, alias="statusCode")
    status_reason: Optional[str] = Field(None, alias="statusReason")
    time: Optional[str] = None
    error_message: Optional[str] = Field(None, alias="errorMessage")
    error_details: Optional[str] = Field(None, alias="errorDetails")

    @property
    def ok(self) -> bool:
        return self.error_code == 0

    @property
    def reason(self) -> str:
        """Most specific human-readable failure text the service sent."""
        return self.error_details or self.error_message or self.status_reason or ""


class SearchResponse(APIResponse):
    """Response of accounts.search."""

    results: List[Account] = Field(default_factory=list)
    objects_count: Optional[int] = Field(None, alias="objectsCount")
    total_count: Optional[int] = Field(None, alias="totalCount")
    next_cursor: str = Field("", alias="nextCursor")

    @field_validator("next_cursor", mode="before")
    @classmethod
    def none_cursor_is_empty(cls, v):
        return "" if v is None else v

    @field_validator("results", mode="before")
    @classmethod
    def none_results_is_empty(cls, v):
        return [] if v is None else v


class AccountInfoResponse(APIResponse):
    """Response of accounts.getAccountInfo / setAccountInfo / importFullAccount / deleteAccount."""

    model_config = ConfigDict(populate_by_name=True, extra="allow")

    uid: Optional[str] = Field(None, alias="UID")

    def account(self) -> Account:
        """Return the account payload (everything beyond the envelope)."""
        return dict(self.model_extra or {}, UID=self.uid)


class PublicKeyResponse(APIResponse):
    """Response of accounts.getJWTPublicKey."""

    n: Optional[str] = None
    e: Optional[str] = None
    kid: Optional[str] = None
    alg: Optional[str] = None
    kty: Optional[str] = None
    use: Optional[str] = None


# Retrieval results


@dataclass(frozen=True)
class ResultPage:
    """One decoded page of a search."""

    accounts: List[Account]
    total_count: int
    next_cursor: str = ""

    @property
    def exhausted(self) -> bool:
        return not self.next_cursor

    @classmethod
    def from_response(cls, response: SearchResponse) -> "ResultPage":
        return cls(
            accounts=list(response.results),
            total_count=response.total_count or 0,
            next_cursor=response.next_cursor,
        )


@dataclass
class RetrievalResult:
    """
    Outcome of a retrieval.

    ``error`` is None when the cursor was exhausted cleanly. Otherwise
    ``accounts`` holds everything fetched before the failure and
    ``total_count`` the last total reported by the service (0 if none).
    """

    accounts: List[Account] = field(default_factory=list)
    total_count: int = 0
    error: Optional[GigyaError] = None

    @property
    def ok(self) -> bool:
        return self.error is None

    @property
    def complete(self) -> bool:
        return self.ok and len(self.accounts) == self.total_count
