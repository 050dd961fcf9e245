"""
API Module - Black Box Interface

Purpose: Shapes exchanged with the accounts API
Interface: response envelopes, ResultPage, RetrievalResult
Hidden: Field aliases and coercions
"""

from .models import (
    Account,
    AccountInfoResponse,
    APIResponse,
    PublicKeyResponse,
    ResultPage,
    RetrievalResult,
    SearchResponse,
)

__all__ = [
    "Account",
    "AccountInfoResponse",
    "APIResponse",
    "PublicKeyResponse",
    "ResultPage",
    "RetrievalResult",
    "SearchResponse",
]
