"""
Accounts Module - Black Box Interface

Purpose: Call the accounts API and retrieve result sets in bulk
Interface: AccountsClient, PaginatedRetriever
Hidden: Envelope decoding, cursor threading
"""

from .client import AccountsClient
from .pagination import PaginatedRetriever, clamp_batch_size

__all__ = ["AccountsClient", "PaginatedRetriever", "clamp_batch_size"]
