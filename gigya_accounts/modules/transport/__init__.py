"""
Transport Module - Black Box Interface

Purpose: Perform the network exchange with the identity service
Interface: Transport protocol, HttpTransport
Hidden: HTTP client, timeouts, form encoding
"""

from .http import HttpTransport
from .interfaces import Transport

__all__ = ["HttpTransport", "Transport"]
