"""
Extensions Module - Black Box Interface

Purpose: Accept inbound extension calls from the identity service
Interface: ExtensionGateway, ExtensionHandler, request/response models
Hidden: Token verification and claims validation

Business rules plug in as an ExtensionHandler without touching the gateway.
"""

from .gateway import ApproveAllHandler, ExtensionGateway, ExtensionHandler, parse_extension_request
from .models import (
    ExtensionRequest,
    ExtensionResponse,
    OnBeforeAccountsLogin,
    OnBeforeAccountsRegister,
    OnBeforeSetAccountInfo,
    ValidationErrorItem,
)

__all__ = [
    "ApproveAllHandler",
    "ExtensionGateway",
    "ExtensionHandler",
    "ExtensionRequest",
    "ExtensionResponse",
    "OnBeforeAccountsLogin",
    "OnBeforeAccountsRegister",
    "OnBeforeSetAccountInfo",
    "ValidationErrorItem",
    "parse_extension_request",
]
