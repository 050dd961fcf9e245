"""
Authentication Factory following Black Box Design principles.

This factory:
- Picks the authorization scheme from configuration
- Returns only the AuthStrategy interface
"""

import logging

from .interfaces import AuthStrategy
from .strategies import SecretParamAuth, SignedRequestAuth
from ...config.provider import ClientConfig

logger = logging.getLogger(__name__)


class AuthFactory:
    """Factory for building the request authorization strategy."""

    @staticmethod
    def build(config: ClientConfig) -> AuthStrategy:
        """
        Build the strategy named by ``config.auth_scheme``.

        Args:
            config: Client configuration

        Returns:
            AuthStrategy implementation
        """
        if config.auth_scheme == "signed":
            logger.info("Building request authorization with HMAC signatures")
            return SignedRequestAuth(config.api_key, config.user_key, config.secret)

        logger.info("Building request authorization with secret parameter")
        return SecretParamAuth(config.api_key, config.user_key, config.secret)
