"""
Request authorization schemes.

Two schemes are in use against the service: sending the application secret
as a plain parameter, and signing the request with an HMAC over its canonical
parameter string. Which one the live service enforces for a given key is not
assumed here; callers pick one through configuration.
"""

import logging
import secrets
import time
from typing import Callable, Dict

from .signer import decode_secret, sign

logger = logging.getLogger(__name__)


class SecretParamAuth:
    """Send ``apiKey``, ``userKey`` and the raw ``secret`` with every call."""

    name = "secret"

    def __init__(self, api_key: str, user_key: str, secret: str):
        self.api_key = api_key
        self.user_key = user_key
        self._secret = secret

    def authorize(self, params: Dict[str, str]) -> Dict[str, str]:
        authorized = dict(params)
        authorized.update(
            {"apiKey": self.api_key, "userKey": self.user_key, "secret": self._secret}
        )
        return authorized


class SignedRequestAuth:
    """
    Sign every call instead of sending the secret.

    Adds ``timestamp`` and ``nonce`` to the parameters, then ``sig`` computed
    over all of them (credentials included) with the shared secret.
    """

    name = "signed"

    def __init__(
        self,
        api_key: str,
        user_key: str,
        secret: str,
        clock: Callable[[], float] = time.time,
        nonce_factory: Callable[[], str] = lambda: secrets.token_hex(16),
    ):
        # Fail at construction rather than on the first request
        decode_secret(secret)
        self.api_key = api_key
        self.user_key = user_key
        self._secret = secret
        self._clock = clock
        self._nonce_factory = nonce_factory

    def authorize(self, params: Dict[str, str]) -> Dict[str, str]:
        authorized = dict(params)
        authorized.update(
            {
                "apiKey": self.api_key,
                "userKey": self.user_key,
                "timestamp": str(int(self._clock())),
                "nonce": self._nonce_factory(),
            }
        )
        authorized["sig"] = sign(authorized, self._secret)
        logger.debug("Signed request with %d parameters", len(authorized) - 1)
        return authorized
