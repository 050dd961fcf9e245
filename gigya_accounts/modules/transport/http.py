"""
HTTP transport over httpx.

Every request is a form-encoded POST to ``https://{domain}/{method}`` with an
explicit timeout, so an unresponsive service surfaces as a TransportError
instead of stalling a bulk retrieval.
"""

import logging
from typing import Dict, Optional

import httpx

from ..errors import TransportError
from ...config.provider import ClientConfig

logger = logging.getLogger(__name__)

USER_AGENT = "gigya-accounts/1.0.0"


class HttpTransport:
    """
    Synchronous transport for the accounts API.

    Owns an ``httpx.Client`` unless one is injected (tests pass a client
    built on ``httpx.MockTransport``).
    """

    def __init__(self, config: ClientConfig, client: Optional[httpx.Client] = None):
        self.config = config
        self._owns_client = client is None
        self.client = client or httpx.Client(
            headers={"User-Agent": USER_AGENT},
            timeout=config.timeout,
        )

    def submit(self, method: str, params: Dict[str, str]) -> bytes:
        url = self.config.base_url(method)
        logger.debug(f"POST {url} ({len(params)} params)")

        try:
            response = self.client.post(url, data=params, timeout=self.config.timeout)
        except httpx.TimeoutException as e:
            raise TransportError(
                f"{method} timed out after {self.config.timeout}s",
                details={"method": method},
            ) from e
        except httpx.HTTPError as e:
            raise TransportError(
                f"{method} request failed: {e}",
                details={"method": method},
            ) from e
        except httpx.InvalidURL as e:
            # Not an HTTPError subclass; raised for a malformed api_domain
            raise TransportError(
                f"{method} has an invalid URL: {e}",
                details={"method": method, "domain": self.config.api_domain},
            ) from e

        # The service reports application errors in the JSON body, often with
        # a non-2xx status; leave those to the envelope decoder.
        if response.status_code >= 500 and not response.content:
            raise TransportError(
                f"{method} returned HTTP {response.status_code} with empty body",
                details={"method": method, "status_code": response.status_code},
            )

        return response.content

    def close(self):
        """Close HTTP client."""
        if self._owns_client:
            self.client.close()

    def __enter__(self):
        return self

    def __exit__(self, *args):
        self.close()
