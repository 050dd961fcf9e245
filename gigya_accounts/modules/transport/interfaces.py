"""Transport interfaces following Black Box Design principles."""
from typing import Dict, Protocol


class Transport(Protocol):
    """Protocol for the network exchange - submit a request, get response bytes."""

    def submit(self, method: str, params: Dict[str, str]) -> bytes:
        """
        Submit one form-encoded request.

        Args:
            method: Vendor method name, e.g. ``accounts.search``
            params: Fully authorized request parameters

        Returns:
            Raw response body

        Raises:
            TransportError: On any network or IO failure
        """
        ...
