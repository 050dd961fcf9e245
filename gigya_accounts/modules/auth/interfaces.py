"""Authentication interfaces following Black Box Design principles."""
from typing import Dict, Protocol


class AuthStrategy(Protocol):
    """Protocol for request authorization - allows swappable schemes."""

    name: str

    def authorize(self, params: Dict[str, str]) -> Dict[str, str]:
        """
        Add credentials to a request's parameters.

        Args:
            params: Method parameters without credentials

        Returns:
            New parameter mapping including credentials (input is not mutated)
        """
        ...
