"""Configuration provider following Black Box Design principles."""
import os
from dataclasses import dataclass, replace
from typing import Optional, Protocol

DEFAULT_API_DOMAIN = "accounts.us1.gigya.com"
AUTH_SCHEMES = ("secret", "signed")


@dataclass(frozen=True)
class ClientConfig:
    """
    Immutable client configuration.

    Changing a credential means building a new config (see ``with_changes``)
    and constructing a new client from it; clients never mutate it.
    """
    api_key: str
    user_key: str
    secret: str
    api_domain: str = DEFAULT_API_DOMAIN
    auth_scheme: str = "secret"
    timeout: float = 30.0
    verbose_errors: bool = False
    max_exponent_bits: Optional[int] = None

    def __post_init__(self):
        if self.auth_scheme not in AUTH_SCHEMES:
            raise ValueError(
                f"Unknown auth scheme '{self.auth_scheme}'. "
                f"Expected one of: {', '.join(AUTH_SCHEMES)}"
            )
        if self.timeout <= 0:
            raise ValueError("timeout must be positive")

    def base_url(self, method: str) -> str:
        """Endpoint for a vendor method, e.g. ``accounts.search``."""
        return f"https://{self.api_domain}/{method}"

    def with_changes(self, **changes) -> "ClientConfig":
        """Return a copy with the given fields replaced."""
        return replace(self, **changes)

    def __repr__(self) -> str:
        return (
            f"ClientConfig(api_key={self.api_key!r}, user_key={self.user_key!r}, "
            f"secret='***', api_domain={self.api_domain!r}, "
            f"auth_scheme={self.auth_scheme!r}, timeout={self.timeout!r})"
        )


class ConfigProvider(Protocol):
    """Protocol for configuration providers."""

    def get_client_config(self) -> ClientConfig:
        """Get client configuration."""
        ...


class EnvConfigProvider:
    """Environment-based configuration provider."""

    REQUIRED = {
        "GIGYA_API_KEY": "Site API key",
        "GIGYA_USER_KEY": "Application/user key",
        "GIGYA_SECRET": "Application secret (base64)",
    }

    def __init__(self, environ: Optional[dict] = None):
        self._environ = os.environ if environ is None else environ

    def get_client_config(self) -> ClientConfig:
        """Get client configuration from environment variables."""
        env = self._environ

        missing = [key for key in self.REQUIRED if not env.get(key)]
        if missing:
            raise ValueError(
                f"Missing required configuration: {', '.join(missing)}. "
                "Set them in the environment or in a .env file."
            )

        max_bits = env.get("GIGYA_MAX_EXPONENT_BITS")

        return ClientConfig(
            api_key=env["GIGYA_API_KEY"],
            user_key=env["GIGYA_USER_KEY"],
            secret=env["GIGYA_SECRET"],
            api_domain=env.get("GIGYA_API_DOMAIN") or DEFAULT_API_DOMAIN,
            auth_scheme=env.get("GIGYA_AUTH_SCHEME", "secret").lower(),
            timeout=float(env.get("GIGYA_TIMEOUT", "30")),
            verbose_errors=env.get("GIGYA_VERBOSE_ERRORS", "false").lower() == "true",
            max_exponent_bits=int(max_bits) if max_bits else None,
        )
