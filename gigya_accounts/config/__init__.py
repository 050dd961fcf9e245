"""
Config Module - Black Box Interface

Purpose: Client configuration
Interface: ClientConfig, ConfigProvider, EnvConfigProvider
Hidden: Environment parsing and defaults
"""

from .provider import ClientConfig, ConfigProvider, EnvConfigProvider

__all__ = ["ClientConfig", "ConfigProvider", "EnvConfigProvider"]
