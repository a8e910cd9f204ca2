"""Configuration for vault-login."""

from .provider import (
    ConfigProvider,
    EnvConfigProvider,
    OutputConfig,
    TLSConfig,
    VaultConfig,
    parse_bool,
)

__all__ = [
    "ConfigProvider",
    "EnvConfigProvider",
    "OutputConfig",
    "TLSConfig",
    "VaultConfig",
    "parse_bool",
]
