"""Configuration provider following Black Box Design principles."""
import math
import os
from dataclasses import dataclass, field
from typing import Optional, Protocol

from ..exceptions import ConfigError

DEFAULT_VAULT_ADDR = "https://127.0.0.1:8200"
DEFAULT_MOUNT_PATH = "kubernetes"
DEFAULT_TOKEN_DEST = "/.vault-token"
DEFAULT_ACCESSOR_DEST = "/.vault-accessor"
DEFAULT_SERVICE_ACCOUNT_PATH = "/var/run/secrets/kubernetes.io/serviceaccount/token"
DEFAULT_CLIENT_TIMEOUT = 60.0
LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")

# Spellings accepted by Go's strconv.ParseBool, which Vault tooling uses
_TRUE_VALUES = {"1", "t", "T", "TRUE", "true", "True"}
_FALSE_VALUES = {"0", "f", "F", "FALSE", "false", "False"}


def parse_bool(name: str, value: str) -> bool:
    """Parse a boolean environment value, rejecting anything unrecognised."""
    if value in _TRUE_VALUES:
        return True
    if value in _FALSE_VALUES:
        return False
    raise ConfigError(f"invalid boolean value for {name}: {value!r}")


@dataclass(frozen=True)
class TLSConfig:
    """TLS configuration for the connection to Vault."""
    ca_pem: Optional[str] = None
    ca_cert: Optional[str] = None
    ca_path: Optional[str] = None
    skip_verify: bool = False
    server_name: Optional[str] = None


@dataclass(frozen=True)
class VaultConfig:
    """Vault login configuration."""
    address: str
    role: str
    mount_path: str = DEFAULT_MOUNT_PATH
    timeout: Optional[float] = DEFAULT_CLIENT_TIMEOUT
    tls: TLSConfig = field(default_factory=TLSConfig)


@dataclass(frozen=True)
class OutputConfig:
    """Where the identity token is read from and credentials are written to."""
    service_account_path: str = DEFAULT_SERVICE_ACCOUNT_PATH
    token_dest: str = DEFAULT_TOKEN_DEST
    accessor_dest: str = DEFAULT_ACCESSOR_DEST


class ConfigProvider(Protocol):
    """Protocol for configuration providers."""

    def get_vault_config(self) -> VaultConfig:
        """Get Vault configuration."""
        ...

    def get_output_config(self) -> OutputConfig:
        """Get file locations."""
        ...

    def get_log_level(self) -> str:
        """Get the logging level name."""
        ...


class EnvConfigProvider:
    """Environment-based configuration provider."""

    def __init__(self, environ=None):
        self.environ = os.environ if environ is None else environ

    def _get(self, name: str) -> Optional[str]:
        # Empty values are treated as unset
        return self.environ.get(name) or None

    def get_tls_config(self) -> TLSConfig:
        """Get TLS configuration from environment variables."""
        skip_verify = self._get("VAULT_SKIP_VERIFY")

        return TLSConfig(
            ca_pem=self._get("VAULT_CAPEM"),
            ca_cert=self._get("VAULT_CACERT"),
            ca_path=self._get("VAULT_CAPATH"),
            skip_verify=parse_bool("VAULT_SKIP_VERIFY", skip_verify) if skip_verify else False,
            server_name=self._get("VAULT_TLS_SERVER_NAME"),
        )

    def get_vault_config(self) -> VaultConfig:
        """Get Vault configuration from environment variables."""
        role = self._get("VAULT_ROLE")
        if not role:
            raise ConfigError("missing VAULT_ROLE")

        return VaultConfig(
            address=self._get("VAULT_ADDR") or DEFAULT_VAULT_ADDR,
            role=role,
            mount_path=self._get("VAULT_K8S_MOUNT_PATH") or DEFAULT_MOUNT_PATH,
            timeout=self._get_timeout(),
            tls=self.get_tls_config(),
        )

    def _get_timeout(self) -> Optional[float]:
        raw = self._get("VAULT_CLIENT_TIMEOUT")
        if raw is None:
            return DEFAULT_CLIENT_TIMEOUT
        seconds = raw[:-1] if raw.endswith("s") else raw
        try:
            timeout = float(seconds)
        except ValueError:
            raise ConfigError(f"invalid value for VAULT_CLIENT_TIMEOUT: {raw!r}") from None
        if not math.isfinite(timeout):
            raise ConfigError(f"invalid value for VAULT_CLIENT_TIMEOUT: {raw!r}")
        if timeout < 0:
            raise ConfigError(f"VAULT_CLIENT_TIMEOUT must not be negative: {raw!r}")
        # 0 disables the timeout entirely
        return timeout or None

    def get_output_config(self) -> OutputConfig:
        """Get file locations from environment variables."""
        return OutputConfig(
            service_account_path=self._get("SERVICE_ACCOUNT_PATH") or DEFAULT_SERVICE_ACCOUNT_PATH,
            token_dest=self._get("TOKEN_DEST_PATH") or DEFAULT_TOKEN_DEST,
            accessor_dest=self._get("ACCESSOR_DEST_PATH") or DEFAULT_ACCESSOR_DEST,
        )

    def get_log_level(self) -> str:
        """Get the logging level from LOG_LEVEL."""
        level = (self._get("LOG_LEVEL") or "INFO").upper()
        if level not in LOG_LEVELS:
            raise ConfigError(f"invalid LOG_LEVEL: {level!r}")
        return level
