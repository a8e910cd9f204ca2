"""
Authentication Factory following Black Box Design principles.

This factory:
- Constructs the trust pool and TLS policy from configuration
- Wires dependencies together
- Returns only the authenticator (hiding implementation)
"""

import logging
from typing import Optional

import httpx

from .login import TLSPolicy, VaultAuthenticator
from ..trust import build_trust_pool, select_trust_source
from ...config.provider import TLSConfig, VaultConfig

logger = logging.getLogger(__name__)


class AuthFactory:
    """
    Factory for building the login stack.

    This is the composition root that:
    - Builds the trust pool before any network I/O
    - Creates the TLS policy and authenticator
    - Returns only the public interface
    """

    @staticmethod
    def build_policy(tls_config: TLSConfig) -> TLSPolicy:
        """
        Build the TLS policy for a TLS configuration.

        Args:
            tls_config: CA sources and verification options

        Returns:
            TLSPolicy holding a fully built trust pool
        """
        source = select_trust_source(
            ca_pem=tls_config.ca_pem,
            ca_cert=tls_config.ca_cert,
            ca_path=tls_config.ca_path,
        )
        logger.info(f"Building trust pool from {type(source).__name__}")
        pool = build_trust_pool(source)

        return TLSPolicy(
            trust_pool=pool,
            skip_verify=tls_config.skip_verify,
            server_name=tls_config.server_name,
        )

    @staticmethod
    def build(
        vault_config: VaultConfig,
        transport: Optional[httpx.BaseTransport] = None,
    ) -> VaultAuthenticator:
        """
        Build the authenticator for a Vault configuration.

        Args:
            vault_config: Vault configuration
            transport: Optional httpx transport override

        Returns:
            VaultAuthenticator ready for a single login
        """
        policy = AuthFactory.build_policy(vault_config.tls)
        return VaultAuthenticator(policy, timeout=vault_config.timeout, transport=transport)
