"""
Trust Module - Black Box Interface

Purpose: Build the certificate trust pool used to verify Vault's TLS certificate
Interface: select_trust_source(), build_trust_pool()
Hidden: PEM parsing, directory walking, system store probing
"""

from .anchor import (
    CADirectory,
    CAFile,
    CertificatePool,
    InlinePEM,
    SystemDefault,
    TrustSource,
    build_trust_pool,
    select_trust_source,
)

__all__ = [
    "CADirectory",
    "CAFile",
    "CertificatePool",
    "InlinePEM",
    "SystemDefault",
    "TrustSource",
    "build_trust_pool",
    "select_trust_source",
]
