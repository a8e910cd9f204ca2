"""
Trust anchor construction for the Vault TLS connection.

This module is a black box that:
- Selects exactly one CA source from configuration
- Parses PEM certificates with cryptography
- Returns a frozen CertificatePool before any network I/O happens
"""

import logging
import os
import re
import ssl
from dataclasses import dataclass
from typing import List, Optional, Tuple, Union

from cryptography import x509
from cryptography.hazmat.primitives import serialization

from ...exceptions import InvalidPEMError, SystemPoolUnavailableError, TrustIOError

logger = logging.getLogger(__name__)

_CERTIFICATE_BLOCK = re.compile(
    rb"-----BEGIN (?:X509 )?CERTIFICATE-----\r?\n.*?-----END (?:X509 )?CERTIFICATE-----",
    re.DOTALL,
)


@dataclass(frozen=True)
class InlinePEM:
    """PEM text supplied directly in configuration."""
    text: str


@dataclass(frozen=True)
class CAFile:
    """A single file holding one or more PEM certificates."""
    path: str


@dataclass(frozen=True)
class CADirectory:
    """A directory tree of PEM files, walked recursively."""
    path: str


@dataclass(frozen=True)
class SystemDefault:
    """The platform's default trusted roots."""


TrustSource = Union[InlinePEM, CAFile, CADirectory, SystemDefault]


def select_trust_source(
    ca_pem: Optional[str] = None,
    ca_cert: Optional[str] = None,
    ca_path: Optional[str] = None,
) -> TrustSource:
    """
    Pick the active CA source.

    Precedence is inline PEM, then CA file, then CA directory, then the
    system default store. Empty values count as unset.
    """
    if ca_pem:
        return InlinePEM(ca_pem)
    if ca_cert:
        return CAFile(ca_cert)
    if ca_path:
        return CADirectory(ca_path)
    return SystemDefault()


@dataclass(frozen=True)
class CertificatePool:
    """
    Immutable set of trusted certificate authorities.

    Attributes:
        certificates: Explicitly trusted CA certificates
        system_roots: Whether the platform default store is trusted instead
    """
    certificates: Tuple[x509.Certificate, ...] = ()
    system_roots: bool = False

    def __len__(self) -> int:
        return len(self.certificates)

    def to_pem(self) -> str:
        """Concatenated PEM bundle of the explicit certificates."""
        return "".join(
            cert.public_bytes(serialization.Encoding.PEM).decode("ascii")
            for cert in self.certificates
        )

    def load_into(self, context: ssl.SSLContext) -> None:
        """Install the trusted roots into an SSL context."""
        if self.system_roots:
            context.load_default_certs(ssl.Purpose.SERVER_AUTH)
        elif self.certificates:
            context.load_verify_locations(cadata=self.to_pem())


def _parse_pem(data: bytes, source: str, path: Optional[str] = None) -> List[x509.Certificate]:
    """
    Load every certificate block in data.

    Blocks that do not parse are skipped; only input without a single
    usable certificate is rejected.
    """
    certs: List[x509.Certificate] = []
    for match in _CERTIFICATE_BLOCK.finditer(data):
        try:
            certs.append(x509.load_pem_x509_certificate(match.group(0)))
        except ValueError as e:
            logger.warning(f"Skipping unparsable certificate in {path or source}: {e}")
    if not certs:
        raise InvalidPEMError(source, path)
    return certs


def _load_file(path: str) -> List[x509.Certificate]:
    try:
        with open(path, "rb") as f:
            data = f.read()
    except OSError as e:
        raise TrustIOError(path) from e

    return _parse_pem(data, "CA file", path)


def _load_directory(root: str) -> List[x509.Certificate]:
    if not os.path.isdir(root):
        raise TrustIOError(root, "failed to load CAs")

    def _on_error(err: OSError) -> None:
        raise TrustIOError(root, "failed to load CAs") from err

    certs: List[x509.Certificate] = []
    for dirpath, dirnames, filenames in os.walk(root, onerror=_on_error):
        dirnames.sort()
        for name in sorted(filenames):
            path = os.path.join(dirpath, name)
            if not os.path.isfile(path):
                logger.debug(f"Skipping non-regular file {path}")
                continue
            # First bad file aborts the whole walk
            certs.extend(_load_file(path))
    return certs


def _check_system_roots() -> None:
    context = ssl.create_default_context()
    if context.cert_store_stats().get("x509_ca", 0) > 0:
        return

    # OpenSSL loads hashed CA directories lazily, so an empty store count is
    # not conclusive on its own
    paths = ssl.get_default_verify_paths()
    if paths.cafile and os.path.isfile(paths.cafile):
        return
    if paths.capath and os.path.isdir(paths.capath):
        return

    raise SystemPoolUnavailableError("failed to load system certs")


def build_trust_pool(source: TrustSource) -> CertificatePool:
    """
    Build the certificate pool for a trust source.

    Args:
        source: The active CA source

    Returns:
        A frozen CertificatePool

    Raises:
        InvalidPEMError: No certificate could be parsed from an input
        TrustIOError: A CA file or directory could not be read
        SystemPoolUnavailableError: The platform default store is not accessible
    """
    if isinstance(source, InlinePEM):
        certs = _parse_pem(source.text.encode("utf-8"), "inline PEM")
    elif isinstance(source, CAFile):
        certs = _load_file(source.path)
    elif isinstance(source, CADirectory):
        certs = _load_directory(source.path)
    elif isinstance(source, SystemDefault):
        _check_system_roots()
        logger.debug("Using system default trusted roots")
        return CertificatePool(system_roots=True)
    else:
        raise TypeError(f"unsupported trust source: {source!r}")

    pool = CertificatePool(certificates=tuple(certs))
    logger.debug(f"Loaded {len(pool)} trusted CA certificate(s) from {type(source).__name__}")
    return pool
