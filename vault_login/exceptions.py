"""Exception hierarchy for vault-login.

Every failure the bootstrap can hit derives from VaultLoginError so the
command line entry point can report it as one message and exit non-zero.
"""

from typing import Optional


class VaultLoginError(Exception):
    """Base exception for all vault-login errors."""


class ConfigError(VaultLoginError):
    """Invalid or missing configuration."""


class IdentityTokenError(VaultLoginError):
    """The workload identity token could not be read."""


class CredentialWriteError(VaultLoginError):
    """A credential could not be persisted to disk."""

    def __init__(self, path: str, message: str = "failed to save credential"):
        super().__init__(f"{message} at {path}")
        self.path = path


# Trust anchor errors


class TrustError(VaultLoginError):
    """Errors building the certificate trust pool."""


class InvalidPEMError(TrustError):
    """No certificate could be parsed from PEM input."""

    def __init__(self, source: str, path: Optional[str] = None):
        if path:
            message = f"failed to parse PEM from {source} at {path}"
        else:
            message = f"failed to parse PEM from {source}"
        super().__init__(message)
        self.source = source
        self.path = path


class TrustIOError(TrustError):
    """A CA file or directory could not be read."""

    def __init__(self, path: str, message: str = "failed to read CA file from disk"):
        super().__init__(f"{message}: {path}")
        self.path = path


class SystemPoolUnavailableError(TrustError):
    """The platform default trust store is not accessible."""


# Authentication errors


class AuthError(VaultLoginError):
    """Errors during the login exchange."""


class TransportFailureError(AuthError):
    """The login request never produced an HTTP response."""

    def __init__(self, url: str, reason: str):
        super().__init__(f"failed to login at {url}: {reason}")
        self.url = url


class LoginRejectedError(AuthError):
    """The service answered the login with a non-200 status."""

    def __init__(self, status_code: int, body: str):
        super().__init__(
            f"failed to get successful response: status {status_code}, body: {body}"
        )
        self.status_code = status_code
        self.body = body


class MalformedResponseError(AuthError):
    """A 200 response whose body is not a valid login document."""

    def __init__(self, reason: str):
        super().__init__(f"failed to read login response: {reason}")
        self.reason = reason


__all__ = [
    "VaultLoginError",
    "ConfigError",
    "IdentityTokenError",
    "CredentialWriteError",
    "TrustError",
    "InvalidPEMError",
    "TrustIOError",
    "SystemPoolUnavailableError",
    "AuthError",
    "TransportFailureError",
    "LoginRejectedError",
    "MalformedResponseError",
]
