"""Authentication interfaces following Black Box Design principles."""
import json
from dataclasses import dataclass, field
from typing import Protocol


@dataclass(frozen=True)
class LoginRequest:
    """A single login call against a Vault auth mount."""
    endpoint: str
    role: str
    identity_token: str = field(repr=False)

    def __post_init__(self):
        if not self.role:
            raise ValueError("role is required")

    @classmethod
    def for_mount(
        cls,
        address: str,
        mount_path: str,
        role: str,
        identity_token: str,
    ) -> "LoginRequest":
        """Build a request for ``<address>/v1/auth/<mount_path>/login``."""
        endpoint = f"{address.rstrip('/')}/v1/auth/{mount_path.strip('/')}/login"
        return cls(endpoint=endpoint, role=role, identity_token=identity_token)

    def body(self) -> str:
        """JSON request body."""
        return json.dumps({"role": self.role, "jwt": self.identity_token})


@dataclass(frozen=True)
class LoginResult:
    """Credential issued by a successful login."""
    credential: str = field(repr=False)
    credential_handle: str


class Authenticator(Protocol):
    """Protocol for login implementations - allows swappable implementations."""

    def login(self, request: LoginRequest) -> LoginResult:
        """
        Exchange an identity token for a credential.

        Args:
            request: Login endpoint, role and identity token

        Returns:
            LoginResult with the credential and its handle
        """
        ...
