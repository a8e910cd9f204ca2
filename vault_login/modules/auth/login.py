"""
Vault Kubernetes auth login implementing the Authenticator interface.

This module follows Black Box Design principles:
- Implements Authenticator protocol
- Accepts trust pool and TLS options via dependency injection
- No direct environment variable access
"""

import json
import logging
import ssl
from dataclasses import dataclass
from typing import Any, Dict, Optional

import httpx
from pydantic import ValidationError

from .interfaces import Authenticator, LoginRequest, LoginResult
from .models import LoginResponse
from ..trust import CertificatePool
from ...config.provider import DEFAULT_CLIENT_TIMEOUT
from ...exceptions import LoginRejectedError, MalformedResponseError, TransportFailureError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class TLSPolicy:
    """
    TLS settings for one login.

    Attributes:
        trust_pool: Roots used to verify the server certificate
        skip_verify: Disable certificate verification entirely (dev/test only)
        server_name: Hostname to verify instead of the one in the URL
    """
    trust_pool: CertificatePool
    skip_verify: bool = False
    server_name: Optional[str] = None

    def ssl_context(self) -> ssl.SSLContext:
        """Create the client SSL context for this policy."""
        ctx = ssl.SSLContext(ssl.PROTOCOL_TLS_CLIENT)
        ctx.minimum_version = ssl.TLSVersion.TLSv1_2
        ctx.set_alpn_protocols(["h2", "http/1.1"])

        self.trust_pool.load_into(ctx)

        if self.skip_verify:
            ctx.check_hostname = False
            ctx.verify_mode = ssl.CERT_NONE

        return ctx


class VaultAuthenticator(Authenticator):
    """
    Logs in to Vault with a workload identity token.

    This class is a black box that:
    - Builds an HTTP/2-capable HTTPS client from a TLSPolicy
    - Performs exactly one POST per login call
    - Maps every failure onto the AuthError hierarchy
    """

    def __init__(
        self,
        policy: TLSPolicy,
        timeout: Optional[float] = DEFAULT_CLIENT_TIMEOUT,
        transport: Optional[httpx.BaseTransport] = None,
    ):
        """
        Initialize the authenticator.

        Args:
            policy: TLS policy for the connection
            timeout: Overall timeout in seconds, None for no timeout
            transport: Optional httpx transport override
        """
        self.policy = policy
        self.timeout = timeout
        self.transport = transport

        if policy.skip_verify:
            logger.warning("TLS certificate verification is disabled (VAULT_SKIP_VERIFY)")

    def _client(self) -> httpx.Client:
        return httpx.Client(
            verify=self.policy.ssl_context(),
            http2=True,
            timeout=httpx.Timeout(self.timeout),
            transport=self.transport,
            follow_redirects=True,
            trust_env=False,
        )

    def login(self, request: LoginRequest) -> LoginResult:
        """
        Exchange the identity token for a Vault token.

        Args:
            request: Login endpoint, role and identity token

        Returns:
            LoginResult with the Vault token and its accessor

        Raises:
            TransportFailureError: No HTTP response was received
            LoginRejectedError: Vault answered with a non-200 status
            MalformedResponseError: The 200 body is not a login document
        """
        headers = {"Content-Type": "application/json"}
        extensions: Dict[str, Any] = {}
        if self.policy.server_name:
            extensions["sni_hostname"] = self.policy.server_name

        logger.debug(f"Logging in to {request.endpoint} with role {request.role}")

        try:
            with self._client() as client:
                with client.stream(
                    "POST",
                    request.endpoint,
                    content=request.body().encode("utf-8"),
                    headers=headers,
                    extensions=extensions,
                ) as response:
                    response.read()
        except (httpx.HTTPError, httpx.InvalidURL) as e:
            raise TransportFailureError(request.endpoint, str(e) or type(e).__name__) from e

        logger.debug(f"Login response: {response.http_version} {response.status_code}")

        if response.status_code != 200:
            raise LoginRejectedError(response.status_code, response.text)

        return parse_login_response(response.content)


def parse_login_response(content: bytes) -> LoginResult:
    """
    Extract the token and accessor from a login response body.

    Args:
        content: Raw response body

    Returns:
        LoginResult with the Vault token and its accessor

    Raises:
        MalformedResponseError: Body is not JSON or lacks the auth fields
    """
    try:
        document = json.loads(content)
    except ValueError as e:
        raise MalformedResponseError(f"body is not valid JSON: {e}") from e

    try:
        parsed = LoginResponse.model_validate(document)
    except ValidationError as e:
        errors = ", ".join(
            f"{'.'.join(str(part) for part in err['loc'])}: {err['msg']}"
            for err in e.errors()
        )
        raise MalformedResponseError(errors) from e

    auth = parsed.auth
    logger.info(
        f"Vault login succeeded: accessor={auth.accessor} "
        f"policies={auth.policies or []} lease_duration={auth.lease_duration}"
    )
    return LoginResult(credential=auth.client_token, credential_handle=auth.accessor)


def login(
    policy: TLSPolicy,
    request: LoginRequest,
    timeout: Optional[float] = DEFAULT_CLIENT_TIMEOUT,
) -> LoginResult:
    """Perform a single login with a fresh authenticator."""
    return VaultAuthenticator(policy, timeout=timeout).login(request)
