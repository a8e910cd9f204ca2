"""
Identity Module - Black Box Interface

Purpose: Read the workload identity token issued by the platform
Interface: read_identity_token(), describe_identity_token()
Hidden: File handling, JWT claim layout

The token is never verified locally; Vault validates it.
"""

import logging
from typing import Any, Dict

import jwt

from ...exceptions import IdentityTokenError

logger = logging.getLogger(__name__)


def read_identity_token(path: str) -> str:
    """
    Read the identity token from disk.

    Args:
        path: Token file, normally the projected service account token

    Returns:
        The token with surrounding whitespace removed
    """
    try:
        with open(path, "rb") as f:
            data = f.read()
    except OSError as e:
        raise IdentityTokenError(f"failed to read jwt token at {path}: {e}") from e

    try:
        token = data.strip().decode("utf-8")
    except UnicodeDecodeError as e:
        raise IdentityTokenError(f"jwt token at {path} is not valid UTF-8") from e

    if not token:
        raise IdentityTokenError(f"jwt token at {path} is empty")
    return token


def describe_identity_token(token: str) -> Dict[str, Any]:
    """
    Summarize token claims for log output.

    Claims are decoded without signature verification and must not be
    used for any trust decision.

    Args:
        token: Identity token

    Returns:
        Subset of claims, empty if the token is not a JWT
    """
    try:
        claims = jwt.decode(token, options={"verify_signature": False})
    except jwt.InvalidTokenError as e:
        logger.debug(f"Identity token is not a decodable JWT: {e}")
        return {}

    info = {
        "sub": claims.get("sub"),
        "iss": claims.get("iss"),
        "exp": claims.get("exp"),
    }

    # Projected tokens nest namespace and service account under kubernetes.io,
    # legacy secret-based tokens use flat claims
    k8s = claims.get("kubernetes.io")
    if isinstance(k8s, dict):
        info["namespace"] = k8s.get("namespace")
        service_account = k8s.get("serviceaccount")
        if isinstance(service_account, dict):
            info["service_account"] = service_account.get("name")
    else:
        info["namespace"] = claims.get("kubernetes.io/serviceaccount/namespace")
        info["service_account"] = claims.get("kubernetes.io/serviceaccount/service-account.name")

    return {key: value for key, value in info.items() if value is not None}


__all__ = ["read_identity_token", "describe_identity_token"]
