"""
Authentication Module - Black Box Interface

Purpose: Exchange a workload identity token for a Vault token
Interface: login(), VaultAuthenticator.login(), AuthFactory.build()
Hidden: TLS context setup, HTTP/2 negotiation, response validation

This module can be replaced with any other login implementation without
affecting the trust or storage modules.
"""

from .factory import AuthFactory
from .interfaces import Authenticator, LoginRequest, LoginResult
from .login import TLSPolicy, VaultAuthenticator, login, parse_login_response

__all__ = [
    "AuthFactory",
    "Authenticator",
    "LoginRequest",
    "LoginResult",
    "TLSPolicy",
    "VaultAuthenticator",
    "login",
    "parse_login_response",
]
