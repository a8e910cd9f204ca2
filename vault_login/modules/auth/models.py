"""
Vault login response models.

Only the fields the bootstrap needs are required; the rest of Vault's
auth block is optional and used for logging.
"""

from typing import Any

from pydantic import BaseModel, Field, StrictStr


class LoginAuth(BaseModel):
    """The ``auth`` block of a Vault login response."""

    client_token: StrictStr = Field(..., description="Issued Vault token")
    accessor: StrictStr = Field(..., description="Accessor for the issued token")
    # Logged only, never validated
    policies: Any = Field(None, description="Policies attached to the token")
    lease_duration: Any = Field(None, description="Token TTL in seconds")
    renewable: Any = Field(None, description="Whether the token can be renewed")


class LoginResponse(BaseModel):
    """Body of a successful ``POST /v1/auth/<mount>/login``."""

    auth: LoginAuth
