"""Schemas related to OAuth flows."""

from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class TokenGrant(BaseModel):
    """Normalized token endpoint response for an authorization-code exchange."""

    model_config = ConfigDict(extra="ignore")

    access_token: str
    refresh_token: Optional[str] = None
    open_id: str
    expires_in: int
    scope: str = ""
    token_type: str = "Bearer"
    refresh_expires_in: Optional[int] = Field(
        None, description="Remaining lifetime of the refresh token, when reported."
    )


class RefreshTokenRequest(BaseModel):
    """Body accepted by the refresh endpoint."""

    refresh_token: Optional[str] = None


class StatusResponse(BaseModel):
    status: str
    version: str
    configured: bool
    kv_enabled: bool
    endpoints: list[str]


__all__ = ["RefreshTokenRequest", "StatusResponse", "TokenGrant"]
