"""
Domain model for the persisted token record.
"""

from __future__ import annotations

from datetime import datetime, timedelta, timezone
from typing import Optional

from pydantic import BaseModel, Field

from app.schemas.auth import TokenGrant


class TokenRecord(BaseModel):
    """The single latest token kept in the key-value store."""

    access_token: str
    refresh_token: Optional[str] = None
    open_id: str
    expires_in: int = Field(..., description="Lifetime in seconds at issuance.")
    scope: str = ""
    token_type: str = "Bearer"
    created_at: datetime
    expires_at: datetime

    @classmethod
    def from_grant(
        cls, grant: TokenGrant, created_at: Optional[datetime] = None
    ) -> "TokenRecord":
        """Stamp a grant with its creation time and derived expiry."""
        created = created_at or datetime.now(timezone.utc)
        if created.tzinfo is None:
            created = created.replace(tzinfo=timezone.utc)
        return cls(
            access_token=grant.access_token,
            refresh_token=grant.refresh_token,
            open_id=grant.open_id,
            expires_in=grant.expires_in,
            scope=grant.scope,
            token_type=grant.token_type,
            created_at=created,
            expires_at=created + timedelta(seconds=grant.expires_in),
        )


__all__ = ["TokenRecord"]
