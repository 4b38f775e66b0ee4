"""Public schema exports."""

from .auth import RefreshTokenRequest, StatusResponse, TokenGrant

__all__ = [
    "RefreshTokenRequest",
    "StatusResponse",
    "TokenGrant",
]
