"""
CSRF state for the authorization redirect.

The nonce is bound to the browser through a signed cookie so the callback can
check that the echoed ``state`` was issued by this service.
"""

from __future__ import annotations

import hmac
import secrets
from datetime import datetime, timedelta, timezone
from typing import Optional

from app.clients.tiktok_auth import OAuthStateEncoder, OAuthStateError

STATE_COOKIE_NAME = "oauth_state"


def generate_state() -> str:
    """Return 16 random bytes as a 32-character lowercase hex string."""
    return secrets.token_hex(16)


class OAuthStateService:
    """Issue and verify state cookies."""

    def __init__(self, encoder: OAuthStateEncoder, ttl_seconds: int) -> None:
        self._encoder = encoder
        self._ttl = timedelta(seconds=ttl_seconds)

    @property
    def ttl_seconds(self) -> int:
        return int(self._ttl.total_seconds())

    def issue(self, nonce: str, issued_at: Optional[datetime] = None) -> str:
        """Return the signed cookie value binding ``nonce``."""
        issued = issued_at or datetime.now(timezone.utc)
        return self._encoder.encode({"nonce": nonce, "issued_at": issued.isoformat()})

    def verify(self, state: Optional[str], cookie_value: Optional[str]) -> None:
        if not state:
            raise OAuthStateError("State parameter missing from callback.")
        if not cookie_value:
            raise OAuthStateError("No authorization request is pending for this browser.")

        payload = self._encoder.decode(cookie_value)
        nonce = payload.get("nonce")
        issued_at_raw = payload.get("issued_at")
        if not isinstance(nonce, str) or not isinstance(issued_at_raw, str):
            raise OAuthStateError("Malformed OAuth state.")
        if not hmac.compare_digest(nonce, state):
            raise OAuthStateError("State parameter does not match the issued value.")

        try:
            issued_at = datetime.fromisoformat(issued_at_raw)
        except ValueError as exc:
            raise OAuthStateError("Malformed OAuth state.") from exc
        if issued_at.tzinfo is None:
            issued_at = issued_at.replace(tzinfo=timezone.utc)
        if datetime.now(timezone.utc) - issued_at > self._ttl:
            raise OAuthStateError("OAuth state has expired.")


__all__ = ["OAuthStateService", "STATE_COOKIE_NAME", "generate_state"]
