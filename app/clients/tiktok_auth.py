"""
TikTok OAuth utilities.

These helpers build the consent URL, exchange authorization codes and refresh
access tokens against the TikTok v2 token endpoint.
"""

from __future__ import annotations

import base64
import binascii
import hmac
import json
import logging
from hashlib import sha256
from typing import Any, Dict, Optional
from urllib.parse import urlencode

import httpx

from app.core.config import OAuthProviderConfig, TikTokSettings
from app.schemas.auth import TokenGrant

logger = logging.getLogger(__name__)

_DEFAULT_EXCHANGE_ERROR = "Token exchange failed"


class OAuthError(Exception):
    """Base class for OAuth failures carrying a message safe to show callers."""

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class OAuthConfigurationError(OAuthError):
    """Raised when the client key or secret is not configured."""


class OAuthRequestValidationError(OAuthError):
    """Raised when required request input is missing before any network call."""


class OAuthTokenExchangeError(OAuthError):
    """Raised when the token endpoint rejects a request or cannot be reached."""


class OAuthStateError(OAuthError):
    """Raised when a callback state value is missing, forged or expired."""


class OAuthStateEncoder:
    """Encode and decode OAuth state values to guard against tampering."""

    _SIGNATURE_SIZE = 32

    def __init__(self, secret_key: str) -> None:
        self._secret_key = secret_key.encode("utf-8")

    def encode(self, payload: Dict[str, Any]) -> str:
        serialized = json.dumps(payload, separators=(",", ":"), sort_keys=True)
        signature = hmac.new(self._secret_key, serialized.encode("utf-8"), sha256).digest()
        encoded = base64.urlsafe_b64encode(signature + serialized.encode("utf-8"))
        # Unpadded so the value is a plain cookie token.
        return encoded.decode("utf-8").rstrip("=")

    def decode(self, token: str) -> Dict[str, Any]:
        padded = token + "=" * (-len(token) % 4)
        try:
            decoded = base64.urlsafe_b64decode(padded.encode("utf-8"))
        except (binascii.Error, ValueError) as exc:
            raise OAuthStateError("Malformed OAuth state.") from exc
        signature = decoded[: self._SIGNATURE_SIZE]
        serialized = decoded[self._SIGNATURE_SIZE :]
        expected_signature = hmac.new(self._secret_key, serialized, sha256).digest()
        if not hmac.compare_digest(signature, expected_signature):
            raise OAuthStateError("Invalid OAuth state signature.")
        try:
            payload = json.loads(serialized)
        except ValueError as exc:
            raise OAuthStateError("Malformed OAuth state.") from exc
        if not isinstance(payload, dict):
            raise OAuthStateError("Malformed OAuth state.")
        return payload


class TikTokOAuthClient:
    """Build TikTok authorization URLs and call the token endpoint."""

    def __init__(
        self,
        tiktok_settings: TikTokSettings,
        provider: OAuthProviderConfig,
        *,
        timeout: float = 10.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self._tiktok = tiktok_settings
        self._provider = provider
        self._timeout = timeout
        self._transport = transport

    def build_authorization_url(self, state: str) -> str:
        """Construct the TikTok OAuth consent URL."""
        if not self._tiktok.client_key:
            raise OAuthConfigurationError("Missing TIKTOK_CLIENT_KEY environment variable")

        params = {
            "client_key": self._tiktok.client_key,
            "scope": self._provider.scopes,
            "response_type": "code",
            "redirect_uri": self._provider.redirect_uri,
            "state": state,
        }
        return f"{self._provider.auth_url}?{urlencode(params)}"

    async def exchange_authorization_code(self, code: str) -> TokenGrant:
        """
        Exchange an authorization code for tokens.

        The provider body is normalized into a ``TokenGrant``; the caller stamps
        ``created_at``/``expires_at`` when building the stored record.
        """
        if not code:
            raise OAuthRequestValidationError("Authorization code not received from TikTok")
        client_key, client_secret = self._require_credentials()

        payload = {
            "client_key": client_key,
            "client_secret": client_secret,
            "code": code,
            "grant_type": "authorization_code",
            "redirect_uri": self._provider.redirect_uri,
        }
        response = await self._post_form(
            self._provider.token_url, payload, headers={"Cache-Control": "no-cache"}
        )
        token_payload = self._decode_body(response)

        if not response.is_success or token_payload.get("error"):
            message = _provider_error_message(token_payload)
            logger.warning(
                "TikTok token exchange rejected (status=%s, error=%s)",
                response.status_code,
                token_payload.get("error"),
            )
            raise OAuthTokenExchangeError(message)

        try:
            return TokenGrant.model_validate(token_payload)
        except ValueError as exc:
            raise OAuthTokenExchangeError(
                "Incomplete token payload returned from TikTok."
            ) from exc

    async def refresh_access_token(self, refresh_token: str) -> Dict[str, Any]:
        """
        Refresh an access token.

        Returns the provider body untouched, including provider-shaped errors.
        """
        if not refresh_token:
            raise OAuthRequestValidationError("refresh_token required")
        client_key, client_secret = self._require_credentials()

        payload = {
            "client_key": client_key,
            "client_secret": client_secret,
            "grant_type": "refresh_token",
            "refresh_token": refresh_token,
        }
        response = await self._post_form(self._provider.refresh_token_url, payload)
        return self._decode_body(response)

    def _require_credentials(self) -> tuple[str, str]:
        client_key = self._tiktok.client_key
        client_secret = self._tiktok.client_secret
        if not client_key or not client_secret:
            raise OAuthConfigurationError(
                "Missing TIKTOK_CLIENT_KEY or TIKTOK_CLIENT_SECRET environment variables"
            )
        return client_key, client_secret

    async def _post_form(
        self,
        url: str,
        payload: Dict[str, str],
        headers: Optional[Dict[str, str]] = None,
    ) -> httpx.Response:
        try:
            async with httpx.AsyncClient(
                timeout=self._timeout, transport=self._transport
            ) as client:
                return await client.post(url, data=payload, headers=headers)
        except httpx.TimeoutException as exc:
            logger.warning("TikTok token endpoint timed out after %ss", self._timeout)
            raise OAuthTokenExchangeError("TikTok token endpoint timed out") from exc
        except httpx.HTTPError as exc:
            logger.warning("TikTok token endpoint unreachable: %s", exc.__class__.__name__)
            raise OAuthTokenExchangeError("TikTok token endpoint unreachable") from exc

    @staticmethod
    def _decode_body(response: httpx.Response) -> Dict[str, Any]:
        try:
            body = response.json()
        except ValueError as exc:
            logger.warning(
                "TikTok token endpoint returned a non-JSON body (status=%s)",
                response.status_code,
            )
            raise OAuthTokenExchangeError(_DEFAULT_EXCHANGE_ERROR) from exc
        if not isinstance(body, dict):
            raise OAuthTokenExchangeError(_DEFAULT_EXCHANGE_ERROR)
        return body


def _provider_error_message(payload: Dict[str, Any]) -> str:
    if payload.get("error_description"):
        return str(payload["error_description"])
    error = payload.get("error")
    if isinstance(error, dict) and error.get("message"):
        return str(error["message"])
    if payload.get("message"):
        return str(payload["message"])
    return _DEFAULT_EXCHANGE_ERROR


__all__ = [
    "OAuthConfigurationError",
    "OAuthError",
    "OAuthRequestValidationError",
    "OAuthStateEncoder",
    "OAuthStateError",
    "OAuthTokenExchangeError",
    "TikTokOAuthClient",
]
