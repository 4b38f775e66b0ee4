"""
Factory functions to provide shared clients and services as FastAPI dependencies.
"""

import logging
import secrets
from functools import lru_cache
from typing import Optional

from app.clients import (
    InMemoryKeyValueStore,
    KeyValueStore,
    KeyValueStoreError,
    OAuthStateEncoder,
    SQLiteKeyValueStore,
    TikTokOAuthClient,
    UnavailableKeyValueStore,
)
from app.core.config import get_settings
from app.services import OAuthStateService, TokenCipherService, TokenStoreService

logger = logging.getLogger(__name__)


@lru_cache()
def _settings():
    """Internal helper to cache settings for client factories."""
    return get_settings()


@lru_cache()
def get_tiktok_oauth_client() -> TikTokOAuthClient:
    """Create a singleton TikTok OAuth client."""
    settings = _settings()
    return TikTokOAuthClient(
        settings.tiktok,
        settings.provider,
        timeout=settings.http_timeout_seconds,
    )


@lru_cache()
def get_oauth_state_service() -> OAuthStateService:
    """Provide the state cookie signer.

    Without an explicit state secret or client secret, a per-process key is
    used, which only holds for single-process deployments.
    """
    settings = _settings()
    secret = settings.security.state_secret or settings.tiktok.client_secret
    if not secret:
        logger.warning("No OAuth state secret configured; using a per-process key.")
        secret = secrets.token_urlsafe(32)
    return OAuthStateService(
        OAuthStateEncoder(secret_key=secret),
        ttl_seconds=settings.security.state_ttl_seconds,
    )


@lru_cache()
def get_key_value_store() -> Optional[KeyValueStore]:
    """Build the configured key-value backend, or ``None`` when disabled.

    A backend that cannot be opened is replaced by one that fails every call,
    so token persistence degrades instead of failing the request.
    """
    store_settings = _settings().store
    try:
        if store_settings.backend == "memory":
            return InMemoryKeyValueStore()
        if store_settings.backend == "sqlite":
            return SQLiteKeyValueStore(store_settings.sqlite_path)
        if store_settings.backend == "dynamodb":
            from app.clients.dynamodb import DynamoDBKeyValueStore

            return DynamoDBKeyValueStore(store_settings)
    except KeyValueStoreError as exc:
        logger.warning(
            "Key-value backend %r unavailable: %s", store_settings.backend, exc
        )
        return UnavailableKeyValueStore(str(exc))
    return None


@lru_cache()
def get_token_cipher_service() -> Optional[TokenCipherService]:
    """Provide record encryption when a secret is configured."""
    secret = _settings().security.token_encryption_secret
    if not secret:
        return None
    return TokenCipherService(secret=secret)


@lru_cache()
def get_token_store_service() -> TokenStoreService:
    """Provide the latest-token store."""
    return TokenStoreService(
        store=get_key_value_store(),
        cipher=get_token_cipher_service(),
    )


__all__ = [
    "get_key_value_store",
    "get_oauth_state_service",
    "get_tiktok_oauth_client",
    "get_token_cipher_service",
    "get_token_store_service",
]
