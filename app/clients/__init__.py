"""Expose constructed client wrappers."""

from .kv_store import (
    InMemoryKeyValueStore,
    KeyValueStore,
    KeyValueStoreError,
    UnavailableKeyValueStore,
)
from .sqlite_store import SQLiteKeyValueStore
from .tiktok_auth import OAuthStateEncoder, TikTokOAuthClient

__all__ = [
    "InMemoryKeyValueStore",
    "KeyValueStore",
    "KeyValueStoreError",
    "OAuthStateEncoder",
    "SQLiteKeyValueStore",
    "TikTokOAuthClient",
    "UnavailableKeyValueStore",
]
