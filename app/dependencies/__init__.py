"""Expose dependency helpers for FastAPI routers."""

from .clients import (
    get_key_value_store,
    get_oauth_state_service,
    get_tiktok_oauth_client,
    get_token_cipher_service,
    get_token_store_service,
)
from .config import SettingsDependency, get_app_settings, require_api_access

__all__ = [
    "SettingsDependency",
    "get_app_settings",
    "get_key_value_store",
    "get_oauth_state_service",
    "get_tiktok_oauth_client",
    "get_token_cipher_service",
    "get_token_store_service",
    "require_api_access",
]
