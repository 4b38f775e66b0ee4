"""Service layer exports."""

from .oauth_state import OAuthStateService, generate_state
from .token_cipher import TokenCipherService, TokenRecordDecryptError
from .token_store import (
    TokenNotFoundError,
    TokenStoreNotConfiguredError,
    TokenStoreService,
)

__all__ = [
    "OAuthStateService",
    "TokenCipherService",
    "TokenRecordDecryptError",
    "TokenNotFoundError",
    "TokenStoreNotConfiguredError",
    "TokenStoreService",
    "generate_state",
]
