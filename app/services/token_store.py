"""
Persistence of the latest TikTok token record.
"""

from __future__ import annotations

import logging
from typing import Optional

from pydantic import ValidationError

from app.clients.kv_store import KeyValueStore, KeyValueStoreError
from app.models.token import TokenRecord
from app.services.token_cipher import TokenCipherService

logger = logging.getLogger(__name__)


class TokenNotFoundError(Exception):
    """Raised when no unexpired token record is stored."""


class TokenStoreNotConfiguredError(Exception):
    """Raised when no key-value store is attached."""


class TokenStoreService:
    """Keep a single token record under a fixed key, expiring with the token."""

    RECORD_KEY = "latest_token"

    def __init__(
        self,
        store: Optional[KeyValueStore] = None,
        cipher: Optional[TokenCipherService] = None,
    ) -> None:
        self._store = store
        self._cipher = cipher

    @property
    def enabled(self) -> bool:
        return self._store is not None

    def put(self, record: TokenRecord) -> bool:
        """Store ``record``, replacing any previous one.

        Persistence is best effort: returns ``False`` instead of raising when no
        store is attached or the write fails.
        """
        if self._store is None:
            return False

        if self._cipher is not None:
            serialized = self._cipher.seal(record)
        else:
            serialized = record.model_dump_json()
        try:
            self._store.put(self.RECORD_KEY, serialized, record.expires_in)
        except KeyValueStoreError:
            logger.warning("Failed to persist token record", exc_info=True)
            return False
        logger.info("Stored token record for open_id %s", record.open_id)
        return True

    def get(self) -> TokenRecord:
        if self._store is None:
            raise TokenStoreNotConfiguredError("KV namespace not configured")

        raw = self._store.get(self.RECORD_KEY)
        if raw is None:
            raise TokenNotFoundError("No tokens found")

        try:
            if self._cipher is not None:
                return self._cipher.unseal(raw)
            return TokenRecord.model_validate_json(raw)
        except (ValueError, ValidationError) as exc:
            logger.warning("Discarding unreadable token record: %s", exc.__class__.__name__)
            raise TokenNotFoundError("No tokens found") from exc


__all__ = ["TokenNotFoundError", "TokenStoreNotConfiguredError", "TokenStoreService"]
