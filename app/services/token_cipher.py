"""At-rest encryption for the stored token record."""

from __future__ import annotations

import base64

from cryptography.fernet import Fernet, InvalidToken
from cryptography.hazmat.primitives import hashes
from cryptography.hazmat.primitives.kdf.hkdf import HKDF

from app.models.token import TokenRecord

_KEY_CONTEXT = b"tiktok-oauth-gateway/token-record"


class TokenRecordDecryptError(ValueError):
    """Raised when a stored value was sealed under another secret or is corrupted."""


class TokenCipherService:
    """Seal ``TokenRecord`` instances into opaque Fernet tokens.

    The Fernet key is expanded from ``TOKEN_ENCRYPTION_SECRET`` with HKDF, bound
    to the token-record context, so the same secret reused elsewhere does not
    yield the same key.
    """

    def __init__(self, *, secret: str) -> None:
        if not secret:
            raise ValueError("TOKEN_ENCRYPTION_SECRET must not be empty.")
        key = HKDF(
            algorithm=hashes.SHA256(),
            length=32,
            salt=None,
            info=_KEY_CONTEXT,
        ).derive(secret.encode("utf-8"))
        self._fernet = Fernet(base64.urlsafe_b64encode(key))

    def seal(self, record: TokenRecord) -> str:
        return self._fernet.encrypt(record.model_dump_json().encode("utf-8")).decode("ascii")

    def unseal(self, sealed: str) -> TokenRecord:
        try:
            payload = self._fernet.decrypt(sealed.encode("ascii"))
        except (InvalidToken, UnicodeEncodeError) as exc:
            raise TokenRecordDecryptError("Stored token record could not be decrypted.") from exc
        return TokenRecord.model_validate_json(payload)


__all__ = ["TokenCipherService", "TokenRecordDecryptError"]
