try:
    from . import _bootstrap  # noqa: F401
except Exception:  # pragma: no cover - fallback for direct execution
    import _bootstrap  # type: ignore # noqa: F401

from datetime import datetime, timezone

import pytest

from app.clients.kv_store import InMemoryKeyValueStore, KeyValueStoreError
from app.models.token import TokenRecord
from app.schemas import TokenGrant
from app.services.token_cipher import TokenCipherService, TokenRecordDecryptError
from app.services.token_store import (
    TokenNotFoundError,
    TokenStoreNotConfiguredError,
    TokenStoreService,
)


class FakeClock:
    def __init__(self, start: float = 1_700_000_000.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now


class BrokenStore:
    def put(self, key: str, value: str, ttl_seconds: int) -> None:
        raise KeyValueStoreError("backend offline")

    def get(self, key: str):
        raise KeyValueStoreError("backend offline")


def _record(expires_in: int = 3600, access_token: str = "A") -> TokenRecord:
    grant = TokenGrant(
        access_token=access_token,
        refresh_token="R",
        open_id="U1",
        expires_in=expires_in,
        scope="s1",
        token_type="Bearer",
    )
    return TokenRecord.from_grant(
        grant, created_at=datetime(2024, 1, 1, 12, 0, tzinfo=timezone.utc)
    )


def test_get_returns_exact_record_before_expiry() -> None:
    clock = FakeClock()
    service = TokenStoreService(store=InMemoryKeyValueStore(clock=clock))
    record = _record()

    assert service.put(record) is True
    clock.now += 3599

    assert service.get() == record


def test_get_reports_not_found_after_ttl_elapses() -> None:
    clock = FakeClock()
    service = TokenStoreService(store=InMemoryKeyValueStore(clock=clock))
    service.put(_record())
    clock.now += 3600

    with pytest.raises(TokenNotFoundError):
        service.get()


def test_zero_lifetime_record_is_immediately_expired() -> None:
    service = TokenStoreService(store=InMemoryKeyValueStore())
    service.put(_record(expires_in=0))

    with pytest.raises(TokenNotFoundError):
        service.get()


def test_put_twice_keeps_single_record() -> None:
    store = InMemoryKeyValueStore()
    service = TokenStoreService(store=store)
    record = _record()

    service.put(record)
    service.put(record)

    assert service.get() == record
    assert list(store._items) == [TokenStoreService.RECORD_KEY]


def test_new_record_overwrites_previous_one() -> None:
    service = TokenStoreService(store=InMemoryKeyValueStore())
    service.put(_record(access_token="first"))
    service.put(_record(access_token="second"))

    assert service.get().access_token == "second"


def test_missing_store_is_distinct_from_missing_record() -> None:
    unconfigured = TokenStoreService(store=None)
    empty = TokenStoreService(store=InMemoryKeyValueStore())

    assert unconfigured.enabled is False
    assert unconfigured.put(_record()) is False
    with pytest.raises(TokenStoreNotConfiguredError):
        unconfigured.get()
    with pytest.raises(TokenNotFoundError):
        empty.get()


def test_store_failure_does_not_fail_put() -> None:
    service = TokenStoreService(store=BrokenStore())

    assert service.put(_record()) is False


def test_encrypted_record_round_trips_and_is_opaque_at_rest() -> None:
    store = InMemoryKeyValueStore()
    service = TokenStoreService(
        store=store, cipher=TokenCipherService(secret="storage-secret")
    )
    record = _record(access_token="very-secret-access")

    service.put(record)

    raw = store.get(TokenStoreService.RECORD_KEY)
    assert raw is not None
    assert "very-secret-access" not in raw
    assert service.get() == record


def test_record_written_with_other_key_reads_as_not_found() -> None:
    store = InMemoryKeyValueStore()
    TokenStoreService(store=store, cipher=TokenCipherService(secret="old")).put(_record())
    service = TokenStoreService(store=store, cipher=TokenCipherService(secret="new"))

    with pytest.raises(TokenNotFoundError):
        service.get()


def test_corrupted_record_reads_as_not_found() -> None:
    store = InMemoryKeyValueStore()
    store.put(TokenStoreService.RECORD_KEY, "{not json", 60)

    with pytest.raises(TokenNotFoundError):
        TokenStoreService(store=store).get()


def test_cipher_rejects_empty_secret() -> None:
    with pytest.raises(ValueError):
        TokenCipherService(secret="")


def test_cipher_unseals_only_values_sealed_with_same_secret() -> None:
    record = _record(access_token="sealed-access")
    sealed = TokenCipherService(secret="storage-secret").seal(record)

    assert "sealed-access" not in sealed
    assert TokenCipherService(secret="storage-secret").unseal(sealed) == record
    with pytest.raises(TokenRecordDecryptError):
        TokenCipherService(secret="rotated-secret").unseal(sealed)
    with pytest.raises(TokenRecordDecryptError):
        TokenCipherService(secret="storage-secret").unseal("not-a-fernet-token")
