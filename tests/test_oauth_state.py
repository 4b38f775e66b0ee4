try:
    from . import _bootstrap  # noqa: F401
except Exception:  # pragma: no cover - fallback for direct execution
    import _bootstrap  # type: ignore # noqa: F401

import re
from datetime import datetime, timedelta, timezone

import pytest

from app.clients.tiktok_auth import OAuthStateEncoder, OAuthStateError
from app.services.oauth_state import OAuthStateService, generate_state


def _service(ttl: int = 600) -> OAuthStateService:
    return OAuthStateService(OAuthStateEncoder(secret_key="state-secret"), ttl_seconds=ttl)


def test_generate_state_is_32_lowercase_hex_and_unique() -> None:
    values = [generate_state() for _ in range(1000)]

    assert all(re.fullmatch(r"[0-9a-f]{32}", value) for value in values)
    assert len(set(values)) == 1000


def test_issued_cookie_verifies_matching_state() -> None:
    service = _service()
    nonce = generate_state()

    service.verify(nonce, service.issue(nonce))


def test_mismatched_state_is_rejected() -> None:
    service = _service()
    cookie = service.issue(generate_state())

    with pytest.raises(OAuthStateError):
        service.verify(generate_state(), cookie)


@pytest.mark.parametrize("state, cookie", [(None, "cookie"), ("abc", None), ("", "")])
def test_missing_inputs_are_rejected(state, cookie) -> None:
    with pytest.raises(OAuthStateError):
        _service().verify(state, cookie)


def test_expired_state_is_rejected() -> None:
    service = _service(ttl=60)
    nonce = generate_state()
    cookie = service.issue(nonce, issued_at=datetime.now(timezone.utc) - timedelta(minutes=5))

    with pytest.raises(OAuthStateError, match="expired"):
        service.verify(nonce, cookie)


def test_cookie_signed_with_other_key_is_rejected() -> None:
    nonce = generate_state()
    forged = OAuthStateService(
        OAuthStateEncoder(secret_key="attacker"), ttl_seconds=600
    ).issue(nonce)

    with pytest.raises(OAuthStateError, match="signature"):
        _service().verify(nonce, forged)


def test_garbage_cookie_is_rejected() -> None:
    with pytest.raises(OAuthStateError):
        _service().verify("abc", "%%%not-base64%%%")
