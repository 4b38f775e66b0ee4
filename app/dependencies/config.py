"""
FastAPI dependencies for injecting configuration and guarding token endpoints.
"""

import hmac
from functools import lru_cache
from http import HTTPStatus
from typing import Annotated, Optional

from fastapi import Depends, Header, HTTPException

from app.core.config import AppSettings, get_settings


@lru_cache()
def _settings_singleton() -> AppSettings:
    """Ensure configuration is created once per process."""
    return get_settings()


def get_app_settings() -> AppSettings:
    """FastAPI dependency returning application settings."""
    return _settings_singleton()


SettingsDependency = Depends(get_app_settings)


def require_api_access(
    settings: Annotated[AppSettings, Depends(get_app_settings)],
    authorization: Optional[str] = Header(None),
) -> None:
    """Enforce ``API_ACCESS_TOKEN`` as a bearer token when it is configured."""
    expected = settings.security.api_access_token
    if not expected:
        return
    scheme, _, supplied = (authorization or "").partition(" ")
    if scheme.lower() != "bearer" or not hmac.compare_digest(
        supplied.strip().encode("utf-8"), expected.encode("utf-8")
    ):
        raise HTTPException(
            status_code=HTTPStatus.UNAUTHORIZED,
            detail="Invalid or missing access token",
            headers={"WWW-Authenticate": "Bearer"},
        )


__all__ = ["SettingsDependency", "get_app_settings", "require_api_access"]
