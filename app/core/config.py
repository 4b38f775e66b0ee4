"""
Application configuration models and helpers.

Centralizes settings management so the routes, the OAuth client and the token
store share a single configuration object built once per process.
"""

from functools import lru_cache
from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic_settings import BaseSettings, SettingsConfigDict

APP_VERSION = "2.0.0"


class OAuthProviderConfig(BaseModel):
    """Fixed TikTok endpoints and flow parameters."""

    model_config = ConfigDict(frozen=True)

    auth_url: str = "https://www.tiktok.com/v2/auth/authorize/"
    token_url: str = "https://open.tiktokapis.com/v2/oauth/token/"
    refresh_token_url: str = "https://open.tiktokapis.com/v2/oauth/token/"
    redirect_uri: str = "https://bot.boringrats.dev/callback"
    scopes: str = "video.upload,user.info.basic"


class TikTokSettings(BaseSettings):
    """Client credentials issued by the TikTok developer portal."""

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    client_key: Optional[str] = Field(None, validation_alias="TIKTOK_CLIENT_KEY")
    client_secret: Optional[str] = Field(
        None, validation_alias="TIKTOK_CLIENT_SECRET"
    )

    @property
    def has_credentials(self) -> bool:
        return bool(self.client_key and self.client_secret)


class StoreSettings(BaseSettings):
    """Selects and configures the key-value store holding the latest token."""

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    backend: Literal["none", "memory", "sqlite", "dynamodb"] = Field(
        "none",
        validation_alias="KV_BACKEND",
        description="Key-value backend; 'none' disables token persistence.",
    )
    sqlite_path: str = Field("data/tokens.db", validation_alias="KV_SQLITE_PATH")
    dynamodb_table_name: Optional[str] = Field(
        None, validation_alias="KV_DYNAMODB_TABLE"
    )
    region_name: str = Field("us-east-1", validation_alias="AWS_REGION")

    @property
    def enabled(self) -> bool:
        return self.backend != "none"


class SecuritySettings(BaseSettings):
    """Security-related configuration."""

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    token_encryption_secret: Optional[str] = Field(
        None,
        validation_alias="TOKEN_ENCRYPTION_SECRET",
        description="When set, the stored token record is encrypted at rest.",
    )
    state_secret: Optional[str] = Field(
        None,
        validation_alias="OAUTH_STATE_SECRET",
        description="Key for signing the state cookie; defaults to the client secret.",
    )
    verify_state: bool = Field(True, validation_alias="OAUTH_VERIFY_STATE")
    state_ttl_seconds: int = Field(600, validation_alias="OAUTH_STATE_TTL")
    api_access_token: Optional[str] = Field(
        None,
        validation_alias="API_ACCESS_TOKEN",
        description="Bearer token required by /tokens and /refresh when set.",
    )


class AppSettings(BaseSettings):
    """Root settings object for the FastAPI application."""

    model_config = SettingsConfigDict(
        env_file=".env", env_file_encoding="utf-8", extra="ignore"
    )

    environment: str = Field("development", validation_alias="APP_ENV")
    log_level: str = Field("INFO", validation_alias="APP_LOG_LEVEL")
    http_timeout_seconds: float = Field(10.0, validation_alias="OAUTH_HTTP_TIMEOUT")
    provider: OAuthProviderConfig = Field(default_factory=OAuthProviderConfig)
    tiktok: TikTokSettings = Field(default_factory=TikTokSettings)
    store: StoreSettings = Field(default_factory=StoreSettings)
    security: SecuritySettings = Field(default_factory=SecuritySettings)

    @property
    def is_configured(self) -> bool:
        return self.tiktok.has_credentials

    @property
    def kv_enabled(self) -> bool:
        return self.store.enabled


@lru_cache()
def get_settings() -> AppSettings:
    """Return a cached settings object."""
    return AppSettings()


__all__ = [
    "APP_VERSION",
    "AppSettings",
    "OAuthProviderConfig",
    "SecuritySettings",
    "StoreSettings",
    "TikTokSettings",
    "get_settings",
]
