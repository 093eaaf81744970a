from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import model_validator
from typing import Literal

class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", case_sensitive=False)

    APP_NAME: str = "open-banking-consent"
    ENV: Literal["local", "dev", "prod"] = "local"
    API_PREFIX: str = "/api/v1"
    HOST: str = "127.0.0.1"
    PORT: int = 8000

    # Auth (for demo HS256); in prod, use OIDC/JWKS
    JWT_ALG: str = "HS256"
    JWT_SECRET: str = "dev-secret-change-me"
    REQUIRED_AUDIENCE: str | None = None

    # Identity used for unauthenticated calls in local dev
    DEV_USER_ID: str = "user-123"

    # Consent
    CONSENT_HEADER: str = "x-consent-id"
    DEFAULT_REVOCATION_REASON: str = "User requested revocation"
    MAX_CONSENT_DURATION_DAYS: int = 365

    STORAGE_PROVIDER: Literal["memory", "redis"] = "memory"
    EVENT_BUS_PROVIDER: str = "noop"  # noop | redis
    REDIS_URL: str | None = None
    REDIS_KEY_PREFIX: str = "obc:"
    REDIS_STREAM: str | None = None  # default "consent.events" if None
    REDIS_STREAM_MAXLEN: int = 10000

    @model_validator(mode="after")
    def _check_providers(self):
        if self.ENV == "prod" and self.JWT_SECRET == "dev-secret-change-me":
            raise ValueError("JWT_SECRET must be set in prod")
        uses_redis = self.STORAGE_PROVIDER == "redis" or self.EVENT_BUS_PROVIDER.lower() == "redis"
        if uses_redis and not self.REDIS_URL:
            raise ValueError("REDIS_URL is required for redis-backed providers")
        return self

settings = Settings()
