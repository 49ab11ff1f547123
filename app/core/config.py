"""Application configuration (settings and environment).

Single source of truth for all configuration. Uses pydantic-settings
with .env support. Firestore credentials (or an emulator host) are
validated at load time.
"""

from functools import lru_cache

from pydantic import SecretStr, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment and .env.

    All settings are optional with defaults except the Firestore connection,
    which needs FIREBASE_SERVICE_ACCOUNT_KEY, FIREBASE_SERVICE_ACCOUNT_PATH
    or FIRESTORE_EMULATOR_HOST (see validate_required).
    """

    # App
    app_name: str = "elearning-api"
    app_version: str = "1.0.0"
    # Development mode: error responses carry internal details.
    debug: bool = False

    # CORS
    allowed_origins: str = "http://localhost:3000"

    # Firebase / Firestore: use key (env) or path (file). For Vercel, use key.
    firebase_service_account_key: SecretStr | None = None
    firebase_service_account_path: str | None = None  # Path to JSON file
    # Required with the emulator; otherwise read from the service account JSON.
    firebase_project_id: str | None = None
    # host:port of a Firestore emulator; no credentials are sent when set.
    firestore_emulator_host: str | None = None
    firestore_timeout_seconds: float = 30.0

    # Transactions and batches
    transaction_max_retries: int = 3
    transaction_base_delay_ms: int = 100
    batch_max_operations: int = 400  # Firestore allows 500 writes per commit
    access_key_max_attempts: int = 5

    # Error messages shown to users: "en" or "vi"
    error_locale: str = "en"

    # Cache: "memory" (per process) or "redis"
    cache_backend: str = "memory"
    cache_max_entries: int = 100
    cache_ttl_roles: int = 300
    redis_host: str = "localhost"
    redis_port: int = 6379
    redis_db: int = 0
    redis_password: SecretStr | None = None

    # Request / middleware
    request_id_header: str = "X-Request-ID"

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        case_sensitive=False,
    )

    @model_validator(mode="after")
    def validate_required(self) -> "Settings":
        """Validate Firestore connection, cache backend and locale.

        - Emulator: FIRESTORE_EMULATOR_HOST plus FIREBASE_PROJECT_ID.
        - Otherwise FIREBASE_SERVICE_ACCOUNT_KEY or FIREBASE_SERVICE_ACCOUNT_PATH.
        """
        if self.firestore_emulator_host:
            if not self.firebase_project_id:
                raise ValueError(
                    "FIREBASE_PROJECT_ID is required when FIRESTORE_EMULATOR_HOST is set."
                )
        else:
            has_key = (
                self.firebase_service_account_key
                and self.firebase_service_account_key.get_secret_value()
            )
            if not has_key and not self.firebase_service_account_path:
                raise ValueError(
                    "Set FIREBASE_SERVICE_ACCOUNT_KEY (full JSON string), "
                    "FIREBASE_SERVICE_ACCOUNT_PATH (path to JSON file) "
                    "or FIRESTORE_EMULATOR_HOST."
                )
        if self.cache_backend not in ("memory", "redis"):
            raise ValueError(
                f"cache_backend must be 'memory' or 'redis', got: {self.cache_backend!r}"
            )
        if self.error_locale not in ("en", "vi"):
            raise ValueError(
                f"error_locale must be 'en' or 'vi', got: {self.error_locale!r}"
            )
        if not 1 <= self.batch_max_operations <= 500:
            raise ValueError("batch_max_operations must be between 1 and 500")
        if self.transaction_max_retries < 1:
            raise ValueError("transaction_max_retries must be at least 1")
        return self


@lru_cache
def get_settings() -> Settings:
    """Return cached application settings (single instance per process).

    Validation runs on first call, not at import time. In tests, call
    get_settings.cache_clear() before overriding env vars so the next
    get_settings() uses the new values.

    Returns:
        Loaded and validated Settings instance.
    """
    return Settings()
