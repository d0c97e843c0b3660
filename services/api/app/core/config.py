from __future__ import annotations

import json
from pathlib import Path
from typing import Annotated, Any

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, NoDecode, SettingsConfigDict

# services/api/app/core/config.py -> BASE_DIR == services/api
BASE_DIR = Path(__file__).resolve().parents[2]
APP_DIR = BASE_DIR / "app"
DEFAULT_FIXTURE_COVERS_PATH = APP_DIR / "fixtures" / "covers_fixture.json"


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=str(BASE_DIR / ".env"),
        extra="ignore",
        env_prefix="",
        case_sensitive=False,
    )

    # Environment
    env: str = Field(default="dev", validation_alias="ENV")

    # Application
    api_name: str = Field(default="booktrack-api", validation_alias="API_NAME")
    log_level: str = Field(default="INFO", validation_alias="LOG_LEVEL")
    user_agent: str = Field(default="BookTrack/0.1", validation_alias="USER_AGENT")

    # Database & cache
    database_url: str = Field(
        default="sqlite+pysqlite:///./booktrack.db",
        validation_alias="DATABASE_URL",
    )
    redis_url: str = Field(
        default="redis://localhost:6379/0", validation_alias="REDIS_URL"
    )

    # Identity provider
    auth_secret_key: str = Field(
        default="dev-secret-key", validation_alias="AUTH_SECRET_KEY"
    )
    auth_algorithm: str = Field(default="HS256", validation_alias="AUTH_ALGORITHM")
    auth_access_token_ttl_minutes: int = Field(
        default=60, validation_alias="AUTH_ACCESS_TOKEN_TTL_MINUTES"
    )
    auth_cookie_name: str = Field(
        default="booktrack_session", validation_alias="AUTH_COOKIE_NAME"
    )
    identity_webhook_token: str | None = Field(
        default=None, validation_alias="IDENTITY_WEBHOOK_TOKEN"
    )

    # OCR
    ocr_provider: str = Field(default="google_vision", validation_alias="OCR_PROVIDER")
    google_vision_api_key: str | None = Field(
        default=None, validation_alias="GOOGLE_VISION_API_KEY"
    )
    google_vision_endpoint: str = Field(
        default="https://vision.googleapis.com/v1/images:annotate",
        validation_alias="GOOGLE_VISION_ENDPOINT",
    )

    # LLM completions
    llm_provider: str = Field(default="openai", validation_alias="LLM_PROVIDER")
    openai_api_key: str | None = Field(default=None, validation_alias="OPENAI_API_KEY")
    openai_base_url: str | None = Field(default=None, validation_alias="OPENAI_BASE_URL")
    openai_model: str = Field(default="gpt-3.5-turbo", validation_alias="OPENAI_MODEL")
    openai_temperature: float = Field(default=0.7, validation_alias="OPENAI_TEMPERATURE")
    openai_max_tokens: int | None = Field(
        default=None, validation_alias="OPENAI_MAX_TOKENS"
    )

    # Covers
    cover_provider: str = Field(default="google_books", validation_alias="COVER_PROVIDER")
    google_books_api_key: str | None = Field(
        default=None, validation_alias="GOOGLE_BOOKS_API_KEY"
    )
    fixture_covers_path: str = Field(
        default=str(DEFAULT_FIXTURE_COVERS_PATH),
        validation_alias="FIXTURE_COVERS_PATH",
    )
    cover_cache_ttl_secs: int = Field(
        default=86400, validation_alias="COVER_CACHE_TTL_SECS"
    )
    placeholder_cover_url: str = Field(
        default="/placeholder.svg", validation_alias="PLACEHOLDER_COVER_URL"
    )

    # Outbound calls
    external_timeout_secs: float = Field(
        default=15.0, validation_alias="EXTERNAL_TIMEOUT_SECS"
    )

    # Ingestion
    ingestion_save_concurrency: int = Field(
        default=4, ge=1, validation_alias="INGESTION_SAVE_CONCURRENCY"
    )
    max_upload_bytes: int = Field(
        default=10 * 1024 * 1024, validation_alias="MAX_UPLOAD_BYTES"
    )

    # CORS
    cors_origins: Annotated[list[str], NoDecode] = Field(
        default_factory=lambda: ["http://localhost:3000"],
        validation_alias="CORS_ORIGINS",
    )

    @field_validator("cors_origins", mode="before")
    @classmethod
    def parse_cors_origins(cls, v: Any) -> list[str]:
        """
        Supported env formats:
          - JSON list: '["http://localhost:3000"]'
          - Bracket list (no quotes): '[http://localhost:3000, http://localhost:5173]'
          - Comma-separated: 'http://localhost:3000, http://localhost:5173'
          - '*' wildcard
        """
        if v is None:
            return []
        if isinstance(v, list):
            return [str(x).strip() for x in v if str(x).strip()]
        if not isinstance(v, str):
            raise TypeError("cors_origins must be a string or list of strings")

        s = v.strip()
        if not s:
            return []
        if s == "*":
            return ["*"]

        if s.startswith("[") and s.endswith("]"):
            try:
                parsed = json.loads(s)
                if isinstance(parsed, list):
                    return [str(x).strip() for x in parsed if str(x).strip()]
            except json.JSONDecodeError:
                # Not JSON, treat as a simple bracket list without quotes
                inner = s[1:-1].strip()
                if not inner:
                    return []
                parts = [p.strip().strip('"').strip("'") for p in inner.split(",")]
                return [p for p in parts if p]

        parts = [p.strip() for p in s.split(",")]
        return [p for p in parts if p]

    # Rate limiting
    rate_limit_window_seconds: int = Field(
        default=60, validation_alias="RATE_LIMIT_WINDOW_SECONDS"
    )
    rate_limit_ingestion_per_window: int = Field(
        default=20, validation_alias="RATE_LIMIT_INGESTION_PER_WINDOW"
    )
    rate_limit_recommendations_per_window: int = Field(
        default=10, validation_alias="RATE_LIMIT_RECOMMENDATIONS_PER_WINDOW"
    )

    # OpenTelemetry
    otel_enabled: bool = Field(default=False, validation_alias="OTEL_ENABLED")
    otel_otlp_endpoint: str = Field(
        default="http://localhost:4317",
        validation_alias="OTEL_OTLP_ENDPOINT",
    )


settings = Settings()
