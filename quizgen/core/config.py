from __future__ import annotations

from functools import lru_cache
from typing import List, Any
from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import Field, AnyUrl, AliasChoices, field_validator


class Settings(BaseSettings):
    # .env source; unknown keys are rejected to catch typos
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="forbid",
    )

    # General
    APP_NAME: str = "QuizGen Backend"
    API_V1_PREFIX: str = "/api/v1"
    APP_ENV: str = Field(
        "dev",
        validation_alias=AliasChoices("APP_ENV", "app_env"),
        description="Application environment: dev|staging|prod",
    )
    BACKEND_PORT: int = Field(
        8000,
        validation_alias=AliasChoices("BACKEND_PORT", "app_port"),
        description="Backend port to bind",
    )
    LOG_LEVEL: str = Field(
        "INFO",
        validation_alias=AliasChoices("LOG_LEVEL", "log_level"),
    )

    # Supabase
    SUPABASE_URL: AnyUrl = Field(
        ...,
        validation_alias=AliasChoices("SUPABASE_URL", "supabase_url"),
        description="Your Supabase project URL",
    )
    SUPABASE_SERVICE_ROLE_KEY: str = Field(
        ...,
        validation_alias=AliasChoices("SUPABASE_SERVICE_ROLE_KEY", "supabase_service_role_key"),
        description="Service role key (server-side)",
    )
    SUPABASE_SCHEMA: str = Field(
        "public",
        validation_alias=AliasChoices("SUPABASE_SCHEMA", "supabase_schema"),
        description="Supabase schema name",
    )

    # Gemini. The key is optional here and checked when the model client is built.
    GEMINI_API_KEY: str | None = Field(
        None,
        validation_alias=AliasChoices("GEMINI_API_KEY", "API_KEY", "gemini_api_key"),
        description="Google Gemini API key",
    )
    GEMINI_MODEL: str = Field(
        "gemini-1.5-flash-8b",
        validation_alias=AliasChoices("GEMINI_MODEL", "gemini_model"),
    )

    # Quiz generation
    QUIZ_MAX_ATTEMPTS: int = Field(3, ge=1)
    QUIZ_RETRY_DELAY_MS: int = Field(2000, ge=0)
    QUIZ_RETRY_BACKOFF: float = Field(1.0, ge=1.0, description="1.0 keeps the delay fixed")
    QUIZ_GENERATION_TIMEOUT_SECONDS: float | None = Field(
        None,
        gt=0,
        description="Upper bound on model calls plus retry delays; unset means unbounded",
    )
    MAX_UPLOAD_SIZE_MB: int = Field(25, gt=0)

    # CORS origins
    FRONTEND_ORIGINS: List[str] = [
        "http://localhost:5173",
        "http://localhost:3000",
        "http://127.0.0.1:5173",
    ]

    @field_validator("FRONTEND_ORIGINS", mode="before")
    @classmethod
    def _parse_origins(cls, v: Any) -> Any:
        """
        Accepts FRONTEND_ORIGINS in .env as:
        - a JSON array: ["http://localhost:5173","http://localhost:3000"]
        - or a string: http://localhost:5173,http://localhost:3000
        - or with ; as the separator
        """
        if isinstance(v, str):
            s = v.strip()
            if s.startswith("[") and s.endswith("]"):
                import json
                try:
                    return json.loads(s)
                except ValueError:
                    # malformed JSON falls through to the split below
                    pass
            return [item.strip() for item in s.replace(";", ",").split(",") if item.strip()]
        return v

    @field_validator("LOG_LEVEL", mode="after")
    @classmethod
    def _upper_log_level(cls, v: str) -> str:
        return v.upper()

    @property
    def retry_delay_seconds(self) -> float:
        return self.QUIZ_RETRY_DELAY_MS / 1000

    @property
    def max_upload_bytes(self) -> int:
        return self.MAX_UPLOAD_SIZE_MB * 1024 * 1024


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return Settings()
