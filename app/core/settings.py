from __future__ import annotations

from functools import lru_cache

from pydantic import AliasChoices, Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    app_name: str = "annoyed-chat"
    app_env: str = Field(
        default="production",
        validation_alias=AliasChoices("APP_ENV", "app_env"),
        description="Runtime environment: development|production.",
    )

    # LLM integration (Hugging Face inference)
    huggingface_api_key: str | None = Field(
        default=None,
        validation_alias=AliasChoices("HUGGINGFACE_API_KEY", "huggingface_api_key"),
        description="Hugging Face API token (required for /api/chat).",
    )
    huggingface_model: str = Field(
        default="meta-llama/Llama-3.3-70B-Instruct",
        validation_alias=AliasChoices("HUGGINGFACE_MODEL", "huggingface_model"),
        description="Model identifier used for reply generation.",
    )
    huggingface_base_url: str = Field(
        default="https://router.huggingface.co/hf-inference/models",
        validation_alias=AliasChoices("HF_BASE_URL", "huggingface_base_url"),
        description="Base URL for the text generation API (override for proxies/emulators).",
    )
    huggingface_timeout_seconds: float | None = Field(
        default=None,
        gt=0,
        validation_alias=AliasChoices("HF_TIMEOUT_SECONDS", "huggingface_timeout_seconds"),
        description="Timeout for inference requests (seconds). Unset means no client timeout.",
    )

    # Outbound call shaping
    chat_cooldown_seconds: float = Field(
        default=1.0,
        ge=0.0,
        validation_alias=AliasChoices("CHAT_COOLDOWN_SECONDS", "chat_cooldown_seconds"),
        description="Minimum gap between consecutive inference calls, process-wide.",
    )
    chat_max_retries: int = Field(
        default=3,
        ge=0,
        validation_alias=AliasChoices("CHAT_MAX_RETRIES", "chat_max_retries"),
        description="How many times a rate-limited call is retried before giving up.",
    )
    chat_backoff_base_seconds: float = Field(
        default=1.0,
        ge=0.0,
        validation_alias=AliasChoices("CHAT_BACKOFF_BASE_SECONDS", "chat_backoff_base_seconds"),
        description="First backoff wait; doubles on every further retry.",
    )

    @property
    def is_development(self) -> bool:
        return str(self.app_env).strip().lower() == "development"


@lru_cache
def get_settings() -> Settings:
    return Settings()
