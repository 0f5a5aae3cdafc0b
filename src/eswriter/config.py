"""Configuration management for ES Writer.

Loads provider keys and runtime settings from environment variables using
Pydantic. Secrets belong in .env (never hardcoded).

Usage:
    from eswriter.config import get_settings

    settings = get_settings()
    print(settings.completion_provider)
    print(settings.request_deadline)
"""

from functools import lru_cache

from pydantic import Field, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

COMPLETION_PROVIDERS = {"gemini", "ollama", "openai", "anthropic"}


class StoreSettings(BaseSettings):
    """Profile store location, readable without any provider credentials.

    The ``profile`` CLI commands use this directly so they work on a machine
    that has no completion API key configured.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",  # Ignore unknown env vars
    )

    profile_db_path: str = Field(default="data/profiles.db", description="Profile SQLite file")


class Settings(StoreSettings):
    """ES Writer configuration from environment variables.

    Loads from .env file automatically. Validates on instantiation, so a
    missing key for the selected provider fails at startup rather than on
    the first request.

    Attributes:
        completion_provider: Which completion adapter answers questions
        completion_model: Model ID override (default per provider)
        google_api_key: Gemini API key (https://ai.google.dev)
        request_deadline: Seconds shared by all completion calls of one request
        max_concurrency: Max completion calls in flight per request
        prompt_language: Prompt template language ('ja' or 'en')
        profile_db_path: SQLite file holding user profiles
        auth_mode: 'userinfo' (OAuth2 userinfo endpoint) or 'static'
    """

    # Completion provider
    completion_provider: str = Field(
        default="gemini",
        description="Completion provider: 'gemini', 'ollama', 'openai' or 'anthropic'",
    )
    completion_model: str | None = Field(
        default=None,
        description="Model override (default per provider)",
    )
    google_api_key: str | None = Field(default=None, description="Gemini API key")
    openai_api_key: str | None = Field(default=None, description="OpenAI API key")
    anthropic_api_key: str | None = Field(default=None, description="Anthropic API key")
    ollama_base_url: str = Field(
        default="http://localhost:11434",
        description="Ollama base URL for a local model runtime",
    )
    completion_timeout: float = Field(
        default=30.0,
        gt=0,
        description="Upper bound for a single completion call (seconds)",
    )
    max_output_tokens: int = Field(default=512, ge=16, le=8192)

    # Fan-out
    request_deadline: float = Field(
        default=30.0,
        gt=0,
        description="Deadline shared by all questions of one request (seconds)",
    )
    max_concurrency: int = Field(
        default=8,
        ge=1,
        le=64,
        description="Max concurrent completion calls per request",
    )
    cancel_grace: float = Field(
        default=1.0,
        ge=0,
        description="How long to wait for cancelled calls to unwind (seconds)",
    )
    prompt_language: str = Field(default="ja", description="Prompt language: 'ja' or 'en'")

    # Collaborators
    auth_mode: str = Field(default="static", description="'userinfo' or 'static'")
    userinfo_url: str | None = Field(
        default=None,
        description="OAuth2 userinfo endpoint that resolves a bearer token to its 'sub'",
    )
    static_tokens: dict[str, str] = Field(
        default_factory=dict,
        description="Token → subject table for auth_mode=static (JSON)",
    )

    # HTTP server
    host: str = Field(default="0.0.0.0")
    port: int = Field(default=8080, ge=1, le=65535)
    cors_allow_origins: list[str] = Field(default_factory=lambda: ["*"])

    # System
    log_level: str = Field(default="INFO", description="Logging level")

    @field_validator("completion_provider")
    @classmethod
    def validate_completion_provider(cls, v: str) -> str:
        """Ensure completion provider is known."""
        v_lower = v.lower()
        if v_lower not in COMPLETION_PROVIDERS:
            raise ValueError(
                f"completion_provider must be one of {sorted(COMPLETION_PROVIDERS)}, got '{v}'"
            )
        return v_lower

    @field_validator("prompt_language")
    @classmethod
    def validate_prompt_language(cls, v: str) -> str:
        """Ensure prompt language is valid."""
        v_lower = v.lower()
        if v_lower not in {"ja", "en"}:
            raise ValueError(f"prompt_language must be 'ja' or 'en', got '{v}'")
        return v_lower

    @field_validator("auth_mode")
    @classmethod
    def validate_auth_mode(cls, v: str) -> str:
        """Ensure auth mode is valid."""
        v_lower = v.lower()
        if v_lower not in {"userinfo", "static"}:
            raise ValueError(f"auth_mode must be 'userinfo' or 'static', got '{v}'")
        return v_lower

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Ensure log level is valid."""
        valid = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        v_upper = v.upper()
        if v_upper not in valid:
            raise ValueError(f"log_level must be one of {valid}, got {v}")
        return v_upper

    @model_validator(mode="after")
    def validate_credentials(self) -> "Settings":
        """Require the API key of the selected provider and the auth endpoint."""
        required_keys = {
            "gemini": "google_api_key",
            "openai": "openai_api_key",
            "anthropic": "anthropic_api_key",
        }
        key_field = required_keys.get(self.completion_provider)
        if key_field and not getattr(self, key_field):
            raise ValueError(
                f"{key_field} is required when completion_provider='{self.completion_provider}'"
            )
        if self.auth_mode == "userinfo" and not self.userinfo_url:
            raise ValueError("userinfo_url is required when auth_mode='userinfo'")
        return self


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Load settings once per process."""
    return Settings()
