"""Environment-bound configuration objects.

This module provides Pydantic BaseSettings-based configuration loading from .env files.
Every group reads its own environment variables, so a deployment can tighten the
output contract (e.g. CONTRACT_MAX_OUTPUT_TOKENS=300) without touching code.

Example:
    from contractAgent.config.settings import get_settings

    settings = get_settings()  # Cached singleton
    ceiling = settings.contract.max_output_tokens
    model = settings.runtime.model
"""

from __future__ import annotations

from functools import lru_cache
from typing import Optional

from dotenv import load_dotenv
from pydantic import AliasChoices, Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


load_dotenv()


class ContractSettings(BaseSettings):
    """Default output contract applied when a persona declares none.

    - max_output_tokens: FinalOutput ceiling in estimated tokens (len / 4)
    - max_duration_seconds: Soft wall-clock budget before a persona must go "partial"
    - artifact_min_words / artifact_max_words: Expected artifact size band (warning only)
    - artifact_dir: Directory for artifacts derived from a topic slug
    """

    max_output_tokens: int = Field(default=500, ge=1, alias="CONTRACT_MAX_OUTPUT_TOKENS")
    max_duration_seconds: int = Field(default=600, ge=1, alias="CONTRACT_MAX_DURATION_SECONDS")
    artifact_min_words: int = Field(default=3000, ge=0, alias="CONTRACT_ARTIFACT_MIN_WORDS")
    artifact_max_words: int = Field(default=6000, ge=0, alias="CONTRACT_ARTIFACT_MAX_WORDS")
    artifact_dir: str = Field(default="research-outputs", alias="CONTRACT_ARTIFACT_DIR")

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        populate_by_name=True,
    )

    @model_validator(mode="after")
    def _check_word_band(self) -> "ContractSettings":
        if self.artifact_min_words > self.artifact_max_words:
            raise ValueError("artifact_min_words must not exceed artifact_max_words")
        return self


class RuntimeSettings(BaseSettings):
    """How sessions invoke the external agent runtime."""

    model: str = Field(
        default="claude-sonnet-4-20250514",
        validation_alias=AliasChoices("RUNTIME_MODEL", "MODEL_ID"),
    )
    permission_mode: str = Field(default="bypassPermissions", alias="RUNTIME_PERMISSION_MODE")
    working_dir: Optional[str] = Field(
        default=None,
        validation_alias=AliasChoices("RUNTIME_CWD", "RUNTIME_WORKING_DIR"),
    )

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        populate_by_name=True,
    )


class PersonaSettings(BaseSettings):
    """Where static persona definitions live.

    personas_config is resolved relative to the project root when not absolute.
    """

    personas_config: str = Field(
        default="contractAgent/config/personas.yaml",
        alias="PERSONAS_CONFIG",
    )

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )


class ObservabilitySettings(BaseSettings):
    """Logging configuration."""

    log_level: str = Field(default="INFO", alias="LOG_LEVEL")
    log_dir: str = Field(default="logs", alias="LOG_DIR")
    log_output_max_length: int = Field(default=500, ge=100, le=5000, alias="LOG_OUTPUT_MAX_LENGTH")

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )


class Settings(BaseSettings):
    """Root application settings loaded from .env file.

    Hierarchical structure containing four nested settings groups:
    - contract: Default output contract (ContractSettings)
    - runtime: Runtime invocation defaults (RuntimeSettings)
    - personas: Persona definition sources (PersonaSettings)
    - observability: Logging (ObservabilitySettings)

    Use get_settings() to obtain a cached singleton instance.
    """

    environment: str = Field(default="dev", alias="APP_ENV")
    contract: ContractSettings = Field(default_factory=ContractSettings)
    runtime: RuntimeSettings = Field(default_factory=RuntimeSettings)
    personas: PersonaSettings = Field(default_factory=PersonaSettings)
    observability: ObservabilitySettings = Field(default_factory=ObservabilitySettings)

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        validate_assignment=True,
        case_sensitive=False,
    )


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Return a cached singleton Settings instance.

    Returns:
        Settings: Cached application settings instance
    """
    return Settings()
