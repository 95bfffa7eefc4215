"""
Configuration Management for Expense Tracker

Uses pydantic-settings for type-safe configuration from environment variables.

All configuration is centralized here. The Gemini API key is deliberately
optional: a missing key is reported on the first extraction call, not at
startup, so the manual entry form keeps working without it.
"""

from functools import lru_cache
from typing import Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class GeminiSettings(BaseSettings):
    """Gemini LLM configuration."""

    model_config = SettingsConfigDict(
        env_prefix="GEMINI_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    api_key: Optional[str] = Field(
        default=None,
        description="Gemini API key"
    )
    model_name: str = Field(
        default="gemini-2.0-flash",
        description="Gemini model to use"
    )
    max_tokens: int = Field(
        default=512,
        ge=100,
        le=8192,
        description="Maximum tokens in response"
    )
    temperature: float = Field(
        default=0.1,
        ge=0.0,
        le=1.0,
        description="Model temperature (lower = more deterministic)"
    )

    @field_validator('api_key')
    @classmethod
    def blank_key_is_missing(cls, v: Optional[str]) -> Optional[str]:
        """Treat an empty GEMINI_API_KEY the same as an unset one."""
        if v is not None and not v.strip():
            return None
        return v


class SpeechSettings(BaseSettings):
    """Speech recognition configuration."""

    model_config = SettingsConfigDict(
        env_prefix="SPEECH_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    language: str = Field(
        default="en-IN",
        description="BCP-47 language/region used for recognition"
    )
    enabled: bool = Field(
        default=True,
        description="Offer the voice capture tab"
    )


class AppSettings(BaseSettings):
    """
    Main application settings.

    Loads configuration from environment variables and .env file.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    debug_mode: bool = Field(
        default=False,
        description="Enable debug mode"
    )

    default_title: str = Field(
        default="Expense",
        min_length=1,
        description="Title used when the extraction has none"
    )
    currency_symbol: str = Field(
        default="₹",
        description="Symbol shown next to amounts in the expense list"
    )


class Settings(BaseSettings):
    """
    Root settings container.

    Aggregates all sub-settings for easy access.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    @property
    def gemini(self) -> GeminiSettings:
        return GeminiSettings()

    @property
    def speech(self) -> SpeechSettings:
        return SpeechSettings()

    @property
    def app(self) -> AppSettings:
        return AppSettings()


@lru_cache()
def get_settings() -> Settings:
    """
    Get application settings (cached).

    Call get_settings.cache_clear() to reload if needed.
    """
    return Settings()


def validate_all_settings() -> dict[str, bool]:
    """
    Validate all settings are properly configured.

    Returns a dict of {setting_name: is_valid}, with a
    "<name>_error" entry for each failure. Used by the settings page.
    """
    results = {}

    settings = get_settings()

    try:
        gemini = settings.gemini
        if gemini.api_key:
            results["gemini"] = True
        else:
            results["gemini"] = False
            results["gemini_error"] = "GEMINI_API_KEY is not set"
    except Exception as e:
        results["gemini"] = False
        results["gemini_error"] = str(e)

    try:
        _ = settings.speech
        results["speech"] = True
    except Exception as e:
        results["speech"] = False
        results["speech_error"] = str(e)

    try:
        _ = settings.app
        results["app"] = True
    except Exception as e:
        results["app"] = False
        results["app_error"] = str(e)

    return results
