"""
Tests for pydantic-settings configuration.
"""

import pytest

from expense_tracker.config import (
    AppSettings,
    GeminiSettings,
    SpeechSettings,
    get_settings,
    validate_all_settings,
)


@pytest.fixture(autouse=True)
def clear_settings_cache():
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


class TestGeminiSettings:

    def test_key_read_from_environment(self, monkeypatch):
        monkeypatch.setenv("GEMINI_API_KEY", "env-key")
        monkeypatch.setenv("GEMINI_MODEL_NAME", "gemini-custom")
        settings = GeminiSettings()
        assert settings.api_key == "env-key"
        assert settings.model_name == "gemini-custom"

    def test_missing_key_is_not_a_startup_error(self, monkeypatch):
        monkeypatch.delenv("GEMINI_API_KEY", raising=False)
        settings = GeminiSettings(_env_file=None)
        assert settings.api_key is None

    def test_blank_key_is_missing(self):
        assert GeminiSettings(api_key="   ").api_key is None

    def test_temperature_bounds(self):
        with pytest.raises(ValueError):
            GeminiSettings(temperature=2.0)


class TestOtherSettings:

    def test_speech_language_default(self, monkeypatch):
        monkeypatch.delenv("SPEECH_LANGUAGE", raising=False)
        assert SpeechSettings(_env_file=None).language == "en-IN"

    def test_app_defaults(self, monkeypatch):
        monkeypatch.delenv("DEFAULT_TITLE", raising=False)
        settings = AppSettings(_env_file=None)
        assert settings.default_title == "Expense"
        assert settings.currency_symbol == "₹"

    def test_environment_name_is_not_a_setting(self, monkeypatch):
        monkeypatch.setenv("APP_ENVIRONMENT", "production")
        settings = AppSettings(_env_file=None)
        assert "app_environment" not in AppSettings.model_fields
        assert not hasattr(settings, "app_environment")


class TestValidateAllSettings:

    def test_reports_missing_key(self, monkeypatch):
        monkeypatch.setenv("GEMINI_API_KEY", "")
        status = validate_all_settings()
        assert status["gemini"] is False
        assert "GEMINI_API_KEY" in status["gemini_error"]
        assert status["speech"] is True
        assert status["app"] is True

    def test_reports_configured_key(self, monkeypatch):
        monkeypatch.setenv("GEMINI_API_KEY", "abc")
        assert validate_all_settings()["gemini"] is True
