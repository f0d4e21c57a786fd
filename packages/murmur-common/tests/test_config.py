"""
Tests for murmur-common configuration module.

Validates that environment-based configuration loading, default values,
platform aliases, and validation constraints work correctly via
pydantic-settings.
"""

from __future__ import annotations

import os
from unittest.mock import patch

import pytest
from pydantic import ValidationError

from murmur_common.config import Settings, get_settings
from murmur_common.models import RecognitionSettings

_ALIASES = ("GOOGLE_APPLICATION_CREDENTIALS", "PORT", "CLIENT_URL")


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def _clear_settings_cache() -> None:
    """Reset the ``get_settings`` lru_cache between tests."""
    get_settings.cache_clear()


def _clean_env() -> dict[str, str]:
    """Environment without MURMUR_ vars or their unprefixed aliases."""
    return {
        k: v for k, v in os.environ.items()
        if not k.startswith("MURMUR_") and k not in _ALIASES
    }


# ---------------------------------------------------------------------------
# Tests: default values
# ---------------------------------------------------------------------------


class TestSettingsDefaults:
    """Verify that ``Settings`` populates sane defaults when no env vars are set."""

    def test_default_credentials_empty(self) -> None:
        with patch.dict(os.environ, _clean_env(), clear=True):
            assert Settings().google_credentials == ""

    def test_default_port(self) -> None:
        with patch.dict(os.environ, _clean_env(), clear=True):
            assert Settings().port == 3001

    def test_default_client_url(self) -> None:
        with patch.dict(os.environ, _clean_env(), clear=True):
            assert Settings().client_url == "http://localhost:3000"

    def test_default_log_level(self) -> None:
        with patch.dict(os.environ, _clean_env(), clear=True):
            assert Settings().log_level == "INFO"

    def test_default_stream_close_timeout(self) -> None:
        with patch.dict(os.environ, _clean_env(), clear=True):
            assert Settings().stream_close_timeout == 5.0

    def test_default_recognition_settings(self) -> None:
        with patch.dict(os.environ, _clean_env(), clear=True):
            rec = Settings().recognition_settings()
        assert rec == RecognitionSettings()
        assert rec.encoding == "WEBM_OPUS"
        assert rec.sample_rate_hertz == 48000
        assert rec.language_code == "en-US"
        assert rec.enable_automatic_punctuation is True
        assert rec.model == "latest_short"
        assert rec.interim_results is True


# ---------------------------------------------------------------------------
# Tests: environment variable overrides
# ---------------------------------------------------------------------------


class TestSettingsFromEnv:
    """Verify that env vars with MURMUR_ prefix (or aliases) override defaults."""

    def test_override_credentials(self) -> None:
        with patch.dict(os.environ, {"MURMUR_GOOGLE_CREDENTIALS": '{"type": "x"}'}):
            assert Settings().google_credentials == '{"type": "x"}'

    def test_google_application_credentials_alias(self) -> None:
        env = _clean_env() | {"GOOGLE_APPLICATION_CREDENTIALS": "/etc/keys/speech.json"}
        with patch.dict(os.environ, env, clear=True):
            assert Settings().google_credentials == "/etc/keys/speech.json"

    def test_prefixed_credentials_win_over_alias(self) -> None:
        env = _clean_env() | {
            "MURMUR_GOOGLE_CREDENTIALS": "/a.json",
            "GOOGLE_APPLICATION_CREDENTIALS": "/b.json",
        }
        with patch.dict(os.environ, env, clear=True):
            assert Settings().google_credentials == "/a.json"

    def test_port_alias(self) -> None:
        with patch.dict(os.environ, _clean_env() | {"PORT": "8080"}, clear=True):
            assert Settings().port == 8080

    def test_client_url_alias(self) -> None:
        env = _clean_env() | {"CLIENT_URL": "https://captions.example.com"}
        with patch.dict(os.environ, env, clear=True):
            assert Settings().client_url == "https://captions.example.com"

    def test_override_speech_options(self) -> None:
        env = {
            "MURMUR_SPEECH_LANGUAGE_CODE": "fr-FR",
            "MURMUR_SPEECH_INTERIM_RESULTS": "false",
            "MURMUR_SPEECH_SAMPLE_RATE_HERTZ": "16000",
        }
        with patch.dict(os.environ, env):
            rec = Settings().recognition_settings()
        assert rec.language_code == "fr-FR"
        assert rec.interim_results is False
        assert rec.sample_rate_hertz == 16000

    def test_override_log_json(self) -> None:
        with patch.dict(os.environ, {"MURMUR_LOG_JSON": "false"}):
            assert Settings().log_json is False


# ---------------------------------------------------------------------------
# Tests: validation constraints
# ---------------------------------------------------------------------------


class TestSettingsValidation:
    """Verify pydantic validators on ``Settings`` fields."""

    def test_port_zero(self) -> None:
        with pytest.raises(ValidationError):
            Settings(port=0)  # type: ignore[call-arg]

    def test_port_too_high(self) -> None:
        with pytest.raises(ValidationError):
            Settings(port=70000)  # type: ignore[call-arg]

    def test_sample_rate_must_be_positive(self) -> None:
        with pytest.raises(ValidationError):
            Settings(speech_sample_rate_hertz=0)  # type: ignore[call-arg]

    def test_close_timeout_must_be_positive(self) -> None:
        with pytest.raises(ValidationError):
            Settings(stream_close_timeout=0)  # type: ignore[call-arg]

    def test_recognition_settings_frozen(self) -> None:
        rec = RecognitionSettings()
        with pytest.raises(ValidationError):
            rec.model = "latest_long"  # type: ignore[misc]


# ---------------------------------------------------------------------------
# Tests: get_settings singleton
# ---------------------------------------------------------------------------


class TestGetSettings:
    """Verify the cached ``get_settings()`` helper."""

    def setup_method(self) -> None:
        _clear_settings_cache()

    def teardown_method(self) -> None:
        _clear_settings_cache()

    def test_returns_settings_instance(self) -> None:
        s = get_settings()
        assert isinstance(s, Settings)

    def test_cached(self) -> None:
        a = get_settings()
        b = get_settings()
        assert a is b
