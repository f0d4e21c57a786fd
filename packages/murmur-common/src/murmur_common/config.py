"""
Environment-based configuration management for Murmur.

Uses pydantic-settings to load configuration values from environment
variables and .env files. The relay service imports its settings from
this module to ensure consistent configuration handling.

All environment variables are prefixed with ``MURMUR_`` to avoid
collisions.  A few fields also accept the unprefixed names used by
common hosting platforms (``PORT``, ``CLIENT_URL``,
``GOOGLE_APPLICATION_CREDENTIALS``).
"""

from __future__ import annotations

from functools import lru_cache

from pydantic import AliasChoices, Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from murmur_common.models import RecognitionSettings


class Settings(BaseSettings):
    """Central configuration loaded from ``MURMUR_``-prefixed environment variables.

    Attributes:
        google_credentials: Service-account JSON payload, or a path to one.
        host: Bind address for the relay server.
        port: Bind port for the relay server.
        client_url: Browser origin allowed by CORS and the Socket.IO handshake.
        environment: Deployment environment name, reported at startup.
        log_level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL).
        log_json: Render logs as JSON lines instead of console output.
        speech_encoding: Audio encoding sent by the browser.
        speech_sample_rate_hertz: Sample rate of the browser audio.
        speech_language_code: BCP-47 recognition language.
        speech_automatic_punctuation: Ask the recogniser to punctuate.
        speech_model: Recognition model variant.
        speech_interim_results: Return partial results as they arrive.
        stream_close_timeout: Seconds to wait for an old stream to close
            when a client restarts streaming.
    """

    model_config = SettingsConfigDict(
        env_prefix="MURMUR_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        populate_by_name=True,
    )

    # ── Google Cloud ──
    google_credentials: str = Field(
        default="",
        validation_alias=AliasChoices(
            "MURMUR_GOOGLE_CREDENTIALS",
            "GOOGLE_APPLICATION_CREDENTIALS",
        ),
        description="Service-account JSON payload or path to a JSON key file.",
    )

    # ── Server ──
    host: str = Field(default="0.0.0.0", description="Relay bind address.")
    port: int = Field(
        default=3001,
        ge=1,
        le=65535,
        validation_alias=AliasChoices("MURMUR_PORT", "PORT"),
        description="Relay bind port.",
    )
    client_url: str = Field(
        default="http://localhost:3000",
        validation_alias=AliasChoices("MURMUR_CLIENT_URL", "CLIENT_URL"),
        description="Allowed browser origin.",
    )
    environment: str = Field(default="development", description="Deployment environment.")

    # ── Logging ──
    log_level: str = Field(default="INFO", description="Logging level.")
    log_json: bool = Field(default=True, description="Emit JSON log lines.")

    # ── Recognition ──
    speech_encoding: str = Field(default="WEBM_OPUS", description="Audio encoding name.")
    speech_sample_rate_hertz: int = Field(
        default=48_000,
        gt=0,
        description="Audio sample rate in Hz.",
    )
    speech_language_code: str = Field(default="en-US", description="Recognition language.")
    speech_automatic_punctuation: bool = Field(
        default=True,
        description="Enable automatic punctuation.",
    )
    speech_model: str = Field(default="latest_short", description="Recognition model.")
    speech_interim_results: bool = Field(default=True, description="Return interim results.")

    # ── Sessions ──
    stream_close_timeout: float = Field(
        default=5.0,
        gt=0,
        description="Seconds to wait for a replaced stream to close.",
    )

    def recognition_settings(self) -> RecognitionSettings:
        """Return the recognition stream configuration."""
        return RecognitionSettings(
            encoding=self.speech_encoding,
            sample_rate_hertz=self.speech_sample_rate_hertz,
            language_code=self.speech_language_code,
            enable_automatic_punctuation=self.speech_automatic_punctuation,
            model=self.speech_model,
            interim_results=self.speech_interim_results,
        )


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Return the cached application settings singleton.

    Returns:
        The global ``Settings`` instance.
    """
    return Settings()
