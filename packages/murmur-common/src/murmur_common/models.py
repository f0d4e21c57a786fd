"""
Shared Pydantic data models for Murmur.

Defines the recognition stream configuration handed to speech
gateways when a client starts streaming.
"""

from __future__ import annotations

from pydantic import BaseModel, Field


class RecognitionSettings(BaseModel):
    """Fixed configuration applied to every upstream recognition stream.

    Attributes:
        encoding: Audio encoding name (e.g. ``WEBM_OPUS``, ``LINEAR16``).
        sample_rate_hertz: Sample rate of the incoming audio.
        language_code: BCP-47 recognition language.
        enable_automatic_punctuation: Whether the recogniser adds punctuation.
        model: Recognition model variant (``latest_short`` for short utterances).
        interim_results: Whether partial hypotheses are returned.
    """

    model_config = {"frozen": True}

    encoding: str = Field(default="WEBM_OPUS", description="Audio encoding name.")
    sample_rate_hertz: int = Field(default=48_000, gt=0, description="Sample rate in Hz.")
    language_code: str = Field(default="en-US", max_length=35, description="Recognition language.")
    enable_automatic_punctuation: bool = Field(
        default=True,
        description="Enable automatic punctuation.",
    )
    model: str = Field(default="latest_short", description="Recognition model variant.")
    interim_results: bool = Field(default=True, description="Return interim results.")
