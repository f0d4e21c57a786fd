"""
Prometheus metrics helpers for Murmur.

Provides shared metric definitions for the relay service: active
sessions, started streams, forwarded audio volume, delivered
transcripts, and client-visible errors by category.
"""

from __future__ import annotations

from prometheus_client import Counter, Gauge

SESSIONS_ACTIVE = Gauge(
    "murmur_sessions_active",
    "Client connections with a live session",
)
STREAMS_STARTED = Counter(
    "murmur_streams_started_total",
    "Upstream recognition streams opened",
)
AUDIO_BYTES = Counter(
    "murmur_audio_bytes_total",
    "Audio bytes forwarded to recognition streams",
)
TRANSCRIPTS = Counter(
    "murmur_transcripts_total",
    "Transcription events delivered to clients",
)
ERRORS = Counter(
    "murmur_errors_total",
    "Error notifications delivered to clients",
    ["category"],
)

# Error categories reported to clients.
NOT_CONFIGURED = "not_configured"
START_FAILED = "start_failed"
WRITE_FAILED = "write_failed"
RECOGNITION = "recognition"


def record_error(category: str) -> None:
    """Increment the client-visible error counter for *category*."""
    ERRORS.labels(category=category).inc()
