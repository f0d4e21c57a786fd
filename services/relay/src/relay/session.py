"""
Per-connection streaming session for the Murmur relay.

A :class:`Session` binds one client connection to at most one upstream
recognition stream.  Client events (start, audio, stop, disconnect)
and stream events (data, error, end) are the only transitions:

    no stream --start--> streaming --stop/disconnect/end/error--> no stream

Session fields are only changed synchronously inside these handlers,
never across an ``await``.
"""

from __future__ import annotations

from collections.abc import Awaitable, Callable
from typing import Any

import structlog

from murmur_common import metrics

from relay.gateway_base import (
    RecognitionGateway,
    RecognitionStream,
    first_transcript,
    is_benign_stream_error,
)

logger = structlog.get_logger()

Emitter = Callable[[str, Any], Awaitable[Any]]

# Outbound event names.
TRANSCRIPTION_EVENT = "transcription"
ERROR_EVENT = "error"

# Client-facing error messages.
NOT_CONFIGURED_MESSAGE = "Speech-to-Text service is not configured"
START_FAILED_MESSAGE = "Failed to start stream"
WRITE_FAILED_MESSAGE = "Failed to process audio data"
RECOGNITION_ERROR_PREFIX = "Speech recognition error: "


class Session:
    """State machine for one client connection.

    Also acts as the :class:`~relay.gateway_base.StreamListener` for the
    streams it opens.

    Args:
        connection_id: Transport-level connection identifier.
        gateway: Shared recognition gateway, or ``None`` when recognition
            is not configured.
        emit: Coroutine function sending ``(event, payload)`` to the client.
        close_timeout: Seconds to wait for a replaced stream to close.
    """

    def __init__(
        self,
        connection_id: str,
        gateway: RecognitionGateway | None,
        emit: Emitter,
        *,
        close_timeout: float = 5.0,
    ) -> None:
        self._connection_id = connection_id
        self._gateway = gateway
        self._emit = emit
        self._close_timeout = close_timeout
        self._stream: RecognitionStream | None = None
        self._ended = True
        self._closed = False
        self._log = logger.bind(connection_id=connection_id)

    @property
    def connection_id(self) -> str:
        return self._connection_id

    @property
    def stream(self) -> RecognitionStream | None:
        return self._stream

    @property
    def ended(self) -> bool:
        return self._ended

    @property
    def is_streaming(self) -> bool:
        """``True`` while a live stream accepts audio."""
        return self._stream is not None and not self._ended

    # ── client events ──

    async def on_start(self) -> None:
        """Open a new upstream stream, replacing any live one."""
        if self._closed:
            self._log.debug("stream_start_after_disconnect")
            return

        if self._gateway is None:
            self._log.warning("stream_start_not_configured")
            await self._send_error(metrics.NOT_CONFIGURED, NOT_CONFIGURED_MESSAGE)
            return

        if self.is_streaming:
            await self._replace_stream()
            # The connection may have dropped while the old stream closed.
            if self._closed:
                self._log.info("stream_restart_cancelled")
                return

        try:
            stream = self._gateway.open(self)
        except Exception:
            self._log.error("stream_start_failed", gateway=self._gateway.name, exc_info=True)
            self._stream = None
            self._ended = True
            await self._send_error(metrics.START_FAILED, START_FAILED_MESSAGE)
            return

        self._stream = stream
        self._ended = False
        metrics.STREAMS_STARTED.inc()
        self._log.info("stream_started", gateway=self._gateway.name)

    async def on_audio_chunk(self, chunk: bytes) -> None:
        """Forward *chunk* to the live stream, or drop it if there is none."""
        stream = self._stream
        if stream is None or self._ended or stream.ended:
            self._log.debug("audio_chunk_dropped", size=len(chunk))
            return

        try:
            stream.write(chunk)
        except Exception as exc:
            if is_benign_stream_error(exc):
                self._log.debug("audio_chunk_after_end", size=len(chunk))
                return
            self._log.error("audio_write_failed", size=len(chunk), exc_info=True)
            await self._send_error(metrics.WRITE_FAILED, WRITE_FAILED_MESSAGE)
            return
        metrics.AUDIO_BYTES.inc(len(chunk))

    async def on_stop(self) -> None:
        """Request graceful closure of the live stream.  Idempotent."""
        stream = self._stream
        if stream is None or self._ended:
            return
        self._ended = True
        self._stream = None
        try:
            stream.end()
        except Exception:
            self._log.error("stream_end_failed", exc_info=True)
            return
        self._log.info("stream_stop_requested")

    async def on_disconnect(self) -> None:
        """Tear down the stream when the connection is lost."""
        self._closed = True
        await self.on_stop()
        self._log.info("session_closed")

    # ── stream events ──

    async def on_data(self, stream: RecognitionStream, response: Any) -> None:
        # Results from a stopped stream are still delivered until disconnect.
        if self._closed:
            return
        text = first_transcript(response)
        if not text:
            return
        metrics.TRANSCRIPTS.inc()
        await self._send(TRANSCRIPTION_EVENT, text)

    async def on_error(self, stream: RecognitionStream, error: BaseException) -> None:
        if stream is self._stream:
            self._ended = True
            self._stream = None

        if is_benign_stream_error(error):
            self._log.debug("recognition_write_after_end")
            return

        message = getattr(error, "message", None) or str(error)
        self._log.error(
            "recognition_error",
            error=message,
            error_type=type(error).__name__,
        )
        if self._closed:
            return
        await self._send_error(metrics.RECOGNITION, RECOGNITION_ERROR_PREFIX + message)

    async def on_end(self, stream: RecognitionStream) -> None:
        if stream is not self._stream:
            self._log.debug("stale_stream_ended")
            return
        self._ended = True
        self._stream = None
        self._log.info("stream_ended_upstream")

    # ── helpers ──

    async def _replace_stream(self) -> None:
        """Detach the live stream and wait for it to close before reopening."""
        old = self._stream
        self._stream = None
        self._ended = True
        if old is None:
            return
        self._log.info("stream_restart_requested")
        try:
            closed = await old.close(self._close_timeout)
        except Exception:
            self._log.error("stream_end_failed", exc_info=True)
            return
        if not closed:
            self._log.warning("stream_close_timeout", timeout=self._close_timeout)

    async def _send_error(self, category: str, message: str) -> None:
        metrics.record_error(category)
        await self._send(ERROR_EVENT, message)

    async def _send(self, event: str, payload: Any) -> None:
        try:
            await self._emit(event, payload)
        except Exception:
            self._log.warning("client_emit_failed", client_event=event, exc_info=True)
