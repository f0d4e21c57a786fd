"""
Abstract interfaces for speech recognition gateways in Murmur.

A gateway wraps one long-lived client for an external streaming
speech-recognition service.  Each call to :meth:`RecognitionGateway.open`
creates one bidirectional :class:`RecognitionStream` that accepts raw
audio and reports results, errors and completion to a
:class:`StreamListener`.
"""

from __future__ import annotations

import asyncio
from abc import ABC, abstractmethod
from typing import Any, Protocol

# Message of the error raised when audio is written to a finished stream.
WRITE_AFTER_END = "write after end"


class RecognitionStreamError(Exception):
    """Base class for recognition stream failures."""


class StreamWriteAfterEndError(RecognitionStreamError):
    """Raised when audio is written to a stream that has already ended."""

    def __init__(self) -> None:
        super().__init__(WRITE_AFTER_END)


def is_benign_stream_error(error: BaseException) -> bool:
    """Return ``True`` for the write/finish race that needs no reporting."""
    return str(error) == WRITE_AFTER_END


def first_transcript(response: Any) -> str | None:
    """Return the first alternative of the first result in *response*.

    Args:
        response: A streaming recognition response with nested
            ``results[].alternatives[].transcript`` fields.

    Returns:
        The transcript text, or ``None`` when the response carries none.
    """
    results = getattr(response, "results", None)
    if not results:
        return None
    alternatives = getattr(results[0], "alternatives", None)
    if not alternatives:
        return None
    return getattr(alternatives[0], "transcript", None) or None


class StreamListener(Protocol):
    """Receiver for events emitted by a :class:`RecognitionStream`.

    Every callback receives the originating stream so a listener can
    ignore events from streams it no longer owns.
    """

    async def on_data(self, stream: RecognitionStream, response: Any) -> None:
        """Handle one recognition response."""
        ...  # pragma: no cover

    async def on_error(self, stream: RecognitionStream, error: BaseException) -> None:
        """Handle a stream failure.  No further events follow."""
        ...  # pragma: no cover

    async def on_end(self, stream: RecognitionStream) -> None:
        """Handle normal stream completion.  No further events follow."""
        ...  # pragma: no cover


class RecognitionStream(ABC):
    """One bidirectional recognition stream.

    Subclasses provide :meth:`write`, :meth:`end`, :meth:`wait_closed`,
    and :meth:`abort`.  :attr:`ended` becomes ``True`` as soon as
    :meth:`end` is requested or the stream finishes on its own.
    """

    @property
    @abstractmethod
    def ended(self) -> bool:
        """``True`` once the stream accepts no more audio."""
        ...  # pragma: no cover

    @abstractmethod
    def write(self, chunk: bytes) -> None:
        """Queue *chunk* for delivery, preserving call order.

        Raises:
            StreamWriteAfterEndError: If the stream has already ended.
        """
        ...  # pragma: no cover

    @abstractmethod
    def end(self) -> None:
        """Request graceful closure.  Calling it again is a no-op."""
        ...  # pragma: no cover

    @abstractmethod
    async def wait_closed(self) -> None:
        """Wait until the stream has delivered its final event."""
        ...  # pragma: no cover

    @abstractmethod
    def abort(self) -> None:
        """Tear the stream down immediately without waiting for results."""
        ...  # pragma: no cover

    async def close(self, timeout: float) -> bool:
        """End the stream and wait up to *timeout* seconds for it to finish.

        The stream is aborted when it does not finish in time, or when
        :meth:`end` itself fails.

        Returns:
            ``True`` if the stream closed gracefully, ``False`` if aborted.

        Raises:
            Exception: Whatever :meth:`end` raised, after aborting.
        """
        try:
            self.end()
        except Exception:
            self.abort()
            raise
        try:
            await asyncio.wait_for(self.wait_closed(), timeout)
        except asyncio.TimeoutError:
            self.abort()
            return False
        return True


class RecognitionGateway(ABC):
    """Factory for recognition streams backed by a shared client."""

    @property
    @abstractmethod
    def name(self) -> str:
        """Return the gateway identifier (e.g. ``'google_speech'``)."""
        ...  # pragma: no cover

    @abstractmethod
    def open(self, listener: StreamListener) -> RecognitionStream:
        """Open a new stream that reports its events to *listener*.

        Raises:
            Exception: If the service rejects the stream configuration.
        """
        ...  # pragma: no cover

    @abstractmethod
    async def close(self) -> None:
        """Release the underlying client."""
        ...  # pragma: no cover
