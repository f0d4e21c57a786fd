"""
Google Cloud Speech-to-Text gateway for Murmur.

Opens bidirectional ``streaming_recognize`` calls on a shared
``SpeechAsyncClient``.  Audio chunks written to a stream are queued and
sent after the initial configuration request; responses are routed to
the stream's listener from a background task.
"""

from __future__ import annotations

import asyncio
from collections.abc import AsyncIterator
from typing import Any

import structlog
from google.cloud import speech
from google.oauth2 import service_account

from murmur_common.models import RecognitionSettings

from relay.gateway_base import (
    RecognitionGateway,
    RecognitionStream,
    StreamListener,
    StreamWriteAfterEndError,
)

logger = structlog.get_logger()


class GoogleRecognitionStream(RecognitionStream):
    """A single ``streaming_recognize`` call.

    The call is started on creation.  :meth:`end` enqueues a sentinel
    that finishes the request iterator; the service then flushes its
    final results and completes the response stream.

    Args:
        client: Shared ``SpeechAsyncClient``.
        streaming_config: Configuration sent as the first request.
        listener: Receiver for data, error and end events.
    """

    def __init__(
        self,
        client: Any,
        streaming_config: speech.StreamingRecognitionConfig,
        listener: StreamListener,
    ) -> None:
        self._client = client
        self._streaming_config = streaming_config
        self._listener = listener
        self._queue: asyncio.Queue[bytes | None] = asyncio.Queue()
        self._ended = False
        self._closed = asyncio.Event()
        self._task = asyncio.create_task(self._run(), name="google-speech-stream")

    # ── RecognitionStream interface ──

    @property
    def ended(self) -> bool:
        return self._ended

    def write(self, chunk: bytes) -> None:
        if self._ended:
            raise StreamWriteAfterEndError()
        self._queue.put_nowait(chunk)

    def end(self) -> None:
        if self._ended:
            return
        self._ended = True
        self._queue.put_nowait(None)

    async def wait_closed(self) -> None:
        await self._closed.wait()

    def abort(self) -> None:
        self._ended = True
        self._task.cancel()

    # ── internals ──

    async def _requests(self) -> AsyncIterator[speech.StreamingRecognizeRequest]:
        """Yield the config request, then one request per queued chunk."""
        yield speech.StreamingRecognizeRequest(streaming_config=self._streaming_config)
        while True:
            chunk = await self._queue.get()
            if chunk is None:
                return
            yield speech.StreamingRecognizeRequest(audio_content=chunk)

    async def _run(self) -> None:
        try:
            responses = await self._client.streaming_recognize(requests=self._requests())
            async for response in responses:
                await self._listener.on_data(self, response)
        except asyncio.CancelledError:
            self._ended = True
            logger.info("google_speech_stream_aborted")
            raise
        except Exception as exc:  # noqa: BLE001
            self._ended = True
            await self._listener.on_error(self, exc)
        else:
            self._ended = True
            await self._listener.on_end(self)
        finally:
            self._closed.set()


class GoogleSpeechGateway(RecognitionGateway):
    """Recognition gateway backed by Google Cloud Speech-to-Text.

    Args:
        client: A ``speech.SpeechAsyncClient`` shared by all streams.
        recognition: Configuration applied to every stream.
    """

    def __init__(self, client: Any, recognition: RecognitionSettings) -> None:
        self._client = client
        self._recognition = recognition

    @classmethod
    def from_service_account_info(
        cls,
        info: dict[str, Any],
        recognition: RecognitionSettings,
    ) -> GoogleSpeechGateway:
        """Build a gateway from a parsed service-account key.

        Raises:
            ValueError: If *info* is not a valid service-account key.
        """
        credentials = service_account.Credentials.from_service_account_info(info)
        client = speech.SpeechAsyncClient(credentials=credentials)
        logger.info(
            "google_speech_client_created",
            project_id=info.get("project_id"),
            client_email=info.get("client_email"),
        )
        return cls(client, recognition)

    @property
    def name(self) -> str:  # noqa: D401
        """Gateway identifier."""
        return "google_speech"

    @property
    def recognition(self) -> RecognitionSettings:
        return self._recognition

    def streaming_config(self) -> speech.StreamingRecognitionConfig:
        """Build the ``StreamingRecognitionConfig`` for a new stream.

        Raises:
            KeyError: If the configured encoding name is unknown.
        """
        rec = self._recognition
        config = speech.RecognitionConfig(
            encoding=speech.RecognitionConfig.AudioEncoding[rec.encoding],
            sample_rate_hertz=rec.sample_rate_hertz,
            language_code=rec.language_code,
            enable_automatic_punctuation=rec.enable_automatic_punctuation,
            model=rec.model,
        )
        return speech.StreamingRecognitionConfig(
            config=config,
            interim_results=rec.interim_results,
        )

    def open(self, listener: StreamListener) -> GoogleRecognitionStream:
        stream = GoogleRecognitionStream(self._client, self.streaming_config(), listener)
        logger.debug(
            "google_speech_stream_opened",
            language=self._recognition.language_code,
            model=self._recognition.model,
        )
        return stream

    async def close(self) -> None:
        """Close the client's gRPC channel."""
        try:
            await self._client.transport.close()
        except Exception:  # noqa: BLE001
            logger.debug("google_speech_close_error", exc_info=True)
        logger.info("google_speech_client_closed")
