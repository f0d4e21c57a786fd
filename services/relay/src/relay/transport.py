"""
Socket.IO transport wiring for the Murmur relay.

Maps Socket.IO connection events onto per-connection
:class:`~relay.session.Session` instances:

    connect      -> create session
    startStream  -> Session.on_start
    binaryData   -> Session.on_audio_chunk
    endStream    -> Session.on_stop
    disconnect   -> Session.on_disconnect, drop session

Failures are contained per connection: a handler never lets an
exception escape into the Socket.IO server.
"""

from __future__ import annotations

import functools
from typing import Any

import socketio
import structlog

from murmur_common import metrics

from relay.gateway_base import RecognitionGateway
from relay.session import Session

logger = structlog.get_logger()


class SessionManager:
    """Registry of live sessions keyed by Socket.IO ``sid``.

    Args:
        sio: The Socket.IO server to attach handlers to.
        gateway: Shared recognition gateway (may be set later).
        close_timeout: Passed to each new :class:`Session`.
    """

    def __init__(
        self,
        sio: socketio.AsyncServer,
        gateway: RecognitionGateway | None = None,
        *,
        close_timeout: float = 5.0,
    ) -> None:
        self._sio = sio
        self.gateway = gateway
        self.close_timeout = close_timeout
        self._sessions: dict[str, Session] = {}

    def attach(self) -> None:
        """Register event handlers on the Socket.IO server."""
        self._sio.on("connect", self.handle_connect)
        self._sio.on("startStream", self.handle_start_stream)
        self._sio.on("binaryData", self.handle_binary_data)
        self._sio.on("endStream", self.handle_end_stream)
        self._sio.on("disconnect", self.handle_disconnect)

    @property
    def sessions(self) -> dict[str, Session]:
        """Snapshot of the session registry."""
        return dict(self._sessions)

    def __len__(self) -> int:
        return len(self._sessions)

    # ── handlers ──

    async def handle_connect(
        self, sid: str, environ: dict[str, Any], auth: Any = None,
    ) -> None:
        emit = functools.partial(self._sio.emit, to=sid)
        self._sessions[sid] = Session(
            sid,
            self.gateway,
            emit,
            close_timeout=self.close_timeout,
        )
        metrics.SESSIONS_ACTIVE.inc()
        logger.info(
            "client_connected",
            connection_id=sid,
            origin=environ.get("HTTP_ORIGIN"),
            active=len(self._sessions),
        )

    async def handle_start_stream(self, sid: str, *_args: Any) -> None:
        session = self._get(sid, "startStream")
        if session is None:
            return
        try:
            await session.on_start()
        except Exception:
            logger.error("start_stream_handler_failed", connection_id=sid, exc_info=True)

    async def handle_binary_data(self, sid: str, data: Any = None) -> None:
        session = self._get(sid, "binaryData")
        if session is None:
            return
        if not isinstance(data, (bytes, bytearray, memoryview)):
            logger.warning(
                "binary_data_invalid_payload",
                connection_id=sid,
                payload_type=type(data).__name__,
            )
            return
        try:
            await session.on_audio_chunk(bytes(data))
        except Exception:
            logger.error("binary_data_handler_failed", connection_id=sid, exc_info=True)

    async def handle_end_stream(self, sid: str, *_args: Any) -> None:
        session = self._get(sid, "endStream")
        if session is None:
            return
        try:
            await session.on_stop()
        except Exception:
            logger.error("end_stream_handler_failed", connection_id=sid, exc_info=True)

    async def handle_disconnect(self, sid: str, reason: Any = None) -> None:
        session = self._sessions.pop(sid, None)
        if session is None:
            return
        metrics.SESSIONS_ACTIVE.dec()
        try:
            await session.on_disconnect()
        except Exception:
            logger.error("disconnect_handler_failed", connection_id=sid, exc_info=True)
        logger.info(
            "client_disconnected",
            connection_id=sid,
            reason=str(reason) if reason is not None else None,
            active=len(self._sessions),
        )

    async def close_all(self) -> None:
        """Disconnect every session (used at shutdown)."""
        for sid in list(self._sessions):
            await self.handle_disconnect(sid, "server_shutdown")

    def _get(self, sid: str, event: str) -> Session | None:
        session = self._sessions.get(sid)
        if session is None:
            logger.warning("event_for_unknown_session", connection_id=sid, client_event=event)
        return session
