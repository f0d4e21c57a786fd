"""
Relay service entry point for Murmur.

Builds the shared speech gateway from configured credentials, wires the
Socket.IO server to per-connection sessions, and exposes health and
metrics endpoints alongside it on one ASGI application.
"""

from __future__ import annotations

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

import socketio
import structlog
import uvicorn
from fastapi import FastAPI
from prometheus_client import make_asgi_app

from murmur_common.config import Settings, get_settings
from murmur_common.logging import configure_logging

from relay.credentials import load_service_account_info
from relay.gateway_base import RecognitionGateway
from relay.gateways.google_speech import GoogleSpeechGateway
from relay.health import router as health_router
from relay.health import reset_status, set_credentials_status, set_session_counter
from relay.middleware import LoggingMiddleware, add_cors
from relay.transport import SessionManager

logger = structlog.get_logger()


def build_gateway(settings: Settings) -> RecognitionGateway | None:
    """Create the shared Google Speech gateway, or ``None`` if unavailable.

    Missing or invalid credentials disable recognition without
    preventing the service from starting.
    """
    try:
        info = load_service_account_info(settings.google_credentials)
    except Exception:
        logger.error("speech_credentials_invalid", exc_info=True)
        return None

    if info is None:
        logger.warning("speech_credentials_missing")
        return None

    try:
        return GoogleSpeechGateway.from_service_account_info(
            info, settings.recognition_settings(),
        )
    except Exception:
        logger.error("speech_gateway_init_failed", exc_info=True)
        return None


def create_socketio_server(settings: Settings) -> socketio.AsyncServer:
    """Build the Socket.IO server.

    Handlers run inline (``async_handlers=False``) so each connection's
    events are processed one at a time in arrival order.
    """
    return socketio.AsyncServer(
        async_mode="asgi",
        cors_allowed_origins=[settings.client_url],
        async_handlers=False,
    )


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Application lifespan: build the gateway, tear down sessions on exit."""
    settings = get_settings()
    configure_logging("relay", level=settings.log_level, json_output=settings.log_json)

    sessions: SessionManager = app.state.sessions

    # ── startup ──
    gateway = build_gateway(settings)
    sessions.gateway = gateway
    sessions.close_timeout = settings.stream_close_timeout
    set_credentials_status(gateway is not None)
    set_session_counter(lambda: len(sessions))

    logger.info(
        "relay_startup",
        port=settings.port,
        environment=settings.environment,
        client_url=settings.client_url,
        credentials_configured=gateway is not None,
    )

    yield

    # ── shutdown ──
    logger.info("relay_shutdown", active_sessions=len(sessions))
    await sessions.close_all()
    sessions.gateway = None
    reset_status()
    if gateway is not None:
        await gateway.close()


def create_app(sessions: SessionManager, settings: Settings | None = None) -> FastAPI:
    """Build and return the FastAPI application."""
    settings = settings or get_settings()
    app = FastAPI(title="Murmur Relay", version="0.1.0", lifespan=lifespan)
    app.state.sessions = sessions

    app.include_router(health_router)
    app.mount("/metrics", make_asgi_app())

    app.add_middleware(LoggingMiddleware)
    add_cors(app, [settings.client_url])
    return app


sio = create_socketio_server(get_settings())
session_manager = SessionManager(sio)
session_manager.attach()

app = create_app(session_manager)
asgi_app = socketio.ASGIApp(sio, other_asgi_app=app)


def main() -> None:
    """Run the relay service with Uvicorn."""
    settings = get_settings()
    uvicorn.run(
        "relay.main:asgi_app",
        host=settings.host,
        port=settings.port,
        log_level=settings.log_level.lower(),
    )


if __name__ == "__main__":
    main()
