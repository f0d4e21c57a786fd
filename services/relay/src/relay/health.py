"""
Health check endpoints for the Murmur relay service.

Exposes ``/`` as a plain liveness probe and ``/health`` returning
service status, credential configuration, and the number of
connected clients.
"""

from __future__ import annotations

from collections.abc import Callable
from typing import Any

from fastapi import APIRouter
from fastapi.responses import PlainTextResponse

router = APIRouter(tags=["health"])

# Populated by main.py during startup.
_status: dict[str, Any] = {"credentials_configured": False}
_session_counter: Callable[[], int] | None = None


def set_credentials_status(configured: bool) -> None:
    """Record whether the speech gateway was configured at startup."""
    _status["credentials_configured"] = configured


def set_session_counter(counter: Callable[[], int] | None) -> None:
    """Register a callable returning the number of live sessions."""
    global _session_counter  # noqa: PLW0603
    _session_counter = counter


def reset_status() -> None:
    """Restore the initial status when the service shuts down."""
    set_credentials_status(False)
    set_session_counter(None)


@router.get("/", response_class=PlainTextResponse)
async def root() -> str:
    return "Server is running"


@router.get("/health")
async def health_check() -> dict[str, Any]:
    """Return service health including credential status.

    Returns:
        Dict with ``status``, ``service``, ``credentials_configured``,
        and ``active_sessions`` keys.
    """
    configured = bool(_status["credentials_configured"])
    return {
        "status": "ok" if configured else "degraded",
        "service": "relay",
        "credentials_configured": configured,
        "active_sessions": _session_counter() if _session_counter else 0,
    }
