"""
HTTP middleware for the Murmur relay.

CORS limited to the configured browser origin, and access logging for
the relay's HTTP surface (``/``, ``/health``, ``/metrics``).  Socket.IO
traffic is routed before FastAPI and never reaches these middlewares.
"""

from __future__ import annotations

import time

import structlog
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

logger = structlog.get_logger(__name__)

# Polled endpoints, logged at debug level.
QUIET_PATHS = ("/health", "/metrics")


def add_cors(app: FastAPI, origins: list[str]) -> None:
    """Attach CORS middleware allowing *origins*."""
    app.add_middleware(
        CORSMiddleware,
        allow_origins=origins,
        allow_credentials=True,
        allow_methods=["GET"],
        allow_headers=["*"],
    )


class LoggingMiddleware(BaseHTTPMiddleware):
    """Access log for relay HTTP requests.

    Health checks and metric scrapes are logged at debug, everything
    else at info.  Unhandled errors are logged and re-raised.
    """

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint,
    ) -> Response:
        path = request.url.path
        client = request.client.host if request.client else None
        start = time.monotonic()
        try:
            response = await call_next(request)
        except Exception:
            logger.error(
                "http_request_failed",
                method=request.method,
                path=path,
                client=client,
                exc_info=True,
            )
            raise

        log = logger.debug if path.startswith(QUIET_PATHS) else logger.info
        log(
            "http_request",
            method=request.method,
            path=path,
            status=response.status_code,
            client=client,
            duration_ms=round((time.monotonic() - start) * 1000, 2),
        )
        return response
