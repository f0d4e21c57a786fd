"""
Structured logging setup for Murmur.

Configures structlog for JSON-formatted structured logging. Every log
line includes timestamp, level, service name, and event. Per-connection
context (connection_id) is bound by each session.
"""

from __future__ import annotations

import logging
import sys

import structlog


def configure_logging(
    service: str,
    *,
    level: str = "INFO",
    json_output: bool = True,
) -> None:
    """Configure structlog and the stdlib root logger.

    Args:
        service: Service name bound to every log line.
        level: Minimum level name (``DEBUG``, ``INFO``, ...).
        json_output: Render JSON lines when ``True``, console output otherwise.
    """
    log_level = logging.getLevelName(level.upper())
    if not isinstance(log_level, int):
        log_level = logging.INFO

    def add_service(
        _logger: object, _method: str, event_dict: structlog.types.EventDict,
    ) -> structlog.types.EventDict:
        event_dict.setdefault("service", service)
        return event_dict

    renderer: structlog.types.Processor
    if json_output:
        renderer = structlog.processors.JSONRenderer()
    else:
        renderer = structlog.dev.ConsoleRenderer()

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.processors.add_log_level,
            add_service,
            structlog.processors.TimeStamper(fmt="iso", utc=True),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            renderer,
        ],
        wrapper_class=structlog.make_filtering_bound_logger(log_level),
        logger_factory=structlog.PrintLoggerFactory(file=sys.stdout),
        cache_logger_on_first_use=False,
    )

    # Third-party libraries (uvicorn, socketio, grpc) log via stdlib.
    logging.basicConfig(
        level=log_level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        stream=sys.stdout,
    )
    for noisy in ("socketio", "engineio"):
        logging.getLogger(noisy).setLevel(max(log_level, logging.WARNING))

