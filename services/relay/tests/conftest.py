"""Shared fixtures for relay service tests."""

from __future__ import annotations

import logging
import sys
from pathlib import Path
from unittest.mock import AsyncMock, MagicMock

import pytest
import structlog

# Make helpers in this directory importable from test files
# (needed with --import-mode=importlib).
sys.path.insert(0, str(Path(__file__).resolve().parent))

from fakes import FakeGateway  # noqa: E402

from relay.session import Session  # noqa: E402


@pytest.fixture()
def connection_id() -> str:
    """A deterministic Socket.IO sid for tests."""
    return "sid-1234"


@pytest.fixture()
def gateway() -> FakeGateway:
    return FakeGateway()


@pytest.fixture()
def emit() -> AsyncMock:
    """Records ``(event, payload)`` pairs sent to the client."""
    return AsyncMock()


@pytest.fixture()
def session(connection_id: str, gateway: FakeGateway, emit: AsyncMock) -> Session:
    return Session(connection_id, gateway, emit, close_timeout=0.05)


@pytest.fixture()
def mock_sio() -> MagicMock:
    """A mock Socket.IO server with an async ``emit``."""
    sio = MagicMock()
    sio.emit = AsyncMock()
    sio.on = MagicMock()
    return sio


@pytest.fixture()
def sample_chunks() -> list[bytes]:
    """Three distinct WebM/Opus-sized audio frames."""
    return [b"\x1a\x45\xdf\xa3" * 64, b"\x00\x01" * 256, b"\xff\xfe" * 128]


@pytest.fixture()
def restore_logging():
    """Undo structlog and root-logger configuration done by a test."""
    root = logging.getLogger()
    handlers = list(root.handlers)
    level = root.level
    yield
    structlog.reset_defaults()
    root.handlers[:] = handlers
    root.setLevel(level)
