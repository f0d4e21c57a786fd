"""
Murmur speech relay service.

Relays browser microphone audio received over Socket.IO to a streaming
speech-recognition backend and returns incremental transcripts to the
client.
"""

from relay.gateway_base import (
    RecognitionGateway,
    RecognitionStream,
    RecognitionStreamError,
    StreamListener,
    StreamWriteAfterEndError,
)
from relay.session import Session
from relay.transport import SessionManager

__all__ = [
    "RecognitionGateway",
    "RecognitionStream",
    "RecognitionStreamError",
    "Session",
    "SessionManager",
    "StreamListener",
    "StreamWriteAfterEndError",
]
