"""Speech recognition gateway implementations."""

from relay.gateways.google_speech import GoogleRecognitionStream, GoogleSpeechGateway

__all__ = [
    "GoogleRecognitionStream",
    "GoogleSpeechGateway",
]
