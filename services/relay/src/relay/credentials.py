"""
Credential loading for the Murmur relay.

The Google service-account key may be supplied inline as a JSON
document or as a path to a key file.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any


class CredentialsError(ValueError):
    """Raised when configured credentials cannot be parsed."""


def load_service_account_info(raw: str) -> dict[str, Any] | None:
    """Parse a service-account key from *raw*.

    Args:
        raw: Inline JSON object, a path to a JSON key file, or empty.

    Returns:
        The parsed key, or ``None`` when no credentials are configured.

    Raises:
        CredentialsError: If the value is not a readable JSON object.
    """
    value = raw.strip()
    if not value:
        return None

    if not value.startswith("{"):
        path = Path(value).expanduser()
        if not path.is_file():
            raise CredentialsError(f"Credentials file not found: {path}")
        try:
            value = path.read_text(encoding="utf-8")
        except OSError as exc:
            raise CredentialsError(f"Cannot read credentials file: {path}") from exc

    try:
        info = json.loads(value)
    except json.JSONDecodeError as exc:
        raise CredentialsError("Credentials are not valid JSON") from exc

    if not isinstance(info, dict):
        raise CredentialsError("Credentials must be a JSON object")
    if not info:
        return None
    return info
