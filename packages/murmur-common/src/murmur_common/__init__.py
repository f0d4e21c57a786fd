"""
murmur-common: Shared library for Murmur.

Provides configuration management, structured logging, shared data
models, and Prometheus metrics helpers used by the Murmur relay service.
"""

from murmur_common.config import Settings, get_settings

__all__ = [
    "Settings",
    "get_settings",
]
