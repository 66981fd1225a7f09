"""Scanning and debug helpers shared by the memcfg packages."""

from .debug import debug_enabled, debug_log
from . import scan

__all__ = [
    "debug_enabled",
    "debug_log",
    "scan",
]
