"""Exception hierarchy shared by the codecs and document parsers."""

from __future__ import annotations


class MemcfgError(RuntimeError):
    """Base class for every failure reported by the memcfg core."""


class ScanError(MemcfgError, ValueError):
    """Raised when a text token cannot be converted to the expected value."""


class ImageError(MemcfgError):
    """Raised when a memory image is addressed outside its bounds."""


class HexFormatError(MemcfgError):
    """Raised when a hex record file violates the record layout."""

    def __init__(self, line: int, message: str) -> None:
        super().__init__(f"{message} at line {line}")
        self.line = line


class BinaryFormatError(MemcfgError):
    """Raised when a binary file does not fit the destination buffer."""


class Uf2FormatError(MemcfgError):
    """Raised when a UF2 block is malformed."""


class MemoryMapError(MemcfgError):
    """Raised when a memory map document is rejected."""


class ConfigError(MemcfgError):
    """Raised when a board configuration document is rejected."""
