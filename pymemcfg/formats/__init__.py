"""Codecs for the memory image file formats."""

from __future__ import annotations

from .binfile import read_bin, read_prg, read_raw, write_bin, write_prg, write_raw
from .hexdump import hexdump
from .hexfile import INTEL, PAPERTAPE, HexDialect, read_intel, read_papertape, write_intel, write_papertape
from .registry import FORMATS, READERS, WRITERS, FileFormat
from .uf2 import Uf2Block, read_uf2, write_uf2

__all__ = [
    "FORMATS",
    "READERS",
    "WRITERS",
    "FileFormat",
    "HexDialect",
    "INTEL",
    "PAPERTAPE",
    "Uf2Block",
    "hexdump",
    "read_bin",
    "read_intel",
    "read_papertape",
    "read_prg",
    "read_raw",
    "read_uf2",
    "write_bin",
    "write_intel",
    "write_papertape",
    "write_prg",
    "write_raw",
    "write_uf2",
]
