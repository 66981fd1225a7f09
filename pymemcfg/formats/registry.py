"""Lookup tables for the file formats understood by the command line."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Dict, List, Optional

from pymemcfg.image.memory import MemoryBlock

from .binfile import read_bin, read_prg, read_raw, write_bin, write_prg, write_raw
from .hexdump import hexdump
from .hexfile import read_intel, read_papertape, write_intel, write_papertape

ReadFn = Callable[..., List[MemoryBlock]]
WriteFn = Callable[..., None]


@dataclass(frozen=True)
class FileFormat:
    """A named format with its reader and writer.

    ``text`` formats are opened in text mode. ``cells`` marks the formats
    whose reader fills a two-bytes-per-address buffer instead of a flat one.
    """

    name: str
    description: str
    text: bool
    reader: Optional[ReadFn] = None
    writer: Optional[WriteFn] = None
    cells: bool = False


FORMATS: Dict[str, FileFormat] = {
    fmt.name: fmt
    for fmt in (
        FileFormat("hexdump", "Hex dump (output only)", text=True, writer=hexdump),
        FileFormat("bin", "Binary data", text=False, reader=read_bin, writer=write_bin),
        FileFormat("ihex", "Intel HEX format", text=True, reader=read_intel, writer=write_intel),
        FileFormat("pap", "MOS papertape format", text=True, reader=read_papertape, writer=write_papertape),
        FileFormat("prg", "Commodore PRG format", text=False, reader=read_prg, writer=write_prg),
        FileFormat("raw", "Internal format (for debugging)", text=False, reader=read_raw, writer=write_raw, cells=True),
    )
}

READERS: Dict[str, FileFormat] = {name: fmt for name, fmt in FORMATS.items() if fmt.reader is not None}
WRITERS: Dict[str, FileFormat] = {name: fmt for name, fmt in FORMATS.items() if fmt.writer is not None}
