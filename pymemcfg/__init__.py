"""Document and codec layer for the programmable memory emulator board.

The subpackages convert between the 128 KiB memory image used by the board
(one data byte and one attribute byte per address) and the file formats the
``memcfg`` tool reads and writes: hex records, flat binaries, UF2 flash images
and the YAML memory-map and board configuration documents.
"""

from __future__ import annotations

from .errors import MemcfgError
from . import cli, document, formats, image, utils

__all__: list[str] = [
    "MemcfgError",
    "cli",
    "document",
    "formats",
    "image",
    "utils",
]
