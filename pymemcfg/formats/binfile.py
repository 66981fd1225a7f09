"""Flat binary codecs: plain binary, PRG and the internal raw dump."""

from __future__ import annotations

import struct
from typing import BinaryIO, List

from pymemcfg.errors import BinaryFormatError
from pymemcfg.image.memory import MemoryBlock
from pymemcfg.utils import debug_log

PRG_HEADER = struct.Struct("<H")


def read_bin(stream: BinaryIO, buffer: bytearray) -> List[MemoryBlock]:
    """Read a headerless binary into ``buffer`` starting at offset 0.

    The file carries no address, so the returned block has ``has_start``
    cleared and the caller supplies the load address.
    """

    payload = _read_payload(stream, len(buffer))
    buffer[: len(payload)] = payload
    debug_log("bin", "bin: read %d bytes", len(payload))
    return [MemoryBlock(start=0, count=len(payload), has_start=False)]


def read_prg(stream: BinaryIO, buffer: bytearray) -> List[MemoryBlock]:
    """Read a PRG file: a little-endian load address followed by the data."""

    header = stream.read(PRG_HEADER.size)
    if len(header) < PRG_HEADER.size:
        raise BinaryFormatError("Invalid file length")
    (start,) = PRG_HEADER.unpack(header)

    payload = _read_payload(stream, len(buffer) - start)
    buffer[start : start + len(payload)] = payload
    debug_log("bin", "prg: read %d bytes at %04X", len(payload), start)
    return [MemoryBlock(start=start, count=len(payload), has_start=True)]


def read_raw(stream: BinaryIO, buffer: bytearray) -> List[MemoryBlock]:
    """Read a raw dump (data/attribute pairs) into the cell ``buffer``.

    The raw layout mirrors the board's internal memory and may change with
    the firmware; it is meant for diagnostics.
    """

    payload = _read_payload(stream, len(buffer))
    if len(payload) % 2:
        raise BinaryFormatError("Raw file length must be even")
    buffer[: len(payload)] = payload
    debug_log("bin", "raw: read %d cells", len(payload) // 2)
    return [MemoryBlock(start=0, count=len(payload) // 2, has_start=False)]


def write_bin(stream: BinaryIO, cells: bytes, base_addr: int = 0) -> None:
    """Write the data bytes of ``cells``; the attribute bytes are dropped."""

    stream.write(bytes(cells[0::2]))


def write_prg(stream: BinaryIO, cells: bytes, base_addr: int) -> None:
    stream.write(PRG_HEADER.pack(base_addr & 0xFFFF))
    write_bin(stream, cells, base_addr)


def write_raw(stream: BinaryIO, cells: bytes, base_addr: int = 0) -> None:
    stream.write(bytes(cells))


def _read_payload(stream: BinaryIO, capacity: int) -> bytes:
    # The extra byte detects files larger than the capacity.
    payload = stream.read(capacity + 1) if capacity >= 0 else b""
    if not payload or len(payload) > capacity:
        raise BinaryFormatError("Invalid file size")
    return payload
