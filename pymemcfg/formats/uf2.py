"""UF2 flash image writer for the board firmware.

Every 512-byte block carries a 32-byte header, a 476-byte data area of which
the first 256 bytes hold payload, and a trailing magic word::

    magic_start0 magic_start1 flags target_addr payload_size
    block_no num_blocks family_id | data[476] | magic_end
"""

from __future__ import annotations

import struct
from dataclasses import dataclass
from typing import BinaryIO, List

from pymemcfg.errors import Uf2FormatError
from pymemcfg.utils import debug_log

UF2_BLOCK_SIZE = 512
UF2_PAYLOAD_SIZE = 256
UF2_MAGIC_START0 = 0x0A324655  # "UF2\n"
UF2_MAGIC_START1 = 0x9E5D5157
UF2_MAGIC_END = 0x0AB16F30
UF2_FLAG_FAMILY_ID = 0x00002000
RP2040_FAMILY_ID = 0xE48BFF56

_HEADER = struct.Struct("<8I")
_TRAILER = struct.Struct("<I")
_DATA_AREA = UF2_BLOCK_SIZE - _HEADER.size - _TRAILER.size


@dataclass(frozen=True)
class Uf2Block:
    """Decoded header fields and payload of one UF2 block."""

    flags: int
    target_addr: int
    payload_size: int
    block_no: int
    num_blocks: int
    family_id: int
    payload: bytes


def block_count(size: int) -> int:
    return (size + UF2_PAYLOAD_SIZE - 1) // UF2_PAYLOAD_SIZE


def write_uf2(stream: BinaryIO, data: bytes, address: int) -> int:
    """Write ``data`` as UF2 blocks targeting ``address``; return the block count."""

    total = block_count(len(data))
    for block_no in range(total):
        offset = block_no * UF2_PAYLOAD_SIZE
        chunk = data[offset : offset + UF2_PAYLOAD_SIZE]
        header = _HEADER.pack(
            UF2_MAGIC_START0,
            UF2_MAGIC_START1,
            UF2_FLAG_FAMILY_ID,
            address + offset,
            UF2_PAYLOAD_SIZE,
            block_no,
            total,
            RP2040_FAMILY_ID,
        )
        stream.write(header + chunk.ljust(_DATA_AREA, b"\x00") + _TRAILER.pack(UF2_MAGIC_END))

    debug_log("uf2", "wrote %d blocks (%d bytes) at %08X", total, len(data), address)
    return total


def read_uf2(stream: BinaryIO) -> List[Uf2Block]:
    """Decode every block of a UF2 stream, checking the framing."""

    blocks: List[Uf2Block] = []
    while True:
        raw = stream.read(UF2_BLOCK_SIZE)
        if not raw:
            break
        if len(raw) < UF2_BLOCK_SIZE:
            raise Uf2FormatError(f"truncated block {len(blocks)}")

        fields = _HEADER.unpack_from(raw)
        (magic_end,) = _TRAILER.unpack_from(raw, UF2_BLOCK_SIZE - _TRAILER.size)
        if fields[0] != UF2_MAGIC_START0 or fields[1] != UF2_MAGIC_START1 or magic_end != UF2_MAGIC_END:
            raise Uf2FormatError(f"bad magic in block {len(blocks)}")

        payload_size = fields[4]
        if payload_size > _DATA_AREA:
            raise Uf2FormatError(f"payload size {payload_size} too large in block {len(blocks)}")

        blocks.append(
            Uf2Block(
                flags=fields[2],
                target_addr=fields[3],
                payload_size=payload_size,
                block_no=fields[5],
                num_blocks=fields[6],
                family_id=fields[7],
                payload=raw[_HEADER.size : _HEADER.size + payload_size],
            )
        )
    return blocks
