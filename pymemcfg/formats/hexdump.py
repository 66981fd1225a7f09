"""Human readable dump of the data bytes of an image slice."""

from __future__ import annotations

from typing import TextIO

COLUMNS = 16
HALF_COLUMNS = COLUMNS // 2


def _printable(value: int) -> str:
    return chr(value) if 0x20 <= value < 0x7F else "."


def hexdump(stream: TextIO, cells: bytes, base_addr: int = 0) -> None:
    """Write 16 data bytes per line with an address column and ASCII gutter."""

    data = bytes(cells[0::2])
    for offset in range(0, len(data), COLUMNS):
        row = data[offset : offset + COLUMNS]
        left = " ".join(f"{value:02X}" for value in row[:HALF_COLUMNS])
        right = " ".join(f"{value:02X}" for value in row[HALF_COLUMNS:])
        hex_part = f"{left:<{HALF_COLUMNS * 3 - 1}}  {right:<{HALF_COLUMNS * 3 - 1}}"
        ascii_part = "".join(_printable(value) for value in row)
        stream.write(f"{base_addr + offset:010X}: {hex_part}  {ascii_part}\n")
