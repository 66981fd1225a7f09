"""Memory image of the emulator board.

The board keeps two bytes per emulated address: the data byte followed by an
attribute byte. The attribute carries the chip-enable bit (set means the
address is disabled) and the read/write bit (set means the address is
writable). The whole 64 KiB address space therefore takes 128 KiB.
"""

from __future__ import annotations

from dataclasses import dataclass

from pymemcfg.errors import ImageError

MEMORY_SIZE = 0x10000
BUFFER_SIZE = 2 * MEMORY_SIZE

ATTR_CE_MASK = 1 << 0
ATTR_RW_MASK = 1 << 1
ATTR_ENABLED = 0
ATTR_DISABLED = ATTR_CE_MASK
ATTR_RO = 0
ATTR_RW = ATTR_RW_MASK
ATTR_MASK = ATTR_CE_MASK | ATTR_RW_MASK


def _mask16(value: int) -> int:
    """Clamp ``value`` to the 16-bit address space of the board."""

    return value & 0xFFFF


def attribute(enabled: bool, readonly: bool) -> int:
    """Return the attribute byte for the given enable/read-only state."""

    value = ATTR_ENABLED if enabled else ATTR_DISABLED
    value |= ATTR_RO if readonly else ATTR_RW
    return value


def is_enabled(attr: int) -> bool:
    return not attr & ATTR_CE_MASK


def is_readonly(attr: int) -> bool:
    return not attr & ATTR_RW_MASK


@dataclass
class MemoryBlock:
    """One contiguous run of bytes decoded from an input file.

    ``has_start`` is false only for formats that carry no address at all, in
    which case the caller decides where the block goes.
    """

    start: int = 0
    count: int = 0
    has_start: bool = True

    @property
    def end(self) -> int:
        return self.start + self.count - 1


class MemoryImage:
    """Fixed-size buffer of data/attribute pairs for every 16-bit address."""

    def __init__(self, data: bytes | bytearray | None = None) -> None:
        if data is None:
            self._cells = bytearray(BUFFER_SIZE)
        else:
            if len(data) != BUFFER_SIZE:
                raise ImageError(f"image must be {BUFFER_SIZE} bytes, got {len(data)}")
            self._cells = bytearray(data)

    @property
    def buffer(self) -> bytearray:
        """The underlying two-bytes-per-address buffer."""

        return self._cells

    def __len__(self) -> int:
        return len(self._cells)

    def __bytes__(self) -> bytes:
        return bytes(self._cells)

    def load_data(self, address: int) -> int:
        return self._cells[_mask16(address) * 2]

    def store_data(self, address: int, value: int) -> None:
        self._cells[_mask16(address) * 2] = value & 0xFF

    def load_attribute(self, address: int) -> int:
        return self._cells[_mask16(address) * 2 + 1]

    def store_attribute(self, address: int, value: int) -> None:
        self._cells[_mask16(address) * 2 + 1] = value & ATTR_MASK

    def fill(self, value: int, attr: int) -> None:
        """Set every address to ``value`` with attribute ``attr``."""

        self._cells[0::2] = bytes([value & 0xFF]) * MEMORY_SIZE
        self._cells[1::2] = bytes([attr & ATTR_MASK]) * MEMORY_SIZE

    def fill_data(self, start: int, end: int, value: int) -> None:
        self._check_range(start, end - start + 1)
        self._cells[start * 2 : (end + 1) * 2 : 2] = bytes([value & 0xFF]) * (end - start + 1)

    def set_attributes(self, start: int, count: int, attr: int) -> None:
        self._check_range(start, count)
        self._cells[start * 2 + 1 : (start + count) * 2 : 2] = bytes([attr & ATTR_MASK]) * count

    def write_data(self, start: int, payload: bytes) -> None:
        """Copy ``payload`` into the data bytes starting at ``start``."""

        self._check_range(start, len(payload))
        self._cells[start * 2 : (start + len(payload)) * 2 : 2] = payload

    def data_bytes(self, start: int = 0, count: int = MEMORY_SIZE) -> bytes:
        """Return the data bytes of ``count`` addresses from ``start``."""

        self._check_range(start, count)
        return bytes(self._cells[start * 2 : (start + count) * 2 : 2])

    def cells(self, start: int = 0, count: int = MEMORY_SIZE) -> bytes:
        """Return the raw data/attribute pairs of ``count`` addresses."""

        self._check_range(start, count)
        return bytes(self._cells[start * 2 : (start + count) * 2])

    def write_cells(self, start: int, payload: bytes) -> None:
        if len(payload) % 2:
            raise ImageError("cell payload must hold data/attribute pairs")
        self._check_range(start, len(payload) // 2)
        self._cells[start * 2 : start * 2 + len(payload)] = payload

    def _check_range(self, start: int, count: int) -> None:
        if start < 0 or count < 0 or start + count > MEMORY_SIZE:
            raise ImageError(
                f"range {start:#06x}+{count:#x} outside the {MEMORY_SIZE:#x} address space"
            )
