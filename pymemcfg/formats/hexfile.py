"""Intel HEX and MOS papertape record codecs.

Both dialects share one line layout::

    <marker><count:2><address:4>[<type:2>]<data:2*count><checksum>

Intel records start with ``:``, carry a record type byte and end with a
one-byte two's complement checksum. Papertape records start with ``;``, have no
record type and end with a 16-bit additive checksum. The terminal record has a
byte count of zero: Intel uses the fixed ``:00000001FF`` line, papertape
stores the number of data records followed by its own checksum.

Decoding targets a flat buffer indexed by address (one byte per address).
Encoding reads a two-bytes-per-address slice of the memory image and emits
only the data bytes.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, List, Optional, TextIO, Tuple

from pymemcfg.errors import HexFormatError, ScanError
from pymemcfg.image.memory import MemoryBlock
from pymemcfg.utils import debug_log
from pymemcfg.utils.scan import hex_byte, hex_word

INTEL_EOF_RECORD = ":00000001FF"
MIN_RECORD_LENGTH = 11


@dataclass(frozen=True)
class HexDialect:
    """Parameters that tell the two record dialects apart."""

    name: str
    marker: str
    has_record_type: bool
    bytes_per_line: int
    twos_complement: bool

    @property
    def checksum_digits(self) -> int:
        return 2 if self.twos_complement else 4

    def checksum(self, count: int, address: int, payload: Iterable[int]) -> int:
        total = count + ((address >> 8) & 0xFF) + (address & 0xFF) + sum(payload)
        if self.twos_complement:
            return (-total) & 0xFF
        return total & 0xFFFF


INTEL = HexDialect(name="ihex", marker=":", has_record_type=True, bytes_per_line=32, twos_complement=True)
PAPERTAPE = HexDialect(name="pap", marker=";", has_record_type=False, bytes_per_line=24, twos_complement=False)


def read_intel(stream: TextIO, buffer: bytearray) -> List[MemoryBlock]:
    """Decode an Intel HEX file from ``stream`` into ``buffer``."""

    return _HexReader(INTEL, stream, buffer).read()


def read_papertape(stream: TextIO, buffer: bytearray) -> List[MemoryBlock]:
    """Decode a MOS papertape file from ``stream`` into ``buffer``."""

    return _HexReader(PAPERTAPE, stream, buffer).read()


def write_intel(stream: TextIO, cells: bytes, base_addr: int) -> None:
    """Encode the data bytes of ``cells`` as Intel HEX records at ``base_addr``."""

    _write_records(INTEL, stream, cells, base_addr)


def write_papertape(stream: TextIO, cells: bytes, base_addr: int) -> None:
    """Encode the data bytes of ``cells`` as papertape records at ``base_addr``."""

    _write_records(PAPERTAPE, stream, cells, base_addr)


class _HexReader:
    """Line-by-line decoder for one dialect.

    Blocks are kept newest first: a record whose address does not continue the
    previous one opens a new block at the head of the list, so the returned
    list is in reverse file order. Callers rely on that order.
    """

    def __init__(self, dialect: HexDialect, stream: TextIO, buffer: bytearray) -> None:
        self._dialect = dialect
        self._stream = stream
        self._buffer = buffer
        self._blocks: List[MemoryBlock] = []
        self._writes: List[Tuple[int, bytes]] = []
        self._current_addr: Optional[int] = None
        self._lines = 0
        self._complete = False

    def read(self) -> List[MemoryBlock]:
        for raw_line in self._stream:
            self._lines += 1
            self._read_record(raw_line.rstrip("\r\n"))
            if self._complete:
                break

        if not self._complete:
            raise HexFormatError(self._lines, "Unexpected end of hex file")

        for address, payload in self._writes:
            self._buffer[address : address + len(payload)] = payload

        debug_log("hex", "%s: %d records, %d blocks", self._dialect.name, self._lines, len(self._blocks))
        return self._blocks

    def _read_record(self, line: str) -> None:
        dialect = self._dialect

        if not line.startswith(dialect.marker):
            raise self._error("Malformed hex file")

        count = self._field(line, 1, 2, "Invalid record length")
        if len(line) < MIN_RECORD_LENGTH + 2 * count:
            raise self._error("Malformed hex file: line too short")

        if count == 0:
            self._read_end_record(line)
            return

        address = self._field(line, 3, 4, "Invalid load address")
        index = 7
        if dialect.has_record_type:
            record_type = self._field(line, index, 2, "Invalid or unsupported record type")
            if record_type != 0:
                raise self._error("Invalid or unsupported record type")
            index += 2

        payload = bytearray()
        for _ in range(count):
            payload.append(self._field(line, index, 2, "Malformed hex file: invalid byte"))
            index += 2

        checksum = self._field(line, index, dialect.checksum_digits, "Malformed hex file: can't get checksum")
        expected = dialect.checksum(count, address, payload)
        if checksum != expected:
            debug_log("hex", "line %d: calculated %04X, read %04X", self._lines, expected, checksum)
            raise self._error("Malformed hex file: bad checksum")

        if address + count > len(self._buffer):
            raise self._error("Record does not fit in the destination buffer")

        if address != self._current_addr:
            self._blocks.insert(0, MemoryBlock(start=address, count=0, has_start=True))
            self._current_addr = address

        self._writes.append((address, bytes(payload)))
        self._blocks[0].count += count
        self._current_addr += count

    def _read_end_record(self, line: str) -> None:
        if self._dialect.has_record_type:
            if not line.startswith(INTEL_EOF_RECORD):
                raise self._error("Invalid end of file record")
            self._complete = True
            return

        records = self._field(line, 3, 4, "Invalid line count")
        if records != self._lines - 1:
            raise self._error("Invalid line count in hex file")
        checksum = self._field(line, 7, 4, "Invalid checksum")
        if checksum != ((records >> 8) & 0xFF) + (records & 0xFF):
            raise self._error("Invalid checksum in hex file")
        self._complete = True

    def _field(self, line: str, index: int, digits: int, message: str) -> int:
        text = line[index : index + digits]
        try:
            return hex_byte(text) if digits == 2 else hex_word(text)
        except ScanError:
            raise self._error(message) from None

    def _error(self, message: str) -> HexFormatError:
        return HexFormatError(self._lines, message)


def _write_records(dialect: HexDialect, stream: TextIO, cells: bytes, base_addr: int) -> None:
    data = bytes(cells[0::2])
    lines = 0
    address = base_addr

    for offset in range(0, len(data), dialect.bytes_per_line):
        chunk = data[offset : offset + dialect.bytes_per_line]
        line_addr = address & 0xFFFF
        parts = [f"{dialect.marker}{len(chunk):02X}{line_addr:04X}"]
        if dialect.has_record_type:
            parts.append("00")
        parts.append(chunk.hex().upper())
        checksum = dialect.checksum(len(chunk), line_addr, chunk)
        parts.append(f"{checksum:0{dialect.checksum_digits}X}")
        stream.write("".join(parts) + "\n")
        lines += 1
        address += len(chunk)

    if dialect.has_record_type:
        stream.write(INTEL_EOF_RECORD + "\n")
    else:
        stream.write(f";00{lines:04X}{((lines >> 8) & 0xFF) + (lines & 0xFF):04X}\n")

    debug_log("hex", "%s: wrote %d bytes in %d records from %04X", dialect.name, len(data), lines, base_addr)
