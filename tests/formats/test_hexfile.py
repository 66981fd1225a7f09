"""Tests for the Intel HEX and papertape codecs."""

from __future__ import annotations

import io

import pytest

from pymemcfg.errors import HexFormatError
from pymemcfg.formats import read_intel, read_papertape, write_intel, write_papertape
from pymemcfg.image import MEMORY_SIZE, MemoryImage


def _cells(data: bytes) -> bytes:
    cells = bytearray(len(data) * 2)
    cells[0::2] = data
    return bytes(cells)


def test_write_intel_lines_and_terminal_record() -> None:
    out = io.StringIO()
    write_intel(out, _cells(bytes(range(40))), 0x0200)
    lines = out.getvalue().splitlines()

    assert len(lines) == 3
    assert lines[0].startswith(":200200000001")
    assert lines[1].startswith(":08022000")
    assert lines[2] == ":00000001FF"


def test_write_intel_checksum() -> None:
    out = io.StringIO()
    write_intel(out, _cells(b"\x01\x02"), 0x1000)
    # 02 + 10 + 00 + 00 + 01 + 02 = 0x15, two's complement 0xEB
    assert out.getvalue() == ":0210000001 02EB\n:00000001FF\n".replace(" ", "")


def test_write_papertape_terminal_record_counts_lines() -> None:
    out = io.StringIO()
    write_papertape(out, _cells(bytes(50)), 0x0000)
    lines = out.getvalue().splitlines()

    assert [line[:7] for line in lines[:3]] == [";180000", ";180018", ";020030"]
    assert lines[-1] == ";0000030003"


@pytest.mark.parametrize(
    "write, read",
    [(write_intel, read_intel), (write_papertape, read_papertape)],
)
def test_decoder_reads_encoder_output(write, read) -> None:
    payload = bytes((i * 7) & 0xFF for i in range(100))
    text = io.StringIO()
    write(text, _cells(payload), 0x1234)
    text.seek(0)

    buffer = bytearray(MEMORY_SIZE)
    blocks = read(text, buffer)

    assert len(blocks) == 1
    assert (blocks[0].start, blocks[0].count, blocks[0].has_start) == (0x1234, 100, True)
    assert bytes(buffer[0x1234 : 0x1234 + 100]) == payload


def test_blocks_are_returned_newest_first() -> None:
    text = io.StringIO()
    image = MemoryImage()
    image.write_data(0x0100, b"\xaa" * 4)
    write_intel(text, image.cells(0x0100, 4), 0x0100)
    first = text.getvalue().splitlines()[0]
    text = io.StringIO()
    write_intel(text, _cells(b"\xbb" * 2), 0x0300)
    second = text.getvalue()

    buffer = bytearray(MEMORY_SIZE)
    blocks = read_intel(io.StringIO(first + "\n" + second), buffer)

    assert [(block.start, block.count) for block in blocks] == [(0x0300, 2), (0x0100, 4)]
    assert buffer[0x0100] == 0xAA
    assert buffer[0x0301] == 0xBB


def test_contiguous_records_extend_one_block() -> None:
    text = ":0201000001 02FA\n:02010200030 4F4\n:00000001FF\n".replace(" ", "")
    blocks = read_intel(io.StringIO(text), bytearray(MEMORY_SIZE))
    assert [(block.start, block.count) for block in blocks] == [(0x0100, 4)]


def test_crlf_line_endings_are_accepted() -> None:
    text = ":0201000001 02FA\r\n:00000001FF\r\n".replace(" ", "")
    blocks = read_intel(io.StringIO(text), bytearray(MEMORY_SIZE))
    assert blocks[0].count == 2


def test_bad_checksum_reports_line_and_leaves_buffer_untouched() -> None:
    text = ":0201000001 02FA\n:02010200030 4F5\n:00000001FF\n".replace(" ", "")
    buffer = bytearray(MEMORY_SIZE)

    with pytest.raises(HexFormatError) as excinfo:
        read_intel(io.StringIO(text), buffer)

    assert excinfo.value.line == 2
    assert "bad checksum" in str(excinfo.value)
    assert buffer[0x0100] == 0


def _bump_digit(line: str, index: int) -> str:
    digit = "0123456789ABCDEF"[(int(line[index], 16) + 1) % 16]
    return line[:index] + digit + line[index + 1 :]


@pytest.mark.parametrize(
    "write, read, data_offset",
    [(write_intel, read_intel, 9), (write_papertape, read_papertape, 7)],
)
def test_any_changed_data_or_checksum_digit_is_rejected(write, read, data_offset: int) -> None:
    text = io.StringIO()
    write(text, _cells(bytes((i * 7) & 0xFF for i in range(100))), 0x4321)
    lines = text.getvalue().splitlines()

    for number, line in enumerate(lines[:-1]):
        for index in range(data_offset, len(line)):
            changed = lines[:number] + [_bump_digit(line, index)] + lines[number + 1 :]
            buffer = bytearray(MEMORY_SIZE)
            with pytest.raises(HexFormatError):
                read(io.StringIO("\n".join(changed) + "\n"), buffer)
            assert not any(buffer)


def test_missing_terminal_record_fails_without_writing() -> None:
    buffer = bytearray(MEMORY_SIZE)
    with pytest.raises(HexFormatError, match="Unexpected end of hex file"):
        read_intel(io.StringIO(":020100000102FA\n"), buffer)
    assert not any(buffer)


@pytest.mark.parametrize(
    "line, message",
    [
        ("020100000102FA", "Malformed hex file"),
        (":0201000001", "line too short"),
        (":020100020102F8", "unsupported record type"),
        (":00000001FE", "Invalid end of file record"),
    ],
)
def test_intel_malformed_records(line: str, message: str) -> None:
    with pytest.raises(HexFormatError, match=message):
        read_intel(io.StringIO(line + "\n:00000001FF\n"), bytearray(MEMORY_SIZE))


def test_papertape_terminal_record_is_checked() -> None:
    data = ";0201000102 0006\n".replace(" ", "")
    assert read_papertape(io.StringIO(data + ";0000010001\n"), bytearray(MEMORY_SIZE))[0].count == 2

    with pytest.raises(HexFormatError, match="Invalid line count"):
        read_papertape(io.StringIO(data + ";0000020002\n"), bytearray(MEMORY_SIZE))
    with pytest.raises(HexFormatError, match="Invalid checksum"):
        read_papertape(io.StringIO(data + ";0000010002\n"), bytearray(MEMORY_SIZE))


def test_record_outside_buffer_is_rejected() -> None:
    with pytest.raises(HexFormatError, match="does not fit"):
        read_intel(io.StringIO(":020100000102FA\n:00000001FF\n"), bytearray(0x100))


def test_lines_after_terminal_record_are_ignored() -> None:
    text = ":020100000102FA\n:00000001FF\ngarbage\n"
    assert read_intel(io.StringIO(text), bytearray(MEMORY_SIZE))[0].start == 0x0100
