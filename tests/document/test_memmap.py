"""Tests for the memory map document parser."""

from __future__ import annotations

import pytest

from pymemcfg.document import MemoryMapParser, parse_memmap, parse_memmap_file
from pymemcfg.document.events import Event, EventKind
from pymemcfg.errors import MemoryMapError


def test_segments_keep_document_order() -> None:
    text = (
        "---\nstart: 0x0000\nend: 0x03FF\nenabled: true\ntype: ram\nfill: 0xEA\n"
        "---\nstart: 0x0200\ndata: \"\\x4C\\x00\\x02\"\n"
        "---\nstart: 0xFFFA\ndata: ABCDEF\ntype: rom\n"
    )
    segments = parse_memmap(text)

    assert [segment.start for segment in segments] == [0x0000, 0x0200, 0xFFFA]
    first, second, third = segments
    assert (first.end, first.enabled, first.readonly, first.fill, first.count) == (0x03FF, True, False, 0xEA, 0x400)
    assert second.data == b"\x4c\x00\x02"
    assert second.count == 3
    assert second.enabled is None and second.readonly is None
    assert (third.count, third.readonly) == (6, True)


def test_file_size_sets_count(tmp_path) -> None:
    (tmp_path / "kim.bin").write_bytes(b"\x00" * 1024)
    (tmp_path / "map.yaml").write_text("start: 0x1C00\nfile: kim.bin\nenabled: true\n")

    (segment,) = parse_memmap_file(tmp_path / "map.yaml")

    assert segment.count == 1024
    assert segment.file == "kim.bin"
    assert segment.path == tmp_path / "kim.bin"


def test_empty_stream_gives_no_segments() -> None:
    assert parse_memmap("") == []


@pytest.mark.parametrize(
    "text, message",
    [
        ("end: 0x10\nenabled: true\n", "'start' is mandatory"),
        ("start: 0x20\nend: 0x10\nenabled: true\n", "'end' smaller than 'start'"),
        ("start: 0x20\nenabled: true\n", "at least one of 'end', 'data' or 'file'"),
        ("start: 0x20\ndata: AB\nfile: x.bin\n", "mutually exclusive"),
        ("start: 0x20\ndata: AB\nfill: 0\n", "'fill' needs an 'end'"),
        ("start: 0x20\nend: 0x30\n", "No action for section starting at 0x0020"),
        ("start: 0xFFFF\ndata: AB\n", "too big in segment starting at 0xFFFF"),
        ("start: 0x10\nend: 0x10\ndata: AB\n", "too big"),
        ("start: 0x10\nstart: 0x20\n", "Duplicated key: start"),
        ("start: 0x10\ncolour: red\n", "Unexpected memory parameter: colour"),
        ("start: 0x10000\n", "Invalid start memory address"),
        ("start: 0\nend: 1\nenabled: yes\n", "Invalid boolean value for 'enabled'"),
        ("start: 0\nend: 1\ntype: flash\n", "Invalid memory type"),
        ("start: 0\nend: 1\nfill: 0x100\n", "Invalid 'fill' byte"),
        ("start: 0\ndata: ''\n", "'data' must not be blank"),
        ("start: 0\nfile: ''\n", "'file' must not be blank"),
        ("start: 0\nfile: missing.bin\n", "Can't get file 'missing.bin' size"),
        ("- start: 0\n", "Bad memory map file"),
        ("start: [1, 2]\n", "Bad memory map file"),
        ("start: [0x10\n", "Bad memory map file"),
    ],
)
def test_rejected_documents(tmp_path, text: str, message: str) -> None:
    with pytest.raises(MemoryMapError, match=message):
        parse_memmap(text, base_dir=tmp_path)


@pytest.mark.parametrize(
    "value, expected",
    [
        ("\\xE9", b"\xc3\xa9"),
        ("\\u20ac", b"\xe2\x82\xac"),
        ("caf\\xE9!", b"caf\xc3\xa9!"),
    ],
)
def test_data_is_stored_as_utf8(value: str, expected: bytes) -> None:
    (segment,) = parse_memmap(f'start: 0x100\ndata: "{value}"\n')

    assert segment.data == expected
    assert segment.count == len(expected)


def test_failure_in_later_document_discards_everything() -> None:
    text = "---\nstart: 0\nend: 1\nenabled: true\n---\nstart: 5\n"
    with pytest.raises(MemoryMapError):
        parse_memmap(text)


def test_duplicate_detection_is_per_document() -> None:
    text = "---\nstart: 0\nend: 1\nenabled: true\n---\nstart: 2\nend: 3\nenabled: false\n"
    assert len(parse_memmap(text)) == 2


def test_parser_rejects_events_out_of_place() -> None:
    parser = MemoryMapParser()
    parser.feed(Event(EventKind.STREAM_START))
    with pytest.raises(MemoryMapError, match="unexpected scalar event"):
        parser.feed(Event.scalar("start"))


def test_missing_stream_end_is_an_error() -> None:
    parser = MemoryMapParser()
    with pytest.raises(MemoryMapError, match="unexpected end of input"):
        parser.consume([Event(EventKind.STREAM_START)])


def test_unreadable_map_file(tmp_path) -> None:
    with pytest.raises(MemoryMapError, match="Can't open memory map file"):
        parse_memmap_file(tmp_path / "absent.yaml")
