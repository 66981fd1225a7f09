from __future__ import annotations

import io

from pymemcfg.formats import FORMATS, READERS, WRITERS, hexdump


def test_hexdump_line_layout() -> None:
    data = b"Hello, world!\x00\x01\x7f" + b"AB"
    cells = bytearray(len(data) * 2)
    cells[0::2] = data
    out = io.StringIO()

    hexdump(out, bytes(cells), 0x0400)
    lines = out.getvalue().splitlines()

    assert lines[0] == (
        "0000000400: 48 65 6C 6C 6F 2C 20 77  6F 72 6C 64 21 00 01 7F  Hello, world!..."
    )
    assert lines[1] == "0000000410: 41 42" + " " * 45 + "AB"


def test_registry_tables() -> None:
    assert set(READERS) == {"bin", "ihex", "pap", "prg", "raw"}
    assert set(WRITERS) == {"hexdump", "bin", "ihex", "pap", "prg", "raw"}
    assert FORMATS["ihex"].text and not FORMATS["prg"].text
    assert FORMATS["raw"].cells
