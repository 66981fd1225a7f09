"""Tests for the text scanning primitives."""

from __future__ import annotations

import pytest

from pymemcfg.errors import ScanError
from pymemcfg.utils import scan


def test_hex_nibble_accepts_both_cases() -> None:
    assert scan.hex_nibble("0") == 0
    assert scan.hex_nibble("9") == 9
    assert scan.hex_nibble("a") == 10
    assert scan.hex_nibble("F") == 15


def test_hex_byte_and_word_parse_leading_digits() -> None:
    assert scan.hex_byte("3Fxx") == 0x3F
    assert scan.hex_word("a5C3FF") == 0xA5C3


@pytest.mark.parametrize("text", ["", "1", "G0", "0 "])
def test_hex_byte_rejects_short_or_invalid_input(text: str) -> None:
    with pytest.raises(ScanError):
        scan.hex_byte(text)


def test_hex_word_rejects_short_input() -> None:
    with pytest.raises(ScanError):
        scan.hex_word("ABC")


def test_oct_byte_masks_to_eight_bits() -> None:
    assert scan.oct_byte("101") == 0o101
    assert scan.oct_byte("377") == 0xFF
    assert scan.oct_byte("777") == 0xFF


def test_oct_byte_rejects_non_octal_digit() -> None:
    with pytest.raises(ScanError):
        scan.oct_byte("018")


def test_uint16_accepts_decimal_and_hex() -> None:
    assert scan.uint16("1024") == 1024
    assert scan.uint16("0x1800") == 0x1800
    assert scan.uint16(" 65535 ") == 0xFFFF
    assert scan.uint16("0") == 0


def test_uint16_reads_leading_zero_as_octal() -> None:
    assert scan.uint16("0400") == 0o400
    assert scan.uint16("0177777") == 0xFFFF
    assert scan.uint16("00") == 0


@pytest.mark.parametrize("text", ["65536", "-1", "0x10000", "12abc", "", "0x", "08", "0b101", "0o17", "0200000"])
def test_uint16_rejects_out_of_range_and_garbage(text: str) -> None:
    with pytest.raises(ScanError):
        scan.uint16(text)


def test_uint32_upper_bound() -> None:
    assert scan.uint32("0xFFFFFFFF") == 0xFFFF_FFFF
    with pytest.raises(ScanError):
        scan.uint32("0x100000000")


def test_boolean_is_exact() -> None:
    assert scan.boolean("true") is True
    assert scan.boolean("false") is False
    with pytest.raises(ScanError):
        scan.boolean("True")


def test_enum_tables() -> None:
    assert scan.country_code("JP3") == "JP3"
    assert scan.video_system("pal") == 1
    assert scan.memory_type("rom") is True
    assert scan.memory_type("ram") is False
    with pytest.raises(ScanError):
        scan.memory_type("ROM")
    with pytest.raises(ScanError):
        scan.country_code("XX")


def test_binary_string_escapes() -> None:
    assert scan.binary_string(r"A\x42\103\\\"") == b'ABC\\"'
    assert scan.binary_string("\xe9") == b"\xe9"


@pytest.mark.parametrize("text", [r"\q", r"\x4", r"\9", "€"])
def test_binary_string_rejects_bad_input(text: str) -> None:
    with pytest.raises(ScanError):
        scan.binary_string(text)


def test_address_range() -> None:
    assert scan.address_range("0x1800-0x1FFF") == (0x1800, 0x1FFF)
    with pytest.raises(ScanError):
        scan.address_range("0x2000-0x1000")
    with pytest.raises(ScanError):
        scan.address_range("0x2000")
