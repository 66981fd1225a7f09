"""Text scanning primitives shared by the record codecs and document parsers.

Every function either returns the converted value or raises
:class:`~pymemcfg.errors.ScanError`. None of them keep state.
"""

from __future__ import annotations

import string
from typing import Sequence

from pymemcfg.errors import ScanError

UINT8_MAX = 0xFF
UINT16_MAX = 0xFFFF
UINT32_MAX = 0xFFFF_FFFF

COUNTRY_CODES: tuple[str, ...] = (
    "US", "CA", "DZ", "DE", "NL", "IT", "PT", "LU", "NO", "FI", "DK", "CH", "CZ", "ES", "GB", "KR",
    "CN", "FR", "HK", "SG", "TW", "BR", "IL", "SA", "LB", "AE", "ZA", "AR", "AU", "AT", "BO", "CL",
    "GR", "IS", "IN", "IE", "KW", "LI", "LT", "MX", "MA", "NZ", "PL", "PR", "SK", "SI", "TH", "UY",
    "PA", "RU", "EG", "TT", "TR", "CR", "EC", "HN", "KE", "UA", "VN", "BG", "CY", "EE", "MU", "RO",
    "CS", "ID", "PE", "VE", "JM", "BH", "OM", "JO", "BM", "CO", "DO", "GT", "PH", "LK", "SV", "TN",
    "PK", "QA", "JP3",
)
VIDEO_SYSTEMS: tuple[str, ...] = ("ntsc", "pal")
MEMORY_TYPES: tuple[str, ...] = ("ram", "rom")

_OCTAL_DIGITS = frozenset("01234567")


def is_hex_digit(char: str) -> bool:
    return len(char) == 1 and char in string.hexdigits


def hex_nibble(char: str) -> int:
    """Return the value of a single hex digit.

    The result is meaningless for anything but a hex digit, so callers check
    :func:`is_hex_digit` first.
    """

    code = ord(char.upper())
    if code <= ord("9"):
        return code - ord("0")
    return code - ord("A") + 10


def _hex_number(text: str, digits: int) -> int:
    if len(text) < digits:
        raise ScanError(f"expected {digits} hex digits, got {text!r}")
    value = 0
    for char in text[:digits]:
        if not is_hex_digit(char):
            raise ScanError(f"invalid hex digit {char!r} in {text[:digits]!r}")
        value = (value << 4) | hex_nibble(char)
    return value


def hex_byte(text: str) -> int:
    """Parse the two leading hex digits of ``text``."""

    return _hex_number(text, 2)


def hex_word(text: str) -> int:
    """Parse the four leading hex digits of ``text``."""

    return _hex_number(text, 4)


def oct_byte(text: str) -> int:
    """Parse the three leading octal digits of ``text``."""

    if len(text) < 3:
        raise ScanError(f"expected 3 octal digits, got {text!r}")
    value = 0
    for char in text[:3]:
        if char not in _OCTAL_DIGITS:
            raise ScanError(f"invalid octal digit {char!r} in {text[:3]!r}")
        value = (value << 3) | (ord(char) - ord("0"))
    return value & UINT8_MAX


def bounded_uint(text: str, maximum: int) -> int:
    """Parse an unsigned integer written in C notation.

    ``0x`` selects hexadecimal, any other leading ``0`` octal, and everything
    else is decimal. The whole text must be digits of the selected base.
    """

    if not isinstance(text, str):
        raise ScanError(f"invalid number: {text!r}")
    digits = text.strip()
    if digits[:2] in ("0x", "0X"):
        digits, base, allowed = digits[2:], 16, string.hexdigits
    elif len(digits) > 1 and digits.startswith("0"):
        digits, base, allowed = digits[1:], 8, string.octdigits
    else:
        base, allowed = 10, string.digits
    if not digits or any(char not in allowed for char in digits):
        raise ScanError(f"invalid number: {text!r}")
    value = int(digits, base)
    if value > maximum:
        raise ScanError(f"number out of range (0-{maximum:#x}): {text!r}")
    return value


def uint16(text: str) -> int:
    return bounded_uint(text, UINT16_MAX)


def uint32(text: str) -> int:
    return bounded_uint(text, UINT32_MAX)


def boolean(text: str) -> bool:
    if text == "true":
        return True
    if text == "false":
        return False
    raise ScanError(f"invalid boolean: {text!r}")


def enum_lookup(text: str, table: Sequence[str]) -> int:
    """Return the index of ``text`` in ``table`` (exact, case-sensitive)."""

    for index, token in enumerate(table):
        if token == text:
            return index
    raise ScanError(f"invalid value {text!r}, expected one of: {', '.join(table)}")


def country_code(text: str) -> str:
    return COUNTRY_CODES[enum_lookup(text, COUNTRY_CODES)]


def video_system(text: str) -> int:
    return enum_lookup(text, VIDEO_SYSTEMS)


def memory_type(text: str) -> bool:
    """Return ``True`` for read-only (``rom``) and ``False`` for ``ram``."""

    return enum_lookup(text, MEMORY_TYPES) == 1


def binary_string(text: str) -> bytes:
    """Expand the escapes of an inline byte string.

    Supported escapes are ``\\\\``, ``\\"``, three-digit octal starting with
    ``0``-``3`` and ``\\x`` followed by two hex digits. Other characters are
    taken by their code point, which must fit in a byte.
    """

    result = bytearray()
    index = 0
    length = len(text)
    while index < length:
        char = text[index]
        if char != "\\":
            if ord(char) > UINT8_MAX:
                raise ScanError(f"character {char!r} does not fit in a byte")
            result.append(ord(char))
            index += 1
            continue

        escape = text[index + 1 : index + 2]
        if escape in ("\\", '"'):
            result.append(ord(escape))
            index += 2
        elif escape in ("0", "1", "2", "3"):
            result.append(oct_byte(text[index + 1 : index + 4]))
            index += 4
        elif escape == "x":
            result.append(hex_byte(text[index + 2 : index + 4]))
            index += 4
        else:
            raise ScanError(f"invalid escape sequence at offset {index} in {text!r}")
    return bytes(result)


def address_range(text: str) -> tuple[int, int]:
    """Parse ``START-END`` into an inclusive 16-bit address range."""

    start_text, sep, end_text = text.partition("-")
    if not sep or not start_text.strip() or not end_text.strip():
        raise ScanError(f"invalid range: {text!r}")
    start = uint16(start_text)
    end = uint16(end_text)
    if end < start:
        raise ScanError(f"range end smaller than start: {text!r}")
    return start, end
