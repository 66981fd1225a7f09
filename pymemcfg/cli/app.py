"""Offline ``memcfg`` commands: format conversion, UF2 setup images and map checks."""

from __future__ import annotations

import argparse
import sys
from pathlib import Path
from typing import List, Optional, TextIO

from pymemcfg.document import parse_config_file, parse_memmap_file
from pymemcfg.errors import MemcfgError, ScanError
from pymemcfg.formats import READERS, WRITERS, FileFormat, hexdump, read_uf2, write_uf2
from pymemcfg.image import BUFFER_SIZE, MEMORY_SIZE, MemoryImage, build_image, describe_sections, format_sections
from pymemcfg.utils import debug_log, scan

MEMMAP_START_ADDR = 0x101C0000
CONFIG_START_ADDR = 0x101E0000


class CommandError(MemcfgError):
    """Raised for option combinations the commands cannot honour."""


def _address(text: str) -> int:
    try:
        return scan.uint16(text)
    except ScanError as exc:
        raise argparse.ArgumentTypeError(str(exc)) from None


def _span(text: str) -> tuple[int, int]:
    try:
        return scan.address_range(text)
    except ScanError as exc:
        raise argparse.ArgumentTypeError(str(exc)) from None


def _count(text: str) -> int:
    try:
        count = scan.uint32(text)
    except ScanError as exc:
        raise argparse.ArgumentTypeError(str(exc)) from None
    if count == 0 or count > MEMORY_SIZE:
        raise argparse.ArgumentTypeError(f"count must be between 1 and {MEMORY_SIZE:#x}: {text!r}")
    return count


def _format_help(formats) -> str:
    return ", ".join(f"{name} ({fmt.description})" for name, fmt in formats.items())


def build_arg_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="memcfg",
        description="Memory emulator board image and configuration tool",
    )
    commands = parser.add_subparsers(dest="command", metavar="COMMAND")
    commands.required = True

    convert = commands.add_parser("convert", help="Convert between memory image file formats")
    source = convert.add_mutually_exclusive_group(required=True)
    source.add_argument("-i", "--input", type=Path, help="File to read the data from")
    source.add_argument("-d", "--data", help="Binary string (escapes: \\\\ \\\" \\NNN \\xHH)")
    convert.add_argument(
        "-f",
        "--format",
        choices=sorted(READERS),
        help=f"Input format: {_format_help(READERS)}",
    )
    convert.add_argument("-s", "--start", type=_address, help="Load address for formats without one")
    span = convert.add_mutually_exclusive_group()
    span.add_argument("-r", "--range", type=_span, help="Write only START-END instead of the loaded span")
    span.add_argument("-c", "--count", type=_count, help="Number of addresses to write from the first loaded one")
    convert.add_argument(
        "-t",
        "--to",
        choices=sorted(WRITERS),
        default="hexdump",
        help=f"Output format (default: hexdump): {_format_help(WRITERS)}",
    )
    convert.add_argument("-o", "--output", type=Path, help="Output file (default: stdout for text formats)")
    convert.set_defaults(handler=convert_command)

    setup = commands.add_parser("setup", help="Generate a UF2 image with the memory map and/or configuration")
    setup.add_argument("-m", "--memmap", type=Path, help="Default memory map file")
    setup.add_argument("-s", "--setup", type=Path, help="Setup configuration file")
    setup.add_argument("-o", "--output", type=Path, required=True, help="Generated UF2 file")
    setup.set_defaults(handler=setup_command)

    memmap = commands.add_parser("memmap", help="Validate a memory map and list its segments")
    memmap.add_argument("-i", "--input", type=Path, required=True, help="Memory map file")
    memmap.add_argument(
        "--sections",
        action="store_true",
        help="Print the resulting attribute sections as a memory map instead",
    )
    memmap.set_defaults(handler=memmap_command)

    dump = commands.add_parser("dump", help="List the blocks of a UF2 file")
    dump.add_argument("-i", "--input", type=Path, required=True, help="UF2 file")
    dump.add_argument("--data", action="store_true", help="Also hex dump each block payload")
    dump.set_defaults(handler=dump_command)
    return parser


def _load_input(args: argparse.Namespace) -> tuple[MemoryImage, int, int]:
    """Read the convert input into an image; return it with the touched span."""

    image = MemoryImage()
    if args.data is not None:
        if args.format is not None:
            raise CommandError("Options '--data' and '--format' are mutually exclusive")
        if args.start is None:
            raise CommandError("Option '--start' is mandatory with '--data'")
        payload = scan.binary_string(args.data)
        if not payload:
            raise CommandError("Binary string must not be empty")
        image.write_data(args.start, payload)
        return image, args.start, len(payload)

    if args.format is None:
        raise CommandError("Missing mandatory option: --format")
    fmt: FileFormat = READERS[args.format]
    buffer = bytearray(BUFFER_SIZE if fmt.cells else MEMORY_SIZE)
    mode = "r" if fmt.text else "rb"
    with args.input.open(mode) as handle:
        blocks = fmt.reader(handle, buffer)
    if not blocks:
        raise CommandError(f"No data in '{args.input}'")

    low, high = MEMORY_SIZE, 0
    for block in blocks:
        if block.has_start:
            if args.start is not None:
                raise CommandError(f"Option '--start' is incompatible with '{fmt.name}' format")
            start = block.start
            offset = block.start
        else:
            if args.start is None:
                raise CommandError(f"Option '--start' is mandatory for '{fmt.name}' format")
            start = args.start
            offset = 0

        if fmt.cells:
            image.write_cells(start, bytes(buffer[offset * 2 : (offset + block.count) * 2]))
        else:
            image.write_data(start, bytes(buffer[offset : offset + block.count]))
        low = min(low, start)
        high = max(high, start + block.count)
        debug_log("cli", "block %04X+%X placed at %04X", block.start, block.count, start)
    return image, low, high - low


def _open_output(path: Optional[Path], fmt: FileFormat):
    if path is None:
        if not fmt.text:
            raise CommandError(f"Option '--output' is required for '{fmt.name}' format")
        return None
    return path.open("w" if fmt.text else "wb")


def convert_command(args: argparse.Namespace, stdout: TextIO) -> int:
    image, start, count = _load_input(args)
    if args.range is not None:
        start, end = args.range
        count = end - start + 1
    elif args.count is not None:
        count = args.count
    fmt = WRITERS[args.to]
    cells = image.cells(start, count)
    handle = _open_output(args.output, fmt)
    if handle is None:
        fmt.writer(stdout, cells, start)
        return 0
    with handle:
        fmt.writer(handle, cells, start)
    return 0


def setup_command(args: argparse.Namespace, stdout: TextIO) -> int:
    if args.memmap is None and args.setup is None:
        raise CommandError("At least one of memory map or setup file names must be specified")

    data = b""
    address = CONFIG_START_ADDR
    if args.memmap is not None:
        segments = parse_memmap_file(args.memmap)
        data = bytes(build_image(segments))
        address = MEMMAP_START_ADDR
    if args.setup is not None:
        data += parse_config_file(args.setup).pack()

    with args.output.open("wb") as handle:
        blocks = write_uf2(handle, data, address)
    debug_log("cli", "setup: %d bytes in %d blocks to %s", len(data), blocks, args.output)
    return 0


def _describe_segment(segment) -> str:
    parts = [f"0x{segment.start:04X}-0x{segment.start + segment.count - 1:04X}", f"count={segment.count}"]
    if segment.enabled is not None:
        parts.append(f"enabled={'true' if segment.enabled else 'false'}")
    if segment.readonly is not None:
        parts.append(f"type={'rom' if segment.readonly else 'ram'}")
    if segment.fill is not None:
        parts.append(f"fill=0x{segment.fill:02X}")
    if segment.data is not None:
        parts.append(f"data={len(segment.data)} bytes")
    if segment.file is not None:
        parts.append(f"file={segment.file}")
    return " ".join(parts)


def memmap_command(args: argparse.Namespace, stdout: TextIO) -> int:
    segments = parse_memmap_file(args.input)
    if args.sections:
        format_sections(stdout, describe_sections(build_image(segments)))
        return 0
    for segment in segments:
        stdout.write(_describe_segment(segment) + "\n")
    return 0


def dump_command(args: argparse.Namespace, stdout: TextIO) -> int:
    with args.input.open("rb") as handle:
        blocks = read_uf2(handle)
    for block in blocks:
        stdout.write(
            f"block {block.block_no}/{block.num_blocks} target 0x{block.target_addr:08X} "
            f"size {block.payload_size} family 0x{block.family_id:08X}\n"
        )
        if args.data:
            cells = bytearray(len(block.payload) * 2)
            cells[0::2] = block.payload
            hexdump(stdout, bytes(cells), block.target_addr)
    return 0


def main(argv: Optional[List[str]] = None, stdout: Optional[TextIO] = None) -> int:
    parser = build_arg_parser()
    args = parser.parse_args(argv)
    out = stdout if stdout is not None else sys.stdout
    debug_log("cli", "command %s", args.command)
    try:
        status = args.handler(args, out)
    except (MemcfgError, OSError) as exc:
        parser.exit(1, f"memcfg: {exc}\n")
    return status


__all__ = ["CONFIG_START_ADDR", "MEMMAP_START_ADDR", "CommandError", "build_arg_parser", "main"]
