"""Turn memory map segments into a board image and back into sections."""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Iterable, List, Optional, Sequence, TextIO, Union

from pymemcfg.errors import ImageError
from pymemcfg.utils import debug_log

from .memory import ATTR_DISABLED, ATTR_RO, MEMORY_SIZE, MemoryImage, attribute, is_enabled, is_readonly


@dataclass(frozen=True)
class Section:
    """A run of consecutive addresses sharing one attribute."""

    start: int
    end: int
    enabled: bool
    readonly: bool

    @property
    def count(self) -> int:
        return self.end - self.start + 1


def _read_segment_file(segment, base_dir: Optional[Path]) -> bytes:
    path = segment.path
    if path is None:
        path = Path(segment.file)
        if base_dir is not None and not path.is_absolute():
            path = base_dir / path
    try:
        with open(path, "rb") as handle:
            payload = handle.read(MEMORY_SIZE - segment.start + 1)
    except OSError as exc:
        raise ImageError(f"Can't open file '{segment.file}': {exc.strerror}") from exc
    if segment.start + len(payload) > MEMORY_SIZE:
        raise ImageError(f"file '{segment.file}' does not fit at 0x{segment.start:04X}")
    return payload


def build_image(segments: Sequence, base_dir: Union[str, "os.PathLike[str]", None] = None) -> MemoryImage:
    """Lay out ``segments`` (as returned by the memory map parser) in a new image.

    Addresses not covered by any segment keep the fill byte of the first
    segment and are disabled and read-only. An unset ``type`` makes the first
    segment read-only and any later segment writable.
    """

    root = Path(base_dir) if base_dir is not None else None
    image = MemoryImage()
    if not segments:
        image.fill(0, ATTR_DISABLED | ATTR_RO)
        return image

    first = segments[0]
    image.fill(first.fill if first.fill is not None else 0, ATTR_DISABLED | ATTR_RO)

    for index, segment in enumerate(segments):
        if segment.fill is not None:
            image.fill_data(segment.start, segment.end, segment.fill)
        if segment.data:
            image.write_data(segment.start, segment.data)
        if segment.file is not None:
            image.write_data(segment.start, _read_segment_file(segment, root))

        enabled = bool(segment.enabled)
        if segment.readonly is not None:
            readonly = segment.readonly
        else:
            readonly = index == 0
        image.set_attributes(segment.start, segment.count, attribute(enabled, readonly))
        debug_log(
            "image",
            "segment %04X-%04X attr=%d",
            segment.start,
            segment.start + segment.count - 1,
            attribute(enabled, readonly),
        )
    return image


def describe_sections(image: MemoryImage) -> List[Section]:
    """Coalesce the attribute bytes of ``image`` into runs."""

    attrs = image.buffer[1::2]
    sections: List[Section] = []
    start = 0
    for address in range(1, MEMORY_SIZE + 1):
        if address < MEMORY_SIZE and attrs[address] == attrs[start]:
            continue
        attr = attrs[start]
        sections.append(Section(start, address - 1, is_enabled(attr), is_readonly(attr)))
        start = address
    return sections


def format_sections(stream: TextIO, sections: Iterable[Section]) -> None:
    """Write ``sections`` as a memory map YAML stream."""

    for section in sections:
        stream.write("---\n")
        stream.write(f"start: 0x{section.start:04X}\n")
        stream.write(f"end: 0x{section.end:04X}\n")
        stream.write(f"enabled: {'true' if section.enabled else 'false'}\n")
        stream.write(f"type: {'rom' if section.readonly else 'ram'}\n")
