"""Memory map documents.

A memory map is a YAML stream with one mapping per document, each describing
a segment of the emulated address space::

    ---
    start: 0x1800
    end: 0x1FFF
    enabled: true
    type: rom
    file: rom.bin

Segments are returned in document order. The first failure rejects the whole
stream.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from enum import Enum, auto
from pathlib import Path
from typing import Callable, Dict, List, Optional, Set, TextIO, Union

from pymemcfg.errors import MemoryMapError, ScanError
from pymemcfg.image.memory import MEMORY_SIZE
from pymemcfg.utils import debug_log, scan

from .events import Event, EventKind
from .machine import EventStateMachine

PathLike = Union[str, "os.PathLike[str]"]


@dataclass
class MemorySegment:
    """One document of a memory map."""

    start: Optional[int] = None
    end: Optional[int] = None
    enabled: Optional[bool] = None
    readonly: Optional[bool] = None
    fill: Optional[int] = None
    data: Optional[bytes] = None
    file: Optional[str] = None
    count: int = 0
    path: Optional[Path] = None

    @property
    def has_action(self) -> bool:
        return (
            self.data is not None
            or self.file is not None
            or self.fill is not None
            or self.enabled is not None
            or self.readonly is not None
        )


class MapState(Enum):
    START = auto()
    STREAM = auto()
    DOCUMENT = auto()
    KEY = auto()
    START_VALUE = auto()
    END_VALUE = auto()
    ENABLED_VALUE = auto()
    TYPE_VALUE = auto()
    FILL_VALUE = auto()
    DATA_VALUE = auto()
    FILE_VALUE = auto()
    STOP = auto()


_KEY_STATES: Dict[str, MapState] = {
    "start": MapState.START_VALUE,
    "end": MapState.END_VALUE,
    "enabled": MapState.ENABLED_VALUE,
    "type": MapState.TYPE_VALUE,
    "fill": MapState.FILL_VALUE,
    "data": MapState.DATA_VALUE,
    "file": MapState.FILE_VALUE,
}


class MemoryMapParser(EventStateMachine):
    """Build the segment list of a memory map from its YAML events."""

    error_class = MemoryMapError
    document_name = "memory map"
    start_state = MapState.START
    stop_state = MapState.STOP

    def __init__(self, base_dir: Optional[PathLike] = None) -> None:
        self.base_dir = Path(base_dir) if base_dir is not None else None
        self.segments: List[MemorySegment] = []
        self.current = MemorySegment()
        self._seen: Set[str] = set()
        super().__init__()

    def transitions(self):
        table = {
            (MapState.START, EventKind.STREAM_START): lambda event: MapState.STREAM,
            (MapState.STREAM, EventKind.DOCUMENT_START): self._open_document,
            (MapState.STREAM, EventKind.STREAM_END): lambda event: MapState.STOP,
            (MapState.DOCUMENT, EventKind.MAPPING_START): lambda event: MapState.KEY,
            (MapState.DOCUMENT, EventKind.DOCUMENT_END): self._close_document,
            (MapState.KEY, EventKind.SCALAR): self._select_key,
            (MapState.KEY, EventKind.MAPPING_END): lambda event: MapState.DOCUMENT,
        }
        stores: Dict[MapState, Callable[[str], None]] = {
            MapState.START_VALUE: self._store_start,
            MapState.END_VALUE: self._store_end,
            MapState.ENABLED_VALUE: self._store_enabled,
            MapState.TYPE_VALUE: self._store_type,
            MapState.FILL_VALUE: self._store_fill,
            MapState.DATA_VALUE: self._store_data,
            MapState.FILE_VALUE: self._store_file,
        }
        for state, store in stores.items():
            table[(state, EventKind.SCALAR)] = self._value_handler(store)
        return table

    def _value_handler(self, store: Callable[[str], None]):
        def handle(event: Event) -> MapState:
            store(event.value or "")
            return MapState.KEY

        return handle

    def _open_document(self, event: Event) -> MapState:
        self.current = MemorySegment()
        self._seen = set()
        return MapState.DOCUMENT

    def _select_key(self, event: Event) -> MapState:
        key = event.value or ""
        state = _KEY_STATES.get(key)
        if state is None:
            raise MemoryMapError(f"Unexpected memory parameter: {key}")
        if key in self._seen:
            raise MemoryMapError(f"Duplicated key: {key}")
        self._seen.add(key)
        return state

    def _store_start(self, text: str) -> None:
        try:
            self.current.start = scan.uint16(text)
        except ScanError:
            raise MemoryMapError(f"Invalid start memory address: {text}") from None

    def _store_end(self, text: str) -> None:
        try:
            self.current.end = scan.uint16(text)
        except ScanError:
            raise MemoryMapError(f"Invalid end memory address: {text}") from None

    def _store_enabled(self, text: str) -> None:
        try:
            self.current.enabled = scan.boolean(text)
        except ScanError:
            raise MemoryMapError(f"Invalid boolean value for 'enabled': {text}") from None

    def _store_type(self, text: str) -> None:
        try:
            self.current.readonly = scan.memory_type(text)
        except ScanError:
            raise MemoryMapError(f"Invalid memory type: {text}") from None

    def _store_fill(self, text: str) -> None:
        try:
            self.current.fill = scan.bounded_uint(text, scan.UINT8_MAX)
        except ScanError:
            raise MemoryMapError(f"Invalid 'fill' byte: {text}") from None

    def _store_data(self, text: str) -> None:
        if not text:
            raise MemoryMapError("'data' must not be blank")
        self.current.data = text.encode("utf-8")

    def _store_file(self, text: str) -> None:
        if not text:
            raise MemoryMapError("'file' must not be blank")
        self.current.file = text
        path = Path(text)
        if self.base_dir is not None and not path.is_absolute():
            path = self.base_dir / path
        self.current.path = path

    def _close_document(self, event: Event) -> MapState:
        segment = self.current
        if segment.start is None:
            raise self.error("'start' is mandatory")
        if segment.end is not None and segment.end < segment.start:
            raise self.error("'end' smaller than 'start'")
        if segment.end is None and segment.data is None and segment.file is None:
            raise self.error("at least one of 'end', 'data' or 'file' must be present")
        if segment.data is not None and segment.file is not None:
            raise self.error("'data' and 'file' are mutually exclusive")
        if segment.fill is not None and segment.end is None:
            raise self.error("'fill' needs an 'end'")
        if not segment.has_action:
            raise MemoryMapError(f"No action for section starting at 0x{segment.start:04X}")

        if segment.data:
            segment.count = len(segment.data)
        elif segment.path is not None:
            try:
                segment.count = os.stat(segment.path).st_size
            except OSError as exc:
                raise MemoryMapError(f"Can't get file '{segment.file}' size: {exc.strerror}") from exc
        else:
            segment.count = segment.end - segment.start + 1

        span_too_short = segment.end is not None and segment.end - segment.start + 1 < segment.count
        if segment.start + segment.count > MEMORY_SIZE or span_too_short:
            raise MemoryMapError(
                f"Data length/file size too big in segment starting at 0x{segment.start:04X}"
            )

        debug_log(
            "memmap",
            "segment %04X+%X enabled=%s readonly=%s",
            segment.start,
            segment.count,
            segment.enabled,
            segment.readonly,
        )
        self.segments.append(segment)
        return MapState.STREAM


def parse_memmap(stream: Union[str, TextIO], base_dir: Optional[PathLike] = None) -> List[MemorySegment]:
    """Parse a memory map from YAML text or a text stream.

    Relative ``file`` entries are resolved against ``base_dir`` when given,
    otherwise against the working directory.
    """

    parser = MemoryMapParser(base_dir)
    parser.parse(stream)
    return parser.segments


def parse_memmap_file(path: PathLike) -> List[MemorySegment]:
    """Parse the memory map stored at ``path``; ``file`` entries are relative to it."""

    path = Path(path)
    try:
        with path.open("r", encoding="utf-8") as handle:
            return parse_memmap(handle, base_dir=path.parent)
    except OSError as exc:
        raise MemoryMapError(f"Can't open memory map file: {exc}") from exc
