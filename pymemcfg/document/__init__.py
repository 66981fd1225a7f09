"""YAML documents describing the memory map and the board configuration."""

from __future__ import annotations

from .config import BoardConfig, ConfigParser, DiskSlot, FloppyConfig, RadioConfig, VideoConfig, parse_config, parse_config_file
from .events import Event, EventKind, iter_events
from .memmap import MemoryMapParser, MemorySegment, parse_memmap, parse_memmap_file

__all__ = [
    "BoardConfig",
    "ConfigParser",
    "DiskSlot",
    "Event",
    "EventKind",
    "FloppyConfig",
    "MemoryMapParser",
    "MemorySegment",
    "RadioConfig",
    "VideoConfig",
    "iter_events",
    "parse_config",
    "parse_config_file",
    "parse_memmap",
    "parse_memmap_file",
]
