"""The board memory image and its construction from memory maps."""

from __future__ import annotations

from .builder import Section, build_image, describe_sections, format_sections
from .memory import (
    ATTR_CE_MASK,
    ATTR_DISABLED,
    ATTR_ENABLED,
    ATTR_RO,
    ATTR_RW,
    ATTR_RW_MASK,
    BUFFER_SIZE,
    MEMORY_SIZE,
    MemoryBlock,
    MemoryImage,
    attribute,
    is_enabled,
    is_readonly,
)

__all__ = [
    "ATTR_CE_MASK",
    "ATTR_DISABLED",
    "ATTR_ENABLED",
    "ATTR_RO",
    "ATTR_RW",
    "ATTR_RW_MASK",
    "BUFFER_SIZE",
    "MEMORY_SIZE",
    "MemoryBlock",
    "MemoryImage",
    "Section",
    "attribute",
    "build_image",
    "describe_sections",
    "format_sections",
]
