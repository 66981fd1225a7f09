"""Structural YAML events consumed by the document state machines.

PyYAML's event API yields one object per structural token (stream, document,
mapping and sequence boundaries, scalars and aliases). The parsers only care
about the token kind and, for scalars, the raw text, so the events are reduced
to :class:`Event` records before they reach a state machine.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum, auto
from typing import Dict, Iterator, Optional, TextIO, Type, Union

import yaml


class EventKind(Enum):
    """Kinds of structural events in a YAML stream."""

    STREAM_START = auto()
    STREAM_END = auto()
    DOCUMENT_START = auto()
    DOCUMENT_END = auto()
    MAPPING_START = auto()
    MAPPING_END = auto()
    SEQUENCE_START = auto()
    SEQUENCE_END = auto()
    SCALAR = auto()
    ALIAS = auto()

    @property
    def label(self) -> str:
        return self.name.lower().replace("_", "-")


_KINDS: Dict[Type[yaml.Event], EventKind] = {
    yaml.StreamStartEvent: EventKind.STREAM_START,
    yaml.StreamEndEvent: EventKind.STREAM_END,
    yaml.DocumentStartEvent: EventKind.DOCUMENT_START,
    yaml.DocumentEndEvent: EventKind.DOCUMENT_END,
    yaml.MappingStartEvent: EventKind.MAPPING_START,
    yaml.MappingEndEvent: EventKind.MAPPING_END,
    yaml.SequenceStartEvent: EventKind.SEQUENCE_START,
    yaml.SequenceEndEvent: EventKind.SEQUENCE_END,
    yaml.ScalarEvent: EventKind.SCALAR,
    yaml.AliasEvent: EventKind.ALIAS,
}


@dataclass(frozen=True)
class Event:
    """A structural event; ``value`` is set for scalars only."""

    kind: EventKind
    value: Optional[str] = None
    line: Optional[int] = None

    @classmethod
    def scalar(cls, value: str, line: Optional[int] = None) -> "Event":
        return cls(EventKind.SCALAR, value, line)


def classify(event: yaml.Event) -> Event:
    """Reduce a PyYAML event to an :class:`Event`."""

    kind = _KINDS[type(event)]
    mark = getattr(event, "start_mark", None)
    line = mark.line + 1 if mark is not None else None
    value = event.value if kind is EventKind.SCALAR else None
    return Event(kind, value, line)


def iter_events(stream: Union[str, TextIO]) -> Iterator[Event]:
    """Yield the structural events of a YAML text or stream."""

    for event in yaml.parse(stream, Loader=yaml.SafeLoader):
        yield classify(event)
