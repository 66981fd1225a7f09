"""Table driven consumer of structural YAML events."""

from __future__ import annotations

from enum import Enum
from typing import Callable, Dict, Iterable, TextIO, Tuple, Type, Union

import yaml

from pymemcfg.errors import MemcfgError

from .events import Event, EventKind, iter_events

Handler = Callable[[Event], Enum]


class EventStateMachine:
    """Walk a YAML event stream through a ``(state, event kind)`` table.

    Subclasses supply the state enum bounds and :meth:`transitions`. Any
    event that has no entry for the current state is rejected with
    ``error_class``.
    """

    error_class: Type[MemcfgError] = MemcfgError
    document_name = "document"
    start_state: Enum
    stop_state: Enum

    def __init__(self) -> None:
        self.state = self.start_state
        self._table = self.transitions()

    def transitions(self) -> Dict[Tuple[Enum, EventKind], Handler]:
        raise NotImplementedError

    @property
    def done(self) -> bool:
        return self.state is self.stop_state

    def error(self, message: str) -> MemcfgError:
        return self.error_class(f"Bad {self.document_name} file: {message}")

    def feed(self, event: Event) -> None:
        handler = self._table.get((self.state, event.kind))
        if handler is None:
            where = f" at line {event.line}" if event.line is not None else ""
            raise self.error(f"unexpected {event.kind.label} event{where}")
        self.state = handler(event)

    def consume(self, events: Iterable[Event]) -> None:
        for event in events:
            self.feed(event)
            if self.done:
                return
        raise self.error("unexpected end of input")

    def parse(self, stream: Union[str, TextIO]) -> None:
        """Feed every event of ``stream``; YAML syntax errors are re-raised."""

        try:
            self.consume(iter_events(stream))
        except yaml.YAMLError as exc:
            raise self.error(str(exc)) from exc
