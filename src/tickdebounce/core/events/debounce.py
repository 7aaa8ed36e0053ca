from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from tickdebounce.core.events.base import Event
from tickdebounce.core.options import EventKind


@dataclass(frozen=True, slots=True, kw_only=True)
class DebounceEvent(Event):
    """
    One lifecycle notification from a debouncer.

    The bus routes on ``event_type``, which is the name configured for
    ``kind`` in the active option snapshot, so a single record type covers
    all seven events.

    Payload by kind:
      - ERROR_IN_ITERATION: the exception raised by the callback
      - CALLBACK_RESPONSE: the callback's (awaited) result
      - anything else: None, unless supplied through Debouncer.emit
    """

    event_type: str
    kind: EventKind | None = None
    payload: Any = None
    engine_id: str = ""
    tick: int = 0
