from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, ClassVar, TypeVar
from uuid import UUID, uuid4

E = TypeVar("E", bound="Event")


@dataclass(frozen=True, slots=True, kw_only=True)
class Event:
    """
    Base record for everything published on the EventBus.

    - event_id: unique id (debuggable, never reused)
    - timestamp_utc: wall-clock publish time
    - sequence: monotonic per-engine ordering key
    """

    event_type: ClassVar[str] = "event"

    sequence: int
    event_id: UUID = field(default_factory=uuid4)
    timestamp_utc: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    @classmethod
    def create(cls: type[E], **fields: Any) -> E:
        return cls(**fields)
