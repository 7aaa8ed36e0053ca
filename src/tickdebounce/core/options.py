from __future__ import annotations

from enum import IntEnum
from typing import Annotated, Any, Mapping, Optional

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, StringConstraints, field_validator

from tickdebounce.core.config.settings import settings


class EventKind(IntEnum):
    """
    Slot of each named event inside ``DebounceOptions.events``.
    """

    SHUTDOWN = 0
    SHUTDOWN_AFTER_CURRENT_ITERATION = 1
    ERROR_IN_ITERATION = 2
    ACTIVE_ITERATION = 3
    NULL_ITERATION = 4
    REBOOT = 5
    CALLBACK_RESPONSE = 6


DEFAULT_EVENTS: tuple[str, ...] = (
    "shutdown",
    "shutdownAfterCurrentIteration",
    "errorInCurrentIteration",
    "activeIteration",
    "nullIteration",
    "reboot",
    "responseFromCallback",
)

EventName = Annotated[str, StringConstraints(strict=True, min_length=1)]


class DebounceOptions(BaseModel):
    """
    Immutable option snapshot shared by the engine and the façade.

    Field names are snake_case; the camelCase keys
    (nullIterationsToShutdown, shutdownAfterError, ...) are accepted on input
    as well.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    null_iterations_to_shutdown: Optional[int] = Field(
        default_factory=lambda: settings.default_null_iterations_to_shutdown,
        ge=0,
        validation_alias=AliasChoices("null_iterations_to_shutdown", "nullIterationsToShutdown"),
        description="Null ticks before auto-shutdown; 0 or None disables it",
    )

    only_count_contiguous_iterations: bool = Field(
        default_factory=lambda: settings.default_only_count_contiguous_iterations,
        strict=True,
        validation_alias=AliasChoices(
            "only_count_contiguous_iterations",
            "onlyCountContiguousIterations",
            "onlyCountContiguosIterations",
        ),
        description="Reset the null streak whenever a change is detected",
    )

    shutdown_after_error: bool = Field(
        default_factory=lambda: settings.default_shutdown_after_error,
        strict=True,
        validation_alias=AliasChoices("shutdown_after_error", "shutdownAfterError"),
        description="Stop the tick loop after a failed callback",
    )

    events: tuple[EventName, EventName, EventName, EventName, EventName, EventName, EventName] = Field(
        default=DEFAULT_EVENTS,
        description="Names for the seven engine events, indexed by EventKind",
    )

    @field_validator("events")
    @classmethod
    def _events_distinct(cls, v: tuple[str, ...]) -> tuple[str, ...]:
        if len(set(v)) != len(v):
            raise ValueError("event names must be distinct")
        return v

    @classmethod
    def merged(cls, overrides: "DebounceOptions | Mapping[str, Any] | None" = None) -> "DebounceOptions":
        """
        Layer caller options over the defaults and validate the result.
        """
        if overrides is None:
            return cls()
        if isinstance(overrides, DebounceOptions):
            return overrides
        return cls.model_validate(dict(overrides))

    @property
    def shutdown_threshold(self) -> int | None:
        # 0 and None both disable the null-streak shutdown
        return self.null_iterations_to_shutdown or None

    def event_name(self, kind: EventKind) -> str:
        return self.events[int(kind)]

    def kind_of(self, name: str) -> EventKind | None:
        try:
            return EventKind(self.events.index(name))
        except ValueError:
            return None
