from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable, ClassVar, Union

from tickdebounce.core.options import DebounceOptions


@dataclass(frozen=True, slots=True)
class AddData:
    """
    Replace the pending data cell. Starts the tick loop on first use.
    """
    command_type: ClassVar[str] = "add_data"

    data: Any


@dataclass(frozen=True, slots=True)
class ShutdownNow:
    """
    Cancel any armed tick and terminate immediately.
    """
    command_type: ClassVar[str] = "shutdown_now"


@dataclass(frozen=True, slots=True)
class ShutdownAfterCurrentIteration:
    """
    Let the in-flight (or next) tick finish, then stop the loop.
    """
    command_type: ClassVar[str] = "shutdown_after_current_iteration"


@dataclass(frozen=True, slots=True)
class ChangeInterval:
    command_type: ClassVar[str] = "change_interval"

    interval: float


@dataclass(frozen=True, slots=True)
class ChangeCallback:
    command_type: ClassVar[str] = "change_callback"

    callback: Callable[[Any], Any]


@dataclass(frozen=True, slots=True)
class ChangeOptions:
    """
    Swap the option snapshot read by the engine, from the next tick onward.
    """
    command_type: ClassVar[str] = "change_options"

    options: DebounceOptions


Command = Union[
    AddData,
    ShutdownNow,
    ShutdownAfterCurrentIteration,
    ChangeInterval,
    ChangeCallback,
    ChangeOptions,
]
