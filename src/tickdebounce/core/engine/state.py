from __future__ import annotations

import asyncio
from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Final


class _Missing:
    """
    Marker for a data cell that has never been filled.
    """

    __slots__ = ()

    def __repr__(self) -> str:
        return "MISSING"

    def __bool__(self) -> bool:
        return False

    def __copy__(self) -> "_Missing":
        return self

    def __deepcopy__(self, memo: dict) -> "_Missing":
        return self

    def __reduce__(self) -> str:
        return "MISSING"


MISSING: Final = _Missing()


class TickPhase(str, Enum):
    IDLE = "idle"            # not started
    SCHEDULED = "scheduled"  # timer armed, no tick executing
    RUNNING = "running"      # tick executing, timer not re-armed yet
    STOPPED = "stopped"      # terminal


@dataclass(slots=True)
class EngineState:
    """
    Mutable state of one debounce engine, owned by that engine only.

    Guardrails:
      - alive only goes True -> False, started only goes False -> True
      - next_tick / next_sequence are refused once the loop is STOPPED
        (prevents "events after stop" bugs)
    """

    interval: float
    callback: Callable[[Any], Any]

    alive: bool = True
    started: bool = False
    pending_data: Any = MISSING
    last_acted_on: Any = MISSING
    null_streak: int = 0

    phase: TickPhase = TickPhase.IDLE
    timer: asyncio.TimerHandle | None = None

    tick: int = 0
    sequence: int = 0
    active_iterations: int = 0
    failed_iterations: int = 0

    @property
    def terminated(self) -> bool:
        return self.phase is TickPhase.STOPPED

    def next_tick(self) -> int:
        if self.terminated:
            raise RuntimeError("cannot advance tick when engine is stopped")
        self.tick += 1
        return self.tick

    def next_sequence(self) -> int:
        if self.terminated:
            raise RuntimeError("cannot advance sequence when engine is stopped")
        self.sequence += 1
        return self.sequence
