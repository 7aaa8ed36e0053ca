from __future__ import annotations

import asyncio
from typing import Any, Iterable

import structlog

from tickdebounce.core.config.settings import settings
from tickdebounce.core.logging.setup import configure_logging
from tickdebounce.core.options import EventKind
from tickdebounce.debouncer import Debouncer

log = structlog.get_logger()


async def _echo(data: Any) -> Any:
    await asyncio.sleep(0)
    return data


async def run_demo(values: Iterable[Any], *, interval: float = 0.05) -> list[Any]:
    """
    Feed ``values`` faster than the tick interval and collect what the
    callback actually got to see. Returns once two null ticks stop the engine.
    """
    responses: list[Any] = []

    debouncer = Debouncer(interval, _echo, {"nullIterationsToShutdown": 2})
    debouncer.on(
        debouncer.options.event_name(EventKind.CALLBACK_RESPONSE),
        lambda e: responses.append(e.payload),
    )

    for value in values:
        debouncer.debounce(value)
        await asyncio.sleep(interval / 3)

    await debouncer.wait_stopped()
    return responses


def main() -> None:
    configure_logging(level=settings.log_level)

    responses = asyncio.run(run_demo([{"n": n} for n in range(10)]))
    for r in responses:
        log.info("demo.response", value=r)

    log.info("demo.done", responses=len(responses))


if __name__ == "__main__":
    main()
