from __future__ import annotations

from math import isfinite
from numbers import Real
from typing import Any, Callable, Mapping

from pydantic import ValidationError

from tickdebounce.core.errors import InvalidParameterError
from tickdebounce.core.options import DebounceOptions


def validate_interval(interval: Any) -> float:
    if isinstance(interval, bool) or not isinstance(interval, Real):
        raise InvalidParameterError("Invalid interval passed, it must be a number greater than 0")
    value = float(interval)
    if not isfinite(value) or value <= 0.0:
        raise InvalidParameterError("Invalid interval passed, it must be a number greater than 0")
    return value


def validate_callback(callback: Any) -> Callable[[Any], Any]:
    if not callable(callback):
        raise InvalidParameterError("Invalid callback passed, it must be callable")
    return callback


def validate_options(options: DebounceOptions | Mapping[str, Any] | None) -> DebounceOptions:
    """
    Turn caller options into a validated snapshot.

    ``None`` means "all defaults"; a mapping is layered over the defaults.
    """
    if options is not None and not isinstance(options, (DebounceOptions, Mapping)):
        raise InvalidParameterError("Invalid options passed, it must be a mapping")

    try:
        return DebounceOptions.merged(options)
    except ValidationError as exc:
        fields = sorted({".".join(str(p) for p in err["loc"]) for err in exc.errors()})
        raise InvalidParameterError(f"Invalid options passed: {', '.join(fields)}") from exc


def validate_params(
    interval: Any,
    callback: Any,
    options: DebounceOptions | Mapping[str, Any] | None,
) -> tuple[float, Callable[[Any], Any], DebounceOptions]:
    return (
        validate_interval(interval),
        validate_callback(callback),
        validate_options(options),
    )
