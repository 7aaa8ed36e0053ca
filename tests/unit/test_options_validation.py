from __future__ import annotations

import pytest
from pydantic import ValidationError

from tickdebounce.core.errors import InvalidParameterError
from tickdebounce.core.options import DEFAULT_EVENTS, DebounceOptions, EventKind
from tickdebounce.core.validation import validate_callback, validate_interval, validate_options, validate_params


def test_camel_and_snake_case_keys_are_equivalent() -> None:
    camel = DebounceOptions.merged(
        {"nullIterationsToShutdown": 5, "onlyCountContiguousIterations": False, "shutdownAfterError": False}
    )
    snake = DebounceOptions.merged(
        {"null_iterations_to_shutdown": 5, "only_count_contiguous_iterations": False, "shutdown_after_error": False}
    )

    assert camel == snake
    assert camel.null_iterations_to_shutdown == 5


def test_historical_misspelled_key_is_accepted() -> None:
    opts = DebounceOptions.merged({"onlyCountContiguosIterations": False})
    assert opts.only_count_contiguous_iterations is False


def test_merged_passes_snapshots_through() -> None:
    opts = DebounceOptions.merged({"shutdownAfterError": False})
    assert DebounceOptions.merged(opts) is opts
    assert DebounceOptions.merged(None) == DebounceOptions()


def test_options_are_frozen() -> None:
    opts = DebounceOptions()
    with pytest.raises(ValidationError):
        opts.shutdown_after_error = False  # type: ignore[misc]


@pytest.mark.parametrize("value, expected", [(0, None), (None, None), (4, 4)])
def test_shutdown_threshold(value, expected) -> None:
    assert DebounceOptions.merged({"nullIterationsToShutdown": value}).shutdown_threshold == expected


def test_event_names_by_kind() -> None:
    opts = DebounceOptions()

    assert opts.event_name(EventKind.SHUTDOWN) == "shutdown"
    assert opts.event_name(EventKind.CALLBACK_RESPONSE) == "responseFromCallback"
    assert opts.kind_of("nullIteration") is EventKind.NULL_ITERATION
    assert opts.kind_of("unknown") is None
    assert [opts.event_name(k) for k in EventKind] == list(DEFAULT_EVENTS)


@pytest.mark.parametrize(
    "options",
    [
        {"events": list("abcdef")},
        {"events": list("abcdefgh")},
        {"events": ["a", "b", "c", "d", "e", "f", ""]},
        {"events": ["a", "b", "c", "d", "e", "f", b"g"]},
        {"events": ["a", "b", "c", "d", "e", "f", "a"]},
        {"events": "abcdefg"},
        {"nullIterationsToShutdown": -1},
        {"nullIterationsToShutdown": 1.5},
        {"onlyCountContiguousIterations": 1},
        {"unknownOption": True},
    ],
)
def test_malformed_options_are_rejected(options) -> None:
    with pytest.raises(InvalidParameterError):
        validate_options(options)


def test_validation_error_names_the_field() -> None:
    with pytest.raises(InvalidParameterError, match=r"(?i)null_?iterations_?to_?shutdown"):
        validate_options({"nullIterationsToShutdown": -1})


def test_non_mapping_options_are_rejected() -> None:
    with pytest.raises(InvalidParameterError):
        validate_options(42)  # type: ignore[arg-type]


@pytest.mark.parametrize("value", [1, 0.001, 2.5])
def test_valid_intervals(value) -> None:
    assert validate_interval(value) == float(value)


@pytest.mark.parametrize("value", [0, -0.5, float("nan"), float("inf"), "1", None, True, False])
def test_invalid_intervals(value) -> None:
    with pytest.raises(InvalidParameterError):
        validate_interval(value)


def test_callbacks() -> None:
    async def coro(data):
        return data

    assert validate_callback(coro) is coro
    assert validate_callback(print) is print
    with pytest.raises(InvalidParameterError):
        validate_callback(object())


def test_validate_params_returns_normalized_triple() -> None:
    interval, callback, opts = validate_params(2, print, {"shutdownAfterError": False})

    assert interval == 2.0
    assert callback is print
    assert opts.shutdown_after_error is False
    assert opts.events == DEFAULT_EVENTS
