from __future__ import annotations


class InvalidParameterError(ValueError):
    """
    Raised when an interval, callback or option set fails validation.

    Always raised synchronously, before anything is constructed or mutated.
    """
