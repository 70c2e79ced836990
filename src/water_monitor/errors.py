"""Exceptions shared across the billing core and its collaborators."""

from __future__ import annotations


class ConfigurationError(ValueError):
    """A tariff or billing setting is present but cannot be used.

    Raised for non-numeric values, negative rates or limits, and billing
    days outside 1..31. Absent settings never raise; they take defaults.
    """

    def __init__(self, message: str, key: str | None = None) -> None:
        super().__init__(message)
        self.key = key
