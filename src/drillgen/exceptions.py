"""Exceptions raised by drillgen."""

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from .calculator.validation import ValidationResult


class DrillgenError(Exception):
    """Base class for all drillgen errors."""


class ParameterValidationError(DrillgenError, ValueError):
    """Tool parameters failed validation; no geometry was generated.

    The full ValidationResult is kept on ``result`` so callers can show
    every message, not only the first one.
    """

    def __init__(self, result: "ValidationResult"):
        self.result = result
        errors = result.errors
        if errors:
            summary = "; ".join(f"{m.code}: {m.message}" for m in errors)
        else:
            summary = "invalid parameters"
        super().__init__(summary)


class UnsupportedFormatError(DrillgenError, ValueError):
    """Requested export format is not supported."""

    def __init__(self, fmt: str, supported=()):
        self.format = fmt
        self.supported = tuple(supported)
        message = f"Unsupported export format: {fmt!r}"
        if self.supported:
            message += f" (supported: {', '.join(self.supported)})"
        super().__init__(message)
