"""Exception hierarchy.

The engine itself never raises for numeric or code edge cases: unknown
codes price at zero and sizes are floored.  These errors cover the two
places where input is rejected wholesale: a persisted rate record that
does not validate, and a structurally invalid quote input.
"""

from __future__ import annotations

from pydantic import ValidationError


class CPQError(Exception):
    """Base class for all pricing-engine errors."""


class RateConfigError(CPQError):
    """A persisted rate configuration could not be read or validated."""

    def __init__(self, message: str, source: str | None = None):
        self.source = source
        prefix = f"{source}: " if source else ""
        super().__init__(f"{prefix}{message}")

    @classmethod
    def from_validation(cls, exc: ValidationError, source: str | None = None) -> "RateConfigError":
        return cls(_summarize(exc), source)


class QuoteInputError(CPQError):
    """A quote input is missing required identifiers or structure."""

    def __init__(self, message: str, source: str | None = None):
        self.source = source
        prefix = f"{source}: " if source else ""
        super().__init__(f"{prefix}{message}")

    @classmethod
    def from_validation(cls, exc: ValidationError, source: str | None = None) -> "QuoteInputError":
        return cls(_summarize(exc), source)


def _summarize(exc: ValidationError) -> str:
    """One line per pydantic error: ``dotted.path: message``."""
    lines = []
    for err in exc.errors():
        loc = ".".join(str(part) for part in err.get("loc", ()))
        lines.append(f"{loc or '<root>'}: {err.get('msg', 'invalid value')}")
    return "; ".join(lines)
