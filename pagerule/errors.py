"""Exceptions raised by the page rule core."""

from typing import Optional


class PageRuleError(Exception):
    """Base class for all page rule errors."""


class InvalidPattern(PageRuleError):
    """Raised when the delimiter pattern cannot be compiled or matches nothing useful."""

    def __init__(self, pattern: object, reason: str):
        super().__init__(f"Invalid page delimiter {pattern!r}: {reason}")
        self.pattern = pattern
        self.reason = reason


class InconsistentRangeState(PageRuleError):
    """Raised internally when two fold ranges overlap.

    Never escapes the fold controller; it is caught and repaired there.
    """

    def __init__(self, message: str, offending: Optional[object] = None):
        super().__init__(message)
        self.offending = offending


class HostError(PageRuleError):
    """Raised by a host when one of its display primitives is unavailable."""
