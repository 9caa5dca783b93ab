"""
Error taxonomy shared by the gateway layers.

InvalidInput and RateLimited are raised before any backend call and are
surfaced to the caller as-is. ParseError, ValidationFailure and UpstreamError
describe a failed generation; the Gateway turns them into fallback results.
"""

from __future__ import annotations


class WarpError(Exception):
    """Base class for all gateway errors."""


class InvalidInput(WarpError):
    """Caller input is malformed or oversized."""


class RateLimited(WarpError):
    """Admission denied for the current window."""

    def __init__(self, message: str = "Rate limit exceeded. Try again shortly."):
        super().__init__(message)


class ParseError(WarpError):
    """Backend output could not be recovered as structured data."""


class ValidationFailure(WarpError):
    """Backend output parsed but describes an unplayable level."""

    def __init__(self, errors: list[str]):
        self.errors = errors
        super().__init__(f"Level validation failed with {len(errors)} error(s)")


class UpstreamError(WarpError):
    """The generative backend was unreachable or answered with an error."""
