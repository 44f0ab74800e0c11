"""Exceptions raised while turning an expense analysis into bill records."""
from __future__ import annotations


class ExtractionError(ValueError):
    """Base class for failures of the expense field extraction pass."""


class MalformedInput(ExtractionError):
    """Raised when the analysis response is missing a required element."""

    def __init__(self, message: str, *, path: str = "") -> None:
        super().__init__(f"{message} at {path}" if path else message)
        self.path = path


class NoNumericTotal(ExtractionError):
    """Raised when a total carries no parsable number."""

    def __init__(self, total_text: str) -> None:
        super().__init__(f"no numeric value in total {total_text!r}")
        self.total_text = total_text


__all__ = ["ExtractionError", "MalformedInput", "NoNumericTotal"]
