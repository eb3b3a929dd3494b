"""Error types for pomolog."""

from __future__ import annotations


class DecodeError(ValueError):
    """A session or settings record could not be decoded from text."""

    def __init__(self, message: str, text: str = "") -> None:
        super().__init__(message)
        self.text = text
