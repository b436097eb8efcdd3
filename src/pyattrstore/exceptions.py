"""Custom exception hierarchy for pyattrstore."""

from __future__ import annotations


class AttrStoreError(Exception):
    """Base exception for all pyattrstore errors."""


class InvalidHandlerError(AttrStoreError, TypeError):
    """An event handler was registered that is not callable."""

    def __init__(self, message: str, *, event: str = "") -> None:
        self.event = event
        super().__init__(message)
