"""Exceptions raised while assembling invoices."""

from __future__ import annotations


class ValidationError(ValueError):
    """Raised when the invoice input is structurally incomplete.

    The message is part of the public contract: callers match on it, so it
    is kept verbatim (``"Line 2: Name is required"``, ...).
    """

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


__all__ = ["ValidationError"]
