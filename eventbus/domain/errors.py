"""Errors raised while discovering handlers on a subscriber."""

from __future__ import annotations


class InvalidHandlerError(ValueError):
    """A marked field does not hold a usable handler.

    Raised synchronously by ``Bus.subscribe``; nothing is registered when it is
    raised.
    """

    def __init__(self, owner: type, field_name: str, reason: str) -> None:
        self.owner = owner
        self.field_name = field_name
        self.reason = reason
        super().__init__(f"{owner.__qualname__}.{field_name}: {reason}")
