"""Handler objects built by discovery and invoked by the bus."""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Callable

from eventbus.services.signatures import EventType


@dataclass(frozen=True)
class Handler(ABC):
    """A discovered handler: a function value plus the event type it accepts.

    ``target_type`` may be a tuple of classes; matching uses ``isinstance`` so
    subclasses of the target type match too.
    """

    fn: Callable[..., Any]
    target_type: EventType
    field_name: str = ""

    def matches(self, event: Any) -> bool:
        return isinstance(event, self.target_type)

    @abstractmethod
    def invoke(self, event: Any) -> None:
        """Deliver ``event`` to the wrapped function."""


@dataclass(frozen=True)
class SingleArgHandler(Handler):
    """Calls ``fn(event)``; the target type came from ``fn``'s parameter annotation."""

    def invoke(self, event: Any) -> None:
        self.fn(event)


@dataclass(frozen=True)
class NoArgHandler(Handler):
    """Calls ``fn()`` and ignores the payload; the target type came from the marker."""

    def invoke(self, event: Any) -> None:
        self.fn()
