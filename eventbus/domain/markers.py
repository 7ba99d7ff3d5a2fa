"""The handler marker and its two declaration forms.

Annotated field (value read from the instance at subscribe time)::

    class Listener:
        on_ping: Annotated[Callable[[Ping], None], handler()]

Decorated method::

    class Listener:
        @handler
        def on_ping(self, event: Ping) -> None: ...

        @handler(Shutdown)
        def on_shutdown(self) -> None: ...
"""

from __future__ import annotations

import inspect
import types
import typing
from dataclasses import dataclass
from typing import Any, Callable

MARKER_ATTR = "__eventbus_handler__"


def _is_event_type(value: Any) -> bool:
    if isinstance(value, type):
        return True
    if isinstance(value, tuple):
        return bool(value) and all(_is_event_type(v) for v in value)
    if isinstance(value, types.UnionType) or typing.get_origin(value) is typing.Union:
        return True
    return value is typing.Any


@dataclass(frozen=True)
class HandlerMarker:
    """Tags a field as an event handler.

    ``event_type=None`` means the field holds a one-argument function whose
    parameter annotation names the event type; otherwise the field holds a
    zero-argument function fired for ``event_type``.
    """

    event_type: Any = None

    def __post_init__(self) -> None:
        if self.event_type is not None and not _is_event_type(self.event_type):
            raise TypeError(
                f"handler event type must be a class, tuple or union, got {self.event_type!r}"
            )

    def __call__(self, fn: Callable) -> Callable:
        setattr(fn, MARKER_ATTR, self)
        return fn


def handler(event_type: Any = None) -> Any:
    """Create a handler marker, or mark ``event_type`` directly when used bare.

    ``@handler`` on a function is shorthand for ``@handler()``.
    """
    if inspect.isfunction(event_type):
        return HandlerMarker()(event_type)
    return HandlerMarker(event_type)


def marker_of(value: Any) -> HandlerMarker | None:
    """Return the marker set on a decorated function, if any."""
    marker = getattr(value, MARKER_ATTR, None)
    return marker if isinstance(marker, HandlerMarker) else None


def marker_in_hint(hint: Any) -> HandlerMarker | None:
    """Return the first marker found in ``Annotated`` metadata, if any."""
    if typing.get_origin(hint) is not typing.Annotated:
        return None
    for meta in hint.__metadata__:
        if isinstance(meta, HandlerMarker):
            return meta
    return None
