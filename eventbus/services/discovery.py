"""Handler discovery: find marked fields on a class and build handlers for an instance."""

from __future__ import annotations

import inspect
import sys
from typing import Any

from eventbus.domain.errors import InvalidHandlerError
from eventbus.domain.handlers import Handler, NoArgHandler, SingleArgHandler
from eventbus.domain.markers import marker_in_hint, marker_of
from eventbus.domain.models import HandlerField
from eventbus.services.signatures import (
    accepts_no_arguments,
    callable_argument,
    infer_event_type,
    resolve_event_type,
)


def _own_hints(klass: type) -> dict[str, Any]:
    """Annotations declared in ``klass`` itself, evaluated when they may hold a marker."""
    raw = inspect.get_annotations(klass)
    module = sys.modules.get(klass.__module__)
    globalns = vars(module) if module is not None else {}
    localns = dict(vars(klass))

    hints: dict[str, Any] = {}
    for name, hint in raw.items():
        # Only string annotations mentioning Annotated can carry a marker; the
        # rest stay unevaluated so unrelated forward references are tolerated.
        if isinstance(hint, str) and "Annotated" in hint:
            try:
                hint = eval(hint, globalns, localns)
            except (NameError, AttributeError, SyntaxError) as exc:
                raise InvalidHandlerError(
                    klass, name, f"cannot evaluate annotation: {exc}"
                ) from exc
        hints[name] = hint
    return hints


def list_handler_fields(cls: type) -> list[HandlerField]:
    """Return the marked fields of ``cls`` in discovery order.

    The class's own fields come first, then those of its ancestors in MRO
    order. Within a class, annotated fields precede decorated methods. A name
    is owned by the nearest class that marks it.
    """
    fields: list[HandlerField] = []
    seen: set[str] = set()

    for klass in cls.__mro__:
        if klass is object:
            continue

        declared = []
        for name, hint in _own_hints(klass).items():
            marker = marker_in_hint(hint)
            if marker is not None:
                declared.append((name, marker, callable_argument(hint)))
        for name, value in vars(klass).items():
            marker = marker_of(value)
            if marker is not None:
                declared.append((name, marker, None))

        for name, marker, declared_arg in declared:
            if name in seen:
                continue
            seen.add(name)
            fields.append(
                HandlerField(
                    name=name,
                    owner=klass,
                    event_type=marker.event_type,
                    declared_arg=declared_arg,
                )
            )

    return fields


def build_handler(instance: Any, field: HandlerField) -> Handler:
    """Read ``field`` from ``instance`` and wrap its value in the matching Handler."""
    try:
        value = getattr(instance, field.name)
    except AttributeError as exc:
        raise InvalidHandlerError(field.owner, field.name, "field has no value") from exc

    if field.infers_event_type:
        try:
            target = infer_event_type(value, field.declared_arg)
        except TypeError as exc:
            raise InvalidHandlerError(field.owner, field.name, str(exc)) from exc
        return SingleArgHandler(value, target, field.name)

    try:
        zero_args = accepts_no_arguments(value)
        target = resolve_event_type(field.event_type)
    except TypeError as exc:
        raise InvalidHandlerError(field.owner, field.name, str(exc)) from exc
    if not zero_args:
        raise InvalidHandlerError(
            field.owner, field.name, f"expected a zero-argument function, got {value!r}"
        )
    return NoArgHandler(value, target, field.name)


def collect_handlers(instance: Any) -> tuple[Handler, ...]:
    """Build every handler declared on ``instance``'s class hierarchy.

    All-or-nothing: the first invalid field raises ``InvalidHandlerError``.
    """
    return tuple(build_handler(instance, field) for field in list_handler_fields(type(instance)))
