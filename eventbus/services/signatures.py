"""Signature introspection for handler values.

These helpers raise ``TypeError``; discovery turns that into an
``InvalidHandlerError`` naming the offending field.
"""

from __future__ import annotations

import collections.abc
import inspect
import types
import typing
from typing import Any, Callable

EventType = typing.Union[type, tuple[type, ...]]

_POSITIONAL = (inspect.Parameter.POSITIONAL_ONLY, inspect.Parameter.POSITIONAL_OR_KEYWORD)
_VARIADIC = (inspect.Parameter.VAR_POSITIONAL, inspect.Parameter.VAR_KEYWORD)


def signature_of(fn: Any, eval_str: bool = False) -> inspect.Signature:
    if not callable(fn):
        raise TypeError(f"expected a function, got {fn!r}")
    try:
        return inspect.signature(fn, eval_str=eval_str)
    except ValueError as exc:
        raise TypeError(f"no signature available for {fn!r}") from exc
    except (NameError, AttributeError, SyntaxError) as exc:
        raise TypeError(f"cannot evaluate annotations of {fn!r}: {exc}") from exc


def accepts_no_arguments(fn: Any) -> bool:
    """Return True if ``fn`` is callable with no arguments at all."""
    if not callable(fn):
        return False
    sig = signature_of(fn)
    try:
        sig.bind()
    except TypeError:
        return False
    return True


def sole_parameter(fn: Any) -> inspect.Parameter:
    """Return the single required positional parameter of ``fn``.

    Extra parameters are allowed as long as they have defaults.
    """
    if not callable(fn):
        raise TypeError(f"expected a one-argument function, got {fn!r}")
    sig = signature_of(fn)
    required = [
        p
        for p in sig.parameters.values()
        if p.default is p.empty and p.kind not in _VARIADIC
    ]
    if len(required) != 1 or required[0].kind not in _POSITIONAL:
        raise TypeError(f"expected a one-argument function, got {sig}")
    return required[0]


def _flatten(members: typing.Iterable[Any]) -> tuple[type, ...]:
    flat: list[type] = []
    for member in members:
        resolved = resolve_event_type(member)
        flat.extend(resolved if isinstance(resolved, tuple) else (resolved,))
    return tuple(dict.fromkeys(flat))


def resolve_event_type(hint: Any) -> EventType:
    """Normalise an annotation into something ``isinstance`` accepts.

    ``Any`` becomes ``object``, unions become tuples, ``Annotated[T, ...]``
    becomes ``T`` and parameterised generics become their origin class.
    """
    if hint is typing.Any or hint is object:
        return object
    origin = typing.get_origin(hint)
    if origin is typing.Annotated:
        return resolve_event_type(typing.get_args(hint)[0])
    if origin is typing.Union or origin is types.UnionType:
        return _flatten(typing.get_args(hint))
    if isinstance(hint, tuple):
        if not hint:
            raise TypeError("an empty tuple matches no events")
        return _flatten(hint)
    if isinstance(origin, type):
        return origin
    if isinstance(hint, type):
        return hint
    raise TypeError(f"cannot match events against {hint!r}")


def callable_argument(hint: Any) -> Any:
    """Return ``T`` from a ``Callable[[T], ...]`` hint, or ``None`` for any other shape."""
    if typing.get_origin(hint) is typing.Annotated:
        hint = typing.get_args(hint)[0]
    if typing.get_origin(hint) is not collections.abc.Callable:
        return None
    args = typing.get_args(hint)
    if not args:
        return None
    params = args[0]
    if isinstance(params, list) and len(params) == 1:
        return params[0]
    return None


def infer_event_type(fn: Callable, declared: Any = None) -> EventType:
    """Resolve the event type a one-argument function declares for its parameter.

    The function's own annotation wins; ``declared`` is only used when the
    parameter is unannotated.
    """
    param = sole_parameter(fn)
    annotation = signature_of(fn, eval_str=True).parameters[param.name].annotation
    if annotation is inspect.Parameter.empty:
        if declared is None:
            raise TypeError(f"parameter {param.name!r} has no type annotation")
        annotation = declared
    return resolve_event_type(annotation)
