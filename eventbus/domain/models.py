"""Descriptions of handler fields found on subscriber classes."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict


class HandlerField(BaseModel):
    """One marked field of a subscriber class.

    ``owner`` is the class whose body declares the field. ``event_type`` is the
    marker's explicit type, or ``None`` when the type is inferred from a
    one-argument function. ``declared_arg`` is the argument type of the field's
    own ``Callable[[T], ...]`` annotation, used when the function value leaves
    its parameter unannotated (lambdas).
    """

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    name: str
    owner: type[Any]
    event_type: Any = None
    declared_arg: Any = None

    @property
    def infers_event_type(self) -> bool:
        return self.event_type is None
