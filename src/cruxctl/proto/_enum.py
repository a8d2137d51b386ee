"""JSON helpers shared by the protocol enumerations."""

from enum import IntEnum
from typing import Any, TypeVar

E = TypeVar("E", bound=IntEnum)

UNRECOGNIZED_NAME = "UNRECOGNIZED"


def enum_to_json(enum_cls: type[E], value: Any) -> str:
    """Return the canonical member name, or ``UNRECOGNIZED`` for unknown values."""
    if isinstance(value, bool) or not isinstance(value, int):
        return UNRECOGNIZED_NAME
    try:
        return enum_cls(value).name
    except ValueError:
        return UNRECOGNIZED_NAME


def enum_from_json(enum_cls: type[E], obj: Any) -> E:
    """Decode a wire value given either as integer or member name."""
    unrecognized = enum_cls[UNRECOGNIZED_NAME]
    if isinstance(obj, bool):
        return unrecognized
    if isinstance(obj, int):
        try:
            return enum_cls(obj)
        except ValueError:
            return unrecognized
    if isinstance(obj, str):
        return enum_cls.__members__.get(obj, unrecognized)
    return unrecognized
