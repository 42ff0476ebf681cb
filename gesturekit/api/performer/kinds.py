"""
Gesture performer identifiers.

There are exactly two backends. Parsing happens once, at the options boundary,
so policy code only ever sees `PerformerKind` members.
"""

from __future__ import annotations

from enum import StrEnum

from .errors import InvalidOptionError


class PerformerKind(StrEnum):
    """Backends that can inject touches into the app under test."""

    INSTRUMENTS = "instruments"
    DEVICE_AGENT = "device_agent"


def parse_performer(value: object) -> PerformerKind:
    if isinstance(value, PerformerKind):
        return value
    if isinstance(value, str):
        try:
            return PerformerKind(value)
        except ValueError:
            pass
    raise InvalidOptionError(f"Invalid gesture_performer option: {value!r}; expected one of {_choices()}")


def _choices() -> str:
    return ", ".join(kind.value for kind in PerformerKind)
