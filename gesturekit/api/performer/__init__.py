"""
Gesture performer selection for automation sessions.

`select_performer` is what launch code calls; `default_performer` is the
fallback used when the option bag does not name a performer.
"""

from __future__ import annotations

from .errors import (  # noqa: F401
    GesturePerformerError,
    IncompatibleEnvironmentError,
    IncompatibleOptionError,
    InvalidOptionError,
)
from .kinds import PerformerKind, parse_performer  # noqa: F401
from .policy import (  # noqa: F401
    GESTURE_PERFORMER_KEY,
    default_performer,
    describe_decision,
    requested_performer,
    select_performer,
)

__all__ = [
    "GESTURE_PERFORMER_KEY",
    "GesturePerformerError",
    "IncompatibleEnvironmentError",
    "IncompatibleOptionError",
    "InvalidOptionError",
    "PerformerKind",
    "default_performer",
    "describe_decision",
    "parse_performer",
    "requested_performer",
    "select_performer",
]
