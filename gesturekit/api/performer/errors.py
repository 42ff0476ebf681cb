"""Failures raised while choosing a gesture performer."""

from __future__ import annotations


class GesturePerformerError(RuntimeError):
    """Base error for gesture performer selection failures."""


class InvalidOptionError(GesturePerformerError):
    """Raised when `gesture_performer` names something that is not a performer."""


class IncompatibleOptionError(GesturePerformerError):
    """Raised when a valid performer is not offered by the active toolchain."""


class IncompatibleEnvironmentError(GesturePerformerError):
    """Raised when no performer can drive the toolchain and device OS pair."""
