"""
Execution engine entry point.

The engine that actually launches an automation session lives outside this
package. Integrators install it once with `register_engine`; `run` then hands
every option bag to `execute_with_configuration`.
"""

from __future__ import annotations

from typing import Any, Callable, Mapping, Optional

EngineEntry = Callable[[Mapping[str, Any]], Any]

_ENGINE: Optional[EngineEntry] = None


class EngineNotConfiguredError(RuntimeError):
    """Raised when `run` is called before an engine has been registered."""


def register_engine(entry: Optional[EngineEntry]) -> Optional[EngineEntry]:
    """Install `entry` as the engine and return the one it replaces (None clears)."""
    global _ENGINE
    if entry is not None and not callable(entry):
        raise TypeError(f"engine entry must be callable, got {type(entry).__name__}")
    previous = _ENGINE
    _ENGINE = entry
    return previous


def registered_engine() -> Optional[EngineEntry]:
    return _ENGINE


def execute_with_configuration(config: Mapping[str, Any]) -> Any:
    if _ENGINE is None:
        raise EngineNotConfiguredError("no execution engine registered; call register_engine() first")
    return _ENGINE(config)
