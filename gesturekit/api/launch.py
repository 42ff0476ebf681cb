"""Launch entry point: hand an option bag to the execution engine untouched."""

from __future__ import annotations

from typing import Any, Mapping, Optional

from gesturekit.api import engine as engine_api


def run(config: Mapping[str, Any], *, engine: Optional[engine_api.EngineEntry] = None) -> Any:
    """
    Forward `config` to the execution engine and return its result.

    The same mapping object is passed through: no keys are added, dropped or
    renamed and no value is replaced, so collaborator handles keep their
    identity. Performer selection is the engine's job, via
    `gesturekit.api.performer.select_performer`.
    """
    if engine is not None:
        return engine(config)
    return engine_api.execute_with_configuration(config)
