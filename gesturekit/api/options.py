"""
Option bag helpers (headless, deterministic).

An option bag is a plain mapping handed to the execution engine unchanged.
These helpers only load one from the command line.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Dict, Optional


class OptionsError(ValueError):
    """Raised when an option bag cannot be loaded."""


def _stable_json_error(exc: json.JSONDecodeError) -> str:
    msg = " ".join(str(exc.msg).split())
    return f"JSONDecodeError: {msg} (line {exc.lineno} col {exc.colno})"


def load_options(
    *,
    options_json: Optional[str] = None,
    options_path: Optional[str | Path] = None,
) -> Optional[Dict[str, Any]]:
    if options_json is not None and options_path is not None:
        raise OptionsError("use only one of --options or --options-path")
    options = None
    if options_json is not None:
        try:
            options = json.loads(options_json)
        except json.JSONDecodeError as exc:
            raise OptionsError(f"invalid --options JSON: {_stable_json_error(exc)}") from exc
    elif options_path is not None:
        path = Path(options_path)
        try:
            options = json.loads(path.read_text())
        except OSError as exc:
            raise OptionsError(f"cannot read --options-path {path}: {exc.strerror or exc}") from exc
        except json.JSONDecodeError as exc:
            raise OptionsError(f"invalid --options-path JSON: {_stable_json_error(exc)}") from exc
    if options is None:
        return None
    if not isinstance(options, dict):
        raise OptionsError("options must be a JSON object")
    return options
