"""
Process environment facts.

Values are read from `os.environ` on every call; nothing here is cached, so
tests and long-lived hosts see changes immediately.
"""

from __future__ import annotations

import os
from typing import Mapping, Optional

# Set to "1" by the hosted test cloud for every test run.
CLOUD_MODE_ENV = "XAMARIN_TEST_CLOUD"


def cloud_mode(env: Optional[Mapping[str, str]] = None) -> bool:
    environ = os.environ if env is None else env
    return environ.get(CLOUD_MODE_ENV) == "1"
