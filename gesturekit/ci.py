#!/usr/bin/env python3
"""
Test driver for gesturekit.

Runs the gesturekit pytest suite with the cloud-mode flag cleared, so a run on
a hosted test-cloud worker still exercises the local selection rules.
"""

from __future__ import annotations

import os
import subprocess
import sys
from pathlib import Path

from gesturekit.api.environment import CLOUD_MODE_ENV

ROOT = Path(__file__).resolve().parent            # gesturekit/
REPO_ROOT = ROOT.parent                           # repo root
TESTS_DIR = ROOT / "tests"


def harness_env(base: dict[str, str] | None = None) -> dict[str, str]:
    env = dict(os.environ if base is None else base)
    env.pop(CLOUD_MODE_ENV, None)
    env["PYTHONPATH"] = os.pathsep.join(p for p in (str(REPO_ROOT), env.get("PYTHONPATH")) if p)
    return env


def pytest_command(extra: list[str]) -> list[str]:
    # Explicit targets replace the default suite; bare flags are added to it.
    targets = [arg for arg in extra if not arg.startswith("-")]
    cmd = [sys.executable, "-m", "pytest", *extra]
    if not targets:
        cmd.append(str(TESTS_DIR))
    return cmd


def main(argv: list[str] | None = None) -> int:
    cmd = pytest_command(list(sys.argv[1:] if argv is None else argv))
    print(f"[ci] gesturekit: running {' '.join(cmd)}", flush=True)
    return subprocess.call(cmd, cwd=REPO_ROOT, env=harness_env())


if __name__ == "__main__":
    raise SystemExit(main())
