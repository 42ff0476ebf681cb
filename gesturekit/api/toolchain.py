"""Xcode toolchain facts consumed by the gesture performer policy."""

from __future__ import annotations

import os
import re
import subprocess
from dataclasses import dataclass
from typing import Optional, Sequence

from gesturekit.api.version import XCODE_8, Version

XCODEBUILD_VERSION_CMD: Sequence[str] = ("xcrun", "xcodebuild", "-version")

_XCODE_LINE_RE = re.compile(r"^Xcode\s+(?P<version>\S+(?:\s+beta(?:\s+\d+)?)?)\s*$", re.IGNORECASE | re.MULTILINE)


def try_cmd(*cmd: str) -> str | None:
    try:
        return subprocess.check_output(list(cmd), text=True, stderr=subprocess.DEVNULL).strip()
    except (OSError, subprocess.SubprocessError):
        return None


@dataclass(frozen=True)
class Toolchain:
    """
    An installed Xcode, reduced to the version facts the policy needs.

    `developer_dir` is informational only; it records which Xcode the version
    was read from when the descriptor came from a probe.
    """

    version_value: Version
    developer_dir: Optional[str] = None

    @classmethod
    def from_version(cls, text: str, *, developer_dir: Optional[str] = None) -> "Toolchain":
        return cls(version_value=Version(text), developer_dir=developer_dir)

    def version(self) -> Version:
        return self.version_value

    def version_gte(self, other: Version | str) -> bool:
        return self.version_value >= Version(other)

    def version_gte_8(self) -> bool:
        return self.version_gte(XCODE_8)


def parse_xcodebuild_version(output: str) -> Optional[Version]:
    """Extract the version from `xcodebuild -version` output, e.g. "Xcode 8.3.1"."""
    match = _XCODE_LINE_RE.search(output or "")
    if match is None:
        return None
    return Version(match.group("version"))


def detect_toolchain(*, env: Optional[dict] = None) -> Optional[Toolchain]:
    """
    Probe the active Xcode with `xcrun xcodebuild -version`.

    Returns None when xcrun is missing or prints something unexpected; callers
    decide whether that is fatal.
    """
    environ = os.environ if env is None else env
    output = try_cmd(*XCODEBUILD_VERSION_CMD)
    if output is None:
        return None
    version = parse_xcodebuild_version(output)
    if version is None:
        return None
    return Toolchain(version_value=version, developer_dir=environ.get("DEVELOPER_DIR"))
