"""
Version values for toolchains and device operating systems.

A `Version` is parsed from the strings that Xcode and devices report
(`"9.0"`, `"8.3.1"`, `"10.0 beta 2"`) and compares numerically, so policy code
can write `device.version() >= Version("9.0")` without string tricks.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from functools import total_ordering
from typing import Optional, Tuple

_VERSION_RE = re.compile(
    r"""
    ^\s*
    (?P<major>\d+)
    (?:\.(?P<minor>\d+))?
    (?:\.(?P<patch>\d+))?
    (?:[\s\-_.]*(?P<pre>beta|b|pre|rc|alpha|a)[\s\-_.]*(?P<pre_version>\d+)?)?
    \s*$
    """,
    re.IGNORECASE | re.VERBOSE,
)


class VersionParseError(ValueError):
    """Raised when a string does not look like a dotted version."""


@total_ordering
@dataclass(frozen=True, init=False)
class Version:
    major: int
    minor: int = 0
    patch: Optional[int] = None
    pre: bool = False
    pre_version: Optional[int] = None
    source: str = field(default="", compare=False)

    def __init__(self, text: str) -> None:
        if isinstance(text, Version):
            text = text.source
        match = _VERSION_RE.match(str(text))
        if match is None:
            raise VersionParseError(f"not a version string: {text!r}")
        object.__setattr__(self, "major", int(match.group("major")))
        object.__setattr__(self, "minor", int(match.group("minor") or 0))
        patch = match.group("patch")
        object.__setattr__(self, "patch", int(patch) if patch is not None else None)
        object.__setattr__(self, "pre", match.group("pre") is not None)
        pre_version = match.group("pre_version")
        object.__setattr__(self, "pre_version", int(pre_version) if pre_version is not None else None)
        object.__setattr__(self, "source", str(text).strip())

    def _key(self) -> Tuple[int, int, int, int, int]:
        # Releases sort after every pre-release of the same number.
        release_rank = 0 if self.pre else 1
        return (self.major, self.minor, self.patch or 0, release_rank, self.pre_version or 0)

    def __eq__(self, other: object) -> bool:
        # Only versions compare equal; strings would break the hash contract.
        if not isinstance(other, Version):
            return NotImplemented
        return self._key() == other._key()

    def __lt__(self, other: object) -> bool:
        if isinstance(other, str):
            try:
                other = Version(other)
            except VersionParseError:
                return NotImplemented
        if not isinstance(other, Version):
            return NotImplemented
        return self._key() < other._key()

    def __hash__(self) -> int:
        return hash(self._key())

    def __str__(self) -> str:
        text = f"{self.major}.{self.minor}"
        if self.patch is not None:
            text += f".{self.patch}"
        if self.pre:
            text += " beta"
            if self.pre_version is not None:
                text += f" {self.pre_version}"
        return text

    def __repr__(self) -> str:
        return f"Version({str(self)!r})"


IOS_9 = Version("9.0")
XCODE_8 = Version("8.0")
