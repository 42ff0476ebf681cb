"""
Gesture performer selection.

Which backend injects touches depends on three facts: whether we run in the
hosted test cloud, whether the active Xcode is 8 or newer, and whether the
device OS is 9.0 or newer. The compatibility matrix lives in two tables below:

- `DEFAULT_RULES`: the performer chosen when the option bag does not name one.
- `OVERRIDE_GUARDS`: combinations in which an explicitly requested performer
  is refused.

Facts are read lazily through `_Facts`, so a rule that does not need the device
never asks for its version. The cloud flag is read once per call and nothing
is cached between calls.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum
from functools import cached_property
from typing import Any, Callable, Dict, Mapping, Optional, Tuple, Type, Union

from gesturekit.api import environment
from gesturekit.api.version import IOS_9

from .errors import (
    GesturePerformerError,
    IncompatibleEnvironmentError,
    IncompatibleOptionError,
)
from .kinds import PerformerKind, parse_performer

GESTURE_PERFORMER_KEY = "gesture_performer"

INCOMPATIBLE_OPTION = "Incompatible gesture_performer option for active toolchain version"
INCOMPATIBLE_ENVIRONMENT = "Invalid toolchain and device OS combination"


class ToolchainTier(StrEnum):
    LEGACY = "xcode<8"
    MODERN = "xcode>=8"


class DeviceTier(StrEnum):
    PRE_IOS_9 = "os<9.0"
    IOS_9 = "os>=9.0"


class DecisionSource(StrEnum):
    CLOUD = "cloud"
    OPTION = "option"
    DEFAULT = "default"


class _Facts:
    """Per-call view of the toolchain and device; each fact is read at most once."""

    def __init__(self, toolchain: Any, device: Any) -> None:
        self._toolchain = toolchain
        self._device = device

    @cached_property
    def _toolchain_gte_8(self) -> bool:
        return bool(self._toolchain.version_gte_8())

    @cached_property
    def device_version(self) -> Any:
        return self._device.version()

    def toolchain_tier(self) -> ToolchainTier:
        return ToolchainTier.MODERN if self._toolchain_gte_8 else ToolchainTier.LEGACY

    def device_tier(self) -> DeviceTier:
        return DeviceTier.IOS_9 if self.device_version >= IOS_9 else DeviceTier.PRE_IOS_9


@dataclass(frozen=True)
class Denied:
    error: Type[GesturePerformerError]
    reason: str
    detail: str

    def raise_for(self, facts: _Facts) -> None:
        raise self.error(f"{self.reason}: {self.detail.format(facts=facts)}")


@dataclass(frozen=True)
class OverrideGuard:
    performer: PerformerKind
    fact: Callable[[_Facts], StrEnum]
    forbidden: StrEnum
    denial: Denied


_NO_PERFORMER_FOR_DEVICE = Denied(
    IncompatibleEnvironmentError,
    INCOMPATIBLE_ENVIRONMENT,
    "Xcode >= 8 can only drive device OS >= 9.0 through device_agent (device reports {facts.device_version})",
)

# Keys are (toolchain tier, device tier); a None device tier means the device is not consulted.
DEFAULT_RULES: Dict[Tuple[ToolchainTier, Optional[DeviceTier]], Union[PerformerKind, Denied]] = {
    (ToolchainTier.LEGACY, None): PerformerKind.INSTRUMENTS,
    (ToolchainTier.MODERN, DeviceTier.IOS_9): PerformerKind.DEVICE_AGENT,
    (ToolchainTier.MODERN, DeviceTier.PRE_IOS_9): _NO_PERFORMER_FOR_DEVICE,
}

DEVICE_CONSULTED = frozenset({ToolchainTier.MODERN})

# Evaluated in order; the first guard matching the requested performer and fact wins.
OVERRIDE_GUARDS: Tuple[OverrideGuard, ...] = (
    OverrideGuard(
        performer=PerformerKind.INSTRUMENTS,
        fact=_Facts.toolchain_tier,
        forbidden=ToolchainTier.MODERN,
        denial=Denied(
            IncompatibleOptionError,
            INCOMPATIBLE_OPTION,
            "instruments cannot drive tests with Xcode >= 8; use device_agent",
        ),
    ),
    OverrideGuard(
        performer=PerformerKind.DEVICE_AGENT,
        fact=_Facts.device_tier,
        forbidden=DeviceTier.PRE_IOS_9,
        denial=Denied(
            IncompatibleEnvironmentError,
            INCOMPATIBLE_ENVIRONMENT,
            "device_agent requires device OS >= 9.0 (device reports {facts.device_version})",
        ),
    ),
)


def requested_performer(config: Mapping[str, Any]) -> Optional[PerformerKind]:
    """Return the performer named by the option bag, or None when it names none."""
    value = config.get(GESTURE_PERFORMER_KEY)
    if value is None:
        return None
    return parse_performer(value)


def _default(facts: _Facts) -> PerformerKind:
    tier = facts.toolchain_tier()
    device_tier = facts.device_tier() if tier in DEVICE_CONSULTED else None
    outcome = DEFAULT_RULES[(tier, device_tier)]
    if isinstance(outcome, Denied):
        outcome.raise_for(facts)
    return outcome


def _check_override(requested: PerformerKind, facts: _Facts) -> PerformerKind:
    for guard in OVERRIDE_GUARDS:
        if guard.performer is not requested:
            continue
        if guard.fact(facts) == guard.forbidden:
            guard.denial.raise_for(facts)
    return requested


def _select(
    config: Mapping[str, Any],
    toolchain: Any,
    device: Any,
    *,
    cloud: bool,
) -> Tuple[PerformerKind, DecisionSource]:
    if cloud:
        return PerformerKind.INSTRUMENTS, DecisionSource.CLOUD
    requested = requested_performer(config)
    facts = _Facts(toolchain, device)
    if requested is not None:
        return _check_override(requested, facts), DecisionSource.OPTION
    return _default(facts), DecisionSource.DEFAULT


def default_performer(toolchain: Any, device: Any, *, cloud: Optional[bool] = None) -> PerformerKind:
    """
    Return the performer to use when the caller did not ask for one.

    - test cloud: instruments
    - Xcode < 8: instruments
    - Xcode >= 8 and device OS >= 9.0: device_agent
    - Xcode >= 8 and device OS < 9.0: IncompatibleEnvironmentError

    `cloud` lets a caller that already read the environment pass the flag on.
    """
    if cloud is None:
        cloud = environment.cloud_mode()
    if cloud:
        return PerformerKind.INSTRUMENTS
    return _default(_Facts(toolchain, device))


def select_performer(config: Mapping[str, Any], toolchain: Any, device: Any) -> PerformerKind:
    """
    Return the performer for `config`, validating an explicit `gesture_performer`.

    In the test cloud the option is ignored and instruments is returned. Without
    an explicit option this is `default_performer(toolchain, device)`.
    """
    cloud = environment.cloud_mode()
    if cloud:
        return PerformerKind.INSTRUMENTS
    if config.get(GESTURE_PERFORMER_KEY) is None:
        return default_performer(toolchain, device, cloud=cloud)
    performer, _source = _select(config, toolchain, device, cloud=cloud)
    return performer


def _stable_error_string(exc: Exception) -> str:
    msg = " ".join(str(exc).split())
    return f"{type(exc).__name__}: {msg}"


def describe_decision(config: Mapping[str, Any], toolchain: Any, device: Any) -> Dict[str, object]:
    """JSON-ready report of a selection, including failures."""
    cloud = environment.cloud_mode()
    report: Dict[str, object] = {
        "ok": False,
        "cloud_mode": cloud,
        "requested": None,
        "gesture_performer": None,
        "source": None,
        "error": None,
        "error_kind": None,
    }
    raw = config.get(GESTURE_PERFORMER_KEY)
    if raw is not None:
        report["requested"] = str(raw)
    try:
        performer, source = _select(config, toolchain, device, cloud=cloud)
    except GesturePerformerError as exc:
        report["error"] = _stable_error_string(exc)
        report["error_kind"] = type(exc).__name__.removesuffix("Error")
        return report
    report["ok"] = True
    report["gesture_performer"] = performer.value
    report["source"] = source.value
    return report
