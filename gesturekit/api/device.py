"""
Device facts consumed by the gesture performer policy.

The policy only ever asks a device for its OS version. Devices can be built
directly from a version string (simulators, tests, CI matrices) or read from a
frida device, which reports its OS through `query_system_parameters()`.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Optional

from gesturekit.api.version import Version, VersionParseError


class DeviceResolutionError(RuntimeError):
    """Raised when a device cannot be found or does not report an OS version."""


@dataclass(frozen=True)
class Device:
    name: str
    udid: Optional[str]
    os_version: Version
    platform: Optional[str] = None

    @classmethod
    def from_version(cls, text: str, *, name: str = "device", udid: Optional[str] = None) -> "Device":
        return cls(name=name, udid=udid, os_version=Version(text))

    def version(self) -> Version:
        return self.os_version


def _system_parameters(frida_device: Any) -> Dict[str, Any]:
    try:
        params = frida_device.query_system_parameters()
    except Exception as exc:
        raise DeviceResolutionError(f"query_system_parameters failed: {type(exc).__name__}: {exc}") from exc
    if not isinstance(params, dict):
        raise DeviceResolutionError("query_system_parameters returned a non-object")
    return params


def device_from_frida(frida_device: Any) -> Device:
    """Build a `Device` from a frida device handle."""
    params = _system_parameters(frida_device)
    os_info = params.get("os")
    if not isinstance(os_info, dict) or not isinstance(os_info.get("version"), str):
        raise DeviceResolutionError(f"device {getattr(frida_device, 'id', '?')} did not report os.version")
    try:
        os_version = Version(os_info["version"])
    except VersionParseError as exc:
        raise DeviceResolutionError(str(exc)) from exc
    return Device(
        name=str(getattr(frida_device, "name", None) or params.get("name") or "device"),
        udid=getattr(frida_device, "id", None),
        os_version=os_version,
        platform=os_info.get("id") if isinstance(os_info.get("id"), str) else None,
    )


def resolve_device(device_id: str, *, timeout_s: int = 5) -> Device:
    """Look up a connected device by id through frida and read its OS version."""
    # Import lazily so version-only callers do not need the frida bindings.
    try:
        import frida  # type: ignore
    except ImportError as exc:
        raise DeviceResolutionError(f"frida is required to resolve devices: {exc}") from exc

    try:
        frida_device = frida.get_device(device_id, timeout=timeout_s)
    except Exception as exc:
        raise DeviceResolutionError(f"device not found: {device_id} ({type(exc).__name__}: {exc})") from exc
    return device_from_frida(frida_device)
