#!/usr/bin/env python3
"""
CLI for gesture performer selection.

Prints the decision report as JSON so CI jobs can check which backend a
toolchain/device pair will get before launching anything.
"""

from __future__ import annotations

import argparse
import json
from typing import Optional, Sequence

from gesturekit.api import options as options_api
from gesturekit.api.device import Device, DeviceResolutionError, resolve_device
from gesturekit.api.toolchain import Toolchain, detect_toolchain
from gesturekit.api.version import VersionParseError

from .policy import describe_decision


def _toolchain_from_args(args: argparse.Namespace) -> Toolchain:
    if args.xcode_version:
        try:
            return Toolchain.from_version(args.xcode_version)
        except VersionParseError as exc:
            raise SystemExit(f"invalid --xcode-version: {exc}")
    toolchain = detect_toolchain()
    if toolchain is None:
        raise SystemExit("could not detect Xcode with `xcrun xcodebuild -version`; pass --xcode-version")
    return toolchain


def _device_from_args(args: argparse.Namespace) -> Device:
    if (args.device_version is None) == (args.device_id is None):
        raise SystemExit("Provide exactly one of --device-version or --device-id")
    if args.device_version is not None:
        try:
            return Device.from_version(args.device_version)
        except VersionParseError as exc:
            raise SystemExit(f"invalid --device-version: {exc}")
    try:
        return resolve_device(args.device_id)
    except DeviceResolutionError as exc:
        raise SystemExit(str(exc))


def _decide_command(args: argparse.Namespace) -> int:
    try:
        config = options_api.load_options(options_json=args.options, options_path=args.options_path) or {}
    except options_api.OptionsError as exc:
        raise SystemExit(str(exc))
    if args.gesture_performer is not None:
        config["gesture_performer"] = args.gesture_performer
    toolchain = _toolchain_from_args(args)
    device = _device_from_args(args)
    report = describe_decision(config, toolchain, device)
    report["toolchain"] = {"xcode": str(toolchain.version()), "developer_dir": toolchain.developer_dir}
    report["device"] = {"name": device.name, "udid": device.udid, "os_version": str(device.version())}
    print(json.dumps(report, indent=2, sort_keys=True))
    return 0 if report.get("ok") else 1


def main(argv: Optional[Sequence[str]] = None) -> int:
    ap = argparse.ArgumentParser(description="Gesture performer selection for automation sessions.")
    sub = ap.add_subparsers(dest="command", required=True)

    p_decide = sub.add_parser("decide", help="Report which gesture performer a toolchain/device pair gets.")
    p_decide.add_argument("--xcode-version", default=None, help="Xcode version (default: probe xcrun xcodebuild)")
    p_decide.add_argument("--device-version", default=None, help="Device OS version, e.g. 9.0")
    p_decide.add_argument("--device-id", default=None, help="Resolve the device OS version through frida")
    p_decide.add_argument("--options", default=None, help="JSON object option bag")
    p_decide.add_argument("--options-path", default=None, help="Path to a JSON object option bag")
    p_decide.add_argument(
        "--gesture-performer",
        default=None,
        help="Explicit gesture_performer (overrides the option bag)",
    )
    p_decide.set_defaults(func=_decide_command)

    args = ap.parse_args(argv)
    return int(args.func(args))


if __name__ == "__main__":
    raise SystemExit(main())
