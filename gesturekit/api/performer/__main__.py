"""Entry point shim so `python -m gesturekit.api.performer` runs the CLI."""

from __future__ import annotations

from . import cli


def main() -> int:
    return cli.main()


if __name__ == "__main__":
    raise SystemExit(main())
