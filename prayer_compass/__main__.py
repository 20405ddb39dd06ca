"""Module entry point: python -m prayer_compass ..."""

from __future__ import annotations

from prayer_compass.cli import main


if __name__ == "__main__":
    raise SystemExit(main())
