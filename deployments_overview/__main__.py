#!/usr/bin/env python3
"""Module entrypoint for `deployments_overview`.

Usage:
  - `python3 -m deployments_overview owner/repo`
"""

from __future__ import annotations

from .cli import main


if __name__ == "__main__":
    raise SystemExit(main())
