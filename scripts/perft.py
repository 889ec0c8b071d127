#!/usr/bin/env python3
# ruff: noqa: E402
from __future__ import annotations

import os
import sys

# Allow running this script directly via `python scripts/perft.py`
# by adding the repo root (which contains `chessrules/`) to sys.path.
REPO_ROOT = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
if REPO_ROOT not in sys.path:
    sys.path.insert(0, REPO_ROOT)

from chessrules.cli.main import main


if __name__ == "__main__":
    sys.exit(main(["perft", *sys.argv[1:]]))
