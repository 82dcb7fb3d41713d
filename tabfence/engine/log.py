"""Stderr logging for the engine, gated by a verbosity switch."""

import os
import sys
from datetime import datetime

VERBOSE = os.environ.get("TABFENCE_VERBOSE", "0").strip().lower() in {"1", "true", "yes", "on", "y"}


def set_verbose(value: bool) -> None:
    global VERBOSE
    VERBOSE = bool(value)


def log(msg: str) -> None:
    if not VERBOSE:
        return
    ts = datetime.now().strftime("%Y-%m-%d %H:%M:%S")
    print(f"[tabfence] {ts} {msg}", file=sys.stderr)
