"""Shared utilities for lhreport: debug logging."""

import os
import sys

_DEBUG = bool(os.environ.get("LHREPORT_DEBUG", ""))


def debug(label: str, msg: str) -> None:
    """Print a debug message to stderr when LHREPORT_DEBUG is set."""
    if _DEBUG:
        print(f"[lhreport] {label}: {msg}", file=sys.stderr)
