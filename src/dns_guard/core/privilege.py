"""Elevation check. Observational only, never gates a run."""

from __future__ import annotations

import ctypes
import os
import platform


def is_elevated() -> bool:
    """True when running as Administrator (Windows) or root (elsewhere)."""
    if platform.system() == "Windows":
        try:
            return bool(ctypes.windll.shell32.IsUserAnAdmin())
        except (AttributeError, OSError):
            return False
    return hasattr(os, "geteuid") and os.geteuid() == 0
