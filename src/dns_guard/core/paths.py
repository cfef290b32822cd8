"""Shipped data and default log locations."""

from __future__ import annotations

import os
import platform
from pathlib import Path

DATA_DIR = Path(__file__).resolve().parent.parent / "data"


def default_log_dir() -> Path:
    """Machine-wide log directory on Windows, per-user elsewhere."""
    if platform.system() == "Windows":
        base = os.environ.get("PROGRAMDATA", r"C:\ProgramData")
        return Path(base) / "dns-guard" / "logs"
    return Path.home() / ".local" / "share" / "dns-guard" / "logs"


def log_file_for(hostname: str, log_dir: Path | None = None) -> Path:
    """Log file path derived from the host's own name."""
    return (log_dir or default_log_dir()) / f"dns-guard-{hostname}.log"
