"""Thin wrappers around subprocess for the external commands we drive."""

from __future__ import annotations

import json
import subprocess
from typing import Any

from dns_guard.core.errors import CommandError

POWERSHELL = ["powershell.exe", "-NoProfile", "-NonInteractive", "-Command"]

# Safety net only; individual strategies are not otherwise time-limited.
COMMAND_TIMEOUT = 60


def run_command(command: list[str], timeout: int = COMMAND_TIMEOUT) -> subprocess.CompletedProcess[str]:
    """Run a command and return the completed process without checking its exit code.

    Raises CommandError only when the command could not be run at all.
    """
    try:
        return subprocess.run(command, capture_output=True, text=True, timeout=timeout)
    except FileNotFoundError as e:
        raise CommandError(command, "executable not found") from e
    except subprocess.TimeoutExpired as e:
        raise CommandError(command, f"timed out after {timeout}s") from e
    except OSError as e:
        raise CommandError(command, str(e)) from e


def run_powershell(script: str) -> str:
    """Run a PowerShell snippet; a non-zero exit code raises CommandError."""
    command = [*POWERSHELL, script]
    result = run_command(command)
    if result.returncode != 0:
        detail = result.stderr.strip() or result.stdout.strip() or f"exit code {result.returncode}"
        raise CommandError(command, detail)
    return result.stdout


def powershell_json(script: str) -> list[Any]:
    """Run a snippet piped through ConvertTo-Json and return a list of records.

    ConvertTo-Json emits a bare value for a single result and nothing at all
    for an empty pipeline, so both are normalised to a list. Records are
    usually objects, but callers must not assume it.
    """
    output = run_powershell(f"{script} | ConvertTo-Json -Depth 4 -Compress").strip()
    if not output:
        return []
    try:
        data = json.loads(output)
    except json.JSONDecodeError as e:
        raise CommandError([*POWERSHELL, script], f"unparseable output: {e}") from e
    if isinstance(data, list):
        return data
    return [data]


def ps_quote(value: str) -> str:
    """Quote a value as a PowerShell single-quoted string literal."""
    return "'" + value.replace("'", "''") + "'"
