"""Exception hierarchy for dns-guard."""

from __future__ import annotations


class DnsGuardError(Exception):
    """Base class for all dns-guard errors."""


class ConfigError(DnsGuardError):
    """Invalid or unresolvable configuration."""


class EnumerationError(DnsGuardError):
    """The network adapter list could not be read."""


class CommandError(DnsGuardError):
    """An external command could not be executed or reported failure."""

    def __init__(self, command: list[str], message: str) -> None:
        self.command = command
        self.message = message
        super().__init__(f"{command[0]}: {message}")
