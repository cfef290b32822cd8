"""DNS setters and the ordered fallback chain that drives them."""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from collections.abc import Sequence

from dns_guard.core.base import (
    ApplyOutcome,
    DesiredDnsConfig,
    InterfaceSnapshot,
    SetResult,
    Strategy,
)
from dns_guard.core.errors import CommandError
from dns_guard.core.shell import powershell_json, ps_quote, run_command, run_powershell

logger = logging.getLogger(__name__)


class DnsSetter(ABC):
    """One independent way of writing DNS servers to an interface.

    Implementations report failure through the returned SetResult. Raising is
    tolerated: FallbackChain turns any exception into a failed attempt.
    """

    strategy: Strategy
    display_name: str

    @abstractmethod
    def set_dns(self, interface: InterfaceSnapshot, desired: DesiredDnsConfig) -> SetResult:
        """Write both servers, primary first."""
        ...

    def _result(self, success: bool, message: str) -> SetResult:
        return SetResult(strategy=self.strategy, success=success, message=message)


class NativeSetter(DnsSetter):
    """Set-DnsClientServerAddress: both addresses in one call."""

    strategy = Strategy.NATIVE
    display_name = "Set-DnsClientServerAddress"

    def set_dns(self, interface: InterfaceSnapshot, desired: DesiredDnsConfig) -> SetResult:
        addresses = ",".join(ps_quote(s) for s in desired.servers)
        script = (
            f"Set-DnsClientServerAddress -InterfaceIndex {interface.index} "
            f"-ServerAddresses @({addresses}) -ErrorAction Stop"
        )
        try:
            run_powershell(script)
        except CommandError as e:
            return self._result(False, e.message)
        return self._result(True, f"set {desired} on ifIndex {interface.index}")


class NetshSetter(DnsSetter):
    """netsh: set the primary as the sole static server, then add the secondary.

    netsh output is logged verbatim and not interpreted. Only a failure to run
    either command counts as a failure of this strategy.
    """

    strategy = Strategy.SHELL_UTILITY
    display_name = "netsh"

    def commands(self, interface: InterfaceSnapshot, desired: DesiredDnsConfig) -> list[list[str]]:
        # The alias is its own argv token so subprocess quotes only the name.
        name = interface.name
        return [
            ["netsh", "interface", "ipv4", "set", "dnsservers", name,
             "static", desired.primary, "primary", "validate=no"],
            ["netsh", "interface", "ipv4", "add", "dnsservers", name,
             desired.secondary, "index=2", "validate=no"],
        ]

    def set_dns(self, interface: InterfaceSnapshot, desired: DesiredDnsConfig) -> SetResult:
        try:
            for command in self.commands(interface, desired):
                result = run_command(command)
                output = (result.stdout + result.stderr).strip()
                logger.info("netsh output for %s: %s", interface.name, output or "<none>")
        except CommandError as e:
            return self._result(False, e.message)
        return self._result(True, "netsh commands issued")


class WmiSetter(DnsSetter):
    """Win32_NetworkAdapterConfiguration.SetDNSServerSearchOrder through CIM."""

    strategy = Strategy.LEGACY_MANAGEMENT
    display_name = "Win32_NetworkAdapterConfiguration"

    _SCRIPT = (
        "& {{ "
        "$cfg = Get-CimInstance Win32_NetworkAdapterConfiguration -Filter 'InterfaceIndex={index}'; "
        "if (-not $cfg) {{ [pscustomobject]@{{Found=$false; ReturnValue=$null}} }} "
        "else {{ $r = Invoke-CimMethod -InputObject $cfg -MethodName SetDNSServerSearchOrder "
        "-Arguments @{{DNSServerSearchOrder=[string[]]@({servers})}}; "
        "[pscustomobject]@{{Found=$true; ReturnValue=$r.ReturnValue}} }} "
        "}}"
    )

    def set_dns(self, interface: InterfaceSnapshot, desired: DesiredDnsConfig) -> SetResult:
        servers = ",".join(ps_quote(s) for s in desired.servers)
        try:
            records = powershell_json(self._SCRIPT.format(index=interface.index, servers=servers))
        except CommandError as e:
            return self._result(False, e.message)

        if not records or not isinstance(records[0], dict) or not records[0].get("Found"):
            return self._result(False, f"no management object for ifIndex {interface.index}")

        code = records[0].get("ReturnValue")
        if code == 0:
            return self._result(True, "SetDNSServerSearchOrder returned 0")
        return self._result(False, f"SetDNSServerSearchOrder returned {code}")


class FallbackChain:
    """Try each setter in order; the first success wins."""

    def __init__(self, setters: Sequence[DnsSetter]) -> None:
        self.setters = list(setters)

    def apply(self, interface: InterfaceSnapshot, desired: DesiredDnsConfig) -> ApplyOutcome:
        attempts: list[SetResult] = []
        for setter in self.setters:
            logger.info(
                "Attempting to set DNS on %s (ifIndex %d) to %s via %s",
                interface.name,
                interface.index,
                desired,
                setter.display_name,
            )
            try:
                result = setter.set_dns(interface, desired)
            except Exception as e:
                result = SetResult(strategy=setter.strategy, success=False, message=f"{type(e).__name__}: {e}")
            attempts.append(result)

            if result.success:
                logger.info("DNS set on %s via %s: %s", interface.name, setter.display_name, result.message)
                return ApplyOutcome(
                    interface_index=interface.index,
                    interface_name=interface.name,
                    strategy=result.strategy,
                    success=True,
                    message=result.message,
                    attempts=attempts,
                )
            logger.warning("%s failed for %s: %s", setter.display_name, interface.name, result.message)

        logger.error("All methods failed to set DNS on %s", interface.name)
        return ApplyOutcome(
            interface_index=interface.index,
            interface_name=interface.name,
            strategy=attempts[-1].strategy if attempts else None,
            success=False,
            message="all strategies failed",
            attempts=attempts,
        )


def default_chain() -> FallbackChain:
    return FallbackChain([NativeSetter(), NetshSetter(), WmiSetter()])
