"""Interface enumeration: read adapters, their IPv4 DNS servers and DHCP state."""

from __future__ import annotations

import logging
from typing import Any

from dns_guard.core.base import STATUS_UP, AddressingMode, InterfaceSnapshot
from dns_guard.core.errors import CommandError, EnumerationError
from dns_guard.core.shell import powershell_json

logger = logging.getLogger(__name__)

_ADAPTERS_PS = "Get-NetAdapter | Select-Object ifIndex,Name,@{n='Status';e={[string]$_.Status}}"
_DNS_PS = "Get-DnsClientServerAddress -InterfaceIndex {index} -AddressFamily IPv4 | Select-Object ServerAddresses"
_DHCP_PS = (
    "Get-NetIPInterface -InterfaceIndex {index} -AddressFamily IPv4 "
    "| Select-Object @{{n='Dhcp';e={{[string]$_.Dhcp}}}}"
)


def list_adapters() -> list[dict[str, Any]]:
    """Return raw adapter records; any failure here is fatal for the caller."""
    try:
        return powershell_json(_ADAPTERS_PS)
    except CommandError as e:
        raise EnumerationError(f"could not list network adapters: {e}") from e


def read_dns_servers(index: int) -> list[str]:
    """Current IPv4 DNS servers of an interface, in configured order."""
    servers: list[str] = []
    for record in powershell_json(_DNS_PS.format(index=index)):
        if not isinstance(record, dict):
            logger.warning("Unexpected DNS record for ifIndex %d: %r", index, record)
            continue
        value = record.get("ServerAddresses") or []
        if isinstance(value, str):
            value = [value]
        elif not isinstance(value, list):
            logger.warning("Unexpected ServerAddresses for ifIndex %d: %r", index, value)
            continue
        servers.extend(str(v) for v in value if v)
    return servers


def read_addressing_mode(index: int) -> AddressingMode:
    records = powershell_json(_DHCP_PS.format(index=index))
    if not records or not isinstance(records[0], dict):
        return AddressingMode.UNKNOWN
    dhcp = str(records[0].get("Dhcp", "")).lower()
    if dhcp in ("enabled", "1"):
        return AddressingMode.DYNAMIC
    if dhcp in ("disabled", "0"):
        return AddressingMode.STATIC
    return AddressingMode.UNKNOWN


def enumerate_interfaces() -> list[InterfaceSnapshot]:
    """Snapshot every operationally Up interface.

    Per-interface read failures degrade rather than abort: an unreadable DHCP
    state becomes UNKNOWN, an unreadable DNS list becomes empty (and so is
    never rewritten).
    """
    snapshots: list[InterfaceSnapshot] = []
    for adapter in list_adapters():
        try:
            index = int(adapter["ifIndex"])
        except (KeyError, TypeError, ValueError):
            logger.warning("Ignoring adapter record without a usable index: %s", adapter)
            continue
        name = str(adapter.get("Name") or f"ifIndex {index}")
        status = str(adapter.get("Status") or "Unknown")
        if status != STATUS_UP:
            continue

        try:
            mode = read_addressing_mode(index)
        except CommandError as e:
            logger.warning("Could not determine addressing mode for %s: %s", name, e)
            mode = AddressingMode.UNKNOWN

        try:
            dns_servers = read_dns_servers(index)
        except CommandError as e:
            logger.error("Could not read DNS servers for %s: %s", name, e)
            dns_servers = []

        snapshots.append(
            InterfaceSnapshot(
                index=index,
                name=name,
                status=status,
                addressing_mode=mode,
                dns_servers=tuple(dns_servers),
            )
        )
    return snapshots
