"""Run orchestration: enumerate, classify, apply, settle, verify."""

from __future__ import annotations

import logging
import socket
import time
from collections.abc import Callable
from datetime import UTC, datetime

from dns_guard.core.base import (
    AddressingMode,
    ApplyOutcome,
    Classification,
    DesiredDnsConfig,
    InterfaceResult,
    InterfaceSnapshot,
    RunReport,
)
from dns_guard.core.classifier import classify
from dns_guard.core.config import Settings
from dns_guard.core.enumerator import enumerate_interfaces
from dns_guard.core.privilege import is_elevated
from dns_guard.core.report import report_lines
from dns_guard.core.strategies import FallbackChain, default_chain

logger = logging.getLogger(__name__)

Enumerate = Callable[[], list[InterfaceSnapshot]]


def process_interface(
    interface: InterfaceSnapshot,
    desired: DesiredDnsConfig,
    chain: FallbackChain,
    dry_run: bool = False,
) -> InterfaceResult:
    """Classify one interface and, if it needs it, run the fallback chain."""
    current = list(interface.dns_servers)
    logger.info(
        "Interface %s (ifIndex %d): addressing %s, DNS servers [%s]",
        interface.name,
        interface.index,
        interface.addressing_mode.value,
        ", ".join(current),
    )
    if interface.addressing_mode is AddressingMode.DYNAMIC:
        # Logged only; DHCP does not gate the update decision.
        logger.info("Interface %s uses DHCP", interface.name)

    classification = classify(current, desired.servers)

    if classification is Classification.SKIP_NO_DNS:
        logger.info("Skipping %s: no DNS servers configured", interface.name)
        return InterfaceResult(snapshot=interface, classification=classification)
    if classification is Classification.SKIP_ALREADY_MATCHING:
        logger.info("Skipping %s: DNS servers already match", interface.name)
        return InterfaceResult(snapshot=interface, classification=classification)

    if dry_run:
        logger.info("Dry run: would set DNS on %s to %s", interface.name, desired)
        return InterfaceResult(snapshot=interface, classification=classification)

    outcome = chain.apply(interface, desired)
    return InterfaceResult(snapshot=interface, classification=classification, outcome=outcome)


def apply_phase(
    interfaces: list[InterfaceSnapshot],
    desired: DesiredDnsConfig,
    chain: FallbackChain,
    dry_run: bool = False,
) -> list[InterfaceResult]:
    """Process interfaces one at a time. A failure never stops the next one."""
    results: list[InterfaceResult] = []
    for interface in interfaces:
        try:
            results.append(process_interface(interface, desired, chain, dry_run=dry_run))
        except Exception as e:
            logger.error("Error processing interface %s: %s", interface.name, e)
            results.append(
                InterfaceResult(
                    snapshot=interface,
                    classification=classify(list(interface.dns_servers), desired.servers),
                    outcome=ApplyOutcome(
                        interface_index=interface.index,
                        interface_name=interface.name,
                        success=False,
                        message=f"{type(e).__name__}: {e}",
                    ),
                )
            )
    return results


def verify(
    enumerate_fn: Enumerate,
    settle_delay: float,
    sleep: Callable[[float], None] = time.sleep,
) -> tuple[list[InterfaceSnapshot], str | None]:
    """Wait for the OS to commit changes, then take one final snapshot."""
    if settle_delay > 0:
        logger.info("Waiting %.1f seconds for changes to take effect", settle_delay)
        sleep(settle_delay)
    try:
        return enumerate_fn(), None
    except Exception as e:
        logger.error("Error during final verification: %s", e)
        return [], str(e)


def run(
    settings: Settings,
    *,
    dry_run: bool = False,
    enumerate_fn: Enumerate = enumerate_interfaces,
    chain: FallbackChain | None = None,
    sleep: Callable[[float], None] = time.sleep,
    hostname: str | None = None,
    elevated: bool | None = None,
) -> RunReport:
    """Execute one full run and return its report.

    Never raises for operational failures; everything is logged and the run
    always reaches verification.
    """
    chain = chain or default_chain()
    hostname = hostname or socket.gethostname()
    desired = settings.desired

    report = RunReport(
        hostname=hostname,
        started_at=datetime.now(UTC),
        elevated=is_elevated() if elevated is None else elevated,
        dry_run=dry_run,
        desired=desired,
    )
    logger.info("Script started on %s", hostname)
    logger.info("Desired DNS servers: %s", desired)
    if not report.elevated:
        logger.warning("Not running with administrator privileges; changes will likely fail")

    try:
        interfaces = enumerate_fn()
        logger.info("Found %d active interface(s)", len(interfaces))
        report.results = apply_phase(interfaces, desired, chain, dry_run=dry_run)
    except Exception as e:
        logger.error("Unexpected error: %s", e)

    report.final_state, report.verification_error = verify(
        enumerate_fn, 0 if dry_run else settings.settle_delay, sleep
    )
    report.finished_at = datetime.now(UTC)

    for line in report_lines(report):
        logger.info(line)
    logger.info("Script completed")
    return report
