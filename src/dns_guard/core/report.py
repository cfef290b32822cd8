"""Plain-text summary of a run, one audit-log line per entry."""

from __future__ import annotations

from dns_guard.core.base import RunReport


def report_lines(report: RunReport) -> list[str]:
    lines = [
        f"Final state on {report.hostname} "
        f"(elevated={'yes' if report.elevated else 'no'}, "
        f"updated={len(report.updated)}, failed={len(report.failed)})"
    ]
    if report.verification_error is not None:
        lines.append(f"Final state unavailable: {report.verification_error}")
        return lines

    for snapshot in report.final_state:
        servers = ", ".join(snapshot.dns_servers) or "none"
        lines.append(
            f"  {snapshot.name} (ifIndex {snapshot.index}, {snapshot.addressing_mode.value}): {servers}"
        )
    if not report.final_state:
        lines.append("  no active interfaces")
    return lines
