"""CLI entry point: the `dnsguard` command."""

from __future__ import annotations

import json
import socket
from pathlib import Path
from typing import Any

import click
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from dns_guard.core import engine
from dns_guard.core.base import Classification, RunReport
from dns_guard.core.classifier import classify
from dns_guard.core.config import DEFAULT_PROVIDER, PROVIDERS, Settings, resolve_settings
from dns_guard.core.enumerator import enumerate_interfaces
from dns_guard.core.errors import ConfigError, EnumerationError
from dns_guard.core.logs import setup_logging
from dns_guard.core.paths import log_file_for

console = Console()
err_console = Console(stderr=True)

CLASSIFICATION_LABELS = {
    Classification.SKIP_NO_DNS: "[dim]skip (no DNS)[/dim]",
    Classification.SKIP_ALREADY_MATCHING: "[green]already set[/green]",
    Classification.NEEDS_UPDATE: "[yellow]needs update[/yellow]",
}


def _desired_options(func: Any) -> Any:
    """Options selecting the DNS pair, shared by run and status."""
    options = [
        click.option("--provider", "-p", help=f"Preset name (default: {DEFAULT_PROVIDER})."),
        click.option("--primary", help="Primary DNS server (overrides --provider)."),
        click.option("--secondary", help="Secondary DNS server."),
        click.option(
            "--config",
            "config_path",
            type=click.Path(dir_okay=False, path_type=Path),
            help="Path to a config.toml.",
        ),
    ]
    for option in reversed(options):
        func = option(func)
    return func


def _resolve(**kwargs: Any) -> Settings:
    try:
        return resolve_settings(**kwargs)
    except ConfigError as e:
        err_console.print(f"[red]Configuration error: {e}[/red]")
        raise SystemExit(1) from e


def _render_report(report: RunReport) -> None:
    """Render a run report with Rich."""
    mode = " (dry run)" if report.dry_run else ""
    console.print(
        Panel(
            f"[bold]DNS enforcement on {report.hostname}{mode}[/bold]\n"
            f"Desired: {report.desired}",
            style="blue",
        )
    )

    table = Table(title="Apply Phase")
    table.add_column("Interface", style="bold")
    table.add_column("ifIndex", justify="right")
    table.add_column("Addressing")
    table.add_column("Decision")
    table.add_column("Result")

    for result in report.results:
        outcome = result.outcome
        if outcome is None:
            status = "-"
        elif outcome.success:
            status = f"[green]set via {outcome.strategy}[/green]"
        else:
            status = f"[red]failed: {outcome.message}[/red]"
        table.add_row(
            result.snapshot.name,
            str(result.snapshot.index),
            result.snapshot.addressing_mode.value,
            CLASSIFICATION_LABELS[result.classification],
            status,
        )
    console.print(table)

    if report.verification_error is not None:
        console.print(f"[red]Verification failed: {report.verification_error}[/red]")
        return

    final = Table(title="Final State")
    final.add_column("Interface", style="bold")
    final.add_column("DNS servers")
    for snapshot in report.final_state:
        final.add_row(snapshot.name, ", ".join(snapshot.dns_servers) or "[dim]none[/dim]")
    console.print(final)


@click.group()
@click.version_option(package_name="dns-guard")
def cli() -> None:
    """dnsguard: enforce DNS servers across this machine's network interfaces."""


@cli.command()
@_desired_options
@click.option("--settle-delay", type=click.FloatRange(min=0), help="Seconds to wait before verifying.")
@click.option("--log-dir", type=click.Path(file_okay=False, path_type=Path), help="Directory for the log file.")
@click.option("--dry-run", is_flag=True, help="Classify interfaces but change nothing.")
@click.option("--format", "output_format", type=click.Choice(["rich", "json"]), default="rich")
@click.option("--verbose", "-v", is_flag=True, help="Log debug output.")
def run(
    provider: str | None,
    primary: str | None,
    secondary: str | None,
    config_path: Path | None,
    settle_delay: float | None,
    log_dir: Path | None,
    dry_run: bool,
    output_format: str,
    verbose: bool,
) -> None:
    """Replace DNS servers on every eligible active interface."""
    settings = _resolve(
        provider=provider,
        primary=primary,
        secondary=secondary,
        settle_delay=settle_delay,
        log_dir=log_dir,
        config_path=config_path,
    )

    log_file: Path | None = log_file_for(socket.gethostname(), settings.log_dir)
    try:
        setup_logging(log_file, console=err_console, verbose=verbose)
    except OSError as e:
        err_console.print(f"[yellow]Cannot open log file {log_file}: {e}; logging to console only[/yellow]")
        log_file = None
        setup_logging(None, console=err_console, verbose=verbose)

    report = engine.run(settings, dry_run=dry_run)

    if output_format == "json":
        click.echo(report.model_dump_json(indent=2))
    else:
        _render_report(report)
        if log_file is not None:
            console.print(f"[dim]Log: {log_file}[/dim]")


@cli.command()
@_desired_options
@click.option("--format", "output_format", type=click.Choice(["rich", "json"]), default="rich")
def status(
    provider: str | None,
    primary: str | None,
    secondary: str | None,
    config_path: Path | None,
    output_format: str,
) -> None:
    """Show active interfaces and what a run would do. Changes nothing."""
    settings = _resolve(provider=provider, primary=primary, secondary=secondary, config_path=config_path)
    desired = settings.desired

    try:
        interfaces = enumerate_interfaces()
    except EnumerationError as e:
        err_console.print(f"[red]{e}[/red]")
        raise SystemExit(1) from e

    rows = [(i, classify(list(i.dns_servers), desired.servers)) for i in interfaces]

    if output_format == "json":
        data = [{**i.model_dump(mode="json"), "classification": c.value} for i, c in rows]
        click.echo(json.dumps(data, indent=2))
        return

    table = Table(title=f"Interfaces (desired: {desired})")
    table.add_column("Interface", style="bold")
    table.add_column("ifIndex", justify="right")
    table.add_column("Addressing")
    table.add_column("DNS servers")
    table.add_column("Decision")
    for interface, classification in rows:
        table.add_row(
            interface.name,
            str(interface.index),
            interface.addressing_mode.value,
            ", ".join(interface.dns_servers) or "[dim]none[/dim]",
            CLASSIFICATION_LABELS[classification],
        )
    console.print(table)


@cli.command()
def providers() -> None:
    """List DNS provider presets."""
    table = Table(title="DNS Providers")
    table.add_column("Preset", style="bold")
    table.add_column("Name")
    table.add_column("Primary")
    table.add_column("Secondary")
    for key, preset in sorted(PROVIDERS.items()):
        label = f"{key} [dim](default)[/dim]" if key == DEFAULT_PROVIDER else key
        table.add_row(label, preset["name"], preset["primary"], preset["secondary"])
    console.print(table)
