# Author: PB & Claude
# Maintainer: PB
# Original date: 2026.10.18
# Copyright (C) 2025 HRDAG https://hrdag.org
#
# This program is free software; you can redistribute it and/or modify
# it under the terms of the GNU General Public License as published by
# the Free Software Foundation; either version 2 of the License, or
# (at your option) any later version.
#
# This program is distributed in the hope that it will be useful,
# but WITHOUT ANY WARRANTY; without even the implied warranty of
# MERCHANTABILITY or FITNESS FOR A PARTICULAR PURPOSE.  See the
# GNU General Public License for more details.
#
# You should have received a copy of the GNU General Public License along
# with this program; if not, see <https://www.gnu.org/licenses/>.
#
# ------
# ssd-telemetry/src/ssd_telemetry/cli.py

"""Command-line interface for SSD telemetry."""

import json
import sys
import time
from pathlib import Path

import typer
from loguru import logger
from rich.console import Console

from .display import (
    create_devices_table,
    create_history_summary_table,
    create_nvme_table,
    create_performance_table,
    display_device_report,
    format_life,
)
from .history import load_history, summarize_history
from .lifetime import is_known_life, life_from_reports
from .telemetry import SSDTelemetry

app = typer.Typer()

VerboseOption = typer.Option(
    False,
    "--verbose",
    "-v",
    help="Enable verbose logging output"
)
JsonOption = typer.Option(
    False,
    "--json",
    help="Output results as JSON"
)


def configure_logging(verbose: bool) -> None:
    logger.remove()
    if verbose:
        logger.add(sys.stderr, level="DEBUG")
    else:
        logger.add(lambda _: None)  # Suppress all logging


@app.command()
def devices(
    fallback: bool = typer.Option(
        False,
        "--fallback",
        help="Skip SSD discovery and list every block device"
    ),
    json_output: bool = JsonOption,
    verbose: bool = VerboseOption,
):
    """Discover SSDs on this host."""
    configure_logging(verbose)
    console = Console()

    try:
        telemetry = SSDTelemetry()
        used_fallback = fallback
        found = [] if fallback else telemetry.discover_ssds()
        if not found:
            if not fallback:
                logger.info("SSD discovery found nothing, listing block devices")
            found = telemetry.discover_block_devices()
            used_fallback = True

        if json_output:
            typer.echo(json.dumps([d.to_dict() for d in found], indent=2))
            return

        if not found:
            console.print("[red]No storage devices found.[/red]")
            console.print(
                "[dim]Accessing devices usually needs root; try sudo.[/dim]"
            )
            raise typer.Exit(1)

        console.print(create_devices_table(found))
        if used_fallback:
            console.print(
                "[yellow]Fallback listing used; install smartmontools and "
                "nvme-cli for full functionality.[/yellow]"
            )

    except typer.Exit:
        raise
    except Exception as e:
        logger.error(f"Discovery failed: {e}")
        raise typer.Exit(1)


@app.command()
def health(
    device: str = typer.Argument(..., help="Device path, e.g. /dev/sda"),
    json_output: bool = JsonOption,
    verbose: bool = VerboseOption,
):
    """Show SMART attributes, current performance and remaining life."""
    configure_logging(verbose)

    try:
        telemetry = SSDTelemetry()
        attributes = telemetry.health_attributes(device)
        nvme_metrics = telemetry.nvme_metrics(device)
        snapshot = telemetry.performance(device)
        life = life_from_reports(device, attributes, nvme_metrics)

        if json_output:
            output = {
                'device': device,
                'attributes': [a.to_dict() for a in attributes],
                'nvme': nvme_metrics,
                'performance': snapshot.to_dict(),
                'life_remaining': life if is_known_life(life) else None,
            }
            typer.echo(json.dumps(output, indent=2))
        else:
            display_device_report(device, attributes, nvme_metrics, life,
                                  snapshot=snapshot, console=Console())

    except Exception as e:
        logger.error(f"Health query failed: {e}")
        raise typer.Exit(1)


@app.command()
def nvme(
    device: str = typer.Argument(..., help="NVMe device path"),
    json_output: bool = JsonOption,
    verbose: bool = VerboseOption,
):
    """Show the NVMe smart-log of a device."""
    configure_logging(verbose)

    try:
        metrics = SSDTelemetry().nvme_metrics(device)
        if json_output:
            typer.echo(json.dumps(metrics, indent=2))
        elif metrics:
            Console().print(create_nvme_table(metrics))
        else:
            Console().print(
                "[dim]No NVMe metrics (not NVMe, permissions or "
                "nvme-cli missing)[/dim]"
            )

    except Exception as e:
        logger.error(f"NVMe query failed: {e}")
        raise typer.Exit(1)


@app.command()
def perf(
    device: str = typer.Argument(..., help="Device path, e.g. /dev/nvme0n1"),
    json_output: bool = JsonOption,
    verbose: bool = VerboseOption,
):
    """Take one performance snapshot with iostat."""
    configure_logging(verbose)

    try:
        snapshot = SSDTelemetry().performance(device)
        if json_output:
            typer.echo(json.dumps(snapshot.to_dict(), indent=2))
        else:
            Console().print(create_performance_table(snapshot, device))

    except Exception as e:
        logger.error(f"Performance query failed: {e}")
        raise typer.Exit(1)


@app.command()
def life(
    device: str = typer.Argument(..., help="Device path"),
    verbose: bool = VerboseOption,
):
    """Estimate remaining SSD endurance."""
    configure_logging(verbose)

    try:
        remaining = SSDTelemetry().life_remaining(device)
        Console().print(format_life(remaining))

    except Exception as e:
        logger.error(f"Life estimate failed: {e}")
        raise typer.Exit(1)


@app.command()
def monitor(
    device: str = typer.Argument(..., help="Device path to sample"),
    interval: float = typer.Option(
        10.0,
        "--interval",
        "-i",
        envvar="SSD_TELEMETRY_INTERVAL",
        help="Seconds between samples"
    ),
    output: Path = typer.Option(
        Path("ssd_metrics_history.csv"),
        "--output",
        "-o",
        envvar="SSD_TELEMETRY_OUTPUT",
        help="CSV file the history is appended to"
    ),
    duration: float | None = typer.Option(
        None,
        "--duration",
        help="Stop after this many seconds (default: until Ctrl+C)"
    ),
    verbose: bool = VerboseOption,
):
    """Sample a device periodically and append its history to CSV."""
    configure_logging(verbose)
    console = Console()

    try:
        with SSDTelemetry() as telemetry:
            telemetry.start_monitoring(device, interval, output)
            console.print(
                f"Sampling {device} every {interval:g}s into {output}, "
                "press Ctrl+C to stop"
            )
            deadline = None if duration is None else time.monotonic() + duration
            try:
                while deadline is None or time.monotonic() < deadline:
                    time.sleep(0.2)
            except KeyboardInterrupt:
                pass

            telemetry.stop_monitoring()
            summary = summarize_history(telemetry.history.to_frame())
            if not summary.is_empty():
                console.print(create_history_summary_table(summary))

    except Exception as e:
        logger.error(f"Monitoring failed: {e}")
        raise typer.Exit(1)


@app.command()
def report(
    history_file: Path = typer.Argument(..., help="History CSV to summarize"),
    verbose: bool = VerboseOption,
):
    """Summarize a persisted history file per device."""
    configure_logging(verbose)

    try:
        summary = summarize_history(load_history(history_file))
        if summary.is_empty():
            Console().print(f"[dim]No samples in {history_file}[/dim]")
            return
        Console().print(create_history_summary_table(summary))

    except Exception as e:
        logger.error(f"Report failed: {e}")
        raise typer.Exit(1)


if __name__ == "__main__":
    app()
