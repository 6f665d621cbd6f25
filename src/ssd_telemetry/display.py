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
# ssd-telemetry/src/ssd_telemetry/display.py

"""Rich tabular display for SSD telemetry."""

import polars as pl
from rich.console import Console
from rich.table import Table
from rich.text import Text

from .lifetime import is_known_life
from .models import DeviceRecord, HealthAttribute, PerformanceSnapshot


def get_life_color(life: float) -> str:
    """Get color for a remaining-life percentage."""
    if not is_known_life(life):
        return "dim"

    if life < 10:
        return "red"
    elif life < 30:
        return "orange1"
    elif life < 50:
        return "yellow"
    else:
        return "green"


def format_life(life: float) -> Text:
    """Format remaining life with color."""
    if not is_known_life(life):
        return Text("unknown", style="dim")
    return Text(f"{life:.0f}%", style=get_life_color(life))


def format_size(device: DeviceRecord) -> str:
    if device.size_gb is None:
        return "unknown"
    return f"{device.size_gb:,.1f} GB"


def create_devices_table(devices: list[DeviceRecord]) -> Table:
    """Create discovered devices table."""
    table = Table(title="Storage Devices", show_edge=True)

    table.add_column("#", justify="right", style="dim")
    table.add_column("Device", style="cyan")
    table.add_column("Model")
    table.add_column("Serial", style="dim")
    table.add_column("Interface")
    table.add_column("Size", justify="right")

    for index, device in enumerate(devices, start=1):
        table.add_row(
            str(index),
            device.path,
            device.model or "-",
            device.serial or "-",
            device.interface_kind.value,
            format_size(device),
        )

    return table


def create_health_table(attributes: list[HealthAttribute]) -> Table:
    """Create SMART attribute table.

    Rows whose current value has dropped to the failure threshold are
    highlighted in red.
    """
    table = Table(title="SMART Attributes", show_edge=True)

    table.add_column("ID", justify="right")
    table.add_column("Attribute", style="cyan")
    table.add_column("Current", justify="right")
    table.add_column("Worst", justify="right")
    table.add_column("Threshold", justify="right", style="dim")
    table.add_column("Raw")

    for attr in attributes:
        failing = attr.threshold > 0 and attr.current <= attr.threshold
        table.add_row(
            str(attr.id),
            attr.name,
            str(attr.current),
            str(attr.worst),
            str(attr.threshold),
            attr.raw,
            style="bold red" if failing else None,
        )

    return table


def create_nvme_table(metrics: dict[str, str]) -> Table:
    """Create NVMe smart-log table."""
    table = Table(title="NVMe SMART Log", show_header=False)

    table.add_column("Metric", style="cyan")
    table.add_column("Value", justify="right")

    for key in sorted(metrics):
        table.add_row(key, metrics[key])

    return table


def create_performance_table(snapshot: PerformanceSnapshot,
                             device_path: str = "") -> Table:
    """Create table for one performance snapshot."""
    title = "Performance"
    if device_path:
        title = f"Performance: {device_path}"
    table = Table(title=title, show_header=False)

    table.add_column("Metric", style="cyan")
    table.add_column("Value", justify="right")

    table.add_row("Read IOPS", f"{snapshot.read_iops:.2f}")
    table.add_row("Write IOPS", f"{snapshot.write_iops:.2f}")
    table.add_row("Read Throughput", f"{snapshot.read_throughput_mb:.2f} MB/s")
    table.add_row("Write Throughput", f"{snapshot.write_throughput_mb:.2f} MB/s")
    table.add_section()
    table.add_row("Read Latency", f"{snapshot.read_latency_ms:.2f} ms")
    table.add_row("Write Latency", f"{snapshot.write_latency_ms:.2f} ms")
    table.add_row("Queue Depth", f"{snapshot.queue_depth:.2f}")
    table.add_section()
    table.add_row(
        "Sampled", Text(snapshot.timestamp.strftime("%Y-%m-%d %H:%M:%S"),
                        style="dim")
    )

    return table


def create_history_summary_table(summary: pl.DataFrame) -> Table:
    """Create per-device table from summarize_history() output."""
    table = Table(title="History Summary", show_edge=True)

    table.add_column("Device", style="cyan")
    table.add_column("Samples", justify="right")
    table.add_column("From", style="dim")
    table.add_column("To", style="dim")
    table.add_column("Read IOPS", justify="right")
    table.add_column("Write IOPS", justify="right")
    table.add_column("Read MB/s", justify="right")
    table.add_column("Write MB/s", justify="right")
    table.add_column("Max r_await", justify="right")
    table.add_column("Max w_await", justify="right")
    table.add_column("Queue", justify="right")

    for row in summary.iter_rows(named=True):
        table.add_row(
            row["device"],
            str(row["samples"]),
            row["first"].strftime("%Y-%m-%d %H:%M:%S"),
            row["last"].strftime("%Y-%m-%d %H:%M:%S"),
            f"{row['mean_read_iops']:.1f}",
            f"{row['mean_write_iops']:.1f}",
            f"{row['mean_read_mb']:.2f}",
            f"{row['mean_write_mb']:.2f}",
            f"{row['max_read_latency_ms']:.2f}",
            f"{row['max_write_latency_ms']:.2f}",
            f"{row['mean_queue_depth']:.2f}",
        )

    return table


def display_device_report(
    device_path: str,
    attributes: list[HealthAttribute],
    nvme_metrics: dict[str, str],
    life: float,
    snapshot: PerformanceSnapshot | None = None,
    console: Console | None = None,
):
    """Display everything known about one device."""
    if console is None:
        console = Console()

    if attributes:
        console.print(create_health_table(attributes))
    else:
        console.print(
            "[dim]No SMART attributes (permissions or unsupported device)[/dim]"
        )
    console.print()

    if nvme_metrics:
        console.print(create_nvme_table(nvme_metrics))
        console.print()

    life_text = Text("Estimated life remaining: ")
    life_text.append_text(format_life(life))
    console.print(life_text)

    if snapshot is not None:
        console.print()
        console.print(create_performance_table(snapshot, device_path))
