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
# ssd-telemetry/src/ssd_telemetry/collect.py

"""Fetch health and performance reports for a single device."""

from datetime import datetime

from loguru import logger

from .models import HealthAttribute, PerformanceSnapshot, short_name
from .parser import parse_health_attributes, parse_key_values, parse_performance
from .runner import CommandRunner, run_command


def get_health_attributes(
    device_path: str, run: CommandRunner = run_command
) -> list[HealthAttribute]:
    """Query the SMART attribute table of a SATA-class device.

    Args:
        device_path: Device path (e.g., /dev/sda)
        run: Command executor, local by default

    Returns:
        Parsed attributes, empty if smartctl is missing or the device
        does not report any
    """
    output = run(f"smartctl -A {device_path} 2>/dev/null")
    attributes = parse_health_attributes(output)
    logger.debug(f"{device_path}: {len(attributes)} SMART attributes")
    return attributes


def get_nvme_metrics(
    device_path: str, run: CommandRunner = run_command
) -> dict[str, str]:
    """Query the NVMe smart-log of a device as key/value pairs.

    Non-NVMe paths return an empty mapping without running anything.
    """
    if "nvme" not in device_path:
        return {}

    output = run(f"nvme smart-log {device_path} 2>/dev/null")
    return parse_key_values(output)


def get_performance_snapshot(
    device_path: str, run: CommandRunner = run_command
) -> PerformanceSnapshot:
    """Sample current I/O statistics with a two-report iostat run.

    Blocks for about one second while iostat collects its interval.
    """
    timestamp = datetime.now()
    name = short_name(device_path)
    output = run(f"iostat -xm {name} 1 2 2>/dev/null | tail -n 2")
    return parse_performance(output, name, timestamp=timestamp)
