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
# ssd-telemetry/src/ssd_telemetry/lifetime.py

"""Remaining-endurance estimate for SSDs."""

from typing import Final

from loguru import logger

from .collect import get_health_attributes, get_nvme_metrics
from .models import DeviceRecord, HealthAttribute
from .parser import parse_percentage
from .runner import CommandRunner, run_command

UNKNOWN_LIFE: Final[float] = -1.0

NVME_USED_KEY: Final[str] = "Percentage Used"
WEAR_ATTRIBUTE_NAMES: Final[tuple[str, ...]] = (
    "Media_Wearout_Indicator",
    "Wear_Leveling_Count",
)


def is_known_life(value: float) -> bool:
    return value != UNKNOWN_LIFE


def uses_nvme_log(device_path: str) -> bool:
    """NVMe smart-log applies when the path names an NVMe namespace."""
    return "nvme" in device_path


def life_from_nvme_metrics(metrics: dict[str, str]) -> float:
    """100 minus the smart-log 'Percentage Used', clamped to 0-100."""
    used = parse_percentage(metrics.get(NVME_USED_KEY, ""))
    if used is None:
        return UNKNOWN_LIFE
    # Percentage Used may exceed 100 on worn-out drives
    return min(100.0, max(0.0, 100.0 - used))


def life_from_attributes(attributes: list[HealthAttribute]) -> float:
    """Current value of the first wear indicator SMART attribute."""
    for attribute in attributes:
        if any(key in attribute.name for key in WEAR_ATTRIBUTE_NAMES):
            return float(attribute.current)
    return UNKNOWN_LIFE


def life_from_reports(device_path: str, attributes: list[HealthAttribute],
                      nvme_metrics: dict[str, str]) -> float:
    """Estimate from reports the caller has already fetched."""
    if uses_nvme_log(device_path):
        return life_from_nvme_metrics(nvme_metrics)
    return life_from_attributes(attributes)


def estimate_life_remaining(
    device: DeviceRecord | str, run: CommandRunner = run_command
) -> float:
    """Estimate remaining endurance as a 0-100 percentage.

    The branch is chosen by path: paths containing 'nvme' use the
    smart-log, everything else the SMART attribute table. This holds
    for records classified NVMe by smartctl too, since a bridged NVMe
    drive on /dev/sdX only answers smartctl.

    Returns:
        Percentage remaining, or UNKNOWN_LIFE when it cannot be derived
    """
    path = device.path if isinstance(device, DeviceRecord) else device

    try:
        if uses_nvme_log(path):
            life = life_from_nvme_metrics(get_nvme_metrics(path, run))
        else:
            life = life_from_attributes(get_health_attributes(path, run))
    except Exception as e:
        logger.error(f"Life estimate for {path} failed: {e}")
        return UNKNOWN_LIFE

    if not is_known_life(life):
        logger.debug(f"{path}: no wear information")
    return life
