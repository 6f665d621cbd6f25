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
# ssd-telemetry/src/ssd_telemetry/discovery.py

"""Discovery of solid-state storage devices.

Tiers, each tried only when the previous one found nothing:

1. lsblk listing filtered by the rotational flag, plus `nvme list`
2. probing a fixed set of conventional device paths
3. a bare lsblk name listing
"""

import re
from collections.abc import Iterable
from pathlib import Path
from typing import Final

from loguru import logger

from .models import DeviceRecord, InterfaceKind
from .parser import parse_size
from .runner import CommandRunner, run_command

DEVICE_DIR: Final[Path] = Path("/dev")
PROBE_NAMES: Final[tuple[str, ...]] = (
    "nvme0n1", "nvme1n1", "sda", "sdb", "sdc", "vda",
)
NVME_MODEL: Final[str] = "NVMe Device"

_LSBLK_PAIR = re.compile(r'(\w+)="([^"]*)"')


def _unique_by_path(devices: Iterable[DeviceRecord]) -> list[DeviceRecord]:
    """Drop later records whose path was already seen."""
    seen = set()
    unique = []
    for device in devices:
        if device.path in seen:
            continue
        seen.add(device.path)
        unique.append(device)
    return unique


def _is_excluded(name: str) -> bool:
    return name.startswith("loop") or name.startswith("sr")


def classify_interface(identify_output: str) -> InterfaceKind:
    """Classify the transport from a `smartctl -i` report."""
    if "NVMe" in identify_output:
        return InterfaceKind.NVME
    if "SATA" in identify_output:
        return InterfaceKind.SATA
    return InterfaceKind.UNKNOWN


def is_non_rotational(name: str, run: CommandRunner = run_command) -> bool:
    """Check the rotational flag; an unreadable flag counts as solid-state."""
    flag = run(f"cat /sys/block/{name}/queue/rotational").strip()
    return flag == "" or flag == "0"


def list_nvme_devices(run: CommandRunner = run_command) -> list[DeviceRecord]:
    """List controllers reported by `nvme list`."""
    output = run("nvme list 2>/dev/null")
    devices = []
    for line in output.splitlines():
        parts = line.split()
        if not parts or not parts[0].startswith("/dev/"):
            continue  # header, rule or blank line
        devices.append(DeviceRecord(
            path=parts[0],
            model=NVME_MODEL,
            size_bytes=0,
            interface_kind=InterfaceKind.NVME,
        ))
    return devices


def list_structured_devices(
    run: CommandRunner = run_command
) -> list[DeviceRecord]:
    """Tier 1: non-rotational devices from lsblk, plus NVMe controllers."""
    output = run("lsblk -d -b -n -P -e 7,11 -o NAME,MODEL,SIZE,SERIAL")
    devices = []

    for line in output.splitlines():
        fields = dict(_LSBLK_PAIR.findall(line))
        name = fields.get("NAME", "")
        if not name or _is_excluded(name):
            continue

        if not is_non_rotational(name, run):
            logger.debug(f"Skipping rotational device {name}")
            continue

        path = f"/dev/{name}"
        identify = run(f"smartctl -i {path} 2>/dev/null")
        devices.append(DeviceRecord(
            path=path,
            model=fields.get("MODEL", "").strip(),
            serial=fields.get("SERIAL", "").strip(),
            size_bytes=parse_size(fields.get("SIZE", "")),
            interface_kind=classify_interface(identify),
        ))

    devices.extend(list_nvme_devices(run))
    return _unique_by_path(devices)


def probe_device_paths(
    device_dir: str | Path = DEVICE_DIR,
    names: Iterable[str] = PROBE_NAMES,
) -> list[DeviceRecord]:
    """Tier 2: keep the conventional device nodes that exist."""
    device_dir = Path(device_dir)
    devices = []
    for name in names:
        path = device_dir / name
        try:
            exists = path.exists()
        except OSError:
            exists = False
        if not exists:
            continue

        is_nvme = "nvme" in str(path)
        devices.append(DeviceRecord(
            path=str(path),
            model=NVME_MODEL if is_nvme else "SATA/SAS Device",
            size_bytes=0,
            interface_kind=InterfaceKind.NVME if is_nvme else InterfaceKind.SATA,
        ))
    return _unique_by_path(devices)


def list_minimal_devices(
    run: CommandRunner = run_command
) -> list[DeviceRecord]:
    """Tier 3: bare lsblk names, without loop and optical devices."""
    output = run("lsblk -d -n -o NAME | grep -v -e '^loop' -e '^sr'")
    devices = []
    for line in output.splitlines():
        name = line.strip()
        if not name or _is_excluded(name):
            continue
        kind = InterfaceKind.from_name(name)
        devices.append(DeviceRecord(
            path=f"/dev/{name}",
            model=NVME_MODEL if kind is InterfaceKind.NVME else "Block Device",
            size_bytes=0,
            interface_kind=kind,
        ))
    return _unique_by_path(devices)


def discover_block_devices(
    run: CommandRunner = run_command
) -> list[DeviceRecord]:
    """List every non-loop block device with its model text.

    Used when the caller wants a plain listing without the SSD tiers,
    typically because smartctl and nvme-cli are not installed.
    """
    output = run("lsblk -d -n -o NAME,SIZE,MODEL")
    devices = []
    for line in output.splitlines():
        if not line.strip() or "loop" in line:
            continue
        parts = line.split(None, 2)
        devices.append(DeviceRecord(
            path=f"/dev/{parts[0]}",
            model=parts[2].strip() if len(parts) > 2 else "",
            size_bytes=0,
            interface_kind=InterfaceKind.UNKNOWN,
        ))
    return _unique_by_path(devices)


def discover_ssds(
    run: CommandRunner = run_command,
    device_dir: str | Path = DEVICE_DIR,
) -> list[DeviceRecord]:
    """Discover solid-state devices, falling back through the tiers."""
    devices = list_structured_devices(run)
    if devices:
        logger.info(f"Structured listing found {len(devices)} devices")
        return devices

    logger.info("Structured listing found nothing, probing device paths")
    devices = probe_device_paths(device_dir)
    if devices:
        logger.info(f"Path probing found {len(devices)} devices")
        return devices

    logger.info("Path probing found nothing, using minimal lsblk listing")
    devices = list_minimal_devices(run)
    logger.info(f"Minimal listing found {len(devices)} devices")
    return devices
