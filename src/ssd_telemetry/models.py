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
# ssd-telemetry/src/ssd_telemetry/models.py

"""Value records shared by discovery, parsing and sampling."""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum


class InterfaceKind(str, Enum):
    """Transport a storage device is attached through."""
    SATA = "SATA"
    NVME = "NVMe"
    UNKNOWN = "Unknown"

    @classmethod
    def from_name(cls, name: str) -> "InterfaceKind":
        """Guess the interface from a device name or path."""
        return cls.NVME if "nvme" in name else cls.UNKNOWN


@dataclass(frozen=True)
class DeviceRecord:
    """A candidate storage device found by discovery."""
    path: str
    model: str = ""
    serial: str = ""
    size_bytes: int = 0  # 0 means unknown
    interface_kind: InterfaceKind = InterfaceKind.UNKNOWN

    @property
    def name(self) -> str:
        """Short device name without the /dev/ prefix."""
        return short_name(self.path)

    @property
    def size_gb(self) -> float | None:
        if self.size_bytes <= 0:
            return None
        return self.size_bytes / 1_000_000_000

    def to_dict(self) -> dict:
        """Convert to JSON-serializable dictionary."""
        return {
            'path': self.path,
            'model': self.model,
            'serial': self.serial,
            'size_bytes': self.size_bytes,
            'interface_kind': self.interface_kind.value,
        }


@dataclass(frozen=True)
class HealthAttribute:
    """One row of a SMART attribute table."""
    id: int
    name: str
    current: int = 0
    worst: int = 0
    threshold: int = 0
    raw: str = ""

    def to_dict(self) -> dict:
        return {
            'id': self.id,
            'name': self.name,
            'current': self.current,
            'worst': self.worst,
            'threshold': self.threshold,
            'raw': self.raw,
        }


@dataclass(frozen=True)
class PerformanceSnapshot:
    """Point-in-time I/O statistics for one device.

    Numeric fields stay at 0 when the statistics line could not be
    decoded; a snapshot is degraded, never rejected.
    """
    read_iops: float = 0.0
    write_iops: float = 0.0
    read_throughput_mb: float = 0.0
    write_throughput_mb: float = 0.0
    read_latency_ms: float = 0.0
    write_latency_ms: float = 0.0
    queue_depth: float = 0.0
    timestamp: datetime = field(default_factory=datetime.now)

    def to_dict(self) -> dict:
        """Convert to JSON-serializable dictionary."""
        return {
            'timestamp': self.timestamp.isoformat(),
            'read_iops': self.read_iops,
            'write_iops': self.write_iops,
            'read_throughput_mb': self.read_throughput_mb,
            'write_throughput_mb': self.write_throughput_mb,
            'read_latency_ms': self.read_latency_ms,
            'write_latency_ms': self.write_latency_ms,
            'queue_depth': self.queue_depth,
        }


def short_name(device_path: str) -> str:
    """Strip the /dev/ prefix from a device path."""
    if device_path.startswith("/dev/"):
        return device_path[len("/dev/"):]
    return device_path
