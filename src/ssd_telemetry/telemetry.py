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
# ssd-telemetry/src/ssd_telemetry/telemetry.py

"""Single entry point bundling discovery, queries and sampling."""

from pathlib import Path

from . import collect, discovery, lifetime
from .history import HISTORY_LIMIT, HistoryStore
from .models import DeviceRecord, HealthAttribute, PerformanceSnapshot
from .runner import CommandRunner, run_command
from .sampler import Sampler


class SSDTelemetry:
    """Telemetry for the SSDs of the local host.

    Owns the history store and the sampler for as long as the object
    lives. Every query shells out through `run`, so a custom executor
    (for instance one enforcing a timeout) applies to all of them.
    """

    def __init__(self, run: CommandRunner = run_command,
                 device_dir: str | Path = discovery.DEVICE_DIR,
                 history_limit: int = HISTORY_LIMIT) -> None:
        self.run = run
        self.device_dir = Path(device_dir)
        self.history = HistoryStore(limit=history_limit)
        self.sampler = Sampler(self.history, fetch=self.performance)

    def discover_ssds(self) -> list[DeviceRecord]:
        return discovery.discover_ssds(self.run, self.device_dir)

    def list_structured_devices(self) -> list[DeviceRecord]:
        return discovery.list_structured_devices(self.run)

    def probe_device_paths(self) -> list[DeviceRecord]:
        return discovery.probe_device_paths(self.device_dir)

    def list_minimal_devices(self) -> list[DeviceRecord]:
        return discovery.list_minimal_devices(self.run)

    def discover_block_devices(self) -> list[DeviceRecord]:
        return discovery.discover_block_devices(self.run)

    def health_attributes(self, device_path: str) -> list[HealthAttribute]:
        return collect.get_health_attributes(device_path, self.run)

    def nvme_metrics(self, device_path: str) -> dict[str, str]:
        return collect.get_nvme_metrics(device_path, self.run)

    def performance(self, device_path: str) -> PerformanceSnapshot:
        return collect.get_performance_snapshot(device_path, self.run)

    def life_remaining(self, device: DeviceRecord | str) -> float:
        return lifetime.estimate_life_remaining(device, self.run)

    def start_monitoring(self, device_path: str, interval_seconds: float,
                         output_file: str | Path) -> None:
        self.sampler.start(device_path, interval_seconds, output_file)

    def stop_monitoring(self) -> None:
        self.sampler.stop()

    def save_history(self, output_file: str | Path) -> int:
        return self.history.flush_to_file(output_file)

    def __enter__(self) -> "SSDTelemetry":
        return self

    def __exit__(self, *exc_info) -> None:
        self.stop_monitoring()
