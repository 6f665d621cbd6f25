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
# ssd-telemetry/src/ssd_telemetry/__init__.py

"""SSD health and performance telemetry.

Discover solid-state drives, parse smartctl, nvme-cli and iostat output,
estimate remaining endurance and keep a bounded, persisted history of
performance samples.
"""

from .collect import (
    get_health_attributes,
    get_nvme_metrics,
    get_performance_snapshot,
)
from .discovery import (
    discover_block_devices,
    discover_ssds,
    list_minimal_devices,
    list_structured_devices,
    probe_device_paths,
)
from .history import HistoryStore, load_history, summarize_history
from .lifetime import (
    UNKNOWN_LIFE,
    estimate_life_remaining,
    is_known_life,
    life_from_reports,
)
from .models import (
    DeviceRecord,
    HealthAttribute,
    InterfaceKind,
    PerformanceSnapshot,
)
from .parser import (
    parse_health_attributes,
    parse_key_values,
    parse_performance,
    parse_size,
)
from .runner import run_command
from .sampler import Sampler, SamplerState
from .telemetry import SSDTelemetry

__version__ = "0.1.0"

__all__ = [
    "DeviceRecord",
    "HealthAttribute",
    "HistoryStore",
    "InterfaceKind",
    "PerformanceSnapshot",
    "SSDTelemetry",
    "Sampler",
    "SamplerState",
    "UNKNOWN_LIFE",
    "discover_block_devices",
    "discover_ssds",
    "estimate_life_remaining",
    "get_health_attributes",
    "get_nvme_metrics",
    "get_performance_snapshot",
    "is_known_life",
    "life_from_reports",
    "list_minimal_devices",
    "list_structured_devices",
    "load_history",
    "parse_health_attributes",
    "parse_key_values",
    "parse_performance",
    "parse_size",
    "probe_device_paths",
    "run_command",
    "summarize_history",
]
