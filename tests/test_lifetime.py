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
# ssd-telemetry/tests/test_lifetime.py

from ssd_telemetry import (
    UNKNOWN_LIFE,
    DeviceRecord,
    InterfaceKind,
    estimate_life_remaining,
    get_nvme_metrics,
    is_known_life,
    life_from_reports,
    parse_health_attributes,
)

NVME_LOG_CMD = "nvme smart-log /dev/nvme0n1 2>/dev/null"
SMART_A_CMD = "smartctl -A /dev/sda 2>/dev/null"

SATA_NO_WEAR = """ID# ATTRIBUTE_NAME FLAG VALUE WORST THRESH TYPE UPDATED WHEN_FAILED RAW_VALUE
  5 Reallocated_Sector_Ct 0x0033 100 100 010 Pre-fail Always - 0
  9 Power_On_Hours 0x0032 098 098 000 Old_age Always - 8123
"""

SATA_WITH_WEAR = SATA_NO_WEAR + (
    "233 Media_Wearout_Indicator 0x0032 087 087 000 Old_age Always - 0\n"
    "177 Wear_Leveling_Count 0x0013 094 094 000 Pre-fail Always - 61\n"
)


class TestNVMeLife:
    """Test the NVMe branch of the estimator."""

    def test_percentage_used(self, fake_runner):
        """Test life is 100 minus Percentage Used."""
        runner = fake_runner({NVME_LOG_CMD: "Percentage Used: 37%\n"})
        device = DeviceRecord(path="/dev/nvme0n1",
                              interface_kind=InterfaceKind.NVME)
        assert estimate_life_remaining(device, runner) == 63.0

    def test_path_heuristic(self, fake_runner):
        """Test a plain path containing nvme takes the NVMe branch."""
        runner = fake_runner({NVME_LOG_CMD: "Percentage Used: 0%\n"})
        assert estimate_life_remaining("/dev/nvme0n1", runner) == 100.0
        assert SMART_A_CMD not in runner.calls

    def test_worn_out_is_zero_not_unknown(self, fake_runner):
        """Test usage above 100% clamps to a real 0 reading."""
        runner = fake_runner({NVME_LOG_CMD: "Percentage Used: 112%\n"})
        life = estimate_life_remaining("/dev/nvme0n1", runner)
        assert life == 0.0
        assert is_known_life(life)

    def test_missing_key(self, fake_runner):
        """Test a smart-log without the key is unknown."""
        runner = fake_runner({NVME_LOG_CMD: "temperature : 38 C\n"})
        assert estimate_life_remaining("/dev/nvme0n1", runner) == UNKNOWN_LIFE

    def test_non_nvme_metrics_skip_command(self, fake_runner):
        """Test NVMe metrics are not requested for other devices."""
        runner = fake_runner()
        assert get_nvme_metrics("/dev/sda", runner) == {}
        assert runner.calls == []


class TestSATALife:
    """Test the SATA branch of the estimator."""

    def test_first_wear_attribute(self, fake_runner):
        """Test the first wear indicator's current value is used."""
        runner = fake_runner({SMART_A_CMD: SATA_WITH_WEAR})
        assert estimate_life_remaining("/dev/sda", runner) == 87.0

    def test_no_wear_attribute_is_unknown(self, fake_runner):
        """Test a report without wear attributes yields the sentinel."""
        runner = fake_runner({SMART_A_CMD: SATA_NO_WEAR})
        life = estimate_life_remaining("/dev/sda", runner)
        assert life == UNKNOWN_LIFE
        assert not is_known_life(life)

    def test_tool_missing(self, fake_runner):
        assert estimate_life_remaining("/dev/sda", fake_runner()) == UNKNOWN_LIFE

    def test_nvme_interface_on_sd_path_uses_smart_table(self, fake_runner):
        """Test the branch follows the path, not the interface kind."""
        runner = fake_runner({
            "smartctl -A /dev/sdc 2>/dev/null": SATA_NO_WEAR + (
                "177 Wear_Leveling_Count 0x0013 094 094 000 Pre-fail Always - 61\n"
            ),
        })
        device = DeviceRecord(path="/dev/sdc", interface_kind=InterfaceKind.NVME)

        assert estimate_life_remaining(device, runner) == 94.0
        assert not any(call.startswith("nvme ") for call in runner.calls)


class TestLifeFromReports:
    """Test estimates from reports fetched beforehand."""

    def test_nvme_path_reads_metrics(self):
        metrics = {"Percentage Used": "12%"}
        assert life_from_reports("/dev/nvme1n1", [], metrics) == 88.0

    def test_sd_path_reads_attributes(self):
        attributes = parse_health_attributes(SATA_WITH_WEAR)
        metrics = {"Percentage Used": "12%"}
        assert life_from_reports("/dev/sdb", attributes, metrics) == 87.0

    def test_empty_reports_are_unknown(self):
        assert life_from_reports("/dev/sdb", [], {}) == UNKNOWN_LIFE
        assert life_from_reports("/dev/nvme0n1", [], {}) == UNKNOWN_LIFE
