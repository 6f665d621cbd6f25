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
# ssd-telemetry/tests/test_sampler.py

"""Tests for the background sampler lifecycle."""

import threading
import time

import pytest

from ssd_telemetry import (
    HistoryStore,
    PerformanceSnapshot,
    Sampler,
    SamplerState,
    SSDTelemetry,
)
from ssd_telemetry.sampler import THREAD_NAME


def live_sampler_threads() -> int:
    return sum(
        1 for t in threading.enumerate()
        if t.name == THREAD_NAME and t.is_alive()
    )


def wait_for(condition, timeout: float = 5.0) -> bool:
    deadline = time.monotonic() + timeout
    while time.monotonic() < deadline:
        if condition():
            return True
        time.sleep(0.01)
    return False


class TestLifecycle:
    """Test Idle/Running transitions."""

    def test_initially_idle(self):
        sampler = Sampler(HistoryStore(), fetch=lambda _: PerformanceSnapshot())
        assert sampler.state is SamplerState.IDLE
        sampler.stop()  # no-op when idle
        assert not sampler.is_running

    def test_start_then_immediate_stop(self, tmp_path):
        """Test an immediate stop completes at most one cycle."""
        sampler = Sampler(HistoryStore(), fetch=lambda _: PerformanceSnapshot())

        sampler.start("/dev/sda", 60, tmp_path / "out.csv")
        assert sampler.state is SamplerState.RUNNING
        sampler.stop()

        assert sampler.state is SamplerState.IDLE
        assert sampler.cycles <= 1
        assert live_sampler_threads() == 0

    def test_restart_keeps_single_thread(self, tmp_path):
        """Test starting twice leaves exactly one active worker."""
        sampler = Sampler(HistoryStore(), fetch=lambda _: PerformanceSnapshot())

        sampler.start("/dev/sda", 60, tmp_path / "a.csv")
        sampler.start("/dev/sdb", 60, tmp_path / "b.csv")
        try:
            assert sampler.is_running
            assert live_sampler_threads() == 1
        finally:
            sampler.stop()
        assert live_sampler_threads() == 0

    def test_invalid_interval(self, tmp_path):
        sampler = Sampler(HistoryStore(), fetch=lambda _: PerformanceSnapshot())
        with pytest.raises(ValueError):
            sampler.start("/dev/sda", 0, tmp_path / "out.csv")
        assert not sampler.is_running


class TestSamplingCycles:
    """Test what each cycle records and persists."""

    def test_cycles_record_and_flush(self, tmp_path):
        """Test snapshots land in the store and the CSV file."""
        store = HistoryStore()
        out = tmp_path / "out.csv"
        sampler = Sampler(store, fetch=lambda _: PerformanceSnapshot(read_iops=5.0))

        sampler.start("/dev/sda", 0.01, out)
        try:
            assert wait_for(lambda: sampler.cycles >= 3)
        finally:
            sampler.stop()

        history = store.snapshot("/dev/sda")
        assert len(history) >= 3
        assert all(s.read_iops == 5.0 for s in history)
        assert out.read_text().startswith("timestamp,device,")

    def test_failures_do_not_stop_the_loop(self, tmp_path):
        """Test a failing fetch is logged and the next cycle proceeds."""
        calls = []

        def flaky_fetch(device_path):
            calls.append(device_path)
            if len(calls) % 2 == 1:
                raise RuntimeError("iostat exploded")
            return PerformanceSnapshot(write_iops=1.0)

        store = HistoryStore()
        sampler = Sampler(store, fetch=flaky_fetch)

        sampler.start("/dev/sda", 0.01, tmp_path / "out.csv")
        try:
            assert wait_for(lambda: sampler.cycles >= 2)
            assert sampler.is_running
        finally:
            sampler.stop()

        assert len(calls) >= 4
        assert len(store.snapshot("/dev/sda")) == sampler.cycles


class BlockingFetch:
    """Fetch that holds every call until released."""

    def __init__(self):
        self.entered = threading.Event()
        self.release = threading.Event()
        self.calls = []

    def __call__(self, device_path):
        self.calls.append(device_path)
        self.entered.set()
        self.release.wait(10)
        return PerformanceSnapshot(read_iops=1.0)


class TestBlockedCommand:
    """Test stopping and restarting while a command is still running."""

    def test_restart_waits_for_in_flight_cycle(self, tmp_path):
        """Test a restart never leaves two workers running."""
        fetch = BlockingFetch()
        store = HistoryStore()
        sampler = Sampler(store, fetch=fetch)
        old_output = tmp_path / "a.csv"

        sampler.start("/dev/sda", 60, old_output)
        assert fetch.entered.wait(5)
        threading.Timer(0.2, fetch.release.set).start()

        sampler.start("/dev/sdb", 60, tmp_path / "b.csv")
        try:
            assert live_sampler_threads() == 1
            assert wait_for(lambda: "/dev/sdb" in store.devices())
        finally:
            sampler.stop()

        # The interrupted /dev/sda sample was discarded, not persisted
        assert store.devices() == ["/dev/sdb"]
        assert not old_output.exists()
        assert live_sampler_threads() == 0

    def test_timed_out_stop_discards_late_sample(self, tmp_path):
        """Test a worker that outlives stop() records nothing afterwards."""
        fetch = BlockingFetch()
        store = HistoryStore()
        sampler = Sampler(store, fetch=fetch)
        output = tmp_path / "out.csv"

        sampler.start("/dev/sda", 60, output)
        assert fetch.entered.wait(5)
        sampler.stop(timeout=0.05)
        assert not sampler.is_running
        assert live_sampler_threads() == 1

        fetch.release.set()
        assert wait_for(lambda: live_sampler_threads() == 0)

        assert len(store) == 0
        assert sampler.cycles == 0
        assert not output.exists()


class TestTelemetryMonitoring:
    """Test monitoring through the SSDTelemetry entry point."""

    def test_monitor_uses_runner(self, fake_runner, tmp_path):
        """Test the sampler pulls iostat output through the runner."""
        runner = fake_runner({
            "iostat -xm sda 1 2 2>/dev/null | tail -n 2": (
                "sda 1.0 2.0 3.0 4.0 0 0 0 0 0 0 5.0 6.0 7.0\n"
            ),
        })
        out = tmp_path / "out.csv"

        with SSDTelemetry(run=runner) as telemetry:
            telemetry.start_monitoring("/dev/sda", 0.01, out)
            assert wait_for(lambda: len(telemetry.history) >= 1)

        assert not telemetry.sampler.is_running
        snap = telemetry.history.snapshot("/dev/sda")[0]
        assert snap.read_iops == 1.0
        assert snap.queue_depth == 7.0
