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
# ssd-telemetry/tests/test_runner.py

import subprocess

from ssd_telemetry import get_performance_snapshot, run_command
from ssd_telemetry.runner import CHUNK_SIZE


class TestRunCommand:
    """Test the shell command runner."""

    def test_captures_stdout(self):
        assert run_command("echo hello") == "hello\n"

    def test_pipelines_work(self):
        """Test shell pipelines are part of the command surface."""
        assert run_command("printf 'a\\nb\\nc\\n' | tail -n 2") == "b\nc\n"

    def test_output_larger_than_a_chunk(self):
        output = run_command(f"head -c {CHUNK_SIZE * 3 + 7} /dev/zero | tr '\\0' x")
        assert len(output) == CHUNK_SIZE * 3 + 7

    def test_non_zero_exit_is_empty(self):
        assert run_command("echo partial; exit 3") == ""

    def test_missing_tool_is_empty(self):
        assert run_command("definitely-not-a-real-tool-xyz --version") == ""

    def test_launch_failure_is_empty(self, monkeypatch):
        """Test an OSError from Popen degrades to empty output."""
        def boom(*args, **kwargs):
            raise OSError("no shell")

        monkeypatch.setattr(subprocess, "Popen", boom)
        assert run_command("echo hello") == ""


class TestInjectedRunner:
    """Test collectors only talk to the outside world through the runner."""

    def test_performance_command_line(self, fake_runner):
        runner = fake_runner()
        snapshot = get_performance_snapshot("/dev/nvme0n1", runner)

        assert runner.calls == ["iostat -xm nvme0n1 1 2 2>/dev/null | tail -n 2"]
        assert snapshot.read_iops == 0.0
