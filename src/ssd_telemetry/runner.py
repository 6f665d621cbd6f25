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
# ssd-telemetry/src/ssd_telemetry/runner.py

"""Execution of external diagnostic commands."""

import subprocess
from collections.abc import Callable
from typing import Final

from loguru import logger

CHUNK_SIZE: Final[int] = 4096

# Accepts a shell command line and returns its captured output
CommandRunner = Callable[[str], str]


def run_command(command: str) -> str:
    """Run a shell command line and return its stdout.

    Never raises. Returns an empty string if the process cannot be
    started, reading its output fails, or it exits non-zero. There is no
    timeout: a hung tool blocks the caller until it exits.
    """
    try:
        proc = subprocess.Popen(
            command,
            shell=True,
            stdout=subprocess.PIPE,
            stderr=subprocess.DEVNULL,
        )
    except OSError as e:
        logger.debug(f"Failed to launch {command!r}: {e}")
        return ""

    chunks = []
    try:
        with proc:
            while True:
                chunk = proc.stdout.read(CHUNK_SIZE)
                if not chunk:
                    break
                chunks.append(chunk)
    except OSError as e:
        logger.debug(f"Failed reading output of {command!r}: {e}")
        return ""

    if proc.returncode != 0:
        logger.debug(f"{command!r} exited with status {proc.returncode}")
        return ""

    return b"".join(chunks).decode("utf-8", errors="replace")
