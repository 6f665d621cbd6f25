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
# ssd-telemetry/src/ssd_telemetry/sampler.py

"""Background periodic sampling of one device."""

import threading
from collections.abc import Callable
from enum import Enum
from pathlib import Path
from typing import Final

from loguru import logger

from .collect import get_performance_snapshot
from .history import HistoryStore
from .models import PerformanceSnapshot

STOP_TIMEOUT: Final[float] = 5.0
THREAD_NAME: Final[str] = "ssd-telemetry-sampler"


class SamplerState(Enum):
    IDLE = "idle"
    RUNNING = "running"


class Sampler:
    """Periodically sample a device into a HistoryStore and persist it.

    Only one sampling thread is active at a time; starting again stops
    the previous run and waits for its in-flight cycle to finish. A
    worker stopped mid-command discards that sample. Stopping is
    cooperative: the worker checks its stop event at the top of each
    cycle and while sleeping, but an external command already in flight
    runs to completion.
    """

    def __init__(
        self,
        store: HistoryStore,
        fetch: Callable[[str], PerformanceSnapshot] = get_performance_snapshot,
    ) -> None:
        self.store = store
        self.fetch = fetch
        self.cycles = 0
        self._thread: threading.Thread | None = None
        self._stop_event: threading.Event | None = None
        self._control = threading.Lock()

    @property
    def state(self) -> SamplerState:
        if self._stop_event is not None and not self._stop_event.is_set():
            return SamplerState.RUNNING
        return SamplerState.IDLE

    @property
    def is_running(self) -> bool:
        return self.state is SamplerState.RUNNING

    def start(self, device_path: str, interval_seconds: float,
              output_file: str | Path) -> None:
        """Begin sampling `device_path` every `interval_seconds`."""
        if interval_seconds <= 0:
            raise ValueError(
                f"Sampling interval must be positive: {interval_seconds}"
            )

        with self._control:
            if self.is_running:
                logger.info("Sampler already running, restarting")
                # Wait out any in-flight cycle so only one worker exists
                self._stop_locked(None)

            stop_event = threading.Event()
            thread = threading.Thread(
                target=self._run,
                args=(device_path, interval_seconds, Path(output_file),
                      stop_event),
                name=THREAD_NAME,
                daemon=True,
            )
            self._stop_event = stop_event
            self._thread = thread
            thread.start()

        logger.info(
            f"Sampling {device_path} every {interval_seconds}s into "
            f"{output_file}"
        )

    def stop(self, timeout: float | None = STOP_TIMEOUT) -> None:
        """Signal the worker to exit and wait up to `timeout` for it."""
        with self._control:
            self._stop_locked(timeout)

    def _stop_locked(self, timeout: float | None) -> None:
        thread = self._thread
        if thread is None or self._stop_event is None:
            return
        self._stop_event.set()
        if thread is not threading.current_thread():
            thread.join(timeout)
            if thread.is_alive():
                logger.warning(
                    "Sampler thread still busy after stop; it will exit "
                    "when its current command returns"
                )
        self._thread = None
        logger.info("Sampler stopped")

    def _run(self, device_path: str, interval_seconds: float,
             output_file: Path, stop_event: threading.Event) -> None:
        while not stop_event.is_set():
            try:
                snapshot = self.fetch(device_path)
                if stop_event.is_set():
                    break  # stopped while the command was running
                self.store.record(device_path, snapshot)
                self.store.flush_to_file(output_file)
                self.cycles += 1
            except Exception:
                logger.exception(f"Sampling cycle for {device_path} failed")

            stop_event.wait(interval_seconds)
