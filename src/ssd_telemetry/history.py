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
# ssd-telemetry/src/ssd_telemetry/history.py

"""Bounded per-device performance history and its CSV persistence."""

import threading
from collections import deque
from pathlib import Path
from typing import Final

import polars as pl
from loguru import logger

from .models import PerformanceSnapshot

HISTORY_LIMIT: Final[int] = 1000
TIMESTAMP_FORMAT: Final[str] = "%Y-%m-%d %H:%M:%S"

METRIC_COLUMNS: Final[tuple[str, ...]] = (
    "read_iops",
    "write_iops",
    "read_throughput_mb",
    "write_throughput_mb",
    "read_latency_ms",
    "write_latency_ms",
    "queue_depth",
)
CSV_COLUMNS: Final[tuple[str, ...]] = ("timestamp", "device") + METRIC_COLUMNS

HISTORY_SCHEMA: Final[dict] = {
    "timestamp": pl.Datetime("us"),
    "device": pl.String,
    **{column: pl.Float64 for column in METRIC_COLUMNS},
}


class HistoryStore:
    """Per-device FIFO of performance snapshots.

    Each device keeps at most `limit` snapshots; appending beyond that
    evicts the single oldest one. All access goes through one lock so
    the sampler thread and foreground readers never interleave.
    """

    def __init__(self, limit: int = HISTORY_LIMIT) -> None:
        if limit < 1:
            raise ValueError(f"History limit must be positive: {limit}")
        self.limit = limit
        self._history: dict[str, deque[PerformanceSnapshot]] = {}
        self._lock = threading.Lock()

    def record(self, device_path: str, snapshot: PerformanceSnapshot) -> None:
        with self._lock:
            series = self._history.get(device_path)
            if series is None:
                series = deque(maxlen=self.limit)
                self._history[device_path] = series
            series.append(snapshot)

    def snapshot(self, device_path: str) -> list[PerformanceSnapshot]:
        """Copy of one device's history, oldest first."""
        with self._lock:
            return list(self._history.get(device_path, ()))

    def devices(self) -> list[str]:
        with self._lock:
            return list(self._history)

    def clear(self) -> None:
        with self._lock:
            self._history.clear()

    def __len__(self) -> int:
        with self._lock:
            return sum(len(series) for series in self._history.values())

    def _rows(self) -> list[dict]:
        rows = []
        for device, series in self._history.items():
            for snap in series:
                row = {"timestamp": snap.timestamp, "device": device}
                row.update({c: float(getattr(snap, c)) for c in METRIC_COLUMNS})
                rows.append(row)
        return rows

    def to_frame(self) -> pl.DataFrame:
        """The whole history as a DataFrame, device then time order."""
        with self._lock:
            rows = self._rows()
        return pl.DataFrame(rows, schema=HISTORY_SCHEMA)

    def flush_to_file(self, output_file: str | Path) -> int:
        """Append every held snapshot to a CSV file.

        The header is written only when the file is empty. No persisted
        offset is kept, so each call writes the full in-memory history
        again and repeated flushes duplicate rows.

        Returns:
            Number of data rows written
        """
        output_file = Path(output_file)
        with self._lock:
            df = pl.DataFrame(self._rows(), schema=HISTORY_SCHEMA)
            needs_header = (
                not output_file.exists() or output_file.stat().st_size == 0
            )
            with open(output_file, "ab") as f:
                df.write_csv(
                    f,
                    include_header=needs_header,
                    datetime_format=TIMESTAMP_FORMAT,
                )
        logger.debug(f"Flushed {len(df)} rows to {output_file}")
        return len(df)


def load_history(csv_path: str | Path) -> pl.DataFrame:
    """Read a persisted history file back into a DataFrame."""
    csv_path = Path(csv_path)
    if not csv_path.exists() or csv_path.stat().st_size == 0:
        return pl.DataFrame(schema=HISTORY_SCHEMA)

    df = pl.read_csv(
        csv_path,
        schema_overrides={
            "device": pl.String,
            **{column: pl.Float64 for column in METRIC_COLUMNS},
        },
    )
    return df.with_columns(
        pl.col("timestamp").str.strptime(pl.Datetime("us"), TIMESTAMP_FORMAT)
    )


def summarize_history(df: pl.DataFrame) -> pl.DataFrame:
    """Aggregate a history frame to one row per device."""
    if df.is_empty():
        return pl.DataFrame()

    return (
        df.group_by("device", maintain_order=True)
        .agg(
            pl.len().alias("samples"),
            pl.col("timestamp").min().alias("first"),
            pl.col("timestamp").max().alias("last"),
            pl.col("read_iops").mean().alias("mean_read_iops"),
            pl.col("write_iops").mean().alias("mean_write_iops"),
            pl.col("read_throughput_mb").mean().alias("mean_read_mb"),
            pl.col("write_throughput_mb").mean().alias("mean_write_mb"),
            pl.col("read_latency_ms").max().alias("max_read_latency_ms"),
            pl.col("write_latency_ms").max().alias("max_write_latency_ms"),
            pl.col("queue_depth").mean().alias("mean_queue_depth"),
        )
        .sort("device")
    )
