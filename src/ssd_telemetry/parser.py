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
# ssd-telemetry/src/ssd_telemetry/parser.py

"""Decoders for the text reports of smartctl, nvme-cli and iostat.

All functions here are pure: they take captured output and return
records. Malformed lines and fields degrade to defaults instead of
raising.
"""

import re
from datetime import datetime
from typing import Final

from loguru import logger

from .models import HealthAttribute, PerformanceSnapshot

HEALTH_HEADER_MARKER: Final[str] = "ID#"

# iostat -x columns after the device name that are not modelled:
# rrqm/s wrqm/s %rrqm %wrqm and the two request sizes
SKIPPED_IOSTAT_FIELDS: Final[int] = 6

# Sizes are unsigned 64-bit byte counts
UINT64_MAX: Final[int] = 2**64 - 1

_LEADING_NUMBER = re.compile(r"^\s*([-+]?\d+(?:\.\d+)?)")
_TOKEN = re.compile(r"\S+")


def parse_size(text: str) -> int:
    """Convert a size field to an integer by keeping only its digits.

    Returns 0 when nothing numeric is left or the value does not fit
    in an unsigned 64-bit integer.
    """
    digits = "".join(c for c in text if c.isdigit())
    if not digits:
        return 0
    try:
        value = int(digits)
    except ValueError:
        return 0
    if value > UINT64_MAX:
        logger.debug(f"Size out of range: {text!r}")
        return 0
    return value


def parse_percentage(text: str) -> float | None:
    """Read the leading number of a value such as '37%'."""
    match = _LEADING_NUMBER.match(text)
    if not match:
        return None
    return float(match.group(1))


def _as_int(token: str) -> int | None:
    try:
        return int(token)
    except ValueError:
        return None


def _parse_health_line(line: str) -> HealthAttribute | None:
    tokens = list(_TOKEN.finditer(line))
    if not tokens:
        return None

    attr_id = _as_int(tokens[0].group())
    if attr_id is None:
        return None

    # Name runs until the first integer token, which is the current value.
    # The hex FLAG column sits between them and is not part of the name.
    name_parts = []
    current = 0
    pos = 1
    while pos < len(tokens):
        word = tokens[pos].group()
        pos += 1
        value = _as_int(word)
        if value is not None:
            current = value
            break
        if not word.lower().startswith("0x"):
            name_parts.append(word)

    worst = 0
    threshold = 0
    raw = ""
    try:
        if pos < len(tokens):
            worst = int(tokens[pos].group())
            pos += 1
        if pos < len(tokens):
            threshold = int(tokens[pos].group())
            pos += 1
        if pos < len(tokens):
            raw = line[tokens[pos].start():].strip()
    except ValueError:
        worst, threshold, raw = 0, 0, "N/A"

    return HealthAttribute(
        id=attr_id,
        name=" ".join(name_parts),
        current=current,
        worst=worst,
        threshold=threshold,
        raw=raw,
    )


def parse_health_attributes(output: str) -> list[HealthAttribute]:
    """Parse the attribute table of `smartctl -A`.

    Everything up to and including the line carrying the 'ID#' header
    is skipped. Rows that do not start with a numeric id are ignored.
    """
    lines = output.splitlines()
    for index, line in enumerate(lines):
        if HEALTH_HEADER_MARKER in line:
            body = lines[index + 1:]
            break
    else:
        logger.debug("No SMART attribute header found in output")
        return []

    attributes = []
    for line in body:
        if not line.strip():
            continue
        attribute = _parse_health_line(line)
        if attribute is None:
            logger.debug(f"Skipping non-attribute line: {line!r}")
            continue
        attributes.append(attribute)

    return attributes


def parse_key_values(output: str) -> dict[str, str]:
    """Parse a colon-delimited report such as `nvme smart-log`.

    Lines without a colon are ignored; the last duplicate key wins.
    """
    metrics = {}
    for line in output.splitlines():
        if ':' not in line:
            continue
        key, value = line.split(':', 1)
        metrics[key.strip()] = value.strip()
    return metrics


def parse_performance(output: str, device_name: str,
                      timestamp: datetime | None = None
                      ) -> PerformanceSnapshot:
    """Parse the device line of an extended iostat report.

    Field order after the device name:
    r/s w/s rMB/s wMB/s, six unmodelled columns, r_await w_await aqu-sz.
    If any of these cannot be read the whole snapshot is zeroed.
    """
    timestamp = timestamp or datetime.now()

    for line in output.splitlines():
        if not line.strip() or device_name not in line:
            continue

        fields = line.split()[1:]
        try:
            head = [float(v) for v in fields[:4]]
            tail_start = 4 + SKIPPED_IOSTAT_FIELDS
            tail = [float(v) for v in fields[tail_start:tail_start + 3]]
            if len(head) < 4 or len(tail) < 3:
                raise ValueError(f"short iostat line: {line!r}")
        except ValueError as e:
            logger.debug(f"Discarding iostat values for {device_name}: {e}")
            return PerformanceSnapshot(timestamp=timestamp)

        return PerformanceSnapshot(
            read_iops=head[0],
            write_iops=head[1],
            read_throughput_mb=head[2],
            write_throughput_mb=head[3],
            read_latency_ms=tail[0],
            write_latency_ms=tail[1],
            queue_depth=tail[2],
            timestamp=timestamp,
        )

    logger.debug(f"No iostat line for {device_name}")
    return PerformanceSnapshot(timestamp=timestamp)
