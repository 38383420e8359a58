#!/usr/bin/env python3
# SPDX-License-Identifier: MIT
# Copyright (c) 2025 KernelSight AI
"""
Telemetry log reader.

Accepts JSON lines, pretty-printed multi-line objects, or a top-level
array of objects. Characters between objects (array brackets, commas,
whitespace) are skipped.
"""

import json
import logging
from pathlib import Path
from typing import Any, Dict, Iterable, Iterator, List, Union

from .samples import TelemetryPoint, points_from_dicts

logger = logging.getLogger(__name__)


def read_json_objects(stream: Iterable[str]) -> Iterator[Dict[str, Any]]:
    """
    Read complete JSON objects from a stream, handling multi-line JSON.
    Yields one complete JSON object at a time.
    """
    buffer = ""
    brace_count = 0
    in_string = False
    escape_next = False

    for line in stream:
        for char in line:
            if brace_count == 0 and char != '{':
                continue

            # A raw newline cannot occur inside a JSON string: the record was cut off
            if char == '\n' and in_string:
                logger.warning(f"Skipping truncated telemetry object ({len(buffer)} chars)")
                buffer = ""
                brace_count = 0
                in_string = False
                escape_next = False
                continue

            buffer += char

            # Track string state to ignore braces in strings
            if char == '"' and not escape_next:
                in_string = not in_string

            escape_next = (char == '\\' and not escape_next)

            if not in_string:
                if char == '{':
                    brace_count += 1
                elif char == '}':
                    brace_count -= 1

                    # Complete JSON object when braces balance
                    if brace_count == 0:
                        try:
                            obj = json.loads(buffer)
                            yield obj
                        except json.JSONDecodeError as e:
                            logger.warning(f"Skipping undecodable telemetry object: {e}")
                        buffer = ""

    if buffer.strip():
        logger.warning(f"Discarding incomplete trailing object ({len(buffer)} chars)")


def load_telemetry(source: Union[str, Path, Iterable[str]], sort: bool = True) -> List[TelemetryPoint]:
    """
    Load a telemetry series from a file path or an open text stream.

    Args:
        source: Path to a JSON / JSON-lines file, or an iterable of lines
        sort: Reorder records by timestamp if needed

    Returns:
        List of TelemetryPoints
    """
    if isinstance(source, (str, Path)):
        path = Path(source)
        with open(path, 'r') as f:
            records = list(read_json_objects(f))
        logger.info(f"Read {len(records)} telemetry records from {path}")
    else:
        records = list(read_json_objects(source))

    skipped = [r for r in records if 'timestamp' not in r]
    if skipped:
        logger.warning(f"Skipping {len(skipped)} records without a timestamp")
    return points_from_dicts((r for r in records if 'timestamp' in r), sort=sort)
