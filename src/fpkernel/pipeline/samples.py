#!/usr/bin/env python3
# SPDX-License-Identifier: MIT
# Copyright (c) 2025 KernelSight AI
"""
Telemetry samples and scalar projection.

A TelemetryPoint is one observation: a timestamp plus named metric
values, numeric or categorical. The kernel only ever sees scalar
projections of a series, produced by an accessor per signal.
"""

import logging
import math
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Iterable, List, Mapping, Optional, Sequence

import numpy as np

logger = logging.getLogger(__name__)

Accessor = Callable[['TelemetryPoint'], Optional[float]]


class TelemetryValidationError(ValueError):
    """A targeted field is missing or not numeric and strict mode is on."""

    def __init__(self, label: str, index: int, value: Any = None):
        self.label = label
        self.index = index
        self.value = value
        super().__init__(f"No numeric value for '{label}' at sample {index} (got {value!r})")


@dataclass(frozen=True)
class TelemetryPoint:
    """One telemetry observation."""
    timestamp: float
    fields: Mapping[str, Any] = field(default_factory=dict)

    def get(self, name: str, default: Any = None) -> Any:
        return self.fields.get(name, default)

    def __contains__(self, name: str) -> bool:
        return name in self.fields

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> 'TelemetryPoint':
        if 'timestamp' not in data:
            raise ValueError("Telemetry record has no 'timestamp'")
        fields = {k: v for k, v in data.items() if k != 'timestamp'}
        return cls(timestamp=float(data['timestamp']), fields=fields)

    def to_dict(self) -> Dict[str, Any]:
        out = {'timestamp': self.timestamp}
        out.update(self.fields)
        return out


def points_from_dicts(records: Iterable[Mapping[str, Any]], sort: bool = True) -> List[TelemetryPoint]:
    """
    Build TelemetryPoints from plain dicts.

    Args:
        records: Dicts carrying a 'timestamp' key
        sort: Reorder by timestamp when the input is out of order

    Returns:
        Points in ascending timestamp order (if sort is set)
    """
    points = [TelemetryPoint.from_dict(r) for r in records]
    if sort and any(b.timestamp < a.timestamp for a, b in zip(points, points[1:])):
        logger.warning("Telemetry records were out of timestamp order; sorting %d records",
                       len(points))
        points.sort(key=lambda p: p.timestamp)
    return points


def numeric_value(value: Any) -> Optional[float]:
    """Coerce a metric value to a finite float, or None."""
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, (int, float, np.integer, np.floating)):
        result = float(value)
    elif isinstance(value, str):
        try:
            result = float(value)
        except ValueError:
            return None
    else:
        return None
    return result if math.isfinite(result) else None


def field_accessor(*names: str) -> Accessor:
    """
    Accessor returning the first numeric value among names.

    Example:
        rssi = field_accessor('rssi_dBm', 'rsrp_dBm')
        rssi(point)  # -> -65.2 or None
    """
    if not names:
        raise ValueError("field_accessor() needs at least one field name")

    def accessor(point: 'TelemetryPoint') -> Optional[float]:
        for name in names:
            value = numeric_value(point.get(name))
            if value is not None:
                return value
        return None

    accessor.__name__ = f"field_accessor({', '.join(names)})"
    accessor.fields = names
    return accessor


def _log_defaulted(label: str, defaulted: int, total: int, default: float):
    if not defaulted:
        return
    if defaulted == total:
        logger.info("Signal '%s' not present; using neutral default %s", label, default)
    else:
        logger.warning("Signal '%s': %d of %d samples defaulted to %s",
                       label, defaulted, total, default)


def project(points: Sequence[TelemetryPoint], accessor: Accessor, default: float,
            strict: bool = False, label: str = 'value', offset: int = 0) -> np.ndarray:
    """
    Project a series onto one scalar signal.

    Missing or non-numeric values become default, unless strict is set,
    in which case TelemetryValidationError is raised for the first one.
    offset is added to sample positions in error messages when points is
    a slice of a longer series.
    """
    values = np.empty(len(points), dtype=float)
    defaulted = 0
    for i, point in enumerate(points):
        value = accessor(point)
        if value is None:
            if strict:
                fields = getattr(accessor, 'fields', (label,))
                raw = next((point.get(f) for f in fields if f in point), None)
                raise TelemetryValidationError(label, offset + i, raw)
            value = default
            defaulted += 1
        values[i] = value
    _log_defaulted(label, defaulted, len(points), default)
    return values


def project_numbers(values: Sequence[Any], strict: bool = False,
                    label: str = 'value', default: float = 0.0, offset: int = 0) -> np.ndarray:
    """Scalar series from raw numbers with the same default/strict policy."""
    out = np.empty(len(values), dtype=float)
    defaulted = 0
    for i, raw in enumerate(values):
        value = numeric_value(raw)
        if value is None:
            if strict:
                raise TelemetryValidationError(label, offset + i, raw)
            value = default
            defaulted += 1
        out[i] = value
    _log_defaulted(label, defaulted, len(values), default)
    return out
