#!/usr/bin/env python3
# SPDX-License-Identifier: MIT
# Copyright (c) 2025 KernelSight AI
"""
Statistics primitives for the kernel indicators.

Two dispersion flavours coexist on purpose:
- stats() uses the sample variance (divisor n-1, never below 1) and is
  what the drift indicator normalizes by.
- population_std() uses divisor n and is what the stability indicator
  measures.
"""

from typing import Dict, Sequence

import numpy as np


def _as_array(values: Sequence[float]) -> np.ndarray:
    return np.asarray(values, dtype=float)


def mean(values: Sequence[float]) -> float:
    """Arithmetic mean; 0.0 for an empty sequence."""
    arr = _as_array(values)
    if arr.size == 0:
        return 0.0
    return float(arr.sum() / arr.size)


def stats(values: Sequence[float]) -> Dict[str, float]:
    """
    Mean and sample standard deviation.

    Args:
        values: Ordered numeric sequence

    Returns:
        {'mean': float, 'std': float}
    """
    arr = _as_array(values)
    mu = mean(arr)
    if arr.size == 0:
        return {'mean': 0.0, 'std': 0.0}
    divisor = max(arr.size - 1, 1)
    variance = float(np.sum((arr - mu) ** 2) / divisor)
    return {'mean': mu, 'std': float(np.sqrt(variance))}


def population_std(values: Sequence[float]) -> float:
    """Standard deviation with divisor n; 0.0 for an empty sequence."""
    arr = _as_array(values)
    if arr.size == 0:
        return 0.0
    mu = mean(arr)
    return float(np.sqrt(np.sum((arr - mu) ** 2) / arr.size))


def maximum(values: Sequence[float]) -> float:
    arr = _as_array(values)
    if arr.size == 0:
        raise ValueError("maximum() of an empty sequence")
    return float(arr.max())


def minimum(values: Sequence[float]) -> float:
    arr = _as_array(values)
    if arr.size == 0:
        raise ValueError("minimum() of an empty sequence")
    return float(arr.min())


def value_range(values: Sequence[float]) -> float:
    """max - min, 0.0 for an empty sequence."""
    arr = _as_array(values)
    if arr.size == 0:
        return 0.0
    return float(arr.max() - arr.min())
