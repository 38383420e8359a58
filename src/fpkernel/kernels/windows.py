#!/usr/bin/env python3
# SPDX-License-Identifier: MIT
# Copyright (c) 2025 KernelSight AI
"""
Trailing window extraction.

Every window ends at and includes the target index and is clipped at the
start of the series. Nothing after the target index is ever visible.
"""

from dataclasses import dataclass
from typing import Sequence

import numpy as np


@dataclass(frozen=True)
class WindowSizes:
    """Short/mid/long window lengths in samples."""
    short: int = 20
    mid: int = 60
    long: int = 720

    def __post_init__(self):
        for name in ('short', 'mid', 'long'):
            value = getattr(self, name)
            if int(value) != value or value < 1:
                raise ValueError(f"{name} window must be a positive integer, got {value!r}")


@dataclass(frozen=True)
class WindowSet:
    """The windows one point analysis works on."""
    index: int
    short: np.ndarray
    mid: np.ndarray
    long: np.ndarray
    current: np.ndarray  # just the target sample


def trailing_window(values: Sequence[float], index: int, length: int) -> np.ndarray:
    """
    Slice [max(0, index - length + 1), index + 1) of values.

    Args:
        values: Full scalar series
        index: Target index (0 <= index < len(values))
        length: Requested window length

    Returns:
        Read-only float array, shorter than length near the series start
    """
    arr = np.asarray(values, dtype=float)
    if index < 0 or index >= arr.size:
        raise IndexError(f"index {index} outside series of length {arr.size}")
    start = max(0, index - length + 1)
    window = arr[start:index + 1]
    window.flags.writeable = False
    return window


def extract_windows(values: Sequence[float], index: int, sizes: WindowSizes) -> WindowSet:
    """Build the short, mid, long and current windows ending at index."""
    arr = np.asarray(values, dtype=float)
    return WindowSet(
        index=index,
        short=trailing_window(arr, index, sizes.short),
        mid=trailing_window(arr, index, sizes.mid),
        long=trailing_window(arr, index, sizes.long),
        current=trailing_window(arr, index, 1),
    )
