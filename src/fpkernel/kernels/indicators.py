#!/usr/bin/env python3
# SPDX-License-Identifier: MIT
# Copyright (c) 2025 KernelSight AI
"""
Kernel indicators K1-K4.

Each indicator is a pure function from one or two windows to a score,
paired with a judge that maps the score to a discrete status:

    K1 drift        short-term mean shift, normalized by long-window spread
    K2 stability    1 - normalized dispersion of the mid window
    K3 boundary     number of limit violations
    K4 oscillation  rate of baseline crossings inside the short window

Two formula generations exist for drift, boundary and oscillation. The
current ones are the module-level compute_*/judge_* functions. The older
ones (range-normalized drift, threshold/margin boundary, direction
reversal oscillation) are kept as named variants and can be selected
through make_indicator().
"""

from dataclasses import dataclass
from enum import Enum
from typing import Dict, Optional, Sequence

import numpy as np

from .statistics import mean, population_std, stats, value_range
from .windows import WindowSet

EPSILON = 1e-6


class DriftStatus(Enum):
    STABLE = "STABLE"
    MILD_DRIFT = "MILD_DRIFT"
    MODERATE_DRIFT = "MODERATE_DRIFT"
    SEVERE_DRIFT = "SEVERE_DRIFT"


class StabilityStatus(Enum):
    GOOD = "GOOD"
    MARGINAL = "MARGINAL"
    UNSTABLE = "UNSTABLE"


class BoundaryStatus(Enum):
    YES = "YES"
    WARNING = "WARNING"  # older threshold/margin form only
    NO = "NO"


class OscillationLevel(Enum):
    LOW = "LOW"
    MEDIUM = "MEDIUM"
    HIGH = "HIGH"


# ============================================================
# K1 - Drift
# ============================================================

def compute_drift(short_window: Sequence[float], long_window: Sequence[float],
                  eps: float = EPSILON) -> float:
    """
    |mean(short) - mean(long)| / (std(long) + eps), std being the sample
    standard deviation of the long window.
    """
    baseline = stats(long_window)
    return abs(mean(short_window) - baseline['mean']) / (baseline['std'] + eps)


def judge_drift(score: float) -> DriftStatus:
    if score < 1.0:
        return DriftStatus.STABLE
    if score < 2.0:
        return DriftStatus.MILD_DRIFT
    if score < 3.0:
        return DriftStatus.MODERATE_DRIFT
    return DriftStatus.SEVERE_DRIFT


def compute_range_drift(short_window: Sequence[float], long_window: Sequence[float],
                        eps: float = EPSILON) -> float:
    """Older drift form: mean shift over twice the long-window range."""
    return abs(mean(short_window) - mean(long_window)) / (2 * value_range(long_window) + eps)


def judge_range_drift(score: float) -> DriftStatus:
    if score < 0.05:
        return DriftStatus.STABLE
    if score < 0.15:
        return DriftStatus.MILD_DRIFT
    if score < 0.30:
        return DriftStatus.MODERATE_DRIFT
    return DriftStatus.SEVERE_DRIFT


# ============================================================
# K2 - Stability
# ============================================================

def compute_stability(window: Sequence[float], eps: float = EPSILON) -> float:
    """
    1 - min(1, std / (range + eps)) with the population std.

    Returns 1.0 for fewer than two samples.
    """
    if len(window) < 2:
        return 1.0
    instability = population_std(window) / (value_range(window) + eps)
    return 1.0 - min(1.0, instability)


def judge_stability(score: float) -> StabilityStatus:
    if score > 0.9:
        return StabilityStatus.GOOD
    if score > 0.7:
        return StabilityStatus.MARGINAL
    return StabilityStatus.UNSTABLE


# ============================================================
# K3 - Boundary
# ============================================================

@dataclass(frozen=True)
class BoundaryLimits:
    """Limits for the boundary indicator; None disables a check."""
    min_val: Optional[float] = None
    max_val: Optional[float] = None
    max_derivative: Optional[float] = None
    # Used only by the threshold/margin form.
    warning_level: Optional[float] = None


def count_boundary_violations(values: Sequence[float],
                              min_val: Optional[float] = None,
                              max_val: Optional[float] = None,
                              max_derivative: Optional[float] = None) -> int:
    """
    Count values that break at least one limit.

    A value violates when v < min_val, v > max_val, or, if a previous value
    exists in the same pass, |v - prev| > max_derivative. A value breaking
    several limits is counted once.
    """
    count = 0
    prev = None
    for v in values:
        v = float(v)
        hit = False
        if min_val is not None and v < min_val:
            hit = True
        if max_val is not None and v > max_val:
            hit = True
        if max_derivative is not None and prev is not None and abs(v - prev) > max_derivative:
            hit = True
        if hit:
            count += 1
        prev = v
    return count


def judge_boundary(count: float) -> BoundaryStatus:
    return BoundaryStatus.YES if count > 0 else BoundaryStatus.NO


def threshold_boundary_status(values: Sequence[float], threshold: float = 30.0,
                              margin: float = 20.0) -> BoundaryStatus:
    """Older boundary form: compare the window maximum to threshold and margin."""
    if len(values) == 0:
        return BoundaryStatus.NO
    peak = float(np.max(np.asarray(values, dtype=float)))
    if peak > threshold:
        return BoundaryStatus.YES
    if peak > margin:
        return BoundaryStatus.WARNING
    return BoundaryStatus.NO


# ============================================================
# K4 - Oscillation
# ============================================================

def compute_oscillation(short_window: Sequence[float], long_window: Sequence[float]) -> float:
    """
    Fraction of adjacent short-window steps that cross mean(long).

    Each value maps to 1 if above the long-window mean, else 0; the score
    is transitions / (len(short) - 1). 0.0 when the short window has fewer
    than two samples or the long window is empty.
    """
    if len(short_window) < 2 or len(long_window) == 0:
        return 0.0
    mu_ref = mean(long_window)
    states = (np.asarray(short_window, dtype=float) > mu_ref).astype(int)
    transitions = int(np.count_nonzero(np.diff(states)))
    return transitions / (len(short_window) - 1)


def judge_oscillation(score: float) -> OscillationLevel:
    if score < 0.2:
        return OscillationLevel.LOW
    if score < 0.5:
        return OscillationLevel.MEDIUM
    return OscillationLevel.HIGH


def _nonzero_step_signs(values: Sequence[float]) -> np.ndarray:
    diffs = np.diff(np.asarray(values, dtype=float))
    signs = np.sign(diffs)
    return signs[signs != 0]


def count_direction_reversals(values: Sequence[float]) -> int:
    """Number of sign changes between consecutive non-flat steps."""
    if len(values) < 3:
        return 0
    signs = _nonzero_step_signs(values)
    if signs.size < 2:
        return 0
    return int(np.count_nonzero(signs[:-1] * signs[1:] < 0))


def simple_oscillation_level(values: Sequence[float]) -> OscillationLevel:
    """Baseline-free oscillation level from direction reversals."""
    changes = count_direction_reversals(values)
    if changes == 0:
        return OscillationLevel.LOW
    if changes <= 2:
        return OscillationLevel.MEDIUM
    return OscillationLevel.HIGH


# ============================================================
# Indicator interface and variants
# ============================================================

@dataclass(frozen=True)
class IndicatorReading:
    score: float  # int for boundary counts
    status: Enum


class Indicator:
    """One indicator formulation: evaluate() turns windows into a reading."""

    kind = ""
    variant = ""

    def evaluate(self, windows: WindowSet) -> IndicatorReading:
        raise NotImplementedError


class StdDevDrift(Indicator):
    kind = "drift"
    variant = "stddev"

    def evaluate(self, windows: WindowSet) -> IndicatorReading:
        score = compute_drift(windows.short, windows.long)
        return IndicatorReading(score, judge_drift(score))


class RangeDrift(Indicator):
    kind = "drift"
    variant = "range"

    def evaluate(self, windows: WindowSet) -> IndicatorReading:
        score = compute_range_drift(windows.short, windows.long)
        return IndicatorReading(score, judge_range_drift(score))


class DispersionStability(Indicator):
    kind = "stability"
    variant = "dispersion"

    def evaluate(self, windows: WindowSet) -> IndicatorReading:
        score = compute_stability(windows.mid)
        return IndicatorReading(score, judge_stability(score))


class CountBoundary(Indicator):
    """Violation count over the current sample (or the mid window)."""

    kind = "boundary"
    variant = "count"

    SPANS = ('current', 'mid')

    def __init__(self, limits: Optional[BoundaryLimits] = None, span: str = 'current'):
        if span not in self.SPANS:
            raise ValueError(f"Unknown boundary span '{span}' (expected one of {self.SPANS})")
        self.limits = limits or BoundaryLimits()
        self.span = span

    def evaluate(self, windows: WindowSet) -> IndicatorReading:
        values = windows.current if self.span == 'current' else windows.mid
        count = count_boundary_violations(
            values,
            min_val=self.limits.min_val,
            max_val=self.limits.max_val,
            max_derivative=self.limits.max_derivative,
        )
        return IndicatorReading(count, judge_boundary(count))


class ThresholdBoundary(Indicator):
    """
    Older boundary form over the mid window.

    The status compares the window maximum to threshold/margin; the score
    is the number of mid-window values above threshold so that it stays a
    count like the current form.
    """

    kind = "boundary"
    variant = "threshold"

    DEFAULT_THRESHOLD = 30.0
    DEFAULT_MARGIN = 20.0

    def __init__(self, limits: Optional[BoundaryLimits] = None, span: str = 'mid'):
        limits = limits or BoundaryLimits()
        self.threshold = limits.max_val if limits.max_val is not None else self.DEFAULT_THRESHOLD
        self.margin = (limits.warning_level if limits.warning_level is not None
                       else self.DEFAULT_MARGIN)

    def evaluate(self, windows: WindowSet) -> IndicatorReading:
        above = int(np.count_nonzero(np.asarray(windows.mid, dtype=float) > self.threshold))
        status = threshold_boundary_status(windows.mid, self.threshold, self.margin)
        return IndicatorReading(above, status)


class BaselineCrossingOscillation(Indicator):
    kind = "oscillation"
    variant = "crossing"

    def evaluate(self, windows: WindowSet) -> IndicatorReading:
        score = compute_oscillation(windows.short, windows.long)
        return IndicatorReading(score, judge_oscillation(score))


class DirectionReversalOscillation(Indicator):
    """
    Older oscillation form. The score is reversals per possible reversal
    so it stays within [0, 1]; the level comes from the raw count.
    """

    kind = "oscillation"
    variant = "reversal"

    def evaluate(self, windows: WindowSet) -> IndicatorReading:
        signs = _nonzero_step_signs(windows.short) if len(windows.short) >= 3 else np.empty(0)
        changes = count_direction_reversals(windows.short)
        score = changes / (signs.size - 1) if signs.size >= 2 else 0.0
        return IndicatorReading(score, simple_oscillation_level(windows.short))


INDICATOR_VARIANTS: Dict[str, Dict[str, type]] = {
    'drift': {'stddev': StdDevDrift, 'range': RangeDrift},
    'stability': {'dispersion': DispersionStability},
    'boundary': {'count': CountBoundary, 'threshold': ThresholdBoundary},
    'oscillation': {'crossing': BaselineCrossingOscillation,
                    'reversal': DirectionReversalOscillation},
}

CURRENT_VARIANTS: Dict[str, str] = {
    'drift': 'stddev',
    'stability': 'dispersion',
    'boundary': 'count',
    'oscillation': 'crossing',
}


def make_indicator(kind: str, variant: Optional[str] = None,
                   limits: Optional[BoundaryLimits] = None,
                   boundary_span: str = 'current') -> Indicator:
    """
    Instantiate an indicator by kind and variant name.

    Args:
        kind: 'drift', 'stability', 'boundary' or 'oscillation'
        variant: Variant name; the current formulation when None
        limits: Boundary limits (boundary kind only)
        boundary_span: 'current' or 'mid' (count boundary only)
    """
    if kind not in INDICATOR_VARIANTS:
        raise ValueError(f"Unknown indicator kind '{kind}'")
    variant = variant or CURRENT_VARIANTS[kind]
    try:
        cls = INDICATOR_VARIANTS[kind][variant]
    except KeyError:
        known = ', '.join(sorted(INDICATOR_VARIANTS[kind]))
        raise ValueError(f"Unknown {kind} variant '{variant}' (known: {known})") from None
    if kind == 'boundary':
        return cls(limits, boundary_span)
    return cls()
