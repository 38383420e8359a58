#!/usr/bin/env python3
# SPDX-License-Identifier: MIT
# Copyright (c) 2025 KernelSight AI
"""
Kernel math: statistics, window extraction, the four indicators and
risk aggregation. Everything here is a pure function of its inputs.
"""

from .statistics import mean, stats, population_std, value_range, maximum, minimum
from .windows import WindowSizes, WindowSet, trailing_window, extract_windows
from .indicators import (
    EPSILON,
    DriftStatus,
    StabilityStatus,
    BoundaryStatus,
    OscillationLevel,
    BoundaryLimits,
    IndicatorReading,
    Indicator,
    StdDevDrift,
    RangeDrift,
    DispersionStability,
    CountBoundary,
    ThresholdBoundary,
    BaselineCrossingOscillation,
    DirectionReversalOscillation,
    compute_drift,
    judge_drift,
    compute_range_drift,
    judge_range_drift,
    compute_stability,
    judge_stability,
    count_boundary_violations,
    judge_boundary,
    threshold_boundary_status,
    compute_oscillation,
    judge_oscillation,
    count_direction_reversals,
    simple_oscillation_level,
    make_indicator,
    INDICATOR_VARIANTS,
    CURRENT_VARIANTS,
)
from .risk import RiskLevel, RiskInputs, RISK_WEIGHTS, compute_risk_score, classify_risk

__all__ = [
    'mean', 'stats', 'population_std', 'value_range', 'maximum', 'minimum',
    'WindowSizes', 'WindowSet', 'trailing_window', 'extract_windows',
    'EPSILON', 'DriftStatus', 'StabilityStatus', 'BoundaryStatus', 'OscillationLevel',
    'BoundaryLimits', 'IndicatorReading', 'Indicator',
    'StdDevDrift', 'RangeDrift', 'DispersionStability', 'CountBoundary',
    'ThresholdBoundary', 'BaselineCrossingOscillation', 'DirectionReversalOscillation',
    'compute_drift', 'judge_drift', 'compute_range_drift', 'judge_range_drift',
    'compute_stability', 'judge_stability',
    'count_boundary_violations', 'judge_boundary', 'threshold_boundary_status',
    'compute_oscillation', 'judge_oscillation',
    'count_direction_reversals', 'simple_oscillation_level',
    'make_indicator', 'INDICATOR_VARIANTS', 'CURRENT_VARIANTS',
    'RiskLevel', 'RiskInputs', 'RISK_WEIGHTS', 'compute_risk_score', 'classify_risk',
]
