#!/usr/bin/env python3
# SPDX-License-Identifier: MIT
# Copyright (c) 2025 KernelSight AI
"""
Point and timeline analysis built on the kernel indicators.
"""

from .point_analyzer import (
    SignalRole,
    KernelResult,
    AnalyzerSettings,
    SignalBundle,
    ROLE_DEFAULTS,
    DEFAULT_ACCESSORS,
    DEFAULT_BOUNDARY_LIMITS,
    prepare_signals,
    analyze_prepared,
    analyze_prepared_multi,
    analyze_point,
    analyze_point_multi,
)
from .timeline import analyze_timeline, summarize_timeline

__all__ = [
    'SignalRole',
    'KernelResult',
    'AnalyzerSettings',
    'SignalBundle',
    'ROLE_DEFAULTS',
    'DEFAULT_ACCESSORS',
    'DEFAULT_BOUNDARY_LIMITS',
    'prepare_signals',
    'analyze_prepared',
    'analyze_prepared_multi',
    'analyze_point',
    'analyze_point_multi',
    'analyze_timeline',
    'summarize_timeline',
]
