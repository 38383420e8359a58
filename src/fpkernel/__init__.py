#!/usr/bin/env python3
# SPDX-License-Identifier: MIT
# Copyright (c) 2025 KernelSight AI
"""
FP Kernel - telemetry fault-prediction kernel.

Computes drift, stability, boundary and oscillation indicators over
trailing windows of link-health telemetry and combines them into a
LOW / MEDIUM / HIGH risk classification.
"""

__version__ = "0.1.0"
__all__ = [
    "WindowSizes",
    "SignalRole",
    "KernelResult",
    "AnalyzerSettings",
    "analyze_point",
    "analyze_point_multi",
    "analyze_timeline",
    "summarize_timeline",
    "TelemetryPoint",
    "load_telemetry",
]

from .kernels.windows import WindowSizes
from .analysis import (
    SignalRole,
    KernelResult,
    AnalyzerSettings,
    analyze_point,
    analyze_point_multi,
    analyze_timeline,
    summarize_timeline,
)
from .pipeline import TelemetryPoint, load_telemetry
