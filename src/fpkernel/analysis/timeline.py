#!/usr/bin/env python3
# SPDX-License-Identifier: MIT
# Copyright (c) 2025 KernelSight AI
"""
Timeline analysis - one point analysis per sample index.

Each index only reads trailing data, so indices are independent. The
series is projected once and the per-index work can be fanned out to a
thread pool; results always come back in index order.
"""

import logging
from collections import Counter
from concurrent.futures import ThreadPoolExecutor
from typing import Any, Dict, List, Optional, Sequence

from ..kernels.risk import RiskLevel
from ..kernels.windows import WindowSizes
from .point_analyzer import (
    AnalyzerSettings,
    KernelResult,
    SignalRole,
    analyze_prepared,
    analyze_prepared_multi,
    is_structured,
    prepare_signals,
)

logger = logging.getLogger(__name__)


def analyze_timeline(series: Sequence[Any],
                     sizes: Optional[WindowSizes] = None,
                     primary_role: SignalRole = SignalRole.MAGNITUDE,
                     field_name: Optional[str] = None,
                     settings: Optional[AnalyzerSettings] = None,
                     multi: bool = False,
                     workers: Optional[int] = None) -> List[Optional[KernelResult]]:
    """
    Analyze every index of series.

    Args:
        series: Raw numbers, or TelemetryPoints / dicts in timestamp order
        sizes: Window lengths
        primary_role: Target role (single-signal mode)
        field_name: Target field (single-signal mode, structured input)
        settings: Analyzer settings
        multi: Use the multi-signal analyzer
        workers: Thread count; sequential when None or 1

    Returns:
        One entry per index; None for indices that are not analyzable yet
    """
    sizes = sizes or WindowSizes()
    if multi and len(series) and not is_structured(series):
        raise ValueError("Multi-signal analysis needs structured samples, not raw numbers")

    if multi:
        bundle = prepare_signals(series, SignalRole.MAGNITUDE, None, settings,
                                 strict_all_roles=True)
    else:
        bundle = prepare_signals(series, primary_role, field_name, settings)

    def analyze(index: int) -> Optional[KernelResult]:
        if multi:
            return analyze_prepared_multi(bundle, index, sizes)
        return analyze_prepared(bundle, index, sizes)

    indices = range(len(bundle))
    if workers and workers > 1:
        with ThreadPoolExecutor(max_workers=workers) as executor:
            results = list(executor.map(analyze, indices))
    else:
        results = [analyze(i) for i in indices]

    analyzed = sum(1 for r in results if r is not None)
    logger.info("Analyzed %d of %d samples (%s mode, windows %d/%d/%d)",
                analyzed, len(results), 'multi-signal' if multi else 'single-signal',
                sizes.short, sizes.mid, sizes.long)
    return results


def summarize_timeline(results: Sequence[Optional[KernelResult]]) -> Dict[str, Any]:
    """
    Summarize a timeline.

    Returns:
        Dict with:
        {
            'samples': 1080,
            'analyzed': 1060,
            'first_analyzed_index': 20,
            'risk_levels': {'LOW': 1000, 'MEDIUM': 50, 'HIGH': 10},
            'first_high_index': 950,
            'peak_risk_score': 0.93,
            'peak_risk_index': 1011,
            'latest': KernelResult or None
        }
    """
    analyzed = [r for r in results if r is not None]
    levels = Counter(r.overall_risk.value for r in analyzed)
    first_high = next((r.index for r in analyzed if r.overall_risk is RiskLevel.HIGH), None)
    peak = max(analyzed, key=lambda r: r.risk_score, default=None)

    return {
        'samples': len(results),
        'analyzed': len(analyzed),
        'first_analyzed_index': analyzed[0].index if analyzed else None,
        'risk_levels': {level.value: levels.get(level.value, 0) for level in RiskLevel},
        'first_high_index': first_high,
        'peak_risk_score': peak.risk_score if peak else None,
        'peak_risk_index': peak.index if peak else None,
        'latest': analyzed[-1] if analyzed else None,
    }
