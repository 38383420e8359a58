#!/usr/bin/env python3
# SPDX-License-Identifier: MIT
# Copyright (c) 2025 KernelSight AI
"""
Point Analyzer - run all four kernel indicators for one sample index.

Single-signal mode analyzes one target signal and computes the
three-role risk from whatever the other roles resolve to (real fields or
their neutral defaults). Multi-signal mode analyzes each role as its own
target and rebuilds the risk from the three sub-results.

The two risks are not comparable on the same data: a single-signal risk
over one real series is scored against placeholder latency (20) and
error-rate (0) signals.

The analyzer never raises for insufficient history: it returns None when
the index is out of bounds or below the short window length.
"""

import logging
from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType
from typing import Any, Dict, Mapping, Optional, Sequence

import numpy as np

from ..kernels.indicators import (
    BoundaryLimits,
    BoundaryStatus,
    CURRENT_VARIANTS,
    DriftStatus,
    Indicator,
    OscillationLevel,
    StabilityStatus,
    judge_boundary,
    judge_drift,
    judge_oscillation,
    judge_stability,
    make_indicator,
)
from ..kernels.risk import RiskInputs, RiskLevel, classify_risk, compute_risk_score
from ..kernels.statistics import mean
from ..kernels.windows import WindowSizes, extract_windows
from ..pipeline.samples import (
    Accessor,
    TelemetryPoint,
    field_accessor,
    project,
    project_numbers,
)

logger = logging.getLogger(__name__)


class SignalRole(Enum):
    """The three signal axes combined by the risk score."""
    MAGNITUDE = "RSSI"
    LATENCY = "Latency"
    ERROR_RATE = "TxErr"

    @classmethod
    def parse(cls, name: str) -> 'SignalRole':
        """Accept a member name ('latency') or a signal key ('Latency')."""
        key = name.strip()
        for role in cls:
            if key.upper() == role.name or key.lower() == role.value.lower():
                return role
        aliases = {'rssi': cls.MAGNITUDE, 'error': cls.ERROR_RATE, 'txerr': cls.ERROR_RATE,
                   'loss': cls.ERROR_RATE}
        if key.lower() in aliases:
            return aliases[key.lower()]
        raise ValueError(f"Unknown signal role '{name}'")


# Neutral values used when a role has no field in the data.
ROLE_DEFAULTS: Dict[SignalRole, float] = {
    SignalRole.MAGNITUDE: 0.0,
    SignalRole.LATENCY: 20.0,
    SignalRole.ERROR_RATE: 0.0,
}

DEFAULT_ACCESSORS: Dict[SignalRole, Accessor] = {
    SignalRole.MAGNITUDE: field_accessor(
        'rssi_dBm', 'rsrp_dBm', 'rx_power_dBm', 'us_snr_dB', 'snr_dB', 'sinr_dB'),
    SignalRole.LATENCY: field_accessor('latency_p95', 'latency_ms', 'latency'),
    SignalRole.ERROR_RATE: field_accessor(
        'tx_error_rate', 'loss_rate', 'retry_rate', 'bler_dl'),
}

DEFAULT_BOUNDARY_LIMITS: Dict[SignalRole, BoundaryLimits] = {
    SignalRole.MAGNITUDE: BoundaryLimits(),
    SignalRole.LATENCY: BoundaryLimits(min_val=0.0, max_val=70.0),
    SignalRole.ERROR_RATE: BoundaryLimits(min_val=0.0),
}


@dataclass(frozen=True)
class AnalyzerSettings:
    """
    Everything about a point analysis that is not the data itself.

    Attributes:
        accessors: How each role is read from a TelemetryPoint
        defaults: Value substituted when a role cannot be read
        boundary_limits: Boundary indicator limits per role
        variants: Indicator variant per kind (see kernels.indicators)
        boundary_span: 'current' sample or 'mid' window for the count form
        strict: Raise TelemetryValidationError instead of defaulting
    """
    accessors: Mapping[SignalRole, Accessor] = field(
        default_factory=lambda: dict(DEFAULT_ACCESSORS))
    defaults: Mapping[SignalRole, float] = field(
        default_factory=lambda: dict(ROLE_DEFAULTS))
    boundary_limits: Mapping[SignalRole, BoundaryLimits] = field(
        default_factory=lambda: dict(DEFAULT_BOUNDARY_LIMITS))
    variants: Mapping[str, str] = field(default_factory=lambda: dict(CURRENT_VARIANTS))
    boundary_span: str = 'current'
    strict: bool = False

    def build_indicators(self, role: SignalRole) -> Dict[str, Indicator]:
        limits = self.boundary_limits.get(role, BoundaryLimits())
        return {
            kind: make_indicator(kind, self.variants.get(kind), limits=limits,
                                 boundary_span=self.boundary_span)
            for kind in CURRENT_VARIANTS
        }


@dataclass(frozen=True)
class KernelResult:
    """Indicator scores, statuses and risk for one sample index."""
    index: int
    drift_score: float
    drift_status: DriftStatus
    stability_score: float
    stability_status: StabilityStatus
    boundary_count: int
    boundary_status: BoundaryStatus
    oscillation_score: float
    oscillation_level: OscillationLevel
    risk_score: float
    overall_risk: RiskLevel
    mean_long: float
    mean_mid: float
    mean_short: float
    role: Optional[SignalRole] = None
    signals: Optional[Mapping[str, 'KernelResult']] = None

    @property
    def k1(self) -> float:
        return self.drift_score

    @property
    def k2(self) -> float:
        return self.stability_score

    @property
    def k3(self) -> int:
        return self.boundary_count

    @property
    def k4(self) -> float:
        return self.oscillation_score

    def to_dict(self) -> Dict[str, Any]:
        """Flat interchange record (camelCase keys)."""
        out = {
            'index': self.index,
            'driftScore': self.drift_score,
            'driftStatus': self.drift_status.value,
            'stabilityScore': self.stability_score,
            'stabilityStatus': self.stability_status.value,
            'boundaryStatus': self.boundary_status.value,
            'oscillationLevel': self.oscillation_level.value,
            'overallRisk': self.overall_risk.value,
            'meanLong': self.mean_long,
            'meanMid': self.mean_mid,
            'meanShort': self.mean_short,
            'k1': self.k1,
            'k2': self.k2,
            'k3': self.k3,
            'k4': self.k4,
            'riskScore': self.risk_score,
        }
        if self.signals is not None:
            out['signals'] = {name: sub.to_dict() for name, sub in self.signals.items()}
        return out


@dataclass(frozen=True)
class SignalBundle:
    """
    A series projected once onto the target signal and all three roles.

    offset is the position of values[0] in the caller's series.
    """
    target: np.ndarray
    roles: Mapping[SignalRole, np.ndarray]
    primary_role: SignalRole
    indicators: Mapping[SignalRole, Mapping[str, Indicator]]
    offset: int = 0

    def __len__(self) -> int:
        return int(self.target.size)

    def with_primary(self, role: SignalRole) -> 'SignalBundle':
        """Same data with another role as the target signal."""
        return SignalBundle(
            target=self.roles[role],
            roles=self.roles,
            primary_role=role,
            indicators=self.indicators,
            offset=self.offset,
        )


def is_structured(series: Sequence[Any]) -> bool:
    """True when series holds records (TelemetryPoint or dicts), not numbers."""
    return len(series) > 0 and isinstance(series[0], (TelemetryPoint, Mapping))


def prepare_signals(series: Sequence[Any],
                    primary_role: SignalRole = SignalRole.MAGNITUDE,
                    field_name: Optional[str] = None,
                    settings: Optional[AnalyzerSettings] = None,
                    offset: int = 0,
                    strict_all_roles: bool = False) -> SignalBundle:
    """
    Project series onto the target signal and the three roles.

    Args:
        series: Raw numbers, or TelemetryPoints / dicts
        primary_role: Role the target signal plays in the risk formula
        field_name: Target field for structured input; the primary
            role's accessor when None
        settings: Analyzer settings
        offset: Position of series[0] in a longer series (error messages)
        strict_all_roles: Apply strict validation to every role, not just
            the target (multi-signal mode)
    """
    settings = settings or AnalyzerSettings()
    n = len(series)
    roles: Dict[SignalRole, np.ndarray] = {}

    if is_structured(series):
        for role in SignalRole:
            if role is primary_role and field_name is not None:
                roles[role] = project(series, field_accessor(field_name),
                                      settings.defaults[role], strict=settings.strict,
                                      label=field_name, offset=offset)
                continue
            accessor = settings.accessors.get(role, DEFAULT_ACCESSORS[role])
            strict = settings.strict and (strict_all_roles or role is primary_role)
            roles[role] = project(series, accessor, settings.defaults[role],
                                  strict=strict, label=role.value, offset=offset)
    else:
        for role in SignalRole:
            if role is primary_role:
                roles[role] = project_numbers(series, strict=settings.strict, label=role.value,
                                              default=settings.defaults[role], offset=offset)
            else:
                roles[role] = np.full(n, settings.defaults[role], dtype=float)

    indicators = {role: settings.build_indicators(role) for role in SignalRole}
    return SignalBundle(
        target=roles[primary_role],
        roles=MappingProxyType(roles),
        primary_role=primary_role,
        indicators=MappingProxyType(indicators),
        offset=offset,
    )


def _has_history(n: int, index: int, sizes: WindowSizes, offset: int = 0) -> bool:
    """index is relative to a slice starting at offset in the full series."""
    if index < 0 or index >= n:
        logger.debug("Index %d outside series of length %d", index + offset, n + offset)
        return False
    if index + offset < sizes.short:
        logger.debug("Index %d below short window %d; not analyzable yet",
                     index + offset, sizes.short)
        return False
    return True


def _readings(values: np.ndarray, index: int, sizes: WindowSizes,
              indicators: Mapping[str, Indicator]):
    windows = extract_windows(values, index, sizes)
    readings = {kind: ind.evaluate(windows) for kind, ind in indicators.items()}
    return windows, readings


def analyze_prepared(bundle: SignalBundle, index: int, sizes: WindowSizes) -> Optional[KernelResult]:
    """
    Single-signal analysis on an already projected bundle.

    index is relative to the bundle (bundle.offset is added to the
    reported index).
    """
    if not _has_history(len(bundle), index, sizes, bundle.offset):
        return None

    primary = bundle.primary_role
    windows, target = _readings(bundle.target, index, sizes, bundle.indicators[primary])

    per_role = {primary: target}
    for role in SignalRole:
        if role is not primary:
            _, per_role[role] = _readings(bundle.roles[role], index, sizes,
                                          bundle.indicators[role])

    risk_score = compute_risk_score(RiskInputs(
        k1_rssi=per_role[SignalRole.MAGNITUDE]['drift'].score,
        k2_rssi=per_role[SignalRole.MAGNITUDE]['stability'].score,
        k1_latency=per_role[SignalRole.LATENCY]['drift'].score,
        k2_latency=per_role[SignalRole.LATENCY]['stability'].score,
        k3_latency=per_role[SignalRole.LATENCY]['boundary'].score,
        k4_latency=per_role[SignalRole.LATENCY]['oscillation'].score,
        k1_txerr=per_role[SignalRole.ERROR_RATE]['drift'].score,
        k2_txerr=per_role[SignalRole.ERROR_RATE]['stability'].score,
        k4_txerr=per_role[SignalRole.ERROR_RATE]['oscillation'].score,
    ))

    return KernelResult(
        index=index + bundle.offset,
        drift_score=target['drift'].score,
        drift_status=target['drift'].status,
        stability_score=target['stability'].score,
        stability_status=target['stability'].status,
        boundary_count=target['boundary'].score,
        boundary_status=target['boundary'].status,
        oscillation_score=target['oscillation'].score,
        oscillation_level=target['oscillation'].status,
        risk_score=risk_score,
        overall_risk=classify_risk(risk_score),
        mean_long=mean(windows.long),
        mean_mid=mean(windows.mid),
        mean_short=mean(windows.short),
        role=primary,
    )


def analyze_prepared_multi(bundle: SignalBundle, index: int,
                           sizes: WindowSizes) -> Optional[KernelResult]:
    """Multi-signal analysis on an already projected bundle."""
    subs: Dict[SignalRole, KernelResult] = {}
    for role in SignalRole:
        sub = analyze_prepared(bundle.with_primary(role), index, sizes)
        if sub is None:
            return None
        subs[role] = sub

    rssi = subs[SignalRole.MAGNITUDE]
    latency = subs[SignalRole.LATENCY]
    txerr = subs[SignalRole.ERROR_RATE]

    # Sub-results each scored risk with their own view of the other roles;
    # only their indicator values are reused here.
    risk_score = compute_risk_score(RiskInputs(
        k1_rssi=rssi.k1, k2_rssi=rssi.k2,
        k1_latency=latency.k1, k2_latency=latency.k2,
        k3_latency=latency.k3, k4_latency=latency.k4,
        k1_txerr=txerr.k1, k2_txerr=txerr.k2, k4_txerr=txerr.k4,
    ))

    drift_avg = (rssi.k1 + latency.k1 + txerr.k1) / 3.0
    stability_avg = (rssi.k2 + latency.k2 + txerr.k2) / 3.0
    boundary_total = rssi.k3 + latency.k3 + txerr.k3
    oscillation_peak = max(rssi.k4, latency.k4, txerr.k4)

    return KernelResult(
        index=rssi.index,
        drift_score=drift_avg,
        drift_status=judge_drift(drift_avg),
        stability_score=stability_avg,
        stability_status=judge_stability(stability_avg),
        boundary_count=boundary_total,
        boundary_status=judge_boundary(boundary_total),
        oscillation_score=oscillation_peak,
        oscillation_level=judge_oscillation(oscillation_peak),
        risk_score=risk_score,
        overall_risk=classify_risk(risk_score),
        mean_long=rssi.mean_long,
        mean_mid=rssi.mean_mid,
        mean_short=rssi.mean_short,
        role=None,
        signals=MappingProxyType({role.value: subs[role] for role in SignalRole}),
    )


def _window_slice(series: Sequence[Any], index: int, sizes: WindowSizes):
    """Smallest prefix-clipped slice that still holds every window."""
    start = max(0, index - max(sizes.short, sizes.mid, sizes.long) + 1)
    return series[start:index + 1], start


def analyze_point(series: Sequence[Any], index: int,
                  sizes: Optional[WindowSizes] = None,
                  primary_role: SignalRole = SignalRole.MAGNITUDE,
                  field_name: Optional[str] = None,
                  settings: Optional[AnalyzerSettings] = None) -> Optional[KernelResult]:
    """
    Analyze one sample index of a single signal.

    Args:
        series: Raw numbers, or TelemetryPoints / dicts in timestamp order
        index: Target sample index
        sizes: Window lengths (defaults: short=20, mid=60, long=720)
        primary_role: Role of the target signal in the risk formula
        field_name: Target field for structured input
        settings: Analyzer settings

    Returns:
        KernelResult, or None when index is out of bounds or below the
        short window length
    """
    sizes = sizes or WindowSizes()
    if not _has_history(len(series), index, sizes):
        return None
    window_series, start = _window_slice(series, index, sizes)
    bundle = prepare_signals(window_series, primary_role, field_name, settings, offset=start)
    return analyze_prepared(bundle, index - start, sizes)


def analyze_point_multi(series: Sequence[Any], index: int,
                        sizes: Optional[WindowSizes] = None,
                        settings: Optional[AnalyzerSettings] = None) -> Optional[KernelResult]:
    """
    Analyze one sample index across the magnitude, latency and error-rate
    roles.

    The top-level drift/stability scores are averages of the three
    sub-results and are for display only; the risk is recomputed from the
    sub-results' k1..k4. The sub-results are kept under signals, keyed
    'RSSI', 'Latency' and 'TxErr'.
    """
    if len(series) and not is_structured(series):
        raise ValueError("Multi-signal analysis needs structured samples, not raw numbers")
    sizes = sizes or WindowSizes()
    if not _has_history(len(series), index, sizes):
        return None
    window_series, start = _window_slice(series, index, sizes)
    bundle = prepare_signals(window_series, SignalRole.MAGNITUDE, None, settings,
                             offset=start, strict_all_roles=True)
    return analyze_prepared_multi(bundle, index - start, sizes)
