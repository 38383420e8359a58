#!/usr/bin/env python3
# SPDX-License-Identifier: MIT
# Copyright (c) 2025 KernelSight AI
"""
Per-domain kernel configuration.

Window lengths are counted in samples at the domain's sample interval:

    DOCSIS  30s   short 10  (5 min)   mid 60 (30 min)   long 720 (6 h)
    FWA     10s   short 6   (1 min)   mid 90 (15 min)   long 720 (2 h)
    WIFI     5s   short 6   (30 s)    mid 60 (5 min)    long 720 (1 h)

Several fields (drift thresholds, variance_threshold, min_samples,
smoothing_factor, high_percentile, derivative_threshold,
min_consecutive_hits, min_switches, min_unique_states, max_idle_gap_sec)
are part of the schema but not read by any indicator. Boundary
derivative limits come from BoundaryLimits.max_derivative only.
"""

import copy
import json
import logging
from dataclasses import asdict, dataclass, field, fields, is_dataclass, replace
from enum import Enum
from pathlib import Path
from typing import Any, Dict, Mapping, Optional, Tuple, Union

from ..kernels.windows import WindowSizes

logger = logging.getLogger(__name__)


class Domain(Enum):
    PON = "PON"
    DOCSIS = "DOCSIS"
    FWA = "FWA"
    MDU = "MDU"
    WIFI = "WIFI"

    @classmethod
    def parse(cls, name: Union[str, 'Domain']) -> 'Domain':
        if isinstance(name, Domain):
            return name
        key = name.strip().upper()
        if key == 'MESH':
            return cls.WIFI
        try:
            return cls(key)
        except ValueError:
            known = ', '.join(d.value for d in cls)
            raise ValueError(f"Unknown domain '{name}' (known: {known})") from None


@dataclass(frozen=True)
class DriftThresholds:
    warning: float = 0.2
    alert: float = 0.4
    critical: float = 0.7


@dataclass(frozen=True)
class DriftConfig:
    short_window_samples: int = 20
    long_window_samples: int = 720
    thresholds: DriftThresholds = field(default_factory=DriftThresholds)
    metrics: Tuple[str, ...] = ()


@dataclass(frozen=True)
class StabilityConfig:
    window_samples: int = 60
    variance_threshold: float = 0.25
    min_samples: int = 20
    smoothing_factor: float = 0.2
    metrics: Tuple[str, ...] = ()


@dataclass(frozen=True)
class BoundaryConfig:
    window_samples: int = 60
    high_percentile: float = 0.98
    derivative_threshold: float = 3.0
    min_consecutive_hits: int = 3
    metrics: Tuple[str, ...] = ()


@dataclass(frozen=True)
class OscillationConfig:
    window_seconds: int = 600
    window_samples: int = 20
    min_switches: int = 3
    min_unique_states: int = 2
    max_idle_gap_sec: int = 240
    metrics: Tuple[str, ...] = ()


@dataclass(frozen=True)
class DomainConfig:
    sample_interval_sec: int = 30
    drift: DriftConfig = field(default_factory=DriftConfig)
    stability: StabilityConfig = field(default_factory=StabilityConfig)
    boundary: BoundaryConfig = field(default_factory=BoundaryConfig)
    oscillation: OscillationConfig = field(default_factory=OscillationConfig)

    def window_sizes(self) -> WindowSizes:
        """short = drift short window, mid = stability window, long = drift long window."""
        return WindowSizes(
            short=self.drift.short_window_samples,
            mid=self.stability.window_samples,
            long=self.drift.long_window_samples,
        )

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


GLOBAL_DEFAULTS = DomainConfig()


def _domain(interval, drift, stability, boundary, oscillation) -> DomainConfig:
    return DomainConfig(
        sample_interval_sec=interval,
        drift=replace(GLOBAL_DEFAULTS.drift, **drift),
        stability=replace(GLOBAL_DEFAULTS.stability, **stability),
        boundary=replace(GLOBAL_DEFAULTS.boundary, **boundary),
        oscillation=replace(GLOBAL_DEFAULTS.oscillation, **oscillation),
    )


DOMAIN_CONFIGS: Dict[Domain, DomainConfig] = {
    Domain.PON: _domain(
        30,
        drift={'metrics': ('rx_power_dBm', 'tx_bias_mA', 'laser_temp_C')},
        stability={'metrics': ('rx_power_dBm', 'laser_temp_C')},
        boundary={'metrics': ('rx_power_dBm', 'tx_bias_mA')},
        oscillation={},
    ),
    Domain.DOCSIS: _domain(
        30,
        drift={'short_window_samples': 10, 'long_window_samples': 720,
               'metrics': ('us_snr_dB', 'ds_snr_dB', 'us_mer_dB', 'ds_mer_dB',
                           'corrected_cw', 'uncorrectable_cw')},
        stability={'window_samples': 60,
                   'metrics': ('us_snr_dB', 'us_mer_dB', 'latency_p95',
                               't3_timeout_count', 't4_timeout_count')},
        boundary={'window_samples': 60,
                  'metrics': ('us_utilization', 'ds_utilization', 'uncorrectable_cw',
                              'latency_p95')},
        oscillation={'window_seconds': 300, 'window_samples': 10,
                     'metrics': ('profile_change_count', 't3_timeout_count')},
    ),
    Domain.FWA: _domain(
        10,
        drift={'short_window_samples': 6, 'long_window_samples': 720,
               'metrics': ('rsrp_dBm', 'sinr_dB', 'bler_dl', 'throughput_dl_mbps',
                           'prb_utilization_dl')},
        stability={'window_samples': 90,
                   'metrics': ('sinr_dB', 'rsrp_dBm', 'latency_p95', 'harq_retx_dl')},
        boundary={'window_samples': 90,
                  'metrics': ('prb_utilization_dl', 'prb_utilization_ul',
                              'throughput_dl_mbps', 'latency_p95')},
        oscillation={'window_seconds': 60, 'window_samples': 6,
                     'metrics': ('handover_count', 'beam_switch_count', 'sinr_dB')},
    ),
    Domain.MDU: _domain(
        5,
        drift={'short_window_samples': 24, 'long_window_samples': 2160,
               'metrics': ('rssi_dBm', 'snr_dB', 'channel_utilization')},
        stability={'window_samples': 120,
                   'metrics': ('rssi_dBm', 'channel_utilization', 'retry_rate')},
        boundary={'window_samples': 120, 'metrics': ('channel_utilization', 'retry_rate')},
        oscillation={'window_seconds': 120, 'window_samples': 24},
    ),
    Domain.WIFI: _domain(
        5,
        drift={'short_window_samples': 6, 'long_window_samples': 720,
               'metrics': ('rssi_dBm', 'snr_dB', 'mcs', 'vht_rate_mbps')},
        stability={'window_samples': 60,
                   'metrics': ('rssi_dBm', 'snr_dB', 'latency_p95', 'retry_rate')},
        boundary={'window_samples': 60,
                  'metrics': ('channel_utilization', 'client_count', 'latency_p95')},
        oscillation={'window_seconds': 30, 'window_samples': 6,
                     'metrics': ('roam_count', 'dfs_event_count', 'channel_change_count')},
    ),
}


def _merge(base: Any, overrides: Mapping[str, Any], path: str = '') -> Any:
    """Return a copy of dataclass base with overrides applied recursively."""
    known = {f.name: f for f in fields(base)}
    changes = {}
    for key, value in overrides.items():
        if key not in known:
            where = path or 'domain config'
            raise ValueError(f"Unknown key '{key}' in {where}")
        current = getattr(base, key)
        if is_dataclass(current):
            if not isinstance(value, Mapping):
                raise ValueError(f"'{path}{key}' expects a mapping, got {type(value).__name__}")
            changes[key] = _merge(current, value, f"{path}{key}.")
        elif isinstance(current, tuple):
            changes[key] = tuple(value)
        else:
            changes[key] = type(current)(value)
    return replace(base, **changes)


def load_domain_config(domain: Union[str, Domain],
                       overrides: Optional[Mapping[str, Any]] = None) -> DomainConfig:
    """
    Domain defaults with optional nested overrides.

    Example:
        load_domain_config('DOCSIS', {'drift': {'short_window_samples': 20}})
    """
    base = DOMAIN_CONFIGS[Domain.parse(domain)]
    if not overrides:
        return base
    return _merge(base, copy.deepcopy(dict(overrides)))


def load_domain_config_file(path: Union[str, Path], domain: Union[str, Domain]) -> DomainConfig:
    """
    Load overrides from a JSON file.

    The file may hold overrides directly, or a 'domains' section keyed by
    domain name whose matching entry is applied after the top-level ones:

        {"drift": {...}, "domains": {"DOCSIS": {"stability": {...}}}}
    """
    domain = Domain.parse(domain)
    with open(path, 'r') as f:
        data = json.load(f)
    if not isinstance(data, dict):
        raise ValueError(f"{path}: expected a JSON object")

    per_domain = data.pop('domains', {}) or {}
    config = load_domain_config(domain, data)
    for name, section in per_domain.items():
        if Domain.parse(name) is domain:
            config = _merge(config, section)
    logger.info(f"Loaded {domain.value} configuration overrides from {path}")
    return config
