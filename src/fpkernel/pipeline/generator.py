#!/usr/bin/env python3
# SPDX-License-Identifier: MIT
# Copyright (c) 2025 KernelSight AI
"""
Synthetic telemetry generator for demos and tests.

Each field follows one pattern (constant, linear, sine, random,
categorical, spike) plus optional uniform noise. Generation is a fold:
advance() maps (state, step) to (next state, emitted sample) and carries
no hidden state between calls. Randomness comes from a seeded numpy
Generator so a seed reproduces a series exactly.
"""

import logging
import math
import time
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Mapping, Optional, Sequence, Tuple, Union

import numpy as np

from ..config.domains import DOMAIN_CONFIGS, Domain
from .samples import TelemetryPoint

logger = logging.getLogger(__name__)


class FieldPattern(Enum):
    CONSTANT = "constant"
    LINEAR = "linear"
    SINE = "sine"
    RANDOM = "random"
    CATEGORICAL = "categorical"
    SPIKE = "spike"


@dataclass(frozen=True)
class FieldGenConfig:
    """How one field evolves over the generated series."""
    pattern: FieldPattern
    initial: Any
    noise: float = 0.0
    slope: float = 0.0          # linear: change per step
    amplitude: float = 10.0     # sine
    period: float = 50.0        # sine, in steps
    phase: float = 0.0          # sine, in steps
    options: Sequence[Any] = ()  # categorical
    switch_prob: float = 0.1    # categorical
    spike_prob: float = 0.01    # spike
    spike_val: Union[float, Tuple[float, float]] = 0.0  # value or (low, high)


@dataclass(frozen=True)
class DataGenConfig:
    sample_count: int
    interval_ms: int
    fields: Mapping[str, FieldGenConfig]


@dataclass(frozen=True)
class GeneratorState:
    """Clean (noise-free) value per field and the next step number."""
    step: int
    values: Mapping[str, Any]


def initial_state(config: DataGenConfig) -> GeneratorState:
    return GeneratorState(step=0, values={k: cfg.initial for k, cfg in config.fields.items()})


def _step_field(cfg: FieldGenConfig, clean: Any, step: int,
                rng: np.random.Generator) -> Tuple[Any, Any]:
    """Return (next clean value, value to emit before noise)."""
    pattern = cfg.pattern
    if pattern is FieldPattern.CONSTANT:
        return clean, cfg.initial
    if pattern is FieldPattern.LINEAR:
        value = clean + cfg.slope
        return value, value
    if pattern is FieldPattern.SINE:
        value = cfg.initial + math.sin(((step + cfg.phase) * 2 * math.pi) / cfg.period) * cfg.amplitude
        return clean, value
    if pattern is FieldPattern.RANDOM:
        return clean, cfg.initial
    if pattern is FieldPattern.CATEGORICAL:
        value = clean
        if cfg.options and rng.random() < cfg.switch_prob:
            value = cfg.options[int(rng.integers(len(cfg.options)))]
        return value, value
    if pattern is FieldPattern.SPIKE:
        value = cfg.initial
        if rng.random() < cfg.spike_prob:
            if isinstance(cfg.spike_val, (tuple, list)):
                low, high = cfg.spike_val
                value = low + rng.random() * (high - low)
            else:
                value = cfg.spike_val
        return clean, value
    raise ValueError(f"Unknown field pattern {pattern!r}")


def advance(state: GeneratorState, config: DataGenConfig,
            rng: np.random.Generator) -> Tuple[GeneratorState, Dict[str, Any]]:
    """One generation step: next state plus the emitted field values."""
    next_values = {}
    emitted = {}
    for name, cfg in config.fields.items():
        clean, value = _step_field(cfg, state.values[name], state.step, rng)
        next_values[name] = clean
        if isinstance(value, (int, float)) and not isinstance(value, bool):
            if cfg.noise:
                value = value + (rng.random() - 0.5) * 2 * cfg.noise
            value = round(float(value), 2)
        emitted[name] = value
    return GeneratorState(step=state.step + 1, values=next_values), emitted


def generate_flexible_data(config: DataGenConfig, seed: Optional[int] = None,
                           end_ms: Optional[float] = None) -> List[TelemetryPoint]:
    """
    Generate config.sample_count points, the last one interval_ms before
    end_ms (now when None).
    """
    if config.sample_count < 0:
        raise ValueError(f"sample_count must be >= 0, got {config.sample_count}")
    rng = np.random.default_rng(seed)
    end_ms = time.time() * 1000 if end_ms is None else end_ms

    state = initial_state(config)
    points = []
    for i in range(config.sample_count):
        state, fields = advance(state, config, rng)
        timestamp = end_ms - (config.sample_count - i) * config.interval_ms
        points.append(TelemetryPoint(timestamp=timestamp, fields=fields))
    return points


# ============================================================
# Demo scenarios
# ============================================================

@dataclass(frozen=True)
class DemoScenario:
    id: str
    domain: Domain
    title: str
    description: str
    kernel_focus: str
    primary_metrics: Tuple[str, ...] = field(default_factory=tuple)


DEMO_SCENARIOS: List[DemoScenario] = [
    DemoScenario('PON-1', Domain.PON, 'LOS Early Warning',
                 'Detect fiber aging / dirty connectors before failure.',
                 'drift', ('rx_power_dBm', 'tx_bias_mA')),
    DemoScenario('PON-2', Domain.PON, 'Temperature-Driven Drift',
                 'Laser temp increases, bias rises, rx-power fluctuates.',
                 'drift', ('laser_temp_C', 'tx_bias_mA')),
    DemoScenario('PON-3', Domain.PON, 'Splitter Imbalance',
                 'Abnormal drift profile on specific splitters.',
                 'stability', ('rx_power_dBm',)),
    DemoScenario('DOC-1', Domain.DOCSIS, 'Rogue Modem Signature',
                 'Detect abnormal periodic bursts.',
                 'boundary', ('us_snr_dB', 'uncorrectable_cw')),
    DemoScenario('DOC-2', Domain.DOCSIS, 'Periodic Ingress / Noise',
                 'Boundary kernel picks repeating noise intervals.',
                 'boundary', ('us_mer_dB', 'corrected_cw')),
    DemoScenario('DOC-3', Domain.DOCSIS, 'Aging Drop Cable',
                 'SNR drift plus errors indicating physical decay.',
                 'drift', ('us_snr_dB', 'ds_snr_dB')),
    DemoScenario('FWA-1', Domain.FWA, 'Cell-Edge Oscillation',
                 'RSSI / RSRP seesaw leading to throughput collapse.',
                 'oscillation', ('rsrp_dBm', 'sinr_dB')),
    DemoScenario('FWA-2', Domain.FWA, 'Weather-Driven Boundary',
                 'Rain / fog degrade SINR in predictable patterns.',
                 'boundary', ('sinr_dB', 'rsrp_dBm')),
    DemoScenario('FWA-3', Domain.FWA, 'Multi-Carrier Handover',
                 'Device flaps between eNBs/NR cells.',
                 'oscillation', ('handover_count', 'rsrp_dBm')),
    DemoScenario('MDU-1', Domain.MDU, 'Weak Units Detection',
                 'Identify unstable rooms before tenants move in.',
                 'drift', ('rssi_dBm',)),
    DemoScenario('MDU-2', Domain.MDU, 'Interference Cluster',
                 'Shared walls where RSSI/SNR consistently degrade.',
                 'stability', ('retry_rate', 'snr_dB')),
    DemoScenario('MDU-3', Domain.MDU, 'Aging Wi-Fi Zones',
                 'Track drifting areas (kitchens, closets).',
                 'drift', ('rssi_dBm', 'channel_utilization')),
    DemoScenario('WIFI-1', Domain.WIFI, 'Parent Flapping',
                 'Nodes switching parent every 20-90 sec.',
                 'oscillation', ('roam_count', 'rssi_dBm')),
    DemoScenario('WIFI-2', Domain.WIFI, 'Backhaul Degradation',
                 'RSSI and throughput drift, predict collapse.',
                 'drift', ('rssi_dBm', 'vht_rate_mbps')),
    DemoScenario('WIFI-3', Domain.WIFI, 'Auto-Stabilization',
                 'Corrective actions (power, topology) impact.',
                 'stability', ('rssi_dBm', 'retry_rate')),
]

P = FieldPattern

# Latency and loss are present in every scenario so the multi-signal
# risk always has real latency / error-rate inputs.
COMMON_FIELDS: Dict[str, FieldGenConfig] = {
    'latency_p95': FieldGenConfig(P.RANDOM, 15.0, noise=1.0),
    'loss_rate': FieldGenConfig(P.SPIKE, 0.0, spike_prob=0.01, spike_val=(0.01, 0.05)),
}

SCENARIO_FIELDS: Dict[str, Dict[str, FieldGenConfig]] = {
    'PON-1': {
        'rx_power_dBm': FieldGenConfig(P.LINEAR, -18.0, slope=-0.05, noise=0.25),
        'tx_bias_mA': FieldGenConfig(P.CONSTANT, 30.0),
        'laser_temp_C': FieldGenConfig(P.CONSTANT, 45.0),
    },
    'PON-2': {
        'laser_temp_C': FieldGenConfig(P.LINEAR, 45.0, slope=0.04, noise=0.125),
        'tx_bias_mA': FieldGenConfig(P.LINEAR, 30.0, slope=0.06, noise=0.25),
        'rx_power_dBm': FieldGenConfig(P.RANDOM, -18.0, noise=0.25),
    },
    'PON-3': {
        'rx_power_dBm': FieldGenConfig(P.RANDOM, -18.0, noise=0.25),
    },
    'DOC-1': {
        'us_snr_dB': FieldGenConfig(P.RANDOM, 36.0, noise=0.25),
        'uncorrectable_cw': FieldGenConfig(P.SPIKE, 0, spike_prob=0.05, spike_val=(1, 50)),
    },
    'DOC-2': {
        'us_mer_dB': FieldGenConfig(P.SPIKE, 36.0, noise=0.25, spike_prob=0.16,
                                    spike_val=(22.5, 27.5)),
        'corrected_cw': FieldGenConfig(P.SPIKE, 5, spike_prob=0.16, spike_val=(500, 1500)),
    },
    'DOC-3': {
        'us_snr_dB': FieldGenConfig(P.LINEAR, 36.0, slope=-0.01, noise=0.25),
        'ds_snr_dB': FieldGenConfig(P.LINEAR, 38.0, slope=-0.01, noise=0.25),
    },
    'FWA-1': {
        'rsrp_dBm': FieldGenConfig(P.SINE, -100.0, amplitude=5.0, period=10 * math.pi,
                                   noise=0.25),
        'sinr_dB': FieldGenConfig(P.SINE, 10.0, amplitude=8.0, period=10 * math.pi,
                                  noise=0.25),
    },
    'FWA-2': {
        'sinr_dB': FieldGenConfig(P.SINE, 18.0, amplitude=6.0, period=400.0, noise=0.5),
        'rsrp_dBm': FieldGenConfig(P.RANDOM, -95.0, noise=0.25),
    },
    'FWA-3': {
        'handover_count': FieldGenConfig(P.CATEGORICAL, 0, options=(0, 1), switch_prob=0.1),
        'rsrp_dBm': FieldGenConfig(P.RANDOM, -91.0, noise=1.0),
    },
    'MDU-1': {
        'rssi_dBm': FieldGenConfig(P.LINEAR, -65.0, slope=-0.005, noise=0.25),
    },
    'MDU-2': {
        'retry_rate': FieldGenConfig(P.RANDOM, 0.05, noise=0.03),
        'snr_dB': FieldGenConfig(P.RANDOM, 35.0, noise=2.0),
    },
    'MDU-3': {
        'rssi_dBm': FieldGenConfig(P.LINEAR, -65.0, slope=-0.004, noise=0.25),
        'channel_utilization': FieldGenConfig(P.LINEAR, 30.0, slope=0.01, noise=1.0),
    },
    'WIFI-1': {
        'parent_id': FieldGenConfig(P.CATEGORICAL, 'Node_A', options=('Node_A', 'Node_B'),
                                    switch_prob=0.1),
        'roam_count': FieldGenConfig(P.SPIKE, 0, spike_prob=0.1, spike_val=1),
        'rssi_dBm': FieldGenConfig(P.RANDOM, -65.0, noise=0.25),
    },
    'WIFI-2': {
        'rssi_dBm': FieldGenConfig(P.LINEAR, -65.0, slope=-0.08, noise=0.25),
        'vht_rate_mbps': FieldGenConfig(P.LINEAR, 600.0, slope=-1.0),
    },
    'WIFI-3': {
        'rssi_dBm': FieldGenConfig(P.RANDOM, -65.0, noise=0.25),
        'retry_rate': FieldGenConfig(P.RANDOM, 0.05, noise=0.01),
    },
}


def get_scenario(scenario_id: str) -> DemoScenario:
    for scenario in DEMO_SCENARIOS:
        if scenario.id == scenario_id.upper():
            return scenario
    known = ', '.join(s.id for s in DEMO_SCENARIOS)
    raise ValueError(f"Unknown scenario '{scenario_id}' (known: {known})")


def scenario_gen_config(scenario: DemoScenario, sample_count: Optional[int] = None) -> DataGenConfig:
    """
    Generator config for a scenario: enough samples for 1.5x the domain's
    long window at the domain's sample interval.
    """
    domain_config = DOMAIN_CONFIGS[scenario.domain]
    if sample_count is None:
        sample_count = math.ceil(domain_config.drift.long_window_samples * 1.5)
    fields = dict(SCENARIO_FIELDS[scenario.id])
    fields.update(COMMON_FIELDS)
    return DataGenConfig(
        sample_count=sample_count,
        interval_ms=int(domain_config.sample_interval_sec * 1000),
        fields=fields,
    )


def generate_scenario_data(scenario_id: str, seed: Optional[int] = None,
                           sample_count: Optional[int] = None,
                           end_ms: Optional[float] = None) -> List[TelemetryPoint]:
    scenario = get_scenario(scenario_id)
    config = scenario_gen_config(scenario, sample_count)
    logger.info(f"Generating {config.sample_count} samples for scenario {scenario.id} "
                f"({scenario.title})")
    return generate_flexible_data(config, seed=seed, end_ms=end_ms)
