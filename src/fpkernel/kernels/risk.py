#!/usr/bin/env python3
# SPDX-License-Identifier: MIT
# Copyright (c) 2025 KernelSight AI
"""
Risk aggregation across the three signal roles.

    risk = 0.30*(1 - k2_rssi) + 0.30*(1 - k2_latency) + 0.10*(1 - k2_txerr)
         + 0.05*(k1_rssi + k1_latency + k1_txerr)
         + 0.05*(k4_latency + k4_txerr)
         + 0.02*k3_latency

Stability dominates. Latency is the only signal whose oscillation and
boundary violations are weighted in together with tx-error oscillation.
"""

from dataclasses import dataclass
from enum import Enum


class RiskLevel(Enum):
    LOW = "LOW"
    MEDIUM = "MEDIUM"
    HIGH = "HIGH"


RISK_WEIGHTS = {
    'k2_rssi': 0.30,
    'k2_latency': 0.30,
    'k2_txerr': 0.10,
    'k1': 0.05,
    'k4': 0.05,
    'k3_latency': 0.02,
}

RISK_HIGH = 0.8
RISK_MEDIUM = 0.4


@dataclass(frozen=True)
class RiskInputs:
    """Indicator values that take part in the risk score."""
    k1_rssi: float
    k2_rssi: float
    k1_latency: float
    k2_latency: float
    k3_latency: float
    k4_latency: float
    k1_txerr: float
    k2_txerr: float
    k4_txerr: float


def compute_risk_score(inputs: RiskInputs) -> float:
    w = RISK_WEIGHTS
    return (
        w['k2_rssi'] * (1.0 - inputs.k2_rssi)
        + w['k2_latency'] * (1.0 - inputs.k2_latency)
        + w['k2_txerr'] * (1.0 - inputs.k2_txerr)
        + w['k1'] * (inputs.k1_rssi + inputs.k1_latency + inputs.k1_txerr)
        + w['k4'] * (inputs.k4_latency + inputs.k4_txerr)
        + w['k3_latency'] * inputs.k3_latency
    )


def classify_risk(score: float) -> RiskLevel:
    if score > RISK_HIGH:
        return RiskLevel.HIGH
    if score > RISK_MEDIUM:
        return RiskLevel.MEDIUM
    return RiskLevel.LOW
