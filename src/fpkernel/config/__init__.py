#!/usr/bin/env python3
# SPDX-License-Identifier: MIT
# Copyright (c) 2025 KernelSight AI
"""
Domain configuration: window lengths and target metrics per access
network domain.
"""

import os

from .domains import (
    Domain,
    DomainConfig,
    DriftConfig,
    DriftThresholds,
    StabilityConfig,
    BoundaryConfig,
    OscillationConfig,
    GLOBAL_DEFAULTS,
    DOMAIN_CONFIGS,
    load_domain_config,
    load_domain_config_file,
)

DEFAULT_DOMAIN = os.environ.get('FPKERNEL_DOMAIN', 'DOCSIS')
DEFAULT_LOG_LEVEL = os.environ.get('FPKERNEL_LOG_LEVEL', 'WARNING')

__all__ = [
    'Domain',
    'DomainConfig',
    'DriftConfig',
    'DriftThresholds',
    'StabilityConfig',
    'BoundaryConfig',
    'OscillationConfig',
    'GLOBAL_DEFAULTS',
    'DOMAIN_CONFIGS',
    'DEFAULT_DOMAIN',
    'DEFAULT_LOG_LEVEL',
    'load_domain_config',
    'load_domain_config_file',
]
