#!/usr/bin/env python3
# SPDX-License-Identifier: MIT
# Copyright (c) 2025 KernelSight AI
"""
Telemetry input: samples, log reading and synthetic demo data.
"""

from .samples import (
    TelemetryPoint,
    TelemetryValidationError,
    points_from_dicts,
    numeric_value,
    field_accessor,
    project,
    project_numbers,
)
from .json_reader import read_json_objects, load_telemetry
from .generator import (
    FieldPattern,
    FieldGenConfig,
    DataGenConfig,
    GeneratorState,
    DemoScenario,
    DEMO_SCENARIOS,
    advance,
    initial_state,
    generate_flexible_data,
    generate_scenario_data,
    get_scenario,
    scenario_gen_config,
)

__all__ = [
    'TelemetryPoint',
    'TelemetryValidationError',
    'points_from_dicts',
    'numeric_value',
    'field_accessor',
    'project',
    'project_numbers',
    'read_json_objects',
    'load_telemetry',
    'FieldPattern',
    'FieldGenConfig',
    'DataGenConfig',
    'GeneratorState',
    'DemoScenario',
    'DEMO_SCENARIOS',
    'advance',
    'initial_state',
    'generate_flexible_data',
    'generate_scenario_data',
    'get_scenario',
    'scenario_gen_config',
]
