#!/usr/bin/env python3
# SPDX-License-Identifier: MIT
# Copyright (c) 2025 KernelSight AI
"""
Pipeline Tests

Tests telemetry input:
1. Samples and scalar projection
2. JSON log reader (JSON lines, multi-line objects, arrays)
3. Synthetic data generator and demo scenarios
"""

import io
import json
import os
import sys
import tempfile
import unittest
from pathlib import Path

import numpy as np

# Add src to path
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from fpkernel.config import DOMAIN_CONFIGS, Domain
from fpkernel.pipeline import (
    DEMO_SCENARIOS,
    DataGenConfig,
    FieldGenConfig,
    FieldPattern,
    TelemetryPoint,
    TelemetryValidationError,
    advance,
    field_accessor,
    generate_flexible_data,
    generate_scenario_data,
    get_scenario,
    initial_state,
    load_telemetry,
    numeric_value,
    points_from_dicts,
    project,
    project_numbers,
    read_json_objects,
    scenario_gen_config,
)


class TestSamples(unittest.TestCase):
    """Test TelemetryPoint and projection"""

    def test_point_round_trip(self):
        point = TelemetryPoint.from_dict({'timestamp': 5, 'rssi_dBm': -61.5, 'parent': 'A'})
        self.assertEqual(point.timestamp, 5.0)
        self.assertEqual(point.get('parent'), 'A')
        self.assertIn('rssi_dBm', point)
        self.assertEqual(point.to_dict(), {'timestamp': 5.0, 'rssi_dBm': -61.5, 'parent': 'A'})

    def test_point_requires_timestamp(self):
        with self.assertRaises(ValueError):
            TelemetryPoint.from_dict({'rssi_dBm': -60})

    def test_out_of_order_records_sorted(self):
        records = [{'timestamp': 3}, {'timestamp': 1}, {'timestamp': 2}]
        with self.assertLogs('fpkernel.pipeline.samples', level='WARNING'):
            points = points_from_dicts(records)
        self.assertEqual([p.timestamp for p in points], [1.0, 2.0, 3.0])

    def test_numeric_value(self):
        self.assertEqual(numeric_value(3), 3.0)
        self.assertEqual(numeric_value('2.5'), 2.5)
        self.assertEqual(numeric_value(np.float32(1.5)), 1.5)
        self.assertIsNone(numeric_value(True))
        self.assertIsNone(numeric_value('abc'))
        self.assertIsNone(numeric_value(None))
        self.assertIsNone(numeric_value(float('nan')))
        self.assertIsNone(numeric_value(float('inf')))
        self.assertIsNone(numeric_value([1]))

    def test_field_accessor_fallback(self):
        accessor = field_accessor('rssi_dBm', 'rsrp_dBm')
        self.assertEqual(accessor(TelemetryPoint(0, {'rsrp_dBm': -95})), -95.0)
        self.assertEqual(accessor(TelemetryPoint(0, {'rssi_dBm': 'bad', 'rsrp_dBm': -95})), -95.0)
        self.assertIsNone(accessor(TelemetryPoint(0, {})))
        with self.assertRaises(ValueError):
            field_accessor()

    def test_project_defaults(self):
        points = [TelemetryPoint(i, {'v': v}) for i, v in enumerate([1, None, 'x', 4])]
        values = project(points, field_accessor('v'), default=-1.0, label='v')
        np.testing.assert_array_equal(values, [1.0, -1.0, -1.0, 4.0])

    def test_project_strict(self):
        points = [TelemetryPoint(i, {'v': v}) for i, v in enumerate([1, 2, 'x'])]
        with self.assertRaises(TelemetryValidationError) as ctx:
            project(points, field_accessor('v'), default=0.0, strict=True, label='v', offset=10)
        self.assertEqual(ctx.exception.index, 12)
        self.assertEqual(ctx.exception.value, 'x')

    def test_project_numbers(self):
        np.testing.assert_array_equal(project_numbers([1, '2', None], default=9.0), [1.0, 2.0, 9.0])
        with self.assertRaises(TelemetryValidationError):
            project_numbers([1, None], strict=True)


class TestJsonReader(unittest.TestCase):
    """Test the telemetry log reader"""

    def test_json_lines(self):
        stream = io.StringIO('{"timestamp": 1, "a": 1}\n{"timestamp": 2, "a": 2}\n')
        self.assertEqual([o['a'] for o in read_json_objects(stream)], [1, 2])

    def test_multiline_objects(self):
        text = '{\n  "timestamp": 1,\n  "note": "brace } in string"\n}\n{"timestamp": 2}\n'
        objects = list(read_json_objects(io.StringIO(text)))
        self.assertEqual(len(objects), 2)
        self.assertEqual(objects[0]['note'], 'brace } in string')

    def test_top_level_array(self):
        text = json.dumps([{'timestamp': i, 'nested': {'x': i}} for i in range(3)], indent=2)
        objects = list(read_json_objects(io.StringIO(text)))
        self.assertEqual([o['nested']['x'] for o in objects], [0, 1, 2])

    def test_bad_object_skipped(self):
        text = '{"timestamp": 1}\n{"timestamp": oops}\n{"timestamp": 3}\n'
        with self.assertLogs('fpkernel.pipeline.json_reader', level='WARNING'):
            objects = list(read_json_objects(io.StringIO(text)))
        self.assertEqual([o['timestamp'] for o in objects], [1, 3])

    def test_truncated_line_does_not_swallow_later_records(self):
        """A record cut off inside a string is dropped alone"""
        lines = ['{"timestamp": 1, "rssi_dBm": -60, "note": "abc\n',
                 '{"timestamp": 2, "rssi_dBm": -61}\n',
                 '{"timestamp": 3, "rssi_dBm": -62}\n',
                 '{"timestamp": 4, "rssi_dBm": -63}\n']
        with self.assertLogs('fpkernel.pipeline.json_reader', level='WARNING'):
            points = load_telemetry(lines)
        self.assertEqual([p.timestamp for p in points], [2.0, 3.0, 4.0])

    def test_incomplete_trailing_object(self):
        with self.assertLogs('fpkernel.pipeline.json_reader', level='WARNING'):
            objects = list(read_json_objects(io.StringIO('{"timestamp": 1}\n{"timestamp": ')))
        self.assertEqual(len(objects), 1)

    def test_load_telemetry_from_file(self):
        records = [{'timestamp': 2, 'rssi_dBm': -61}, {'rssi_dBm': -1},
                   {'timestamp': 1, 'rssi_dBm': -60}]
        fd, path = tempfile.mkstemp(suffix='.json')
        try:
            with os.fdopen(fd, 'w') as f:
                json.dump(records, f)
            points = load_telemetry(path)
        finally:
            os.unlink(path)
        self.assertEqual([p.timestamp for p in points], [1.0, 2.0])
        self.assertEqual(points[0].get('rssi_dBm'), -60)

    def test_load_telemetry_from_lines(self):
        lines = ['{"timestamp": 1, "x": 1}', '{"timestamp": 2, "x": 2}']
        self.assertEqual(len(load_telemetry(lines)), 2)


class TestGenerator(unittest.TestCase):
    """Test the synthetic data generator"""

    def _config(self, **fields):
        return DataGenConfig(sample_count=50, interval_ms=1000, fields=fields)

    def test_seed_is_reproducible(self):
        config = self._config(
            a=FieldGenConfig(FieldPattern.RANDOM, 10.0, noise=2.0),
            b=FieldGenConfig(FieldPattern.CATEGORICAL, 'x', options=('x', 'y'), switch_prob=0.5),
        )
        first = generate_flexible_data(config, seed=42, end_ms=1e6)
        second = generate_flexible_data(config, seed=42, end_ms=1e6)
        self.assertEqual(first, second)
        third = generate_flexible_data(config, seed=43, end_ms=1e6)
        self.assertNotEqual([p.get('a') for p in first], [p.get('a') for p in third])

    def test_timestamps(self):
        config = self._config(a=FieldGenConfig(FieldPattern.CONSTANT, 1.0))
        points = generate_flexible_data(config, seed=1, end_ms=100000.0)
        self.assertEqual(len(points), 50)
        self.assertEqual(points[-1].timestamp, 99000.0)
        self.assertEqual(points[1].timestamp - points[0].timestamp, 1000.0)

    def test_linear_and_constant(self):
        config = self._config(
            lin=FieldGenConfig(FieldPattern.LINEAR, 0.0, slope=0.5),
            const=FieldGenConfig(FieldPattern.CONSTANT, 3.0),
        )
        points = generate_flexible_data(config, seed=0, end_ms=0)
        self.assertEqual([p.get('lin') for p in points[:3]], [0.5, 1.0, 1.5])
        self.assertTrue(all(p.get('const') == 3.0 for p in points))

    def test_sine(self):
        config = self._config(s=FieldGenConfig(FieldPattern.SINE, 0.0, amplitude=10.0, period=4.0))
        values = [p.get('s') for p in generate_flexible_data(config, seed=0, end_ms=0)]
        self.assertEqual(values[:4], [0.0, 10.0, 0.0, -10.0])

    def test_noise_bounded(self):
        config = self._config(r=FieldGenConfig(FieldPattern.RANDOM, 5.0, noise=1.0))
        values = [p.get('r') for p in generate_flexible_data(config, seed=7, end_ms=0)]
        self.assertTrue(all(4.0 <= v <= 6.0 for v in values))

    def test_spike(self):
        config = self._config(
            s=FieldGenConfig(FieldPattern.SPIKE, 0.0, spike_prob=1.0, spike_val=(10.0, 20.0)))
        values = [p.get('s') for p in generate_flexible_data(config, seed=3, end_ms=0)]
        self.assertTrue(all(10.0 <= v <= 20.0 for v in values))

    def test_advance_is_pure(self):
        config = self._config(lin=FieldGenConfig(FieldPattern.LINEAR, 1.0, slope=1.0))
        state = initial_state(config)
        next_state, emitted = advance(state, config, np.random.default_rng(0))
        self.assertEqual(state.step, 0)
        self.assertEqual(state.values['lin'], 1.0)
        self.assertEqual(next_state.step, 1)
        self.assertEqual(emitted['lin'], 2.0)

    def test_negative_sample_count(self):
        with self.assertRaises(ValueError):
            generate_flexible_data(DataGenConfig(sample_count=-1, interval_ms=1, fields={}))


class TestScenarios(unittest.TestCase):
    """Test the demo scenario catalog"""

    def test_catalog(self):
        self.assertEqual(len(DEMO_SCENARIOS), 15)
        self.assertEqual({s.domain for s in DEMO_SCENARIOS}, set(Domain))

    def test_every_scenario_generates_its_metrics(self):
        for scenario in DEMO_SCENARIOS:
            points = generate_scenario_data(scenario.id, seed=1, sample_count=5, end_ms=0)
            self.assertEqual(len(points), 5)
            for metric in scenario.primary_metrics:
                self.assertIn(metric, points[0], f"{scenario.id}: {metric}")
            self.assertIn('latency_p95', points[0])

    def test_sample_count_from_domain(self):
        scenario = get_scenario('fwa-1')
        config = scenario_gen_config(scenario)
        fwa = DOMAIN_CONFIGS[Domain.FWA]
        self.assertEqual(config.sample_count, 1080)
        self.assertEqual(config.interval_ms, fwa.sample_interval_sec * 1000)

    def test_unknown_scenario(self):
        with self.assertRaises(ValueError):
            get_scenario('DOC-9')


def run_tests():
    """Run all tests"""
    loader = unittest.TestLoader()
    suite = unittest.TestSuite()

    for case in (TestSamples, TestJsonReader, TestGenerator, TestScenarios):
        suite.addTests(loader.loadTestsFromTestCase(case))

    runner = unittest.TextTestRunner(verbosity=2)
    result = runner.run(suite)

    return 0 if result.wasSuccessful() else 1


if __name__ == '__main__':
    sys.exit(run_tests())
