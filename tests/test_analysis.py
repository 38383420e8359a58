#!/usr/bin/env python3
# SPDX-License-Identifier: MIT
# Copyright (c) 2025 KernelSight AI
"""
Tests for point and timeline analysis

Covers single-signal and multi-signal point analysis, history floor,
window clipping, strict/default input handling, indicator variants and
the timeline builder.
"""

import json
import unittest
import sys
from pathlib import Path

# Add src to path
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from fpkernel.analysis import (
    AnalyzerSettings,
    DEFAULT_BOUNDARY_LIMITS,
    SignalRole,
    analyze_point,
    analyze_point_multi,
    analyze_timeline,
    summarize_timeline,
)
from fpkernel.kernels import (
    BoundaryLimits,
    BoundaryStatus,
    DriftStatus,
    RiskInputs,
    RiskLevel,
    WindowSizes,
    compute_drift,
    compute_oscillation,
    compute_range_drift,
    compute_risk_score,
    compute_stability,
)
from fpkernel.pipeline import TelemetryPoint, TelemetryValidationError

SIZES = WindowSizes(short=5, mid=10, long=20)


def _points(n, **fields):
    """n points, one per second; each field is a function of the index."""
    return [TelemetryPoint(timestamp=1000.0 * i,
                           fields={name: fn(i) for name, fn in fields.items()})
            for i in range(n)]


def _link(n=40):
    return _points(
        n,
        rssi_dBm=lambda i: -60.0 - 0.5 * i + (i % 3),
        latency_p95=lambda i: 20.0 + (i % 4) * 3.0,
        tx_error_rate=lambda i: 0.01 * (i % 2),
    )


class TestHistoryFloor(unittest.TestCase):
    """Indices without enough history produce no result"""

    def test_below_short_window(self):
        series = list(range(30))
        for i in range(SIZES.short):
            self.assertIsNone(analyze_point(series, i, SIZES))
        self.assertIsNotNone(analyze_point(series, SIZES.short, SIZES))

    def test_out_of_bounds(self):
        series = list(range(30))
        self.assertIsNone(analyze_point(series, 30, SIZES))
        self.assertIsNone(analyze_point(series, -1, SIZES))
        self.assertIsNone(analyze_point([], 0, SIZES))


class TestSingleSignal(unittest.TestCase):
    """Test single-signal point analysis"""

    def test_flat_series_is_quiet(self):
        result = analyze_point([7.0] * 30, 29, SIZES)
        self.assertEqual(result.index, 29)
        self.assertEqual(result.drift_score, 0.0)
        self.assertEqual(result.stability_score, 1.0)
        self.assertEqual(result.boundary_count, 0.0)
        self.assertEqual(result.oscillation_score, 0.0)
        self.assertEqual(result.risk_score, 0.0)
        self.assertEqual(result.overall_risk, RiskLevel.LOW)
        self.assertEqual((result.mean_long, result.mean_mid, result.mean_short), (7.0, 7.0, 7.0))
        self.assertEqual(result.role, SignalRole.MAGNITUDE)

    def test_matches_kernel_formulas(self):
        series = [10.0] * 25 + [15.0, 14.0, 16.0, 15.0, 15.5]
        result = analyze_point(series, 29, SIZES)
        short, mid, long = series[-5:], series[-10:], series[-20:]

        self.assertAlmostEqual(result.k1, compute_drift(short, long))
        self.assertAlmostEqual(result.k2, compute_stability(mid))
        self.assertAlmostEqual(result.k4, compute_oscillation(short, long))
        # Latency and error rate sit at their flat defaults
        expected = 0.30 * (1.0 - result.k2) + 0.05 * result.k1
        self.assertAlmostEqual(result.risk_score, expected)

    def test_high_risk_after_step(self):
        """One large step after a long flat baseline"""
        series = [0.0] * 399 + [100.0]
        result = analyze_point(series, 399, WindowSizes(short=1, mid=10, long=400))
        self.assertAlmostEqual(result.k1, 99.75 / (5.0 + 1e-6))
        self.assertEqual(result.drift_status, DriftStatus.SEVERE_DRIFT)
        self.assertEqual(result.overall_risk, RiskLevel.HIGH)

    def test_windows_clipped_near_start(self):
        """Index past the short window but before the long window fills"""
        series = [float(i % 5) for i in range(40)]
        sizes = WindowSizes(short=5, mid=10, long=720)
        result = analyze_point(series, 12, sizes)
        history = series[:13]
        self.assertAlmostEqual(result.k1, compute_drift(history[-5:], history))
        self.assertAlmostEqual(result.mean_long, sum(history) / 13)

    def test_idempotent(self):
        series = _link()
        first = analyze_point(series, 30, SIZES, field_name='rssi_dBm')
        second = analyze_point(series, 30, SIZES, field_name='rssi_dBm')
        self.assertEqual(first, second)

    def test_future_samples_ignored(self):
        series = [float(i % 7) for i in range(50)]
        full = analyze_point(series, 30, SIZES)
        truncated = analyze_point(series[:31], 30, SIZES)
        self.assertEqual(full.to_dict(), truncated.to_dict())

    def test_latency_boundary_on_current_value(self):
        """Current latency 72 breaks the default 0..70 limits"""
        series = _points(30, latency_p95=lambda i: 72.0 if i == 29 else 30.0)
        result = analyze_point(series, 29, SIZES, primary_role=SignalRole.LATENCY,
                               field_name='latency_p95')
        self.assertEqual(result.boundary_count, 1)
        self.assertEqual(result.boundary_status, BoundaryStatus.YES)
        self.assertEqual(result.role, SignalRole.LATENCY)

    def test_boundary_count_is_integer(self):
        series = _points(30, latency_p95=lambda i: 72.0 if i == 29 else 30.0)
        result = analyze_point(series, 29, SIZES, primary_role=SignalRole.LATENCY)
        self.assertIsInstance(result.boundary_count, int)
        record = result.to_dict()
        self.assertIsInstance(record['k3'], int)
        self.assertEqual(json.dumps(record['k3']), '1')
        multi = analyze_point_multi(_link(), 35, SIZES)
        self.assertIsInstance(multi.boundary_count, int)

    def test_derivative_limit_with_mid_span(self):
        """A latency jump only counts when a previous value is in the span"""
        series = _points(30, latency_p95=lambda i: 60.0 if i == 29 else 20.0)
        limits = dict(DEFAULT_BOUNDARY_LIMITS)
        limits[SignalRole.LATENCY] = BoundaryLimits(min_val=0.0, max_val=70.0, max_derivative=3.0)

        current = analyze_point(series, 29, SIZES, primary_role=SignalRole.LATENCY,
                                settings=AnalyzerSettings(boundary_limits=limits))
        self.assertEqual(current.boundary_count, 0)

        mid = analyze_point(series, 29, SIZES, primary_role=SignalRole.LATENCY,
                            settings=AnalyzerSettings(boundary_limits=limits,
                                                      boundary_span='mid'))
        self.assertEqual(mid.boundary_count, 1)
        self.assertEqual(mid.boundary_status, BoundaryStatus.YES)

    def test_default_limits_have_no_derivative(self):
        for limits in DEFAULT_BOUNDARY_LIMITS.values():
            self.assertIsNone(limits.max_derivative)

    def test_boundary_on_previous_value_not_counted(self):
        series = _points(30, latency_p95=lambda i: 72.0 if i == 28 else 30.0)
        result = analyze_point(series, 29, SIZES, primary_role=SignalRole.LATENCY)
        self.assertEqual(result.boundary_status, BoundaryStatus.NO)

    def test_dicts_accepted(self):
        series = [{'timestamp': i, 'rssi_dBm': -60.0} for i in range(30)]
        result = analyze_point(series, 29, SIZES)
        self.assertEqual(result.mean_short, -60.0)

    def test_missing_roles_use_defaults(self):
        """Only RSSI present: latency and error rate fall back, with a log"""
        series = _points(30, rssi_dBm=lambda i: -60.0)
        with self.assertLogs('fpkernel.pipeline.samples', level='INFO') as logs:
            result = analyze_point(series, 29, SIZES)
        self.assertEqual(result.risk_score, 0.0)
        self.assertTrue(any('Latency' in line for line in logs.output))

    def test_bad_value_defaults_with_warning(self):
        series = _points(30, rssi_dBm=lambda i: 'n/a' if i == 27 else -60.0)
        with self.assertLogs('fpkernel.pipeline.samples', level='WARNING'):
            result = analyze_point(series, 29, SIZES)
        self.assertIsNotNone(result)

    def test_strict_mode_raises_with_absolute_index(self):
        series = _points(30, rssi_dBm=lambda i: 'n/a' if i == 25 else -60.0)
        settings = AnalyzerSettings(strict=True)
        with self.assertRaises(TelemetryValidationError) as ctx:
            analyze_point(series, 29, SIZES, settings=settings)
        self.assertEqual(ctx.exception.index, 25)
        self.assertEqual(ctx.exception.value, 'n/a')
        self.assertIsInstance(ctx.exception, ValueError)

    def test_strict_mode_only_checks_target(self):
        """Absent latency is not an error in single-signal mode"""
        series = _points(30, rssi_dBm=lambda i: -60.0)
        result = analyze_point(series, 29, SIZES, settings=AnalyzerSettings(strict=True))
        self.assertIsNotNone(result)

    def test_range_drift_variant(self):
        series = [10.0] * 25 + [15.0, 14.0, 16.0, 15.0, 15.5]
        settings = AnalyzerSettings(variants={'drift': 'range'})
        result = analyze_point(series, 29, SIZES, settings=settings)
        self.assertAlmostEqual(result.k1, compute_range_drift(series[-5:], series[-20:]))

    def test_to_dict_keys(self):
        record = analyze_point([1.0, 2.0] * 15, 29, SIZES).to_dict()
        for key in ('index', 'driftScore', 'driftStatus', 'stabilityScore', 'stabilityStatus',
                    'boundaryStatus', 'oscillationLevel', 'overallRisk', 'meanLong',
                    'meanMid', 'meanShort', 'k1', 'k2', 'k3', 'k4', 'riskScore'):
            self.assertIn(key, record)
        self.assertNotIn('signals', record)
        self.assertIsInstance(record['overallRisk'], str)


class TestMultiSignal(unittest.TestCase):
    """Test multi-signal point analysis"""

    def test_raw_numbers_rejected(self):
        with self.assertRaises(ValueError):
            analyze_point_multi([1.0] * 30, 29, SIZES)

    def test_history_floor(self):
        self.assertIsNone(analyze_point_multi(_link(), 2, SIZES))

    def test_aggregation(self):
        result = analyze_point_multi(_link(), 35, SIZES)
        subs = result.signals
        self.assertEqual(set(subs), {'RSSI', 'Latency', 'TxErr'})
        rssi, latency, txerr = subs['RSSI'], subs['Latency'], subs['TxErr']

        self.assertAlmostEqual(result.drift_score, (rssi.k1 + latency.k1 + txerr.k1) / 3)
        self.assertAlmostEqual(result.stability_score, (rssi.k2 + latency.k2 + txerr.k2) / 3)
        self.assertEqual(result.boundary_count, rssi.k3 + latency.k3 + txerr.k3)
        self.assertEqual(result.oscillation_score, max(rssi.k4, latency.k4, txerr.k4))
        self.assertEqual(result.mean_short, rssi.mean_short)
        self.assertIsNone(result.role)

        expected = compute_risk_score(RiskInputs(
            k1_rssi=rssi.k1, k2_rssi=rssi.k2,
            k1_latency=latency.k1, k2_latency=latency.k2,
            k3_latency=latency.k3, k4_latency=latency.k4,
            k1_txerr=txerr.k1, k2_txerr=txerr.k2, k4_txerr=txerr.k4,
        ))
        self.assertAlmostEqual(result.risk_score, expected)

    def test_sub_results_match_single_signal(self):
        series = _link()
        multi = analyze_point_multi(series, 35, SIZES)
        single = analyze_point(series, 35, SIZES, primary_role=SignalRole.LATENCY)
        self.assertEqual(multi.signals['Latency'].to_dict(), single.to_dict())

    def test_strict_checks_every_role(self):
        series = _points(30, rssi_dBm=lambda i: -60.0, latency_p95=lambda i: 20.0)
        with self.assertRaises(TelemetryValidationError) as ctx:
            analyze_point_multi(series, 29, SIZES, settings=AnalyzerSettings(strict=True))
        self.assertEqual(ctx.exception.label, 'TxErr')

    def test_to_dict_nests_signals(self):
        record = analyze_point_multi(_link(), 35, SIZES).to_dict()
        self.assertEqual(set(record['signals']), {'RSSI', 'Latency', 'TxErr'})
        self.assertEqual(record['signals']['RSSI']['index'], 35)


class TestTimeline(unittest.TestCase):
    """Test the timeline builder"""

    def test_one_entry_per_index(self):
        series = [float(i % 6) for i in range(50)]
        results = analyze_timeline(series, SIZES)
        self.assertEqual(len(results), 50)
        self.assertTrue(all(r is None for r in results[:SIZES.short]))
        self.assertTrue(all(r is not None for r in results[SIZES.short:]))
        self.assertEqual([r.index for r in results[SIZES.short:]], list(range(5, 50)))

    def test_matches_point_analysis(self):
        series = _link(60)
        results = analyze_timeline(series, SIZES, field_name='rssi_dBm')
        for i in (5, 19, 20, 45, 59):
            point = analyze_point(series, i, SIZES, field_name='rssi_dBm')
            self.assertEqual(results[i].to_dict(), point.to_dict())

    def test_parallel_equals_sequential(self):
        series = _link(80)
        sequential = analyze_timeline(series, SIZES, multi=True)
        parallel = analyze_timeline(series, SIZES, multi=True, workers=4)
        self.assertEqual([r.to_dict() if r else None for r in sequential],
                         [r.to_dict() if r else None for r in parallel])

    def test_multi_rejects_raw_numbers(self):
        with self.assertRaises(ValueError):
            analyze_timeline([1.0] * 10, SIZES, multi=True)

    def test_empty_series(self):
        self.assertEqual(analyze_timeline([], SIZES), [])

    def test_summary(self):
        series = [0.0] * 399 + [100.0]
        results = analyze_timeline(series, WindowSizes(short=1, mid=10, long=400))
        summary = summarize_timeline(results)

        self.assertEqual(summary['samples'], 400)
        self.assertEqual(summary['analyzed'], 399)
        self.assertEqual(summary['first_analyzed_index'], 1)
        self.assertEqual(summary['risk_levels'], {'LOW': 398, 'MEDIUM': 0, 'HIGH': 1})
        self.assertEqual(summary['first_high_index'], 399)
        self.assertEqual(summary['peak_risk_index'], 399)
        self.assertEqual(summary['latest'].index, 399)

    def test_summary_of_nothing(self):
        summary = summarize_timeline([None, None])
        self.assertEqual(summary['analyzed'], 0)
        self.assertIsNone(summary['first_analyzed_index'])
        self.assertIsNone(summary['peak_risk_score'])
        self.assertIsNone(summary['latest'])


class TestSignalRole(unittest.TestCase):

    def test_parse(self):
        self.assertEqual(SignalRole.parse('latency'), SignalRole.LATENCY)
        self.assertEqual(SignalRole.parse('RSSI'), SignalRole.MAGNITUDE)
        self.assertEqual(SignalRole.parse('TxErr'), SignalRole.ERROR_RATE)
        self.assertEqual(SignalRole.parse('error_rate'), SignalRole.ERROR_RATE)
        with self.assertRaises(ValueError):
            SignalRole.parse('jitter')


def run_tests():
    """Run all tests"""
    loader = unittest.TestLoader()
    suite = unittest.TestSuite()

    for case in (TestHistoryFloor, TestSingleSignal, TestMultiSignal, TestTimeline,
                 TestSignalRole):
        suite.addTests(loader.loadTestsFromTestCase(case))

    runner = unittest.TextTestRunner(verbosity=2)
    result = runner.run(suite)

    return 0 if result.wasSuccessful() else 1


if __name__ == '__main__':
    sys.exit(run_tests())
