#!/usr/bin/env python3
# SPDX-License-Identifier: MIT
# Copyright (c) 2025 KernelSight AI
"""
FP Kernel command line.

Usage:
    fpkernel analyze telemetry.jsonl --domain DOCSIS --field us_snr_dB
    fpkernel analyze telemetry.json --multi --format json
    fpkernel demo --scenario FWA-1 --seed 7
    fpkernel scenarios
    fpkernel config --domain WIFI
"""

import argparse
import json
import logging
import sys
from datetime import datetime, timezone
from typing import Dict, List, Optional, Sequence

from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from . import __version__
from .analysis import (
    AnalyzerSettings,
    KernelResult,
    SignalRole,
    analyze_timeline,
    summarize_timeline,
)
from .config import (
    DEFAULT_DOMAIN,
    DEFAULT_LOG_LEVEL,
    Domain,
    DomainConfig,
    load_domain_config,
    load_domain_config_file,
)
from .kernels import CURRENT_VARIANTS, INDICATOR_VARIANTS, WindowSizes
from .pipeline import (
    DEMO_SCENARIOS,
    TelemetryPoint,
    generate_scenario_data,
    get_scenario,
    load_telemetry,
)

logger = logging.getLogger(__name__)
console = Console()

RISK_STYLES = {'LOW': 'green', 'MEDIUM': 'yellow', 'HIGH': 'bold red'}


def _domain_config(args) -> DomainConfig:
    if getattr(args, 'config', None):
        return load_domain_config_file(args.config, args.domain)
    return load_domain_config(args.domain)


def _window_sizes(args, config: DomainConfig) -> WindowSizes:
    sizes = config.window_sizes()
    return WindowSizes(
        short=args.short or sizes.short,
        mid=args.mid or sizes.mid,
        long=args.long or sizes.long,
    )


def _parse_variants(pairs: Optional[Sequence[str]]) -> Dict[str, str]:
    """['drift=range'] -> {'drift': 'range', ...} on top of current variants."""
    variants = dict(CURRENT_VARIANTS)
    for pair in pairs or ():
        kind, sep, name = pair.partition('=')
        if not sep or kind not in INDICATOR_VARIANTS:
            raise ValueError(f"Bad --variant '{pair}' (expected KIND=NAME, "
                             f"KIND one of {', '.join(INDICATOR_VARIANTS)})")
        if name not in INDICATOR_VARIANTS[kind]:
            raise ValueError(f"Unknown {kind} variant '{name}' "
                             f"(known: {', '.join(INDICATOR_VARIANTS[kind])})")
        variants[kind] = name
    return variants


def _format_time(timestamp: float) -> str:
    # Timestamps are epoch milliseconds
    return datetime.fromtimestamp(timestamp / 1000, tz=timezone.utc).strftime('%Y-%m-%d %H:%M:%S')


def _render_table(results: List[Optional[KernelResult]], points: Sequence[TelemetryPoint],
                  title: str, tail: int):
    summary = summarize_timeline(results)
    analyzed = [r for r in results if r is not None]

    table = Table(title=title, show_header=True)
    table.add_column("Index", justify="right")
    table.add_column("Time")
    table.add_column("K1 Drift")
    table.add_column("K2 Stability")
    table.add_column("K3 Boundary")
    table.add_column("K4 Oscillation")
    table.add_column("Risk", justify="right")

    for r in analyzed[-tail:] if tail > 0 else []:
        timestamp = points[r.index].timestamp if r.index < len(points) else None
        style = RISK_STYLES[r.overall_risk.value]
        table.add_row(
            str(r.index),
            _format_time(timestamp) if timestamp is not None else "-",
            f"{r.drift_score:.3f} {r.drift_status.value}",
            f"{r.stability_score:.3f} {r.stability_status.value}",
            f"{r.boundary_count:g} {r.boundary_status.value}",
            f"{r.oscillation_score:.3f} {r.oscillation_level.value}",
            f"[{style}]{r.risk_score:.3f} {r.overall_risk.value}[/{style}]",
        )
    console.print(table)

    levels = summary['risk_levels']
    lines = [
        f"Samples: {summary['samples']}  Analyzed: {summary['analyzed']}",
        f"First analyzable index: {summary['first_analyzed_index']}",
        f"Risk levels: [green]LOW {levels['LOW']}[/green]  "
        f"[yellow]MEDIUM {levels['MEDIUM']}[/yellow]  [red]HIGH {levels['HIGH']}[/red]",
        f"First HIGH index: {summary['first_high_index']}",
    ]
    if summary['peak_risk_score'] is not None:
        lines.append(f"Peak risk: {summary['peak_risk_score']:.3f} "
                     f"at index {summary['peak_risk_index']}")
    latest = summary['latest']
    border = RISK_STYLES[latest.overall_risk.value].split()[-1] if latest else "blue"
    console.print(Panel("\n".join(lines), title="Summary", border_style=border))


def _render_json(results: List[Optional[KernelResult]], tail: int):
    analyzed = [r for r in results if r is not None]
    for r in analyzed[-tail:] if tail > 0 else analyzed:
        print(json.dumps(r.to_dict()))


def cmd_analyze(args) -> int:
    if args.multi and args.field:
        raise ValueError("--field selects a single target signal and cannot be used with --multi")
    config = _domain_config(args)
    sizes = _window_sizes(args, config)
    settings = AnalyzerSettings(strict=args.strict, variants=_parse_variants(args.variant))

    points = load_telemetry(args.file)
    if not points:
        raise ValueError(f"No telemetry records in {args.file}")

    results = analyze_timeline(
        points,
        sizes=sizes,
        primary_role=SignalRole.parse(args.role),
        field_name=args.field,
        settings=settings,
        multi=args.multi,
        workers=args.workers,
    )
    if args.format == 'json':
        _render_json(results, args.tail)
    else:
        mode = "multi-signal" if args.multi else (args.field or args.role)
        _render_table(results, points, f"{args.file} ({mode})", args.tail)
    return 0


def cmd_demo(args) -> int:
    scenario = get_scenario(args.scenario)
    config = load_domain_config(scenario.domain)
    sizes = config.window_sizes()

    points = generate_scenario_data(scenario.id, seed=args.seed)
    field_name = None if args.multi else scenario.primary_metrics[0]
    results = analyze_timeline(points, sizes=sizes, field_name=field_name,
                               multi=args.multi, workers=args.workers)

    console.print(Panel(
        f"[bold]{scenario.title}[/bold]\n{scenario.description}\n\n"
        f"Domain: {scenario.domain.value}  Focus: {scenario.kernel_focus}\n"
        f"Windows: short {sizes.short} / mid {sizes.mid} / long {sizes.long} samples",
        title=scenario.id,
        border_style="blue",
    ))
    mode = "multi-signal" if args.multi else field_name
    _render_table(results, points, f"{scenario.id} ({mode})", args.tail)
    return 0


def cmd_scenarios(args) -> int:
    table = Table(title="Demo Scenarios", show_header=True)
    table.add_column("ID", style="cyan")
    table.add_column("Domain")
    table.add_column("Title")
    table.add_column("Kernels")
    table.add_column("Primary Metrics", style="dim")
    for s in DEMO_SCENARIOS:
        table.add_row(s.id, s.domain.value, s.title, s.kernel_focus,
                      ", ".join(s.primary_metrics))
    console.print(table)
    return 0


def cmd_config(args) -> int:
    config = _domain_config(args)
    domain = Domain.parse(args.domain)
    sizes = config.window_sizes()

    table = Table(title=f"{domain.value} Configuration", show_header=True)
    table.add_column("Section", style="cyan")
    table.add_column("Setting")
    table.add_column("Value", justify="right")
    table.add_row("-", "sample_interval_sec", str(config.sample_interval_sec))
    for section, values in config.to_dict().items():
        if not isinstance(values, dict):
            continue
        for key, value in values.items():
            if isinstance(value, dict):
                value = ", ".join(f"{k}={v}" for k, v in value.items())
            elif isinstance(value, (list, tuple)):
                value = ", ".join(value) or "-"
            table.add_row(section, key, str(value))
    console.print(table)
    console.print(f"[dim]Kernel windows: short {sizes.short} / mid {sizes.mid} / "
                  f"long {sizes.long} samples[/dim]")
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog='fpkernel',
        description="Telemetry fault-prediction kernel",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=__doc__,
    )
    parser.add_argument('--version', action='version', version=f'%(prog)s {__version__}')
    parser.add_argument('--log-level', default=DEFAULT_LOG_LEVEL,
                        type=str.upper, choices=['DEBUG', 'INFO', 'WARNING', 'ERROR'],
                        help='Logging level (env FPKERNEL_LOG_LEVEL)')
    sub = parser.add_subparsers(dest='command', required=True)

    analyze = sub.add_parser('analyze', help='Analyze a telemetry log (JSON lines or JSON array)')
    analyze.add_argument('file', help='Telemetry file')
    analyze.add_argument('--domain', default=DEFAULT_DOMAIN,
                         help='Domain for default windows (env FPKERNEL_DOMAIN)')
    analyze.add_argument('--config', help='JSON file with domain config overrides')
    analyze.add_argument('--field', help='Target field (default: the role\'s standard fields)')
    analyze.add_argument('--role', default='magnitude',
                         help='Role of the target signal: magnitude, latency, error_rate')
    analyze.add_argument('--multi', action='store_true',
                         help='Analyze magnitude, latency and error rate together')
    analyze.add_argument('--short', type=int, help='Short window length (samples)')
    analyze.add_argument('--mid', type=int, help='Mid window length (samples)')
    analyze.add_argument('--long', type=int, help='Long window length (samples)')
    analyze.add_argument('--variant', action='append', metavar='KIND=NAME',
                         help='Indicator variant, e.g. drift=range (repeatable)')
    analyze.add_argument('--workers', type=int, default=1, help='Worker threads')
    analyze.add_argument('--strict', action='store_true',
                         help='Fail on missing or non-numeric values instead of defaulting')
    analyze.add_argument('--format', choices=['table', 'json'], default='table')
    analyze.add_argument('--tail', type=int, default=20, help='Rows to show (0 = summary only)')
    analyze.set_defaults(func=cmd_analyze)

    demo = sub.add_parser('demo', help='Generate a demo scenario and analyze it')
    demo.add_argument('--scenario', default='DOC-1', help='Scenario ID (see "scenarios")')
    demo.add_argument('--seed', type=int, default=None, help='Random seed')
    demo.add_argument('--multi', action='store_true', help='Multi-signal analysis')
    demo.add_argument('--workers', type=int, default=1, help='Worker threads')
    demo.add_argument('--tail', type=int, default=20, help='Rows to show')
    demo.set_defaults(func=cmd_demo)

    scenarios = sub.add_parser('scenarios', help='List demo scenarios')
    scenarios.set_defaults(func=cmd_scenarios)

    config = sub.add_parser('config', help='Show the effective domain configuration')
    config.add_argument('--domain', default=DEFAULT_DOMAIN)
    config.add_argument('--config', help='JSON file with domain config overrides')
    config.set_defaults(func=cmd_config)

    return parser


def main(argv: Optional[Sequence[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=getattr(logging, args.log_level),
        format='%(asctime)s - [%(name)s] - %(levelname)s - %(message)s'
    )

    try:
        return args.func(args)
    except (ValueError, OSError) as e:
        console.print(f"[red]Error: {e}[/red]")
        return 1


if __name__ == "__main__":
    sys.exit(main())
