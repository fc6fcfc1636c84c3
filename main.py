#!/usr/bin/env python3
"""
Scorecard - Command Line Interface
==================================
Scores previously collected raw repository data and evaluates release
attestation policies against it.

Subcommands:
- probes: list every registered probe with its short description
- score: run the checks over a raw results JSON file and print the report
- run-probes: run named probes, independent ones included, and print their findings
- attest: evaluate an attestation policy; exit status 1 on failure

Author: Scorecard Team
"""

import argparse
import json
import logging
import sys
from typing import Any, Dict, List, Optional, Tuple

from dotenv import load_dotenv

from scorecard.checker.raw_results import RawResults
from scorecard.checker.runner import CheckRunner
from scorecard.config import ScorecardConfig
from scorecard.errors import ConfigurationError, PolicyLoadError, ProbeDefinitionError, RegistrationError, ScorecardError
from scorecard.finding.probe import load_probe_definition
from scorecard.policy.attestation import load_policy
from scorecard.probes import DEFINITIONS_DIR, build_registry
from scorecard.probes.registry import ProbeRegistry
from scorecard.reports.json_report import report_to_json, write_report

logger = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_POLICY_FAILED = 1
EXIT_STARTUP_ERROR = 2


def load_raw_results(path: str) -> Tuple[RawResults, str, str]:
    """
    Load raw results from a JSON file.

    The document may carry ``repo`` and ``commit`` keys next to the raw
    data; they are recorded in the report.

    Returns:
        Tuple of (raw results, repo name, commit SHA)
    """
    with open(path, 'r', encoding='utf-8') as f:
        data: Dict[str, Any] = json.load(f)

    repo = data.pop('repo', '') or ''
    commit = data.pop('commit', '') or ''
    return RawResults.from_dict(data), repo, commit


def load_config(config_path: Optional[str]) -> ScorecardConfig:
    if config_path:
        config = ScorecardConfig.from_file(config_path)
    else:
        config = ScorecardConfig.from_environment()
    config.validate()
    logger.info(f"Configuration loaded: log_level={config.log_level}")
    return config


# ============================================================================
# COMMANDS
# ============================================================================

def list_probes(registry: ProbeRegistry) -> int:
    for probe in sorted(registry.get_all(), key=lambda p: p.name):
        definition = load_probe_definition(DEFINITIONS_DIR, probe.name)
        consumers = ', '.join(probe.checks) or 'independent'
        print(f"{probe.name} [{consumers}]")
        print(f"    {definition.short}")
    return EXIT_OK


def score(registry: ProbeRegistry, config: ScorecardConfig, raw_path: str,
          checks: Optional[List[str]], output: Optional[str]) -> int:
    raw, repo, commit = load_raw_results(raw_path)
    runner = CheckRunner(registry, config=config)
    report = runner.run(raw, checks=checks, repo=repo, commit=commit)

    if output:
        write_report(report, output)
    else:
        print(report_to_json(report))
    return EXIT_OK


def run_probes(registry: ProbeRegistry, raw_path: str, names: List[str]) -> int:
    raw, _, _ = load_raw_results(raw_path)
    findings = CheckRunner(registry).run_probes(raw, names)
    print(json.dumps([f.to_dict() for f in findings], indent=2))
    return EXIT_OK


def attest(policy_path: str, raw_path: str) -> int:
    policy = load_policy(policy_path)
    raw, repo, _ = load_raw_results(raw_path)

    decision = policy.evaluate(raw)
    print(json.dumps({
        'repo': repo,
        'result': decision.result.value,
        'reason': decision.reason,
    }, indent=2))
    return EXIT_OK if decision.passed else EXIT_POLICY_FAILED


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description='Scorecard - repository security health checks'
    )
    parser.add_argument(
        '--config',
        help='Configuration file path'
    )
    parser.add_argument(
        '--log-level',
        help='Override the configured log level'
    )
    subparsers = parser.add_subparsers(dest='action', required=True)

    subparsers.add_parser('probes', help='List registered probes')

    score_parser = subparsers.add_parser('score', help='Score raw results')
    score_parser.add_argument(
        '--raw',
        required=True,
        help='Raw results JSON file'
    )
    score_parser.add_argument(
        '--checks',
        nargs='+',
        help='Checks to run (default: all enabled checks)'
    )
    score_parser.add_argument(
        '--output',
        help='Output file for the report'
    )

    probes_parser = subparsers.add_parser('run-probes', help='Run probes and print their findings')
    probes_parser.add_argument(
        '--raw',
        required=True,
        help='Raw results JSON file'
    )
    probes_parser.add_argument(
        '--probes',
        nargs='+',
        required=True,
        help='Probe IDs to run'
    )

    attest_parser = subparsers.add_parser('attest', help='Evaluate an attestation policy')
    attest_parser.add_argument(
        '--policy',
        required=True,
        help='Attestation policy YAML file'
    )
    attest_parser.add_argument(
        '--raw',
        required=True,
        help='Raw results JSON file'
    )
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point."""
    load_dotenv()
    args = build_parser().parse_args(argv)

    try:
        config = load_config(args.config)
    except (ConfigurationError, FileNotFoundError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return EXIT_STARTUP_ERROR

    logging.basicConfig(
        level=getattr(logging, (args.log_level or config.log_level).upper(), logging.INFO),
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
    )

    try:
        registry = build_registry(config)
    except (RegistrationError, ProbeDefinitionError) as e:
        logger.error(f"Probe registration failed: {e}")
        return EXIT_STARTUP_ERROR

    try:
        if args.action == 'probes':
            return list_probes(registry)
        if args.action == 'score':
            return score(registry, config, args.raw, args.checks, args.output)
        if args.action == 'run-probes':
            return run_probes(registry, args.raw, args.probes)
        return attest(args.policy, args.raw)
    except PolicyLoadError as e:
        logger.error(f"Invalid attestation policy: {e}")
        return EXIT_STARTUP_ERROR
    except (OSError, ValueError, ScorecardError) as e:
        logger.error(f"{args.action} failed: {e}")
        return EXIT_STARTUP_ERROR


def cli() -> None:
    sys.exit(main())


if __name__ == '__main__':
    cli()
