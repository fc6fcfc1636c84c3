"""
Check Runner
============
Runs the probes of each enabled check, hands their findings to the
check's evaluation and collects the results into a Report.

Checks are independent: a probe failure turns only its own check into
a runtime-error result, and every other check still runs.

Author: Scorecard Team
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, Iterable, List, Mapping, Optional
import logging

from scorecard.checker.check_names import CHECK_RISK, Risk
from scorecard.checker.check_result import (
    INCONCLUSIVE_RESULT_SCORE,
    CheckResult,
    create_runtime_error_result,
)
from scorecard.checker.raw_results import RawResults, parse_datetime
from scorecard.config import ScorecardConfig
from scorecard.errors import ScorecardError
from scorecard.evaluation import EVALUATORS, Evaluator
from scorecard.finding.finding import Finding
from scorecard.probes.registry import ProbeRegistry

logger = logging.getLogger(__name__)


@dataclass
class Report:
    """Results of one scorecard run over a repository."""
    repo: str
    commit: str
    date: datetime
    checks: List[CheckResult] = field(default_factory=list)
    metadata: List[str] = field(default_factory=list)

    def get(self, name: str) -> Optional[CheckResult]:
        for check in self.checks:
            if check.name == name:
                return check
        return None

    def aggregate_score(self) -> float:
        """
        Risk-weighted mean of the conclusive check scores.

        Returns:
            Score rounded to one decimal, or -1 when no check is conclusive
        """
        total = 0.0
        weights = 0.0
        for check in self.checks:
            if not check.is_conclusive:
                continue
            weight = CHECK_RISK.get(check.name, Risk.LOW).value
            total += check.score * weight
            weights += weight

        if weights == 0:
            return float(INCONCLUSIVE_RESULT_SCORE)
        return round(total / weights, 1)

    def to_dict(self) -> Dict[str, Any]:
        return {
            'date': self.date.isoformat(),
            'repo': {'name': self.repo, 'commit': self.commit},
            'score': self.aggregate_score(),
            'checks': [check.to_dict() for check in self.checks],
            'metadata': list(self.metadata),
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> 'Report':
        repo = data.get('repo') or {}
        return cls(
            repo=repo.get('name', ''),
            commit=repo.get('commit', ''),
            date=parse_datetime(data['date']),
            checks=[CheckResult.from_dict(check) for check in data.get('checks', [])],
            metadata=list(data.get('metadata', [])),
        )


class CheckRunner:
    """
    Drives probes and evaluations for a set of checks.

    Example:
        >>> runner = CheckRunner(build_registry())
        >>> report = runner.run(raw, repo="github.com/org/repo")
        >>> report.aggregate_score()
    """

    def __init__(self, registry: ProbeRegistry,
                 evaluators: Optional[Mapping[str, Evaluator]] = None,
                 config: Optional[ScorecardConfig] = None):
        self.registry = registry
        self.evaluators = dict(evaluators if evaluators is not None else EVALUATORS)
        self.config = config or ScorecardConfig()

    def check_names(self) -> List[str]:
        return sorted(name for name in self.registry.check_names() if name in self.evaluators)

    def _resolve_checks(self, checks: Optional[Iterable[str]]) -> List[str]:
        available = self.check_names()
        if checks is None:
            checks = self.config.enabled_checks
        if checks is None:
            return available

        selected = []
        for name in checks:
            if name not in available:
                raise ScorecardError(f"unknown check: {name}")
            if name not in selected:
                selected.append(name)
        return sorted(selected)

    def run_check(self, name: str, raw: RawResults) -> CheckResult:
        """
        Run one check.

        Probe and evaluation failures become a runtime-error result.

        Raises:
            ScorecardError: If the check has no evaluator or no probes
        """
        evaluator = self.evaluators.get(name)
        probes = self.registry.probes_for_check(name)
        if evaluator is None or not probes:
            raise ScorecardError(f"unknown check: {name}")

        findings: List[Finding] = []
        try:
            for probe in probes:
                probe_findings, probe_id = probe.run(raw)
                logger.debug(f"{name}: probe {probe_id} returned {len(probe_findings)} findings")
                findings.extend(probe_findings)
            result = evaluator(name, findings)
        except ScorecardError as e:
            return create_runtime_error_result(name, e).with_findings(findings)

        logger.info(f"{name}: score {result.score} ({result.reason})")
        return result.with_findings(findings)

    def run(self, raw: RawResults, checks: Optional[Iterable[str]] = None,
            repo: str = "", commit: str = "", metadata: Optional[List[str]] = None) -> Report:
        """
        Run the enabled checks in name order.

        Args:
            raw: Collected raw results
            checks: Check names to run; defaults to the configured set
            repo: Repository name recorded in the report
            commit: Commit SHA recorded in the report
            metadata: Free-form annotations recorded in the report

        Returns:
            Report with one CheckResult per check

        Raises:
            ScorecardError: If a requested check is unknown
        """
        names = self._resolve_checks(checks)
        logger.info(f"Running {len(names)} checks for {repo or 'repository'}")

        results = [self.run_check(name, raw) for name in names]
        report = Report(repo=repo, commit=commit, date=raw.now, checks=results, metadata=list(metadata or []))
        logger.info(f"Aggregate score: {report.aggregate_score()}")
        return report

    def run_probes(self, raw: RawResults, names: Iterable[str]) -> List[Finding]:
        """
        Run probes by name, independent ones included, without evaluating
        any check.

        Raises:
            ProbeNotFoundError: If a probe is not registered
            ProbeExecutionError: If a probe cannot evaluate the raw data
        """
        findings: List[Finding] = []
        for name in names:
            probe_findings, probe_id = self.registry.get(name).run(raw)
            logger.debug(f"probe {probe_id} returned {len(probe_findings)} findings")
            findings.extend(probe_findings)
        return findings
