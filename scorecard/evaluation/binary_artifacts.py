"""
Binary-Artifacts Evaluation
===========================

Author: Scorecard Team
"""

from typing import List

from scorecard.checker.check_result import (
    MAX_RESULT_SCORE,
    CheckResult,
    create_max_score_result,
    create_result_with_score,
)
from scorecard.evaluation.common import has_expected_probes, invalid_probe_results, log_finding
from scorecard.finding.finding import Finding
from scorecard.finding.outcome import Outcome
from scorecard.probes.binary_artifacts import HAS_BINARY_ARTIFACTS, HAS_UNVERIFIED_BINARY_ARTIFACTS


def binary_artifacts(name: str, findings: List[Finding]) -> CheckResult:
    """One point off per unverified binary in the source tree."""
    if not findings:
        return invalid_probe_results(name, "no findings")
    if not has_expected_probes(findings, [HAS_BINARY_ARTIFACTS, HAS_UNVERIFIED_BINARY_ARTIFACTS]):
        return invalid_probe_results(name)

    binaries = [f for f in findings if f.probe == HAS_UNVERIFIED_BINARY_ARTIFACTS and f.outcome == Outcome.TRUE]
    if not binaries:
        return create_max_score_result(name, "no binaries found in the repo")

    for f in binaries:
        log_finding(name, f)
    score = max(MAX_RESULT_SCORE - len(binaries), 0)
    return create_result_with_score(name, "binaries present in source code", score)
