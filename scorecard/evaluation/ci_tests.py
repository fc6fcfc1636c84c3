"""
CI-Tests Evaluation
===================

Author: Scorecard Team
"""

from typing import List

from scorecard.checker.check_result import (
    CheckResult,
    create_inconclusive_result,
    create_proportional_score_result,
)
from scorecard.evaluation.common import has_expected_probes, invalid_probe_results, log_findings
from scorecard.finding.finding import Finding
from scorecard.finding.outcome import Outcome
from scorecard.probes.ci_tests import TESTS_RUN_IN_CI


def ci_tests(name: str, findings: List[Finding]) -> CheckResult:
    if not has_expected_probes(findings, [TESTS_RUN_IN_CI]):
        return invalid_probe_results(name)

    if any(f.outcome == Outcome.NOT_APPLICABLE for f in findings):
        return create_inconclusive_result(name, "no pull request found")

    log_findings(name, findings)
    total = sum(1 for f in findings if f.outcome.is_boolean)
    tested = sum(1 for f in findings if f.outcome == Outcome.TRUE)
    if total == 0:
        return create_inconclusive_result(name, "no pull request found")

    return create_proportional_score_result(
        name, f"{tested} out of {total} merged PRs checked by a CI test", tested, total)
