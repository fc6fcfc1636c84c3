"""
Packaging Evaluation
====================

Author: Scorecard Team
"""

from typing import List

from scorecard.checker.check_result import CheckResult, create_inconclusive_result, create_max_score_result
from scorecard.evaluation.common import has_expected_probes, invalid_probe_results, log_findings
from scorecard.finding.finding import Finding
from scorecard.finding.outcome import Outcome
from scorecard.probes.packaging import PACKAGED_WITH_AUTOMATED_WORKFLOW


def packaging(name: str, findings: List[Finding]) -> CheckResult:
    if not has_expected_probes(findings, [PACKAGED_WITH_AUTOMATED_WORKFLOW]):
        return invalid_probe_results(name)

    log_findings(name, findings)
    if any(f.outcome == Outcome.TRUE for f in findings):
        return create_max_score_result(name, "packaging workflow detected")
    return create_inconclusive_result(name, "packaging workflow not detected")
