"""
Dangerous-Workflow Evaluation
=============================

Author: Scorecard Team
"""

from typing import List

from scorecard.checker.check_result import (
    CheckResult,
    create_inconclusive_result,
    create_max_score_result,
    create_min_score_result,
)
from scorecard.evaluation.common import has_expected_probes, invalid_probe_results, log_finding
from scorecard.finding.finding import Finding
from scorecard.finding.outcome import Outcome
from scorecard.probes.dangerous_workflow import (
    HAS_DANGEROUS_WORKFLOW_SCRIPT_INJECTION,
    HAS_DANGEROUS_WORKFLOW_UNTRUSTED_CHECKOUT,
)


def dangerous_workflow(name: str, findings: List[Finding]) -> CheckResult:
    expected = [HAS_DANGEROUS_WORKFLOW_SCRIPT_INJECTION, HAS_DANGEROUS_WORKFLOW_UNTRUSTED_CHECKOUT]
    if not has_expected_probes(findings, expected):
        return invalid_probe_results(name)

    if all(f.outcome == Outcome.NOT_APPLICABLE for f in findings):
        return create_inconclusive_result(name, "no workflows found")

    dangerous = [f for f in findings if f.outcome == Outcome.TRUE]
    for f in dangerous:
        log_finding(name, f)

    if dangerous:
        return create_min_score_result(name, "dangerous workflow patterns detected")
    return create_max_score_result(name, "no dangerous workflow patterns detected")
