"""
Code-Review Evaluation
======================

Author: Scorecard Team
"""

from typing import List

from scorecard.checker.check_result import (
    CheckResult,
    create_inconclusive_result,
    create_max_score_result,
    create_proportional_score_result,
    create_runtime_error_result,
)
from scorecard.errors import ScorecardError
from scorecard.evaluation.common import has_expected_probes, int_value, invalid_probe_results, log_finding
from scorecard.finding.finding import Finding
from scorecard.finding.outcome import Outcome
from scorecard.probes.code_review import CODE_APPROVED, NUM_APPROVED_KEY, NUM_TOTAL_KEY


def code_review(name: str, findings: List[Finding]) -> CheckResult:
    if not has_expected_probes(findings, [CODE_APPROVED]):
        return invalid_probe_results(name)

    for f in findings:
        if f.outcome == Outcome.ERROR:
            return create_runtime_error_result(name, ScorecardError(f.message))

    f = findings[0]
    log_finding(name, f)
    if f.outcome == Outcome.NOT_APPLICABLE:
        return create_inconclusive_result(name, f.message)
    if f.outcome == Outcome.TRUE:
        return create_max_score_result(name, "all changesets reviewed")

    try:
        approved = int_value(f.values, NUM_APPROVED_KEY)
        total = int_value(f.values, NUM_TOTAL_KEY)
    except ScorecardError as e:
        return create_runtime_error_result(name, e)

    return create_proportional_score_result(
        name, f"found {total - approved} unreviewed changesets out of {total}", approved, total)
