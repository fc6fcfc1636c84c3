"""
Maintainer Health Evaluations
=============================
MTTUDependencies, Inactive-Maintainers and Maintainer-Response.

Author: Scorecard Team
"""

from typing import List, Optional
import logging

from scorecard.checker.check_result import (
    MAX_RESULT_SCORE,
    MIN_RESULT_SCORE,
    CheckResult,
    create_inconclusive_result,
    create_max_score_result,
    create_proportional_score_result,
    create_result_with_score,
)
from scorecard.evaluation.common import has_expected_probes, invalid_probe_results, log_finding, log_findings
from scorecard.finding.finding import Finding
from scorecard.finding.outcome import Outcome
from scorecard.probes import maintainers as probes

logger = logging.getLogger(__name__)

MTTU_SCORES = {
    probes.MTTU_DEPENDENCIES_IS_VERY_LOW: MAX_RESULT_SCORE,
    probes.MTTU_DEPENDENCIES_IS_LOW: 5,
    probes.MTTU_DEPENDENCIES_IS_HIGH: MIN_RESULT_SCORE,
}

MAX_ISSUES_IN_REASON = 20


# ============================================================================
# MTTU DEPENDENCIES
# ============================================================================

def mttu_dependencies(name: str, findings: List[Finding]) -> CheckResult:
    if not has_expected_probes(findings, MTTU_SCORES):
        return invalid_probe_results(name)

    if any(f.outcome == Outcome.NOT_APPLICABLE for f in findings):
        return create_inconclusive_result(name, "no lockfile dependencies found")

    for f in findings:
        if f.outcome == Outcome.TRUE:
            log_finding(name, f)
            mean = f.values.get(probes.MEAN_DAYS_KEY)
            return create_result_with_score(
                name, f"mean time to update dependencies is {mean} days", MTTU_SCORES[f.probe])
    return invalid_probe_results(name, "no mean time to update band matched")


# ============================================================================
# INACTIVE MAINTAINERS
# ============================================================================

def inactive_maintainers(name: str, findings: List[Finding]) -> CheckResult:
    if not has_expected_probes(findings, [probes.HAS_INACTIVE_MAINTAINERS]):
        return invalid_probe_results(name)

    if any(f.outcome == Outcome.NOT_APPLICABLE for f in findings):
        return create_inconclusive_result(name, "no maintainers found")

    log_findings(name, findings)
    total = sum(1 for f in findings if f.outcome.is_boolean)
    active = sum(1 for f in findings if f.outcome == Outcome.FALSE)
    return create_proportional_score_result(
        name, f"{active} out of {total} maintainers have been active recently", active, total)


# ============================================================================
# MAINTAINER RESPONSE
# ============================================================================

def _format_issue_list(numbers: List[int], limit: int = MAX_ISSUES_IN_REASON) -> str:
    shown = ", ".join(f"#{n}" for n in numbers[:limit])
    if len(numbers) > limit:
        shown += f" (+{len(numbers) - limit} more)"
    return shown


def _threshold(findings: List[Finding]) -> int:
    for f in findings:
        value: Optional[int] = f.values.get(probes.THRESHOLD_DAYS_KEY)
        if value is not None:
            return int(value)
    return probes.RESPONSE_THRESHOLD_DAYS


def maintainer_response(name: str, findings: List[Finding]) -> CheckResult:
    """
    Score by the share of bug and security issues left without response.

    More than 40% violating scores 0, more than 20% scores 5, anything
    less scores 10.
    """
    if not has_expected_probes(findings, [probes.MAINTAINERS_RESPOND_TO_BUG_ISSUES]):
        return invalid_probe_results(name)

    threshold = _threshold(findings)
    evaluated = 0
    violations = 0
    worst_non_violation = 0
    violating_issues: List[int] = []

    for f in findings:
        lag = int(f.values.get(probes.DAYS_WITHOUT_RESPONSE_KEY, 0))
        if f.outcome == Outcome.FALSE:
            evaluated += 1
            violations += 1
            log_finding(name, f)
            issue = f.values.get(probes.ISSUE_NUMBER_KEY)
            if issue:
                violating_issues.append(int(issue))
        elif f.outcome == Outcome.TRUE:
            evaluated += 1
            if lag < threshold:
                worst_non_violation = max(worst_non_violation, lag)

    if evaluated == 0:
        return create_max_score_result(name, "no issues with bug/security labels found")

    if violations == 0:
        return create_max_score_result(
            name, f"Evaluated {evaluated} issues with bug/security labels. All {evaluated} had timely "
                  f"maintainer activity (no label went >={threshold} days without response)")

    percent = violations / evaluated * 100.0
    if percent > 40.0:
        score = 0
    elif percent > 20.0:
        score = 5
    else:
        score = MAX_RESULT_SCORE

    reason = (f"Evaluated {evaluated} issues with bug/security labels. "
              f"{evaluated - violations} had activity by a maintainer within {threshold} days")
    if worst_non_violation > 0:
        reason += f" (worst {worst_non_violation} days)"
    reason += f". {percent:.1f}% exceeded {threshold} days without response"
    if violating_issues:
        reason += f"; violating issues: {_format_issue_list(violating_issues)}"

    logger.debug(f"{name}: evaluated issues: {evaluated}; violations: {violations}")
    return create_result_with_score(name, reason, score)
