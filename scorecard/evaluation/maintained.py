"""
Maintained Evaluation
=====================
Recent commits and issue activity, with archived and newly created
projects scored at the minimum.

Author: Scorecard Team
"""

from typing import List

from scorecard.checker.check_result import (
    CheckResult,
    create_min_score_result,
    create_proportional_score_result,
    create_runtime_error_result,
)
from scorecard.errors import ScorecardError
from scorecard.evaluation.common import has_expected_probes, int_value, invalid_probe_results, log_finding
from scorecard.finding.finding import Finding
from scorecard.finding.outcome import Outcome
from scorecard.probes import maintained as probes

# One unit of activity per week over roughly three months
ACTIVITY_PER_WEEK = 1
WEEKS = 12


def maintained(name: str, findings: List[Finding]) -> CheckResult:
    expected = [probes.ARCHIVED, probes.CREATED_RECENTLY, probes.HAS_RECENT_COMMITS,
                probes.ISSUE_ACTIVITY_BY_PROJECT_MEMBER]
    if not has_expected_probes(findings, expected):
        return invalid_probe_results(name)

    commits = 0
    issues = 0
    lookback = probes.LOOKBACK_DAYS
    try:
        for f in findings:
            if f.probe == probes.ARCHIVED and f.outcome == Outcome.TRUE:
                log_finding(name, f)
                return create_min_score_result(name, "project is archived")
            if f.probe == probes.CREATED_RECENTLY and f.outcome == Outcome.TRUE:
                log_finding(name, f)
                return create_min_score_result(
                    name, f"project was created within the last {probes.LOOKBACK_DAYS} days. "
                          "Please review its contents carefully")
            if f.probe == probes.HAS_RECENT_COMMITS:
                commits = int_value(f.values, probes.COMMITS_VALUE_KEY)
                lookback = int_value(f.values, probes.LOOKBACK_DAYS_KEY)
            elif f.probe == probes.ISSUE_ACTIVITY_BY_PROJECT_MEMBER:
                issues = int_value(f.values, probes.ISSUES_VALUE_KEY)
    except ScorecardError as e:
        return create_runtime_error_result(name, e)

    return create_proportional_score_result(
        name, f"{commits} commit(s) and {issues} issue activity found in the last {lookback} days",
        commits + issues, ACTIVITY_PER_WEEK * WEEKS)
