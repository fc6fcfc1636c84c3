"""
Maintainer Health Probes
========================
Dependency update latency, maintainer inactivity and responsiveness to
bug and security issues.

Author: Scorecard Team
"""

from typing import List, Tuple

from scorecard.checker.raw_results import RawResults
from scorecard.finding.finding import FileType, Finding, Location
from scorecard.finding.outcome import Outcome
from scorecard.probes.utils import new_finding, require

MTTU_DEPENDENCIES_IS_HIGH = "mttuDependenciesIsHigh"
MTTU_DEPENDENCIES_IS_LOW = "mttuDependenciesIsLow"
MTTU_DEPENDENCIES_IS_VERY_LOW = "mttuDependenciesIsVeryLow"
HAS_INACTIVE_MAINTAINERS = "hasInactiveMaintainers"
MAINTAINERS_RESPOND_TO_BUG_ISSUES = "maintainersRespondToBugIssues"

MEAN_DAYS_KEY = "meanDaysToUpdate"
USERNAME_KEY = "username"
ISSUE_NUMBER_KEY = "issueNumber"
DAYS_WITHOUT_RESPONSE_KEY = "daysWithoutResponse"
THRESHOLD_DAYS_KEY = "thresholdDays"

MTTU_HIGH_DAYS = 180
MTTU_VERY_LOW_DAYS = 14
INACTIVE_DAYS = 180
RESPONSE_THRESHOLD_DAYS = 180


# ============================================================================
# MEAN TIME TO UPDATE
# ============================================================================

def mean_days_to_update(raw: RawResults) -> float:
    """
    Mean staleness, in days, over the lockfile dependencies.

    Raises:
        ProbeExecutionError: When the dependency data was not collected
    """
    require(raw, "raw results")
    deps = require(raw.mttu_dependencies, "dependency update results").dependencies
    if not deps:
        return 0.0
    return sum(dep.staleness_days() for dep in deps) / len(deps)


def _mttu(raw: RawResults, probe_id: str, low: float, high: float, label: str) -> Tuple[List[Finding], str]:
    """True when ``low <= mean < high``."""
    require(raw, "raw results")
    deps = require(raw.mttu_dependencies, "dependency update results").dependencies
    if not deps:
        return [new_finding(probe_id, "no lockfile dependencies found", Outcome.NOT_APPLICABLE)], probe_id

    mean = mean_days_to_update(raw)
    if low <= mean < high:
        f = new_finding(probe_id, f"mean time to update dependencies is {label} ({mean:.1f} days)", Outcome.TRUE)
    else:
        f = new_finding(probe_id, f"mean time to update dependencies is not {label} ({mean:.1f} days)",
                        Outcome.FALSE)
    return [f.with_value(MEAN_DAYS_KEY, round(mean, 2))], probe_id


def mttu_dependencies_is_high(raw: RawResults, high_days: int = MTTU_HIGH_DAYS) -> Tuple[List[Finding], str]:
    return _mttu(raw, MTTU_DEPENDENCIES_IS_HIGH, high_days, float('inf'), "high")


def mttu_dependencies_is_low(raw: RawResults, high_days: int = MTTU_HIGH_DAYS) -> Tuple[List[Finding], str]:
    return _mttu(raw, MTTU_DEPENDENCIES_IS_LOW, MTTU_VERY_LOW_DAYS, high_days, "low")


def mttu_dependencies_is_very_low(raw: RawResults) -> Tuple[List[Finding], str]:
    return _mttu(raw, MTTU_DEPENDENCIES_IS_VERY_LOW, 0.0, MTTU_VERY_LOW_DAYS, "very low")


# ============================================================================
# MAINTAINER ACTIVITY
# ============================================================================

def has_inactive_maintainers(raw: RawResults, inactive_days: int = INACTIVE_DAYS) -> Tuple[List[Finding], str]:
    require(raw, "raw results")
    activity = require(raw.maintainer_activity, "maintainer activity results").activity

    if not activity:
        return [new_finding(HAS_INACTIVE_MAINTAINERS, "no maintainers found",
                            Outcome.NOT_APPLICABLE)], HAS_INACTIVE_MAINTAINERS

    findings = []
    for username in sorted(activity):
        if activity[username]:
            f = new_finding(HAS_INACTIVE_MAINTAINERS,
                            f"{username} has been active in the last {inactive_days} days", Outcome.FALSE)
        else:
            f = new_finding(HAS_INACTIVE_MAINTAINERS,
                            f"{username} has not been active in the last {inactive_days} days", Outcome.TRUE)
        findings.append(f.with_value(USERNAME_KEY, username))
    return findings, HAS_INACTIVE_MAINTAINERS


def maintainers_respond_to_bug_issues(raw: RawResults,
                                      threshold_days: int = RESPONSE_THRESHOLD_DAYS) -> Tuple[List[Finding], str]:
    """
    One finding per issue that carried a bug or security label.

    An issue fails when any of its label intervals went ``threshold_days``
    or longer without maintainer activity.
    """
    require(raw, "raw results")
    items = require(raw.maintainer_response, "maintainer response results").items
    probe_id = MAINTAINERS_RESPOND_TO_BUG_ISSUES

    tracked = [item for item in items if item.intervals]
    if not tracked:
        return [new_finding(probe_id, "no issues with bug or security labels found",
                            Outcome.NOT_APPLICABLE)], probe_id

    findings = []
    for item in tracked:
        worst = max(interval.days_without_response for interval in item.intervals)
        location = Location(type=FileType.URL, path=item.issue_url) if item.issue_url else None
        if worst >= threshold_days:
            f = new_finding(probe_id, f"issue #{item.issue_number} went {worst} days without a maintainer response",
                            Outcome.FALSE, location)
        else:
            f = new_finding(probe_id, f"issue #{item.issue_number} received a maintainer response within "
                            f"{threshold_days} days", Outcome.TRUE, location)
        findings.append(f.with_values({
            ISSUE_NUMBER_KEY: item.issue_number,
            DAYS_WITHOUT_RESPONSE_KEY: worst,
            THRESHOLD_DAYS_KEY: threshold_days,
        }))
    return findings, probe_id
