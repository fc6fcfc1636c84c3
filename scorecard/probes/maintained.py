"""
Maintenance Activity Probes
===========================
Archive status, repository age, recent commits and issue activity by
project members, all measured against the ``now`` reference carried by
the raw results.

Author: Scorecard Team
"""

from datetime import datetime, timedelta
from typing import List, Optional, Tuple

from scorecard.checker.raw_results import Issue, MaintainedData, RawResults, as_utc
from scorecard.finding.finding import Finding
from scorecard.finding.outcome import Outcome
from scorecard.probes.utils import new_finding, require

ARCHIVED = "archived"
CREATED_RECENTLY = "createdRecently"
HAS_RECENT_COMMITS = "hasRecentCommits"
ISSUE_ACTIVITY_BY_PROJECT_MEMBER = "issueActivityByProjectMember"

COMMITS_VALUE_KEY = "commitsWithinThreshold"
ISSUES_VALUE_KEY = "numberOfIssuesUpdatedWithinThreshold"
LOOKBACK_DAYS_KEY = "lookBackDays"

LOOKBACK_DAYS = 90


def _maintained(raw: RawResults) -> MaintainedData:
    require(raw, "raw results")
    return require(raw.maintained, "maintained results")


def _within(moment: Optional[datetime], now: datetime, days: int) -> bool:
    return moment is not None and as_utc(moment) > as_utc(now) - timedelta(days=days)


def archived(raw: RawResults) -> Tuple[List[Finding], str]:
    data = _maintained(raw)
    if data.archived:
        return [new_finding(ARCHIVED, "Repository is archived.", Outcome.TRUE)], ARCHIVED
    return [new_finding(ARCHIVED, "Repository is not archived.", Outcome.FALSE)], ARCHIVED


def created_recently(raw: RawResults, lookback_days: int = LOOKBACK_DAYS) -> Tuple[List[Finding], str]:
    data = _maintained(raw)
    if _within(data.created_at, raw.now, lookback_days):
        f = new_finding(CREATED_RECENTLY, f"Repository was created in last {lookback_days} days.", Outcome.TRUE)
    else:
        f = new_finding(CREATED_RECENTLY, f"Repository was not created in last {lookback_days} days.",
                        Outcome.FALSE)
    return [f.with_value(LOOKBACK_DAYS_KEY, lookback_days)], CREATED_RECENTLY


def has_recent_commits(raw: RawResults, lookback_days: int = LOOKBACK_DAYS) -> Tuple[List[Finding], str]:
    data = _maintained(raw)
    commits = sum(1 for c in data.default_branch_commits if _within(c.committed_date, raw.now, lookback_days))

    if commits > 0:
        f = new_finding(HAS_RECENT_COMMITS, f"Found {commits} commits in the last {lookback_days} days",
                        Outcome.TRUE)
    else:
        f = new_finding(HAS_RECENT_COMMITS, f"Did not find commits in the last {lookback_days} days",
                        Outcome.FALSE)
    return [f.with_values({COMMITS_VALUE_KEY: commits, LOOKBACK_DAYS_KEY: lookback_days})], HAS_RECENT_COMMITS


def has_member_activity(issue: Issue, now: datetime, days: int = LOOKBACK_DAYS) -> bool:
    """True when a maintainer opened or commented on ``issue`` within the window."""
    if issue.author_association.is_member and _within(issue.created_at, now, days):
        return True
    return any(
        comment.author_association.is_member and _within(comment.created_at, now, days)
        for comment in issue.comments
    )


def issue_activity_by_project_member(raw: RawResults,
                                     lookback_days: int = LOOKBACK_DAYS) -> Tuple[List[Finding], str]:
    data = _maintained(raw)
    count = sum(1 for issue in data.issues if has_member_activity(issue, raw.now, lookback_days))

    if count > 0:
        f = new_finding(ISSUE_ACTIVITY_BY_PROJECT_MEMBER,
                        f"Found a total of {count} issues active in the last {lookback_days} days",
                        Outcome.TRUE)
    else:
        f = new_finding(ISSUE_ACTIVITY_BY_PROJECT_MEMBER,
                        f"Found no issues active in the last {lookback_days} days", Outcome.FALSE)
    return [f.with_values({ISSUES_VALUE_KEY: count, LOOKBACK_DAYS_KEY: lookback_days})], \
        ISSUE_ACTIVITY_BY_PROJECT_MEMBER
