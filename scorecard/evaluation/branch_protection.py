"""
Branch-Protection Evaluation
============================
Tiered scoring of the branch protection settings of every development
and release branch.

Each tier is scored across all branches and scoring stops at the first
tier that is not fully satisfied:

    Tier 1 (3 points): deletion and force pushes blocked
    Tier 2 (3 points): approvers required, up-to-date branches,
                       last push approval, PRs required
    Tier 3 (2 points): status checks required
    Tier 4 (1 point):  two or more approvers, code owner review
    Tier 5 (1 point):  stale reviews dismissed, rules apply to admins

Settings the collector could not read do not count towards the maximum
of tiers 2 and 5.

Author: Scorecard Team
"""

from dataclasses import dataclass, fields
from typing import Dict, List
import logging

from scorecard.checker.check_result import (
    MAX_RESULT_SCORE,
    MIN_RESULT_SCORE,
    CheckResult,
    create_inconclusive_result,
    create_max_score_result,
    create_min_score_result,
    create_result_with_score,
    create_runtime_error_result,
)
from scorecard.errors import ScorecardError
from scorecard.evaluation.common import has_expected_probes, int_value, invalid_probe_results, log_finding
from scorecard.finding.finding import Finding
from scorecard.finding.outcome import Outcome
from scorecard.probes import branch_protection as bp

logger = logging.getLogger(__name__)

EXPECTED_PROBES = [
    bp.BLOCKS_DELETE_ON_BRANCHES,
    bp.BLOCKS_FORCE_PUSH_ON_BRANCHES,
    bp.BRANCHES_ARE_PROTECTED,
    bp.BRANCH_PROTECTION_APPLIES_TO_ADMINS,
    bp.DISMISSES_STALE_REVIEWS,
    bp.REQUIRES_APPROVERS_FOR_PULL_REQUESTS,
    bp.REQUIRES_CODE_OWNERS_REVIEW,
    bp.REQUIRES_LAST_PUSH_APPROVAL,
    bp.REQUIRES_UP_TO_DATE_BRANCHES,
    bp.RUNS_STATUS_CHECKS_BEFORE_MERGING,
    bp.REQUIRES_PRS_TO_CHANGE_CODE,
]

MIN_REVIEWS = 2
REVIEWER_WEIGHT = 2

BASIC_LEVEL = 3
ADMIN_NON_ADMIN_REVIEW_LEVEL = 3
NON_ADMIN_CONTEXT_LEVEL = 2
NON_ADMIN_THOROUGH_REVIEW_LEVEL = 1
ADMIN_THOROUGH_REVIEW_LEVEL = 1

NO_BRANCHES_REASON = "unable to detect any development/release branches"


@dataclass
class ScoresInfo:
    basic: int = 0
    review: int = 0
    admin_review: int = 0
    context: int = 0
    thorough_review: int = 0
    admin_thorough_review: int = 0
    codeowner_review: int = 0

    def add(self, other: 'ScoresInfo') -> None:
        for f in fields(self):
            setattr(self, f.name, getattr(self, f.name) + getattr(other, f.name))


@dataclass
class LevelScore:
    """Points earned and points available for one branch."""
    scores: ScoresInfo
    maxes: ScoresInfo


def normalize_score(score: int, max_score: int, level: int) -> float:
    if max_score == 0:
        return float(level)
    return score * level / max_score


def _branch_name(finding: Finding) -> str:
    name = finding.values.get(bp.BRANCH_NAME_KEY)
    if not name:
        raise ScorecardError("probe is missing branch name")
    return name


def _reviewer_count(finding: Finding) -> int:
    # assume no review required if data not available
    if finding.outcome == Outcome.NOT_AVAILABLE:
        return 0
    return int_value(finding.values, bp.REQUIRED_REVIEWERS_KEY)


def _score_finding(finding: Finding, level: LevelScore) -> None:
    """Add the points one finding earns and makes available."""
    earned = 1 if finding.outcome == Outcome.TRUE else 0
    available = 0 if finding.outcome == Outcome.NOT_AVAILABLE else 1

    if finding.probe in (bp.BLOCKS_DELETE_ON_BRANCHES, bp.BLOCKS_FORCE_PUSH_ON_BRANCHES):
        level.scores.basic += earned
        level.maxes.basic += 1
    elif finding.probe in (bp.DISMISSES_STALE_REVIEWS, bp.BRANCH_PROTECTION_APPLIES_TO_ADMINS):
        level.scores.admin_thorough_review += earned
        level.maxes.admin_thorough_review += available
    elif finding.probe == bp.REQUIRES_APPROVERS_FOR_PULL_REQUESTS:
        reviewers = _reviewer_count(finding)
        # scored twice: once for any approver, once for a thorough review
        if finding.outcome == Outcome.TRUE and reviewers >= MIN_REVIEWS:
            level.scores.thorough_review += 1
        level.maxes.thorough_review += 1
        if finding.outcome == Outcome.TRUE and reviewers > 0:
            level.scores.review += REVIEWER_WEIGHT
        level.maxes.review += REVIEWER_WEIGHT
    elif finding.probe == bp.REQUIRES_CODE_OWNERS_REVIEW:
        level.scores.codeowner_review += earned
        level.maxes.codeowner_review += 1
    elif finding.probe in (bp.REQUIRES_UP_TO_DATE_BRANCHES, bp.REQUIRES_LAST_PUSH_APPROVAL,
                           bp.REQUIRES_PRS_TO_CHANGE_CODE):
        level.scores.admin_review += earned
        level.maxes.admin_review += available
    elif finding.probe == bp.RUNS_STATUS_CHECKS_BEFORE_MERGING:
        level.scores.context += earned
        level.maxes.context += 1


def compute_final_score(levels: List[LevelScore]) -> int:
    """
    Walk the tiers in order, stopping at the first incomplete one.

    Raises:
        ScorecardError: If there are no branch scores
    """
    if not levels:
        raise ScorecardError("scores are empty")

    scores = ScoresInfo()
    maxes = ScoresInfo()
    for level in levels:
        scores.add(level.scores)
        maxes.add(level.maxes)

    tiers = [
        (scores.basic, maxes.basic, BASIC_LEVEL),
        (scores.review + scores.admin_review, maxes.review + maxes.admin_review, ADMIN_NON_ADMIN_REVIEW_LEVEL),
        (scores.context, maxes.context, NON_ADMIN_CONTEXT_LEVEL),
        (scores.thorough_review + scores.codeowner_review,
         maxes.thorough_review + maxes.codeowner_review, NON_ADMIN_THOROUGH_REVIEW_LEVEL),
        (scores.admin_thorough_review, maxes.admin_thorough_review, ADMIN_THOROUGH_REVIEW_LEVEL),
    ]

    total = 0.0
    for earned, available, points in tiers:
        total += normalize_score(earned, available, points)
        if earned < available:
            break
    return int(total)


def branch_protection(name: str, findings: List[Finding]) -> CheckResult:
    if not has_expected_probes(findings, EXPECTED_PROBES):
        return invalid_probe_results(name)

    if any(f.outcome == Outcome.NOT_APPLICABLE for f in findings):
        return create_inconclusive_result(name, NO_BRANCHES_REASON)

    try:
        protected: Dict[str, bool] = {}
        for f in findings:
            if f.probe != bp.BRANCHES_ARE_PROTECTED:
                continue
            branch = _branch_name(f)
            if f.outcome == Outcome.FALSE:
                protected[branch] = False
                logger.warning(f"{name}: branch protection not enabled for branch '{branch}'")
            elif f.outcome == Outcome.TRUE:
                protected[branch] = True

        branch_scores: Dict[str, LevelScore] = {}
        for f in findings:
            branch = _branch_name(f)
            level = branch_scores.setdefault(branch, LevelScore(ScoresInfo(), ScoresInfo()))
            if protected.get(branch):
                log_finding(name, f)
            _score_finding(f, level)

        if not branch_scores:
            return create_inconclusive_result(name, NO_BRANCHES_REASON)

        score = compute_final_score(list(branch_scores.values()))
    except ScorecardError as e:
        return create_runtime_error_result(name, e)

    if score == MIN_RESULT_SCORE:
        return create_min_score_result(name, "branch protection not enabled on development/release branches")
    if score == MAX_RESULT_SCORE:
        return create_max_score_result(name,
                                       "branch protection is fully enabled on development and all release branches")
    return create_result_with_score(name, "branch protection is not maximal on development and all release branches",
                                    score)
