"""
Check Results and Scoring
=========================
Score constants, score arithmetic and result constructors used by every
check evaluation.

Scores run from 0 to 10. ``INCONCLUSIVE_RESULT_SCORE`` (-1) marks a check
that had nothing to evaluate or failed internally; it is never averaged
into an aggregate score.

Author: Scorecard Team
"""

from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Optional, Sequence, Tuple
import logging

from scorecard.errors import InvalidScoreError
from scorecard.finding.finding import Finding

logger = logging.getLogger(__name__)

MAX_RESULT_SCORE = 10
MIN_RESULT_SCORE = 0
INCONCLUSIVE_RESULT_SCORE = -1

RESULT_VERSION = 2


@dataclass(frozen=True)
class ProportionalScoreWeighted:
    """One group of a weighted proportional score."""
    success: int
    total: int
    weight: int


@dataclass
class CheckResult:
    """Outcome of one check: a score, the reason for it and its evidence."""
    name: str
    score: int
    reason: str
    error: Optional[str] = None
    findings: List[Finding] = field(default_factory=list)
    version: int = RESULT_VERSION

    @property
    def is_conclusive(self) -> bool:
        return self.score >= MIN_RESULT_SCORE and self.error is None

    def with_findings(self, findings: Iterable[Finding]) -> 'CheckResult':
        self.findings = list(findings)
        return self

    def to_dict(self) -> Dict[str, Any]:
        data = {
            'name': self.name,
            'version': self.version,
            'score': self.score,
            'reason': self.reason,
            'findings': [f.to_dict() for f in self.findings],
        }
        if self.error is not None:
            data['error'] = self.error
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'CheckResult':
        return cls(
            name=data['name'],
            score=data['score'],
            reason=data.get('reason', ''),
            error=data.get('error'),
            findings=[Finding.from_dict(f) for f in data.get('findings', [])],
            version=data.get('version', RESULT_VERSION),
        )


# ============================================================================
# SCORE ARITHMETIC
# ============================================================================

def create_proportional_score(success: int, total: int) -> int:
    """
    Scale ``success`` out of ``total`` onto 0-10.

    Returns 0 when there is nothing to count.
    """
    if total == 0:
        return MIN_RESULT_SCORE
    return min(MAX_RESULT_SCORE * success // total, MAX_RESULT_SCORE)


def create_proportional_score_weighted(scores: Sequence[ProportionalScoreWeighted]) -> int:
    """
    Combine several proportional groups using their weights.

    Groups with a zero total are skipped. When every group is skipped the
    result is inconclusive; when every remaining weight is zero the result
    is the maximum score.

    Raises:
        InvalidScoreError: If a group reports more successes than its total
    """
    ws = 0.0
    wt = 0
    all_weights_zero = True
    no_score_groups = True

    for group in scores:
        if group.success > group.total:
            raise InvalidScoreError(
                f"invalid score group: success ({group.success}) greater than total ({group.total})"
            )
        if group.total == 0:
            continue
        no_score_groups = False
        if group.weight != 0:
            all_weights_zero = False
        ws += group.success * group.weight / group.total
        wt += group.weight

    if no_score_groups:
        return INCONCLUSIVE_RESULT_SCORE
    if all_weights_zero:
        return MAX_RESULT_SCORE
    return min(int(MAX_RESULT_SCORE * ws // wt), MAX_RESULT_SCORE)


def aggregate_scores(*scores: int) -> int:
    """Floor of the plain mean of ``scores``."""
    if not scores:
        return INCONCLUSIVE_RESULT_SCORE
    return sum(scores) // len(scores)


def aggregate_scores_with_weight(weighted: Sequence[Tuple[int, int]]) -> int:
    """
    Floor of the weighted mean of ``(score, weight)`` pairs.

    Pairs are kept as a list so equal scores with different weights are
    both counted.
    """
    total_weight = sum(weight for _, weight in weighted)
    if total_weight == 0:
        return INCONCLUSIVE_RESULT_SCORE
    return sum(score * weight for score, weight in weighted) // total_weight


def normalize_reason(reason: str, score: int) -> str:
    return f"{reason} -- score normalized to {score}"


# ============================================================================
# RESULT CONSTRUCTORS
# ============================================================================

def create_runtime_error_result(name: str, error: Any) -> CheckResult:
    message = str(error)
    logger.error(f"{name}: internal error: {message}")
    return CheckResult(
        name=name,
        score=INCONCLUSIVE_RESULT_SCORE,
        reason=f"internal error: {message}",
        error=message,
    )


def create_result_with_score(name: str, reason: str, score: int) -> CheckResult:
    """Result with an explicit score; scores outside 0-10 become runtime errors."""
    if not MIN_RESULT_SCORE <= score <= MAX_RESULT_SCORE:
        return create_runtime_error_result(name, InvalidScoreError(f"invalid score ({score}), please report this"))
    return CheckResult(name=name, score=score, reason=reason)


def create_proportional_score_result(name: str, reason: str, success: int, total: int) -> CheckResult:
    score = create_proportional_score(success, total)
    return create_result_with_score(name, normalize_reason(reason, score), score)


def create_max_score_result(name: str, reason: str) -> CheckResult:
    return create_result_with_score(name, reason, MAX_RESULT_SCORE)


def create_min_score_result(name: str, reason: str) -> CheckResult:
    return create_result_with_score(name, reason, MIN_RESULT_SCORE)


def create_inconclusive_result(name: str, reason: str) -> CheckResult:
    return CheckResult(name=name, score=INCONCLUSIVE_RESULT_SCORE, reason=reason)
