"""
CII-Best-Practices Evaluation
=============================

Author: Scorecard Team
"""

from typing import List

from scorecard.checker.check_result import (
    CheckResult,
    create_min_score_result,
    create_result_with_score,
    create_runtime_error_result,
)
from scorecard.errors import ScorecardError
from scorecard.evaluation.common import has_expected_probes, invalid_probe_results
from scorecard.finding.finding import Finding
from scorecard.finding.outcome import Outcome
from scorecard.probes.best_practices import BADGE_LEVEL_KEY, HAS_OPENSSF_BADGE

IN_PROGRESS_SCORE = 2
PASSING_SCORE = 5
SILVER_SCORE = 7
GOLD_SCORE = 10

BADGE_SCORES = {
    "InProgress": IN_PROGRESS_SCORE,
    "Passing": PASSING_SCORE,
    "Silver": SILVER_SCORE,
    "Gold": GOLD_SCORE,
}


def best_practices(name: str, findings: List[Finding]) -> CheckResult:
    if not has_expected_probes(findings, [HAS_OPENSSF_BADGE]) or len(findings) != 1:
        return invalid_probe_results(name)

    f = findings[0]
    if f.outcome == Outcome.FALSE:
        return create_min_score_result(name, "no effort to earn an OpenSSF best practices badge detected")

    level = f.values.get(BADGE_LEVEL_KEY)
    if level not in BADGE_SCORES:
        return create_runtime_error_result(name, ScorecardError(f"unsupported badge: {level}"))
    return create_result_with_score(name, f"badge detected: {level}", BADGE_SCORES[level])
