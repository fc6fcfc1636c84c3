"""
Pinned-Dependencies Evaluation
==============================
Proportion of dependencies pinned by hash, scored per dependency type.

GitHub Actions are split into GitHub-owned and third-party actions and
weighted 2:8. Every other dependency type observed in the repository
gets its own proportional score, and the check score is the mean of the
groups present.

Author: Scorecard Team
"""

from collections import OrderedDict
from dataclasses import dataclass
from typing import Dict, List
import logging

from scorecard.checker.check_result import (
    MAX_RESULT_SCORE,
    CheckResult,
    aggregate_scores,
    aggregate_scores_with_weight,
    create_inconclusive_result,
    create_max_score_result,
    create_proportional_score,
    create_proportional_score_result,
)
from scorecard.checker.raw_results import DependencyUseType, is_github_owned_action
from scorecard.evaluation.common import has_expected_probes, invalid_probe_results, log_finding
from scorecard.finding.finding import Finding
from scorecard.finding.outcome import Outcome
from scorecard.probes.pinning import DEP_TYPE_KEY, PINS_DEPENDENCIES

logger = logging.getLogger(__name__)

GITHUB_OWNED_WEIGHT = 2
THIRD_PARTY_WEIGHT = 8


@dataclass
class PinnedCount:
    pinned: int = 0
    total: int = 0

    def add(self, is_pinned: bool) -> None:
        self.total += 1
        if is_pinned:
            self.pinned += 1

    def score(self) -> int:
        # nothing to pin is as good as everything pinned
        if self.total == 0:
            return MAX_RESULT_SCORE
        return create_proportional_score(self.pinned, self.total)


def _is_github_owned(finding: Finding) -> bool:
    snippet = finding.location.snippet if finding.location is not None else None
    return is_github_owned_action(snippet or "")


def github_actions_score(github_owned: PinnedCount, third_party: PinnedCount) -> int:
    return aggregate_scores_with_weight([
        (github_owned.score(), GITHUB_OWNED_WEIGHT),
        (third_party.score(), THIRD_PARTY_WEIGHT),
    ])


def pinned_dependencies(name: str, findings: List[Finding]) -> CheckResult:
    if not has_expected_probes(findings, [PINS_DEPENDENCIES]):
        return invalid_probe_results(name)

    github_owned = PinnedCount()
    third_party = PinnedCount()
    others: Dict[str, PinnedCount] = OrderedDict()
    has_actions = False

    for f in findings:
        if f.outcome == Outcome.ERROR:
            logger.warning(f"{name}: {f.message}")
            continue
        if not f.outcome.is_boolean:
            log_finding(name, f)
            continue

        log_finding(name, f)
        dep_type = f.values.get(DEP_TYPE_KEY, "")
        is_pinned = f.outcome == Outcome.TRUE
        if dep_type == DependencyUseType.GITHUB_ACTION.value:
            has_actions = True
            (github_owned if _is_github_owned(f) else third_party).add(is_pinned)
        else:
            others.setdefault(dep_type, PinnedCount()).add(is_pinned)

    scores = [count.score() for count in others.values()]
    if has_actions:
        scores.insert(0, github_actions_score(github_owned, third_party))

    if not scores:
        return create_inconclusive_result(name, "no dependencies found")

    score = aggregate_scores(*scores)
    if score == MAX_RESULT_SCORE:
        return create_max_score_result(name, "all dependencies are pinned")
    return create_proportional_score_result(name, "dependency not pinned by hash detected", score, MAX_RESULT_SCORE)
