"""
SAST Evaluation
===============
Combines whether a static analysis tool is configured with the share of
recent commits it analyzed.

Author: Scorecard Team
"""

from typing import List, Optional

from scorecard.checker.check_result import (
    INCONCLUSIVE_RESULT_SCORE,
    MAX_RESULT_SCORE,
    CheckResult,
    aggregate_scores_with_weight,
    create_max_score_result,
    create_min_score_result,
    create_proportional_score,
    create_result_with_score,
    create_runtime_error_result,
    normalize_reason,
)
from scorecard.errors import ScorecardError
from scorecard.evaluation.common import has_expected_probes, int_value, invalid_probe_results, log_finding
from scorecard.finding.finding import Finding
from scorecard.finding.outcome import Outcome
from scorecard.probes.tooling import (
    ANALYZED_PRS_KEY,
    SAST_TOOL_CONFIGURED,
    SAST_TOOL_KEY,
    SAST_TOOL_RUNS_ON_ALL_COMMITS,
    TOTAL_PRS_KEY,
)

RUNS_WEIGHT = 3
TOOL_WEIGHT = 7


def _runs_score(finding: Finding) -> int:
    if finding.outcome == Outcome.NOT_APPLICABLE:
        return INCONCLUSIVE_RESULT_SCORE
    analyzed = int_value(finding.values, ANALYZED_PRS_KEY)
    total = int_value(finding.values, TOTAL_PRS_KEY)
    if total == 0:
        return INCONCLUSIVE_RESULT_SCORE
    return create_proportional_score(analyzed, total)


def sast(name: str, findings: List[Finding]) -> CheckResult:
    if not has_expected_probes(findings, [SAST_TOOL_CONFIGURED, SAST_TOOL_RUNS_ON_ALL_COMMITS]):
        return invalid_probe_results(name)

    runs_score = INCONCLUSIVE_RESULT_SCORE
    tool: Optional[str] = None
    try:
        for f in findings:
            log_finding(name, f)
            if f.probe == SAST_TOOL_RUNS_ON_ALL_COMMITS:
                runs_score = _runs_score(f)
            elif f.outcome == Outcome.TRUE and tool is None:
                tool = f.values.get(SAST_TOOL_KEY, "")
    except ScorecardError as e:
        return create_runtime_error_result(name, e)

    if runs_score == MAX_RESULT_SCORE:
        return create_max_score_result(name, "SAST tool is run on all commits")

    if tool is not None:
        if runs_score == INCONCLUSIVE_RESULT_SCORE:
            return create_max_score_result(name, f"SAST tool detected: {tool}")
        score = aggregate_scores_with_weight([(runs_score, RUNS_WEIGHT), (MAX_RESULT_SCORE, TOOL_WEIGHT)])
        return create_result_with_score(name, "SAST tool detected but not run on all commits", score)

    if runs_score != INCONCLUSIVE_RESULT_SCORE:
        return create_result_with_score(name, normalize_reason("SAST tool is not run on all commits", runs_score),
                                        runs_score)
    return create_min_score_result(name, "no SAST tool detected")
