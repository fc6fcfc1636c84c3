"""
License Evaluation
==================

Author: Scorecard Team
"""

from typing import List, Set

from scorecard.checker.check_result import (
    MAX_RESULT_SCORE,
    CheckResult,
    create_max_score_result,
    create_min_score_result,
    create_result_with_score,
)
from scorecard.evaluation.common import has_expected_probes, invalid_probe_results, log_findings
from scorecard.finding.finding import Finding
from scorecard.finding.outcome import Outcome
from scorecard.probes.license import (
    HAS_FSF_OR_OSI_APPROVED_LICENSE,
    HAS_LICENSE_FILE,
    HAS_LICENSE_FILE_AT_TOP_DIR,
)

PROBE_POINTS = {
    HAS_LICENSE_FILE: 6,
    HAS_LICENSE_FILE_AT_TOP_DIR: 3,
    HAS_FSF_OR_OSI_APPROVED_LICENSE: 1,
}


def license(name: str, findings: List[Finding]) -> CheckResult:
    if not has_expected_probes(findings, PROBE_POINTS):
        return invalid_probe_results(name)

    log_findings(name, findings)
    scored: Set[str] = set()
    score = 0
    for f in findings:
        # each probe is worth its points once, however many files match
        if f.outcome == Outcome.TRUE and f.probe not in scored:
            scored.add(f.probe)
            score += PROBE_POINTS[f.probe]

    if HAS_LICENSE_FILE not in scored:
        return create_min_score_result(name, "license file not detected")
    if score == MAX_RESULT_SCORE:
        return create_max_score_result(name, "license file detected")
    return create_result_with_score(name, "license file detected", score)
