"""
Security-Policy Evaluation
==========================

Author: Scorecard Team
"""

from typing import List

from scorecard.checker.check_result import (
    MAX_RESULT_SCORE,
    CheckResult,
    create_min_score_result,
    create_result_with_score,
)
from scorecard.evaluation.common import has_expected_probes, invalid_probe_results, log_findings
from scorecard.finding.finding import Finding
from scorecard.finding.outcome import Outcome
from scorecard.probes import security_policy as probes

PROBE_POINTS = {
    probes.SECURITY_POLICY_CONTAINS_LINKS: 6,
    probes.SECURITY_POLICY_CONTAINS_TEXT: 3,
    probes.SECURITY_POLICY_CONTAINS_VULNERABILITY_DISCLOSURE: 1,
}


def security_policy(name: str, findings: List[Finding]) -> CheckResult:
    expected = [probes.SECURITY_POLICY_PRESENT] + list(PROBE_POINTS)
    if not has_expected_probes(findings, expected):
        return invalid_probe_results(name)

    log_findings(name, findings)
    present = any(f.probe == probes.SECURITY_POLICY_PRESENT and f.outcome == Outcome.TRUE for f in findings)
    if not present:
        return create_min_score_result(name, "security policy file not detected")

    score = 0
    for f in findings:
        if f.outcome == Outcome.TRUE and f.probe in PROBE_POINTS:
            score += PROBE_POINTS[f.probe]
    return create_result_with_score(name, "security policy file detected", min(score, MAX_RESULT_SCORE))
