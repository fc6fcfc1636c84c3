"""
Vulnerabilities Evaluation
==========================
Six points for having no open vulnerabilities (one off per
vulnerability) plus four points scaled by the share of recent releases
shipped without vulnerable direct dependencies.

Author: Scorecard Team
"""

from decimal import ROUND_HALF_UP, Decimal
from typing import List

from scorecard.checker.check_result import (
    MAX_RESULT_SCORE,
    MIN_RESULT_SCORE,
    CheckResult,
    create_result_with_score,
)
from scorecard.evaluation.common import invalid_probe_results, log_finding
from scorecard.finding.finding import Finding
from scorecard.finding.outcome import Outcome
from scorecard.probes.vulnerabilities import HAS_OSV_VULNERABILITIES, RELEASES_DIRECT_DEPS_ARE_VULN_FREE

CURRENT_POINTS = 6
RELEASE_POINTS = 4


def round_half_up(value: float) -> int:
    return int(Decimal(str(value)).quantize(Decimal('1'), rounding=ROUND_HALF_UP))


def vulnerabilities(name: str, findings: List[Finding]) -> CheckResult:
    if not any(f.probe == HAS_OSV_VULNERABILITIES for f in findings):
        return invalid_probe_results(name, "missing hasOSVVulnerabilities probe results")

    current = 0
    total_releases = 0
    clean_releases = 0
    for f in findings:
        if f.probe == HAS_OSV_VULNERABILITIES and f.outcome == Outcome.TRUE:
            current += 1
            log_finding(name, f)
        elif f.probe == RELEASES_DIRECT_DEPS_ARE_VULN_FREE and f.outcome.is_boolean:
            total_releases += 1
            if f.outcome == Outcome.TRUE:
                clean_releases += 1
            else:
                log_finding(name, f)

    current_component = CURRENT_POINTS - min(current, CURRENT_POINTS)
    release_component = float(RELEASE_POINTS)
    if total_releases > 0:
        release_component = RELEASE_POINTS * clean_releases / total_releases

    score = round_half_up(current_component + release_component)
    score = min(max(score, MIN_RESULT_SCORE), MAX_RESULT_SCORE)

    if total_releases > 0:
        reason = (f"{current} current vulnerabilities detected, {clean_releases}/{total_releases} "
                  f"recent releases were free of vulnerabilities at time of release")
    else:
        reason = f"{current} existing vulnerabilities detected"
    return create_result_with_score(name, reason, score)
