"""
Contributors Evaluation
=======================

Author: Scorecard Team
"""

from typing import List

from scorecard.checker.check_result import CheckResult, create_proportional_score_result
from scorecard.evaluation.common import has_expected_probes, invalid_probe_results, log_findings
from scorecard.finding.finding import Finding
from scorecard.finding.outcome import Outcome
from scorecard.probes.contributors import CONTRIBUTORS_FROM_ORG_OR_COMPANY

# Three organizations earn the maximum score
NUM_CONTRIBUTOR_ORGS = 3


def contributors(name: str, findings: List[Finding]) -> CheckResult:
    if not has_expected_probes(findings, [CONTRIBUTORS_FROM_ORG_OR_COMPANY]):
        return invalid_probe_results(name)

    log_findings(name, findings)
    orgs = sum(1 for f in findings if f.outcome == Outcome.TRUE)
    return create_proportional_score_result(
        name, f"{orgs} different organizations found", orgs, NUM_CONTRIBUTOR_ORGS)
