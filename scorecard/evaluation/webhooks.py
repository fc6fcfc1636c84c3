"""
Webhooks Evaluation
===================

Author: Scorecard Team
"""

from typing import List

from scorecard.checker.check_result import (
    CheckResult,
    create_max_score_result,
    create_proportional_score_result,
)
from scorecard.evaluation.common import has_expected_probes, invalid_probe_results, log_findings
from scorecard.finding.finding import Finding
from scorecard.finding.outcome import Outcome
from scorecard.probes.webhooks import WEBHOOKS_USE_SECRETS


def webhooks(name: str, findings: List[Finding]) -> CheckResult:
    if not has_expected_probes(findings, [WEBHOOKS_USE_SECRETS]):
        return invalid_probe_results(name)

    if all(f.outcome == Outcome.NOT_APPLICABLE for f in findings):
        return create_max_score_result(name, "no webhooks defined")

    log_findings(name, findings)
    total = sum(1 for f in findings if f.outcome.is_boolean)
    secured = sum(1 for f in findings if f.outcome == Outcome.TRUE)
    return create_proportional_score_result(
        name, f"{total - secured} out of {total} webhooks are not protected by a secret", secured, total)
