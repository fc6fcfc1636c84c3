"""
Webhook Probes
==============

Author: Scorecard Team
"""

from typing import List, Tuple

from scorecard.checker.raw_results import RawResults
from scorecard.finding.finding import FileType, Finding, Location
from scorecard.finding.outcome import Outcome
from scorecard.probes.utils import new_finding, require

WEBHOOKS_USE_SECRETS = "webhooksUseSecrets"


def webhooks_use_secrets(raw: RawResults) -> Tuple[List[Finding], str]:
    require(raw, "raw results")
    data = require(raw.webhooks, "webhooks results")

    if not data.webhooks:
        return [new_finding(WEBHOOKS_USE_SECRETS, "Repository does not have webhooks.",
                            Outcome.NOT_APPLICABLE)], WEBHOOKS_USE_SECRETS

    findings = []
    for hook in data.webhooks:
        location = Location(type=FileType.URL, path=hook.path) if hook.path else None
        if hook.uses_auth_secret:
            findings.append(new_finding(WEBHOOKS_USE_SECRETS, "Webhook with token authorization found.",
                                        Outcome.TRUE, location))
        else:
            findings.append(new_finding(WEBHOOKS_USE_SECRETS, "Webhook with no token authorization found.",
                                        Outcome.FALSE, location))
    return findings, WEBHOOKS_USE_SECRETS
