"""
Contributor Probes
==================

Author: Scorecard Team
"""

from typing import List, Tuple

from scorecard.checker.raw_results import RawResults
from scorecard.finding.finding import Finding
from scorecard.finding.outcome import Outcome
from scorecard.probes.utils import new_finding, require

CONTRIBUTORS_FROM_ORG_OR_COMPANY = "contributorsFromOrgOrCompany"

MIN_CONTRIBUTIONS = 5


def contributors_from_org_or_company(raw: RawResults) -> Tuple[List[Finding], str]:
    """One True finding per distinct organization or company of active contributors."""
    require(raw, "raw results")
    users = require(raw.contributors, "contributors results").users

    entities = []
    for user in users:
        if user.num_contributions < MIN_CONTRIBUTIONS:
            continue
        for name in list(user.organizations) + list(user.companies):
            if name and name not in entities:
                entities.append(name)

    if not entities:
        return [new_finding(CONTRIBUTORS_FROM_ORG_OR_COMPANY,
                            "No companies/organizations have contributed to the project.",
                            Outcome.FALSE)], CONTRIBUTORS_FROM_ORG_OR_COMPANY

    findings = [
        new_finding(CONTRIBUTORS_FROM_ORG_OR_COMPANY,
                    f"found contributions from: {name}", Outcome.TRUE)
        for name in sorted(entities)
    ]
    return findings, CONTRIBUTORS_FROM_ORG_OR_COMPANY
