"""
OpenSSF Best Practices Badge Probe
==================================

Author: Scorecard Team
"""

from typing import List, Tuple

from scorecard.checker.raw_results import BadgeLevel, RawResults
from scorecard.errors import ProbeExecutionError
from scorecard.finding.finding import Finding
from scorecard.finding.outcome import Outcome
from scorecard.probes.utils import new_finding, require

HAS_OPENSSF_BADGE = "hasOpenSSFBadge"
BADGE_LEVEL_KEY = "badgeLevel"

EARNED_LEVELS = (BadgeLevel.IN_PROGRESS, BadgeLevel.PASSING, BadgeLevel.SILVER, BadgeLevel.GOLD)


def has_openssf_badge(raw: RawResults) -> Tuple[List[Finding], str]:
    require(raw, "raw results")
    data = require(raw.cii_best_practices, "CII best practices results")

    if data.badge == BadgeLevel.UNKNOWN:
        raise ProbeExecutionError("unknown OpenSSF best practices badge level")

    if data.badge in EARNED_LEVELS:
        f = new_finding(HAS_OPENSSF_BADGE, f"OpenSSF best practices badge detected at the {data.badge.value} level",
                        Outcome.TRUE)
        return [f.with_value(BADGE_LEVEL_KEY, data.badge.value)], HAS_OPENSSF_BADGE

    return [new_finding(HAS_OPENSSF_BADGE, "Project does not have an OpenSSF best practices badge",
                        Outcome.FALSE)], HAS_OPENSSF_BADGE
