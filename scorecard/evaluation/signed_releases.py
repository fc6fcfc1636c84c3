"""
Signed-Releases Evaluation
==========================
Each recent release earns 10 points for provenance or 8 for a
signature; the release score is the mean over releases.

Signatures published with released packages score 10 when all of them
verify and 3 when none do; a mix scores the verified share, capped at 7.
When both releases and package signatures are present the lower of the
two scores counts.

Author: Scorecard Team
"""

from typing import Dict, List, Optional
import logging

from scorecard.checker.check_result import (
    CheckResult,
    create_inconclusive_result,
    create_min_score_result,
    create_result_with_score,
)
from scorecard.evaluation.common import has_expected_probes, invalid_probe_results, log_findings
from scorecard.finding.finding import Finding
from scorecard.finding.outcome import Outcome
from scorecard.probes.signed_releases import (
    RELEASE_NAME_KEY,
    RELEASES_ARE_SIGNED,
    RELEASES_HAVE_PROVENANCE,
    RELEASES_HAVE_VERIFIED_SIGNATURES,
)

logger = logging.getLogger(__name__)

SIGNED_POINTS = 8
PROVENANCE_POINTS = 10

ALL_FAILED_PACKAGE_SCORE = 3
MIXED_PACKAGE_SCORE_CAP = 7


def package_signature_score(verified: int, failed: int) -> int:
    total = verified + failed
    if failed == 0:
        return 10
    if verified == 0:
        return ALL_FAILED_PACKAGE_SCORE
    return min(int(10 * verified / total + 0.5), MIXED_PACKAGE_SCORE_CAP)


def _release_result(name: str, findings: List[Finding]) -> Optional[CheckResult]:
    """Score of the release assets; None when there are no releases."""
    if not findings or any(f.outcome == Outcome.NOT_APPLICABLE for f in findings):
        return None

    releases: List[str] = []
    for f in findings:
        release = f.values.get(RELEASE_NAME_KEY)
        if not release:
            return invalid_probe_results(name, "no release found")
        if release not in releases:
            logger.debug(f"{name}: GitHub release found: {release}")
            releases.append(release)

    total_positive = 0
    points: Dict[str, int] = {}
    for f in findings:
        if f.outcome != Outcome.TRUE:
            continue
        total_positive += 1
        release = f.values[RELEASE_NAME_KEY]
        if f.probe == RELEASES_HAVE_PROVENANCE:
            points[release] = PROVENANCE_POINTS
        else:
            points.setdefault(release, SIGNED_POINTS)

    if total_positive == 0:
        return create_min_score_result(name, "Project has not signed or included provenance with any releases.")

    score = sum(points.values()) // len(releases)
    reason = (f"{len(points)} out of the last {len(releases)} releases have a total of "
              f"{total_positive} signed artifacts.")
    return create_result_with_score(name, reason, score)


def _package_result(name: str, findings: List[Finding]) -> Optional[CheckResult]:
    """Score of the package signatures; None when none were checked."""
    verified = sum(1 for f in findings if f.outcome == Outcome.TRUE)
    failed = sum(1 for f in findings if f.outcome == Outcome.FALSE)
    if verified + failed == 0:
        return None
    reason = f"{verified} out of {verified + failed} package signatures verified."
    return create_result_with_score(name, reason, package_signature_score(verified, failed))


def signed_releases(name: str, findings: List[Finding]) -> CheckResult:
    expected = [RELEASES_ARE_SIGNED, RELEASES_HAVE_PROVENANCE, RELEASES_HAVE_VERIFIED_SIGNATURES]
    if not has_expected_probes(findings, expected):
        return invalid_probe_results(name)

    log_findings(name, findings)
    release_findings = [f for f in findings if f.probe != RELEASES_HAVE_VERIFIED_SIGNATURES]
    package_findings = [f for f in findings if f.probe == RELEASES_HAVE_VERIFIED_SIGNATURES]

    releases = _release_result(name, release_findings)
    packages = _package_result(name, package_findings)

    if releases is None and packages is None:
        return create_inconclusive_result(name, "no releases found")
    if releases is None:
        return packages
    if packages is None or releases.error is not None:
        return releases
    if releases.score <= 0:
        return packages
    if packages.score < releases.score:
        return packages
    return releases
