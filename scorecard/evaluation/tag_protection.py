"""
Tag-Protection Evaluation
=========================
GitHub projects score in tiers, each of which must hold on every
release tag before the next one counts:

- 3: every release tag is protected
- 6: deletion and force pushes are blocked
- 8: updates are blocked
- 10: protection applies to administrators and creation is restricted

Signed tags are reported but never change the score.

GitLab projects add up points for branch shadowing (2 when no one may
create a tag named like a branch, 1 when only maintainers may) and for
release tags (8 when no one may recreate them, 4 when only maintainers
may).

Author: Scorecard Team
"""

from typing import List
import logging

from scorecard.checker.check_result import (
    CheckResult,
    create_inconclusive_result,
    create_min_score_result,
    create_result_with_score,
)
from scorecard.evaluation.common import has_expected_probes, invalid_probe_results
from scorecard.finding.finding import Finding
from scorecard.finding.outcome import Outcome
from scorecard.probes.tag_protection import (
    BLOCKS_DELETE_ON_TAGS,
    BLOCKS_FORCE_PUSH_ON_TAGS,
    BLOCKS_UPDATE_ON_TAGS,
    GITHUB_TAG_PROBES,
    GITLAB_RELEASE_TAGS_ARE_PROTECTED,
    GITLAB_TAG_PROBES,
    PROTECTION_LEVEL_KEY,
    REQUIRES_SIGNED_TAGS,
    RESTRICTS_TAG_CREATION,
    STRONG,
    STRONGEST,
    TAG_NAME_KEY,
    TAG_PROTECTION_APPLIES_TO_ADMINS,
    TAGS_ARE_PROTECTED,
    TAGS_CANNOT_DUPLICATE_BRANCH_NAMES,
)

logger = logging.getLogger(__name__)


def _applicable(findings: List[Finding], probe_id: str) -> List[Finding]:
    return [f for f in findings if f.probe == probe_id and f.outcome != Outcome.NOT_APPLICABLE]


def fully_holds(findings: List[Finding], probe_id: str) -> bool:
    """True when the probe reported at least one tag and all of them passed."""
    applicable = _applicable(findings, probe_id)
    return bool(applicable) and all(f.outcome == Outcome.TRUE for f in applicable)


def _log_lacking(name: str, findings: List[Finding], probe_id: str, feature: str) -> None:
    for f in _applicable(findings, probe_id):
        if f.outcome == Outcome.FALSE:
            logger.debug(f"{name}: Tag '{f.values.get(TAG_NAME_KEY, 'unknown')}' lacks {feature}")


def tag_protection(name: str, findings: List[Finding]) -> CheckResult:
    if not has_expected_probes(findings, list(GITHUB_TAG_PROBES) + list(GITLAB_TAG_PROBES)):
        return invalid_probe_results(name)

    if any(_applicable(findings, probe_id) for probe_id in GITLAB_TAG_PROBES):
        return _gitlab(name, findings)
    return _github(name, [f for f in findings if f.probe not in GITLAB_TAG_PROBES])


# ============================================================================
# GITHUB
# ============================================================================

def _github(name: str, findings: List[Finding]) -> CheckResult:
    if not _applicable(findings, TAGS_ARE_PROTECTED):
        return create_inconclusive_result(name, "no release tags found")

    if not fully_holds(findings, TAGS_ARE_PROTECTED):
        _log_lacking(name, findings, TAGS_ARE_PROTECTED, "protection")
        return create_min_score_result(name, "not all release tags are protected")
    logger.info(f"{name}: All release tags are protected")

    if fully_holds(findings, REQUIRES_SIGNED_TAGS):
        logger.info(f"{name}: Signed tags are required on all release tags")
    else:
        logger.debug(f"{name}: Signed tags are not required on all release tags")

    if not (fully_holds(findings, BLOCKS_DELETE_ON_TAGS) and fully_holds(findings, BLOCKS_FORCE_PUSH_ON_TAGS)):
        _log_lacking(name, findings, BLOCKS_DELETE_ON_TAGS, "delete protection")
        _log_lacking(name, findings, BLOCKS_FORCE_PUSH_ON_TAGS, "force-push protection")
        return create_result_with_score(name, "release tags can be deleted or force pushed", 3)

    if not fully_holds(findings, BLOCKS_UPDATE_ON_TAGS):
        _log_lacking(name, findings, BLOCKS_UPDATE_ON_TAGS, "update protection")
        return create_result_with_score(name, "release tags can be updated", 6)

    if not (fully_holds(findings, TAG_PROTECTION_APPLIES_TO_ADMINS)
            and fully_holds(findings, RESTRICTS_TAG_CREATION)):
        _log_lacking(name, findings, TAG_PROTECTION_APPLIES_TO_ADMINS, "admin enforcement")
        _log_lacking(name, findings, RESTRICTS_TAG_CREATION, "creation restriction")
        return create_result_with_score(name, "administrators can bypass tag protection or tag creation is open", 8)

    return create_result_with_score(name, "release tags are fully protected", 10)


# ============================================================================
# GITLAB
# ============================================================================

def _tier(name: str, findings: List[Finding], probe_id: str, strongest: int, strong: int, what: str) -> int:
    applicable = _applicable(findings, probe_id)
    if not applicable:
        logger.warning(f"{name}: No {what} found to evaluate")
        return 0

    levels = [f.values.get(PROTECTION_LEVEL_KEY) if f.outcome == Outcome.TRUE else None for f in applicable]
    if all(level == STRONGEST for level in levels):
        logger.info(f"{name}: All {what} fully protected")
        return strongest
    if all(level in (STRONGEST, STRONG) for level in levels):
        logger.info(f"{name}: All {what} protected")
        return strong

    protected = sum(1 for level in levels if level in (STRONGEST, STRONG))
    if protected:
        logger.info(f"{name}: {protected} out of {len(levels)} {what} have some protection")
    logger.warning(f"{name}: Some {what} lack adequate protection")
    return 0


def _gitlab(name: str, findings: List[Finding]) -> CheckResult:
    score = _tier(name, findings, TAGS_CANNOT_DUPLICATE_BRANCH_NAMES, 2, 1, "branches")
    score += _tier(name, findings, GITLAB_RELEASE_TAGS_ARE_PROTECTED, 8, 4, "release tags")
    return create_result_with_score(name, f"GitLab tag protection earned {score} out of 10 points", score)
