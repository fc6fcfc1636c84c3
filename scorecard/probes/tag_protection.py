"""
Tag Protection Probes
=====================
Protection of release tags against deletion, rewriting and shadowing.

The GitHub probes report one finding per release tag under ``tagName``; a
setting only counts when the tag is protected at all, and a setting the
collector could not read counts as off. The GitLab probes compare branch
names and release tags with the protected tag patterns and record the
weakest access level allowed to create a matching tag.

Author: Scorecard Team
"""

from typing import Callable, List, Optional, Sequence, Tuple

from scorecard.checker.raw_results import GitLabProtectedTag, RawResults, TagProtectionsData, TagRef
from scorecard.finding.finding import Finding
from scorecard.finding.outcome import Outcome
from scorecard.probes.utils import new_finding, require

TAGS_ARE_PROTECTED = "tagsAreProtected"
BLOCKS_DELETE_ON_TAGS = "blocksDeleteOnTags"
BLOCKS_FORCE_PUSH_ON_TAGS = "blocksForcePushOnTags"
BLOCKS_UPDATE_ON_TAGS = "blocksUpdateOnTags"
TAG_PROTECTION_APPLIES_TO_ADMINS = "tagProtectionAppliesToAdmins"
RESTRICTS_TAG_CREATION = "restrictsTagCreation"
REQUIRES_SIGNED_TAGS = "requiresSignedTags"
TAGS_CANNOT_DUPLICATE_BRANCH_NAMES = "tagsCannotDuplicateBranchNames"
GITLAB_RELEASE_TAGS_ARE_PROTECTED = "gitlabReleaseTagsAreProtected"

GITHUB_TAG_PROBES = (
    TAGS_ARE_PROTECTED,
    BLOCKS_DELETE_ON_TAGS,
    BLOCKS_FORCE_PUSH_ON_TAGS,
    BLOCKS_UPDATE_ON_TAGS,
    TAG_PROTECTION_APPLIES_TO_ADMINS,
    RESTRICTS_TAG_CREATION,
    REQUIRES_SIGNED_TAGS,
)
GITLAB_TAG_PROBES = (TAGS_CANNOT_DUPLICATE_BRANCH_NAMES, GITLAB_RELEASE_TAGS_ARE_PROTECTED)

TAG_NAME_KEY = "tagName"
BRANCH_NAME_KEY = "branchName"
ACCESS_LEVEL_KEY = "minAccessLevel"
PROTECTION_LEVEL_KEY = "protectionLevel"

# GitLab access levels allowed to create a protected tag
ACCESS_LEVEL_NO_ONE = 0
ACCESS_LEVEL_MAINTAINER = 40

STRONGEST = "strongest"
STRONG = "strong"
WEAK = "weak"
UNPROTECTED = "none"


def _tag_data(raw: RawResults) -> TagProtectionsData:
    require(raw, "raw results")
    return require(raw.tag_protection, "tag protection results")


def _tag_setting(raw: RawResults, probe_id: str,
                 setting: Callable[[TagRef], bool],
                 enabled: str, disabled: str) -> Tuple[List[Finding], str]:
    """Evaluate a setting on every release tag; messages take the tag name."""
    tags = _tag_data(raw).tags
    if not tags:
        return [new_finding(probe_id, "no release tags found", Outcome.NOT_APPLICABLE)], probe_id

    findings = []
    for tag in tags:
        holds = bool(tag.protected) and setting(tag)
        if holds:
            f = new_finding(probe_id, enabled.format(tag.name), Outcome.TRUE)
        else:
            f = new_finding(probe_id, disabled.format(tag.name), Outcome.FALSE)
        findings.append(f.with_value(TAG_NAME_KEY, tag.name))
    return findings, probe_id


def _is_false(value: Optional[bool]) -> bool:
    return value is False


def tags_are_protected(raw: RawResults) -> Tuple[List[Finding], str]:
    return _tag_setting(
        raw, TAGS_ARE_PROTECTED,
        lambda t: True,
        "tag '{}' is protected",
        "tag '{}' is not protected",
    )


def blocks_delete_on_tags(raw: RawResults) -> Tuple[List[Finding], str]:
    return _tag_setting(
        raw, BLOCKS_DELETE_ON_TAGS,
        lambda t: _is_false(t.protection_rule.allow_deletions),
        "deletion is blocked on tag '{}'",
        "tag '{}' can be deleted",
    )


def blocks_force_push_on_tags(raw: RawResults) -> Tuple[List[Finding], str]:
    return _tag_setting(
        raw, BLOCKS_FORCE_PUSH_ON_TAGS,
        lambda t: _is_false(t.protection_rule.allow_force_pushes),
        "force pushes are blocked on tag '{}'",
        "tag '{}' accepts force pushes",
    )


def blocks_update_on_tags(raw: RawResults) -> Tuple[List[Finding], str]:
    return _tag_setting(
        raw, BLOCKS_UPDATE_ON_TAGS,
        lambda t: _is_false(t.protection_rule.allow_updates),
        "updates are blocked on tag '{}'",
        "tag '{}' can be moved to another commit",
    )


def tag_protection_applies_to_admins(raw: RawResults) -> Tuple[List[Finding], str]:
    return _tag_setting(
        raw, TAG_PROTECTION_APPLIES_TO_ADMINS,
        lambda t: bool(t.protection_rule.enforce_admins),
        "tag protection applies to administrators on tag '{}'",
        "tag protection does not apply to administrators on tag '{}'",
    )


def restricts_tag_creation(raw: RawResults) -> Tuple[List[Finding], str]:
    return _tag_setting(
        raw, RESTRICTS_TAG_CREATION,
        lambda t: bool(t.protection_rule.restrict_creation),
        "creation of tags matching '{}' is restricted",
        "anyone with write access can create tags matching '{}'",
    )


def requires_signed_tags(raw: RawResults) -> Tuple[List[Finding], str]:
    return _tag_setting(
        raw, REQUIRES_SIGNED_TAGS,
        lambda t: bool(t.protection_rule.require_signatures),
        "signatures are required on tag '{}'",
        "signatures are not required on tag '{}'",
    )


# ============================================================================
# GITLAB
# ============================================================================

def matches_pattern(pattern: str, name: str) -> bool:
    """Exact names and a single leading or trailing ``*`` wildcard."""
    if not pattern:
        return False
    if pattern == name or pattern == "*":
        return True
    if pattern.endswith("*"):
        return name.startswith(pattern[:-1])
    if pattern.startswith("*"):
        return name.endswith(pattern[1:])
    return False


def protection_level(name: str, patterns: Sequence[GitLabProtectedTag]) -> Tuple[Optional[int], str]:
    """
    Weakest access level allowed to create a tag called ``name``.

    Returns:
        ``(None, "none")`` when no pattern covers the name, otherwise the
        minimum create access level and its strength
    """
    levels = [p.create_access_level for p in patterns if matches_pattern(p.pattern, name)]
    if not levels:
        return None, UNPROTECTED
    level = min(levels)
    if level == ACCESS_LEVEL_NO_ONE:
        return level, STRONGEST
    if level >= ACCESS_LEVEL_MAINTAINER:
        return level, STRONG
    return level, WEAK


def tags_cannot_duplicate_branch_names(raw: RawResults) -> Tuple[List[Finding], str]:
    probe_id = TAGS_CANNOT_DUPLICATE_BRANCH_NAMES
    data = _tag_data(raw)
    if not data.gitlab_branches:
        return [new_finding(probe_id, "not a GitLab repository or no branches found",
                            Outcome.NOT_APPLICABLE)], probe_id

    messages = {
        STRONGEST: "branch '{}' is fully protected: no one can create a tag with this name",
        STRONG: "branch '{}' is protected: only maintainers+ can create a tag with this name",
        WEAK: "branch '{}' has weak protection: developers can create a tag with this name",
        UNPROTECTED: "branch '{}' can have a tag created with the same name by anyone with write access",
    }
    findings = []
    for branch in data.gitlab_branches:
        level, strength = protection_level(branch, data.gitlab_protected_tags)
        outcome = Outcome.TRUE if strength in (STRONGEST, STRONG) else Outcome.FALSE
        f = new_finding(probe_id, messages[strength].format(branch), outcome)
        f = f.with_values({BRANCH_NAME_KEY: branch, PROTECTION_LEVEL_KEY: strength})
        if level is not None:
            f = f.with_value(ACCESS_LEVEL_KEY, str(level))
        findings.append(f)
    return findings, probe_id


def gitlab_release_tags_are_protected(raw: RawResults) -> Tuple[List[Finding], str]:
    probe_id = GITLAB_RELEASE_TAGS_ARE_PROTECTED
    data = _tag_data(raw)
    if not data.gitlab_release_tags:
        return [new_finding(probe_id, "not a GitLab repository or no release tags found",
                            Outcome.NOT_APPLICABLE)], probe_id

    messages = {
        STRONGEST: "release tag '{}' is fully protected: no one can recreate it",
        STRONG: "release tag '{}' is protected: only maintainers+ can recreate it",
        WEAK: "release tag '{}' has weak protection: developers can recreate it",
        UNPROTECTED: "release tag '{}' is not covered by any protected tag pattern",
    }
    findings = []
    for tag in data.gitlab_release_tags:
        level, strength = protection_level(tag, data.gitlab_protected_tags)
        outcome = Outcome.TRUE if strength in (STRONGEST, STRONG) else Outcome.FALSE
        f = new_finding(probe_id, messages[strength].format(tag), outcome)
        f = f.with_values({TAG_NAME_KEY: tag, PROTECTION_LEVEL_KEY: strength})
        if level is not None:
            f = f.with_value(ACCESS_LEVEL_KEY, str(level))
        findings.append(f)
    return findings, probe_id
