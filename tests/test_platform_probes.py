"""
Tests for the tag protection, token permission and secret scanning probes.
"""

import pytest

from scorecard.checker.raw_results import (
    ExecutionPattern,
    File,
    GitLabProtectedTag,
    PermissionLevel,
    PermissionLocation,
    RawResults,
    SecretScanningData,
    TagProtectionRule,
    TagProtectionsData,
    TagRef,
    ThirdPartyScanner,
    TokenPermission,
    TokenPermissionsData,
    ToolCIStats,
    TriState,
)
from scorecard.errors import ProbeExecutionError
from scorecard.finding.finding import FileType
from scorecard.finding.outcome import Outcome
from scorecard.probes import permissions, secret_scanning, tag_protection


def outcomes(findings):
    return [f.outcome for f in findings]


# ============================================================================
# TAG PROTECTION
# ============================================================================

def _tag(name="v*", protected=True, **rule):
    settings = dict(allow_deletions=False, allow_force_pushes=False, allow_updates=False,
                    enforce_admins=True, restrict_creation=True, require_signatures=True)
    settings.update(rule)
    return TagRef(name=name, protected=protected, protection_rule=TagProtectionRule(**settings))


def _tags_raw(now, *tags, **gitlab):
    return RawResults(now=now, tag_protection=TagProtectionsData(tags=tags, **gitlab))


class TestGitHubTagProbes:

    @pytest.mark.parametrize("probe", [
        tag_protection.tags_are_protected,
        tag_protection.blocks_delete_on_tags,
        tag_protection.blocks_force_push_on_tags,
        tag_protection.blocks_update_on_tags,
        tag_protection.tag_protection_applies_to_admins,
        tag_protection.restricts_tag_creation,
        tag_protection.requires_signed_tags,
    ])
    def test_fully_protected_tag(self, now, probe):
        findings, _ = probe(_tags_raw(now, _tag("v*")))
        assert outcomes(findings) == [Outcome.TRUE]
        assert findings[0].values[tag_protection.TAG_NAME_KEY] == "v*"

    def test_unprotected_tag_fails_every_setting(self, now):
        raw = _tags_raw(now, _tag("v*", protected=False))
        for probe in (tag_protection.tags_are_protected, tag_protection.blocks_delete_on_tags,
                      tag_protection.requires_signed_tags):
            findings, _ = probe(raw)
            assert outcomes(findings) == [Outcome.FALSE]

    def test_unreadable_setting_counts_as_off(self, now):
        raw = _tags_raw(now, _tag("v*", allow_deletions=None, enforce_admins=None))
        assert outcomes(tag_protection.blocks_delete_on_tags(raw)[0]) == [Outcome.FALSE]
        assert outcomes(tag_protection.tag_protection_applies_to_admins(raw)[0]) == [Outcome.FALSE]

    def test_one_finding_per_tag(self, now):
        raw = _tags_raw(now, _tag("v*"), _tag("release-*", allow_force_pushes=True))
        findings, _ = tag_protection.blocks_force_push_on_tags(raw)
        assert outcomes(findings) == [Outcome.TRUE, Outcome.FALSE]
        assert findings[1].message == "tag 'release-*' accepts force pushes"

    def test_no_tags(self, now):
        findings, _ = tag_protection.tags_are_protected(_tags_raw(now))
        assert outcomes(findings) == [Outcome.NOT_APPLICABLE]


class TestGitLabTagProbes:

    @pytest.mark.parametrize("pattern,name,expected", [
        ("main", "main", True),
        ("*", "anything", True),
        ("v*", "v1.0", True),
        ("v*", "main", False),
        ("*-stable", "2-0-stable", True),
        ("", "main", False),
        ("ma", "main", False),
    ])
    def test_matches_pattern(self, pattern, name, expected):
        assert tag_protection.matches_pattern(pattern, name) is expected

    def test_lowest_matching_level_counts(self):
        patterns = (GitLabProtectedTag("ma*", 30), GitLabProtectedTag("main", 40), GitLabProtectedTag("dev", 40))
        assert tag_protection.protection_level("main", patterns) == (30, tag_protection.WEAK)
        assert tag_protection.protection_level("dev", patterns) == (40, tag_protection.STRONG)
        assert tag_protection.protection_level("x", patterns) == (None, tag_protection.UNPROTECTED)
        assert tag_protection.protection_level("x", (GitLabProtectedTag("*", 0),)) == (0, tag_protection.STRONGEST)

    def test_branch_shadowing(self, now):
        raw = _tags_raw(now, gitlab_branches=("main", "develop", "feature"), gitlab_protected_tags=(
            GitLabProtectedTag("main", 0),
            GitLabProtectedTag("develop", 40),
            GitLabProtectedTag("feat*", 30),
        ))
        findings, _ = tag_protection.tags_cannot_duplicate_branch_names(raw)
        assert outcomes(findings) == [Outcome.TRUE, Outcome.TRUE, Outcome.FALSE]
        assert [f.values[tag_protection.PROTECTION_LEVEL_KEY] for f in findings] == ["strongest", "strong", "weak"]
        assert findings[0].message == "branch 'main' is fully protected: no one can create a tag with this name"
        assert findings[1].values[tag_protection.ACCESS_LEVEL_KEY] == "40"

    def test_uncovered_branch(self, now):
        raw = _tags_raw(now, gitlab_branches=("main",))
        findings, _ = tag_protection.tags_cannot_duplicate_branch_names(raw)
        assert outcomes(findings) == [Outcome.FALSE]
        assert findings[0].values[tag_protection.PROTECTION_LEVEL_KEY] == "none"
        assert tag_protection.ACCESS_LEVEL_KEY not in findings[0].values

    def test_release_tags(self, now):
        raw = _tags_raw(now, gitlab_release_tags=("v1.0", "v2.0"),
                        gitlab_protected_tags=(GitLabProtectedTag("v*", 40),))
        findings, _ = tag_protection.gitlab_release_tags_are_protected(raw)
        assert outcomes(findings) == [Outcome.TRUE, Outcome.TRUE]
        assert findings[0].values[tag_protection.TAG_NAME_KEY] == "v1.0"

    def test_not_gitlab(self, now):
        raw = _tags_raw(now, _tag())
        assert outcomes(tag_protection.tags_cannot_duplicate_branch_names(raw)[0]) == [Outcome.NOT_APPLICABLE]
        assert outcomes(tag_protection.gitlab_release_tags_are_protected(raw)[0]) == [Outcome.NOT_APPLICABLE]


# ============================================================================
# TOKEN PERMISSIONS
# ============================================================================

WORKFLOW = File(path=".github/workflows/release.yml", type=FileType.SOURCE, offset=4, snippet="permissions: write-all")


def _permission(level, location=PermissionLocation.TOP, name=None, value="write", **extra):
    return TokenPermission(type=level, location_type=location, name=name, value=value, file=WORKFLOW, **extra)


def _permissions_raw(now, *perms, num_tokens=None):
    count = len(perms) if num_tokens is None else num_tokens
    return RawResults(now=now, token_permissions=TokenPermissionsData(token_permissions=perms, num_tokens=count))


class TestTokenPermissionProbes:

    def test_write_all_at_top_level(self, now):
        raw = _permissions_raw(now, _permission(PermissionLevel.WRITE))
        findings, _ = permissions.has_no_github_workflow_permission_write_all_top(raw)
        assert outcomes(findings) == [Outcome.FALSE]
        f = findings[0]
        assert f.message == "topLevel permissions set to 'write'"
        assert f.location.path == ".github/workflows/release.yml"
        assert f.location.line_start == 4
        assert f.values[permissions.PERMISSION_LOCATION_KEY] == "topLevel"
        assert f.values[permissions.PERMISSION_LEVEL_KEY] == "write"
        assert permissions.TOKEN_NAME_KEY not in f.values
        assert outcomes(permissions.has_no_github_workflow_permission_write_all_job(raw)[0]) == [Outcome.TRUE]
        assert outcomes(permissions.top_level_permissions(raw)[0]) == [Outcome.TRUE]

    def test_named_job_write(self, now):
        raw = _permissions_raw(now, _permission(PermissionLevel.WRITE, PermissionLocation.JOB, name="contents"))
        findings, _ = permissions.job_level_permissions(raw)
        assert outcomes(findings) == [Outcome.FALSE]
        assert findings[0].message == "jobLevel 'contents' permission set to 'write'"
        assert findings[0].values[permissions.TOKEN_NAME_KEY] == "contents"
        assert outcomes(permissions.has_no_github_workflow_permission_write_all_job(raw)[0]) == [Outcome.TRUE]

    def test_undeclared(self, now):
        raw = _permissions_raw(now, _permission(PermissionLevel.UNDECLARED, value=None))
        findings, _ = permissions.has_github_workflow_permission_undeclared(raw)
        assert outcomes(findings) == [Outcome.FALSE]
        assert findings[0].message == "no topLevel permission defined"

    def test_read_and_none_are_positive(self, now):
        raw = _permissions_raw(now, _permission(PermissionLevel.READ, value="read"),
                               _permission(PermissionLevel.NONE, PermissionLocation.JOB, value="none"))
        assert outcomes(permissions.has_github_workflow_permission_read(raw)[0]) == [Outcome.TRUE]
        assert outcomes(permissions.has_github_workflow_permission_none(raw)[0]) == [Outcome.TRUE]
        assert outcomes(permissions.has_github_workflow_permission_unknown(raw)[0]) == [Outcome.TRUE]

    def test_absent_read_is_negative(self, now):
        raw = _permissions_raw(now, _permission(PermissionLevel.WRITE))
        assert outcomes(permissions.has_github_workflow_permission_read(raw)[0]) == [Outcome.FALSE]

    def test_collector_message_wins(self, now):
        raw = _permissions_raw(now, _permission(PermissionLevel.UNKNOWN, msg="unknown permission: foo"))
        findings, _ = permissions.has_github_workflow_permission_unknown(raw)
        assert findings[0].message == "unknown permission: foo"

    def test_no_tokens(self, now):
        findings, _ = permissions.top_level_permissions(_permissions_raw(now, num_tokens=0))
        assert outcomes(findings) == [Outcome.NOT_AVAILABLE]
        assert findings[0].message == "No token permissions found"

    def test_declaration_without_value_is_an_error(self, now):
        raw = _permissions_raw(now, _permission(PermissionLevel.WRITE, value=None))
        with pytest.raises(ProbeExecutionError):
            permissions.has_no_github_workflow_permission_write_all_top(raw)


# ============================================================================
# SECRET SCANNING
# ============================================================================

def _secrets_raw(now, **data):
    return RawResults(now=now, secret_scanning=SecretScanningData(**data))


class TestSecretScanningProbes:

    def test_github_native(self, now):
        raw = _secrets_raw(now, platform="github", gh_native_enabled=TriState.TRUE,
                           gh_push_protection_enabled=TriState.FALSE)
        assert outcomes(secret_scanning.has_github_secret_scanning_enabled(raw)[0]) == [Outcome.TRUE]
        assert outcomes(secret_scanning.has_github_push_protection_enabled(raw)[0]) == [Outcome.FALSE]
        assert outcomes(secret_scanning.has_gitlab_secret_push_protection(raw)[0]) == [Outcome.NOT_APPLICABLE]

    def test_github_permission_denied(self, now):
        raw = _secrets_raw(now, platform="github", evidence=("secret_scanning: permission_denied",))
        findings, _ = secret_scanning.has_github_secret_scanning_enabled(raw)
        assert outcomes(findings) == [Outcome.NOT_AVAILABLE]
        assert findings[0].values[secret_scanning.PERMISSION_DENIED_KEY] is True

    def test_github_unknown_without_evidence(self, now):
        findings, _ = secret_scanning.has_github_secret_scanning_enabled(_secrets_raw(now, platform="github"))
        assert outcomes(findings) == [Outcome.NOT_AVAILABLE]
        assert secret_scanning.PERMISSION_DENIED_KEY not in findings[0].values

    def test_gitlab_settings(self, now):
        raw = _secrets_raw(now, platform="gitlab", gl_secret_push_protection=True)
        assert outcomes(secret_scanning.has_gitlab_secret_push_protection(raw)[0]) == [Outcome.TRUE]
        assert outcomes(secret_scanning.has_gitlab_pipeline_secret_detection(raw)[0]) == [Outcome.FALSE]
        assert outcomes(secret_scanning.has_github_secret_scanning_enabled(raw)[0]) == [Outcome.NOT_APPLICABLE]

    def test_third_party_scanner_with_ci_stats(self, now):
        ci = ToolCIStats(execution_pattern=ExecutionPattern.COMMIT_BASED, total_commits_analyzed=100,
                         commits_with_tool_run=80)
        raw = _secrets_raw(now, third_party=(
            ThirdPartyScanner(name="gitleaks", paths=(".github/workflows/gitleaks.yml",), ci=ci),
        ))
        findings, _ = secret_scanning.has_third_party_gitleaks(raw)
        assert outcomes(findings) == [Outcome.TRUE]
        assert findings[0].message == "gitleaks found at .github/workflows/gitleaks.yml"
        assert findings[0].values[secret_scanning.EXECUTION_PATTERN_KEY] == "commit-based"
        assert findings[0].values[secret_scanning.COMMITS_WITH_RUN_KEY] == 80
        assert outcomes(secret_scanning.has_third_party_trufflehog(raw)[0]) == [Outcome.FALSE]

    def test_every_scanner_has_a_probe(self, registry):
        for probe_id in secret_scanning.THIRD_PARTY_SCANNERS:
            assert probe_id in registry
