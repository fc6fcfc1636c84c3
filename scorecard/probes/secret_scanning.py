"""
Secret Scanning Probes
======================
Native secret scanning on GitHub and GitLab, and third-party secret
scanners configured in the repository.

The native probes only apply on their own platform. Each third-party
probe reports whether its tool was found and, when the collector looked
at recent CI runs, how often the tool ran.

Author: Scorecard Team
"""

from typing import List, Tuple

from scorecard.checker.raw_results import RawResults, SecretScanningData, TriState
from scorecard.finding.finding import Finding
from scorecard.finding.outcome import Outcome
from scorecard.probes.utils import new_finding, require

HAS_GITHUB_SECRET_SCANNING_ENABLED = "hasGitHubSecretScanningEnabled"
HAS_GITHUB_PUSH_PROTECTION_ENABLED = "hasGitHubPushProtectionEnabled"
HAS_GITLAB_SECRET_PUSH_PROTECTION = "hasGitLabSecretPushProtection"
HAS_GITLAB_PIPELINE_SECRET_DETECTION = "hasGitLabPipelineSecretDetection"
HAS_GITLAB_PUSH_RULES_PREVENT_SECRETS = "hasGitLabPushRulesPreventSecrets"

HAS_THIRD_PARTY_GITLEAKS = "hasThirdPartyGitleaks"
HAS_THIRD_PARTY_TRUFFLEHOG = "hasThirdPartyTruffleHog"
HAS_THIRD_PARTY_DETECT_SECRETS = "hasThirdPartyDetectSecrets"
HAS_THIRD_PARTY_GIT_SECRETS = "hasThirdPartyGitSecrets"
HAS_THIRD_PARTY_GGSHIELD = "hasThirdPartyGGShield"
HAS_THIRD_PARTY_SHHGIT = "hasThirdPartyShhGit"
HAS_THIRD_PARTY_REPO_SUPERVISOR = "hasThirdPartyRepoSupervisor"

# probe id -> scanner name as reported by the collector
THIRD_PARTY_SCANNERS = {
    HAS_THIRD_PARTY_GITLEAKS: "gitleaks",
    HAS_THIRD_PARTY_TRUFFLEHOG: "trufflehog",
    HAS_THIRD_PARTY_DETECT_SECRETS: "detect-secrets",
    HAS_THIRD_PARTY_GIT_SECRETS: "git-secrets",
    HAS_THIRD_PARTY_GGSHIELD: "ggshield",
    HAS_THIRD_PARTY_SHHGIT: "shhgit",
    HAS_THIRD_PARTY_REPO_SUPERVISOR: "repo-supervisor",
}

PERMISSION_DENIED_KEY = "permissionDenied"
TOOL_KEY = "tool"
EXECUTION_PATTERN_KEY = "executionPattern"
TOTAL_COMMITS_KEY = "totalCommitsAnalyzed"
COMMITS_WITH_RUN_KEY = "commitsWithToolRun"
HAS_RECENT_RUNS_KEY = "hasRecentRuns"

GITHUB = "github"
GITLAB = "gitlab"


def _secret_data(raw: RawResults) -> SecretScanningData:
    require(raw, "raw results")
    return require(raw.secret_scanning, "secret scanning results")


def _permission_denied(data: SecretScanningData) -> bool:
    return any("permission_denied" in evidence for evidence in data.evidence)


def _github_setting(raw: RawResults, probe_id: str, attr: str, feature: str) -> Tuple[List[Finding], str]:
    data = _secret_data(raw)
    if data.platform != GITHUB:
        return [new_finding(probe_id, "not a GitHub repository", Outcome.NOT_APPLICABLE)], probe_id

    state = getattr(data, attr)
    if state == TriState.TRUE:
        return [new_finding(probe_id, f"GitHub {feature} is enabled", Outcome.TRUE)], probe_id
    if state == TriState.FALSE:
        return [new_finding(probe_id, f"GitHub {feature} is disabled", Outcome.FALSE)], probe_id

    f = new_finding(probe_id, f"could not determine whether GitHub {feature} is enabled", Outcome.NOT_AVAILABLE)
    if _permission_denied(data):
        f = f.with_value(PERMISSION_DENIED_KEY, True)
    return [f], probe_id


def _gitlab_setting(raw: RawResults, probe_id: str, attr: str, feature: str) -> Tuple[List[Finding], str]:
    data = _secret_data(raw)
    if data.platform != GITLAB:
        return [new_finding(probe_id, "not a GitLab project", Outcome.NOT_APPLICABLE)], probe_id
    if getattr(data, attr):
        return [new_finding(probe_id, f"GitLab {feature} is enabled", Outcome.TRUE)], probe_id
    return [new_finding(probe_id, f"GitLab {feature} is not enabled", Outcome.FALSE)], probe_id


def has_github_secret_scanning_enabled(raw: RawResults) -> Tuple[List[Finding], str]:
    return _github_setting(raw, HAS_GITHUB_SECRET_SCANNING_ENABLED, "gh_native_enabled", "secret scanning")


def has_github_push_protection_enabled(raw: RawResults) -> Tuple[List[Finding], str]:
    return _github_setting(raw, HAS_GITHUB_PUSH_PROTECTION_ENABLED, "gh_push_protection_enabled",
                           "secret scanning push protection")


def has_gitlab_secret_push_protection(raw: RawResults) -> Tuple[List[Finding], str]:
    return _gitlab_setting(raw, HAS_GITLAB_SECRET_PUSH_PROTECTION, "gl_secret_push_protection",
                           "secret push protection")


def has_gitlab_pipeline_secret_detection(raw: RawResults) -> Tuple[List[Finding], str]:
    return _gitlab_setting(raw, HAS_GITLAB_PIPELINE_SECRET_DETECTION, "gl_pipeline_secret_detection",
                           "pipeline secret detection")


def has_gitlab_push_rules_prevent_secrets(raw: RawResults) -> Tuple[List[Finding], str]:
    return _gitlab_setting(raw, HAS_GITLAB_PUSH_RULES_PREVENT_SECRETS, "gl_push_rules_prevent_secrets",
                           "push rule preventing secrets")


# ============================================================================
# THIRD-PARTY SCANNERS
# ============================================================================

def third_party_scanner(raw: RawResults, probe_id: str) -> Tuple[List[Finding], str]:
    """True when the tool behind ``probe_id`` is configured in the repository."""
    tool = THIRD_PARTY_SCANNERS[probe_id]
    scanner = _secret_data(raw).scanner(tool)
    if scanner is None:
        f = new_finding(probe_id, f"{tool} not found", Outcome.FALSE)
        return [f.with_value(TOOL_KEY, tool)], probe_id

    message = f"{tool} found at {', '.join(scanner.paths)}" if scanner.paths else f"{tool} found"
    values = {TOOL_KEY: tool}
    if scanner.ci is not None:
        values.update({
            EXECUTION_PATTERN_KEY: scanner.ci.execution_pattern.value,
            TOTAL_COMMITS_KEY: scanner.ci.total_commits_analyzed,
            COMMITS_WITH_RUN_KEY: scanner.ci.commits_with_tool_run,
            HAS_RECENT_RUNS_KEY: scanner.ci.has_recent_runs,
        })
    return [new_finding(probe_id, message, Outcome.TRUE).with_values(values)], probe_id


def has_third_party_gitleaks(raw: RawResults) -> Tuple[List[Finding], str]:
    return third_party_scanner(raw, HAS_THIRD_PARTY_GITLEAKS)


def has_third_party_trufflehog(raw: RawResults) -> Tuple[List[Finding], str]:
    return third_party_scanner(raw, HAS_THIRD_PARTY_TRUFFLEHOG)


def has_third_party_detect_secrets(raw: RawResults) -> Tuple[List[Finding], str]:
    return third_party_scanner(raw, HAS_THIRD_PARTY_DETECT_SECRETS)


def has_third_party_git_secrets(raw: RawResults) -> Tuple[List[Finding], str]:
    return third_party_scanner(raw, HAS_THIRD_PARTY_GIT_SECRETS)


def has_third_party_ggshield(raw: RawResults) -> Tuple[List[Finding], str]:
    return third_party_scanner(raw, HAS_THIRD_PARTY_GGSHIELD)


def has_third_party_shhgit(raw: RawResults) -> Tuple[List[Finding], str]:
    return third_party_scanner(raw, HAS_THIRD_PARTY_SHHGIT)


def has_third_party_repo_supervisor(raw: RawResults) -> Tuple[List[Finding], str]:
    return third_party_scanner(raw, HAS_THIRD_PARTY_REPO_SUPERVISOR)
