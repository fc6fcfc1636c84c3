"""
Probes
======
Every probe implementation, the checks that consume it and the factory
that assembles them into a frozen ProbeRegistry. Probes in
INDEPENDENT_PROBES belong to no check.

Author: Scorecard Team
"""

from functools import partial
from pathlib import Path
from typing import List, Optional, Tuple, Union
import logging

from scorecard.checker import check_names as checks
from scorecard.config import ScorecardConfig
from scorecard.probes import (
    best_practices,
    binary_artifacts,
    branch_protection,
    ci_tests,
    code_review,
    contributors,
    dangerous_workflow,
    license,
    maintained,
    maintainers,
    memory_safety,
    packaging,
    permissions,
    pinning,
    secret_scanning,
    security_policy,
    signed_releases,
    tag_protection,
    tooling,
    vulnerabilities,
    webhooks,
)
from scorecard.probes.registry import ProbeDescriptor, ProbeImpl, ProbeRegistry
from scorecard.probes.utils import DEFINITIONS_DIR

logger = logging.getLogger(__name__)

bp = branch_protection
perm = permissions
ss = secret_scanning
tp = tag_protection

# (probe id, implementation, consuming checks)
ALL_PROBES: List[Tuple[str, ProbeImpl, Tuple[str, ...]]] = [
    (binary_artifacts.HAS_BINARY_ARTIFACTS, binary_artifacts.has_binary_artifacts, (checks.BINARY_ARTIFACTS,)),
    (binary_artifacts.HAS_UNVERIFIED_BINARY_ARTIFACTS, binary_artifacts.has_unverified_binary_artifacts,
     (checks.BINARY_ARTIFACTS,)),

    (bp.BLOCKS_DELETE_ON_BRANCHES, bp.blocks_delete_on_branches, (checks.BRANCH_PROTECTION,)),
    (bp.BLOCKS_FORCE_PUSH_ON_BRANCHES, bp.blocks_force_push_on_branches, (checks.BRANCH_PROTECTION,)),
    (bp.BRANCHES_ARE_PROTECTED, bp.branches_are_protected, (checks.BRANCH_PROTECTION,)),
    (bp.BRANCH_PROTECTION_APPLIES_TO_ADMINS, bp.branch_protection_applies_to_admins, (checks.BRANCH_PROTECTION,)),
    (bp.DISMISSES_STALE_REVIEWS, bp.dismisses_stale_reviews, (checks.BRANCH_PROTECTION,)),
    (bp.REQUIRES_APPROVERS_FOR_PULL_REQUESTS, bp.requires_approvers_for_pull_requests, (checks.BRANCH_PROTECTION,)),
    (bp.REQUIRES_CODE_OWNERS_REVIEW, bp.requires_code_owners_review, (checks.BRANCH_PROTECTION,)),
    (bp.REQUIRES_LAST_PUSH_APPROVAL, bp.requires_last_push_approval, (checks.BRANCH_PROTECTION,)),
    (bp.REQUIRES_UP_TO_DATE_BRANCHES, bp.requires_up_to_date_branches, (checks.BRANCH_PROTECTION,)),
    (bp.RUNS_STATUS_CHECKS_BEFORE_MERGING, bp.runs_status_checks_before_merging, (checks.BRANCH_PROTECTION,)),
    (bp.REQUIRES_PRS_TO_CHANGE_CODE, bp.requires_prs_to_change_code, (checks.BRANCH_PROTECTION,)),

    (ci_tests.TESTS_RUN_IN_CI, ci_tests.tests_run_in_ci, (checks.CI_TESTS,)),
    (best_practices.HAS_OPENSSF_BADGE, best_practices.has_openssf_badge, (checks.CII_BEST_PRACTICES,)),
    (code_review.CODE_APPROVED, code_review.code_approved, (checks.CODE_REVIEW,)),
    (contributors.CONTRIBUTORS_FROM_ORG_OR_COMPANY, contributors.contributors_from_org_or_company,
     (checks.CONTRIBUTORS,)),

    (dangerous_workflow.HAS_DANGEROUS_WORKFLOW_SCRIPT_INJECTION,
     dangerous_workflow.has_dangerous_workflow_script_injection, (checks.DANGEROUS_WORKFLOW,)),
    (dangerous_workflow.HAS_DANGEROUS_WORKFLOW_UNTRUSTED_CHECKOUT,
     dangerous_workflow.has_dangerous_workflow_untrusted_checkout, (checks.DANGEROUS_WORKFLOW,)),

    (tooling.DEPENDENCY_UPDATE_TOOL_CONFIGURED, tooling.dependency_update_tool_configured,
     (checks.DEPENDENCY_UPDATE_TOOL,)),
    (tooling.FUZZED, tooling.fuzzed, (checks.FUZZING,)),
    (tooling.SAST_TOOL_CONFIGURED, tooling.sast_tool_configured, (checks.SAST,)),
    (tooling.SAST_TOOL_RUNS_ON_ALL_COMMITS, tooling.sast_tool_runs_on_all_commits, (checks.SAST,)),

    (license.HAS_LICENSE_FILE, license.has_license_file, (checks.LICENSE,)),
    (license.HAS_LICENSE_FILE_AT_TOP_DIR, license.has_license_file_at_top_dir, (checks.LICENSE,)),
    (license.HAS_FSF_OR_OSI_APPROVED_LICENSE, license.has_fsf_or_osi_approved_license, (checks.LICENSE,)),

    (maintained.ARCHIVED, maintained.archived, (checks.MAINTAINED,)),
    (maintained.CREATED_RECENTLY, maintained.created_recently, (checks.MAINTAINED,)),
    (maintained.HAS_RECENT_COMMITS, maintained.has_recent_commits, (checks.MAINTAINED,)),
    (maintained.ISSUE_ACTIVITY_BY_PROJECT_MEMBER, maintained.issue_activity_by_project_member,
     (checks.MAINTAINED,)),

    (packaging.PACKAGED_WITH_AUTOMATED_WORKFLOW, packaging.packaged_with_automated_workflow, (checks.PACKAGING,)),
    (pinning.PINS_DEPENDENCIES, pinning.pins_dependencies, (checks.PINNED_DEPENDENCIES,)),

    (security_policy.SECURITY_POLICY_PRESENT, security_policy.security_policy_present, (checks.SECURITY_POLICY,)),
    (security_policy.SECURITY_POLICY_CONTAINS_LINKS, security_policy.security_policy_contains_links,
     (checks.SECURITY_POLICY,)),
    (security_policy.SECURITY_POLICY_CONTAINS_VULNERABILITY_DISCLOSURE,
     security_policy.security_policy_contains_vulnerability_disclosure, (checks.SECURITY_POLICY,)),
    (security_policy.SECURITY_POLICY_CONTAINS_TEXT, security_policy.security_policy_contains_text,
     (checks.SECURITY_POLICY,)),

    (signed_releases.RELEASES_ARE_SIGNED, signed_releases.releases_are_signed, (checks.SIGNED_RELEASES,)),
    (signed_releases.RELEASES_HAVE_PROVENANCE, signed_releases.releases_have_provenance, (checks.SIGNED_RELEASES,)),
    (signed_releases.RELEASES_HAVE_VERIFIED_SIGNATURES, signed_releases.releases_have_verified_signatures,
     (checks.SIGNED_RELEASES,)),

    (ss.HAS_GITHUB_SECRET_SCANNING_ENABLED, ss.has_github_secret_scanning_enabled, (checks.SECRET_SCANNING,)),
    (ss.HAS_GITHUB_PUSH_PROTECTION_ENABLED, ss.has_github_push_protection_enabled, (checks.SECRET_SCANNING,)),
    (ss.HAS_GITLAB_SECRET_PUSH_PROTECTION, ss.has_gitlab_secret_push_protection, (checks.SECRET_SCANNING,)),
    (ss.HAS_GITLAB_PIPELINE_SECRET_DETECTION, ss.has_gitlab_pipeline_secret_detection, (checks.SECRET_SCANNING,)),
    (ss.HAS_GITLAB_PUSH_RULES_PREVENT_SECRETS, ss.has_gitlab_push_rules_prevent_secrets,
     (checks.SECRET_SCANNING,)),
    (ss.HAS_THIRD_PARTY_GITLEAKS, ss.has_third_party_gitleaks, (checks.SECRET_SCANNING,)),
    (ss.HAS_THIRD_PARTY_TRUFFLEHOG, ss.has_third_party_trufflehog, (checks.SECRET_SCANNING,)),
    (ss.HAS_THIRD_PARTY_DETECT_SECRETS, ss.has_third_party_detect_secrets, (checks.SECRET_SCANNING,)),
    (ss.HAS_THIRD_PARTY_GIT_SECRETS, ss.has_third_party_git_secrets, (checks.SECRET_SCANNING,)),
    (ss.HAS_THIRD_PARTY_GGSHIELD, ss.has_third_party_ggshield, (checks.SECRET_SCANNING,)),
    (ss.HAS_THIRD_PARTY_SHHGIT, ss.has_third_party_shhgit, (checks.SECRET_SCANNING,)),
    (ss.HAS_THIRD_PARTY_REPO_SUPERVISOR, ss.has_third_party_repo_supervisor, (checks.SECRET_SCANNING,)),

    (tp.TAGS_ARE_PROTECTED, tp.tags_are_protected, (checks.TAG_PROTECTION,)),
    (tp.BLOCKS_DELETE_ON_TAGS, tp.blocks_delete_on_tags, (checks.TAG_PROTECTION,)),
    (tp.BLOCKS_FORCE_PUSH_ON_TAGS, tp.blocks_force_push_on_tags, (checks.TAG_PROTECTION,)),
    (tp.BLOCKS_UPDATE_ON_TAGS, tp.blocks_update_on_tags, (checks.TAG_PROTECTION,)),
    (tp.TAG_PROTECTION_APPLIES_TO_ADMINS, tp.tag_protection_applies_to_admins, (checks.TAG_PROTECTION,)),
    (tp.RESTRICTS_TAG_CREATION, tp.restricts_tag_creation, (checks.TAG_PROTECTION,)),
    (tp.REQUIRES_SIGNED_TAGS, tp.requires_signed_tags, (checks.TAG_PROTECTION,)),
    (tp.TAGS_CANNOT_DUPLICATE_BRANCH_NAMES, tp.tags_cannot_duplicate_branch_names, (checks.TAG_PROTECTION,)),
    (tp.GITLAB_RELEASE_TAGS_ARE_PROTECTED, tp.gitlab_release_tags_are_protected, (checks.TAG_PROTECTION,)),

    (perm.HAS_GITHUB_WORKFLOW_PERMISSION_UNDECLARED, perm.has_github_workflow_permission_undeclared,
     (checks.TOKEN_PERMISSIONS,)),
    (perm.HAS_GITHUB_WORKFLOW_PERMISSION_UNKNOWN, perm.has_github_workflow_permission_unknown,
     (checks.TOKEN_PERMISSIONS,)),
    (perm.HAS_GITHUB_WORKFLOW_PERMISSION_NONE, perm.has_github_workflow_permission_none, (checks.TOKEN_PERMISSIONS,)),
    (perm.HAS_GITHUB_WORKFLOW_PERMISSION_READ, perm.has_github_workflow_permission_read, (checks.TOKEN_PERMISSIONS,)),
    (perm.HAS_NO_GITHUB_WORKFLOW_PERMISSION_WRITE_ALL_TOP, perm.has_no_github_workflow_permission_write_all_top,
     (checks.TOKEN_PERMISSIONS,)),
    (perm.HAS_NO_GITHUB_WORKFLOW_PERMISSION_WRITE_ALL_JOB, perm.has_no_github_workflow_permission_write_all_job,
     (checks.TOKEN_PERMISSIONS,)),
    (perm.JOB_LEVEL_PERMISSIONS, perm.job_level_permissions, (checks.TOKEN_PERMISSIONS,)),
    (perm.TOP_LEVEL_PERMISSIONS, perm.top_level_permissions, (checks.TOKEN_PERMISSIONS,)),

    (vulnerabilities.HAS_OSV_VULNERABILITIES, vulnerabilities.has_osv_vulnerabilities, (checks.VULNERABILITIES,)),
    (vulnerabilities.RELEASES_DIRECT_DEPS_ARE_VULN_FREE, vulnerabilities.releases_direct_deps_are_vuln_free,
     (checks.VULNERABILITIES,)),

    (webhooks.WEBHOOKS_USE_SECRETS, webhooks.webhooks_use_secrets, (checks.WEBHOOKS,)),

    (maintainers.MTTU_DEPENDENCIES_IS_HIGH, maintainers.mttu_dependencies_is_high, (checks.MTTU_DEPENDENCIES,)),
    (maintainers.MTTU_DEPENDENCIES_IS_LOW, maintainers.mttu_dependencies_is_low, (checks.MTTU_DEPENDENCIES,)),
    (maintainers.MTTU_DEPENDENCIES_IS_VERY_LOW, maintainers.mttu_dependencies_is_very_low,
     (checks.MTTU_DEPENDENCIES,)),
    (maintainers.HAS_INACTIVE_MAINTAINERS, maintainers.has_inactive_maintainers, (checks.INACTIVE_MAINTAINERS,)),
    (maintainers.MAINTAINERS_RESPOND_TO_BUG_ISSUES, maintainers.maintainers_respond_to_bug_issues,
     (checks.MAINTAINER_RESPONSE,)),
]

# probes no check consumes; they run on request only
INDEPENDENT_PROBES: List[Tuple[str, ProbeImpl]] = [
    (code_review.CODE_REVIEW_TWO_REVIEWERS, code_review.code_review_two_reviewers),
    (memory_safety.MEMORYSAFE, memory_safety.memorysafe),
    (memory_safety.UNSAFEBLOCK, memory_safety.unsafeblock),
    (packaging.PACKAGED_WITH_NPM, packaging.packaged_with_npm),
]


def _configured(probe_id: str, implementation: ProbeImpl, config: ScorecardConfig) -> ProbeImpl:
    """Bind the configurable windows and thresholds of a probe."""
    if probe_id in (maintained.HAS_RECENT_COMMITS, maintained.ISSUE_ACTIVITY_BY_PROJECT_MEMBER):
        return partial(implementation, lookback_days=config.maintained_lookback_days)
    if probe_id in (signed_releases.RELEASES_ARE_SIGNED, signed_releases.RELEASES_HAVE_PROVENANCE):
        return partial(implementation, lookback=config.release_lookback)
    if probe_id in (maintainers.MTTU_DEPENDENCIES_IS_HIGH, maintainers.MTTU_DEPENDENCIES_IS_LOW):
        return partial(implementation, high_days=config.mttu_threshold_days)
    if probe_id == maintainers.HAS_INACTIVE_MAINTAINERS:
        return partial(implementation, inactive_days=config.inactive_maintainer_days)
    if probe_id == maintainers.MAINTAINERS_RESPOND_TO_BUG_ISSUES:
        return partial(implementation, threshold_days=config.response_threshold_days)
    return implementation


def build_registry(config: Optional[ScorecardConfig] = None,
                   definitions: Union[str, Path] = DEFINITIONS_DIR) -> ProbeRegistry:
    """
    Register every probe, validate its metadata and freeze the registry.

    Args:
        config: Supplies windows and thresholds; defaults apply when None
        definitions: Directory holding one ``<id>.yml`` per probe

    Raises:
        RegistrationError: On a malformed probe table
        ProbeDefinitionError: When metadata is missing, invalid or orphaned
    """
    config = config or ScorecardConfig()
    registry = ProbeRegistry()
    for probe_id, implementation, consumers in ALL_PROBES:
        registry.register(probe_id, _configured(probe_id, implementation, config), consumers)
    for probe_id, implementation in INDEPENDENT_PROBES:
        registry.register_independent(probe_id, implementation)

    registry.validate_definitions(definitions)
    registry.freeze()
    logger.info(f"Registered {len(registry)} probes for {len(registry.check_names())} checks, "
                f"{len(registry.independent_probes())} independent")
    return registry


__all__ = [
    'ALL_PROBES',
    'INDEPENDENT_PROBES',
    'DEFINITIONS_DIR',
    'ProbeDescriptor',
    'ProbeRegistry',
    'build_registry',
]
