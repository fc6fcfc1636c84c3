"""
Raw Results
===========
Typed repository facts consumed by the probes.

The collection layer fills one sub-structure per fact category. A
sub-structure left as ``None`` means it was never collected, which the
probes report as an error; an empty collection is a legitimate answer
and yields NotApplicable findings instead.

All types are frozen dataclasses. ``RawResults.from_dict`` rebuilds the
whole tree from a decoded JSON document with the same field names.

Author: Scorecard Team
"""

import collections.abc
from dataclasses import dataclass, field, fields, is_dataclass
from datetime import datetime, timedelta, timezone
from enum import Enum
from typing import Any, Dict, Mapping, Optional, Tuple, Union, get_type_hints
import logging

from scorecard.finding.finding import FileType

logger = logging.getLogger(__name__)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def as_utc(moment: datetime) -> datetime:
    """Treat naive datetimes as UTC so they compare with aware ones."""
    if moment.tzinfo is None:
        return moment.replace(tzinfo=timezone.utc)
    return moment


@dataclass(frozen=True)
class File:
    """A file (or URL) referenced by raw data."""
    path: str
    type: FileType = FileType.NONE
    offset: int = 0
    end_offset: int = 0
    snippet: str = ""
    file_size: int = 0


@dataclass(frozen=True)
class User:
    login: str = ""
    is_bot: bool = False
    companies: Tuple[str, ...] = ()
    organizations: Tuple[str, ...] = ()
    num_contributions: int = 0


# ============================================================================
# BINARY ARTIFACTS
# ============================================================================

@dataclass(frozen=True)
class BinaryArtifactData:
    files: Tuple[File, ...] = ()


# ============================================================================
# BRANCH PROTECTION
# ============================================================================

@dataclass(frozen=True)
class StatusChecksRule:
    up_to_date_before_merge: Optional[bool] = None
    requires_status_checks: Optional[bool] = None
    contexts: Tuple[str, ...] = ()


@dataclass(frozen=True)
class PullRequestReviewRule:
    required: Optional[bool] = None
    require_code_owner_reviews: Optional[bool] = None
    dismiss_stale_reviews: Optional[bool] = None
    required_approving_review_count: Optional[int] = None


@dataclass(frozen=True)
class BranchProtectionRule:
    check_rules: StatusChecksRule = field(default_factory=StatusChecksRule)
    required_pull_request_reviews: PullRequestReviewRule = field(default_factory=PullRequestReviewRule)
    enforce_admins: Optional[bool] = None
    require_last_push_approval: Optional[bool] = None
    require_linear_history: Optional[bool] = None
    allow_deletions: Optional[bool] = None
    allow_force_pushes: Optional[bool] = None


@dataclass(frozen=True)
class BranchRef:
    name: str
    protected: Optional[bool] = None
    protection_rule: BranchProtectionRule = field(default_factory=BranchProtectionRule)


@dataclass(frozen=True)
class BranchProtectionsData:
    branches: Tuple[BranchRef, ...] = ()
    codeowners_files: Tuple[str, ...] = ()


# ============================================================================
# CI TESTS
# ============================================================================

@dataclass(frozen=True)
class Status:
    state: str
    context: str = ""
    url: str = ""
    target_url: str = ""


@dataclass(frozen=True)
class CheckRun:
    status: str
    conclusion: str = ""
    url: str = ""
    app_slug: str = ""


@dataclass(frozen=True)
class RevisionCIInfo:
    head_sha: str
    pull_request_number: int = 0
    statuses: Tuple[Status, ...] = ()
    check_runs: Tuple[CheckRun, ...] = ()


@dataclass(frozen=True)
class CITestData:
    ci_info: Tuple[RevisionCIInfo, ...] = ()


# ============================================================================
# CII BEST PRACTICES
# ============================================================================

class BadgeLevel(Enum):
    UNKNOWN = "Unknown"
    NOT_FOUND = "NotFound"
    IN_PROGRESS = "InProgress"
    PASSING = "Passing"
    SILVER = "Silver"
    GOLD = "Gold"


@dataclass(frozen=True)
class CIIBestPracticesData:
    badge: BadgeLevel = BadgeLevel.UNKNOWN


# ============================================================================
# CODE REVIEW
# ============================================================================

class ReviewPlatform(Enum):
    GITHUB = "GitHub"
    PROW = "Prow"
    GERRIT = "Gerrit"
    PHABRICATOR = "Phabricator"
    PIPER = "Piper"
    UNKNOWN = "Unknown"


@dataclass(frozen=True)
class Review:
    state: str
    author: Optional[User] = None


@dataclass(frozen=True)
class Commit:
    sha: str
    committer: User = field(default_factory=User)
    committed_date: Optional[datetime] = None
    message: str = ""


@dataclass(frozen=True)
class Changeset:
    revision_id: str = ""
    review_platform: ReviewPlatform = ReviewPlatform.UNKNOWN
    author: User = field(default_factory=User)
    commits: Tuple[Commit, ...] = ()
    reviews: Tuple[Review, ...] = ()


@dataclass(frozen=True)
class CodeReviewData:
    default_branch_changesets: Tuple[Changeset, ...] = ()


# ============================================================================
# CONTRIBUTORS, DEPENDENCY TOOLS, FUZZING
# ============================================================================

@dataclass(frozen=True)
class ContributorsData:
    users: Tuple[User, ...] = ()


@dataclass(frozen=True)
class Tool:
    name: str
    url: str = ""
    desc: str = ""
    files: Tuple[File, ...] = ()


@dataclass(frozen=True)
class DependencyUpdateToolData:
    tools: Tuple[Tool, ...] = ()


@dataclass(frozen=True)
class FuzzingData:
    fuzzers: Tuple[Tool, ...] = ()


# ============================================================================
# DANGEROUS WORKFLOW
# ============================================================================

class DangerousWorkflowType(Enum):
    UNTRUSTED_CHECKOUT = "untrustedCodeCheckout"
    SCRIPT_INJECTION = "scriptInjection"


@dataclass(frozen=True)
class DangerousWorkflow:
    type: DangerousWorkflowType
    file: File
    job_name: str = ""


@dataclass(frozen=True)
class DangerousWorkflowData:
    num_workflows: int = 0
    workflows: Tuple[DangerousWorkflow, ...] = ()


# ============================================================================
# LICENSE
# ============================================================================

class LicenseAttribution(Enum):
    API = "repositoryAPI"
    HEURISTICS = "fileHeuristics"
    OTHER = "other"


@dataclass(frozen=True)
class LicenseFile:
    file: File
    name: str = ""
    spdx_id: str = ""
    attribution: LicenseAttribution = LicenseAttribution.OTHER
    approved: bool = False


@dataclass(frozen=True)
class LicenseData:
    license_files: Optional[Tuple[LicenseFile, ...]] = ()


# ============================================================================
# MAINTAINED
# ============================================================================

class AuthorAssociation(Enum):
    OWNER = "OWNER"
    MEMBER = "MEMBER"
    COLLABORATOR = "COLLABORATOR"
    CONTRIBUTOR = "CONTRIBUTOR"
    FIRST_TIME_CONTRIBUTOR = "FIRST_TIME_CONTRIBUTOR"
    FIRST_TIMER = "FIRST_TIMER"
    MANNEQUIN = "MANNEQUIN"
    NONE = "NONE"

    @property
    def is_member(self) -> bool:
        return self in (AuthorAssociation.OWNER, AuthorAssociation.MEMBER, AuthorAssociation.COLLABORATOR)


@dataclass(frozen=True)
class IssueComment:
    created_at: Optional[datetime] = None
    author: Optional[User] = None
    author_association: AuthorAssociation = AuthorAssociation.NONE


@dataclass(frozen=True)
class Issue:
    uri: str = ""
    created_at: Optional[datetime] = None
    author: Optional[User] = None
    author_association: AuthorAssociation = AuthorAssociation.NONE
    comments: Tuple[IssueComment, ...] = ()


@dataclass(frozen=True)
class MaintainedData:
    created_at: Optional[datetime] = None
    archived: bool = False
    issues: Tuple[Issue, ...] = ()
    default_branch_commits: Tuple[Commit, ...] = ()


# ============================================================================
# PACKAGING
# ============================================================================

@dataclass(frozen=True)
class WorkflowRun:
    url: str = ""


@dataclass(frozen=True)
class Package:
    name: str = ""
    file: Optional[File] = None
    runs: Tuple[WorkflowRun, ...] = ()
    msg: Optional[str] = None


@dataclass(frozen=True)
class PackagingData:
    packages: Tuple[Package, ...] = ()


# ============================================================================
# PINNED DEPENDENCIES
# ============================================================================

class DependencyUseType(Enum):
    GITHUB_ACTION = "GitHubAction"
    CONTAINER_IMAGE = "containerImage"
    DOWNLOAD_THEN_RUN = "downloadThenRun"
    GO_COMMAND = "goCommand"
    CHOCO_COMMAND = "chocoCommand"
    NPM_COMMAND = "npmCommand"
    PIP_COMMAND = "pipCommand"
    NUGET_COMMAND = "nugetCommand"


@dataclass(frozen=True)
class Dependency:
    type: DependencyUseType
    name: Optional[str] = None
    pinned_at: Optional[str] = None
    location: Optional[File] = None
    msg: Optional[str] = None
    pinned: Optional[bool] = None


@dataclass(frozen=True)
class ElementError:
    location: File
    error: str


@dataclass(frozen=True)
class PinningDependenciesData:
    dependencies: Tuple[Dependency, ...] = ()
    processing_errors: Tuple[ElementError, ...] = ()


def is_github_owned_action(snippet: Optional[str]) -> bool:
    """True for actions published under the ``actions/`` or ``github/`` owners."""
    if not snippet:
        return False
    return snippet.startswith("actions/") or snippet.startswith("github/")


# ============================================================================
# SAST
# ============================================================================

@dataclass(frozen=True)
class SASTWorkflow:
    tool: str
    file: Optional[File] = None


@dataclass(frozen=True)
class SASTCommit:
    sha: str = ""
    merged_at: Optional[datetime] = None
    compliant: bool = False


@dataclass(frozen=True)
class SASTData:
    workflows: Tuple[SASTWorkflow, ...] = ()
    commits: Tuple[SASTCommit, ...] = ()


# ============================================================================
# SECURITY POLICY
# ============================================================================

class SecurityPolicyInformationType(Enum):
    EMAIL = "emailAddress"
    LINK = "httpLink"
    TEXT = "vulnDisclosureText"


@dataclass(frozen=True)
class SecurityPolicyInformation:
    type: SecurityPolicyInformationType
    match: str
    line_number: int = 0
    offset: int = 0


@dataclass(frozen=True)
class SecurityPolicyFile:
    file: File
    information: Tuple[SecurityPolicyInformation, ...] = ()


@dataclass(frozen=True)
class SecurityPolicyData:
    policy_files: Tuple[SecurityPolicyFile, ...] = ()


# ============================================================================
# SIGNED RELEASES
# ============================================================================

@dataclass(frozen=True)
class ReleaseAsset:
    name: str
    url: str = ""


@dataclass(frozen=True)
class Release:
    tag_name: str
    url: str = ""
    target_commitish: str = ""
    body: str = ""
    assets: Tuple[ReleaseAsset, ...] = ()


@dataclass(frozen=True)
class PackageSignature:
    """A signature published next to a released package and its verification result."""
    type: str
    is_verified: bool = False
    error_msg: str = ""
    artifact_url: str = ""
    key_id: str = ""


@dataclass(frozen=True)
class ProjectPackage:
    system: str
    name: str
    version: str = ""
    signatures: Tuple[PackageSignature, ...] = ()


@dataclass(frozen=True)
class SignedReleasesData:
    releases: Tuple[Release, ...] = ()
    packages: Tuple[ProjectPackage, ...] = ()


# ============================================================================
# SECRET SCANNING
# ============================================================================

class TriState(Enum):
    TRUE = "true"
    FALSE = "false"
    UNKNOWN = "unknown"


class ExecutionPattern(Enum):
    COMMIT_BASED = "commit-based"
    PERIODIC = "periodic"


@dataclass(frozen=True)
class ToolCIStats:
    """How often a third-party scanner ran over the recently merged commits."""
    execution_pattern: ExecutionPattern = ExecutionPattern.COMMIT_BASED
    total_commits_analyzed: int = 0
    commits_with_tool_run: int = 0
    has_recent_runs: bool = False
    last_run_date: str = ""


@dataclass(frozen=True)
class ThirdPartyScanner:
    name: str
    paths: Tuple[str, ...] = ()
    ci: Optional[ToolCIStats] = None


@dataclass(frozen=True)
class SecretScanningData:
    platform: str = ""
    gh_native_enabled: TriState = TriState.UNKNOWN
    gh_push_protection_enabled: TriState = TriState.UNKNOWN
    gl_secret_push_protection: bool = False
    gl_pipeline_secret_detection: bool = False
    gl_push_rules_prevent_secrets: bool = False
    third_party: Tuple[ThirdPartyScanner, ...] = ()
    evidence: Tuple[str, ...] = ()

    def scanner(self, name: str) -> Optional[ThirdPartyScanner]:
        for scanner in self.third_party:
            if scanner.name == name:
                return scanner
        return None


# ============================================================================
# SOURCE CODE
# ============================================================================

@dataclass(frozen=True)
class LanguageStat:
    name: str
    num_lines: int = 0


@dataclass(frozen=True)
class SourceFile:
    path: str
    content: str = ""


@dataclass(frozen=True)
class SourceCodeData:
    """Repository languages and the contents of the files language rules inspect."""
    languages: Tuple[LanguageStat, ...] = ()
    files: Tuple[SourceFile, ...] = ()


@dataclass(frozen=True)
class NpmRegistryLookup:
    name: str
    exists: bool = False
    repository_url: str = ""
    error: str = ""


@dataclass(frozen=True)
class NpmPackageData:
    # content of the root package.json; None when the file is absent
    package_json: Optional[str] = None
    registry: Optional[NpmRegistryLookup] = None


# ============================================================================
# TAG PROTECTION
# ============================================================================

@dataclass(frozen=True)
class TagProtectionRule:
    allow_deletions: Optional[bool] = None
    allow_force_pushes: Optional[bool] = None
    enforce_admins: Optional[bool] = None
    allow_updates: Optional[bool] = None
    restrict_creation: Optional[bool] = None
    require_signatures: Optional[bool] = None


@dataclass(frozen=True)
class TagRef:
    name: str
    protected: Optional[bool] = None
    protection_rule: TagProtectionRule = field(default_factory=TagProtectionRule)


@dataclass(frozen=True)
class GitLabProtectedTag:
    pattern: str
    create_access_level: int = 30


@dataclass(frozen=True)
class TagProtectionsData:
    tags: Tuple[TagRef, ...] = ()
    gitlab_branches: Tuple[str, ...] = ()
    gitlab_release_tags: Tuple[str, ...] = ()
    gitlab_protected_tags: Tuple[GitLabProtectedTag, ...] = ()


# ============================================================================
# TOKEN PERMISSIONS
# ============================================================================

class PermissionLocation(Enum):
    TOP = "topLevel"
    JOB = "jobLevel"


class PermissionLevel(Enum):
    UNDECLARED = "undeclared"
    WRITE = "write"
    READ = "read"
    NONE = "none"
    UNKNOWN = "unknown"


@dataclass(frozen=True)
class TokenPermission:
    """
    One permission declaration in a workflow. ``name`` is None when the
    declaration covers every scope at once, as ``write-all`` does.
    """
    type: PermissionLevel
    location_type: Optional[PermissionLocation] = None
    name: Optional[str] = None
    value: Optional[str] = None
    file: Optional[File] = None
    job: str = ""
    msg: Optional[str] = None


@dataclass(frozen=True)
class TokenPermissionsData:
    token_permissions: Tuple[TokenPermission, ...] = ()
    num_tokens: int = 0


# ============================================================================
# VULNERABILITIES
# ============================================================================

@dataclass(frozen=True)
class Vulnerability:
    id: str
    aliases: Tuple[str, ...] = ()


@dataclass(frozen=True)
class VulnerabilitiesData:
    vulnerabilities: Tuple[Vulnerability, ...] = ()


@dataclass(frozen=True)
class DepVuln:
    name: str
    version: str = ""
    ecosystem: str = ""
    osv_ids: Tuple[str, ...] = ()
    manifest_path: str = ""


@dataclass(frozen=True)
class ReleaseDepsVulns:
    tag: str
    commit_sha: str = ""
    published_at: Optional[datetime] = None
    findings: Tuple[DepVuln, ...] = ()


@dataclass(frozen=True)
class ReleaseDirectDepsVulnsData:
    releases: Tuple[ReleaseDepsVulns, ...] = ()


# ============================================================================
# WEBHOOKS
# ============================================================================

@dataclass(frozen=True)
class Webhook:
    path: str = ""
    id: int = 0
    uses_auth_secret: bool = False


@dataclass(frozen=True)
class WebhooksData:
    webhooks: Tuple[Webhook, ...] = ()


# ============================================================================
# MAINTAINER HEALTH
# ============================================================================

@dataclass(frozen=True)
class LockDependency:
    name: str
    version: str = ""
    ecosystem: str = ""
    is_latest: Optional[bool] = None
    time_since_oldest_release: Optional[timedelta] = None

    def staleness_days(self) -> float:
        """Days since the oldest newer release; zero when already current."""
        if self.is_latest or self.time_since_oldest_release is None:
            return 0.0
        return self.time_since_oldest_release.total_seconds() / 86400


@dataclass(frozen=True)
class MTTUDependenciesData:
    dependencies: Tuple[LockDependency, ...] = ()


@dataclass(frozen=True)
class MaintainerActivityData:
    # username -> active within the inactivity window
    activity: Mapping[str, bool] = field(default_factory=dict)


@dataclass(frozen=True)
class LabelInterval:
    label: str
    start: Optional[datetime] = None
    end: Optional[datetime] = None
    ongoing: bool = False
    responded: bool = False
    days_without_response: int = 0


@dataclass(frozen=True)
class IssueResponseLag:
    issue_number: int
    issue_url: str = ""
    open: bool = True
    open_days: int = 0
    intervals: Tuple[LabelInterval, ...] = ()


@dataclass(frozen=True)
class IssueResponseData:
    items: Tuple[IssueResponseLag, ...] = ()


# ============================================================================
# AGGREGATE
# ============================================================================

@dataclass(frozen=True)
class RawResults:
    """
    All collected facts for one repository evaluation.

    ``now`` is the time reference for windowed rules; it is fixed at
    construction so repeated probe runs see the same clock.
    """
    now: datetime = field(default_factory=_utcnow)
    binary_artifacts: Optional[BinaryArtifactData] = None
    branch_protection: Optional[BranchProtectionsData] = None
    ci_tests: Optional[CITestData] = None
    cii_best_practices: Optional[CIIBestPracticesData] = None
    code_review: Optional[CodeReviewData] = None
    contributors: Optional[ContributorsData] = None
    dangerous_workflow: Optional[DangerousWorkflowData] = None
    dependency_update_tool: Optional[DependencyUpdateToolData] = None
    fuzzing: Optional[FuzzingData] = None
    license: Optional[LicenseData] = None
    maintained: Optional[MaintainedData] = None
    packaging: Optional[PackagingData] = None
    pinning_dependencies: Optional[PinningDependenciesData] = None
    sast: Optional[SASTData] = None
    security_policy: Optional[SecurityPolicyData] = None
    signed_releases: Optional[SignedReleasesData] = None
    vulnerabilities: Optional[VulnerabilitiesData] = None
    release_direct_deps_vulns: Optional[ReleaseDirectDepsVulnsData] = None
    webhooks: Optional[WebhooksData] = None
    mttu_dependencies: Optional[MTTUDependenciesData] = None
    maintainer_activity: Optional[MaintainerActivityData] = None
    maintainer_response: Optional[IssueResponseData] = None
    secret_scanning: Optional[SecretScanningData] = None
    tag_protection: Optional[TagProtectionsData] = None
    token_permissions: Optional[TokenPermissionsData] = None
    source_code: Optional[SourceCodeData] = None
    npm_package: Optional[NpmPackageData] = None

    def __post_init__(self):
        object.__setattr__(self, 'now', as_utc(self.now))

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'RawResults':
        """
        Build raw results from a decoded JSON document.

        Keys mirror the dataclass field names. Datetimes are ISO-8601
        strings, durations are numbers of days and enums use their values.
        """
        return _build(cls, data)


# ============================================================================
# DECODING
# ============================================================================

def parse_datetime(value: Any) -> datetime:
    if isinstance(value, datetime):
        return as_utc(value)
    text = str(value)
    if text.endswith('Z'):
        text = text[:-1] + '+00:00'
    return as_utc(datetime.fromisoformat(text))


def _build(tp: Any, value: Any) -> Any:
    if value is None:
        return None

    origin = getattr(tp, '__origin__', None)
    args = getattr(tp, '__args__', ())

    if origin is Union:
        inner = [arg for arg in args if arg is not type(None)]
        return _build(inner[0], value)
    if origin is tuple:
        return tuple(_build(args[0], item) for item in value)
    if origin in (dict, collections.abc.Mapping):
        return {str(k): v for k, v in value.items()}
    if is_dataclass(tp):
        if not isinstance(value, dict):
            raise ValueError(f"expected an object for {tp.__name__}, got {type(value).__name__}")
        hints = get_type_hints(tp)
        kwargs = {}
        for f in fields(tp):
            if f.name in value:
                kwargs[f.name] = _build(hints[f.name], value[f.name])
        unknown = set(value) - {f.name for f in fields(tp)}
        if unknown:
            logger.warning(f"Ignoring unknown {tp.__name__} keys: {sorted(unknown)}")
        return tp(**kwargs)
    if isinstance(tp, type) and issubclass(tp, Enum):
        return tp(value)
    if tp is datetime:
        return parse_datetime(value)
    if tp is timedelta:
        return value if isinstance(value, timedelta) else timedelta(days=float(value))
    return value
