"""
Token Permissions Probes
========================
Permissions granted to the GitHub workflow token, at the top of each
workflow and on each job.

Every probe flags the matching declarations as False findings located in
the workflow file, carrying ``permissionLocation``, ``tokenName`` (when
the declaration names a scope) and ``permissionLevel``. Without any
permission data at all each probe yields a single NotAvailable finding.

Author: Scorecard Team
"""

from typing import Callable, List, Optional, Tuple

from scorecard.checker.raw_results import PermissionLevel, PermissionLocation, RawResults, TokenPermission
from scorecard.errors import ProbeExecutionError
from scorecard.finding.finding import Finding, Location
from scorecard.finding.outcome import Outcome
from scorecard.probes.utils import new_finding, require

HAS_GITHUB_WORKFLOW_PERMISSION_UNDECLARED = "hasGitHubWorkflowPermissionUndeclared"
HAS_GITHUB_WORKFLOW_PERMISSION_UNKNOWN = "hasGitHubWorkflowPermissionUnknown"
HAS_GITHUB_WORKFLOW_PERMISSION_NONE = "hasGitHubWorkflowPermissionNone"
HAS_GITHUB_WORKFLOW_PERMISSION_READ = "hasGitHubWorkflowPermissionRead"
HAS_NO_GITHUB_WORKFLOW_PERMISSION_WRITE_ALL_TOP = "hasNoGitHubWorkflowPermissionWriteAllTop"
HAS_NO_GITHUB_WORKFLOW_PERMISSION_WRITE_ALL_JOB = "hasNoGitHubWorkflowPermissionWriteAllJob"
JOB_LEVEL_PERMISSIONS = "jobLevelPermissions"
TOP_LEVEL_PERMISSIONS = "topLevelPermissions"

PERMISSION_LOCATION_KEY = "permissionLocation"
TOKEN_NAME_KEY = "tokenName"
PERMISSION_LEVEL_KEY = "permissionLevel"

NO_TOKENS_MESSAGE = "No token permissions found"


def permission_text(permission: TokenPermission) -> str:
    """
    Describe a permission declaration.

    Raises:
        ProbeExecutionError: If the declaration lacks its location or value
    """
    if permission.msg is not None:
        return permission.msg
    if permission.location_type is None:
        raise ProbeExecutionError("permission location type is missing")
    location = permission.location_type.value
    if permission.type == PermissionLevel.UNDECLARED:
        return f"no {location} permission defined"
    if permission.value is None:
        raise ProbeExecutionError("permission value is missing")
    if permission.name is None:
        return f"{location} permissions set to '{permission.value}'"
    return f"{location} '{permission.name}' permission set to '{permission.value}'"


def permission_finding(probe_id: str, permission: TokenPermission, outcome: Outcome) -> Finding:
    location: Optional[Location] = None
    if permission.file is not None:
        location = Location(
            type=permission.file.type,
            path=permission.file.path,
            line_start=permission.file.offset,
            snippet=permission.file.snippet or None,
        )
    f = new_finding(probe_id, permission_text(permission), outcome, location)
    values = {PERMISSION_LEVEL_KEY: permission.type.value}
    if permission.location_type is not None:
        values[PERMISSION_LOCATION_KEY] = permission.location_type.value
    if permission.name is not None:
        values[TOKEN_NAME_KEY] = permission.name
    return f.with_values(values)


def _scan(raw: RawResults, probe_id: str,
          matches: Callable[[TokenPermission], bool],
          matched: Outcome, unmatched: Outcome, unmatched_text: str) -> Tuple[List[Finding], str]:
    require(raw, "raw results")
    data = require(raw.token_permissions, "token permissions results")
    if data.num_tokens == 0:
        return [new_finding(probe_id, NO_TOKENS_MESSAGE, Outcome.NOT_AVAILABLE)], probe_id

    findings = [permission_finding(probe_id, p, matched) for p in data.token_permissions if matches(p)]
    if not findings:
        findings.append(new_finding(probe_id, unmatched_text, unmatched))
    return findings, probe_id


def _write(permission: TokenPermission, location: PermissionLocation) -> bool:
    return permission.type == PermissionLevel.WRITE and permission.location_type == location


# ============================================================================
# PROBES
# ============================================================================

def has_github_workflow_permission_undeclared(raw: RawResults) -> Tuple[List[Finding], str]:
    return _scan(
        raw, HAS_GITHUB_WORKFLOW_PERMISSION_UNDECLARED,
        lambda p: p.type == PermissionLevel.UNDECLARED,
        Outcome.FALSE, Outcome.TRUE, "all workflows declare their token permissions",
    )


def has_github_workflow_permission_unknown(raw: RawResults) -> Tuple[List[Finding], str]:
    return _scan(
        raw, HAS_GITHUB_WORKFLOW_PERMISSION_UNKNOWN,
        lambda p: p.type == PermissionLevel.UNKNOWN,
        Outcome.FALSE, Outcome.TRUE, "no workflows with unknown token permissions",
    )


def has_github_workflow_permission_none(raw: RawResults) -> Tuple[List[Finding], str]:
    return _scan(
        raw, HAS_GITHUB_WORKFLOW_PERMISSION_NONE,
        lambda p: p.type == PermissionLevel.NONE,
        Outcome.TRUE, Outcome.FALSE, "no workflows set token permissions to none",
    )


def has_github_workflow_permission_read(raw: RawResults) -> Tuple[List[Finding], str]:
    return _scan(
        raw, HAS_GITHUB_WORKFLOW_PERMISSION_READ,
        lambda p: p.type == PermissionLevel.READ,
        Outcome.TRUE, Outcome.FALSE, "no workflows with read token permissions",
    )


def has_no_github_workflow_permission_write_all_top(raw: RawResults) -> Tuple[List[Finding], str]:
    return _scan(
        raw, HAS_NO_GITHUB_WORKFLOW_PERMISSION_WRITE_ALL_TOP,
        lambda p: _write(p, PermissionLocation.TOP) and p.name is None,
        Outcome.FALSE, Outcome.TRUE, "no workflows with write-all permissions at the top level",
    )


def has_no_github_workflow_permission_write_all_job(raw: RawResults) -> Tuple[List[Finding], str]:
    return _scan(
        raw, HAS_NO_GITHUB_WORKFLOW_PERMISSION_WRITE_ALL_JOB,
        lambda p: _write(p, PermissionLocation.JOB) and p.name is None,
        Outcome.FALSE, Outcome.TRUE, "no jobs with write-all permissions",
    )


def job_level_permissions(raw: RawResults) -> Tuple[List[Finding], str]:
    return _scan(
        raw, JOB_LEVEL_PERMISSIONS,
        lambda p: _write(p, PermissionLocation.JOB) and p.name is not None,
        Outcome.FALSE, Outcome.TRUE, "no jobs with write permissions",
    )


def top_level_permissions(raw: RawResults) -> Tuple[List[Finding], str]:
    return _scan(
        raw, TOP_LEVEL_PERMISSIONS,
        lambda p: _write(p, PermissionLocation.TOP) and p.name is not None,
        Outcome.FALSE, Outcome.TRUE, "no workflows with write permissions at the top level",
    )
