"""
Token-Permissions Evaluation
============================
Starts from the maximum score and deducts for write access granted to
workflow tokens. A workflow that grants write access at the top level
while its jobs also hold write or undeclared permissions scores the
minimum. Named top-level write scopes cost points by the damage they
allow: 10 for contents, packages and actions, 1 for deployments and
security-events, 0.5 for checks and statuses.

Author: Scorecard Team
"""

from typing import Dict, List
import logging

from scorecard.checker.check_result import (
    MAX_RESULT_SCORE,
    MIN_RESULT_SCORE,
    CheckResult,
    create_inconclusive_result,
    create_max_score_result,
    create_min_score_result,
    create_result_with_score,
)
from scorecard.checker.raw_results import PermissionLevel, PermissionLocation
from scorecard.evaluation.common import has_expected_probes, invalid_probe_results, log_finding
from scorecard.finding.finding import Finding
from scorecard.finding.outcome import Outcome
from scorecard.probes.permissions import (
    HAS_GITHUB_WORKFLOW_PERMISSION_NONE,
    HAS_GITHUB_WORKFLOW_PERMISSION_READ,
    HAS_GITHUB_WORKFLOW_PERMISSION_UNDECLARED,
    HAS_GITHUB_WORKFLOW_PERMISSION_UNKNOWN,
    HAS_NO_GITHUB_WORKFLOW_PERMISSION_WRITE_ALL_JOB,
    HAS_NO_GITHUB_WORKFLOW_PERMISSION_WRITE_ALL_TOP,
    JOB_LEVEL_PERMISSIONS,
    PERMISSION_LEVEL_KEY,
    PERMISSION_LOCATION_KEY,
    TOKEN_NAME_KEY,
    TOP_LEVEL_PERMISSIONS,
)

logger = logging.getLogger(__name__)

EXPECTED_PROBES = [
    HAS_NO_GITHUB_WORKFLOW_PERMISSION_WRITE_ALL_TOP,
    HAS_GITHUB_WORKFLOW_PERMISSION_UNKNOWN,
    HAS_GITHUB_WORKFLOW_PERMISSION_NONE,
    HAS_GITHUB_WORKFLOW_PERMISSION_READ,
    HAS_GITHUB_WORKFLOW_PERMISSION_UNDECLARED,
    HAS_NO_GITHUB_WORKFLOW_PERMISSION_WRITE_ALL_JOB,
    JOB_LEVEL_PERMISSIONS,
    TOP_LEVEL_PERMISSIONS,
]

# points lost per named top-level write scope
WRITE_SCOPE_PENALTIES = {
    "checks": 0.5,
    "statuses": 0.5,
    "contents": 10.0,
    "packages": 10.0,
    "actions": 10.0,
    "deployments": 1.0,
    "security-events": 1.0,
}

UNDECLARED_TOP_PENALTY = 0.5
WRITE_ALL_TOP_PENALTY = 0.5

EXCESSIVE = "detected GitHub workflow tokens with excessive permissions"
LEAST_PRIVILEGE = "GitHub workflow tokens follow principle of least privilege"

TOP = PermissionLocation.TOP.value
JOB = PermissionLocation.JOB.value
WRITE = PermissionLevel.WRITE.value


class _WorkflowState:
    """Write and undeclared permissions seen so far, per level and workflow path."""

    def __init__(self):
        self.write: Dict[str, Dict[str, bool]] = {TOP: {}, JOB: {}}
        self.undeclared: Dict[str, Dict[str, bool]] = {TOP: {}, JOB: {}}

    def has_write(self, level: str, path: str) -> bool:
        return self.write[level].get(path, False)

    def is_undeclared(self, level: str, path: str) -> bool:
        return self.undeclared[level].get(path, False)


def _path(f: Finding) -> str:
    return f.location.path if f.location is not None else ""


def token_permissions(name: str, findings: List[Finding]) -> CheckResult:
    if not has_expected_probes(findings, EXPECTED_PROBES):
        return invalid_probe_results(name)

    score = float(MAX_RESULT_SCORE)
    state = _WorkflowState()

    for f in findings:
        if f.outcome == Outcome.TRUE and f.probe in (HAS_GITHUB_WORKFLOW_PERMISSION_NONE,
                                                      HAS_GITHUB_WORKFLOW_PERMISSION_READ):
            log_finding(name, f)

        if f.outcome == Outcome.NOT_AVAILABLE:
            if f.probe == HAS_GITHUB_WORKFLOW_PERMISSION_UNDECLARED:
                return create_inconclusive_result(name, "Token permissions are not available")
            return create_inconclusive_result(name, "No tokens found")

        if f.outcome != Outcome.FALSE:
            continue
        path = _path(f)

        if f.probe == HAS_GITHUB_WORKFLOW_PERMISSION_UNDECLARED:
            log_finding(name, f)
            location = f.values.get(PERMISSION_LOCATION_KEY)
            if location == JOB:
                state.undeclared[JOB][path] = True
                if state.has_write(TOP, path) or state.is_undeclared(TOP, path):
                    score = MIN_RESULT_SCORE
            elif location == TOP:
                state.undeclared[TOP][path] = True
                if state.is_undeclared(JOB, path):
                    score = MIN_RESULT_SCORE
                else:
                    score -= UNDECLARED_TOP_PENALTY

        elif f.probe == HAS_NO_GITHUB_WORKFLOW_PERMISSION_WRITE_ALL_TOP:
            log_finding(name, f)
            state.write[TOP][path] = True
            if state.has_write(JOB, path) or state.is_undeclared(JOB, path):
                return create_min_score_result(name, EXCESSIVE)
            score -= WRITE_ALL_TOP_PENALTY

        elif f.probe == HAS_NO_GITHUB_WORKFLOW_PERMISSION_WRITE_ALL_JOB:
            log_finding(name, f)
            state.write[JOB][path] = True
            if state.has_write(TOP, path):
                score = MIN_RESULT_SCORE
            elif state.is_undeclared(TOP, path):
                score -= UNDECLARED_TOP_PENALTY

        elif f.probe == JOB_LEVEL_PERMISSIONS:
            if f.values.get(PERMISSION_LEVEL_KEY) == WRITE:
                log_finding(name, f)
                state.write[JOB][path] = True

        elif f.probe == TOP_LEVEL_PERMISSIONS:
            if f.values.get(PERMISSION_LEVEL_KEY) == WRITE:
                penalty = WRITE_SCOPE_PENALTIES.get(f.values.get(TOKEN_NAME_KEY), 0.0)
                if penalty:
                    log_finding(name, f)
                score -= penalty

        else:
            logger.debug(f"{name}: {f.message}")

    score = max(score, MIN_RESULT_SCORE)
    if not any(state.write[JOB].values()):
        logger.info(f"{name}: no {JOB} write permissions found")

    if score != MAX_RESULT_SCORE:
        return create_result_with_score(name, EXCESSIVE, int(score))
    return create_max_score_result(name, LEAST_PRIVILEGE)
