"""
Attestation Policy
==================
Pass/fail gate evaluated directly against RawResults, used to decide
whether a release may be signed.

Rules run in a fixed order and evaluation stops at the first violation:

    1. binary artifacts (with an allow-list of path prefixes)
    2. known vulnerabilities
    3. unpinned dependencies (with an allow-list of package names and path prefixes)
    4. code review of recent changesets (with optional approver requirements)

Every violation is logged with the artifact, dependency or changeset
that caused it.

Author: Scorecard Team
"""

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional, Set, Tuple, Union
import logging

import yaml

from scorecard.checker.check_names import CODE_REVIEW
from scorecard.checker.check_result import MAX_RESULT_SCORE
from scorecard.checker.raw_results import (
    Changeset,
    Dependency,
    DependencyUseType,
    RawResults,
    is_github_owned_action,
)
from scorecard.errors import PolicyLoadError
from scorecard.evaluation.code_review import code_review
from scorecard.probes.code_review import APPROVED, MissingAuthorError, code_approved, is_approved
from scorecard.probes.utils import require

logger = logging.getLogger(__name__)


class PolicyResult(Enum):
    PASS = "Pass"
    FAIL = "Fail"


@dataclass(frozen=True)
class PolicyDecision:
    result: PolicyResult
    reason: str = ""

    @property
    def passed(self) -> bool:
        return self.result == PolicyResult.PASS


PASS = PolicyDecision(PolicyResult.PASS, "all policy rules passed")


@dataclass(frozen=True)
class AllowedDependency:
    """
    Unpinned dependency exempted from the pinning rule, by exact package
    name or by path prefix of the file declaring it. Empty fields never
    match.
    """
    package_name: str = ""
    file_path: str = ""

    def matches(self, dep: Dependency) -> bool:
        if self.package_name and dep.name == self.package_name:
            return True
        path = dep.location.path if dep.location is not None else ""
        return bool(self.file_path) and path.startswith(self.file_path)

    def to_dict(self) -> Dict[str, str]:
        return {'packagename': self.package_name, 'filepath': self.file_path}


@dataclass(frozen=True)
class CodeReviewRequirements:
    """
    Per-changeset approval requirements.

    Every changeset needs at least ``min_reviewers`` distinct approvers
    other than its author and, when ``required_approvers`` is set, one
    approval from somebody on that list.
    """
    required_approvers: Tuple[str, ...] = ()
    min_reviewers: int = 0

    @property
    def is_empty(self) -> bool:
        return not self.required_approvers and self.min_reviewers == 0

    def to_dict(self) -> Dict[str, Any]:
        return {'requiredApprovers': list(self.required_approvers), 'minReviewers': self.min_reviewers}


@dataclass(frozen=True)
class AttestationPolicy:
    """
    Declarative gate configuration.

    ``allowed_binary_artifacts`` holds path prefixes; empty entries never
    match.
    """
    prevent_binary_artifacts: bool = False
    allowed_binary_artifacts: Tuple[str, ...] = ()
    ensure_no_vulnerabilities: bool = False
    ensure_pinned_dependencies: bool = False
    allowed_unpinned_dependencies: Tuple[AllowedDependency, ...] = ()
    ensure_code_reviewed: bool = False
    code_review_requirements: CodeReviewRequirements = field(default_factory=CodeReviewRequirements)

    def evaluate(self, raw: RawResults) -> PolicyDecision:
        """
        Run the enabled rules in order, stopping at the first failure.

        Raises:
            ProbeExecutionError: If data an enabled rule needs was not collected
        """
        require(raw, "raw results")

        rules = [
            (self.prevent_binary_artifacts, lambda: check_binary_artifacts(raw, self.allowed_binary_artifacts)),
            (self.ensure_no_vulnerabilities, lambda: check_no_vulnerabilities(raw)),
            (self.ensure_pinned_dependencies,
             lambda: check_pinned_dependencies(raw, self.allowed_unpinned_dependencies)),
            (self.ensure_code_reviewed, lambda: check_code_reviewed(raw, self.code_review_requirements)),
        ]
        for enabled, rule in rules:
            if not enabled:
                continue
            decision = rule()
            if not decision.passed:
                logger.warning(f"Policy failed: {decision.reason}")
                return decision

        logger.info("Policy passed")
        return PASS

    def to_dict(self) -> Dict[str, Any]:
        return {
            'preventBinaryArtifacts': self.prevent_binary_artifacts,
            'allowedBinaryArtifacts': list(self.allowed_binary_artifacts),
            'ensureNoVulnerabilities': self.ensure_no_vulnerabilities,
            'ensurePinnedDependencies': self.ensure_pinned_dependencies,
            'allowedUnpinnedDependencies': [a.to_dict() for a in self.allowed_unpinned_dependencies],
            'ensureCodeReviewed': self.ensure_code_reviewed,
            'codeReviewRequirements': self.code_review_requirements.to_dict(),
        }


# ============================================================================
# RULES
# ============================================================================

def matching_prefix(path: str, allowed: Iterable[str]) -> Optional[str]:
    """First non-empty allow-list entry that ``path`` starts with."""
    for prefix in allowed:
        if prefix and path.startswith(prefix):
            return prefix
    return None


def check_binary_artifacts(raw: RawResults, allowed: Iterable[str] = ()) -> PolicyDecision:
    files = require(raw.binary_artifacts, "binary artifact results").files
    allowed = list(allowed)

    for artifact in files:
        prefix = matching_prefix(artifact.path, allowed)
        if prefix is not None:
            logger.info(f"ignoring binary artifact at {artifact.path} due to ignored path {prefix}")
            continue
        reason = f"binary detected path:{artifact.path} offset:{artifact.offset}"
        logger.warning(reason)
        return PolicyDecision(PolicyResult.FAIL, reason)

    logger.info("repo was free of binary artifacts")
    return PolicyDecision(PolicyResult.PASS, "no disallowed binary artifacts")


def check_no_vulnerabilities(raw: RawResults) -> PolicyDecision:
    vulns = require(raw.vulnerabilities, "vulnerabilities results").vulnerabilities
    logger.info(f"found {len(vulns)} vulnerabilities in package")

    if vulns:
        ids = ", ".join(v.id for v in vulns)
        return PolicyDecision(PolicyResult.FAIL, f"known vulnerabilities: {ids}")
    return PolicyDecision(PolicyResult.PASS, "no known vulnerabilities")


def _describe(dep: Dependency) -> str:
    where = ""
    if dep.location is not None:
        where = f" at {dep.location.path}:{dep.location.offset}"
    return f"{dep.name or '<unnamed>'} ({dep.type.value}){where}"


def _is_github_owned(dep: Dependency) -> bool:
    snippet = dep.location.snippet if dep.location is not None else ""
    return is_github_owned_action(snippet or "")


def check_pinned_dependencies(raw: RawResults,
                              allowed: Iterable[AllowedDependency] = ()) -> PolicyDecision:
    """
    Fail on the first dependency explicitly marked as not pinned.

    GitHub-owned actions are checked first, then third-party actions, then
    every other dependency type. An undefined pinning status passes, and
    so does any dependency matched by ``allowed``.
    """
    deps = require(raw.pinning_dependencies, "pinning dependencies results").dependencies
    allowed = list(allowed)

    actions = [d for d in deps if d.type == DependencyUseType.GITHUB_ACTION]
    groups = [
        ("GitHub-owned GitHubAction", [d for d in actions if _is_github_owned(d)]),
        ("third-party GitHubAction", [d for d in actions if not _is_github_owned(d)]),
        ("dependency", [d for d in deps if d.type != DependencyUseType.GITHUB_ACTION]),
    ]

    for label, group in groups:
        for dep in group:
            if dep.pinned is not False:
                continue
            if any(entry.matches(dep) for entry in allowed):
                logger.info(f"ignoring unpinned {label} {_describe(dep)} due to policy allow-list")
                continue
            reason = f"found unpinned {label} {_describe(dep)}"
            logger.warning(reason)
            return PolicyDecision(PolicyResult.FAIL, reason)

    logger.info("repo was free of unpinned dependencies")
    return PolicyDecision(PolicyResult.PASS, "all dependencies pinned")


def _first_unreviewed(raw: RawResults) -> Optional[str]:
    for changeset in raw.code_review.default_branch_changesets:
        try:
            if not is_approved(changeset):
                return changeset.revision_id
        except MissingAuthorError:
            return changeset.revision_id
    return None


def approvers(changeset: Changeset) -> Set[str]:
    """Distinct logins that approved ``changeset``, excluding its author."""
    return {
        review.author.login
        for review in changeset.reviews
        if review.state == APPROVED and review.author is not None
        and review.author.login and review.author.login != changeset.author.login
    }


def _requirement_violation(changeset: Changeset, reqs: CodeReviewRequirements) -> Optional[str]:
    approved_by = approvers(changeset)
    if len(approved_by) < reqs.min_reviewers:
        return (f"not enough approvals for {changeset.revision_id} "
                f"(needed:{reqs.min_reviewers} found:{len(approved_by)})")
    if reqs.required_approvers and not approved_by.intersection(reqs.required_approvers):
        return f"no required approver approved {changeset.revision_id}"
    return None


def check_code_reviewed(raw: RawResults,
                        requirements: Optional[CodeReviewRequirements] = None) -> PolicyDecision:
    """
    Delegate to the Code-Review check and require a perfect score, then
    apply ``requirements`` to every changeset.
    """
    require(raw.code_review, "code review results")
    findings, _ = code_approved(raw)
    result = code_review(CODE_REVIEW, findings)

    if result.score == MAX_RESULT_SCORE:
        return check_review_requirements(raw, requirements, result.reason)

    revision = _first_unreviewed(raw)
    reason = f"code review score {result.score}: {result.reason}"
    if revision:
        reason += f" (first unreviewed changeset: {revision})"
    logger.warning(reason)
    return PolicyDecision(PolicyResult.FAIL, reason)


def check_review_requirements(raw: RawResults, requirements: Optional[CodeReviewRequirements],
                              reason: str = "all changesets reviewed") -> PolicyDecision:
    if requirements is None or requirements.is_empty:
        return PolicyDecision(PolicyResult.PASS, reason)

    for changeset in raw.code_review.default_branch_changesets:
        violation = _requirement_violation(changeset, requirements)
        if violation:
            logger.warning(violation)
            return PolicyDecision(PolicyResult.FAIL, violation)

    logger.info("all changesets meet the code review requirements")
    return PolicyDecision(PolicyResult.PASS, reason)


# ============================================================================
# LOADING
# ============================================================================

BOOLEAN_KEYS = {
    'preventBinaryArtifacts': 'prevent_binary_artifacts',
    'ensureNoVulnerabilities': 'ensure_no_vulnerabilities',
    'ensurePinnedDependencies': 'ensure_pinned_dependencies',
    'ensureCodeReviewed': 'ensure_code_reviewed',
}
ALLOW_LIST_KEY = 'allowedBinaryArtifacts'
ALLOWED_UNPINNED_KEY = 'allowedUnpinnedDependencies'
REVIEW_REQUIREMENTS_KEY = 'codeReviewRequirements'


def _parse_allowed_unpinned(value: Any) -> Tuple[AllowedDependency, ...]:
    if value is None:
        return ()
    if not isinstance(value, list):
        raise PolicyLoadError(f"{ALLOWED_UNPINNED_KEY} must be a list")

    entries: List[AllowedDependency] = []
    for i, entry in enumerate(value):
        where = f"{ALLOWED_UNPINNED_KEY}[{i}]"
        if not isinstance(entry, dict):
            raise PolicyLoadError(f"{where} must be a mapping")
        unknown = set(entry) - {'packagename', 'filepath'}
        if unknown:
            raise PolicyLoadError(f"unknown keys in {where}: {', '.join(sorted(unknown))}")
        package_name = entry.get('packagename') or ""
        file_path = entry.get('filepath') or ""
        if not isinstance(package_name, str) or not isinstance(file_path, str):
            raise PolicyLoadError(f"{where} values must be strings")
        if not package_name and not file_path:
            raise PolicyLoadError(f"{where} needs a packagename or a filepath")
        entries.append(AllowedDependency(package_name=package_name, file_path=file_path))
    return tuple(entries)


def _parse_review_requirements(value: Any) -> CodeReviewRequirements:
    if value is None:
        return CodeReviewRequirements()
    if not isinstance(value, dict):
        raise PolicyLoadError(f"{REVIEW_REQUIREMENTS_KEY} must be a mapping")
    unknown = set(value) - {'requiredApprovers', 'minReviewers'}
    if unknown:
        raise PolicyLoadError(f"unknown keys in {REVIEW_REQUIREMENTS_KEY}: {', '.join(sorted(unknown))}")

    approvers_list = value.get('requiredApprovers') or []
    if not isinstance(approvers_list, list) or not all(isinstance(a, str) for a in approvers_list):
        raise PolicyLoadError("requiredApprovers must be a list of logins")

    min_reviewers = value.get('minReviewers', 0)
    if isinstance(min_reviewers, bool) or not isinstance(min_reviewers, int) or min_reviewers < 0:
        raise PolicyLoadError(f"minReviewers must be a non-negative integer, got {min_reviewers!r}")

    return CodeReviewRequirements(required_approvers=tuple(approvers_list), min_reviewers=min_reviewers)


def parse_policy(document: Any) -> AttestationPolicy:
    """
    Build a policy from a decoded YAML document.

    Raises:
        PolicyLoadError: On unknown keys or values of the wrong type
    """
    if document is None:
        return AttestationPolicy()
    if not isinstance(document, dict):
        raise PolicyLoadError("policy must be a mapping")

    unknown = set(document) - set(BOOLEAN_KEYS) - {ALLOW_LIST_KEY, ALLOWED_UNPINNED_KEY, REVIEW_REQUIREMENTS_KEY}
    if unknown:
        raise PolicyLoadError(f"unknown policy keys: {', '.join(sorted(unknown))}")

    kwargs: Dict[str, Any] = {}
    for key, attr in BOOLEAN_KEYS.items():
        if key in document:
            value = document[key]
            if not isinstance(value, bool):
                raise PolicyLoadError(f"{key} must be a boolean, got {value!r}")
            kwargs[attr] = value

    allowed = document.get(ALLOW_LIST_KEY) or []
    if not isinstance(allowed, list) or not all(isinstance(p, str) for p in allowed):
        raise PolicyLoadError(f"{ALLOW_LIST_KEY} must be a list of path prefixes")
    kwargs['allowed_binary_artifacts'] = tuple(allowed)
    kwargs['allowed_unpinned_dependencies'] = _parse_allowed_unpinned(document.get(ALLOWED_UNPINNED_KEY))
    kwargs['code_review_requirements'] = _parse_review_requirements(document.get(REVIEW_REQUIREMENTS_KEY))

    return AttestationPolicy(**kwargs)


def load_policy(path: Union[str, Path]) -> AttestationPolicy:
    """
    Read and validate a policy file.

    Raises:
        PolicyLoadError: If the file cannot be read or is not a valid policy
    """
    try:
        with open(path, 'r', encoding='utf-8') as f:
            document = yaml.safe_load(f)
    except OSError as e:
        raise PolicyLoadError(f"cannot read policy file {path}: {e}") from e
    except yaml.YAMLError as e:
        raise PolicyLoadError(f"malformed policy file {path}: {e}") from e

    policy = parse_policy(document)
    logger.info(f"Loaded attestation policy from {path}")
    return policy
