"""
Branch Protection Probes
========================
One probe per branch protection setting, evaluated for every
development and release branch.

Each finding carries the branch name under ``branchName``. A setting the
collector could not read (``None``) yields NotAvailable; with no branches
at all every probe yields a single NotApplicable finding.

Author: Scorecard Team
"""

from typing import Callable, List, Optional, Tuple

from scorecard.checker.raw_results import BranchRef, RawResults
from scorecard.finding.finding import Finding
from scorecard.finding.outcome import Outcome
from scorecard.probes.utils import new_finding, require

BRANCH_NAME_KEY = "branchName"
REQUIRED_REVIEWERS_KEY = "numberOfRequiredReviewers"

BLOCKS_DELETE_ON_BRANCHES = "blocksDeleteOnBranches"
BLOCKS_FORCE_PUSH_ON_BRANCHES = "blocksForcePushOnBranches"
BRANCHES_ARE_PROTECTED = "branchesAreProtected"
BRANCH_PROTECTION_APPLIES_TO_ADMINS = "branchProtectionAppliesToAdmins"
DISMISSES_STALE_REVIEWS = "dismissesStaleReviews"
REQUIRES_APPROVERS_FOR_PULL_REQUESTS = "requiresApproversForPullRequests"
REQUIRES_CODE_OWNERS_REVIEW = "requiresCodeOwnersReview"
REQUIRES_LAST_PUSH_APPROVAL = "requiresLastPushApproval"
REQUIRES_UP_TO_DATE_BRANCHES = "requiresUpToDateBranches"
RUNS_STATUS_CHECKS_BEFORE_MERGING = "runsStatusChecksBeforeMerging"
REQUIRES_PRS_TO_CHANGE_CODE = "requiresPRsToChangeCode"

NO_BRANCHES_MESSAGE = "no branches found"


def _branches(raw: RawResults) -> Tuple[BranchRef, ...]:
    require(raw, "raw results")
    return require(raw.branch_protection, "branch protection results").branches


def _not_applicable(probe_id: str) -> List[Finding]:
    return [new_finding(probe_id, NO_BRANCHES_MESSAGE, Outcome.NOT_APPLICABLE)]


def _boolean_setting(raw: RawResults, probe_id: str,
                     setting: Callable[[BranchRef], Optional[bool]],
                     enabled: str, disabled: str, unknown: str) -> Tuple[List[Finding], str]:
    """
    Evaluate a True/False/unknown setting on every branch.

    Messages are format strings taking the branch name.
    """
    branches = _branches(raw)
    if not branches:
        return _not_applicable(probe_id), probe_id

    findings = []
    for branch in branches:
        value = setting(branch)
        if value is None:
            outcome, text = Outcome.NOT_AVAILABLE, unknown
        elif value:
            outcome, text = Outcome.TRUE, enabled
        else:
            outcome, text = Outcome.FALSE, disabled
        f = new_finding(probe_id, text.format(branch.name), outcome)
        findings.append(f.with_value(BRANCH_NAME_KEY, branch.name))
    return findings, probe_id


def _negate(value: Optional[bool]) -> Optional[bool]:
    return None if value is None else not value


# ============================================================================
# PROBES
# ============================================================================

def blocks_delete_on_branches(raw: RawResults) -> Tuple[List[Finding], str]:
    return _boolean_setting(
        raw, BLOCKS_DELETE_ON_BRANCHES,
        lambda b: _negate(b.protection_rule.allow_deletions),
        "'allow deletion' disabled on branch '{}'",
        "'allow deletion' enabled on branch '{}'",
        "could not determine whether branch '{}' allows deletion",
    )


def blocks_force_push_on_branches(raw: RawResults) -> Tuple[List[Finding], str]:
    return _boolean_setting(
        raw, BLOCKS_FORCE_PUSH_ON_BRANCHES,
        lambda b: _negate(b.protection_rule.allow_force_pushes),
        "'force pushes' disabled on branch '{}'",
        "'force pushes' enabled on branch '{}'",
        "could not determine whether branch '{}' allows force pushes",
    )


def branches_are_protected(raw: RawResults) -> Tuple[List[Finding], str]:
    return _boolean_setting(
        raw, BRANCHES_ARE_PROTECTED,
        lambda b: b.protected,
        "branch '{}' is protected",
        "branch '{}' is not protected",
        "could not determine whether branch '{}' is protected",
    )


def branch_protection_applies_to_admins(raw: RawResults) -> Tuple[List[Finding], str]:
    return _boolean_setting(
        raw, BRANCH_PROTECTION_APPLIES_TO_ADMINS,
        lambda b: b.protection_rule.enforce_admins,
        "branch protection settings apply to administrators on branch '{}'",
        "branch protection settings do not apply to administrators on branch '{}'",
        "unable to retrieve whether or not branch protection settings apply to administrators on branch '{}'",
    )


def dismisses_stale_reviews(raw: RawResults) -> Tuple[List[Finding], str]:
    return _boolean_setting(
        raw, DISMISSES_STALE_REVIEWS,
        lambda b: b.protection_rule.required_pull_request_reviews.dismiss_stale_reviews,
        "stale review dismissal enabled on branch '{}'",
        "stale review dismissal disabled on branch '{}'",
        "could not determine whether stale reviews are dismissed on branch '{}'",
    )


def requires_last_push_approval(raw: RawResults) -> Tuple[List[Finding], str]:
    return _boolean_setting(
        raw, REQUIRES_LAST_PUSH_APPROVAL,
        lambda b: b.protection_rule.require_last_push_approval,
        "'last push approval' enabled on branch '{}'",
        "'last push approval' disabled on branch '{}'",
        "could not determine whether 'last push approval' is enabled on branch '{}'",
    )


def requires_up_to_date_branches(raw: RawResults) -> Tuple[List[Finding], str]:
    return _boolean_setting(
        raw, REQUIRES_UP_TO_DATE_BRANCHES,
        lambda b: b.protection_rule.check_rules.up_to_date_before_merge,
        "status checks require up-to-date branches for '{}'",
        "status checks do not require up-to-date branches for '{}'",
        "unable to retrieve whether up-to-date branches are needed to merge on branch '{}'",
    )


def requires_prs_to_change_code(raw: RawResults) -> Tuple[List[Finding], str]:
    return _boolean_setting(
        raw, REQUIRES_PRS_TO_CHANGE_CODE,
        lambda b: b.protection_rule.required_pull_request_reviews.required,
        "PRs are required in order to make changes on branch '{}'",
        "PRs are not required to make changes on branch '{}'; or we don't have data to detect it."
        " If you think it might be the latter, make sure to run Scorecard with a PAT or use Repo"
        " Rules (that are always public) instead of Branch Protection settings",
        "could not get data on whether PRs are required on branch '{}'",
    )


def runs_status_checks_before_merging(raw: RawResults) -> Tuple[List[Finding], str]:
    branches = _branches(raw)
    if not branches:
        return _not_applicable(RUNS_STATUS_CHECKS_BEFORE_MERGING), RUNS_STATUS_CHECKS_BEFORE_MERGING

    findings = []
    for branch in branches:
        if branch.protection_rule.check_rules.contexts:
            f = new_finding(RUNS_STATUS_CHECKS_BEFORE_MERGING,
                            f"status check found to merge onto on branch '{branch.name}'", Outcome.TRUE)
        else:
            f = new_finding(RUNS_STATUS_CHECKS_BEFORE_MERGING,
                            f"no status checks found to merge onto branch '{branch.name}'", Outcome.FALSE)
        findings.append(f.with_value(BRANCH_NAME_KEY, branch.name))
    return findings, RUNS_STATUS_CHECKS_BEFORE_MERGING


def requires_approvers_for_pull_requests(raw: RawResults) -> Tuple[List[Finding], str]:
    """True when at least one approving review is required; carries the count."""
    branches = _branches(raw)
    if not branches:
        return _not_applicable(REQUIRES_APPROVERS_FOR_PULL_REQUESTS), REQUIRES_APPROVERS_FOR_PULL_REQUESTS

    findings = []
    for branch in branches:
        count = branch.protection_rule.required_pull_request_reviews.required_approving_review_count
        if count is None:
            f = new_finding(REQUIRES_APPROVERS_FOR_PULL_REQUESTS,
                            f"could not determine whether branch '{branch.name}' has required approving review count",
                            Outcome.NOT_AVAILABLE)
            findings.append(f.with_value(BRANCH_NAME_KEY, branch.name))
            continue

        if count > 0:
            f = new_finding(REQUIRES_APPROVERS_FOR_PULL_REQUESTS,
                            f"required approving review count is {count} on branch '{branch.name}'",
                            Outcome.TRUE)
        else:
            f = new_finding(REQUIRES_APPROVERS_FOR_PULL_REQUESTS,
                            f"branch '{branch.name}' does not require approvers", Outcome.FALSE)
        findings.append(f.with_values({BRANCH_NAME_KEY: branch.name, REQUIRED_REVIEWERS_KEY: count}))
    return findings, REQUIRES_APPROVERS_FOR_PULL_REQUESTS


def requires_code_owners_review(raw: RawResults) -> Tuple[List[Finding], str]:
    """True only when code owner review is required and a CODEOWNERS file exists."""
    branches = _branches(raw)
    if not branches:
        return _not_applicable(REQUIRES_CODE_OWNERS_REVIEW), REQUIRES_CODE_OWNERS_REVIEW

    has_codeowners = bool(raw.branch_protection.codeowners_files)
    findings = []
    for branch in branches:
        required = branch.protection_rule.required_pull_request_reviews.require_code_owner_reviews
        if required is None:
            outcome = Outcome.NOT_AVAILABLE
            text = f"could not determine whether codeowners review is allowed on branch '{branch.name}'"
        elif required and has_codeowners:
            outcome = Outcome.TRUE
            text = f"codeowner review is required on branch '{branch.name}'"
        elif required:
            outcome = Outcome.FALSE
            text = f"codeowner review is required on branch '{branch.name}' - but no codeowners file found in repo"
        else:
            outcome = Outcome.FALSE
            text = f"codeowners review is not required on branch '{branch.name}'"
        findings.append(new_finding(REQUIRES_CODE_OWNERS_REVIEW, text, outcome)
                        .with_value(BRANCH_NAME_KEY, branch.name))
    return findings, REQUIRES_CODE_OWNERS_REVIEW
