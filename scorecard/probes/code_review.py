"""
Code Review Probes
==================
Check that the recent changesets on the default branch were approved by
someone other than their author, and how many distinct people reviewed
each of them.

Author: Scorecard Team
"""

from typing import List, Tuple

from scorecard.checker.raw_results import Changeset, RawResults
from scorecard.errors import ProbeExecutionError, ScorecardError
from scorecard.finding.finding import Finding
from scorecard.finding.outcome import Outcome
from scorecard.probes.utils import new_finding, require

CODE_APPROVED = "codeApproved"
NUM_APPROVED_KEY = "approvedChangesets"
NUM_TOTAL_KEY = "totalChangesets"

APPROVED = "APPROVED"


class MissingAuthorError(ScorecardError):
    pass


def is_approved(changeset: Changeset) -> bool:
    """
    True when any review approves the changeset and was left by someone
    other than its author.

    Raises:
        MissingAuthorError: If the author or a reviewer login is unknown
    """
    if not changeset.author.login:
        raise MissingAuthorError("could not retrieve changeset author")

    for review in changeset.reviews:
        if review.author is None or not review.author.login:
            raise MissingAuthorError("could not retrieve the changeset reviewer")
        if review.state == APPROVED and review.author.login != changeset.author.login:
            return True
    return False


def code_approved(raw: RawResults) -> Tuple[List[Finding], str]:
    require(raw, "raw results")
    changesets = require(raw.code_review, "code review results").default_branch_changesets

    if not changesets:
        return [new_finding(CODE_APPROVED, "no changesets detected", Outcome.NOT_APPLICABLE)], CODE_APPROVED

    found_human_activity = False
    n_changes = 0
    n_approved = 0
    for changeset in changesets:
        try:
            approved = is_approved(changeset)
        except MissingAuthorError as e:
            return [new_finding(CODE_APPROVED, str(e), Outcome.ERROR)], CODE_APPROVED

        # approved bot changesets would inflate single-maintainer projects
        if approved and changeset.author.is_bot:
            continue

        n_changes += 1
        if not changeset.author.is_bot:
            found_human_activity = True
        if approved:
            n_approved += 1

    if n_approved != n_changes:
        outcome = Outcome.FALSE
        message = f"Found {n_approved}/{n_changes} approved changesets"
    elif not found_human_activity:
        outcome = Outcome.NOT_APPLICABLE
        message = f"Found no human activity in the last {len(changesets)} changesets"
    else:
        outcome = Outcome.TRUE
        message = "All changesets approved"

    f = new_finding(CODE_APPROVED, message, outcome)
    f = f.with_values({NUM_APPROVED_KEY: n_approved, NUM_TOTAL_KEY: n_changes})
    return [f], CODE_APPROVED


# ============================================================================
# TWO REVIEWERS
# ============================================================================

CODE_REVIEW_TWO_REVIEWERS = "codeReviewTwoReviewers"
LEAST_REVIEWERS_KEY = "leastFoundReviewers"
MINIMUM_REVIEWERS = 2


def unique_reviewers(changeset: Changeset) -> int:
    """
    Distinct reviewers of a changeset, whatever their verdict, excluding
    its author.

    Raises:
        MissingAuthorError: If a reviewer login is unknown
    """
    reviewers = set()
    for review in changeset.reviews:
        if review.author is None or not review.author.login:
            raise MissingAuthorError("could not retrieve the changeset reviewer")
        if review.author.login != changeset.author.login:
            reviewers.add(review.author.login)
    return len(reviewers)


def code_review_two_reviewers(raw: RawResults) -> Tuple[List[Finding], str]:
    """
    True when every changeset had at least two reviewers besides its
    author.

    Raises:
        ProbeExecutionError: If there are no changesets to inspect
    """
    probe_id = CODE_REVIEW_TWO_REVIEWERS
    require(raw, "raw results")
    changesets = require(raw.code_review, "code review results").default_branch_changesets
    if not changesets:
        raise ProbeExecutionError("no changesets found")

    found_human_activity = False
    least = None
    for changeset in changesets:
        if not changeset.author.login:
            return [new_finding(probe_id, "Could not retrieve the author of a changeset.",
                                Outcome.NOT_AVAILABLE)], probe_id
        if not changeset.author.is_bot:
            found_human_activity = True
        try:
            count = unique_reviewers(changeset)
        except MissingAuthorError:
            return [new_finding(probe_id, "Could not retrieve the reviewer of a changeset.",
                                Outcome.NOT_AVAILABLE)], probe_id
        least = count if least is None else min(least, count)

    if not found_human_activity:
        return [new_finding(probe_id, "All changesets authored by bot(s).", Outcome.NOT_AVAILABLE)], probe_id

    if least < MINIMUM_REVIEWERS:
        f = new_finding(probe_id, f"some changesets had <{MINIMUM_REVIEWERS} reviewers", Outcome.FALSE)
    else:
        f = new_finding(probe_id, f"at least {MINIMUM_REVIEWERS} reviewers found for all changesets", Outcome.TRUE)
    return [f.with_value(LEAST_REVIEWERS_KEY, least)], probe_id
