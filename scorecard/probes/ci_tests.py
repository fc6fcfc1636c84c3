"""
CI Test Probes
==============
Detect whether merged pull requests were gated by a CI test run.

Author: Scorecard Team
"""

from typing import List, Optional, Tuple

from scorecard.checker.raw_results import RawResults, RevisionCIInfo
from scorecard.finding.finding import FileType, Finding, Location
from scorecard.finding.outcome import Outcome
from scorecard.probes.utils import new_finding, require

TESTS_RUN_IN_CI = "testsRunInCI"

SUCCESS = "success"

# Substrings identifying CI systems in status contexts and check-run apps
CI_PATTERNS = [
    "appveyor", "buildkite", "circleci", "e2e", "github-actions", "jenkins",
    "mergeable", "packit-as-a-service", "semaphoreci", "test", "travis-ci",
    "flutter-dashboard", "cirrus ci", "azure-pipelines",
]


def is_test(text: str) -> bool:
    lowered = (text or "").lower()
    return any(pattern in lowered for pattern in CI_PATTERNS)


def _successful_ci_status(info: RevisionCIInfo) -> Optional[Location]:
    for status in info.statuses:
        if status.state != SUCCESS:
            continue
        if is_test(status.context) or is_test(status.target_url):
            return Location(type=FileType.URL, path=status.url)
    return None


def _successful_ci_check(info: RevisionCIInfo) -> Optional[Location]:
    for run in info.check_runs:
        if run.status != "completed" or run.conclusion != SUCCESS:
            continue
        if is_test(run.app_slug):
            return Location(type=FileType.URL, path=run.url)
    return None


def tests_run_in_ci(raw: RawResults) -> Tuple[List[Finding], str]:
    """One finding per merged PR: True when a CI test succeeded at its head."""
    require(raw, "raw results")
    data = require(raw.ci_tests, "CI test results")

    if not data.ci_info:
        return [new_finding(TESTS_RUN_IN_CI, "no pull requests found", Outcome.NOT_APPLICABLE)], TESTS_RUN_IN_CI

    findings = []
    for info in data.ci_info:
        location = _successful_ci_status(info) or _successful_ci_check(info)
        if location is not None:
            f = new_finding(TESTS_RUN_IN_CI,
                            f"merged PR {info.pull_request_number} with CI test at HEAD {info.head_sha}",
                            Outcome.TRUE, location)
        else:
            f = new_finding(TESTS_RUN_IN_CI,
                            f"merged PR {info.pull_request_number} without CI test at HEAD {info.head_sha}",
                            Outcome.FALSE)
        findings.append(f)
    return findings, TESTS_RUN_IN_CI
