"""
Secret-Scanning Evaluation
==========================
GitHub projects with native secret scanning score the maximum. Without
it, the best configured third-party scanner sets the score. When the
native status is unknown the token lacked permissions (inconclusive) or
the project is scored the GitLab way: 4 points each for secret push
protection and pipeline secret detection, 1 for the push rule, plus the
third-party score, capped at 10.

A third-party scanner earns 1 point when present, more when its CI runs
were analyzed: periodic scanners earn 10 for a run in the last 30 days,
commit-based scanners 10, 7, 5 or 3 for running on all, 70%, 50% or
some of the analyzed commits.

Author: Scorecard Team
"""

from typing import Dict, List, Optional

from scorecard.checker.check_result import (
    MAX_RESULT_SCORE,
    CheckResult,
    create_inconclusive_result,
    create_max_score_result,
    create_result_with_score,
)
from scorecard.checker.raw_results import ExecutionPattern
from scorecard.evaluation.common import has_expected_probes, invalid_probe_results, log_finding
from scorecard.finding.finding import Finding
from scorecard.finding.outcome import Outcome
from scorecard.probes.secret_scanning import (
    COMMITS_WITH_RUN_KEY,
    EXECUTION_PATTERN_KEY,
    HAS_GITHUB_PUSH_PROTECTION_ENABLED,
    HAS_GITHUB_SECRET_SCANNING_ENABLED,
    HAS_GITLAB_PIPELINE_SECRET_DETECTION,
    HAS_GITLAB_PUSH_RULES_PREVENT_SECRETS,
    HAS_GITLAB_SECRET_PUSH_PROTECTION,
    HAS_RECENT_RUNS_KEY,
    PERMISSION_DENIED_KEY,
    THIRD_PARTY_SCANNERS,
    TOOL_KEY,
    TOTAL_COMMITS_KEY,
)

EXPECTED_PROBES = [
    HAS_GITHUB_SECRET_SCANNING_ENABLED,
    HAS_GITHUB_PUSH_PROTECTION_ENABLED,
    HAS_GITLAB_SECRET_PUSH_PROTECTION,
    HAS_GITLAB_PIPELINE_SECRET_DETECTION,
    HAS_GITLAB_PUSH_RULES_PREVENT_SECRETS,
] + list(THIRD_PARTY_SCANNERS)

GITLAB_POINTS = [
    (HAS_GITLAB_SECRET_PUSH_PROTECTION, "Secret Push Protection", 4),
    (HAS_GITLAB_PIPELINE_SECRET_DETECTION, "Pipeline Secret Detection", 4),
    (HAS_GITLAB_PUSH_RULES_PREVENT_SECRETS, "Push rules prevent_secrets", 1),
]

PRESENT_SCORE = 1


def coverage_score(commits_with_run: int, total_commits: int) -> int:
    coverage = commits_with_run / total_commits if total_commits else 0.0
    if coverage >= 1.0:
        return 10
    if coverage >= 0.70:
        return 7
    if coverage >= 0.50:
        return 5
    if coverage > 0:
        return 3
    return PRESENT_SCORE


def scanner_score(f: Finding) -> int:
    total = f.values.get(TOTAL_COMMITS_KEY) or 0
    if total == 0:
        return PRESENT_SCORE
    if f.values.get(EXECUTION_PATTERN_KEY) == ExecutionPattern.PERIODIC.value:
        return 10 if f.values.get(HAS_RECENT_RUNS_KEY) else PRESENT_SCORE
    return coverage_score(f.values.get(COMMITS_WITH_RUN_KEY) or 0, total)


def coverage_detail(f: Finding) -> Optional[str]:
    total = f.values.get(TOTAL_COMMITS_KEY) or 0
    if total == 0:
        return None
    tool = f.values.get(TOOL_KEY, f.probe)
    if f.values.get(EXECUTION_PATTERN_KEY) == ExecutionPattern.PERIODIC.value:
        return f"{tool}: ran recently" if f.values.get(HAS_RECENT_RUNS_KEY) else f"{tool}: no recent runs"
    return f"{tool}: {100 * (f.values.get(COMMITS_WITH_RUN_KEY) or 0) / total:.0f}% coverage"


def _third_party_reason(scanners: List[Finding]) -> str:
    reason = "; ".join(f.message for f in scanners if f.message) or "third-party scanner present"
    details = [d for d in (coverage_detail(f) for f in scanners) if d]
    if details:
        reason += f" ({', '.join(details)})"
    return reason


def secret_scanning(name: str, findings: List[Finding]) -> CheckResult:
    if not has_expected_probes(findings, EXPECTED_PROBES):
        return invalid_probe_results(name)

    by_probe: Dict[str, Finding] = {}
    for f in findings:
        by_probe.setdefault(f.probe, f)
    scanners = [f for f in findings if f.probe in THIRD_PARTY_SCANNERS and f.outcome == Outcome.TRUE]
    for f in scanners:
        log_finding(name, f)
    third_party_score = max((scanner_score(f) for f in scanners), default=0)

    native = by_probe[HAS_GITHUB_SECRET_SCANNING_ENABLED]
    push_protection = by_probe[HAS_GITHUB_PUSH_PROTECTION_ENABLED].outcome == Outcome.TRUE

    if native.outcome in (Outcome.TRUE, Outcome.FALSE):
        state = "enabled" if native.outcome == Outcome.TRUE else "disabled"
        reason = f"GitHub native secret scanning is {state}"
        if push_protection:
            reason += " (push protection enabled)"
        if scanners:
            reason += f"; {_third_party_reason(scanners)}"
        if native.outcome == Outcome.TRUE:
            return create_max_score_result(name, reason)
        return create_result_with_score(name, reason, third_party_score)

    if native.outcome == Outcome.NOT_AVAILABLE and native.values.get(PERMISSION_DENIED_KEY):
        reason = "Token has insufficient permissions to get information about native GitHub secret scanning"
        if scanners:
            reason += f"; {_third_party_reason(scanners)}"
        return create_inconclusive_result(name, reason)

    score = 0
    bits = []
    for probe_id, feature, points in GITLAB_POINTS:
        if by_probe[probe_id].outcome == Outcome.TRUE:
            score += points
            bits.append(f"{feature}: on")
        else:
            bits.append(f"{feature}: off")
    if scanners:
        score += third_party_score
        bits.append(f"3rd-party scanner: {_third_party_reason(scanners)}")
    else:
        bits.append("3rd-party scanner: not found")

    score = min(score, MAX_RESULT_SCORE)
    return create_result_with_score(name, f"GitLab secret scanning posture: {'; '.join(bits)}", score)
