"""
Tool Detection Evaluations
==========================
Dependency-Update-Tool and Fuzzing: full marks as soon as any tool is
found.

Author: Scorecard Team
"""

from typing import List

from scorecard.checker.check_result import CheckResult, create_max_score_result, create_min_score_result
from scorecard.evaluation.common import has_expected_probes, invalid_probe_results, log_findings
from scorecard.finding.finding import Finding
from scorecard.finding.outcome import Outcome
from scorecard.probes.tooling import DEPENDENCY_UPDATE_TOOL_CONFIGURED, FUZZED


def _any_tool(name: str, findings: List[Finding], probe_id: str, found: str, missing: str) -> CheckResult:
    if not has_expected_probes(findings, [probe_id]):
        return invalid_probe_results(name)

    log_findings(name, findings)
    if any(f.outcome == Outcome.TRUE for f in findings):
        return create_max_score_result(name, found)
    return create_min_score_result(name, missing)


def dependency_update_tool(name: str, findings: List[Finding]) -> CheckResult:
    return _any_tool(name, findings, DEPENDENCY_UPDATE_TOOL_CONFIGURED,
                     "update tool detected", "no update tool detected")


def fuzzing(name: str, findings: List[Finding]) -> CheckResult:
    return _any_tool(name, findings, FUZZED, "project is fuzzed", "project is not fuzzed")
