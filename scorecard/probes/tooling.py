"""
Tooling Probes
==============
Detect dependency update bots, fuzzers and SAST tools configured for
the repository.

Author: Scorecard Team
"""

from typing import List, Sequence, Tuple

from scorecard.checker.raw_results import RawResults, Tool
from scorecard.finding.finding import Finding
from scorecard.finding.outcome import Outcome
from scorecard.probes.utils import file_location, new_finding, require

DEPENDENCY_UPDATE_TOOL_CONFIGURED = "dependencyUpdateToolConfigured"
FUZZED = "fuzzed"
SAST_TOOL_CONFIGURED = "sastToolConfigured"
SAST_TOOL_RUNS_ON_ALL_COMMITS = "sastToolRunsOnAllCommits"

TOOL_NAME_KEY = "toolName"
FUZZER_KEY = "tool"
SAST_TOOL_KEY = "tool"
ANALYZED_PRS_KEY = "analyzedPullRequests"
TOTAL_PRS_KEY = "totalPullRequests"


def _tool_findings(probe_id: str, tools: Sequence[Tool], key: str,
                   found: str, missing: str) -> List[Finding]:
    findings = []
    for tool in tools:
        location = file_location(tool.files[0], with_lines=False) if tool.files else None
        f = new_finding(probe_id, found.format(tool.name), Outcome.TRUE, location)
        findings.append(f.with_value(key, tool.name))
    if not findings:
        findings.append(new_finding(probe_id, missing, Outcome.FALSE))
    return findings


def dependency_update_tool_configured(raw: RawResults) -> Tuple[List[Finding], str]:
    require(raw, "raw results")
    data = require(raw.dependency_update_tool, "dependency update tool results")
    findings = _tool_findings(DEPENDENCY_UPDATE_TOOL_CONFIGURED, data.tools, TOOL_NAME_KEY,
                              "detected update tool: {}", "no dependency update tool configurations found")
    return findings, DEPENDENCY_UPDATE_TOOL_CONFIGURED


def fuzzed(raw: RawResults) -> Tuple[List[Finding], str]:
    require(raw, "raw results")
    data = require(raw.fuzzing, "fuzzing results")
    findings = _tool_findings(FUZZED, data.fuzzers, FUZZER_KEY,
                              "{} integration found", "no fuzzer integrations found")
    return findings, FUZZED


def sast_tool_configured(raw: RawResults) -> Tuple[List[Finding], str]:
    require(raw, "raw results")
    data = require(raw.sast, "SAST results")

    findings = []
    for workflow in data.workflows:
        location = file_location(workflow.file, with_lines=False) if workflow.file else None
        f = new_finding(SAST_TOOL_CONFIGURED, f"SAST tool detected: {workflow.tool}", Outcome.TRUE, location)
        findings.append(f.with_value(SAST_TOOL_KEY, workflow.tool))
    if not findings:
        findings.append(new_finding(SAST_TOOL_CONFIGURED, "no SAST configuration files detected", Outcome.FALSE))
    return findings, SAST_TOOL_CONFIGURED


def sast_tool_runs_on_all_commits(raw: RawResults) -> Tuple[List[Finding], str]:
    """Single finding: True when every merged PR was analyzed by a SAST tool."""
    require(raw, "raw results")
    commits = require(raw.sast, "SAST results").commits

    total = len(commits)
    if total == 0:
        return [new_finding(SAST_TOOL_RUNS_ON_ALL_COMMITS, "no pull requests merged into dev branch",
                            Outcome.NOT_APPLICABLE)], SAST_TOOL_RUNS_ON_ALL_COMMITS

    analyzed = sum(1 for commit in commits if commit.compliant)
    if analyzed == total:
        outcome = Outcome.TRUE
        message = "all commits are checked with a SAST tool"
    else:
        outcome = Outcome.FALSE
        message = f"{analyzed} commits out of {total} are checked with a SAST tool"

    f = new_finding(SAST_TOOL_RUNS_ON_ALL_COMMITS, message, outcome)
    f = f.with_values({ANALYZED_PRS_KEY: analyzed, TOTAL_PRS_KEY: total})
    return [f], SAST_TOOL_RUNS_ON_ALL_COMMITS
