"""
Dangerous Workflow Probes
=========================
Report GitHub workflow patterns that let untrusted input run with
privileged tokens.

Author: Scorecard Team
"""

from typing import List, Tuple

from scorecard.checker.raw_results import DangerousWorkflowType, RawResults
from scorecard.finding.finding import FileType, Finding, Location
from scorecard.finding.outcome import Outcome
from scorecard.probes.utils import new_finding, require

HAS_DANGEROUS_WORKFLOW_SCRIPT_INJECTION = "hasDangerousWorkflowScriptInjection"
HAS_DANGEROUS_WORKFLOW_UNTRUSTED_CHECKOUT = "hasDangerousWorkflowUntrustedCheckout"


def _dangerous(raw: RawResults, probe_id: str, kind: DangerousWorkflowType,
               found: str, clean: str) -> Tuple[List[Finding], str]:
    require(raw, "raw results")
    data = require(raw.dangerous_workflow, "dangerous workflow results")

    if data.num_workflows == 0:
        return [new_finding(probe_id, "Project does not have any workflows.", Outcome.NOT_APPLICABLE)], probe_id

    findings = []
    for workflow in data.workflows:
        if workflow.type != kind:
            continue
        location = Location(
            type=FileType.GITHUB_WORKFLOW,
            path=workflow.file.path,
            line_start=workflow.file.offset,
            snippet=workflow.file.snippet or None,
        )
        findings.append(new_finding(probe_id, found, Outcome.TRUE, location))

    if not findings:
        findings.append(new_finding(probe_id, clean, Outcome.FALSE))
    return findings, probe_id


def has_dangerous_workflow_script_injection(raw: RawResults) -> Tuple[List[Finding], str]:
    return _dangerous(raw, HAS_DANGEROUS_WORKFLOW_SCRIPT_INJECTION, DangerousWorkflowType.SCRIPT_INJECTION,
                      "script injection with untrusted input",
                      "Project does not have dangerous workflow(s) with possibility of script injection.")


def has_dangerous_workflow_untrusted_checkout(raw: RawResults) -> Tuple[List[Finding], str]:
    return _dangerous(raw, HAS_DANGEROUS_WORKFLOW_UNTRUSTED_CHECKOUT, DangerousWorkflowType.UNTRUSTED_CHECKOUT,
                      "untrusted code checkout in a privileged workflow",
                      "Project does not have workflow(s) with untrusted checkout.")
