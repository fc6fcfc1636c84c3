"""
Dependency Pinning Probe
========================
One finding per dependency declared in workflows, Dockerfiles and shell
scripts, reporting whether it is pinned by hash.

Author: Scorecard Team
"""

from typing import List, Tuple

from scorecard.checker.raw_results import (
    Dependency,
    DependencyUseType,
    RawResults,
    is_github_owned_action,
)
from scorecard.errors import ProbeExecutionError
from scorecard.finding.finding import Finding
from scorecard.finding.outcome import Outcome
from scorecard.probes.utils import file_location, new_finding, require

PINS_DEPENDENCIES = "pinsDependencies"
DEP_TYPE_KEY = "dependencyType"


def unpinned_message(dependency: Dependency) -> str:
    if dependency.type == DependencyUseType.GITHUB_ACTION:
        owner = "GitHub-owned" if is_github_owned_action(_snippet(dependency)) else "third-party"
        return f"{owner} {DependencyUseType.GITHUB_ACTION.value} not pinned by hash"
    return f"{dependency.type.value} not pinned by hash"


def _snippet(dependency: Dependency) -> str:
    if dependency.location is None:
        return ""
    return dependency.location.snippet or ""


def pins_dependencies(raw: RawResults) -> Tuple[List[Finding], str]:
    require(raw, "raw results")
    data = require(raw.pinning_dependencies, "pinning dependencies results")

    findings = []
    for error in data.processing_errors:
        findings.append(new_finding(PINS_DEPENDENCIES, f"Possibly incomplete results: {error.error}",
                                    Outcome.ERROR, file_location(error.location)))

    for dependency in data.dependencies:
        if dependency.location is None:
            if dependency.msg is None:
                raise ProbeExecutionError("empty File field")
            findings.append(new_finding(PINS_DEPENDENCIES, dependency.msg, Outcome.NOT_APPLICABLE))
            continue

        location = file_location(dependency.location)
        if dependency.msg is not None:
            findings.append(new_finding(PINS_DEPENDENCIES, dependency.msg, Outcome.NOT_APPLICABLE, location))
            continue

        if dependency.pinned is None:
            findings.append(new_finding(PINS_DEPENDENCIES, f"{dependency.type.value} has empty Pinned field",
                                        Outcome.NOT_APPLICABLE, location))
            continue

        if dependency.pinned:
            f = new_finding(PINS_DEPENDENCIES, "", Outcome.TRUE, location)
        else:
            f = new_finding(PINS_DEPENDENCIES, unpinned_message(dependency), Outcome.FALSE, location)
        findings.append(f.with_value(DEP_TYPE_KEY, dependency.type.value))

    if not findings:
        return [new_finding(PINS_DEPENDENCIES, "no dependencies found", Outcome.NOT_AVAILABLE)], PINS_DEPENDENCIES
    return findings, PINS_DEPENDENCIES
