"""
Packaging Probes
================
Publishing workflows, and publication of the root package.json on the
npm registry. ``packagedWithNpm`` is an independent probe: no check
consumes it.

Author: Scorecard Team
"""

from typing import List, Tuple
import json

from scorecard.checker.raw_results import RawResults
from scorecard.finding.finding import FileType, Finding, Location
from scorecard.finding.outcome import Outcome
from scorecard.probes.utils import file_location, new_finding, require

PACKAGED_WITH_AUTOMATED_WORKFLOW = "packagedWithAutomatedWorkflow"


def packaged_with_automated_workflow(raw: RawResults) -> Tuple[List[Finding], str]:
    """True per package published by a workflow that has run successfully."""
    require(raw, "raw results")
    packages = require(raw.packaging, "packaging results").packages

    findings = []
    for package in packages:
        if package.msg is not None:
            findings.append(new_finding(PACKAGED_WITH_AUTOMATED_WORKFLOW, package.msg, Outcome.NOT_AVAILABLE))
            continue
        location = file_location(package.file, with_lines=False) if package.file else None
        if package.runs:
            findings.append(new_finding(PACKAGED_WITH_AUTOMATED_WORKFLOW,
                                        "Project packages its releases by way of GitHub Actions.",
                                        Outcome.TRUE, location))
        else:
            findings.append(new_finding(PACKAGED_WITH_AUTOMATED_WORKFLOW,
                                        "packaging workflow detected without successful runs",
                                        Outcome.FALSE, location))

    if not findings:
        findings.append(new_finding(PACKAGED_WITH_AUTOMATED_WORKFLOW, "no GitHub/GitLab publishing workflow detected",
                                    Outcome.NOT_AVAILABLE))
    return findings, PACKAGED_WITH_AUTOMATED_WORKFLOW


# ============================================================================
# NPM
# ============================================================================

PACKAGED_WITH_NPM = "packagedWithNpm"

PACKAGE_JSON = "package.json"


def packaged_with_npm(raw: RawResults) -> Tuple[List[Finding], str]:
    """True when the package named by the root package.json is published on npm."""
    probe_id = PACKAGED_WITH_NPM
    require(raw, "raw results")
    npm = require(raw.npm_package, "npm package results")

    if npm.package_json is None:
        return [new_finding(probe_id, "No package.json file found. Project does not appear to be an npm package.",
                            Outcome.FALSE)], probe_id

    location = Location(type=FileType.SOURCE, path=PACKAGE_JSON)
    try:
        manifest = json.loads(npm.package_json)
    except ValueError:
        manifest = None
    if not isinstance(manifest, dict):
        return [new_finding(probe_id, "Found package.json but failed to parse it. Invalid JSON format.",
                            Outcome.FALSE, location)], probe_id

    name = manifest.get("name")
    if not name or not isinstance(name, str):
        return [new_finding(probe_id, "Found package.json but no package name specified.",
                            Outcome.FALSE, location)], probe_id

    lookup = npm.registry
    if lookup is None or lookup.error:
        error = lookup.error if lookup is not None else "registry was not queried"
        message = f"Found package.json with name '{name}' but failed to check npm registry: {error}"
        return [new_finding(probe_id, message, Outcome.FALSE, location)], probe_id

    if not lookup.exists:
        message = f"Package '{name}' not found on npm registry. Project is not published to npm."
        return [new_finding(probe_id, message, Outcome.FALSE, location)], probe_id

    message = f"Package '{name}' is published on npm registry."
    if lookup.repository_url:
        message += f" Repository URL: {lookup.repository_url}"
    return [new_finding(probe_id, message, Outcome.TRUE, location)], probe_id
