"""
Binary Artifact Probes
======================
Flag binaries checked into the source tree.

Binaries whose provenance was verified upstream (the Gradle wrapper jar
matching a published checksum) are typed ``binaryVerified`` and are not
reported by the unverified probe.

Author: Scorecard Team
"""

from typing import List, Tuple

from scorecard.checker.raw_results import RawResults
from scorecard.finding.finding import FileType, Finding, Location
from scorecard.finding.outcome import Outcome
from scorecard.probes.utils import new_finding, require

HAS_BINARY_ARTIFACTS = "hasBinaryArtifacts"
HAS_UNVERIFIED_BINARY_ARTIFACTS = "hasUnverifiedBinaryArtifacts"


def _binary_location(path: str, offset: int) -> Location:
    return Location(type=FileType.BINARY, path=path, line_start=offset)


def has_binary_artifacts(raw: RawResults) -> Tuple[List[Finding], str]:
    """One True finding per binary file in the repository."""
    require(raw, "raw results")
    data = require(raw.binary_artifacts, "binary artifact results")

    findings = [
        new_finding(HAS_BINARY_ARTIFACTS, "binary artifact detected", Outcome.TRUE,
                    _binary_location(f.path, f.offset))
        for f in data.files
    ]
    if not findings:
        findings.append(new_finding(HAS_BINARY_ARTIFACTS,
                                    "Repository does not have binary artifacts.", Outcome.FALSE))
    return findings, HAS_BINARY_ARTIFACTS


def has_unverified_binary_artifacts(raw: RawResults) -> Tuple[List[Finding], str]:
    """One True finding per binary that is not a verified wrapper."""
    require(raw, "raw results")
    data = require(raw.binary_artifacts, "binary artifact results")

    findings = []
    for f in data.files:
        if f.type == FileType.BINARY_VERIFIED:
            continue
        findings.append(new_finding(HAS_UNVERIFIED_BINARY_ARTIFACTS, "binary artifact detected",
                                    Outcome.TRUE, _binary_location(f.path, f.offset)))

    if not findings:
        findings.append(new_finding(HAS_UNVERIFIED_BINARY_ARTIFACTS,
                                    "Repository does not have any unverified binary artifacts.",
                                    Outcome.FALSE))
    return findings, HAS_UNVERIFIED_BINARY_ARTIFACTS
