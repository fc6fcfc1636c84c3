"""
Vulnerability Probes
====================
Known OSV vulnerabilities at HEAD and in the direct dependencies of
recent releases.

Author: Scorecard Team
"""

from typing import List, Tuple

from scorecard.checker.raw_results import RawResults
from scorecard.finding.finding import Finding
from scorecard.finding.outcome import Outcome
from scorecard.probes.utils import new_finding, require

HAS_OSV_VULNERABILITIES = "hasOSVVulnerabilities"
RELEASES_DIRECT_DEPS_ARE_VULN_FREE = "releasesDirectDepsAreVulnFree"

RELEASE_TAG_KEY = "releaseTag"
VULNERABLE_DEPS_KEY = "vulnerableDeps"


def has_osv_vulnerabilities(raw: RawResults) -> Tuple[List[Finding], str]:
    require(raw, "raw results")
    data = require(raw.vulnerabilities, "vulnerabilities results")

    if not data.vulnerabilities:
        return [new_finding(HAS_OSV_VULNERABILITIES, "Project does not have known vulnerabilities",
                            Outcome.FALSE)], HAS_OSV_VULNERABILITIES

    findings = []
    for vuln in data.vulnerabilities:
        # Aliases make the finding searchable by CVE as well as OSV id
        label = vuln.id if not vuln.aliases else f"{vuln.id} / {' / '.join(vuln.aliases)}"
        findings.append(new_finding(HAS_OSV_VULNERABILITIES,
                                    f"Project is vulnerable to: {label}", Outcome.TRUE))
    return findings, HAS_OSV_VULNERABILITIES


def releases_direct_deps_are_vuln_free(raw: RawResults) -> Tuple[List[Finding], str]:
    require(raw, "raw results")
    data = require(raw.release_direct_deps_vulns, "release dependency vulnerability results")
    probe_id = RELEASES_DIRECT_DEPS_ARE_VULN_FREE

    if not data.releases:
        return [new_finding(probe_id, "no releases found", Outcome.NOT_APPLICABLE)], probe_id

    findings = []
    for release in data.releases:
        vulnerable = sorted({dep.name for dep in release.findings if dep.osv_ids})
        if vulnerable:
            f = new_finding(probe_id, f"release {release.tag} has {len(vulnerable)} vulnerable direct dependencies",
                            Outcome.FALSE)
        else:
            f = new_finding(probe_id, f"release {release.tag} has no known vulnerable direct dependencies",
                            Outcome.TRUE)
        findings.append(f.with_values({RELEASE_TAG_KEY: release.tag, VULNERABLE_DEPS_KEY: len(vulnerable)}))
    return findings, probe_id
