"""
Security Policy Probes
======================
Presence and content of SECURITY.md style policy files.

Author: Scorecard Team
"""

from typing import List, Tuple

from scorecard.checker.raw_results import RawResults, SecurityPolicyFile, SecurityPolicyInformationType
from scorecard.finding.finding import Finding
from scorecard.finding.outcome import Outcome
from scorecard.probes.utils import file_location, new_finding, require

SECURITY_POLICY_PRESENT = "securityPolicyPresent"
SECURITY_POLICY_CONTAINS_LINKS = "securityPolicyContainsLinks"
SECURITY_POLICY_CONTAINS_VULNERABILITY_DISCLOSURE = "securityPolicyContainsVulnerabilityDisclosure"
SECURITY_POLICY_CONTAINS_TEXT = "securityPolicyContainsText"

URLS_KEY = "urls"
EMAILS_KEY = "emails"

# Disclosure process plus timeline
MIN_DISCLOSURE_MATCHES = 2
MIN_FREE_TEXT = 1


def _policy_files(raw: RawResults) -> Tuple[SecurityPolicyFile, ...]:
    require(raw, "raw results")
    return require(raw.security_policy, "security policy results").policy_files


def _count(policy: SecurityPolicyFile, kind: SecurityPolicyInformationType) -> int:
    return sum(1 for info in policy.information if info.type == kind)


def _linked_content_length(policy: SecurityPolicyFile) -> int:
    return sum(
        len(info.match) for info in policy.information
        if info.type in (SecurityPolicyInformationType.EMAIL, SecurityPolicyInformationType.LINK)
    )


def _no_policy(probe_id: str) -> List[Finding]:
    return [new_finding(probe_id, "no security policy file found", Outcome.FALSE)]


def security_policy_present(raw: RawResults) -> Tuple[List[Finding], str]:
    policies = _policy_files(raw)
    if not policies:
        return _no_policy(SECURITY_POLICY_PRESENT), SECURITY_POLICY_PRESENT

    findings = [
        new_finding(SECURITY_POLICY_PRESENT, "security policy file detected", Outcome.TRUE,
                    file_location(policy.file, with_lines=False))
        for policy in policies
    ]
    return findings, SECURITY_POLICY_PRESENT


def security_policy_contains_links(raw: RawResults) -> Tuple[List[Finding], str]:
    policies = _policy_files(raw)
    if not policies:
        return _no_policy(SECURITY_POLICY_CONTAINS_LINKS), SECURITY_POLICY_CONTAINS_LINKS

    findings = []
    for policy in policies:
        urls = _count(policy, SecurityPolicyInformationType.LINK)
        emails = _count(policy, SecurityPolicyInformationType.EMAIL)
        location = file_location(policy.file, with_lines=False)
        if urls + emails > 0:
            f = new_finding(SECURITY_POLICY_CONTAINS_LINKS, "Found linked content in security policy",
                            Outcome.TRUE, location)
        else:
            f = new_finding(SECURITY_POLICY_CONTAINS_LINKS, "no email or URL found in security policy",
                            Outcome.FALSE, location)
        findings.append(f.with_values({URLS_KEY: urls, EMAILS_KEY: emails}))
    return findings, SECURITY_POLICY_CONTAINS_LINKS


def security_policy_contains_vulnerability_disclosure(raw: RawResults) -> Tuple[List[Finding], str]:
    policies = _policy_files(raw)
    probe_id = SECURITY_POLICY_CONTAINS_VULNERABILITY_DISCLOSURE
    if not policies:
        return _no_policy(probe_id), probe_id

    findings = []
    for policy in policies:
        location = file_location(policy.file, with_lines=False)
        if _count(policy, SecurityPolicyInformationType.TEXT) >= MIN_DISCLOSURE_MATCHES:
            findings.append(new_finding(probe_id, "Found disclosure, vulnerability, and/or timelines in security policy",
                                        Outcome.TRUE, location))
        else:
            findings.append(new_finding(probe_id, "One or no descriptive hints of disclosure, vulnerability, "
                                        "and/or timelines in security policy", Outcome.FALSE, location))
    return findings, probe_id


def security_policy_contains_text(raw: RawResults) -> Tuple[List[Finding], str]:
    policies = _policy_files(raw)
    if not policies:
        return _no_policy(SECURITY_POLICY_CONTAINS_TEXT), SECURITY_POLICY_CONTAINS_TEXT

    findings = []
    for policy in policies:
        location = file_location(policy.file, with_lines=False)
        if policy.file.file_size - _linked_content_length(policy) > MIN_FREE_TEXT:
            findings.append(new_finding(SECURITY_POLICY_CONTAINS_TEXT,
                                        "Found text in security policy", Outcome.TRUE, location))
        else:
            findings.append(new_finding(SECURITY_POLICY_CONTAINS_TEXT,
                                        "Found no text in security policy", Outcome.FALSE, location))
    return findings, SECURITY_POLICY_CONTAINS_TEXT
