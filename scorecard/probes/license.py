"""
License Probes
==============
License file presence, placement and approval.

An empty license file list means the repository has no license and
yields NotApplicable (approval) or False (presence); a list that was
never collected is an error.

Author: Scorecard Team
"""

from typing import List, Tuple

from scorecard.checker.raw_results import LicenseAttribution, LicenseFile, RawResults
from scorecard.finding.finding import Finding
from scorecard.finding.outcome import Outcome
from scorecard.probes.utils import file_location, new_finding, require

HAS_LICENSE_FILE = "hasLicenseFile"
HAS_LICENSE_FILE_AT_TOP_DIR = "hasLicenseFileAtTopDir"
HAS_FSF_OR_OSI_APPROVED_LICENSE = "hasFSFOrOSIApprovedLicense"


def _license_files(raw: RawResults) -> Tuple[LicenseFile, ...]:
    require(raw, "raw results")
    data = require(raw.license, "license results")
    return require(data.license_files, "license files")


def _is_top_level(license_file: LicenseFile) -> bool:
    if license_file.attribution == LicenseAttribution.API:
        return True
    return "/" not in license_file.file.path.strip("/")


def has_license_file(raw: RawResults) -> Tuple[List[Finding], str]:
    files = _license_files(raw)
    if not files:
        return [new_finding(HAS_LICENSE_FILE, "project does not have a license file",
                            Outcome.FALSE)], HAS_LICENSE_FILE

    findings = [
        new_finding(HAS_LICENSE_FILE, "project has a license file", Outcome.TRUE,
                    file_location(lf.file, with_lines=False))
        for lf in files
    ]
    return findings, HAS_LICENSE_FILE


def has_license_file_at_top_dir(raw: RawResults) -> Tuple[List[Finding], str]:
    files = _license_files(raw)
    if not files:
        return [new_finding(HAS_LICENSE_FILE_AT_TOP_DIR, "no license file found",
                            Outcome.NOT_APPLICABLE)], HAS_LICENSE_FILE_AT_TOP_DIR

    findings = [
        new_finding(HAS_LICENSE_FILE_AT_TOP_DIR, "project has a license file at top-level directory",
                    Outcome.TRUE, file_location(lf.file, with_lines=False))
        for lf in files if _is_top_level(lf)
    ]
    if not findings:
        findings.append(new_finding(HAS_LICENSE_FILE_AT_TOP_DIR,
                                    "project does not have a license file at top-level directory",
                                    Outcome.FALSE))
    return findings, HAS_LICENSE_FILE_AT_TOP_DIR


def has_fsf_or_osi_approved_license(raw: RawResults) -> Tuple[List[Finding], str]:
    files = _license_files(raw)
    if not files:
        return [new_finding(HAS_FSF_OR_OSI_APPROVED_LICENSE, "project does not have a license file",
                            Outcome.NOT_APPLICABLE)], HAS_FSF_OR_OSI_APPROVED_LICENSE

    for lf in files:
        if lf.approved:
            return [new_finding(HAS_FSF_OR_OSI_APPROVED_LICENSE,
                                "FSF or OSI recognized license: " + (lf.name or lf.spdx_id),
                                Outcome.TRUE, file_location(lf.file, with_lines=False))], \
                HAS_FSF_OR_OSI_APPROVED_LICENSE

    return [new_finding(HAS_FSF_OR_OSI_APPROVED_LICENSE, "project license file does not contain an FSF or OSI license.",
                        Outcome.FALSE)], HAS_FSF_OR_OSI_APPROVED_LICENSE
