"""
Signed Releases Probes
======================
Signature and provenance assets on the most recent releases, and the
verification status of signatures published with released packages.

Author: Scorecard Team
"""

from typing import List, Optional, Tuple

from scorecard.checker.raw_results import Release, ReleaseAsset, RawResults
from scorecard.finding.finding import FileType, Finding, Location
from scorecard.finding.outcome import Outcome
from scorecard.probes.utils import new_finding, require

RELEASES_ARE_SIGNED = "releasesAreSigned"
RELEASES_HAVE_PROVENANCE = "releasesHaveProvenance"

RELEASE_NAME_KEY = "releaseName"

RELEASE_LOOKBACK = 5

SIGNATURE_EXTENSIONS = (".asc", ".minisig", ".sig", ".sign", ".sigstore", ".sigstore.json")
PROVENANCE_EXTENSIONS = (".intoto.jsonl",)


def _recent_releases(raw: RawResults, lookback: int) -> Tuple[Release, ...]:
    require(raw, "raw results")
    releases = require(raw.signed_releases, "signed releases results").releases
    return releases[:lookback]


def _first_asset(release: Release, extensions: Tuple[str, ...]) -> Optional[ReleaseAsset]:
    for asset in release.assets:
        if asset.name.endswith(extensions):
            return asset
    return None


def _asset_location(asset: ReleaseAsset) -> Location:
    return Location(type=FileType.URL, path=asset.url or asset.name)


def _release_assets(raw: RawResults, lookback: int, probe_id: str, extensions: Tuple[str, ...],
                    found: str, missing: str) -> Tuple[List[Finding], str]:
    releases = _recent_releases(raw, lookback)
    if not releases:
        return [new_finding(probe_id, "no GitHub/GitLab releases found", Outcome.NOT_APPLICABLE)], probe_id

    findings = []
    for release in releases:
        asset = _first_asset(release, extensions)
        if asset is not None:
            f = new_finding(probe_id, found.format(name=asset.name, tag=release.tag_name),
                            Outcome.TRUE, _asset_location(asset))
        else:
            f = new_finding(probe_id, missing.format(tag=release.tag_name), Outcome.FALSE)
        findings.append(f.with_value(RELEASE_NAME_KEY, release.tag_name))
    return findings, probe_id


def releases_are_signed(raw: RawResults, lookback: int = RELEASE_LOOKBACK) -> Tuple[List[Finding], str]:
    return _release_assets(
        raw, lookback, RELEASES_ARE_SIGNED, SIGNATURE_EXTENSIONS,
        "signed release artifact: {name}",
        "release artifact {tag} not signed",
    )


def releases_have_provenance(raw: RawResults, lookback: int = RELEASE_LOOKBACK) -> Tuple[List[Finding], str]:
    return _release_assets(
        raw, lookback, RELEASES_HAVE_PROVENANCE, PROVENANCE_EXTENSIONS,
        "provenance for release artifact: {name}",
        "release artifact {tag} does not have provenance",
    )


# ============================================================================
# VERIFIED PACKAGE SIGNATURES
# ============================================================================

RELEASES_HAVE_VERIFIED_SIGNATURES = "releasesHaveVerifiedSignatures"

PACKAGE_SYSTEM_KEY = "packageSystem"
PACKAGE_NAME_KEY = "packageName"
PACKAGE_VERSION_KEY = "packageVersion"
SIGNATURE_TYPE_KEY = "signatureType"
ARTIFACT_URL_KEY = "artifactURL"
KEY_ID_KEY = "keyID"
ERROR_MSG_KEY = "errorMsg"


def releases_have_verified_signatures(raw: RawResults) -> Tuple[List[Finding], str]:
    """One finding per signature published with a released package, True when it verified."""
    probe_id = RELEASES_HAVE_VERIFIED_SIGNATURES
    require(raw, "raw results")
    packages = require(raw.signed_releases, "signed releases results").packages
    if not packages:
        return [new_finding(probe_id, "no packages found to verify signatures", Outcome.NOT_APPLICABLE)], probe_id

    findings = []
    for pkg in packages:
        values = {
            PACKAGE_SYSTEM_KEY: pkg.system,
            PACKAGE_NAME_KEY: pkg.name,
            PACKAGE_VERSION_KEY: pkg.version,
        }
        for sig in pkg.signatures:
            if not sig.is_verified:
                message = f"package {pkg.system}:{pkg.name} signature verification failed"
                if sig.error_msg:
                    message += f": {sig.error_msg}"
                f = new_finding(probe_id, message, Outcome.FALSE)
                findings.append(f.with_values({**values, SIGNATURE_TYPE_KEY: sig.type, ERROR_MSG_KEY: sig.error_msg}))
                continue

            f = new_finding(
                probe_id,
                f"package {pkg.system}:{pkg.name} version {pkg.version} has verified {sig.type} "
                f"signature for {sig.artifact_url}",
                Outcome.TRUE,
            ).with_values({**values, SIGNATURE_TYPE_KEY: sig.type, ARTIFACT_URL_KEY: sig.artifact_url})
            if sig.key_id:
                f = f.with_value(KEY_ID_KEY, sig.key_id)
            findings.append(f)

    if not findings:
        return [new_finding(probe_id, "no signatures found to verify", Outcome.NOT_APPLICABLE)], probe_id
    return findings, probe_id
