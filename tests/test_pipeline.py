"""
Tests for the check-then-sign pipeline.
"""

from dataclasses import replace

import pytest

from scorecard.checker.raw_results import BinaryArtifactData, File, Release, SignedReleasesData
from scorecard.config import GlobalGPGKeys, PerReleaseGPGKeys, ReleaseKeyRule
from scorecard.policy.attestation import AttestationPolicy
from scorecard.policy.pipeline import CheckAndSignPipeline, StepResult

POLICY = AttestationPolicy(prevent_binary_artifacts=True, ensure_no_vulnerabilities=True)


class RecordingSigner:

    def __init__(self):
        self.calls = []

    def __call__(self, tag, key_urls):
        self.calls.append((tag, key_urls))
        return f"signature-for-{tag}"


def test_signs_when_policy_passes(clean_raw):
    signer = RecordingSigner()
    pipeline = CheckAndSignPipeline(POLICY, signer, GlobalGPGKeys(("https://example.com/KEYS",)))

    outcome = pipeline.run(clean_raw, "v1.0.0")

    assert outcome.check.result == StepResult.PASSED
    assert outcome.signed
    assert outcome.signature == "signature-for-v1.0.0"
    assert signer.calls == [("v1.0.0", ("https://example.com/KEYS",))]


def test_does_not_sign_when_policy_fails(clean_raw):
    signer = RecordingSigner()
    raw = replace(clean_raw, binary_artifacts=BinaryArtifactData(files=(File(path="tool.exe"),)))

    outcome = CheckAndSignPipeline(POLICY, signer).run(raw, "v1.0.0")

    assert outcome.check.result == StepResult.FAILED
    assert not outcome.signed
    assert signer.calls == []


def test_per_release_keys(clean_raw):
    signer = RecordingSigner()
    keys = PerReleaseGPGKeys(
        rules=(ReleaseKeyRule(tag="v2.*", urls=("https://example.com/v2.asc",)),),
        fallback_urls=("https://example.com/KEYS",),
    )
    pipeline = CheckAndSignPipeline(POLICY, signer, keys)

    assert pipeline.run(clean_raw, "v2.1.0").key_urls == ("https://example.com/v2.asc",)
    assert pipeline.run(clean_raw, "v1.9.0").key_urls == ("https://example.com/KEYS",)


def test_signer_errors_propagate(clean_raw):
    def broken_signer(tag, key_urls):
        raise RuntimeError("gpg agent unavailable")

    with pytest.raises(RuntimeError):
        CheckAndSignPipeline(POLICY, broken_signer).run(clean_raw, "v1.0.0")


def test_check_only(clean_raw):
    step = CheckAndSignPipeline(POLICY, RecordingSigner()).check(clean_raw)
    assert step.result == StepResult.PASSED
    assert step.decision.passed


def test_outcome_carries_fingerprints_from_release_notes(clean_raw):
    fingerprint = "ABCDEF0123456789ABCDEF0123456789ABCDEF01"
    raw = replace(clean_raw, signed_releases=SignedReleasesData(releases=(
        Release(tag_name="v0.9.0", body="no keys here"),
        Release(tag_name="v1.0.0", body=f"Signed with GPG key {fingerprint.lower()}"),
    )))
    pipeline = CheckAndSignPipeline(POLICY, RecordingSigner())

    assert pipeline.run(raw, "v1.0.0").key_fingerprints == (fingerprint,)
    assert pipeline.run(raw, "v0.9.0").key_fingerprints == ()
    assert pipeline.run(clean_raw, "v1.0.0").key_fingerprints == ()


def test_unsigned_outcome_has_no_fingerprints(clean_raw):
    raw = replace(clean_raw, binary_artifacts=BinaryArtifactData(files=(File(path="tool.exe"),)),
                  signed_releases=SignedReleasesData(releases=(
                      Release(tag_name="v1.0.0", body="fingerprint ABCDEF0123456789ABCDEF0123456789ABCDEF01"),
                  )))
    assert CheckAndSignPipeline(POLICY, RecordingSigner()).run(raw, "v1.0.0").key_fingerprints == ()
