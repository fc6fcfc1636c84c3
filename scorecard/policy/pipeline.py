"""
Check and Sign Pipeline
=======================
Two-step release gate: evaluate the attestation policy, then sign only
when it passed. The signer is injected and treated as a black box.

Author: Scorecard Team
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable, Optional, Tuple
import logging

from scorecard.checker.raw_results import RawResults
from scorecard.config import GPGKeys, NoGPGKeys, extract_key_fingerprints
from scorecard.policy.attestation import AttestationPolicy, PolicyDecision

logger = logging.getLogger(__name__)

Signer = Callable[[str, Tuple[str, ...]], Any]


class StepResult(Enum):
    PASSED = "Passed"
    FAILED = "Failed"


@dataclass(frozen=True)
class CheckStep:
    result: StepResult
    decision: PolicyDecision


@dataclass(frozen=True)
class PipelineOutcome:
    """What happened to one release tag."""
    tag: str
    check: CheckStep
    signed: bool = False
    key_urls: Tuple[str, ...] = ()
    key_fingerprints: Tuple[str, ...] = ()
    signature: Any = field(default=None, compare=False)


def release_key_fingerprints(raw: RawResults, tag: str) -> Tuple[str, ...]:
    """Fingerprints announced in the notes of the release named ``tag``."""
    if raw.signed_releases is None:
        return ()
    for release in raw.signed_releases.releases:
        if release.tag_name == tag:
            return tuple(extract_key_fingerprints(release.body))
    return ()


class CheckAndSignPipeline:
    """
    Gate a signing step on the attestation policy.

    Example:
        >>> pipeline = CheckAndSignPipeline(load_policy("policy.yml"), signer)
        >>> outcome = pipeline.run(raw, "v1.2.0")
        >>> outcome.signed
    """

    def __init__(self, policy: AttestationPolicy, signer: Signer, gpg_keys: Optional[GPGKeys] = None):
        self.policy = policy
        self.signer = signer
        self.gpg_keys = gpg_keys if gpg_keys is not None else NoGPGKeys()

    def check(self, raw: RawResults) -> CheckStep:
        decision = self.policy.evaluate(raw)
        result = StepResult.PASSED if decision.passed else StepResult.FAILED
        return CheckStep(result=result, decision=decision)

    def run(self, raw: RawResults, tag: str) -> PipelineOutcome:
        """
        Check, then sign ``tag`` when the check passed.

        Signer errors propagate to the caller.
        """
        step = self.check(raw)
        if step.result != StepResult.PASSED:
            logger.warning(f"Not signing {tag}: {step.decision.reason}")
            return PipelineOutcome(tag=tag, check=step)

        key_urls = self.gpg_keys.key_urls_for(tag)
        fingerprints = release_key_fingerprints(raw, tag)
        logger.info(f"Signing {tag} with {len(key_urls)} configured key URLs, "
                    f"{len(fingerprints)} fingerprints announced in release notes")
        signature = self.signer(tag, key_urls)
        return PipelineOutcome(tag=tag, check=step, signed=True, key_urls=key_urls,
                               key_fingerprints=fingerprints, signature=signature)
