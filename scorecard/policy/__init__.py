"""
Attestation Policy
==================
Policy gate and the check-then-sign pipeline built on it.

Author: Scorecard Team
"""

from .attestation import (
    AttestationPolicy,
    PolicyDecision,
    PolicyResult,
    load_policy,
    parse_policy,
)
from .pipeline import CheckAndSignPipeline, CheckStep, PipelineOutcome, StepResult

__all__ = [
    'AttestationPolicy',
    'PolicyDecision',
    'PolicyResult',
    'load_policy',
    'parse_policy',
    'CheckAndSignPipeline',
    'CheckStep',
    'PipelineOutcome',
    'StepResult',
]
