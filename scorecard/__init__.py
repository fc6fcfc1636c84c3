"""
Scorecard
=========

Security health scoring for source repositories.

Raw data collected about a repository is evaluated by small, independent
probes. Each check combines the findings of its probes into a 0-10 score
with a human-readable reason, and an attestation policy turns the same
raw data into a Pass/Fail gate for release signing.

Author: Scorecard Team
"""

__version__ = "1.0.0"
__author__ = "Scorecard Team"

from scorecard.checker.raw_results import RawResults
from scorecard.checker.runner import CheckRunner, Report
from scorecard.config import ScorecardConfig
from scorecard.policy.attestation import AttestationPolicy, PolicyResult, load_policy
from scorecard.probes import build_registry

__all__ = [
    'RawResults',
    'CheckRunner',
    'Report',
    'ScorecardConfig',
    'AttestationPolicy',
    'PolicyResult',
    'load_policy',
    'build_registry',
]
