"""
Scorecard Errors
================
Exception taxonomy shared by the probe registry, the probes, the
evaluation engine and the attestation policy evaluator.

Configuration and registration errors are fatal at startup. Probe
execution errors are reported per check and never abort a whole run.

Author: Scorecard Team
"""


class ScorecardError(Exception):
    """Base exception for all scorecard failures."""
    pass


class ConfigurationError(ScorecardError, ValueError):
    """Invalid scorecard configuration."""
    pass


class ProbeDefinitionError(ScorecardError):
    """Probe metadata is missing, malformed or uses an unknown enum value."""
    pass


class RegistrationError(ScorecardError):
    """A probe could not be registered."""
    pass


class ProbeNotFoundError(ScorecardError):
    """Lookup of an unregistered probe."""
    pass


class ProbeExecutionError(ScorecardError):
    """Raw results required by a probe were never collected."""
    pass


class InvalidScoreError(ScorecardError):
    """Score arithmetic received values outside the valid range."""
    pass


class PolicyLoadError(ScorecardError):
    """Attestation policy file could not be read or parsed."""
    pass
