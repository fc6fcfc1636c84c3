"""
Finding Model
=============
Outcomes, findings and probe metadata.

Author: Scorecard Team
"""

from .outcome import Outcome, LEGACY_OUTCOMES
from .probe import (
    ClientKind,
    Ecosystem,
    Language,
    Lifecycle,
    ProbeDefinition,
    Remediation,
    RemediationEffort,
    list_definition_ids,
    load_probe_definition,
    parse_probe_definition,
)
from .finding import FileType, Finding, Location, unique_probes_equal

__all__ = [
    'Outcome',
    'LEGACY_OUTCOMES',
    'ClientKind',
    'Ecosystem',
    'Language',
    'Lifecycle',
    'ProbeDefinition',
    'Remediation',
    'RemediationEffort',
    'list_definition_ids',
    'load_probe_definition',
    'parse_probe_definition',
    'FileType',
    'Finding',
    'Location',
    'unique_probes_equal',
]
