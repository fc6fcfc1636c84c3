"""
Findings
========
The atomic, immutable unit of evidence produced by a probe.

A Finding names the probe that produced it, its outcome, a human readable
message and optionally a location and machine readable values. The
``with_*`` helpers return new Findings; nothing mutates a Finding once it
has been handed out.

Author: Scorecard Team
"""

from dataclasses import dataclass, field, replace
from enum import Enum
from pathlib import Path
from types import MappingProxyType
from typing import Any, Dict, Iterable, Mapping, Optional, Union

from scorecard.finding.outcome import Outcome
from scorecard.finding.probe import Remediation, RemediationEffort, load_probe_definition


class FileType(Enum):
    """Kind of location a finding points at."""
    NONE = "none"
    SOURCE = "source"
    BINARY = "binary"
    TEXT = "text"
    URL = "url"
    BINARY_VERIFIED = "binaryVerified"
    GITHUB_WORKFLOW = "githubWorkflow"


@dataclass(frozen=True)
class Location:
    """Where in the repository a finding was observed."""
    type: FileType = FileType.NONE
    path: str = ""
    line_start: Optional[int] = None
    line_end: Optional[int] = None
    snippet: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        data = {'type': self.type.value, 'path': self.path}
        if self.line_start is not None:
            data['lineStart'] = self.line_start
        if self.line_end is not None:
            data['lineEnd'] = self.line_end
        if self.snippet is not None:
            data['snippet'] = self.snippet
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'Location':
        return cls(
            type=FileType(data.get('type', 'none')),
            path=data.get('path', ''),
            line_start=data.get('lineStart'),
            line_end=data.get('lineEnd'),
            snippet=data.get('snippet'),
        )


def _freeze(values: Optional[Mapping[str, Any]]) -> Mapping[str, Any]:
    return MappingProxyType(dict(values or {}))


@dataclass(frozen=True)
class Finding:
    """One outcome produced by a probe."""
    probe: str
    outcome: Outcome
    message: str = ""
    location: Optional[Location] = None
    values: Mapping[str, Any] = field(default_factory=dict, hash=False)
    remediation: Optional[Remediation] = None

    def __post_init__(self):
        object.__setattr__(self, 'values', _freeze(self.values))

    @classmethod
    def new(cls, definitions: Union[str, Path], probe_id: str, message: str,
            location: Optional[Location], outcome: Outcome) -> 'Finding':
        """
        Create a finding for a probe, validated against its metadata.

        Args:
            definitions: Directory holding the probe metadata files
            probe_id: ID the calling probe declares
            message: Human readable explanation
            location: Optional location of the evidence
            outcome: Outcome of the observation

        Returns:
            New Finding with remediation attached when the outcome calls for it

        Raises:
            ProbeDefinitionError: If the metadata is missing, invalid or declares a different ID
        """
        outcome = Outcome.parse(outcome)
        definition = load_probe_definition(definitions, probe_id)
        remediation = definition.remediation if outcome == definition.remediation.on_outcome else None
        return cls(
            probe=definition.id,
            outcome=outcome,
            message=message,
            location=location,
            remediation=remediation,
        )

    def with_message(self, message: str) -> 'Finding':
        return replace(self, message=message)

    def with_location(self, location: Optional[Location]) -> 'Finding':
        return replace(self, location=location)

    def with_values(self, values: Mapping[str, Any]) -> 'Finding':
        return replace(self, values=values)

    def with_value(self, key: str, value: Any) -> 'Finding':
        values = dict(self.values)
        values[key] = value
        return replace(self, values=values)

    def with_outcome(self, definitions: Union[str, Path], outcome: Outcome) -> 'Finding':
        """Return a copy with a new outcome; remediation follows the outcome."""
        outcome = Outcome.parse(outcome)
        definition = load_probe_definition(definitions, self.probe)
        remediation = definition.remediation if outcome == definition.remediation.on_outcome else None
        return replace(self, outcome=outcome, remediation=remediation)

    def to_dict(self) -> Dict[str, Any]:
        data = {
            'probe': self.probe,
            'outcome': self.outcome.value,
            'message': self.message,
        }
        if self.location is not None:
            data['location'] = self.location.to_dict()
        if self.values:
            data['values'] = dict(self.values)
        if self.remediation is not None:
            data['remediation'] = self.remediation.to_dict()
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'Finding':
        """Rebuild a finding from a persisted report, accepting legacy outcome names."""
        remediation = None
        if data.get('remediation'):
            rem = data['remediation']
            remediation = Remediation(
                on_outcome=Outcome.parse(rem['onOutcome']),
                effort=RemediationEffort(rem.get('effort', 'None')),
                text=rem.get('text', ''),
                markdown=rem.get('markdown', ''),
            )
        location = data.get('location')
        return cls(
            probe=data['probe'],
            outcome=Outcome.parse(data['outcome']),
            message=data.get('message', ''),
            location=Location.from_dict(location) if location else None,
            values=data.get('values') or {},
            remediation=remediation,
        )


def unique_probes_equal(findings: Iterable[Finding], probes: Iterable[str]) -> bool:
    """True when the probes seen in ``findings`` are exactly ``probes``."""
    return {f.probe for f in findings} == set(probes)
