"""
Probe Metadata
==============
Loads and validates the YAML document that describes each probe.

Every probe ships one ``<id>.yml`` file holding its prose description,
the ecosystems it supports and the remediation shown when the probe
reports its ``onOutcome`` value. Validation is total: any value outside
the closed enumerations below is rejected instead of skipped.

Author: Scorecard Team
"""

from dataclasses import dataclass, field
from enum import Enum
from functools import lru_cache
from pathlib import Path
from typing import Any, Dict, List, Tuple, Union
import logging

import yaml

from scorecard.errors import ProbeDefinitionError
from scorecard.finding.outcome import Outcome

logger = logging.getLogger(__name__)


class RemediationEffort(Enum):
    """Estimated effort to apply a remediation."""
    NONE = "None"
    LOW = "Low"
    MEDIUM = "Medium"
    HIGH = "High"


class Language(Enum):
    """Source languages a probe can target."""
    GO = "go"
    PYTHON = "python"
    JAVASCRIPT = "javascript"
    CPP = "c++"
    C = "c"
    TYPESCRIPT = "typescript"
    JAVA = "java"
    CSHARP = "c#"
    RUBY = "ruby"
    PHP = "php"
    STARLARK = "starlark"
    SCALA = "scala"
    KOTLIN = "kotlin"
    SWIFT = "swift"
    RUST = "rust"
    HASKELL = "haskell"
    ALL = "all"
    DOCKERFILE = "dockerfile"
    OBJECTIVEC = "objectivec"


class ClientKind(Enum):
    """Repository clients a probe can run against."""
    GITHUB = "github"
    GITLAB = "gitlab"
    LOCALDIR = "localdir"


class Lifecycle(Enum):
    EXPERIMENTAL = "experimental"
    STABLE = "stable"
    DEPRECATED = "deprecated"


@dataclass(frozen=True)
class Remediation:
    """Remediation guidance attached to findings with a given outcome."""
    on_outcome: Outcome
    effort: RemediationEffort
    text: str = ""
    markdown: str = ""

    def to_dict(self) -> Dict[str, Any]:
        return {
            'onOutcome': self.on_outcome.value,
            'effort': self.effort.value,
            'text': self.text,
            'markdown': self.markdown,
        }


@dataclass(frozen=True)
class Ecosystem:
    languages: Tuple[Language, ...] = ()
    clients: Tuple[ClientKind, ...] = ()


@dataclass(frozen=True)
class ProbeDefinition:
    """Validated contents of a probe's YAML metadata."""
    id: str
    short: str
    motivation: str
    implementation: str
    remediation: Remediation
    ecosystem: Ecosystem = field(default_factory=Ecosystem)
    lifecycle: Lifecycle = Lifecycle.STABLE
    outcomes: Tuple[str, ...] = ()

    def supports_client(self, client: Union[str, ClientKind]) -> bool:
        client = _parse_enum(ClientKind, client, "client")
        return client in self.ecosystem.clients

    def supports_language(self, language: Union[str, Language]) -> bool:
        language = _parse_enum(Language, language, "language")
        return Language.ALL in self.ecosystem.languages or language in self.ecosystem.languages


# ============================================================================
# PARSING
# ============================================================================

def _parse_enum(enum_cls, value, label: str):
    if isinstance(value, enum_cls):
        return value
    try:
        return enum_cls(value)
    except ValueError:
        raise ProbeDefinitionError(f"invalid {label}: {value!r}") from None


def _join_lines(value: Any, label: str) -> str:
    if value is None:
        return ""
    if isinstance(value, str):
        return value
    if not isinstance(value, list) or not all(isinstance(line, str) for line in value):
        raise ProbeDefinitionError(f"{label} must be a list of strings")
    return "\n".join(value)


def _parse_remediation(data: Any) -> Remediation:
    if not isinstance(data, dict):
        raise ProbeDefinitionError("remediation section is missing")

    if 'onOutcome' not in data:
        raise ProbeDefinitionError("remediation.onOutcome is missing")
    on_outcome = Outcome.parse(str(data['onOutcome']))

    effort = data.get('effort')
    if effort not in ('Low', 'Medium', 'High'):
        raise ProbeDefinitionError(f"invalid remediation effort: {effort!r}")

    return Remediation(
        on_outcome=on_outcome,
        effort=RemediationEffort(effort),
        text=_join_lines(data.get('text'), 'remediation.text'),
        markdown=_join_lines(data.get('markdown'), 'remediation.markdown'),
    )


def _parse_ecosystem(data: Any) -> Ecosystem:
    if data is None:
        return Ecosystem()
    if not isinstance(data, dict):
        raise ProbeDefinitionError("ecosystem must be a mapping")

    languages = tuple(_parse_enum(Language, lang, "language") for lang in data.get('languages') or [])
    clients = tuple(_parse_enum(ClientKind, client, "client") for client in data.get('clients') or [])
    return Ecosystem(languages=languages, clients=clients)


def parse_probe_definition(document: Dict[str, Any], probe_id: str) -> ProbeDefinition:
    """
    Validate a decoded YAML document against the expected probe ID.

    Args:
        document: Decoded YAML mapping
        probe_id: ID the probe declares in code

    Returns:
        Validated ProbeDefinition

    Raises:
        ProbeDefinitionError: On any mismatch or unknown enum value
    """
    if not isinstance(document, dict):
        raise ProbeDefinitionError(f"{probe_id}: metadata is not a mapping")

    declared = document.get('id')
    if declared != probe_id:
        raise ProbeDefinitionError(f"probe ID mismatch: code declares {probe_id!r}, metadata declares {declared!r}")

    short = document.get('short')
    if not short:
        raise ProbeDefinitionError(f"{probe_id}: short description is missing")

    outcomes = document.get('outcome') or []
    if not isinstance(outcomes, list):
        raise ProbeDefinitionError(f"{probe_id}: outcome must be a list")

    return ProbeDefinition(
        id=declared,
        short=str(short).strip(),
        motivation=str(document.get('motivation') or "").strip(),
        implementation=str(document.get('implementation') or "").strip(),
        remediation=_parse_remediation(document.get('remediation')),
        ecosystem=_parse_ecosystem(document.get('ecosystem')),
        lifecycle=_parse_enum(Lifecycle, document.get('lifecycle', 'stable'), "lifecycle"),
        outcomes=tuple(str(line) for line in outcomes),
    )


@lru_cache(maxsize=None)
def _load_cached(directory: str, probe_id: str) -> ProbeDefinition:
    path = Path(directory) / f"{probe_id}.yml"
    if not path.exists():
        raise ProbeDefinitionError(f"no metadata found for probe {probe_id!r} in {directory}")

    try:
        with open(path, 'r', encoding='utf-8') as f:
            document = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise ProbeDefinitionError(f"malformed metadata for probe {probe_id!r}: {e}") from e

    definition = parse_probe_definition(document, probe_id)
    logger.debug(f"Loaded probe definition {probe_id} from {path}")
    return definition


def load_probe_definition(source: Union[str, Path], probe_id: str) -> ProbeDefinition:
    """
    Load the metadata for ``probe_id`` from a definitions directory.

    Definitions are cached per directory; the same ProbeDefinition object
    is returned for repeated lookups.
    """
    return _load_cached(str(Path(source)), probe_id)


def list_definition_ids(source: Union[str, Path]) -> List[str]:
    """Return the IDs of all metadata files in a definitions directory."""
    return sorted(path.stem for path in Path(source).glob("*.yml"))
