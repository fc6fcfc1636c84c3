"""
Probe Registry
==============
Catalog of probe implementations and the checks that consume them.
Independent probes belong to no check and run only when requested.

The registry is an explicit object built once at startup from a fixed
table of probes. Any registration problem is fatal: a registry that
silently dropped a probe would produce wrong scores with no visible
signal. Once frozen, the registry rejects further registrations.

Author: Scorecard Team
"""

from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Dict, List, Sequence, Tuple, Union
import logging

from scorecard.checker.raw_results import RawResults
from scorecard.errors import ProbeDefinitionError, ProbeNotFoundError, RegistrationError
from scorecard.finding.finding import Finding
from scorecard.finding.probe import list_definition_ids, load_probe_definition

logger = logging.getLogger(__name__)

ProbeImpl = Callable[[RawResults], Tuple[List[Finding], str]]


@dataclass(frozen=True)
class ProbeDescriptor:
    """A registered probe: its name, implementation and consuming checks."""
    name: str
    implementation: ProbeImpl
    checks: Tuple[str, ...]

    def run(self, raw: RawResults) -> Tuple[List[Finding], str]:
        return self.implementation(raw)


class ProbeRegistry:
    """Append-only mapping of probe names to descriptors."""

    def __init__(self):
        self._probes: Dict[str, ProbeDescriptor] = {}
        self._frozen = False

    def register(self, name: str, implementation: ProbeImpl, checks: Sequence[str]) -> ProbeDescriptor:
        """
        Register a probe.

        Args:
            name: Probe ID; must match the ID in the probe's metadata
            implementation: Function evaluating RawResults into findings
            checks: Names of the checks that consume this probe

        Returns:
            The stored ProbeDescriptor

        Raises:
            RegistrationError: On an empty name, missing implementation,
                empty check list, duplicate name or a frozen registry
        """
        if self._frozen:
            raise RegistrationError(f"registry is frozen, cannot register {name!r}")
        if not name:
            raise RegistrationError("probe name is required")
        if implementation is None:
            raise RegistrationError(f"{name}: implementation is required")
        if not checks:
            raise RegistrationError(f"{name}: probe must belong to at least one check")
        if name in self._probes:
            raise RegistrationError(f"probe {name!r} is already registered")

        descriptor = ProbeDescriptor(name=name, implementation=implementation, checks=tuple(checks))
        self._probes[name] = descriptor
        return descriptor

    def register_independent(self, name: str, implementation: ProbeImpl) -> ProbeDescriptor:
        """
        Register a probe that no check consumes. Independent probes only
        run when asked for by name.

        Raises:
            RegistrationError: On an empty name, missing implementation,
                duplicate name or a frozen registry
        """
        if self._frozen:
            raise RegistrationError(f"registry is frozen, cannot register {name!r}")
        if not name:
            raise RegistrationError("probe name is required")
        if implementation is None:
            raise RegistrationError(f"{name}: implementation is required")
        if name in self._probes:
            raise RegistrationError(f"probe {name!r} is already registered")

        descriptor = ProbeDescriptor(name=name, implementation=implementation, checks=())
        self._probes[name] = descriptor
        return descriptor

    def get(self, name: str) -> ProbeDescriptor:
        try:
            return self._probes[name]
        except KeyError:
            raise ProbeNotFoundError(f"probe not found: {name}") from None

    def get_all(self) -> List[ProbeDescriptor]:
        return list(self._probes.values())

    def probes_for_check(self, check: str) -> List[ProbeDescriptor]:
        return [p for p in self._probes.values() if check in p.checks]

    def independent_probes(self) -> List[ProbeDescriptor]:
        return [p for p in self._probes.values() if not p.checks]

    def check_names(self) -> List[str]:
        names = {check for p in self._probes.values() for check in p.checks}
        return sorted(names)

    def freeze(self) -> None:
        self._frozen = True

    def validate_definitions(self, source: Union[str, Path]) -> None:
        """
        Cross-check registered probes against the metadata directory.

        Every registered probe needs a metadata file declaring the same ID,
        and every metadata file needs a registered probe.

        Raises:
            ProbeDefinitionError: On the first inconsistency
        """
        for name in self._probes:
            load_probe_definition(source, name)

        orphans = [probe_id for probe_id in list_definition_ids(source) if probe_id not in self._probes]
        if orphans:
            raise ProbeDefinitionError(f"metadata without a registered probe: {', '.join(orphans)}")

    def __contains__(self, name: str) -> bool:
        return name in self._probes

    def __len__(self) -> int:
        return len(self._probes)
