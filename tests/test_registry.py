"""
Tests for the probe registry and its factory.
"""

import pytest

from scorecard.checker import check_names as checks
from scorecard.config import ScorecardConfig
from scorecard.errors import ProbeDefinitionError, ProbeNotFoundError, RegistrationError
from scorecard.finding.outcome import Outcome
from scorecard.probes import ALL_PROBES, INDEPENDENT_PROBES, build_registry
from scorecard.probes.registry import ProbeRegistry
from scorecard.probes.utils import DEFINITIONS_DIR


def _noop(raw):
    return [], "noop"


class TestProbeRegistry:

    def test_register_and_get(self):
        registry = ProbeRegistry()
        registry.register("noop", _noop, [checks.LICENSE])
        assert "noop" in registry
        assert registry.get("noop").checks == (checks.LICENSE,)
        assert registry.probes_for_check(checks.LICENSE)[0].name == "noop"

    def test_unknown_probe(self):
        with pytest.raises(ProbeNotFoundError):
            ProbeRegistry().get("missing")

    @pytest.mark.parametrize("name,impl,consumers", [
        ("", _noop, [checks.LICENSE]),
        ("noop", None, [checks.LICENSE]),
        ("noop", _noop, []),
    ])
    def test_rejects_incomplete_registration(self, name, impl, consumers):
        with pytest.raises(RegistrationError):
            ProbeRegistry().register(name, impl, consumers)

    def test_rejects_duplicate(self):
        registry = ProbeRegistry()
        registry.register("noop", _noop, [checks.LICENSE])
        with pytest.raises(RegistrationError, match="already registered"):
            registry.register("noop", _noop, [checks.FUZZING])

    def test_frozen_registry_rejects_registration(self):
        registry = ProbeRegistry()
        registry.freeze()
        with pytest.raises(RegistrationError, match="frozen"):
            registry.register("noop", _noop, [checks.LICENSE])

    def test_register_independent(self):
        registry = ProbeRegistry()
        registry.register("noop", _noop, [checks.LICENSE])
        registry.register_independent("standalone", _noop)
        assert registry.get("standalone").checks == ()
        assert [p.name for p in registry.independent_probes()] == ["standalone"]
        assert registry.check_names() == [checks.LICENSE]

    @pytest.mark.parametrize("name,impl", [("", _noop), ("noop", None)])
    def test_rejects_incomplete_independent_registration(self, name, impl):
        with pytest.raises(RegistrationError):
            ProbeRegistry().register_independent(name, impl)

    def test_independent_probe_names_are_unique(self):
        registry = ProbeRegistry()
        registry.register("noop", _noop, [checks.LICENSE])
        with pytest.raises(RegistrationError, match="already registered"):
            registry.register_independent("noop", _noop)
        registry.freeze()
        with pytest.raises(RegistrationError, match="frozen"):
            registry.register_independent("other", _noop)

    def test_validate_definitions_missing_metadata(self, tmp_path):
        registry = ProbeRegistry()
        registry.register("noop", _noop, [checks.LICENSE])
        with pytest.raises(ProbeDefinitionError):
            registry.validate_definitions(tmp_path)

    def test_validate_definitions_orphan_metadata(self, tmp_path):
        source = DEFINITIONS_DIR / "archived.yml"
        (tmp_path / "archived.yml").write_text(source.read_text())
        with pytest.raises(ProbeDefinitionError, match="archived"):
            ProbeRegistry().validate_definitions(tmp_path)


class TestBuildRegistry:

    def test_registers_every_probe(self, registry):
        declared = {probe_id for probe_id, _, _ in ALL_PROBES} | {probe_id for probe_id, _ in INDEPENDENT_PROBES}
        assert len(registry) == len(ALL_PROBES) + len(INDEPENDENT_PROBES)
        assert {p.name for p in registry.get_all()} == declared

    def test_independent_probes_belong_to_no_check(self, registry):
        independent = {p.name for p in registry.independent_probes()}
        assert independent == {"codeReviewTwoReviewers", "memorysafe", "unsafeblock", "packagedWithNpm"}
        for check in registry.check_names():
            assert not independent & {p.name for p in registry.probes_for_check(check)}

    def test_covers_every_check(self, registry):
        assert registry.check_names() == sorted(checks.CHECK_RISK)

    def test_registry_is_frozen(self, registry):
        with pytest.raises(RegistrationError):
            registry.register("noop", _noop, [checks.LICENSE])

    def test_config_binds_thresholds(self, now):
        from scorecard.checker.raw_results import MaintainerActivityData, RawResults

        registry = build_registry(ScorecardConfig(inactive_maintainer_days=30))
        raw = RawResults(now=now, maintainer_activity=MaintainerActivityData(activity={"alice": True}))
        findings, _ = registry.get("hasInactiveMaintainers").run(raw)
        assert "30 days" in findings[0].message
        assert findings[0].outcome == Outcome.FALSE

    def test_duplicate_table_entry_is_fatal(self, monkeypatch):
        import scorecard.probes as probes

        monkeypatch.setattr(probes, "ALL_PROBES", ALL_PROBES + [ALL_PROBES[0]])
        with pytest.raises(RegistrationError):
            probes.build_registry()
