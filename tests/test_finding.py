"""
Tests for outcomes, findings and locations.
"""

import pytest

from scorecard.errors import ProbeDefinitionError
from scorecard.finding.finding import FileType, Finding, Location, unique_probes_equal
from scorecard.finding.outcome import Outcome
from scorecard.probes.utils import DEFINITIONS_DIR


class TestOutcome:

    def test_parse_canonical_names(self):
        assert Outcome.parse("True") == Outcome.TRUE
        assert Outcome.parse("NotApplicable") == Outcome.NOT_APPLICABLE
        assert Outcome.parse("Error") == Outcome.ERROR

    def test_parse_legacy_names(self):
        assert Outcome.parse("Positive") == Outcome.TRUE
        assert Outcome.parse("Negative") == Outcome.FALSE

    def test_parse_unknown_raises(self):
        with pytest.raises(ProbeDefinitionError):
            Outcome.parse("Maybe")

    def test_is_boolean(self):
        assert Outcome.TRUE.is_boolean
        assert Outcome.FALSE.is_boolean
        assert not Outcome.NOT_AVAILABLE.is_boolean


class TestFinding:

    def test_new_attaches_remediation_on_matching_outcome(self):
        f = Finding.new(DEFINITIONS_DIR, "hasBinaryArtifacts", "binary", None, Outcome.TRUE)
        assert f.probe == "hasBinaryArtifacts"
        assert f.remediation is not None
        assert f.remediation.on_outcome == Outcome.TRUE

    def test_new_omits_remediation_on_other_outcome(self):
        f = Finding.new(DEFINITIONS_DIR, "hasBinaryArtifacts", "none", None, Outcome.FALSE)
        assert f.remediation is None

    def test_new_unknown_probe_raises(self):
        with pytest.raises(ProbeDefinitionError):
            Finding.new(DEFINITIONS_DIR, "noSuchProbe", "", None, Outcome.TRUE)

    def test_with_outcome_recomputes_remediation(self):
        f = Finding.new(DEFINITIONS_DIR, "hasBinaryArtifacts", "binary", None, Outcome.TRUE)
        flipped = f.with_outcome(DEFINITIONS_DIR, Outcome.FALSE)
        assert flipped.outcome == Outcome.FALSE
        assert flipped.remediation is None
        assert f.outcome == Outcome.TRUE

    def test_helpers_return_copies(self):
        f = Finding(probe="archived", outcome=Outcome.FALSE, message="a")
        g = f.with_message("b").with_value("k", 1)
        assert f.message == "a"
        assert dict(f.values) == {}
        assert g.message == "b"
        assert g.values["k"] == 1

    def test_values_are_read_only(self):
        f = Finding(probe="archived", outcome=Outcome.FALSE, values={"k": 1})
        with pytest.raises(TypeError):
            f.values["k"] = 2

    def test_findings_are_hashable(self):
        f = Finding.new(DEFINITIONS_DIR, "archived", "Repository is archived.", None, Outcome.TRUE)
        f = f.with_values({"k": 1})
        same = Finding.from_dict(f.to_dict())
        assert same == f
        assert hash(same) == hash(f)
        assert len({f, same}) == 1

    def test_from_dict_accepts_legacy_outcome(self):
        f = Finding.from_dict({
            "probe": "archived",
            "outcome": "Positive",
            "message": "Repository is archived.",
            "location": {"type": "url", "path": "https://example.com"},
        })
        assert f.outcome == Outcome.TRUE
        assert f.location == Location(type=FileType.URL, path="https://example.com")
        assert f.to_dict()["outcome"] == "True"

    def test_dict_round_trip_keeps_remediation(self):
        f = Finding.new(DEFINITIONS_DIR, "archived", "Repository is archived.", None, Outcome.TRUE)
        f = f.with_location(Location(type=FileType.SOURCE, path="README.md", line_start=3))
        assert Finding.from_dict(f.to_dict()) == f


def test_unique_probes_equal():
    findings = [
        Finding(probe="a", outcome=Outcome.TRUE),
        Finding(probe="a", outcome=Outcome.FALSE),
        Finding(probe="b", outcome=Outcome.TRUE),
    ]
    assert unique_probes_equal(findings, ["b", "a"])
    assert not unique_probes_equal(findings, ["a"])
    assert not unique_probes_equal(findings, ["a", "b", "c"])
