"""
Tests for probe metadata parsing and the bundled definitions.
"""

import pytest

from scorecard.errors import ProbeDefinitionError
from scorecard.finding.outcome import Outcome
from scorecard.finding.probe import (
    ClientKind,
    Language,
    Lifecycle,
    RemediationEffort,
    list_definition_ids,
    load_probe_definition,
    parse_probe_definition,
)
from scorecard.probes import ALL_PROBES, INDEPENDENT_PROBES
from scorecard.probes.utils import DEFINITIONS_DIR


def _document(**overrides):
    document = {
        'id': 'exampleProbe',
        'lifecycle': 'stable',
        'short': 'Checks an example property.',
        'motivation': 'Because examples matter.',
        'implementation': 'Looks at the example.',
        'outcome': ['True when the example holds.'],
        'remediation': {
            'onOutcome': 'False',
            'effort': 'Low',
            'text': ['Fix the example.'],
            'markdown': ['Fix the example.'],
        },
        'ecosystem': {'languages': ['python', 'go'], 'clients': ['github']},
    }
    document.update(overrides)
    return document


class TestParseProbeDefinition:

    def test_valid_document(self):
        definition = parse_probe_definition(_document(), 'exampleProbe')
        assert definition.id == 'exampleProbe'
        assert definition.lifecycle == Lifecycle.STABLE
        assert definition.remediation.on_outcome == Outcome.FALSE
        assert definition.remediation.effort == RemediationEffort.LOW
        assert definition.supports_client(ClientKind.GITHUB)
        assert not definition.supports_client('gitlab')
        assert definition.supports_language(Language.PYTHON)
        assert not definition.supports_language('java')

    def test_id_mismatch(self):
        with pytest.raises(ProbeDefinitionError, match="mismatch"):
            parse_probe_definition(_document(), 'otherProbe')

    def test_legacy_outcome_in_remediation(self):
        remediation = dict(_document()['remediation'], onOutcome='Negative')
        definition = parse_probe_definition(_document(remediation=remediation), 'exampleProbe')
        assert definition.remediation.on_outcome == Outcome.FALSE

    @pytest.mark.parametrize("field,value", [
        ('remediation', {'onOutcome': 'Sometimes', 'effort': 'Low'}),
        ('remediation', {'onOutcome': 'True', 'effort': 'Enormous'}),
        ('ecosystem', {'languages': ['cobol']}),
        ('ecosystem', {'clients': ['svn']}),
        ('lifecycle', 'retired'),
        ('short', ''),
    ])
    def test_invalid_fields(self, field, value):
        with pytest.raises(ProbeDefinitionError):
            parse_probe_definition(_document(**{field: value}), 'exampleProbe')

    def test_not_a_mapping(self):
        with pytest.raises(ProbeDefinitionError):
            parse_probe_definition(['exampleProbe'], 'exampleProbe')


class TestLoadProbeDefinition:

    def test_missing_file(self, tmp_path):
        with pytest.raises(ProbeDefinitionError):
            load_probe_definition(tmp_path, 'exampleProbe')

    def test_malformed_yaml(self, tmp_path):
        (tmp_path / 'exampleProbe.yml').write_text("id: [unclosed\n")
        with pytest.raises(ProbeDefinitionError, match="malformed"):
            load_probe_definition(tmp_path, 'exampleProbe')

    def test_cached_per_directory(self):
        first = load_probe_definition(DEFINITIONS_DIR, 'archived')
        assert load_probe_definition(DEFINITIONS_DIR, 'archived') is first


def test_every_bundled_definition_matches_a_probe():
    declared = sorted([probe_id for probe_id, _, _ in ALL_PROBES] + [probe_id for probe_id, _ in INDEPENDENT_PROBES])
    assert list_definition_ids(DEFINITIONS_DIR) == declared


@pytest.mark.parametrize("probe_id", [probe_id for probe_id, _, _ in ALL_PROBES] +
                         [probe_id for probe_id, _ in INDEPENDENT_PROBES])
def test_bundled_definition_is_valid(probe_id):
    definition = load_probe_definition(DEFINITIONS_DIR, probe_id)
    assert definition.id == probe_id
    assert definition.short
    assert definition.remediation.effort != RemediationEffort.NONE
