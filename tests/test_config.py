"""
Tests for scorecard configuration and GPG key settings.
"""

import pytest

from scorecard.checker import check_names as checks
from scorecard.config import (
    GlobalGPGKeys,
    NoGPGKeys,
    PerReleaseGPGKeys,
    ReleaseKeyRule,
    ScorecardConfig,
    extract_key_fingerprints,
    parse_gpg_keys,
    tag_matches,
)
from scorecard.errors import ConfigurationError

FINGERPRINT = "ABCDEF0123456789ABCDEF0123456789ABCDEF01"


class TestScorecardConfig:

    def test_defaults_are_valid(self):
        config = ScorecardConfig()
        assert config.validate()
        assert config.maintained_lookback_days == 90
        assert config.release_lookback == 5
        assert isinstance(config.gpg_keys, NoGPGKeys)

    def test_from_environment(self, monkeypatch):
        monkeypatch.setenv('SCORECARD_CHECKS', 'License, Webhooks')
        monkeypatch.setenv('SCORECARD_LOG_LEVEL', 'debug')
        monkeypatch.setenv('SCORECARD_RELEASE_LOOKBACK', '10')
        monkeypatch.setenv('SCORECARD_GPG_KEY_URLS', 'https://example.com/KEYS')

        config = ScorecardConfig.from_environment()

        assert config.enabled_checks == [checks.LICENSE, checks.WEBHOOKS]
        assert config.log_level == 'DEBUG'
        assert config.release_lookback == 10
        assert config.gpg_keys == GlobalGPGKeys(("https://example.com/KEYS",))

    def test_from_environment_rejects_non_integers(self, monkeypatch):
        monkeypatch.setenv('SCORECARD_MTTU_THRESHOLD_DAYS', 'soon')
        with pytest.raises(ConfigurationError):
            ScorecardConfig.from_environment()

    def test_from_file(self, tmp_path):
        path = tmp_path / "scorecard.yml"
        path.write_text(
            "enabled_checks: [License]\n"
            "inactive_maintainer_days: 365\n"
            "gpg_keys:\n"
            "  releases:\n"
            "    - tag: 'v1.*'\n"
            "      urls: [https://example.com/v1.asc]\n"
        )
        config = ScorecardConfig.from_file(path)
        assert config.enabled_checks == [checks.LICENSE]
        assert config.inactive_maintainer_days == 365
        assert config.gpg_keys.key_urls_for("v1.2") == ("https://example.com/v1.asc",)

    def test_from_file_missing(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            ScorecardConfig.from_file(tmp_path / "missing.yml")

    def test_from_file_unknown_key(self, tmp_path):
        path = tmp_path / "scorecard.yml"
        path.write_text("colour: blue\n")
        with pytest.raises(ConfigurationError):
            ScorecardConfig.from_file(path)

    @pytest.mark.parametrize("changes", [
        {'log_level': 'LOUD'},
        {'enabled_checks': ['Not-A-Check']},
        {'release_lookback': 0},
        {'response_threshold_days': True},
        {'gpg_keys': ['https://example.com/KEYS']},
    ])
    def test_validate_rejects(self, changes):
        with pytest.raises(ConfigurationError):
            ScorecardConfig(**changes).validate()

    def test_to_dict(self):
        data = ScorecardConfig(gpg_keys=GlobalGPGKeys(("u",))).to_dict()
        assert data['gpg_keys'] == {'urls': ['u']}
        assert data['enabled_checks'] is None


class TestGPGKeys:

    def test_shapes(self):
        assert isinstance(parse_gpg_keys(None), NoGPGKeys)
        assert isinstance(parse_gpg_keys([]), NoGPGKeys)
        assert parse_gpg_keys("https://k") == GlobalGPGKeys(("https://k",))
        assert parse_gpg_keys({'urls': ["https://k"]}) == GlobalGPGKeys(("https://k",))

    def test_per_release_with_fallback(self):
        keys = parse_gpg_keys({
            'urls': ["https://fallback"],
            'releases': [
                {'tag': "v1.0.0", 'urls': ["https://exact"]},
                {'tag': "v1.*", 'urls': ["https://glob"]},
                {'tag': "v3.*", 'urls': []},
            ],
        })
        assert isinstance(keys, PerReleaseGPGKeys)
        assert keys.key_urls_for("v1.0.0") == ("https://exact",)
        assert keys.key_urls_for("v1.2.0") == ("https://glob",)
        assert keys.key_urls_for("v3.0.0") == ("https://fallback",)
        assert keys.key_urls_for("v2.0.0") == ("https://fallback",)

    def test_round_trip_through_dict(self):
        keys = PerReleaseGPGKeys(rules=(ReleaseKeyRule(tag="*", urls=("https://k",)),))
        assert parse_gpg_keys(keys.to_dict()) == keys

    @pytest.mark.parametrize("document", [
        42,
        {'keys': []},
        {'releases': {'tag': 'v1'}},
        {'releases': ['v1']},
        {'releases': [{'tag': 1}]},
        [1, 2],
    ])
    def test_invalid_shapes(self, document):
        with pytest.raises(ConfigurationError):
            parse_gpg_keys(document)

    @pytest.mark.parametrize("tag,pattern,expected", [
        ("v1.0", "", True),
        ("v1.0", "*", True),
        ("v1.0", "v1.0", True),
        ("v1.0", "v1.*", True),
        ("v2.0", "v1.*", False),
    ])
    def test_tag_matches(self, tag, pattern, expected):
        assert tag_matches(tag, pattern) is expected

    def test_extract_key_fingerprints(self):
        text = (f"Signed with GPG key {FINGERPRINT}.\n"
                f"Fingerprint: {FINGERPRINT.lower()}\n"
                "Checksum 0123456789012345678901234567890123456789\n")
        assert extract_key_fingerprints(text) == [FINGERPRINT]
