"""
Scorecard Configuration
=======================
Centralized configuration for check selection, evaluation windows and
release signing keys.

Settings load from ``SCORECARD_*`` environment variables or from a YAML
file. GPG key configuration is a closed set of shapes: no keys, one
global key list, or per-release rules with an optional global fallback.

Author: Scorecard Team
"""

import fnmatch
import logging
import os
import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple, Union

import yaml

from scorecard.checker.check_names import CHECK_RISK
from scorecard.errors import ConfigurationError

logger = logging.getLogger(__name__)

LOG_LEVELS = ('DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL')

KEY_FINGERPRINT_PATTERN = re.compile(r'(?i)(?:key|fingerprint|gpg).*?([0-9A-F]{40})')


# ============================================================================
# GPG KEYS
# ============================================================================

@dataclass(frozen=True)
class NoGPGKeys:
    """No signing keys configured."""

    def key_urls_for(self, tag: str) -> Tuple[str, ...]:
        return ()

    def to_dict(self) -> Optional[Dict[str, Any]]:
        return None


@dataclass(frozen=True)
class GlobalGPGKeys:
    """One key list used for every release."""
    urls: Tuple[str, ...]

    def key_urls_for(self, tag: str) -> Tuple[str, ...]:
        return self.urls

    def to_dict(self) -> Dict[str, Any]:
        return {'urls': list(self.urls)}


@dataclass(frozen=True)
class ReleaseKeyRule:
    """Keys for releases whose tag matches ``tag`` (a glob pattern)."""
    tag: str
    urls: Tuple[str, ...]

    def matches(self, release_tag: str) -> bool:
        return tag_matches(release_tag, self.tag)


@dataclass(frozen=True)
class PerReleaseGPGKeys:
    """Per-release rules; the first matching rule wins."""
    rules: Tuple[ReleaseKeyRule, ...]
    fallback_urls: Tuple[str, ...] = ()

    def key_urls_for(self, tag: str) -> Tuple[str, ...]:
        for rule in self.rules:
            if rule.matches(tag) and rule.urls:
                return rule.urls
        return self.fallback_urls

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {
            'releases': [{'tag': rule.tag, 'urls': list(rule.urls)} for rule in self.rules],
        }
        if self.fallback_urls:
            data['urls'] = list(self.fallback_urls)
        return data


GPGKeys = Union[NoGPGKeys, GlobalGPGKeys, PerReleaseGPGKeys]


def tag_matches(tag: str, pattern: str) -> bool:
    """
    Match a release tag against a key rule pattern.

    An empty pattern or ``*`` matches every tag; otherwise the tag must
    equal the pattern or match it as a glob.
    """
    if pattern in ("", "*"):
        return True
    if tag == pattern:
        return True
    return fnmatch.fnmatchcase(tag, pattern)


def _url_list(value: Any, where: str) -> Tuple[str, ...]:
    if value is None:
        return ()
    if isinstance(value, str):
        return (value,)
    if not isinstance(value, list) or not all(isinstance(url, str) for url in value):
        raise ConfigurationError(f"{where} must be a list of URLs")
    return tuple(value)


def parse_gpg_keys(document: Any) -> GPGKeys:
    """
    Build the typed GPG key configuration from its YAML form.

    Accepted shapes::

        gpg_keys: null
        gpg_keys: [https://example.com/KEYS]
        gpg_keys:
          urls: [https://example.com/KEYS]
          releases:
            - tag: "v1.*"
              urls: [https://example.com/v1.asc]

    Raises:
        ConfigurationError: For any other shape
    """
    if document is None:
        return NoGPGKeys()

    if isinstance(document, (list, str)):
        urls = _url_list(document, "gpg_keys")
        return GlobalGPGKeys(urls) if urls else NoGPGKeys()

    if not isinstance(document, dict):
        raise ConfigurationError(f"unsupported gpg_keys configuration: {type(document).__name__}")

    unknown = set(document) - {'urls', 'releases'}
    if unknown:
        raise ConfigurationError(f"unknown gpg_keys settings: {', '.join(sorted(unknown))}")

    urls = _url_list(document.get('urls'), "gpg_keys.urls")
    releases = document.get('releases')
    if releases is None:
        return GlobalGPGKeys(urls) if urls else NoGPGKeys()
    if not isinstance(releases, list):
        raise ConfigurationError("gpg_keys.releases must be a list")

    rules = []
    for i, entry in enumerate(releases):
        if not isinstance(entry, dict):
            raise ConfigurationError(f"gpg_keys.releases[{i}] must be a mapping")
        tag = entry.get('tag', "")
        if not isinstance(tag, str):
            raise ConfigurationError(f"gpg_keys.releases[{i}].tag must be a string")
        rules.append(ReleaseKeyRule(tag=tag, urls=_url_list(entry.get('urls'), f"gpg_keys.releases[{i}].urls")))

    return PerReleaseGPGKeys(rules=tuple(rules), fallback_urls=urls)


def extract_key_fingerprints(text: str) -> List[str]:
    """Find 40-hex-digit fingerprints announced in release notes or KEYS files."""
    fingerprints = []
    for match in KEY_FINGERPRINT_PATTERN.finditer(text or ""):
        fingerprint = match.group(1).upper()
        if fingerprint not in fingerprints:
            fingerprints.append(fingerprint)
    return fingerprints


# ============================================================================
# SCORECARD CONFIG
# ============================================================================

@dataclass
class ScorecardConfig:
    """
    Scorecard configuration container.

    ``enabled_checks`` of None runs every registered check.
    """

    # Check selection
    enabled_checks: Optional[List[str]] = None

    # Logging
    log_level: str = "INFO"

    # Evaluation windows
    maintained_lookback_days: int = 90
    release_lookback: int = 5
    mttu_threshold_days: int = 180
    inactive_maintainer_days: int = 180
    response_threshold_days: int = 180

    # Release signing
    gpg_keys: GPGKeys = field(default_factory=NoGPGKeys)

    @classmethod
    def from_environment(cls) -> 'ScorecardConfig':
        """
        Load configuration from environment variables.

        Returns:
            ScorecardConfig instance with environment-based settings

        Raises:
            ConfigurationError: If a numeric variable is not an integer
        """
        config = cls()

        checks = os.getenv('SCORECARD_CHECKS')
        if checks:
            config.enabled_checks = [name.strip() for name in checks.split(',') if name.strip()]

        config.log_level = os.getenv('SCORECARD_LOG_LEVEL', config.log_level).upper()

        config.maintained_lookback_days = _env_int('SCORECARD_MAINTAINED_LOOKBACK_DAYS',
                                                   config.maintained_lookback_days)
        config.release_lookback = _env_int('SCORECARD_RELEASE_LOOKBACK', config.release_lookback)
        config.mttu_threshold_days = _env_int('SCORECARD_MTTU_THRESHOLD_DAYS', config.mttu_threshold_days)
        config.inactive_maintainer_days = _env_int('SCORECARD_INACTIVE_MAINTAINER_DAYS',
                                                   config.inactive_maintainer_days)
        config.response_threshold_days = _env_int('SCORECARD_RESPONSE_THRESHOLD_DAYS',
                                                  config.response_threshold_days)

        key_urls = os.getenv('SCORECARD_GPG_KEY_URLS')
        if key_urls:
            config.gpg_keys = parse_gpg_keys([url.strip() for url in key_urls.split(',') if url.strip()])

        return config

    @classmethod
    def from_file(cls, config_path: Union[str, Path]) -> 'ScorecardConfig':
        """
        Load configuration from a YAML file.

        Args:
            config_path: Path to configuration file

        Returns:
            ScorecardConfig instance

        Raises:
            FileNotFoundError: If the file does not exist
            ConfigurationError: If the file is malformed or has unknown keys
        """
        config_path = Path(config_path)

        if not config_path.exists():
            raise FileNotFoundError(f"Configuration file not found: {config_path}")

        try:
            with open(config_path, 'r') as f:
                data = yaml.safe_load(f) or {}
        except yaml.YAMLError as e:
            raise ConfigurationError(f"Malformed configuration file {config_path}: {e}") from e

        if not isinstance(data, dict):
            raise ConfigurationError(f"Configuration file must contain a mapping: {config_path}")

        known = set(cls.__dataclass_fields__)
        unknown = set(data) - known
        if unknown:
            raise ConfigurationError(f"Unknown configuration keys: {', '.join(sorted(unknown))}")

        if 'gpg_keys' in data:
            data['gpg_keys'] = parse_gpg_keys(data['gpg_keys'])

        logger.info(f"Loaded configuration from {config_path}")
        return cls(**data)

    def validate(self) -> bool:
        """
        Validate configuration settings.

        Returns:
            True if configuration is valid

        Raises:
            ConfigurationError: If configuration is invalid
        """
        if self.log_level.upper() not in LOG_LEVELS:
            raise ConfigurationError(f"Invalid log level: {self.log_level}")

        if self.enabled_checks is not None:
            unknown = [name for name in self.enabled_checks if name not in CHECK_RISK]
            if unknown:
                raise ConfigurationError(f"Unknown checks: {', '.join(unknown)}")

        for name in ('maintained_lookback_days', 'release_lookback', 'mttu_threshold_days',
                     'inactive_maintainer_days', 'response_threshold_days'):
            value = getattr(self, name)
            if not isinstance(value, int) or isinstance(value, bool) or value < 1:
                raise ConfigurationError(f"{name} must be a positive integer, got {value!r}")

        if not isinstance(self.gpg_keys, (NoGPGKeys, GlobalGPGKeys, PerReleaseGPGKeys)):
            raise ConfigurationError(f"Invalid gpg_keys configuration: {self.gpg_keys!r}")

        return True

    def to_dict(self) -> Dict[str, Any]:
        """
        Convert configuration to dictionary (for serialization).

        Returns:
            Dictionary representation
        """
        return {
            'enabled_checks': list(self.enabled_checks) if self.enabled_checks is not None else None,
            'log_level': self.log_level,
            'maintained_lookback_days': self.maintained_lookback_days,
            'release_lookback': self.release_lookback,
            'mttu_threshold_days': self.mttu_threshold_days,
            'inactive_maintainer_days': self.inactive_maintainer_days,
            'response_threshold_days': self.response_threshold_days,
            'gpg_keys': self.gpg_keys.to_dict(),
        }


def _env_int(name: str, default: int) -> int:
    value = os.getenv(name)
    if value is None or value == "":
        return default
    try:
        return int(value)
    except ValueError:
        raise ConfigurationError(f"{name} must be an integer, got {value!r}") from None

