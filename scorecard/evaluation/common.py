"""
Evaluation Helpers
==================
Shared plumbing for the per-check evaluation functions.

Author: Scorecard Team
"""

from typing import Any, Iterable, Mapping, Sequence
import logging

from scorecard.checker.check_result import CheckResult, create_runtime_error_result
from scorecard.errors import ScorecardError
from scorecard.finding.finding import Finding, unique_probes_equal
from scorecard.finding.outcome import Outcome

logger = logging.getLogger(__name__)


def invalid_probe_results(name: str, detail: str = "invalid probe results") -> CheckResult:
    return create_runtime_error_result(name, ScorecardError(detail))


def has_expected_probes(findings: Sequence[Finding], expected: Iterable[str]) -> bool:
    return unique_probes_equal(findings, expected)


def log_finding(check: str, finding: Finding) -> None:
    """Positive evidence at INFO, negative at WARNING, missing data at DEBUG."""
    where = ""
    if finding.location is not None and finding.location.path:
        where = f" ({finding.location.path})"

    if finding.outcome == Outcome.TRUE:
        logger.info(f"{check}: {finding.message}{where}")
    elif finding.outcome == Outcome.FALSE:
        logger.warning(f"{check}: {finding.message}{where}")
    else:
        logger.debug(f"{check}: {finding.message}{where}")


def log_findings(check: str, findings: Iterable[Finding]) -> None:
    for finding in findings:
        log_finding(check, finding)


def int_value(values: Mapping[str, Any], key: str) -> int:
    """
    Read an integer value recorded by a probe.

    Raises:
        ScorecardError: If the key is missing or not a number
    """
    if key not in values:
        raise ScorecardError(f"missing value: {key}")
    try:
        return int(values[key])
    except (TypeError, ValueError):
        raise ScorecardError(f"invalid value for {key}: {values[key]!r}") from None
