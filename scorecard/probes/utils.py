"""
Probe Helpers
=============
Shared plumbing for probe implementations.

Author: Scorecard Team
"""

from pathlib import Path
from typing import Any, Optional

from scorecard.checker.raw_results import File
from scorecard.errors import ProbeExecutionError
from scorecard.finding.finding import Finding, Location
from scorecard.finding.outcome import Outcome

DEFINITIONS_DIR = Path(__file__).parent / "defs"


def new_finding(probe_id: str, message: str, outcome: Outcome,
                location: Optional[Location] = None) -> Finding:
    """Create a finding validated against the bundled probe metadata."""
    return Finding.new(DEFINITIONS_DIR, probe_id, message, location, outcome)


def require(value: Any, what: str) -> Any:
    """Return ``value`` or raise when the raw data was never collected."""
    if value is None:
        raise ProbeExecutionError(f"nil raw data: {what}")
    return value


def file_location(file: File, with_lines: bool = True) -> Location:
    if not with_lines:
        return Location(type=file.type, path=file.path)
    return Location(
        type=file.type,
        path=file.path,
        line_start=file.offset,
        line_end=file.end_offset or None,
        snippet=file.snippet or None,
    )
