"""
Finding Outcomes
================
Closed enumeration of the results a probe can report.

Older persisted reports used ``Positive``/``Negative`` for the two boolean
outcomes. They are accepted when parsing and never emitted.

Author: Scorecard Team
"""

from enum import Enum

from scorecard.errors import ProbeDefinitionError


class Outcome(Enum):
    """Result of a single probe observation."""
    TRUE = "True"
    FALSE = "False"
    NOT_APPLICABLE = "NotApplicable"
    NOT_AVAILABLE = "NotAvailable"
    NOT_SUPPORTED = "NotSupported"
    ERROR = "Error"

    @property
    def is_boolean(self) -> bool:
        return self in (Outcome.TRUE, Outcome.FALSE)

    @classmethod
    def parse(cls, text: str) -> 'Outcome':
        """
        Parse an outcome name, including the legacy boolean names.

        Args:
            text: Outcome as written in YAML or a persisted report

        Returns:
            Matching Outcome

        Raises:
            ProbeDefinitionError: If the name is not a known outcome
        """
        if isinstance(text, cls):
            return text
        if text in LEGACY_OUTCOMES:
            return LEGACY_OUTCOMES[text]
        try:
            return cls(text)
        except ValueError:
            raise ProbeDefinitionError(f"invalid outcome: {text!r}") from None


# Legacy schema names mapped onto the canonical outcome
LEGACY_OUTCOMES = {
    "Positive": Outcome.TRUE,
    "Negative": Outcome.FALSE,
}
