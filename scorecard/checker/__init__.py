"""
Checker
=======
Raw results, check results and scoring primitives.

The runner lives in ``scorecard.checker.runner`` and is imported from
there; it depends on the probes and evaluations built on this package.

Author: Scorecard Team
"""

from .check_names import CHECK_RISK, Risk
from .check_result import (
    INCONCLUSIVE_RESULT_SCORE,
    MAX_RESULT_SCORE,
    MIN_RESULT_SCORE,
    CheckResult,
    ProportionalScoreWeighted,
)
from .raw_results import RawResults

__all__ = [
    'CHECK_RISK',
    'Risk',
    'INCONCLUSIVE_RESULT_SCORE',
    'MAX_RESULT_SCORE',
    'MIN_RESULT_SCORE',
    'CheckResult',
    'ProportionalScoreWeighted',
    'RawResults',
]
