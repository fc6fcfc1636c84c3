"""
JSON Report
===========
Writes scorecard reports as JSON for programmatic processing and reads
them back.

Reading is lossless for everything ``Report.to_dict()`` emits; legacy
``Positive``/``Negative`` outcome names are accepted on input and written
back in their canonical form.

Author: Scorecard Team
"""

import json
import logging
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, Optional, Union

from scorecard.checker.runner import Report

logger = logging.getLogger(__name__)

REPORT_VERSION = "2.0"


def report_to_json(report: Report, indent: Optional[int] = 2) -> str:
    """Render a report, plus generation metadata, as a JSON string."""
    data = report.to_dict()
    data['generator'] = {
        'report_version': REPORT_VERSION,
        'generated_at': datetime.now().isoformat(),
    }
    return json.dumps(data, indent=indent, default=str)


def report_from_json(text: str) -> Report:
    data: Dict[str, Any] = json.loads(text)
    return Report.from_dict(data)


def write_report(report: Report, path: Union[str, Path]) -> str:
    """
    Write a report to ``path``, creating parent directories as needed.

    Returns:
        Path to the written report file
    """
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)

    with open(path, 'w', encoding='utf-8') as f:
        f.write(report_to_json(report))

    logger.info(f"Report written to {path}")
    return str(path)


def read_report(path: Union[str, Path]) -> Report:
    with open(path, 'r', encoding='utf-8') as f:
        return report_from_json(f.read())
