"""
Scorecard Reports
=================
Serialization of scorecard reports.

Author: Scorecard Team
"""

from .json_report import read_report, report_from_json, report_to_json, write_report

__all__ = ['read_report', 'report_from_json', 'report_to_json', 'write_report']
