"""
Read-only reports: aggregates, chat text and chart images.
"""

from . import aggregates, charts
from .formatter import ReportFormatter

__all__ = ["aggregates", "charts", "ReportFormatter"]
