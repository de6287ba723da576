"""
Canvassing reports: day summaries and knock analytics.
"""
from src.canvasser.reports.day_summary import DaySummary, DaySummaryAggregator, SummaryRecord
from src.canvasser.reports.knock_metrics import KnockMetrics, TimeFrame, knock_metrics

__all__ = [
    "DaySummary",
    "DaySummaryAggregator",
    "SummaryRecord",
    "KnockMetrics",
    "TimeFrame",
    "knock_metrics",
]
