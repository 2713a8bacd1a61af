"""Usage aggregation over Neovate session logs."""

from neousage.usage.models import (
    DailyStats,
    MessageRecord,
    MonthlyReport,
    MonthlyStats,
    SessionInfo,
    SessionStats,
    SummaryStats,
    TokenUsage,
    UsageReport,
)
from neousage.usage.locator import SessionLocator
from neousage.usage.loader import SessionLoader
from neousage.usage.scanner import SessionScanner
from neousage.usage.aggregator import UsageAggregator, calculate_summary

__all__ = [
    "TokenUsage",
    "MessageRecord",
    "SessionInfo",
    "DailyStats",
    "MonthlyStats",
    "MonthlyReport",
    "SessionStats",
    "SummaryStats",
    "UsageReport",
    "SessionLocator",
    "SessionLoader",
    "SessionScanner",
    "UsageAggregator",
    "calculate_summary",
]
