"""
Usage aggregation over session logs.

Each session file is loaded once into a ``SessionUsage``; the daily, monthly
and per-session reductions then run as pure functions over that list, all
through ``iter_contributing`` so they filter and sum records identically.

Ordering: every result is sorted on its date-like key, newest first. Python's
sort is stable (also with ``reverse=True``), so rows with equal keys keep the
order in which their group was first seen. That order follows the session
list (modification time, newest first, ties in directory-walk order) and
then line order within each file.
"""

from dataclasses import dataclass, field
from pathlib import Path
from typing import Iterable, Iterator

from loguru import logger

from neousage.usage.loader import SessionLoader
from neousage.usage.locator import SessionLocator
from neousage.usage.models import (
    NO_SUMMARY,
    DailyStats,
    MessageRecord,
    MonthlyReport,
    MonthlyStats,
    SessionInfo,
    SessionStats,
    SummaryStats,
    UsageReport,
    UsageTotals,
)


@dataclass
class SessionUsage:
    """A session descriptor with its contributing records, in file order."""
    
    session: SessionInfo
    records: list[MessageRecord] = field(default_factory=list)


def iter_contributing(usages: Iterable[SessionUsage]) -> Iterator[tuple[SessionInfo, MessageRecord]]:
    """Yield every contributing record with the session it came from."""
    for usage in usages:
        for record in usage.records:
            if record.is_contributing:
                yield usage.session, record


def aggregate_daily(usages: Iterable[SessionUsage]) -> list[DailyStats]:
    """Group usage by (date, model), newest date first."""
    groups: dict[tuple[str, str], UsageTotals] = {}
    
    for _, record in iter_contributing(usages):
        key = (record.date, record.model)
        if key not in groups:
            groups[key] = UsageTotals()
        groups[key].add_record(record)
    
    stats = [
        DailyStats(date=date, model=model, **totals.to_dict())
        for (date, model), totals in groups.items()
    ]
    return sorted(stats, key=lambda s: s.date, reverse=True)


def aggregate_monthly(usages: Iterable[SessionUsage]) -> MonthlyReport:
    """
    Group usage by (month, model), newest month first.
    
    Alongside the per-model ``days`` count, the report carries the number of
    distinct active dates per month across all models.
    """
    groups: dict[tuple[str, str], UsageTotals] = {}
    group_days: dict[tuple[str, str], set[str]] = {}
    month_days: dict[str, set[str]] = {}
    
    for _, record in iter_contributing(usages):
        key = (record.month, record.model)
        if key not in groups:
            groups[key] = UsageTotals()
            group_days[key] = set()
        groups[key].add_record(record)
        group_days[key].add(record.date)
        month_days.setdefault(record.month, set()).add(record.date)
    
    stats = [
        MonthlyStats(month=month, model=model, days=len(group_days[(month, model)]), **totals.to_dict())
        for (month, model), totals in groups.items()
    ]
    return MonthlyReport(
        stats=sorted(stats, key=lambda s: s.month, reverse=True),
        month_total_days={month: len(days) for month, days in month_days.items()},
    )


def aggregate_sessions(usages: Iterable[SessionUsage]) -> list[SessionStats]:
    """
    One row per (session, model) actually used, most recently used first.
    
    Each session is grouped on its own. ``last_used`` is the date part of the
    latest timestamp seen for the pair. Sessions without contributing records
    produce no rows.
    """
    stats = []
    
    for usage in usages:
        groups: dict[str, UsageTotals] = {}
        last_seen: dict[str, str] = {}
        
        for _, record in iter_contributing([usage]):
            if record.model not in groups:
                groups[record.model] = UsageTotals()
                last_seen[record.model] = record.timestamp
            groups[record.model].add_record(record)
            if record.timestamp > last_seen[record.model]:
                last_seen[record.model] = record.timestamp
        
        for model, totals in groups.items():
            stats.append(SessionStats(
                session_id=usage.session.session_id,
                model=model,
                summary=usage.session.summary or NO_SUMMARY,
                last_used=last_seen[model].split("T")[0],
                **totals.to_dict(),
            ))
    
    return sorted(stats, key=lambda s: s.last_used, reverse=True)


def calculate_summary(stats: list[DailyStats]) -> SummaryStats:
    """Roll a daily report up into overall totals."""
    models = {s.model for s in stats}
    dates = sorted({s.date for s in stats})
    
    return SummaryStats(
        total_days=len(dates),
        total_tokens=sum(s.total_tokens for s in stats),
        total_input_tokens=sum(s.input_tokens for s in stats),
        total_output_tokens=sum(s.output_tokens for s in stats),
        total_cache_read_tokens=sum(s.cache_read_tokens for s in stats),
        total_cache_creation_tokens=sum(s.cache_creation_tokens for s in stats),
        total_messages=sum(s.messages for s in stats),
        models_used=sorted(models),
        date_range=(dates[0], dates[-1]) if dates else ("-", "-"),
    )


class UsageAggregator:
    """
    Load session logs and reduce them into usage statistics.
    
    Owns the session path cache for its lifetime: the projects tree is
    walked once, however many sessions are aggregated.
    
    Attributes:
        root: Projects root the session paths are relative to.
        locator: Session ID to path cache.
        loader: Reads message records from a log file.
    """
    
    def __init__(
        self,
        root: Path,
        locator: SessionLocator | None = None,
        loader: SessionLoader | None = None,
        extension: str = ".jsonl",
    ):
        self.root = root
        self.locator = locator or SessionLocator(root, extension)
        self.loader = loader or SessionLoader()
    
    def collect(self, sessions: Iterable[SessionInfo]) -> list[SessionUsage]:
        """
        Load each session once and keep its contributing records.
        
        Args:
            sessions: Descriptors, usually from ``SessionScanner.list_sessions()``.
        
        Returns:
            One entry per session, in input order.
        """
        usages = []
        for session in sessions:
            path = self.root / self.locator.resolve(session.session_id)
            records = [r for r in self.loader.load(path) if r.is_contributing]
            usages.append(SessionUsage(session=session, records=records))
        
        total = sum(len(u.records) for u in usages)
        logger.debug(f"Collected {total} usage record(s) from {len(usages)} session(s)")
        return usages
    
    def analyze_daily(self, sessions: Iterable[SessionInfo]) -> list[DailyStats]:
        """Daily usage per model."""
        return aggregate_daily(self.collect(sessions))
    
    def analyze_monthly(self, sessions: Iterable[SessionInfo]) -> MonthlyReport:
        """Monthly usage per model plus days active per month."""
        return aggregate_monthly(self.collect(sessions))
    
    def analyze_sessions(self, sessions: Iterable[SessionInfo]) -> list[SessionStats]:
        """Usage per session and model."""
        return aggregate_sessions(self.collect(sessions))
    
    def analyze(self, sessions: Iterable[SessionInfo]) -> UsageReport:
        """All three reports from a single pass over the logs."""
        usages = self.collect(sessions)
        return UsageReport(
            daily=aggregate_daily(usages),
            monthly=aggregate_monthly(usages),
            sessions=aggregate_sessions(usages),
        )
