"""Usage data models."""

import math
from dataclasses import dataclass, field, asdict
from datetime import datetime
from typing import Any


NO_SUMMARY = "No summary available"


def _as_int(value: Any) -> int:
    """Coerce a token counter to int; anything non-numeric or non-finite counts as 0."""
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return 0
    if isinstance(value, float) and not math.isfinite(value):
        return 0
    return int(value)


@dataclass(frozen=True)
class TokenUsage:
    """
    Token counters attached to an assistant message.
    
    Missing or non-numeric counters are read as 0, and so are infinities
    and NaN.
    """
    
    input_tokens: int = 0
    output_tokens: int = 0
    cache_read_tokens: int = 0
    cache_creation_tokens: int = 0
    
    @property
    def total_tokens(self) -> int:
        """Input plus output tokens; cache tokens are never part of the total."""
        return self.input_tokens + self.output_tokens
    
    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "TokenUsage":
        """Create from the ``usage`` object of a log line."""
        return cls(
            input_tokens=_as_int(data.get("input_tokens")),
            output_tokens=_as_int(data.get("output_tokens")),
            cache_read_tokens=_as_int(data.get("cache_read_input_tokens")),
            cache_creation_tokens=_as_int(data.get("cache_creation_input_tokens")),
        )


@dataclass(frozen=True)
class MessageRecord:
    """
    A single ``message`` entry in a session log.
    
    Only records that pass ``is_contributing`` count toward statistics.
    """
    
    role: str
    timestamp: str  # ISO format: YYYY-MM-DDTHH:MM:SS...
    content: Any = None
    model: str | None = None
    usage: TokenUsage | None = None
    uuid: str = ""
    parent_uuid: str | None = None
    record_type: str = "message"
    
    @property
    def date(self) -> str:
        """Get the date (YYYY-MM-DD) of this record."""
        return self.timestamp.split("T")[0]
    
    @property
    def month(self) -> str:
        """Get the month (YYYY-MM) of this record."""
        return self.date[:7]
    
    @property
    def is_contributing(self) -> bool:
        """True for assistant records carrying both a model and usage."""
        return self.role == "assistant" and bool(self.model) and self.usage is not None
    
    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "MessageRecord":
        """Create from a decoded log line."""
        usage = data.get("usage")
        model = data.get("model")
        timestamp = data.get("timestamp")
        role = data.get("role")
        return cls(
            role=role if isinstance(role, str) else "",
            timestamp=timestamp if isinstance(timestamp, str) else "",
            content=data.get("content"),
            model=model if isinstance(model, str) else None,
            usage=TokenUsage.from_dict(usage) if isinstance(usage, dict) else None,
            uuid=data.get("uuid") or "",
            parent_uuid=data.get("parentUuid"),
            record_type=data.get("type", "message"),
        )


@dataclass(frozen=True)
class SessionInfo:
    """
    Lightweight descriptor of one session log file.
    
    ``message_count`` is the raw number of non-empty lines, whatever they hold.
    """
    
    session_id: str
    modified: datetime
    message_count: int = 0
    summary: str = ""
    
    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "session_id": self.session_id,
            "modified": self.modified.isoformat(),
            "message_count": self.message_count,
            "summary": self.summary,
        }


@dataclass
class UsageTotals:
    """
    Running sums for one group while a reduction is in progress.
    
    Converted to a frozen stats record once the reduction finishes.
    """
    
    input_tokens: int = 0
    output_tokens: int = 0
    cache_read_tokens: int = 0
    cache_creation_tokens: int = 0
    total_tokens: int = 0
    messages: int = 0
    
    def add_record(self, record: MessageRecord) -> None:
        """Add a contributing record's usage to this group."""
        usage = record.usage
        self.input_tokens += usage.input_tokens
        self.output_tokens += usage.output_tokens
        self.cache_read_tokens += usage.cache_read_tokens
        self.cache_creation_tokens += usage.cache_creation_tokens
        self.total_tokens += usage.total_tokens
        self.messages += 1
    
    def to_dict(self) -> dict[str, int]:
        """Convert to dictionary."""
        return asdict(self)


@dataclass(frozen=True)
class DailyStats:
    """Usage for one (date, model) pair."""
    
    date: str  # YYYY-MM-DD
    model: str
    input_tokens: int = 0
    output_tokens: int = 0
    cache_read_tokens: int = 0
    cache_creation_tokens: int = 0
    total_tokens: int = 0
    messages: int = 0
    
    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return asdict(self)


@dataclass(frozen=True)
class MonthlyStats:
    """Usage for one (month, model) pair; ``days`` counts distinct active dates."""
    
    month: str  # YYYY-MM
    model: str
    input_tokens: int = 0
    output_tokens: int = 0
    cache_read_tokens: int = 0
    cache_creation_tokens: int = 0
    total_tokens: int = 0
    messages: int = 0
    days: int = 0
    
    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return asdict(self)


@dataclass(frozen=True)
class MonthlyReport:
    """
    Monthly stats plus the distinct-day count of each month across all models.
    
    ``month_total_days`` is a coarser grouping than ``MonthlyStats.days``:
    a date counts once for the month no matter how many models were used.
    """
    
    stats: list[MonthlyStats] = field(default_factory=list)
    month_total_days: dict[str, int] = field(default_factory=dict)
    
    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "stats": [s.to_dict() for s in self.stats],
            "month_total_days": dict(self.month_total_days),
        }


@dataclass(frozen=True)
class SessionStats:
    """Usage for one model within one session."""
    
    session_id: str
    model: str
    summary: str = NO_SUMMARY
    input_tokens: int = 0
    output_tokens: int = 0
    cache_read_tokens: int = 0
    cache_creation_tokens: int = 0
    total_tokens: int = 0
    messages: int = 0
    last_used: str = ""  # YYYY-MM-DD
    
    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return asdict(self)


@dataclass(frozen=True)
class SummaryStats:
    """Totals across a whole daily report."""
    
    total_days: int = 0
    total_tokens: int = 0
    total_input_tokens: int = 0
    total_output_tokens: int = 0
    total_cache_read_tokens: int = 0
    total_cache_creation_tokens: int = 0
    total_messages: int = 0
    models_used: list[str] = field(default_factory=list)
    date_range: tuple[str, str] = ("-", "-")
    
    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        data = asdict(self)
        data["date_range"] = {"start": self.date_range[0], "end": self.date_range[1]}
        return data


@dataclass(frozen=True)
class UsageReport:
    """All three statistic families computed from a single pass over the logs."""
    
    daily: list[DailyStats] = field(default_factory=list)
    monthly: MonthlyReport = field(default_factory=MonthlyReport)
    sessions: list[SessionStats] = field(default_factory=list)
    
    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "daily": [s.to_dict() for s in self.daily],
            "monthly": self.monthly.to_dict(),
            "sessions": [s.to_dict() for s in self.sessions],
        }
