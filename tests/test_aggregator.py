"""Tests for neousage.usage.aggregator."""

from collections import defaultdict
from datetime import datetime

import pytest

from neousage.usage.aggregator import (
    SessionUsage,
    UsageAggregator,
    aggregate_daily,
    aggregate_monthly,
    aggregate_sessions,
    calculate_summary,
    iter_contributing,
)
from neousage.usage.locator import SessionLocator
from neousage.usage.models import DailyStats, MessageRecord, SessionInfo, TokenUsage
from neousage.usage.scanner import SessionScanner
from tests.fixtures.session_test_data import (
    NON_CONTRIBUTING,
    SESSION_A,
    SESSION_B,
    assistant,
    message,
    write_session,
)


def _record(timestamp, model, input_tokens=0, output_tokens=0, role="assistant"):
    return MessageRecord(
        role=role,
        timestamp=timestamp,
        model=model,
        usage=TokenUsage(input_tokens=input_tokens, output_tokens=output_tokens),
    )


def _usage(session_id, records, summary=""):
    info = SessionInfo(session_id=session_id, modified=datetime(2024, 1, 1), summary=summary)
    return SessionUsage(session=info, records=records)


@pytest.fixture
def projects(tmp_path):
    """Projects tree holding the two reference sessions."""
    root = tmp_path / "projects"
    write_session(root, "proj-a/session-a.jsonl", SESSION_A, mtime=1_704_100_000)
    write_session(root, "proj-b/sub/session-b.jsonl", SESSION_B, mtime=1_704_200_000)
    return root


@pytest.fixture
def sessions(projects):
    return SessionScanner(projects).list_sessions()


@pytest.fixture
def aggregator(projects):
    return UsageAggregator(projects)


# ========== Daily ==========

class TestDaily:
    def test_reference_scenario(self, aggregator, sessions):
        stats = aggregator.analyze_daily(sessions)
        assert stats == [
            DailyStats(date="2024-01-02", model="gpt-y", input_tokens=1, output_tokens=1,
                       total_tokens=2, messages=1),
            DailyStats(date="2024-01-01", model="gpt-x", input_tokens=30, output_tokens=10,
                       total_tokens=40, messages=2),
        ]
    
    def test_cache_tokens_summed_but_not_in_total(self):
        usages = [_usage("s", [])]
        usages[0].records.append(MessageRecord(
            role="assistant", timestamp="2024-01-01T00:00:00Z", model="m",
            usage=TokenUsage(input_tokens=5, output_tokens=5, cache_read_tokens=100, cache_creation_tokens=50),
        ))
        [stat] = aggregate_daily(usages)
        assert stat.total_tokens == 10
        assert stat.cache_read_tokens == 100
        assert stat.cache_creation_tokens == 50
    
    def test_same_date_different_models_are_separate_rows(self):
        usages = [_usage("s", [
            _record("2024-01-01T01:00:00Z", "a", 1, 1),
            _record("2024-01-01T02:00:00Z", "b", 2, 2),
            _record("2024-01-01T03:00:00Z", "a", 3, 3),
        ])]
        stats = aggregate_daily(usages)
        assert [(s.model, s.input_tokens, s.messages) for s in stats] == [("a", 4, 2), ("b", 2, 1)]
    
    def test_ties_keep_first_seen_order(self):
        usages = [
            _usage("first", [_record("2024-01-01T00:00:00Z", "zeta")]),
            _usage("second", [_record("2024-01-01T00:00:00Z", "alpha"), _record("2024-01-02T00:00:00Z", "beta")]),
        ]
        stats = aggregate_daily(usages)
        assert [(s.date, s.model) for s in stats] == [
            ("2024-01-02", "beta"),
            ("2024-01-01", "zeta"),
            ("2024-01-01", "alpha"),
        ]
    
    def test_sums_per_model_match_raw_records(self):
        records = [
            _record(f"2024-0{month}-{day:02d}T12:00:00Z", model, day, month)
            for month in (1, 2)
            for day in (1, 2, 15, 28)
            for model in ("a", "b")
        ]
        usages = [_usage("s1", records[:7]), _usage("s2", records[7:])]
        
        per_model = defaultdict(lambda: [0, 0, 0])
        for stat in aggregate_daily(usages):
            per_model[stat.model][0] += stat.input_tokens
            per_model[stat.model][1] += stat.output_tokens
            per_model[stat.model][2] += stat.messages
        
        for model in ("a", "b"):
            raw = [r for r in records if r.model == model]
            assert per_model[model] == [
                sum(r.usage.input_tokens for r in raw),
                sum(r.usage.output_tokens for r in raw),
                len(raw),
            ]


# ========== Monthly ==========

class TestMonthly:
    def test_groups_by_month_and_model(self):
        usages = [_usage("s", [
            _record("2024-01-05T00:00:00Z", "a", 1, 1),
            _record("2024-01-05T10:00:00Z", "a", 1, 1),
            _record("2024-01-20T00:00:00Z", "a", 1, 1),
            _record("2024-01-21T00:00:00Z", "b", 5, 5),
            _record("2024-02-01T00:00:00Z", "a", 7, 7),
        ])]
        report = aggregate_monthly(usages)
        
        assert [(s.month, s.model, s.messages, s.days, s.total_tokens) for s in report.stats] == [
            ("2024-02", "a", 1, 1, 14),
            ("2024-01", "a", 3, 2, 6),
            ("2024-01", "b", 1, 1, 10),
        ]
        assert report.month_total_days == {"2024-01": 3, "2024-02": 1}
    
    def test_model_days_never_exceed_month_total_days(self, aggregator, sessions):
        report = aggregator.analyze_monthly(sessions)
        assert report.stats
        for stat in report.stats:
            assert stat.days <= report.month_total_days[stat.month]
    
    def test_month_total_days_counts_shared_dates_once(self):
        usages = [
            _usage("s1", [_record("2024-03-01T00:00:00Z", "a")]),
            _usage("s2", [_record("2024-03-01T05:00:00Z", "b"), _record("2024-03-02T00:00:00Z", "b")]),
        ]
        report = aggregate_monthly(usages)
        assert report.month_total_days == {"2024-03": 2}
        assert {s.model: s.days for s in report.stats} == {"a": 1, "b": 2}


# ========== Sessions ==========

class TestSessions:
    def test_one_row_per_session_and_model(self, aggregator, sessions):
        stats = aggregator.analyze_sessions(sessions)
        assert [(s.session_id, s.model, s.total_tokens, s.last_used) for s in stats] == [
            ("session-b", "gpt-y", 2, "2024-01-02"),
            ("session-a", "gpt-x", 40, "2024-01-01"),
        ]
        assert stats[0].summary == "Hello there"
        assert stats[1].summary == "Fix the bug"
    
    def test_last_used_is_latest_timestamp(self):
        usages = [_usage("s", [
            _record("2024-01-10T00:00:00Z", "a"),
            _record("2024-01-31T23:00:00Z", "a"),
            _record("2024-01-15T00:00:00Z", "a"),
            _record("2024-01-05T00:00:00Z", "b"),
        ])]
        stats = aggregate_sessions(usages)
        assert [(s.model, s.last_used, s.messages) for s in stats] == [("a", "2024-01-31", 3), ("b", "2024-01-05", 1)]
    
    def test_missing_summary_uses_fallback(self):
        stats = aggregate_sessions([_usage("s", [_record("2024-01-01T00:00:00Z", "a")])])
        assert stats[0].summary == "No summary available"
    
    def test_sessions_without_usage_emit_no_rows(self):
        usages = [
            _usage("empty", []),
            _usage("chatty", [_record("2024-01-01T00:00:00Z", "a", role="user")]),
        ]
        assert aggregate_sessions(usages) == []


# ========== Filtering and traversal ==========

class TestContributingRecords:
    def test_non_contributing_records_add_nothing(self, tmp_path):
        write_session(tmp_path, "s.jsonl", NON_CONTRIBUTING)
        aggregator = UsageAggregator(tmp_path)
        report = aggregator.analyze(SessionScanner(tmp_path).list_sessions())
        assert report.daily == []
        assert report.monthly.stats == []
        assert report.monthly.month_total_days == {}
        assert report.sessions == []
    
    def test_iter_contributing_filters(self):
        usages = [_usage("s", [
            _record("2024-01-01T00:00:00Z", "a"),
            _record("2024-01-01T00:00:00Z", "a", role="user"),
            MessageRecord(role="assistant", timestamp="2024-01-01T00:00:00Z", model="a"),
        ])]
        assert len(list(iter_contributing(usages))) == 1
    
    def test_malformed_line_does_not_drop_neighbours(self, tmp_path):
        write_session(tmp_path, "s.jsonl", [
            assistant("2024-01-01T00:00:00Z", "gpt-x", 10, 5),
            "{this is not json",
            assistant("2024-01-01T00:00:01Z", "gpt-x", 20, 5),
        ])
        sessions = SessionScanner(tmp_path).list_sessions()
        assert sessions[0].message_count == 3
        
        [stat] = UsageAggregator(tmp_path).analyze_daily(sessions)
        assert (stat.input_tokens, stat.output_tokens, stat.messages) == (30, 10, 2)
    
    @pytest.mark.parametrize("bad_line", [
        '{"type": "message", "role": "assistant", "model": "gpt-x",'
        ' "timestamp": "2024-01-01T00:00:02Z", "usage": {"input_tokens": NaN, "output_tokens": 1}}',
        '{"type": "message", "role": "assistant", "model": "gpt-x",'
        ' "timestamp": "2024-01-01T00:00:02Z", "usage": {"input_tokens": Infinity, "output_tokens": 1}}',
        '{"type": "message", "role": "assistant", "model": "gpt-x",'
        ' "timestamp": "2024-01-01T00:00:02Z", "usage": {"input_tokens": -Infinity, "output_tokens": 1}}',
        "[" * 100_000,
    ])
    def test_unparseable_line_is_skipped_not_fatal(self, tmp_path, bad_line):
        write_session(tmp_path, "s.jsonl", [
            assistant("2024-01-01T00:00:00Z", "gpt-x", 10, 5),
            bad_line,
            assistant("2024-01-01T00:00:01Z", "gpt-x", 20, 5),
        ])
        write_session(tmp_path, "other.jsonl", SESSION_B)
        sessions = SessionScanner(tmp_path).list_sessions()
        
        stats = {s.model: s for s in UsageAggregator(tmp_path).analyze_daily(sessions)}
        assert (stats["gpt-x"].input_tokens, stats["gpt-x"].output_tokens, stats["gpt-x"].messages) == (30, 10, 2)
        assert stats["gpt-y"].total_tokens == 2
    
    def test_overflowing_counter_contributes_zero(self, tmp_path):
        write_session(tmp_path, "s.jsonl", [
            assistant("2024-01-01T00:00:00Z", "gpt-x", 10, 5),
            '{"type": "message", "role": "assistant", "model": "gpt-x",'
            ' "timestamp": "2024-01-01T00:00:01Z", "usage": {"input_tokens": 1e400, "output_tokens": 4}}',
        ])
        sessions = SessionScanner(tmp_path).list_sessions()
        
        [stat] = UsageAggregator(tmp_path).analyze_daily(sessions)
        assert (stat.input_tokens, stat.output_tokens, stat.messages) == (10, 9, 2)
    
    def test_collect_keeps_only_contributing_records(self, aggregator, sessions):
        usages = aggregator.collect(sessions)
        assert [u.session.session_id for u in usages] == ["session-b", "session-a"]
        assert [len(u.records) for u in usages] == [1, 2]
    
    def test_stale_descriptor_degrades_to_empty(self, aggregator):
        ghost = SessionInfo(session_id="ghost", modified=datetime(2024, 1, 1))
        usages = aggregator.collect([ghost])
        assert usages[0].records == []
    
    def test_locator_is_built_once_across_reports(self, projects, sessions):
        locator = SessionLocator(projects)
        aggregator = UsageAggregator(projects, locator=locator)
        aggregator.analyze_daily(sessions)
        write_session(projects, "proj-c/late.jsonl", SESSION_B)
        late = SessionInfo(session_id="late", modified=datetime(2024, 1, 1))
        # The cache predates the new file, so it is not found
        assert aggregator.analyze_daily([late]) == []


# ========== Whole-tree behaviour ==========

class TestAnalyze:
    def test_single_pass_matches_individual_reports(self, aggregator, sessions):
        report = aggregator.analyze(sessions)
        assert report.daily == aggregator.analyze_daily(sessions)
        assert report.monthly == aggregator.analyze_monthly(sessions)
        assert report.sessions == aggregator.analyze_sessions(sessions)
    
    def test_idempotent(self, projects):
        first = UsageAggregator(projects).analyze(SessionScanner(projects).list_sessions())
        second = UsageAggregator(projects).analyze(SessionScanner(projects).list_sessions())
        assert first.to_dict() == second.to_dict()
    
    @pytest.mark.parametrize("subdir", ["missing", "empty"])
    def test_absent_or_empty_root(self, tmp_path, subdir):
        root = tmp_path / subdir
        if subdir == "empty":
            root.mkdir()
        sessions = SessionScanner(root).list_sessions()
        report = UsageAggregator(root).analyze(sessions)
        assert sessions == []
        assert report.daily == []
        assert report.monthly.stats == []
        assert report.sessions == []
    
    def test_total_is_input_plus_output_everywhere(self, aggregator, sessions):
        report = aggregator.analyze(sessions)
        for stat in [*report.daily, *report.monthly.stats, *report.sessions]:
            assert stat.total_tokens == stat.input_tokens + stat.output_tokens


# ========== Summary ==========

class TestCalculateSummary:
    def test_totals(self, aggregator, sessions):
        summary = calculate_summary(aggregator.analyze_daily(sessions))
        assert summary.total_days == 2
        assert summary.total_tokens == 42
        assert summary.total_input_tokens == 31
        assert summary.total_output_tokens == 11
        assert summary.total_messages == 3
        assert summary.models_used == ["gpt-x", "gpt-y"]
        assert summary.date_range == ("2024-01-01", "2024-01-02")
    
    def test_empty(self):
        summary = calculate_summary([])
        assert summary.total_days == 0
        assert summary.models_used == []
        assert summary.to_dict()["date_range"] == {"start": "-", "end": "-"}
    
    def test_user_messages_do_not_affect_totals(self, tmp_path):
        write_session(tmp_path, "s.jsonl", [
            message("user", "2024-05-01T00:00:00Z", content="hi"),
            assistant("2024-05-01T00:00:01Z", "m", 3, 4),
        ])
        daily = UsageAggregator(tmp_path).analyze_daily(SessionScanner(tmp_path).list_sessions())
        assert calculate_summary(daily).total_messages == 1
