"""Rich table rendering for usage reports."""

from rich.console import Console
from rich.markup import escape
from rich.table import Table

from neousage.usage.models import DailyStats, MonthlyReport, MonthlyStats, SessionStats, SummaryStats


BRAND = "bold cyan"


def format_number(num: int) -> str:
    """Compact token count: 0 -> '-', 12345 -> '12.35K', 2500000 -> '2.50M'."""
    if num == 0:
        return "-"
    if num >= 1_000_000:
        return f"{num / 1_000_000:.2f}M"
    if num >= 1_000:
        return f"{num / 1_000:.2f}K"
    return str(num)


def shorten(text: str, width: int) -> str:
    """Cut ``text`` to ``width`` characters with a '..' marker."""
    return text[:width] + ".." if len(text) > width else text


def _group(stats: list, key: str) -> dict[str, list]:
    """Group rows by an attribute, keeping first-seen order."""
    groups: dict[str, list] = {}
    for stat in stats:
        groups.setdefault(getattr(stat, key), []).append(stat)
    return groups


def _usage_table(extra_columns: tuple[str, ...] = ()) -> Table:
    table = Table(header_style=BRAND)
    table.add_column("Model", style="cyan", max_width=45)
    table.add_column("Input", justify="right")
    table.add_column("Output", justify="right")
    table.add_column("Total", justify="right")
    table.add_column("Messages", justify="right")
    for column in extra_columns:
        table.add_column(column, justify="right")
    return table


def _usage_cells(stat: DailyStats | MonthlyStats, model_width: int) -> list[str]:
    return [
        escape(shorten(stat.model, model_width)),
        format_number(stat.input_tokens),
        format_number(stat.output_tokens),
        format_number(stat.total_tokens),
        str(stat.messages),
    ]


def _total_cells(stats: list[DailyStats] | list[MonthlyStats]) -> list[str]:
    return [
        "[bold]Total[/bold]",
        f"[bold]{format_number(sum(s.input_tokens for s in stats))}[/bold]",
        f"[bold]{format_number(sum(s.output_tokens for s in stats))}[/bold]",
        f"[bold]{format_number(sum(s.total_tokens for s in stats))}[/bold]",
        f"[bold]{sum(s.messages for s in stats)}[/bold]",
    ]


def print_daily_stats(console: Console, stats: list[DailyStats], summary: SummaryStats | None = None) -> None:
    """Print one table per date, newest first, with a total row for multi-model days."""
    console.print(f"\n[{BRAND}]📅 Daily Usage Statistics[/{BRAND}]")
    
    if not stats:
        console.print("[yellow]No usage data found.[/yellow]")
        return
    
    by_date = _group(stats, "date")
    for date in sorted(by_date, reverse=True):
        day_stats = by_date[date]
        console.print(f"\n[bold yellow]{date}[/bold yellow]")
        
        table = _usage_table()
        for stat in day_stats:
            table.add_row(*_usage_cells(stat, 43))
        if len(day_stats) > 1:
            table.add_row(*_total_cells(day_stats))
        
        console.print(table)
    
    if summary is not None:
        _print_summary(console, summary)


def print_monthly_stats(console: Console, report: MonthlyReport) -> None:
    """Print one table per month, newest first, titled with the month's active days."""
    console.print(f"\n[{BRAND}]📆 Monthly Usage Statistics[/{BRAND}]")
    
    if not report.stats:
        console.print("[yellow]No usage data found.[/yellow]")
        return
    
    by_month = _group(report.stats, "month")
    for month in sorted(by_month, reverse=True):
        month_stats = by_month[month]
        total_days = report.month_total_days.get(month, 0)
        console.print(f"\n[bold yellow]{month} ({total_days} days)[/bold yellow]")
        
        table = _usage_table(("Days",))
        for stat in month_stats:
            table.add_row(*_usage_cells(stat, 38), str(stat.days))
        if len(month_stats) > 1:
            table.add_row(*_total_cells(month_stats), f"[bold]{total_days}[/bold]")
        
        console.print(table)


def print_session_stats(console: Console, stats: list[SessionStats]) -> None:
    """Print a single table of per-session usage followed by a totals line."""
    console.print(f"\n[{BRAND}]💬 Session-based Usage Statistics[/{BRAND}]")
    
    if not stats:
        console.print("[yellow]No usage data found.[/yellow]")
        return
    
    table = Table(header_style=BRAND)
    table.add_column("Last Used", no_wrap=True)
    table.add_column("Session", style="cyan", max_width=35)
    table.add_column("Model", max_width=30)
    table.add_column("Input", justify="right")
    table.add_column("Output", justify="right")
    table.add_column("Total", justify="right")
    table.add_column("Messages", justify="right")
    
    for stat in stats:
        table.add_row(
            stat.last_used,
            escape(shorten(stat.summary, 33)),
            escape(shorten(stat.model, 28)),
            format_number(stat.input_tokens),
            format_number(stat.output_tokens),
            format_number(stat.total_tokens),
            str(stat.messages),
        )
    
    console.print(table)
    
    total_tokens = sum(s.total_tokens for s in stats)
    total_messages = sum(s.messages for s in stats)
    unique_sessions = len({s.session_id for s in stats})
    console.print(
        f"\n[dim]Total: {unique_sessions} sessions, {total_messages} messages, "
        f"{format_number(total_tokens)} tokens[/dim]"
    )


def _print_summary(console: Console, summary: SummaryStats) -> None:
    """Print overall totals as a two-column grid."""
    table = Table.grid(padding=(0, 2))
    table.add_column(style="bold")
    table.add_column(justify="right")
    
    start, end = summary.date_range
    table.add_row("Date Range:", f"{start} → {end}")
    table.add_row("Active Days:", str(summary.total_days))
    table.add_row("Input Tokens:", f"{summary.total_input_tokens:,}")
    table.add_row("Output Tokens:", f"{summary.total_output_tokens:,}")
    table.add_row("Cache Read Tokens:", f"{summary.total_cache_read_tokens:,}")
    table.add_row("Cache Creation Tokens:", f"{summary.total_cache_creation_tokens:,}")
    table.add_row("Total Tokens:", f"[bold]{summary.total_tokens:,}[/bold]")
    table.add_row("Messages:", str(summary.total_messages))
    table.add_row("Models:", escape(", ".join(summary.models_used)))
    
    console.print(f"\n[{BRAND}]Summary[/{BRAND}]")
    console.print(table)
