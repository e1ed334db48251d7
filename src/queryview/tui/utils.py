"""Utility functions for the TUI"""

from typing import List, Optional

from rich.text import Text

from queryview.exceptions import UnitParseError
from queryview.model import QueryInfo, QueryState
from queryview.predicates import progress_title
from queryview.text import strip_query_text_whitespace
from queryview.units import (
    format_count,
    format_data_size,
    format_duration,
    parse_duration,
)
from queryview.viewmodel import ViewStatus

#: Width of the query text column
QUERY_TEXT_WIDTH = 60


def get_state_style(record: QueryInfo) -> str:
    """Rich style used for the state of a query"""
    if record.state == QueryState.QUEUED:
        return "dim"
    if record.state == QueryState.FINISHED:
        return "blue"
    if record.state == QueryState.FAILED:
        return "red"
    if record.stats.fully_blocked:
        return "yellow"
    return "green"


def get_state_icon(record: QueryInfo) -> str:
    if record.state == QueryState.QUEUED:
        return "⌛"
    elif record.state == QueryState.FINISHED:
        return "✅"
    elif record.state == QueryState.FAILED:
        return "❌"
    elif record.stats.fully_blocked:
        return "⏸"
    return "▶"


def duration_cell(value: Optional[str]) -> str:
    """Duration in the largest fitting unit (raw text if it cannot be parsed)"""
    if not value:
        return "-"
    try:
        return format_duration(parse_duration(value))
    except UnitParseError:
        return value


def format_progress(record: QueryInfo) -> str:
    """Completed/running/queued counters of the active progress model"""
    parts = []
    for name, counts in record.progress_counts().items():
        parts.append(
            f"{name[0]}:{format_count(counts.completed)}"
            f"/{format_count(counts.running)}/{format_count(counts.queued)}"
        )
    return " ".join(parts)


def query_row(record: QueryInfo) -> List:
    """Cells of the queries table for one record"""
    user = record.session.user or ""
    if record.session.principal and record.session.principal != user:
        user = f"{user} ({record.session.principal})"

    text = strip_query_text_whitespace(record.query).replace("\n", " ")
    if len(text) > QUERY_TEXT_WIDTH:
        text = text[: QUERY_TEXT_WIDTH - 1] + "…"

    return [
        record.query_id,
        Text(
            f"{get_state_icon(record)} {progress_title(record)}",
            style=get_state_style(record),
        ),
        user,
        record.session.source or "",
        duration_cell(record.stats.elapsed_time),
        duration_cell(record.stats.total_cpu_time),
        record.stats.user_memory_reservation or "-",
        format_data_size(record.stats.cumulative_user_memory / 1000.0),
        format_progress(record),
        text,
    ]


def placeholder_label(status: ViewStatus, error: Optional[str] = None) -> str:
    """Text shown instead of the table when no query is displayed"""
    if status == ViewStatus.LOADING:
        return "Loading..."
    if status == ViewStatus.EMPTY:
        return "No queries"
    if status == ViewStatus.NO_MATCHES:
        return "No queries matched filters"
    if status == ViewStatus.LOAD_ERROR:
        return f"Could not load queries: {error}"
    return ""
