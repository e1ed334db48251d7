"""Named predicates and sort keys over query records

Filters and sort types are enumerations; the functions they stand for are
kept in lookup tables so that the enumeration values can be stored in the
configuration and compared by identity in the view state.
"""

import enum
import logging
from typing import Callable, Dict, FrozenSet

from queryview.exceptions import UnitParseError
from queryview.model import ErrorType, QueryInfo, QueryState
from queryview.units import parse_data_size, parse_duration

logger = logging.getLogger("queryview.predicates")

Predicate = Callable[[QueryInfo], bool]
KeyFunction = Callable[[QueryInfo], float]


class StateFilter(enum.Enum):
    RUNNING = "RUNNING"
    QUEUED = "QUEUED"
    FINISHED = "FINISHED"

    def __call__(self, record: QueryInfo) -> bool:
        return STATE_PREDICATES[self](record)

    @property
    def label(self) -> str:
        return self.value.capitalize()


STATE_PREDICATES: Dict[StateFilter, Predicate] = {
    StateFilter.RUNNING: lambda q: q.state.running(),
    StateFilter.QUEUED: lambda q: q.state == QueryState.QUEUED,
    StateFilter.FINISHED: lambda q: q.state == QueryState.FINISHED,
}


class ErrorTypeFilter(enum.Enum):
    """Selects failed queries with a given error type"""

    USER_ERROR = "USER_ERROR"
    INTERNAL_ERROR = "INTERNAL_ERROR"
    INSUFFICIENT_RESOURCES = "INSUFFICIENT_RESOURCES"
    EXTERNAL = "EXTERNAL"

    def __call__(self, record: QueryInfo) -> bool:
        return (
            record.state == QueryState.FAILED
            and record.error_type == ErrorType(self.value)
        )

    @property
    def label(self) -> str:
        return ERROR_TYPE_LABELS[self]


ERROR_TYPE_LABELS = {
    ErrorTypeFilter.INTERNAL_ERROR: "Internal Error",
    ErrorTypeFilter.EXTERNAL: "External Error",
    ErrorTypeFilter.INSUFFICIENT_RESOURCES: "Resources Error",
    ErrorTypeFilter.USER_ERROR: "User Error",
}


def _sort_key(parser, attribute: str) -> KeyFunction:
    """Builds a total sort key: unparsable values sort as zero"""

    def key(record: QueryInfo) -> float:
        value = getattr(record.stats, attribute)
        try:
            return float(parser(value))
        except UnitParseError:
            logger.debug(
                "Cannot parse %s=%r of query %s", attribute, value, record.query_id
            )
            return 0.0

    return key


def _create_time_key(record: QueryInfo) -> float:
    if record.stats.create_time is None:
        return 0.0
    return record.stats.create_time.timestamp() * 1000.0


class SortType(enum.Enum):
    CREATED = "CREATED"
    ELAPSED = "ELAPSED"
    EXECUTION = "EXECUTION"
    CPU = "CPU"
    CUMULATIVE_MEMORY = "CUMULATIVE_MEMORY"
    CURRENT_MEMORY = "CURRENT_MEMORY"

    def key(self, record: QueryInfo) -> float:
        return SORT_KEYS[self](record)

    @property
    def label(self) -> str:
        return SORT_LABELS[self]


SORT_KEYS: Dict[SortType, KeyFunction] = {
    SortType.CREATED: _create_time_key,
    SortType.ELAPSED: _sort_key(parse_duration, "elapsed_time"),
    SortType.EXECUTION: _sort_key(parse_duration, "execution_time"),
    SortType.CPU: _sort_key(parse_duration, "total_cpu_time"),
    SortType.CUMULATIVE_MEMORY: lambda q: float(q.stats.cumulative_user_memory),
    SortType.CURRENT_MEMORY: _sort_key(
        parse_data_size, "user_memory_reservation"
    ),
}

SORT_LABELS = {
    SortType.CREATED: "Creation Time",
    SortType.ELAPSED: "Elapsed Time",
    SortType.CPU: "CPU Time",
    SortType.EXECUTION: "Execution Time",
    SortType.CURRENT_MEMORY: "Current Memory",
    SortType.CUMULATIVE_MEMORY: "Cumulative User Memory",
}


class SortOrder(enum.Enum):
    ASCENDING = "ASCENDING"
    DESCENDING = "DESCENDING"

    def __call__(self, value: float) -> float:
        return value if self == SortOrder.ASCENDING else -value

    def flipped(self) -> "SortOrder":
        if self == SortOrder.DESCENDING:
            return SortOrder.ASCENDING
        return SortOrder.DESCENDING

    @property
    def arrow(self) -> str:
        return "▲" if self == SortOrder.ASCENDING else "▼"


DEFAULT_STATE_FILTERS: FrozenSet[StateFilter] = frozenset(
    {StateFilter.RUNNING, StateFilter.QUEUED}
)
DEFAULT_ERROR_TYPE_FILTERS: FrozenSet[ErrorTypeFilter] = frozenset(
    {
        ErrorTypeFilter.INTERNAL_ERROR,
        ErrorTypeFilter.INSUFFICIENT_RESOURCES,
        ErrorTypeFilter.EXTERNAL,
    }
)

#: Choices offered for the reorder interval (seconds, 0 = never reorder)
REORDER_INTERVALS = [
    (1.0, "1s"),
    (5.0, "5s"),
    (10.0, "10s"),
    (30.0, "30s"),
    (0.0, "Off"),
]

#: Choices offered for the maximum number of displayed queries (0 = all)
MAX_DISPLAYED_CHOICES = [
    (20, "20 queries"),
    (50, "50 queries"),
    (100, "100 queries"),
    (0, "All queries"),
]


def human_readable_state(record: QueryInfo) -> str:
    """State as shown to users (and matched by the search box)"""
    if record.state == QueryState.RUNNING:
        stats = record.stats
        if (
            record.scheduled
            and stats.total_drivers > 0
            and stats.running_drivers >= 0
        ):
            title = "RUNNING"
            if stats.fully_blocked:
                title = "BLOCKED"
                if stats.blocked_reasons:
                    title += " (" + ", ".join(stats.blocked_reasons) + ")"
            if record.memory_pool == "reserved":
                title += " (RESERVED)"
            return title

    if record.state == QueryState.FAILED:
        if record.error_type == ErrorType.USER_ERROR:
            if record.error_code == "USER_CANCELED":
                return "USER CANCELED"
            return "USER ERROR"
        if record.error_type == ErrorType.INTERNAL_ERROR:
            return "INTERNAL ERROR"
        if record.error_type == ErrorType.INSUFFICIENT_RESOURCES:
            return "INSUFFICIENT RESOURCES"
        if record.error_type == ErrorType.EXTERNAL:
            return "EXTERNAL ERROR"

    return record.state.value


def progress_percentage(record: QueryInfo) -> int:
    percentage = record.stats.progress_percentage
    if record.state != QueryState.RUNNING or not percentage:
        return 100
    return round(percentage)


def progress_title(record: QueryInfo) -> str:
    if record.stats.progress_percentage and record.state == QueryState.RUNNING:
        return f"{human_readable_state(record)} ({progress_percentage(record)}%)"
    return human_readable_state(record)
