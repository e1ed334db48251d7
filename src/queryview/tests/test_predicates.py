import pytest

from queryview.model import ErrorType, QueryState
from queryview.predicates import (
    DEFAULT_ERROR_TYPE_FILTERS,
    DEFAULT_STATE_FILTERS,
    ErrorTypeFilter,
    SortOrder,
    SortType,
    StateFilter,
    human_readable_state,
    progress_percentage,
    progress_title,
)

from .utils import make_query


@pytest.mark.parametrize(
    "state,expected",
    [
        (QueryState.QUEUED, {StateFilter.QUEUED}),
        (QueryState.PLANNING, {StateFilter.RUNNING}),
        (QueryState.RUNNING, {StateFilter.RUNNING}),
        (QueryState.FINISHING, {StateFilter.RUNNING}),
        (QueryState.FINISHED, {StateFilter.FINISHED}),
        (QueryState.FAILED, set()),
    ],
)
def test_state_filters(state, expected):
    query = make_query("q", state=state)
    assert {f for f in StateFilter if f(query)} == expected


def test_error_type_filters_need_failed_state():
    failed = make_query("q", state=QueryState.FAILED, error_type=ErrorType.EXTERNAL)
    assert ErrorTypeFilter.EXTERNAL(failed)
    assert not ErrorTypeFilter.INTERNAL_ERROR(failed)

    # An error type on a non-failed query is ignored
    running = make_query("q", state=QueryState.RUNNING, error_type=ErrorType.EXTERNAL)
    assert not ErrorTypeFilter.EXTERNAL(running)


def test_defaults():
    assert DEFAULT_STATE_FILTERS == {StateFilter.RUNNING, StateFilter.QUEUED}
    assert DEFAULT_ERROR_TYPE_FILTERS == {
        ErrorTypeFilter.INTERNAL_ERROR,
        ErrorTypeFilter.INSUFFICIENT_RESOURCES,
        ErrorTypeFilter.EXTERNAL,
    }


def test_sort_keys():
    query = make_query(
        "q",
        created=10,
        elapsed="2.00s",
        cpu="500.00ms",
        memory="1kB",
        cumulative_memory=42.0,
    )
    assert SortType.ELAPSED.key(query) == pytest.approx(2000.0)
    assert SortType.CPU.key(query) == pytest.approx(500.0)
    assert SortType.CURRENT_MEMORY.key(query) == 1024
    assert SortType.CUMULATIVE_MEMORY.key(query) == 42.0
    assert SortType.CREATED.key(make_query("a", created=10)) - SortType.CREATED.key(
        make_query("b", created=0)
    ) == pytest.approx(10_000.0)


def test_sort_keys_are_total():
    query = make_query("q", created=None, elapsed="??", cpu=None, memory="lots")
    for sort_type in SortType:
        assert sort_type.key(query) == 0.0


def test_sort_order():
    assert SortOrder.ASCENDING(3.0) == 3.0
    assert SortOrder.DESCENDING(3.0) == -3.0
    assert SortOrder.DESCENDING.flipped() == SortOrder.ASCENDING
    assert SortOrder.ASCENDING.flipped() == SortOrder.DESCENDING


def test_human_readable_state():
    query = make_query("q", state=QueryState.RUNNING)
    query.scheduled = True
    query.stats.total_drivers = 4
    assert human_readable_state(query) == "RUNNING"

    query.stats.fully_blocked = True
    query.stats.blocked_reasons = ["WAITING_FOR_MEMORY"]
    query.memory_pool = "reserved"
    assert human_readable_state(query) == "BLOCKED (WAITING_FOR_MEMORY) (RESERVED)"

    assert human_readable_state(make_query("q", state=QueryState.PLANNING)) == (
        "PLANNING"
    )


@pytest.mark.parametrize(
    "error_type,code,expected",
    [
        (ErrorType.USER_ERROR, None, "USER ERROR"),
        (ErrorType.USER_ERROR, "USER_CANCELED", "USER CANCELED"),
        (ErrorType.INTERNAL_ERROR, None, "INTERNAL ERROR"),
        (ErrorType.INSUFFICIENT_RESOURCES, None, "INSUFFICIENT RESOURCES"),
        (ErrorType.EXTERNAL, None, "EXTERNAL ERROR"),
        (None, None, "FAILED"),
    ],
)
def test_human_readable_failure(error_type, code, expected):
    query = make_query("q", state=QueryState.FAILED, error_type=error_type)
    query.error_code = code
    assert human_readable_state(query) == expected


def test_progress():
    query = make_query("q", state=QueryState.RUNNING)
    assert progress_percentage(query) == 100
    query.stats.progress_percentage = 41.6
    assert progress_percentage(query) == 42
    assert progress_title(query) == "RUNNING (42%)"

    finished = make_query("q", state=QueryState.FINISHED)
    finished.stats.progress_percentage = 41.6
    assert progress_percentage(finished) == 100
    assert progress_title(finished) == "FINISHED"
