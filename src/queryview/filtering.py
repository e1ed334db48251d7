"""Inclusion test combining state filters, error filters and search text"""

from dataclasses import dataclass, field
from typing import AbstractSet, Iterable, List

from queryview.model import QueryInfo
from queryview.predicates import (
    DEFAULT_ERROR_TYPE_FILTERS,
    DEFAULT_STATE_FILTERS,
    ErrorTypeFilter,
    SortOrder,
    SortType,
    StateFilter,
    human_readable_state,
)


@dataclass(frozen=True)
class ViewCriteria:
    """Snapshot of the user choices that decide what is shown and in which order"""

    state_filters: AbstractSet[StateFilter] = field(
        default_factory=lambda: DEFAULT_STATE_FILTERS
    )
    error_type_filters: AbstractSet[ErrorTypeFilter] = field(
        default_factory=lambda: DEFAULT_ERROR_TYPE_FILTERS
    )
    search_text: str = ""
    sort_type: SortType = SortType.CREATED
    sort_order: SortOrder = SortOrder.DESCENDING


def _search_fields(record: QueryInfo) -> Iterable[str]:
    yield record.query_id
    yield human_readable_state(record)
    yield record.query
    if record.session.user:
        yield record.session.user
    if record.session.source:
        yield record.session.source
    if record.resource_group_id:
        yield ".".join(record.resource_group_id)


def matches(
    record: QueryInfo,
    state_filters: AbstractSet[StateFilter],
    error_type_filters: AbstractSet[ErrorTypeFilter],
    search_text: str,
) -> bool:
    """Returns True if the record should be displayed

    The record must be selected by at least one state or error type filter.
    A non-empty search text must then be found (case-insensitively) in one of
    the id, displayed state, query text, user, source or resource group.
    """
    if not any(f(record) for f in state_filters) and not any(
        f(record) for f in error_type_filters
    ):
        return False

    if search_text == "":
        return True

    term = search_text.lower()
    return any(term in value.lower() for value in _search_fields(record))


def filter_records(
    records: Iterable[QueryInfo], criteria: ViewCriteria
) -> List[QueryInfo]:
    return [
        record
        for record in records
        if matches(
            record,
            criteria.state_filters,
            criteria.error_type_filters,
            criteria.search_text,
        )
    ]
