"""Merging of a freshly fetched collection into the displayed list

Polls are frequent, and re-sorting the whole list on each of them would
reshuffle rows under the user's eyes. Between two reorders, rows that are
already displayed keep their position (their statistics are refreshed) and
newly admitted rows are appended. A full re-filter and re-sort (a *reorder*)
only happens once the reorder interval has elapsed, or when the user changes
the filters or the sort.
"""

import enum
import logging
from typing import Dict, Iterable, List, Sequence

from queryview.filtering import ViewCriteria, filter_records
from queryview.model import QueryInfo
from queryview.sorting import sort_and_limit

logger = logging.getLogger("queryview.reconcile")


class ReconcileMode(enum.Enum):
    #: Keep the order of displayed rows, append new ones
    INCREMENTAL = 0

    #: Re-filter and re-sort everything
    REORDER = 1


def choose_mode(
    now: float, last_reorder: float, reorder_interval: float
) -> ReconcileMode:
    """Decides the mode of a refresh cycle

    A reorder interval of 0 disables reordering.
    """
    if reorder_interval != 0 and (now - last_reorder) >= reorder_interval:
        return ReconcileMode.REORDER
    return ReconcileMode.INCREMENTAL


def reconcile(
    previous: Sequence[QueryInfo],
    fresh: Iterable[QueryInfo],
    criteria: ViewCriteria,
    max_displayed: int,
    mode: ReconcileMode,
) -> List[QueryInfo]:
    """Computes the next displayed list

    Args:
        previous: The currently displayed records, in display order
        fresh: The complete collection just fetched (any order)
        criteria: Current filters, search text and sort
        max_displayed: Maximum number of displayed records (0 = unbounded)
        mode: Whether to keep the current order or to reorder everything

    Records of `previous` that are still in `fresh` are replaced by their
    fresh version. In incremental mode they are not filtered again, so a
    record that stopped matching stays visible until the next reorder.
    """
    lookup: Dict[str, QueryInfo] = {record.query_id: record for record in fresh}

    updated = []
    for old in previous:
        record = lookup.pop(old.query_id, None)
        if record is not None:
            updated.append(record)

    # What remains was either never displayed or dropped out of the view
    new_records = filter_records(lookup.values(), criteria)

    if mode == ReconcileMode.REORDER:
        combined = filter_records(updated, criteria) + new_records
        combined = sort_and_limit(combined, criteria.sort_type, criteria.sort_order)
    else:
        combined = updated + sort_and_limit(
            new_records, criteria.sort_type, criteria.sort_order
        )

    logger.debug(
        "%s refresh: %d kept, %d new, %d displayed",
        mode.name.lower(),
        len(updated),
        len(new_records),
        len(combined),
    )

    if max_displayed != 0 and len(combined) > max_displayed:
        del combined[max_displayed:]
    return combined


def rederive(
    records: Iterable[QueryInfo], criteria: ViewCriteria, max_displayed: int
) -> List[QueryInfo]:
    """Full recompute of the displayed list (used after a user action)"""
    return sort_and_limit(
        filter_records(records, criteria),
        criteria.sort_type,
        criteria.sort_order,
        max_displayed,
    )
