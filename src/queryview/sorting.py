from typing import Iterable, List

from queryview.model import QueryInfo
from queryview.predicates import SortOrder, SortType


def sort_and_limit(
    records: Iterable[QueryInfo],
    sort_type: SortType,
    sort_order: SortOrder,
    max_count: int = 0,
) -> List[QueryInfo]:
    """Sorts the records and keeps at most `max_count` of them (0 = all)

    The sort is stable: records with equal keys keep their relative order.
    """
    ordered = sorted(records, key=lambda record: sort_order(sort_type.key(record)))
    if max_count != 0 and len(ordered) > max_count:
        del ordered[max_count:]
    return ordered
