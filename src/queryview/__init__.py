"""Live, filterable and sortable view over a polled list of queries"""

from .exceptions import (
    QueryViewError,
    TransportFailure,
    MalformedRecordError,
    UnitParseError,
    ConfigurationError,
)
from .model import QueryInfo, QueryState, ErrorType
from .predicates import StateFilter, ErrorTypeFilter, SortType, SortOrder
from .filtering import ViewCriteria, matches, filter_records
from .sorting import sort_and_limit
from .reconcile import ReconcileMode, choose_mode, reconcile, rederive
from .viewmodel import QueryListViewModel, ViewState, ViewStatus

__version__ = "0.1.0"

__all__ = [
    "QueryViewError",
    "TransportFailure",
    "MalformedRecordError",
    "UnitParseError",
    "ConfigurationError",
    "QueryInfo",
    "QueryState",
    "ErrorType",
    "StateFilter",
    "ErrorTypeFilter",
    "SortType",
    "SortOrder",
    "ViewCriteria",
    "matches",
    "filter_records",
    "sort_and_limit",
    "ReconcileMode",
    "choose_mode",
    "reconcile",
    "rederive",
    "QueryListViewModel",
    "ViewState",
    "ViewStatus",
]
