"""Query records as returned by the coordinator's query list endpoint"""

import enum
import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, List, Optional

from queryview.exceptions import MalformedRecordError

logger = logging.getLogger("queryview.model")


class QueryState(enum.Enum):
    """Coarse lifecycle state of a query"""

    QUEUED = "QUEUED"
    WAITING_FOR_RESOURCES = "WAITING_FOR_RESOURCES"
    DISPATCHING = "DISPATCHING"
    PLANNING = "PLANNING"
    STARTING = "STARTING"
    RUNNING = "RUNNING"
    FINISHING = "FINISHING"
    FINISHED = "FINISHED"
    FAILED = "FAILED"

    def finished(self) -> bool:
        """Returns True if the query is done (success or failure)"""
        return self in (QueryState.FINISHED, QueryState.FAILED)

    def running(self) -> bool:
        """Returns True for every state between queued and done"""
        return not (self == QueryState.QUEUED or self.finished())


class ErrorType(enum.Enum):
    """Failure category, only set for failed queries"""

    #: Error caused by the query itself (syntax, permissions, cancellation)
    USER_ERROR = "USER_ERROR"

    #: Bug or unexpected condition in the engine
    INTERNAL_ERROR = "INTERNAL_ERROR"

    #: Memory or other resource limits were exceeded
    INSUFFICIENT_RESOURCES = "INSUFFICIENT_RESOURCES"

    #: Failure of an external system (connector, storage)
    EXTERNAL = "EXTERNAL"


def parse_timestamp(value: Any) -> Optional[datetime]:
    """Parses an ISO 8601 timestamp, returning None when it cannot be parsed"""
    if not value:
        return None
    try:
        return datetime.fromisoformat(value.replace("Z", "+00:00"))
    except (AttributeError, ValueError):
        logger.debug("Ignoring invalid timestamp %r", value)
        return None


def optional_string(data: Dict[str, Any], key: str) -> Optional[str]:
    value = data.get(key)
    if value is not None and not isinstance(value, str):
        raise MalformedRecordError(f"Field {key} should be a string, got {value!r}")
    return value


def string_list(data: Dict[str, Any], key: str) -> Optional[List[str]]:
    values = data.get(key)
    if values is None:
        return None
    if not isinstance(values, list) or not all(isinstance(v, str) for v in values):
        raise MalformedRecordError(f"Field {key} should be a list of strings")
    return values


@dataclass
class QueryStats:
    """Statistics of a query

    Durations and memory sizes are kept as the human readable strings sent by
    the coordinator (e.g. ``1.23s`` or ``12.5MB``); they are parsed only when
    used as sort keys.
    """

    create_time: Optional[datetime] = None
    elapsed_time: Optional[str] = None
    execution_time: Optional[str] = None
    total_cpu_time: Optional[str] = None
    user_memory_reservation: Optional[str] = None
    total_memory_reservation: Optional[str] = None
    peak_total_memory_reservation: Optional[str] = None
    cumulative_user_memory: float = 0.0
    progress_percentage: Optional[float] = None
    fully_blocked: bool = False
    blocked_reasons: List[str] = field(default_factory=list)
    total_drivers: int = 0
    running_drivers: int = 0

    @staticmethod
    def from_dict(data: Dict[str, Any]) -> "QueryStats":
        return QueryStats(
            create_time=parse_timestamp(data.get("createTime")),
            elapsed_time=optional_string(data, "elapsedTime"),
            execution_time=optional_string(data, "executionTime"),
            total_cpu_time=optional_string(data, "totalCpuTime"),
            user_memory_reservation=optional_string(data, "userMemoryReservation"),
            total_memory_reservation=optional_string(
                data, "totalMemoryReservation"
            ),
            peak_total_memory_reservation=optional_string(
                data, "peakTotalMemoryReservation"
            ),
            cumulative_user_memory=float(data.get("cumulativeUserMemory") or 0.0),
            progress_percentage=data.get("progressPercentage"),
            fully_blocked=bool(data.get("fullyBlocked", False)),
            blocked_reasons=string_list(data, "blockedReasons") or [],
            total_drivers=int(data.get("totalDrivers") or 0),
            running_drivers=int(data.get("runningDrivers") or 0),
        )


@dataclass
class ProgressCounts:
    completed: int
    running: int
    queued: int


@dataclass
class QueryProgress:
    """Progress counters

    Two models coexist: the classic driver counters, and the new driver
    counters that come together with split counters. The split model is used
    whenever completed splits are reported.
    """

    completed_drivers: int = 0
    running_drivers: int = 0
    queued_drivers: int = 0
    completed_new_drivers: int = 0
    running_new_drivers: int = 0
    queued_new_drivers: int = 0
    completed_splits: int = 0
    running_splits: int = 0
    queued_splits: int = 0

    @property
    def uses_split_model(self) -> bool:
        return bool(self.completed_splits)

    @staticmethod
    def from_dict(data: Dict[str, Any]) -> "QueryProgress":
        def count(key: str) -> int:
            return int(data.get(key) or 0)

        return QueryProgress(
            completed_drivers=count("completedDrivers"),
            running_drivers=count("runningDrivers"),
            queued_drivers=count("queuedDrivers"),
            completed_new_drivers=count("completedNewDrivers"),
            running_new_drivers=count("runningNewDrivers"),
            queued_new_drivers=count("queuedNewDrivers"),
            completed_splits=count("completedSplits"),
            running_splits=count("runningSplits"),
            queued_splits=count("queuedSplits"),
        )


@dataclass
class SessionInfo:
    user: Optional[str] = None
    principal: Optional[str] = None
    source: Optional[str] = None


@dataclass
class QueryInfo:
    """A query as listed by the coordinator

    Records are read-only snapshots: each poll brings a fresh instance for
    every query, identified by :attr:`query_id`.
    """

    query_id: str
    state: QueryState
    query: str = ""
    error_type: Optional[ErrorType] = None
    error_code: Optional[str] = None
    session: SessionInfo = field(default_factory=SessionInfo)
    resource_group_id: Optional[List[str]] = None
    scheduled: bool = False
    memory_pool: Optional[str] = None
    stats: QueryStats = field(default_factory=QueryStats)
    progress: QueryProgress = field(default_factory=QueryProgress)

    def progress_counts(self) -> Dict[str, ProgressCounts]:
        """Returns the progress counters of the active model

        Running and queued counters are reported as zero once the query is
        done, since the coordinator may keep stale values.
        """
        done = self.state.finished()
        p = self.progress

        def counts(completed, running, queued):
            return ProgressCounts(
                completed, 0 if done else running, 0 if done else queued
            )

        if p.uses_split_model:
            return {
                "drivers": counts(
                    p.completed_new_drivers,
                    p.running_new_drivers,
                    p.queued_new_drivers,
                ),
                "splits": counts(
                    p.completed_splits, p.running_splits, p.queued_splits
                ),
            }
        return {
            "drivers": counts(
                p.completed_drivers, p.running_drivers, p.queued_drivers
            )
        }

    @staticmethod
    def from_dict(data: Dict[str, Any]) -> "QueryInfo":
        """Builds a record from the JSON representation (camelCase keys)"""
        try:
            query_id = data["queryId"]
            state = QueryState(data["state"])
        except KeyError as e:
            raise MalformedRecordError(f"Missing field {e}") from None
        except ValueError:
            raise MalformedRecordError(
                f"Unknown query state {data.get('state')!r}"
            ) from None

        error_type = None
        if data.get("errorType"):
            try:
                error_type = ErrorType(data["errorType"])
            except ValueError:
                raise MalformedRecordError(
                    f"Unknown error type {data['errorType']!r}"
                ) from None

        error_code = data.get("errorCode")
        if isinstance(error_code, dict):
            error_code = error_code.get("name")

        session = data.get("session") or {}
        stats = data.get("queryStats") or {}
        try:
            return QueryInfo(
                query_id=str(query_id),
                state=state,
                query=optional_string(data, "query") or "",
                error_type=error_type,
                error_code=error_code,
                session=SessionInfo(
                    user=optional_string(session, "user"),
                    principal=optional_string(session, "principal"),
                    source=optional_string(session, "source"),
                ),
                resource_group_id=string_list(data, "resourceGroupId"),
                scheduled=bool(data.get("scheduled", False)),
                memory_pool=optional_string(data, "memoryPool"),
                stats=QueryStats.from_dict(stats),
                progress=QueryProgress.from_dict(data.get("progress") or stats),
            )
        except (TypeError, ValueError) as e:
            raise MalformedRecordError(f"Invalid query {query_id}: {e}") from e
