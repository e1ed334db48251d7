from datetime import datetime, timedelta, timezone
from typing import List, Optional, Union

from queryview.exceptions import TransportFailure
from queryview.model import (
    ErrorType,
    QueryInfo,
    QueryState,
    QueryStats,
    SessionInfo,
)

EPOCH = datetime(2024, 1, 1, tzinfo=timezone.utc)


def make_query(
    query_id: str,
    state: QueryState = QueryState.RUNNING,
    created: Optional[float] = 0.0,
    error_type: Optional[ErrorType] = None,
    elapsed: Optional[str] = "1.00s",
    cpu: Optional[str] = "1.00s",
    memory: Optional[str] = "1MB",
    cumulative_memory: float = 0.0,
    user: Optional[str] = "alice",
    source: Optional[str] = None,
    query: str = "SELECT 1",
    resource_group: Optional[List[str]] = None,
) -> QueryInfo:
    """Builds a query record; `created` is a number of seconds after EPOCH"""
    return QueryInfo(
        query_id=query_id,
        state=state,
        query=query,
        error_type=error_type,
        session=SessionInfo(user=user, source=source),
        resource_group_id=resource_group,
        stats=QueryStats(
            create_time=None if created is None else EPOCH + timedelta(seconds=created),
            elapsed_time=elapsed,
            execution_time=elapsed,
            total_cpu_time=cpu,
            user_memory_reservation=memory,
            cumulative_user_memory=cumulative_memory,
        ),
    )


def ids(records) -> List[str]:
    return [record.query_id for record in records]


class FakeClock:
    """Manually advanced clock (seconds)"""

    def __init__(self, now: float = 1000.0):
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class FakeSource:
    """Returns queued responses; an exception instance is raised instead"""

    def __init__(self, *responses: Union[List[QueryInfo], Exception]):
        self.responses = list(responses)
        self.calls = 0
        self.last: Union[List[QueryInfo], Exception] = []

    def push(self, response: Union[List[QueryInfo], Exception]) -> None:
        self.responses.append(response)

    async def fetch_all(self) -> List[QueryInfo]:
        self.calls += 1
        if self.responses:
            self.last = self.responses.pop(0)
        if isinstance(self.last, Exception):
            raise self.last
        return list(self.last)

    async def aclose(self) -> None:
        pass


def failure(message: str = "connection refused") -> TransportFailure:
    return TransportFailure(message)
