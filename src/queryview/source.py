"""Sources of query records

A source returns the complete current collection on each call, never a
delta. Any failure is reported as a :class:`TransportFailure`.
"""

import json
import logging
from pathlib import Path
from typing import Any, List, Optional, Protocol

import httpx

from queryview.exceptions import MalformedRecordError, TransportFailure
from queryview.model import QueryInfo

logger = logging.getLogger("queryview.source")


class QuerySource(Protocol):
    async def fetch_all(self) -> List[QueryInfo]: ...


def decode_queries(payload: Any) -> List[QueryInfo]:
    """Decodes a query list, skipping malformed entries"""
    if not isinstance(payload, list):
        raise TransportFailure(
            f"Expected a list of queries, got {type(payload).__name__}"
        )

    queries = []
    for entry in payload:
        try:
            queries.append(QueryInfo.from_dict(entry))
        except MalformedRecordError as e:
            logger.warning("Skipping malformed query: %s", e)
        except (AttributeError, TypeError):
            logger.warning("Skipping malformed query entry %r", entry)
    return queries


class HttpQuerySource:
    """Fetches queries from the coordinator (``GET /v1/query``)"""

    USER_HEADER = "X-Presto-User"

    def __init__(
        self,
        base_url: str,
        user: Optional[str] = None,
        timeout: float = 10.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        headers = {self.USER_HEADER: user} if user else {}
        self.base_url = base_url.rstrip("/")
        self.client = httpx.AsyncClient(
            base_url=self.base_url,
            headers=headers,
            timeout=timeout,
            transport=transport,
        )

    async def fetch_all(self) -> List[QueryInfo]:
        try:
            response = await self.client.get("/v1/query")
        except httpx.HTTPError as e:
            raise TransportFailure(f"Cannot reach {self.base_url}: {e}") from e

        if response.is_error:
            raise TransportFailure(
                f"{self.base_url} answered with status {response.status_code}",
                status_code=response.status_code,
            )

        try:
            payload = response.json()
        except ValueError as e:
            raise TransportFailure(f"Invalid JSON from {self.base_url}") from e

        return decode_queries(payload)

    async def aclose(self) -> None:
        await self.client.aclose()

    def __repr__(self):
        return f"HttpQuerySource({self.base_url})"


class FileQuerySource:
    """Reads queries from a JSON file, re-read on each fetch"""

    def __init__(self, path: Path):
        self.path = Path(path)

    async def fetch_all(self) -> List[QueryInfo]:
        try:
            payload = json.loads(self.path.read_text())
        except OSError as e:
            raise TransportFailure(f"Cannot read {self.path}: {e}") from e
        except ValueError as e:
            raise TransportFailure(f"Invalid JSON in {self.path}: {e}") from e
        return decode_queries(payload)

    async def aclose(self) -> None:
        pass

    def __repr__(self):
        return f"FileQuerySource({self.path})"
