"""Batch query entry point: payload -> search -> frame."""

from __future__ import annotations

from concurrent.futures import ThreadPoolExecutor
from typing import Dict, Sequence
import logging

from .base import LogStoreClientBase
from .config import DEFAULT_MAX_LINES
from .exceptions import InvalidPayloadError, RemoteFetchError
from .frames import assemble_frame, is_supported_format
from .models import DataQuery, HealthResult, QueryPayload, QueryResponse
from .payload import parse_payload

logger = logging.getLogger(__name__)


class SlsDatasource:
    """Runs batches of queries against one log store.

    Each query is independent: a payload or fetch error is reported on that
    query's response and never affects the rest of the batch.
    """

    def __init__(self, client: LogStoreClientBase, max_lines: int = DEFAULT_MAX_LINES) -> None:
        if max_lines <= 0:
            raise ValueError("max_lines must be greater than zero")
        self.client = client
        self.max_lines = max_lines

    def query_data(self, queries: Sequence[DataQuery]) -> Dict[str, QueryResponse]:
        logger.info("query_data called with %d queries", len(queries))
        if not queries:
            return {}
        with ThreadPoolExecutor(max_workers=len(queries)) as pool:
            results = list(pool.map(self.query, queries))
        return {response.ref_id: response for response in results}

    def query(self, query: DataQuery) -> QueryResponse:
        try:
            payload = parse_payload(
                query.payload, query.time_from, query.time_to, query.max_data_points
            )
        except InvalidPayloadError as exc:
            logger.error("query %s: invalid payload: %s", query.ref_id, exc)
            return QueryResponse(ref_id=query.ref_id, error=exc)

        if payload.hidden:
            return QueryResponse(ref_id=query.ref_id)
        if not is_supported_format(payload.format):
            logger.warning(
                "query %s: unsupported format %r, skipping search", query.ref_id, payload.format
            )
            return QueryResponse(ref_id=query.ref_id)

        try:
            records = self.client.get_logs(
                payload.query, payload.window_start, payload.window_end, self._lines_for(payload)
            )
        except RemoteFetchError as exc:
            return QueryResponse(ref_id=query.ref_id, error=exc)
        except Exception as exc:
            logger.exception("query %s: unexpected client error", query.ref_id)
            error = RemoteFetchError(str(exc))
            error.__cause__ = exc
            return QueryResponse(ref_id=query.ref_id, error=error)

        frame = assemble_frame(query.ref_id, payload, records)
        frames = [frame] if frame is not None else []
        return QueryResponse(ref_id=query.ref_id, frames=frames)

    def check_health(self) -> HealthResult:
        return self.client.check_health()

    def _lines_for(self, payload: QueryPayload) -> int:
        if payload.point_limit > 0:
            return min(payload.point_limit, self.max_lines)
        return self.max_lines
