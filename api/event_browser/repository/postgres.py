"""PostgreSQL event repository backed by asyncpg."""

import json
import logging
from contextlib import asynccontextmanager
from contextvars import ContextVar
from typing import Any, AsyncIterator, Dict, Iterable, List, Optional, Tuple, Union

import asyncpg

from ..errors.problem_details import EventStoreError
from ..models.events import Event, EventRow
from ..models.streams import GLOBAL_STREAM_NAME, Stream
from .base import Heading, StreamEntry
from .connection import get_db_pool
from .exceptions import EventDuplicatedError, EventNotFoundError


logger = logging.getLogger(__name__)

EVENT_COLUMNS = "e.id, e.event_type, e.data, e.metadata, e.created_at"

# Connection holding the open snapshot transaction of the current task, if any
_snapshot_connection: ContextVar[Optional[asyncpg.Connection]] = ContextVar("snapshot_connection", default=None)


def _scope(stream: Stream, after: Optional[int], heading: Heading) -> Tuple[str, str, List[Any], str, str]:
    """Build FROM/WHERE clauses and ordering for a stream read.

    Returns:
        Tuple of (from_clause, where_clause, parameters, position_column, sort_order)
    """
    comparison = "<" if heading is Heading.TOWARD_START else ">"
    sort_order = "DESC" if heading is Heading.TOWARD_START else "ASC"

    if stream.is_global:
        from_clause = "events e"
        position = "e.position"
        conditions = []
        params: List[Any] = []
    else:
        from_clause = "stream_events s JOIN events e ON e.id = s.event_id"
        position = "s.position"
        conditions = ["s.stream = $1"]
        params = [stream.name]

    if after is not None:
        params.append(after)
        conditions.append(f"{position} {comparison} ${len(params)}")

    where_clause = " AND ".join(conditions) if conditions else "TRUE"
    return from_clause, where_clause, params, position, sort_order


def _row_to_entry(row) -> StreamEntry:
    """Convert a result row into a StreamEntry, decoding JSONB columns."""
    row_dict: Dict[str, Any] = dict(row)
    for column in ("data", "metadata"):
        if isinstance(row_dict.get(column), str):
            row_dict[column] = json.loads(row_dict[column])
    position = row_dict.pop("position")
    return StreamEntry(position, EventRow.model_validate(row_dict).to_event())


class PostgresEventRepository:
    """Event repository over the ``events`` and ``stream_events`` tables."""

    @asynccontextmanager
    async def snapshot(self) -> AsyncIterator[None]:
        """Run the reads inside the block in one read-only REPEATABLE READ transaction.

        Paging resolves the anchor, reads the window and probes both sides of
        it; sharing a snapshot keeps the links consistent with the page even
        while events are being appended. Nested blocks join the outer snapshot.
        """
        if _snapshot_connection.get() is not None:
            yield
            return

        pool = await get_db_pool()
        async with pool.acquire() as conn:
            async with conn.transaction(isolation="repeatable_read", readonly=True):
                token = _snapshot_connection.set(conn)
                try:
                    yield
                finally:
                    _snapshot_connection.reset(token)

    @asynccontextmanager
    async def _connection(self) -> AsyncIterator[asyncpg.Connection]:
        conn = _snapshot_connection.get()
        if conn is not None:
            yield conn
            return

        pool = await get_db_pool()
        async with pool.acquire() as conn:
            yield conn

    async def position_of(self, stream: Stream, event_id: str) -> Optional[int]:
        if stream.is_global:
            query = "SELECT position FROM events WHERE id = $1"
            params: List[Any] = [event_id]
        else:
            query = "SELECT position FROM stream_events WHERE stream = $1 AND event_id = $2"
            params = [stream.name, event_id]

        try:
            async with self._connection() as conn:
                return await conn.fetchval(query, *params)
        except asyncpg.PostgresError as e:
            logger.error(f"Database error resolving event {event_id} in stream {stream.name}: {e}")
            raise EventStoreError(e)

    async def read(
        self,
        stream: Stream,
        after: Optional[int],
        heading: Heading,
        count: int
    ) -> List[StreamEntry]:
        if count <= 0:
            return []

        from_clause, where_clause, params, position, sort_order = _scope(stream, after, heading)
        query = f"""
            SELECT {position} AS position, {EVENT_COLUMNS}
            FROM {from_clause}
            WHERE {where_clause}
            ORDER BY {position} {sort_order}
            LIMIT ${len(params) + 1}
        """

        try:
            async with self._connection() as conn:
                rows = await conn.fetch(query, *params, count)
        except asyncpg.PostgresError as e:
            logger.error(f"Database error reading stream {stream.name}: {e}")
            raise EventStoreError(e)

        entries = [_row_to_entry(row) for row in rows]
        logger.debug(f"Read {len(entries)} events from stream {stream.name} ({heading.value})")
        return entries

    async def has_events(self, stream: Stream, after: Optional[int], heading: Heading) -> bool:
        from_clause, where_clause, params, _, _ = _scope(stream, after, heading)
        query = f"SELECT EXISTS (SELECT 1 FROM {from_clause} WHERE {where_clause})"

        try:
            async with self._connection() as conn:
                return bool(await conn.fetchval(query, *params))
        except asyncpg.PostgresError as e:
            logger.error(f"Database error probing stream {stream.name}: {e}")
            raise EventStoreError(e)

    async def get_event(self, event_id: str) -> Optional[Event]:
        query = f"SELECT e.position, {EVENT_COLUMNS} FROM events e WHERE e.id = $1"

        try:
            async with self._connection() as conn:
                row = await conn.fetchrow(query, event_id)
        except asyncpg.PostgresError as e:
            logger.error(f"Database error retrieving event {event_id}: {e}")
            raise EventStoreError(e)

        if not row:
            return None
        return _row_to_entry(row).event

    async def ping(self) -> None:
        pool = await get_db_pool()
        async with pool.acquire() as conn:
            await conn.execute("SELECT 1")

    async def publish(
        self,
        events: Union[Event, Iterable[Event]],
        stream_name: Optional[str] = None
    ) -> None:
        """Append events to the global stream and, optionally, to a named stream."""
        if isinstance(events, Event):
            events = [events]
        events = list(events)
        pool = await get_db_pool()

        try:
            async with pool.acquire() as conn:
                async with conn.transaction():
                    for event in events:
                        try:
                            await conn.execute(
                                """
                                INSERT INTO events (id, event_type, data, metadata, created_at)
                                VALUES ($1, $2, $3, $4, $5)
                                """,
                                event.event_id,
                                event.event_type,
                                json.dumps(event.data),
                                json.dumps(event.metadata),
                                event.timestamp
                            )
                        except asyncpg.UniqueViolationError:
                            raise EventDuplicatedError(event.event_id, GLOBAL_STREAM_NAME)

                    if stream_name is not None:
                        await self._link(conn, [event.event_id for event in events], stream_name)
        except (EventDuplicatedError, EventNotFoundError):
            raise
        except asyncpg.PostgresError as e:
            logger.error(f"Database error publishing events: {e}")
            raise EventStoreError(e)

        logger.info(f"Published {len(events)} events (stream: {stream_name or GLOBAL_STREAM_NAME})")

    async def link(self, event_ids: Union[str, Iterable[str]], stream_name: str) -> None:
        """Append already published events to a named stream."""
        if isinstance(event_ids, str):
            event_ids = [event_ids]
        pool = await get_db_pool()

        try:
            async with pool.acquire() as conn:
                async with conn.transaction():
                    await self._link(conn, list(event_ids), stream_name)
        except (EventDuplicatedError, EventNotFoundError):
            raise
        except asyncpg.PostgresError as e:
            logger.error(f"Database error linking events to stream {stream_name}: {e}")
            raise EventStoreError(e)

    async def _link(self, conn, event_ids: List[str], stream_name: str) -> None:
        # Serialise appends per stream so positions stay dense and ordered
        await conn.execute("SELECT pg_advisory_xact_lock(hashtext($1))", stream_name)
        last_position = await conn.fetchval(
            "SELECT COALESCE(MAX(position), -1) FROM stream_events WHERE stream = $1",
            stream_name
        )

        for offset, event_id in enumerate(event_ids, start=1):
            try:
                await conn.execute(
                    "INSERT INTO stream_events (stream, position, event_id) VALUES ($1, $2, $3)",
                    stream_name,
                    last_position + offset,
                    event_id
                )
            except asyncpg.ForeignKeyViolationError:
                raise EventNotFoundError(event_id)
            except asyncpg.UniqueViolationError:
                raise EventDuplicatedError(event_id, stream_name)
