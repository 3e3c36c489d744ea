"""Unit tests for the PostgreSQL event repository with a mocked pool."""

import json
from contextlib import asynccontextmanager
from datetime import datetime, timezone
from unittest.mock import MagicMock

import asyncpg
import pytest

from event_browser.errors.problem_details import EventStoreError
from event_browser.models.events import Event
from event_browser.models.streams import GlobalStream, NamedStream
from event_browser.repository.base import Heading
from event_browser.repository.exceptions import EventDuplicatedError, EventNotFoundError
from event_browser.repository.postgres import PostgresEventRepository, _scope


CREATED_AT = datetime(2024, 1, 1, 12, 0, tzinfo=timezone.utc)


def event_row(position, event_id, data='{"foo": 1}'):
    return {
        "position": position,
        "id": event_id,
        "event_type": "DummyEvent",
        "data": data,
        "metadata": "{}",
        "created_at": CREATED_AT
    }


class TestScope:
    """Test query scoping for stream reads."""

    def test_global_stream_from_edge(self):
        """Test the global stream reads the events table without a bound."""
        from_clause, where_clause, params, position, order = _scope(GlobalStream(), None, Heading.TOWARD_START)

        assert from_clause == "events e"
        assert where_clause == "TRUE"
        assert params == []
        assert position == "e.position"
        assert order == "DESC"

    def test_named_stream_with_bound(self):
        """Test named streams join stream membership and bound the position."""
        from_clause, where_clause, params, position, order = _scope(NamedStream("dummy"), 7, Heading.TOWARD_END)

        assert "stream_events s JOIN events e" in from_clause
        assert where_clause == "s.stream = $1 AND s.position > $2"
        assert params == ["dummy", 7]
        assert position == "s.position"
        assert order == "ASC"


class TestPostgresReads:
    """Test read operations."""

    @pytest.mark.asyncio
    async def test_position_of_named_stream(self, mock_db_pool):
        """Test resolving an event within a named stream."""
        _, conn = mock_db_pool
        conn.fetchval.return_value = 3

        position = await PostgresEventRepository().position_of(NamedStream("dummy"), "e1")

        assert position == 3
        args = conn.fetchval.call_args[0]
        assert "FROM stream_events" in args[0]
        assert args[1:] == ("dummy", "e1")

    @pytest.mark.asyncio
    async def test_position_of_missing(self, mock_db_pool):
        """Test a missing member resolves to None."""
        _, conn = mock_db_pool
        conn.fetchval.return_value = None

        assert await PostgresEventRepository().position_of(GlobalStream(), "e1") is None

    @pytest.mark.asyncio
    async def test_read_decodes_rows(self, mock_db_pool):
        """Test rows become stream entries with decoded JSON payloads."""
        _, conn = mock_db_pool
        conn.fetch.return_value = [event_row(5, "e5"), event_row(4, "e4", data={"bar": 2})]

        entries = await PostgresEventRepository().read(NamedStream("dummy"), None, Heading.TOWARD_START, 2)

        assert [entry.position for entry in entries] == [5, 4]
        assert entries[0].event.event_id == "e5"
        assert entries[0].event.data == {"foo": 1}
        assert entries[1].event.data == {"bar": 2}
        assert entries[0].event.timestamp == CREATED_AT

        query, *params = conn.fetch.call_args[0]
        assert "ORDER BY s.position DESC" in query
        assert "LIMIT $2" in query
        assert params == ["dummy", 2]

    @pytest.mark.asyncio
    async def test_read_zero_count(self, mock_db_pool):
        """Test a zero count does not hit the database."""
        _, conn = mock_db_pool

        assert await PostgresEventRepository().read(GlobalStream(), None, Heading.TOWARD_END, 0) == []
        conn.fetch.assert_not_called()

    @pytest.mark.asyncio
    async def test_has_events(self, mock_db_pool):
        """Test the existence probe."""
        _, conn = mock_db_pool
        conn.fetchval.return_value = True

        assert await PostgresEventRepository().has_events(GlobalStream(), 10, Heading.TOWARD_START) is True

        query, *params = conn.fetchval.call_args[0]
        assert query.startswith("SELECT EXISTS")
        assert "e.position < $1" in query
        assert params == [10]

    @pytest.mark.asyncio
    async def test_get_event(self, mock_db_pool):
        """Test fetching an event by id."""
        _, conn = mock_db_pool
        conn.fetchrow.return_value = event_row(1, "e1")

        event = await PostgresEventRepository().get_event("e1")

        assert event == Event(event_id="e1", event_type="DummyEvent", data={"foo": 1}, timestamp=CREATED_AT)

    @pytest.mark.asyncio
    async def test_get_event_not_found(self, mock_db_pool):
        """Test fetching an unknown event."""
        _, conn = mock_db_pool
        conn.fetchrow.return_value = None

        assert await PostgresEventRepository().get_event("missing") is None

    @pytest.mark.asyncio
    async def test_database_error(self, mock_db_pool):
        """Test database errors surface as internal server errors."""
        _, conn = mock_db_pool
        conn.fetch.side_effect = asyncpg.PostgresError("Database error")

        with pytest.raises(EventStoreError) as exc_info:
            await PostgresEventRepository().read(GlobalStream(), None, Heading.TOWARD_START, 5)

        assert exc_info.value.status == 500
        assert "Database error" in exc_info.value.detail


class TestPostgresSnapshot:
    """Test reads sharing one transaction."""

    @pytest.fixture
    def snapshot_pool(self, mock_db_pool):
        pool, conn = mock_db_pool
        pool.acquire = MagicMock(side_effect=pool.acquire)
        conn.fetchrow.return_value = None

        @asynccontextmanager
        async def transaction(**options):
            yield

        conn.transaction = MagicMock(side_effect=transaction)
        return pool, conn

    @pytest.mark.asyncio
    async def test_reads_share_one_connection(self, snapshot_pool):
        """Test every read inside a snapshot uses one repeatable read transaction."""
        pool, conn = snapshot_pool
        conn.fetchval.side_effect = [3, True]
        conn.fetch.return_value = [event_row(2, "e2")]
        repository = PostgresEventRepository()

        async with repository.snapshot():
            position = await repository.position_of(NamedStream("dummy"), "e3")
            entries = await repository.read(NamedStream("dummy"), position, Heading.TOWARD_START, 1)
            more = await repository.has_events(NamedStream("dummy"), entries[-1].position, Heading.TOWARD_START)

        assert (position, more) == (3, True)
        assert pool.acquire.call_count == 1
        conn.transaction.assert_called_once_with(isolation="repeatable_read", readonly=True)

    @pytest.mark.asyncio
    async def test_nested_snapshot_joins_outer(self, snapshot_pool):
        """Test a nested snapshot does not open a second transaction."""
        pool, conn = snapshot_pool
        repository = PostgresEventRepository()

        async with repository.snapshot():
            async with repository.snapshot():
                await repository.get_event("e1")

        assert pool.acquire.call_count == 1
        assert conn.transaction.call_count == 1

    @pytest.mark.asyncio
    async def test_reads_outside_snapshot_acquire_per_call(self, snapshot_pool):
        """Test the connection is released when the snapshot ends."""
        pool, conn = snapshot_pool
        repository = PostgresEventRepository()

        async with repository.snapshot():
            pass
        await repository.get_event("e1")
        await repository.get_event("e2")

        assert pool.acquire.call_count == 3
        conn.transaction.assert_called_once()


class TestPostgresWrites:
    """Test publishing and linking."""

    @pytest.fixture
    def transactional_conn(self, mock_db_pool):
        _, conn = mock_db_pool

        @asynccontextmanager
        async def transaction():
            yield

        conn.transaction = MagicMock(side_effect=transaction)
        return conn

    @pytest.mark.asyncio
    async def test_publish_to_named_stream(self, transactional_conn):
        """Test events are inserted and linked after the stream's last position."""
        conn = transactional_conn
        conn.fetchval.return_value = 4
        event = Event(event_id="e1", event_type="DummyEvent", data={"foo": 1})

        await PostgresEventRepository().publish(event, stream_name="dummy")

        insert_event, lock, insert_link = conn.execute.call_args_list
        assert "INSERT INTO events" in insert_event[0][0]
        assert json.loads(insert_event[0][3]) == {"foo": 1}
        assert "pg_advisory_xact_lock" in lock[0][0]
        assert insert_link[0][1:] == ("dummy", 5, "e1")

    @pytest.mark.asyncio
    async def test_publish_duplicate(self, transactional_conn):
        """Test a unique violation on events is a duplicate error."""
        transactional_conn.execute.side_effect = asyncpg.UniqueViolationError("duplicate key")

        with pytest.raises(EventDuplicatedError):
            await PostgresEventRepository().publish(Event(event_id="e1", event_type="DummyEvent"))

    @pytest.mark.asyncio
    async def test_link_unknown_event(self, transactional_conn):
        """Test a foreign key violation is reported as an unknown event."""
        conn = transactional_conn
        conn.fetchval.return_value = -1
        conn.execute.side_effect = [None, asyncpg.ForeignKeyViolationError("fk")]

        with pytest.raises(EventNotFoundError):
            await PostgresEventRepository().link("missing", "dummy")
