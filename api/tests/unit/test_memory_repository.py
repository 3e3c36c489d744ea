"""Unit tests for the in-memory event repository."""

import pytest

from event_browser.models.events import Event
from event_browser.models.streams import GlobalStream, NamedStream
from event_browser.repository import (
    EventDuplicatedError,
    EventNotFoundError,
    Heading,
    InMemoryEventRepository
)


@pytest.fixture
def events(make_events):
    return make_events(5)


@pytest.fixture
def repository(events):
    repository = InMemoryEventRepository()
    repository.publish(events, stream_name="dummy")
    return repository


def ids(entries):
    return [entry.event.event_id for entry in entries]


class TestPublish:
    """Test publishing and linking events."""

    def test_publish_single_event(self):
        """Test a single event can be published without a list."""
        repository = InMemoryEventRepository()
        event = Event(event_type="DummyEvent")

        repository.publish(event)

        assert repository._global == [event.event_id]
        assert repository._streams == {}

    def test_publish_duplicate_event(self, repository, events):
        """Test publishing an existing event id fails."""
        with pytest.raises(EventDuplicatedError) as exc_info:
            repository.publish(events[0])

        assert exc_info.value.event_id == events[0].event_id

    def test_publish_duplicate_within_batch(self):
        """Test a batch repeating an id is rejected as a whole."""
        repository = InMemoryEventRepository()
        event = Event(event_type="DummyEvent")

        with pytest.raises(EventDuplicatedError):
            repository.publish([event, event])

        assert repository._global == []

    def test_link(self, repository, events):
        """Test linking appends to the stream in call order."""
        repository.link([events[3].event_id, events[1].event_id], "picked")
        repository.link(events[0].event_id, "picked")

        assert repository._streams["picked"] == [
            events[3].event_id, events[1].event_id, events[0].event_id
        ]

    def test_link_unknown_event(self, repository):
        """Test linking an unpublished event fails."""
        with pytest.raises(EventNotFoundError):
            repository.link("missing", "picked")

    def test_link_twice(self, repository, events):
        """Test an event is a member of a stream at most once."""
        with pytest.raises(EventDuplicatedError):
            repository.link(events[0].event_id, "dummy")


class TestReads:
    """Test the read side of the repository."""

    @pytest.mark.asyncio
    async def test_position_of(self, repository, events):
        """Test positions in named and global streams."""
        extra = Event(event_type="DummyEvent")
        repository.publish(extra, stream_name="other")

        assert await repository.position_of(NamedStream("dummy"), events[2].event_id) == 2
        assert await repository.position_of(NamedStream("other"), extra.event_id) == 0
        assert await repository.position_of(GlobalStream(), extra.event_id) == 5
        assert await repository.position_of(NamedStream("dummy"), extra.event_id) is None
        assert await repository.position_of(NamedStream("nope"), extra.event_id) is None

    @pytest.mark.asyncio
    async def test_read_toward_start(self, repository, events):
        """Test reads toward the start are ordered newest first."""
        entries = await repository.read(NamedStream("dummy"), None, Heading.TOWARD_START, 2)

        assert ids(entries) == [events[4].event_id, events[3].event_id]
        assert [entry.position for entry in entries] == [4, 3]

    @pytest.mark.asyncio
    async def test_read_toward_end(self, repository, events):
        """Test reads toward the end are ordered oldest first."""
        entries = await repository.read(NamedStream("dummy"), 1, Heading.TOWARD_END, 10)

        assert ids(entries) == [events[2].event_id, events[3].event_id, events[4].event_id]

    @pytest.mark.asyncio
    async def test_read_bound_is_exclusive(self, repository, events):
        """Test the event at the bound is never returned."""
        entries = await repository.read(NamedStream("dummy"), 3, Heading.TOWARD_START, 10)

        assert ids(entries) == [events[2].event_id, events[1].event_id, events[0].event_id]

    @pytest.mark.asyncio
    async def test_read_unknown_stream(self, repository):
        """Test an unknown stream reads as empty."""
        assert await repository.read(NamedStream("nope"), None, Heading.TOWARD_START, 10) == []

    @pytest.mark.asyncio
    async def test_read_zero_count(self, repository):
        """Test a zero count reads nothing."""
        assert await repository.read(GlobalStream(), None, Heading.TOWARD_END, 0) == []

    @pytest.mark.asyncio
    async def test_has_events(self, repository):
        """Test existence probes at both ends of a stream."""
        stream = NamedStream("dummy")

        assert await repository.has_events(stream, None, Heading.TOWARD_START) is True
        assert await repository.has_events(stream, 0, Heading.TOWARD_START) is False
        assert await repository.has_events(stream, 0, Heading.TOWARD_END) is True
        assert await repository.has_events(stream, 4, Heading.TOWARD_END) is False
        assert await repository.has_events(NamedStream("nope"), None, Heading.TOWARD_END) is False

    @pytest.mark.asyncio
    async def test_get_event(self, repository, events):
        """Test lookup by id."""
        assert await repository.get_event(events[1].event_id) == events[1]
        assert await repository.get_event("missing") is None

    @pytest.mark.asyncio
    async def test_ping(self, repository):
        """Test the store is always reachable."""
        assert await repository.ping() is None
