"""Ordered event log access: the read contract and its backends."""

from .base import EventRepository, Heading, StreamEntry
from .exceptions import EventRepositoryError, EventNotFoundError, EventDuplicatedError
from .memory import InMemoryEventRepository
from .postgres import PostgresEventRepository

__all__ = [
    "EventRepository",
    "Heading",
    "StreamEntry",
    "EventRepositoryError",
    "EventNotFoundError",
    "EventDuplicatedError",
    "InMemoryEventRepository",
    "PostgresEventRepository"
]
