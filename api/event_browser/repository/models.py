"""SQLAlchemy models for the event store schema."""

from sqlalchemy import (
    Column, Text, DateTime, BigInteger, ForeignKey, Identity, Index, UniqueConstraint,
    PrimaryKeyConstraint, text
)
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import declarative_base
from sqlalchemy.sql import func

# Create base class for models
Base = declarative_base()


class EventRecord(Base):
    """Events table model; ``position`` is the global stream order."""
    __tablename__ = 'events'

    position = Column(BigInteger, Identity(always=False), primary_key=True)
    id = Column(Text, nullable=False, unique=True)
    event_type = Column(Text, nullable=False)
    data = Column(JSONB, nullable=False, server_default=text("'{}'::jsonb"))
    metadata_ = Column('metadata', JSONB, nullable=False, server_default=text("'{}'::jsonb"))
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())


class StreamEventRecord(Base):
    """Named stream membership; ``position`` is the order within the stream."""
    __tablename__ = 'stream_events'

    stream = Column(Text, nullable=False)
    position = Column(BigInteger, nullable=False)
    event_id = Column(Text, ForeignKey('events.id', ondelete='CASCADE'), nullable=False)
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())

    __table_args__ = (
        PrimaryKeyConstraint('stream', 'position', name='stream_events_pkey'),
        UniqueConstraint('stream', 'event_id', name='stream_events_stream_event_id_key'),
        Index('stream_events_event_id', 'event_id'),
    )
