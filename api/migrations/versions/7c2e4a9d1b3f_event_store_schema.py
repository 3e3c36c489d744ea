"""event_store_schema

Revision ID: 7c2e4a9d1b3f
Revises: 
Create Date: 2025-09-02 17:52:46.471070

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

# revision identifiers, used by Alembic.
revision: str = '7c2e4a9d1b3f'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    # Create events table; position is the global stream order
    op.create_table('events',
        sa.Column('position', sa.BigInteger(), sa.Identity(always=False), nullable=False),
        sa.Column('id', sa.Text(), nullable=False),
        sa.Column('event_type', sa.Text(), nullable=False),
        sa.Column('data', postgresql.JSONB(astext_type=sa.Text()), nullable=False, server_default=sa.text("'{}'::jsonb")),
        sa.Column('metadata', postgresql.JSONB(astext_type=sa.Text()), nullable=False, server_default=sa.text("'{}'::jsonb")),
        sa.Column('created_at', sa.TIMESTAMP(timezone=True), nullable=False, server_default=sa.text('now()')),
        sa.PrimaryKeyConstraint('position'),
        sa.UniqueConstraint('id', name='events_id_key')
    )

    # Create stream_events table; position is the order within the named stream
    op.create_table('stream_events',
        sa.Column('stream', sa.Text(), nullable=False),
        sa.Column('position', sa.BigInteger(), nullable=False),
        sa.Column('event_id', sa.Text(), nullable=False),
        sa.Column('created_at', sa.TIMESTAMP(timezone=True), nullable=False, server_default=sa.text('now()')),
        sa.ForeignKeyConstraint(['event_id'], ['events.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('stream', 'position', name='stream_events_pkey'),
        sa.UniqueConstraint('stream', 'event_id', name='stream_events_stream_event_id_key')
    )

    op.create_index('stream_events_event_id', 'stream_events', ['event_id'])


def downgrade() -> None:
    op.drop_index('stream_events_event_id', table_name='stream_events')
    op.drop_table('stream_events')
    op.drop_table('events')
