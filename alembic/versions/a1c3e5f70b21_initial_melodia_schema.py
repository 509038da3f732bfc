"""Initial Melodia schema

Revision ID: a1c3e5f70b21
Revises: 
Create Date: 2026-10-19 09:12:31.402118

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects.postgresql import JSONB


# revision identifiers, used by Alembic.
revision: str = 'a1c3e5f70b21'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    # Create songs table
    op.create_table(
        'songs',
        sa.Column('id', sa.Integer, primary_key=True, autoincrement=True),
        sa.Column('title', sa.Text, nullable=False),
        sa.Column('lyrics', sa.Text, nullable=True),
        sa.Column('music_style', sa.Text, nullable=True),
        sa.Column('slug', sa.String(255), nullable=False, unique=True),
        sa.Column('suno_task_id', sa.Text, nullable=True),
        sa.Column('generation_mode', sa.String(20), nullable=True),
        sa.Column('status', sa.String(20), nullable=False, server_default='PENDING'),
        sa.Column('song_variants', JSONB, nullable=False, server_default=sa.text("'[]'::jsonb")),
        sa.Column('selected_variant', sa.Integer, nullable=True),
        sa.Column('variant_timestamp_lyrics_processed', JSONB, nullable=True),
        sa.Column('error_message', sa.Text, nullable=True),
        sa.Column('created_at', sa.TIMESTAMP, nullable=False, server_default=sa.text('now()')),
        sa.Column('updated_at', sa.TIMESTAMP, nullable=False, server_default=sa.text('now()')),
        sa.Column('last_status_check', sa.TIMESTAMP, nullable=True)
    )

    op.create_index('ix_songs_status', 'songs', ['status'])
    op.create_index('ix_songs_suno_task_id', 'songs', ['suno_task_id'])


def downgrade() -> None:
    op.drop_index('ix_songs_suno_task_id', table_name='songs')
    op.drop_index('ix_songs_status', table_name='songs')
    op.drop_table('songs')
