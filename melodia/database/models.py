"""
Melodia Database Models
SQLAlchemy ORM model for generated songs
"""

from datetime import datetime
from typing import Any, Dict, List, Optional
from sqlalchemy import (
    String,
    Integer,
    Text,
    TIMESTAMP,
    JSON,
    Index
)
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.sql import func
from sqlalchemy.orm import Mapped, mapped_column

from .connection import Base

# JSONB on PostgreSQL, plain JSON elsewhere (SQLite in tests)
JSONType = JSON().with_variant(JSONB(), "postgresql")


class Song(Base):
    """Song model - one user-facing generation job and its variant snapshot"""
    __tablename__ = "songs"

    # Primary key
    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)

    # Song metadata
    title: Mapped[str] = mapped_column(Text, nullable=False)
    lyrics: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    music_style: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    slug: Mapped[str] = mapped_column(String(255), nullable=False, unique=True)

    # Generation job
    suno_task_id: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    generation_mode: Mapped[Optional[str]] = mapped_column(String(20), nullable=True)  # "demo", "production"

    # Processing state
    status: Mapped[str] = mapped_column(String(20), default="PENDING", nullable=False)  # PENDING, STREAM_AVAILABLE, COMPLETED, FAILED
    song_variants: Mapped[List[Dict[str, Any]]] = mapped_column(JSONType, default=list, nullable=False)
    selected_variant: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    variant_timestamp_lyrics_processed: Mapped[Optional[Dict[str, Any]]] = mapped_column(JSONType, nullable=True)
    error_message: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    # Timestamps
    created_at: Mapped[datetime] = mapped_column(
        TIMESTAMP,
        nullable=False,
        server_default=func.now()
    )
    updated_at: Mapped[datetime] = mapped_column(
        TIMESTAMP,
        nullable=False,
        server_default=func.now(),
        onupdate=func.now()
    )
    last_status_check: Mapped[Optional[datetime]] = mapped_column(TIMESTAMP, nullable=True)

    __table_args__ = (
        Index("ix_songs_status", "status"),
        Index("ix_songs_suno_task_id", "suno_task_id"),
    )

    def __repr__(self) -> str:
        return f"<Song(id={self.id}, slug='{self.slug}', status='{self.status}')>"
