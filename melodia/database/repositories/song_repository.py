"""
Song Repository
Database operations for songs and their variant snapshots
"""

import time
from datetime import datetime
from typing import Any, Dict, List, Optional
from sqlalchemy import select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from ..models import Song
from ..schemas import SongCreate, SongUpdate
from ...core.logging import performance_logger
from ...core.result import Result
from ...core.song_status import TERMINAL_STATUSES


class RepositoryError(Exception):
    """Base repository error"""
    pass


class ConflictError(RepositoryError):
    """Data conflict error"""
    pass


class SongRepository:
    """Repository for song database operations"""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def create(
        self,
        song_data: SongCreate,
        slug: str,
        **fields: Any
    ) -> Song:
        """Create a new song row"""
        try:
            song = Song(
                title=song_data.title,
                lyrics=song_data.lyrics,
                music_style=song_data.music_style,
                slug=slug,
                status="PENDING",
                song_variants=[],
                **fields
            )
            self.session.add(song)
            await self.session.commit()
            await self.session.refresh(song)
            return song

        except IntegrityError as e:
            await self.session.rollback()
            raise ConflictError(f"Data conflict: {str(e)}")

    async def get(self, song_id: int) -> Optional[Song]:
        """Get song by ID, or None when no row matches"""
        try:
            result = await self.session.execute(
                select(Song)
                .where(Song.id == song_id)
                .execution_options(populate_existing=True)
            )
            return result.scalar_one_or_none()
        except Exception as e:
            raise RepositoryError(f"Error getting song: {str(e)}")

    async def get_by_slug(self, slug: str) -> Optional[Song]:
        try:
            result = await self.session.execute(select(Song).where(Song.slug == slug))
            return result.scalar_one_or_none()
        except Exception as e:
            raise RepositoryError(f"Error getting song by slug: {str(e)}")

    async def update_fields(
        self,
        song_id: int,
        update_data: SongUpdate,
        active_only: bool = False
    ) -> Result[Song]:
        """Partial update; a missing row is reported with not_found set.

        With active_only the UPDATE matches only non-terminal rows, so a
        COMPLETED or FAILED song is returned unchanged instead of rewritten.
        """
        try:
            values: Dict[str, Any] = update_data.model_dump(exclude_unset=True)
            values["updated_at"] = datetime.utcnow()

            statement = update(Song).where(Song.id == song_id)
            if active_only:
                statement = statement.where(Song.status.notin_(sorted(TERMINAL_STATUSES)))

            start = time.perf_counter()
            result = await self.session.execute(
                statement
                .values(**values)
                .execution_options(synchronize_session=False)
            )
            performance_logger.log_database_query(
                f"UPDATE songs SET {', '.join(sorted(values))} WHERE id = {song_id}",
                (time.perf_counter() - start) * 1000,
                result.rowcount
            )
            if result.rowcount == 0:
                await self.session.rollback()
                song = await self.get(song_id) if active_only else None
                if song is None:
                    return Result.missing(f"Song {song_id} not found")
                return Result.ok(song)

            await self.session.commit()
            song = await self.get(song_id)
            return Result.ok(song)

        except Exception as e:
            await self.session.rollback()
            return Result.err(f"Failed to update song: {str(e)}")

    async def update_status_and_variants(
        self,
        song_id: int,
        status: str,
        variants: List[Dict[str, Any]],
        error_message: Optional[str] = None
    ) -> Result[Song]:
        """Replace the variant snapshot and status in one write; terminal rows are left as they are"""
        update_data = SongUpdate(
            status=status,
            song_variants=variants,
            last_status_check=datetime.utcnow()
        )
        if error_message is not None:
            update_data.error_message = error_message
        return await self.update_fields(song_id, update_data, active_only=True)

