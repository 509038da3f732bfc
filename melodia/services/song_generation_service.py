"""
Song Generation Service
Creates song rows and starts their generation jobs
"""

from typing import Tuple

from sqlalchemy.ext.asyncio import async_sessionmaker

from ..core.job_source import resolve_job_source
from ..core.logging import status_logger
from ..database.models import Song
from ..database.repositories.song_repository import SongRepository
from ..database.schemas import SongCreate
from ..utils.slug import generate_base_slug, generate_unique_slug
from .suno_client import SunoClient


class SongGenerationError(Exception):
    """Generation job could not be started"""
    pass


class SongGenerationService:
    """Starts a generation job and records it against a new song.

    The job source (demo or production) is resolved here, once, and persisted
    as generation_mode so status queries never have to guess from the task id.
    """

    def __init__(self, session_factory: async_sessionmaker, client: SunoClient):
        self.session_factory = session_factory
        self.client = client

    async def create_song(self, song_data: SongCreate) -> Tuple[Song, str]:
        task_result = await self.client.generate_song(
            title=song_data.title,
            lyrics=song_data.lyrics,
            style=song_data.music_style
        )
        if task_result.is_err():
            raise SongGenerationError(task_result.error)

        task_id = task_result.unwrap()
        job = resolve_job_source(task_id)

        async with self.session_factory() as session:
            repository = SongRepository(session)

            async def slug_taken(candidate: str) -> bool:
                return await repository.get_by_slug(candidate) is not None

            slug = await generate_unique_slug(
                song_data.slug or generate_base_slug(song_data.title),
                slug_taken
            )
            song = await repository.create(
                song_data,
                slug=slug,
                suno_task_id=task_id,
                generation_mode=job.mode
            )

        status_logger.logger.info(
            "Song generation started",
            song_id=song.id,
            task_id=task_id,
            mode=job.mode,
            slug=slug
        )
        return song, task_id
