"""
Song Status Service
Entry point for status queries: database-first answer, then refresh in the background
"""

from typing import Optional

from ..core.job_source import DemoJob, JobSource, resolve_job_source
from ..database.models import Song
from ..database.schemas import SongStatusApiResponse
from .song_status_api_utils import create_api_response, create_not_found_response
from .song_status_background_refresh import BackgroundRefresher
from .song_status_database_service import SongStatusDatabaseService
from .song_status_demo_handler import DemoModeHandler
from .song_status_production_handler import ProductionModeHandler
from .suno_client import SunoClient


class MissingTaskError(Exception):
    """Song has no generation task to refresh from"""
    pass


class SongStatusService:
    """Coordinates the database service, mode handlers and background refresher"""

    def __init__(
        self,
        database_service: SongStatusDatabaseService,
        demo_handler: DemoModeHandler,
        production_handler: ProductionModeHandler,
        refresher: BackgroundRefresher
    ):
        self.database_service = database_service
        self.demo_handler = demo_handler
        self.production_handler = production_handler
        self.refresher = refresher

    @classmethod
    def build(cls, session_factory, suno_client: SunoClient) -> "SongStatusService":
        database_service = SongStatusDatabaseService(session_factory)
        demo_handler = DemoModeHandler(database_service)
        production_handler = ProductionModeHandler(database_service, suno_client)
        refresher = BackgroundRefresher(demo_handler, production_handler)
        return cls(database_service, demo_handler, production_handler, refresher)

    @staticmethod
    def job_for(song: Song) -> Optional[JobSource]:
        if not song.suno_task_id:
            return None
        return resolve_job_source(song.suno_task_id, song.generation_mode)

    async def get_status(self, song_id: int) -> SongStatusApiResponse:
        """Answer from the database; schedule a refresh when the answer may be stale"""
        song = await self.database_service.fetch_song_by_id(song_id)
        if song is None:
            return create_not_found_response(song_id)

        db_response = self.database_service.try_respond_from_database(song)
        if not db_response.should_return:
            job = self.job_for(song)
            if job is not None and self.database_service.is_refresh_needed(song):
                self.refresher.refresh_in_background(song.id, job)

        return create_api_response(db_response.status, db_response.variants, song)

    async def refresh_now(self, song_id: int) -> SongStatusApiResponse:
        """Run the mode handler inline and answer with the re-read status.

        Terminal songs are answered from the database without touching the job.
        """
        song = await self.database_service.fetch_song_by_id(song_id)
        if song is None:
            return create_not_found_response(song_id)

        db_response = self.database_service.try_respond_from_database(song)
        if db_response.should_return:
            return create_api_response(db_response.status, db_response.variants, song)

        job = self.job_for(song)
        if job is None:
            raise MissingTaskError(f"Song {song_id} has no generation task")

        if isinstance(job, DemoJob):
            return await self.demo_handler.handle(song.id, job)
        return await self.production_handler.handle(song.id, job)

    async def shutdown(self) -> None:
        await self.refresher.drain()
