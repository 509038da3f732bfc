"""
Demo Mode Handler
Serves song status for demo tasks from simulated variant data keyed on elapsed time
"""

from typing import Callable, List

from ..core.job_source import DemoJob, now_ms
from ..core.logging import status_logger
from ..core.song_status import CalculatedSongStatus, Variant, calculate_song_status, variants_from_raw
from ..database.schemas import SongStatusApiResponse
from .demo_data_service import generate_demo_variants
from .song_status_api_utils import create_api_response, create_not_found_response
from .song_status_database_service import (
    SongStatusDatabaseService,
    is_refresh_needed,
    map_db_variants,
    serialize_variants,
)


class DemoModeHandler:
    """Status handling for songs backed by a simulated job"""

    mode = "demo"

    def __init__(
        self,
        database_service: SongStatusDatabaseService,
        clock: Callable[[], int] = now_ms
    ):
        self.database_service = database_service
        self.clock = clock

    def simulate(self, job: DemoJob) -> List[Variant]:
        """Variant snapshot for the job at the current clock reading"""
        elapsed_ms = self.clock() - job.started_at_ms
        return variants_from_raw(generate_demo_variants(elapsed_ms))

    async def _calculate_and_store(self, song_id: int, job: DemoJob):
        variants = self.simulate(job)
        status_result: CalculatedSongStatus = calculate_song_status(variants)
        await self.database_service.update_database(song_id, status_result.song_status, variants)
        return variants, status_result

    async def handle(self, song_id: int, job: DemoJob) -> SongStatusApiResponse:
        """Synchronous path: simulate, store, re-read, respond with the stored status"""
        song = await self.database_service.fetch_song_by_id(song_id)
        if song is None:
            return create_not_found_response(song_id)
        if not is_refresh_needed(song):
            _, raw = map_db_variants(song)
            return create_api_response(song.status, raw, song)

        variants, status_result = await self._calculate_and_store(song_id, job)

        updated_song = await self.database_service.fetch_updated_song(song_id)
        if updated_song is None:
            return create_not_found_response(song_id)

        status_logger.log_mode_handled(
            mode=self.mode,
            song_id=song_id,
            calculated_status=status_result.song_status.value,
            database_status=updated_song.status,
            variants_count=len(variants)
        )

        return create_api_response(updated_song.status, serialize_variants(variants), updated_song)

    async def refresh(self, song_id: int, job: DemoJob) -> None:
        """Background path: simulate and store only; a terminal row is left alone"""
        song = await self.database_service.fetch_song_by_id(song_id)
        if song is None or not is_refresh_needed(song):
            return
        await self._calculate_and_store(song_id, job)
