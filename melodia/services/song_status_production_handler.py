"""
Production Mode Handler
Serves song status for real Suno tasks.

The status written with a fresh Suno snapshot is calculated from the variants
already stored for the song, not from the snapshot being written. The
response then uses the status re-read from the database after the write.
A newly fetched snapshot is therefore reflected in the stored status on the
following cycle.
"""

from typing import List, Optional

from ..core.job_source import ProductionJob
from ..core.logging import status_logger
from ..core.song_status import Variant, calculate_song_status
from ..database.models import Song
from ..database.schemas import SongStatusApiResponse
from .song_status_api_utils import (
    convert_suno_variants,
    create_api_response,
    create_not_found_response,
)
from .song_status_database_service import (
    SongStatusDatabaseService,
    is_refresh_needed,
    map_db_variants,
    serialize_variants,
)
from .suno_client import JobStatusResponse, SunoAPIError, SunoClient


class ProductionModeHandler:
    """Status handling for songs backed by a Suno generation task"""

    mode = "production"

    def __init__(self, database_service: SongStatusDatabaseService, client: SunoClient):
        self.database_service = database_service
        self.client = client

    async def _respond_from_stored(
        self,
        song_id: int,
        code: int = 200,
        msg: str = "success",
        upstream_error: Optional[str] = None
    ) -> SongStatusApiResponse:
        song = await self.database_service.fetch_song_by_id(song_id)
        if song is None:
            return create_not_found_response(song_id)
        _, raw = map_db_variants(song)
        return create_api_response(song.status, raw, song, code=code, msg=msg, upstream_error=upstream_error)

    async def _reconcile(self, song: Song, status_response: JobStatusResponse) -> Optional[List[Variant]]:
        """Apply one successful record-info response; returns the stored snapshot or None"""
        if not is_refresh_needed(song):
            # Terminal rows are never rewritten
            return None

        data = status_response.data

        if data is not None and data.is_failed:
            await self.database_service.mark_failed(song.id, data.error_message)
            return None

        fresh_variants = convert_suno_variants(data.variants) if data is not None else []
        if not fresh_variants:
            # Still queued: nothing new to store
            return None

        stored_variants, _ = map_db_variants(song)
        status_result = calculate_song_status(stored_variants)

        await self.database_service.update_database(
            song.id,
            status_result.song_status,
            fresh_variants,
            data.error_message
        )

        status_logger.log_mode_handled(
            mode=self.mode,
            song_id=song.id,
            calculated_status=status_result.song_status.value,
            database_status=None,
            variants_count=len(fresh_variants),
            task_id=data.task_id
        )
        return fresh_variants

    async def handle(self, song_id: int, job: ProductionJob) -> SongStatusApiResponse:
        """Synchronous path: fetch from Suno, store, re-read, respond with the stored status"""
        try:
            status_response = await self.client.get_record_info(job.task_id)
        except SunoAPIError as e:
            status_logger.log_job_error(song_id, job.task_id, 502, str(e))
            return await self._respond_from_stored(song_id, code=502, msg=str(e), upstream_error=str(e))

        if not status_response.is_success:
            status_logger.log_job_error(song_id, job.task_id, status_response.code, status_response.msg)
            return await self._respond_from_stored(
                song_id,
                code=status_response.code,
                msg=status_response.msg,
                upstream_error=status_response.msg
            )

        song = await self.database_service.fetch_song_by_id(song_id)
        if song is None:
            return create_not_found_response(song_id)

        fresh_variants = await self._reconcile(song, status_response)
        if fresh_variants is None:
            return await self._respond_from_stored(song_id)

        updated_song = await self.database_service.fetch_updated_song(song_id)
        if updated_song is None:
            return create_not_found_response(song_id)

        return create_api_response(updated_song.status, serialize_variants(fresh_variants), updated_song)

    async def refresh(self, song_id: int, job: ProductionJob) -> None:
        """Background path; a Suno-reported error leaves the row untouched"""
        status_response = await self.client.get_record_info(job.task_id)

        if not status_response.is_success:
            status_logger.log_job_error(song_id, job.task_id, status_response.code, status_response.msg)
            return

        song = await self.database_service.fetch_song_by_id(song_id)
        if song is None:
            return

        await self._reconcile(song, status_response)
