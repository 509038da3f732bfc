"""
Song Status Database Service
Database-first reconciliation: decides whether the stored song row can answer a
status query on its own, and owns every write of status and variant snapshots.
"""

import asyncio
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Tuple

from sqlalchemy.ext.asyncio import async_sessionmaker

from ..core.config import get_settings
from ..core.logging import status_logger
from ..core.song_status import (
    SongStatus,
    TERMINAL_STATUSES,
    Variant,
    calculate_song_status,
    calculate_variant_status,
    variants_from_raw,
)
from ..database.models import Song
from ..database.repositories.song_repository import SongRepository
from ..database.schemas import SongUpdate


@dataclass
class DatabaseResponse:
    should_return: bool
    status: str
    variants: List[Dict[str, Any]] = field(default_factory=list)


def map_db_variants(song: Song) -> Tuple[List[Variant], List[Dict[str, Any]]]:
    """Return the stored variant snapshot as (normalised Variants, raw JSON list)"""
    raw = song.song_variants if isinstance(song.song_variants, list) else []
    return variants_from_raw(raw), raw


def is_refresh_needed(song: Song) -> bool:
    """Terminal songs are never refreshed; anything else, including unknown values, is"""
    return song.status not in TERMINAL_STATUSES


def serialize_variants(variants: List[Variant]) -> List[Dict[str, Any]]:
    """Storage form of a variant snapshot; variantStatus is recomputed from the URLs on every write"""
    serialized = []
    for variant in variants:
        raw = variant.to_raw()
        raw["duration"] = round(variant.duration) if variant.duration else 0
        raw["variantStatus"] = calculate_variant_status(variant).value
        serialized.append(raw)
    return serialized


class SongStatusDatabaseService:
    """Reads and writes song status through short-lived sessions"""

    def __init__(self, session_factory: async_sessionmaker):
        self.session_factory = session_factory
        settings = get_settings()
        self.max_retries = settings.DATABASE_UPDATE_MAX_RETRIES
        self.retry_delay = settings.DATABASE_UPDATE_RETRY_DELAY

    async def fetch_song_by_id(self, song_id: int) -> Optional[Song]:
        async with self.session_factory() as session:
            return await SongRepository(session).get(song_id)

    async def fetch_updated_song(self, song_id: int) -> Optional[Song]:
        """Re-read a song after a write; responses are always built from this row"""
        return await self.fetch_song_by_id(song_id)

    def is_refresh_needed(self, song: Song) -> bool:
        return is_refresh_needed(song)

    def try_respond_from_database(self, song: Song) -> DatabaseResponse:
        """Answer from the stored row.

        The status is recomputed from the stored variants only for comparison
        in the logs; the stored status column is what gets returned.
        """
        variants, raw = map_db_variants(song)
        calculated = calculate_song_status(variants)
        database_status = song.status
        should_return = database_status in TERMINAL_STATUSES

        status_logger.log_database_first(
            song_id=song.id,
            database_status=database_status,
            calculated_status=calculated.song_status.value,
            should_return=should_return,
            variants_count=len(raw)
        )

        if database_status == SongStatus.FAILED.value:
            return DatabaseResponse(should_return=True, status=database_status, variants=raw)

        return DatabaseResponse(
            should_return=should_return,
            status=database_status,
            variants=[v.model_dump(by_alias=True, mode="json") for v in calculated.variants]
        )

    async def update_database(
        self,
        song_id: int,
        status: SongStatus,
        variants: List[Variant],
        error_message: Optional[str] = None
    ) -> bool:
        """Write status and the full variant snapshot, retrying with linear back-off.

        Failure is logged and reported as False; callers carry on with their
        response and the next refresh cycle retries.
        """
        status_value = status.value if isinstance(status, SongStatus) else status
        snapshot = serialize_variants(variants)

        for attempt in range(1, self.max_retries + 1):
            async with self.session_factory() as session:
                result = await SongRepository(session).update_status_and_variants(
                    song_id, status_value, snapshot
                )

            if result.is_ok():
                return True

            status_logger.log_database_update_failed(
                song_id=song_id,
                error=result.error,
                attempt=attempt,
                job_error_message=error_message
            )
            if result.not_found:
                return False
            if attempt < self.max_retries:
                await asyncio.sleep(self.retry_delay * attempt)

        return False

    async def mark_failed(self, song_id: int, error_message: Optional[str]) -> bool:
        """Explicit failure signal from the generation job; a song already terminal keeps its status"""
        async with self.session_factory() as session:
            result = await SongRepository(session).update_fields(
                song_id,
                SongUpdate(
                    status=SongStatus.FAILED.value,
                    error_message=error_message or "Song generation failed"
                ),
                active_only=True
            )
        if result.is_err():
            status_logger.log_database_update_failed(song_id=song_id, error=result.error)
        return result.is_ok()
