"""
Song Status API Response Utilities
Envelope construction and raw-variant mapping shared by demo and production modes
"""

from typing import Any, Dict, List, Optional

from ..core.song_status import SongStatus, Variant, variants_from_raw
from ..database.models import Song
from ..database.schemas import (
    SongStatusApiResponse,
    SongStatusData,
    SongStatusVariantPayload,
)

GENERATION_FAILED_CODE = "GENERATION_FAILED"
GENERATION_FAILED_MESSAGE = "Song generation failed"
JOB_STATUS_ERROR_CODE = "SUNO_API_ERROR"


def create_api_response(
    status: str,
    variants: List[Dict[str, Any]],
    song: Optional[Song] = None,
    code: int = 200,
    msg: str = "success",
    upstream_error: Optional[str] = None
) -> SongStatusApiResponse:
    """Build the status envelope.

    FAILED always carries the fixed GENERATION_FAILED pair. For other
    statuses the error fields are null unless a job-status error from Suno is
    being surfaced through upstream_error.
    """
    status_value = status.value if isinstance(status, SongStatus) else status

    if status_value == SongStatus.FAILED.value:
        error_code, error_message = GENERATION_FAILED_CODE, GENERATION_FAILED_MESSAGE
    elif upstream_error is not None:
        error_code, error_message = JOB_STATUS_ERROR_CODE, upstream_error
    else:
        error_code, error_message = None, None

    return SongStatusApiResponse(
        code=code,
        msg=msg,
        data=SongStatusData(
            response=SongStatusVariantPayload(songVariantData=list(variants)),
            status=status_value,
            errorCode=error_code,
            errorMessage=error_message,
            songId=song.id if song is not None else None,
            taskId=song.suno_task_id if song is not None else None,
            slug=song.slug if song is not None else None,
            selectedVariantIndex=song.selected_variant if song is not None else None,
            variantTimestampLyricsProcessed=(
                song.variant_timestamp_lyrics_processed if song is not None else None
            ),
        )
    )


def create_not_found_response(song_id: int) -> SongStatusApiResponse:
    return SongStatusApiResponse(
        code=404,
        msg=f"Song {song_id} not found",
        data=SongStatusData(
            response=SongStatusVariantPayload(),
            status=SongStatus.NOT_FOUND.value,
            songId=song_id,
        )
    )


def convert_suno_variants(suno_data: List[Dict[str, Any]]) -> List[Variant]:
    """Map Suno sunoData records to canonical Variants"""
    return variants_from_raw(suno_data)

