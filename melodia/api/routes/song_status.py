"""
Melodia Song Status API Routes
Database-first status queries and on-demand refresh
"""

from fastapi import APIRouter, Depends, HTTPException
from fastapi.responses import JSONResponse

from ...database.schemas import SongStatusApiResponse
from ...services.song_status_service import MissingTaskError, SongStatusService
from ..dependencies import enforce_rate_limit, get_song_id, get_song_status_service

router = APIRouter(dependencies=[Depends(enforce_rate_limit)])


def _to_json_response(envelope: SongStatusApiResponse) -> JSONResponse:
    # Only an unknown song changes the HTTP status; job errors travel in the envelope
    status_code = 404 if envelope.code == 404 else 200
    return JSONResponse(status_code=status_code, content=envelope.to_wire())


@router.get("/{song_id}")
async def get_song_status(
    song_id: int = Depends(get_song_id),
    service: SongStatusService = Depends(get_song_status_service)
):
    """Current song status; a stale answer schedules a background refresh"""
    envelope = await service.get_status(song_id)
    return _to_json_response(envelope)


@router.post("/{song_id}/refresh")
async def refresh_song_status(
    song_id: int = Depends(get_song_id),
    service: SongStatusService = Depends(get_song_status_service)
):
    """Refresh from the generation job now and return the stored result"""
    try:
        envelope = await service.refresh_now(song_id)
    except MissingTaskError as e:
        raise HTTPException(status_code=400, detail=str(e))
    return _to_json_response(envelope)
