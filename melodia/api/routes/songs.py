"""
Melodia Songs API Routes
Song creation and lookup
"""

from fastapi import APIRouter, Depends, HTTPException

from ...database.repositories.song_repository import ConflictError
from ...database.schemas import SongCreate, SongCreatedResponse, SongResponse
from ...services.song_generation_service import SongGenerationError, SongGenerationService
from ..dependencies import enforce_rate_limit, get_song_generation_service

router = APIRouter(dependencies=[Depends(enforce_rate_limit)])


@router.post("", status_code=201)
async def create_song(
    request: SongCreate,
    service: SongGenerationService = Depends(get_song_generation_service)
):
    """Create a song and start its generation job"""
    try:
        song, task_id = await service.create_song(request)
    except SongGenerationError as e:
        raise HTTPException(status_code=502, detail=str(e))
    except ConflictError as e:
        raise HTTPException(status_code=409, detail=str(e))

    created = SongCreatedResponse(song=SongResponse.model_validate(song), task_id=task_id)
    return created.model_dump(by_alias=True, mode="json")
