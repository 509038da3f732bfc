"""
FastAPI dependency wiring
Services are built once in the application lifespan and stored on app.state
"""

from fastapi import HTTPException, Request

from ..core.config import InvalidSongIdError, validate_song_id
from ..services.rate_limiter import RateLimiter
from ..services.song_generation_service import SongGenerationService
from ..services.song_status_service import SongStatusService


def _from_state(request: Request, name: str):
    service = getattr(request.app.state, name, None)
    if service is None:
        raise HTTPException(status_code=503, detail=f"{name} not initialized")
    return service


def get_song_status_service(request: Request) -> SongStatusService:
    return _from_state(request, "song_status_service")


def get_song_generation_service(request: Request) -> SongGenerationService:
    return _from_state(request, "song_generation_service")


def get_song_id(song_id: str) -> int:
    """Path song id, rejected with 400 before any I/O when malformed"""
    try:
        return validate_song_id(song_id)
    except InvalidSongIdError as e:
        raise HTTPException(status_code=400, detail=str(e))


async def enforce_rate_limit(request: Request) -> None:
    limiter: RateLimiter = getattr(request.app.state, "rate_limiter", None)
    if limiter is None:
        return

    client_key = request.client.host if request.client else "unknown"
    if not await limiter.check(client_key):
        raise HTTPException(status_code=429, detail="Too many requests. Please try again later.")
