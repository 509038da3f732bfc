"""
Melodia Pydantic Schemas
Request/response models for API validation and serialization
"""

from datetime import datetime
from typing import Any, Dict, List, Optional
from pydantic import BaseModel, Field, ConfigDict


# Base configuration for all schemas
class BaseSchema(BaseModel):
    """Base schema with common configuration"""
    model_config = ConfigDict(
        from_attributes=True,
        use_enum_values=True,
        validate_assignment=True,
        populate_by_name=True
    )


# Song Schemas
class SongCreate(BaseSchema):
    """Schema for creating a song and starting its generation job"""
    title: str = Field(..., min_length=1, max_length=255, description="Song title")
    lyrics: str = Field(..., min_length=1, description="Approved lyrics")
    music_style: Optional[str] = Field(None, max_length=500, description="Style prompt passed to Suno")
    slug: Optional[str] = Field(None, pattern=r"^[a-z0-9]+(?:-[a-z0-9]+)*$", max_length=255)


class SongUpdate(BaseSchema):
    """Partial update of a song row"""
    status: Optional[str] = None
    song_variants: Optional[List[Dict[str, Any]]] = None
    selected_variant: Optional[int] = Field(None, ge=0)
    suno_task_id: Optional[str] = None
    generation_mode: Optional[str] = Field(None, pattern=r"^(demo|production)$")
    error_message: Optional[str] = None
    last_status_check: Optional[datetime] = None


class SongResponse(BaseSchema):
    """Schema for song responses"""
    id: int
    title: str
    slug: str
    status: str
    suno_task_id: Optional[str] = None
    generation_mode: Optional[str] = None
    selected_variant: Optional[int] = None
    created_at: datetime


class SongCreatedResponse(BaseSchema):
    """Returned by POST /api/songs"""
    song: SongResponse
    task_id: str = Field(serialization_alias="taskId")


# Song status envelope (camelCase on the wire)
class SongStatusVariantPayload(BaseSchema):
    song_variant_data: List[Dict[str, Any]] = Field(default_factory=list, alias="songVariantData")


class SongStatusData(BaseSchema):
    response: SongStatusVariantPayload
    status: str
    error_code: Optional[str] = Field(None, alias="errorCode")
    error_message: Optional[str] = Field(None, alias="errorMessage")
    song_id: Optional[int] = Field(None, alias="songId")
    task_id: Optional[str] = Field(None, alias="taskId")
    slug: Optional[str] = None
    selected_variant_index: Optional[int] = Field(None, alias="selectedVariantIndex")
    variant_timestamp_lyrics_processed: Optional[Dict[str, Any]] = Field(
        None, alias="variantTimestampLyricsProcessed"
    )


class SongStatusApiResponse(BaseSchema):
    """Envelope returned by the song status endpoints"""
    code: int = 200
    msg: str = "success"
    data: SongStatusData

    def to_wire(self) -> Dict[str, Any]:
        return self.model_dump(by_alias=True, mode="json")
