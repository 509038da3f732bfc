"""
Song Status Calculation
Derives variant and song status from which audio URLs are actually available,
instead of trusting status strings reported by the generation API.
"""

from enum import Enum
from typing import Any, Dict, List, Optional, Union

from pydantic import BaseModel, ConfigDict, Field

from .logging import status_logger


class VariantStatus(str, Enum):
    """Availability of a single rendered variant"""
    PENDING = "PENDING"
    STREAM_READY = "STREAM_READY"
    DOWNLOAD_READY = "DOWNLOAD_READY"


class SongStatus(str, Enum):
    """Song-level status. NOT_FOUND is only ever a query result, never stored."""
    PENDING = "PENDING"
    STREAM_AVAILABLE = "STREAM_AVAILABLE"
    COMPLETED = "COMPLETED"
    FAILED = "FAILED"
    NOT_FOUND = "NOT_FOUND"


TERMINAL_STATUSES = frozenset({SongStatus.COMPLETED.value, SongStatus.FAILED.value})


def _text(value: Any) -> str:
    return "" if value is None else str(value)


def _url(value: Any) -> Optional[str]:
    return str(value) if value else None


class Variant(BaseModel):
    """One candidate audio rendering of a song, in the camelCase shape Suno returns"""
    model_config = ConfigDict(populate_by_name=True, extra="ignore", protected_namespaces=())

    id: str = ""
    audio_url: Optional[str] = Field(default=None, alias="audioUrl")
    source_audio_url: Optional[str] = Field(default=None, alias="sourceAudioUrl")
    stream_audio_url: Optional[str] = Field(default=None, alias="streamAudioUrl")
    source_stream_audio_url: Optional[str] = Field(default=None, alias="sourceStreamAudioUrl")
    image_url: Optional[str] = Field(default=None, alias="imageUrl")
    source_image_url: Optional[str] = Field(default=None, alias="sourceImageUrl")
    title: str = ""
    duration: float = 0
    prompt: str = ""
    model_name: str = Field(default="", alias="modelName")
    tags: str = ""
    create_time: Union[int, str] = Field(default="", alias="createTime")

    @property
    def has_stream_url(self) -> bool:
        return bool(self.source_stream_audio_url or self.stream_audio_url)

    @property
    def has_download_url(self) -> bool:
        return bool(self.audio_url or self.source_audio_url)

    @classmethod
    def from_raw(cls, raw: Dict[str, Any]) -> "Variant":
        """Normalise a raw variant dict (database JSON or API payload)"""
        raw = raw or {}
        duration = raw.get("duration")
        create_time = raw.get("createTime")
        if not isinstance(create_time, (int, str)) or isinstance(create_time, bool):
            create_time = _text(create_time)
        return cls(
            id=_text(raw.get("id")),
            audioUrl=_url(raw.get("audioUrl")),
            sourceAudioUrl=_url(raw.get("sourceAudioUrl")),
            streamAudioUrl=_url(raw.get("streamAudioUrl")),
            sourceStreamAudioUrl=_url(raw.get("sourceStreamAudioUrl")),
            imageUrl=_url(raw.get("imageUrl") or raw.get("sourceImageUrl")),
            sourceImageUrl=_url(raw.get("sourceImageUrl")),
            title=_text(raw.get("title")),
            duration=duration if isinstance(duration, (int, float)) and not isinstance(duration, bool) else 0,
            prompt=_text(raw.get("prompt")),
            modelName=_text(raw.get("modelName")),
            tags=_text(raw.get("tags")),
            createTime=create_time or "",
        )

    def to_raw(self) -> Dict[str, Any]:
        """Serialise back to the camelCase JSON stored in songs.song_variants"""
        return self.model_dump(by_alias=True)


class CalculatedVariant(Variant):
    """Variant annotated with its derived status"""
    variant_status: VariantStatus = Field(alias="variantStatus")


class CalculatedSongStatus(BaseModel):
    song_status: SongStatus
    variants: List[CalculatedVariant] = Field(default_factory=list)
    has_any_stream_ready: bool = False
    has_any_download_ready: bool = False
    all_download_ready: bool = False


def calculate_variant_status(variant: Variant) -> VariantStatus:
    """Classify one variant by URL availability; a download URL always wins"""
    if variant.has_download_url:
        return VariantStatus.DOWNLOAD_READY
    if variant.has_stream_url:
        return VariantStatus.STREAM_READY
    return VariantStatus.PENDING


def calculate_song_status(variants: List[Variant]) -> CalculatedSongStatus:
    """Aggregate variant statuses into the song status.

    COMPLETED when every variant is download-ready, STREAM_AVAILABLE when at
    least one can be streamed or downloaded, PENDING otherwise (including the
    empty list). FAILED is never produced here: it is an external signal.
    """
    if not variants:
        return CalculatedSongStatus(song_status=SongStatus.PENDING)

    calculated = [
        CalculatedVariant(
            **variant.model_dump(by_alias=True),
            variantStatus=calculate_variant_status(variant)
        )
        for variant in variants
    ]

    has_any_stream_ready = any(
        v.variant_status in (VariantStatus.STREAM_READY, VariantStatus.DOWNLOAD_READY)
        for v in calculated
    )
    has_any_download_ready = any(v.variant_status == VariantStatus.DOWNLOAD_READY for v in calculated)
    all_download_ready = all(v.variant_status == VariantStatus.DOWNLOAD_READY for v in calculated)

    if all_download_ready:
        song_status = SongStatus.COMPLETED
    elif has_any_stream_ready:
        song_status = SongStatus.STREAM_AVAILABLE
    else:
        song_status = SongStatus.PENDING

    status_logger.log_status_calculated(
        song_status=song_status.value,
        variants_count=len(calculated),
        has_any_stream_ready=has_any_stream_ready,
        has_any_download_ready=has_any_download_ready,
        all_download_ready=all_download_ready
    )

    return CalculatedSongStatus(
        song_status=song_status,
        variants=calculated,
        has_any_stream_ready=has_any_stream_ready,
        has_any_download_ready=has_any_download_ready,
        all_download_ready=all_download_ready
    )


def variants_from_raw(raw_variants: Optional[List[Dict[str, Any]]]) -> List[Variant]:
    """Map a raw JSON variant list to Variants; anything that is not a list is empty"""
    if not isinstance(raw_variants, list):
        return []
    return [Variant.from_raw(v) for v in raw_variants if isinstance(v, dict)]
