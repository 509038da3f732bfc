"""
Demo Data Service
Fabricates Suno-shaped variant data for demo mode. Completeness grows with the
time elapsed since the demo task was created:

    elapsed <= stream threshold     both variants pending
    elapsed <= complete threshold   first variant downloadable, second stream only
    otherwise                       both variants downloadable
"""

import copy
from typing import Any, Dict, List, Optional

from ..core.config import get_settings

_DEMO_VARIANTS: List[Dict[str, Any]] = [
    {
        "id": "78df5b9b-6168-4524-81c0-969adee3073a",
        "audioUrl": "https://apiboxfiles.erweima.ai/NzhkZjViOWItNjE2OC00NTI0LTgxYzAtOTY5YWRlZTMwNzNh.mp3",
        "sourceAudioUrl": "https://cdn1.suno.ai/78df5b9b-6168-4524-81c0-969adee3073a.mp3",
        "streamAudioUrl": "https://mfile.erweima.ai/NzhkZjViOWItNjE2OC00NTI0LTgxYzAtOTY5YWRlZTMwNzNh",
        "sourceStreamAudioUrl": "https://cdn1.suno.ai/78df5b9b-6168-4524-81c0-969adee3073a.mp3",
        "imageUrl": "https://apiboxfiles.erweima.ai/NzhkZjViOWItNjE2OC00NTI0LTgxYzAtOTY5YWRlZTMwNzNh.jpeg",
        "sourceImageUrl": "https://cdn2.suno.ai/image_78df5b9b-6168-4524-81c0-969adee3073a.jpeg",
        "prompt": "Demo song prompt",
        "modelName": "chirp-bluejay",
        "title": "Shehar Hila De",
        "tags": "Demo song tags",
        "createTime": 1756555316725,
        "duration": 181.88,
    },
    {
        "id": "980396fc-b213-4112-a903-419a3d1a9dc3",
        "audioUrl": "https://apiboxfiles.erweima.ai/OTgwMzk2ZmMtYjIxMy00MTEyLWE5MDMtNDE5YTNkMWE5ZGMz.mp3",
        "sourceAudioUrl": "https://cdn1.suno.ai/980396fc-b213-4112-a903-419a3d1a9dc3.mp3",
        "streamAudioUrl": "https://mfile.erweima.ai/OTgwMzk2ZmMtYjIxMy00MTEyLWE5MDMtNDE5YTNkMWE5ZGMz",
        "sourceStreamAudioUrl": "https://cdn1.suno.ai/980396fc-b213-4112-a903-419a3d1a9dc3.mp3",
        "imageUrl": "https://apiboxfiles.erweima.ai/OTgwMzk2ZmMtYjIxMy00MTEyLWE5MDMtNDE5YTNkMWE5ZGMz.jpeg",
        "sourceImageUrl": "https://cdn2.suno.ai/image_980396fc-b213-4112-a903-419a3d1a9dc3.jpeg",
        "prompt": "Demo song prompt",
        "modelName": "chirp-bluejay",
        "title": "Shehar Hila De",
        "tags": "Demo song tags",
        "createTime": 1756555316725,
        "duration": 196.48,
    },
]

_DOWNLOAD_FIELDS = ("audioUrl", "sourceAudioUrl")
_STREAM_FIELDS = ("streamAudioUrl", "sourceStreamAudioUrl")


def _strip(variant: Dict[str, Any], fields) -> Dict[str, Any]:
    for field in fields:
        variant[field] = ""
    return variant


def generate_demo_variants(
    elapsed_ms: int,
    stream_after_ms: Optional[int] = None,
    complete_after_ms: Optional[int] = None
) -> List[Dict[str, Any]]:
    """Generate demo variant data for the given elapsed time in milliseconds"""
    demo_config = get_settings().get_demo_config()
    stream_after_ms = demo_config["stream_after_ms"] if stream_after_ms is None else stream_after_ms
    complete_after_ms = demo_config["complete_after_ms"] if complete_after_ms is None else complete_after_ms

    variants = copy.deepcopy(_DEMO_VARIANTS)

    if elapsed_ms > complete_after_ms:
        return variants

    if elapsed_ms > stream_after_ms:
        _strip(variants[1], _DOWNLOAD_FIELDS)
        return variants

    return [_strip(variant, _DOWNLOAD_FIELDS + _STREAM_FIELDS) for variant in variants]
