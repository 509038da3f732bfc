"""
Slug helpers for song URLs
"""

import re
import time
from typing import Awaitable, Callable

DEFAULT_SLUG = "song"
MAX_BASE_LENGTH = 50
MAX_SLUG_LENGTH = 100
MAX_ATTEMPTS = 1000

SLUG_PATTERN = re.compile(r"^[a-z0-9]+(?:-[a-z0-9]+)*$")


def generate_base_slug(title: str) -> str:
    """Lower-case, hyphen-separated slug derived from a title"""
    if not title or not isinstance(title, str):
        return DEFAULT_SLUG

    slug = title.lower().strip()
    slug = re.sub(r"[^\w\s-]", "", slug, flags=re.ASCII)
    slug = re.sub(r"[\s_-]+", "-", slug)
    slug = slug.strip("-")[:MAX_BASE_LENGTH].strip("-")

    return slug or DEFAULT_SLUG


def is_valid_slug(slug: str) -> bool:
    if not slug or not isinstance(slug, str):
        return False
    return bool(SLUG_PATTERN.match(slug)) and len(slug) <= MAX_SLUG_LENGTH


async def generate_unique_slug(base_slug: str, exists: Callable[[str], Awaitable[bool]]) -> str:
    """Append -1, -2, ... until exists() reports the slug free"""
    base_slug = base_slug.strip() if base_slug else ""
    if not base_slug:
        base_slug = DEFAULT_SLUG

    slug = base_slug
    for counter in range(1, MAX_ATTEMPTS + 1):
        if not await exists(slug):
            return slug
        slug = f"{base_slug}-{counter}"

    return f"{base_slug}-{int(time.time() * 1000)}"
