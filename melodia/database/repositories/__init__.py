"""
Melodia Repository Layer
Data access layer with async CRUD operations
"""

from .song_repository import (
    ConflictError,
    RepositoryError,
    SongRepository
)

__all__ = [
    "ConflictError",
    "RepositoryError",
    "SongRepository"
]
