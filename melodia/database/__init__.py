"""
Melodia Database Module
Exports database models, connection management, and Base
"""

from .connection import Base, DatabaseManager, database_manager
from .models import Song

__all__ = [
    "Base",
    "DatabaseManager",
    "database_manager",
    "Song"
]
