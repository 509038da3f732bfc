"""
Melodia Testing Configuration
Pytest fixtures and test setup
"""
import pytest
import pytest_asyncio

from melodia.database.connection import DatabaseManager
from melodia.database.models import Song
from melodia.services.song_status_database_service import SongStatusDatabaseService


def make_variant(
    variant_id: str = "v1",
    stream: bool = False,
    download: bool = False,
    **extra
) -> dict:
    """Suno-shaped variant dict with the requested URLs filled in"""
    variant = {
        "id": variant_id,
        "audioUrl": f"https://cdn.example.com/{variant_id}.mp3" if download else "",
        "sourceAudioUrl": "",
        "streamAudioUrl": f"https://stream.example.com/{variant_id}" if stream else "",
        "sourceStreamAudioUrl": "",
        "imageUrl": f"https://cdn.example.com/{variant_id}.jpeg",
        "title": "Test Song",
        "duration": 180.4,
        "prompt": "la la la",
        "modelName": "chirp-v4",
        "tags": "pop",
        "createTime": 1756555316725,
    }
    variant.update(extra)
    return variant


@pytest.fixture
def variant_factory():
    """Build raw variant dicts"""
    return make_variant


@pytest_asyncio.fixture
async def db_manager(tmp_path):
    """Database manager backed by a throwaway SQLite file"""
    manager = DatabaseManager()
    await manager.initialize(f"sqlite+aiosqlite:///{tmp_path / 'melodia_test.db'}", use_redis=False)
    await manager.create_all()
    yield manager
    await manager.close()


@pytest.fixture
def session_factory(db_manager):
    return db_manager.session_factory


@pytest.fixture
def database_service(session_factory):
    """Status database service with retries that do not sleep"""
    service = SongStatusDatabaseService(session_factory)
    service.retry_delay = 0
    return service


@pytest.fixture
def song_factory(session_factory):
    """Insert a song row directly and return it"""
    counter = {"n": 0}

    async def _create(
        status: str = "PENDING",
        song_variants=None,
        suno_task_id="task-123",
        generation_mode=None,
        **fields
    ) -> Song:
        counter["n"] += 1
        song = Song(
            title=fields.pop("title", "Test Song"),
            lyrics=fields.pop("lyrics", "Verse one"),
            slug=fields.pop("slug", f"test-song-{counter['n']}"),
            status=status,
            song_variants=song_variants if song_variants is not None else [],
            suno_task_id=suno_task_id,
            generation_mode=generation_mode,
            **fields
        )
        async with session_factory() as session:
            session.add(song)
            await session.commit()
            await session.refresh(song)
        return song

    return _create


def pytest_configure(config):
    """Configure pytest with custom markers"""
    config.addinivalue_line(
        "markers", "unit: mark test as unit test"
    )
    config.addinivalue_line(
        "markers", "integration: mark test as integration test"
    )
