"""
Tests for the song repository against SQLite
"""
import pytest

from melodia.database.repositories import ConflictError, SongRepository
from melodia.database.schemas import SongCreate, SongUpdate


@pytest.mark.integration
class TestSongRepository:

    @pytest.mark.asyncio
    async def test_create_and_get(self, session_factory):
        async with session_factory() as session:
            repository = SongRepository(session)
            song = await repository.create(
                SongCreate(title="Birthday Song", lyrics="Happy day"),
                slug="birthday-song",
                suno_task_id="task-1",
                generation_mode="production"
            )

            fetched = await repository.get(song.id)

        assert fetched.slug == "birthday-song"
        assert fetched.status == "PENDING"
        assert fetched.song_variants == []
        assert fetched.generation_mode == "production"

    @pytest.mark.asyncio
    async def test_get_missing_returns_none(self, session_factory):
        async with session_factory() as session:
            repository = SongRepository(session)
            assert await repository.get(12345) is None

    @pytest.mark.asyncio
    async def test_duplicate_slug_conflicts(self, session_factory):
        async with session_factory() as session:
            repository = SongRepository(session)
            await repository.create(SongCreate(title="A", lyrics="x"), slug="same")
            with pytest.raises(ConflictError):
                await repository.create(SongCreate(title="B", lyrics="y"), slug="same")

    @pytest.mark.asyncio
    async def test_get_by_slug(self, session_factory, song_factory):
        song = await song_factory(slug="lookup-me")

        async with session_factory() as session:
            found = await SongRepository(session).get_by_slug("lookup-me")

        assert found.id == song.id

    @pytest.mark.asyncio
    async def test_update_fields_is_partial(self, session_factory, song_factory):
        song = await song_factory(selected_variant=1)

        async with session_factory() as session:
            result = await SongRepository(session).update_fields(song.id, SongUpdate(status="STREAM_AVAILABLE"))

        assert result.is_ok()
        assert result.data.status == "STREAM_AVAILABLE"
        assert result.data.selected_variant == 1
        assert result.data.suno_task_id == song.suno_task_id

    @pytest.mark.asyncio
    async def test_update_missing_row_is_not_found(self, session_factory):
        async with session_factory() as session:
            result = await SongRepository(session).update_fields(999, SongUpdate(status="COMPLETED"))

        assert result.is_err()
        assert result.not_found

    @pytest.mark.asyncio
    async def test_update_status_and_variants(self, session_factory, song_factory, variant_factory):
        song = await song_factory()
        variants = [variant_factory("a", download=True)]

        async with session_factory() as session:
            result = await SongRepository(session).update_status_and_variants(
                song.id, "COMPLETED", variants, error_message="note"
            )

        updated = result.unwrap()
        assert updated.status == "COMPLETED"
        assert updated.song_variants[0]["id"] == "a"
        assert updated.error_message == "note"
        assert updated.last_status_check is not None

    @pytest.mark.asyncio
    async def test_status_write_skips_terminal_row(self, session_factory, song_factory, variant_factory):
        song = await song_factory(status="FAILED")

        async with session_factory() as session:
            result = await SongRepository(session).update_status_and_variants(
                song.id, "STREAM_AVAILABLE", [variant_factory("a", stream=True)]
            )

        assert result.is_ok()
        assert result.data.status == "FAILED"
        assert result.data.song_variants == []

    @pytest.mark.asyncio
    async def test_status_write_to_missing_row_is_not_found(self, session_factory):
        async with session_factory() as session:
            result = await SongRepository(session).update_status_and_variants(999, "PENDING", [])

        assert result.not_found
