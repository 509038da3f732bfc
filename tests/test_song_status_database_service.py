"""
Tests for database-first song status reconciliation
"""
import pytest
from unittest.mock import AsyncMock, patch

from melodia.core.result import Result
from melodia.core.song_status import SongStatus, Variant, variants_from_raw
from melodia.services.song_status_database_service import is_refresh_needed, serialize_variants


@pytest.mark.integration
class TestSongStatusDatabaseService:

    @pytest.mark.parametrize("status,needed", [
        ("PENDING", True),
        ("STREAM_AVAILABLE", True),
        ("COMPLETED", False),
        ("FAILED", False),
        ("SOMETHING_ELSE", True),
    ])
    def test_is_refresh_needed(self, status, needed):
        from melodia.database.models import Song
        assert is_refresh_needed(Song(status=status)) is needed

    @pytest.mark.asyncio
    async def test_fetch_missing_song(self, database_service):
        assert await database_service.fetch_song_by_id(4242) is None

    @pytest.mark.asyncio
    async def test_completed_song_returns_immediately(self, database_service, song_factory, variant_factory):
        song = await song_factory(
            status="COMPLETED",
            song_variants=[variant_factory("a", download=True), variant_factory("b", download=True)]
        )

        response = database_service.try_respond_from_database(song)

        assert response.should_return
        assert response.status == "COMPLETED"
        assert [v["variantStatus"] for v in response.variants] == ["DOWNLOAD_READY", "DOWNLOAD_READY"]

    @pytest.mark.asyncio
    async def test_failed_song_returns_stored_variants(self, database_service, song_factory, variant_factory):
        stored = [variant_factory("a")]
        song = await song_factory(status="FAILED", song_variants=stored)

        response = database_service.try_respond_from_database(song)

        assert response.should_return
        assert response.status == "FAILED"
        assert response.variants == stored

    @pytest.mark.asyncio
    async def test_persisted_status_wins_over_recomputed(self, database_service, song_factory, variant_factory):
        # Stored variants are fully downloadable but the column still says PENDING
        song = await song_factory(status="PENDING", song_variants=[variant_factory("a", download=True)])

        response = database_service.try_respond_from_database(song)

        assert not response.should_return
        assert response.status == "PENDING"

    @pytest.mark.asyncio
    async def test_update_database_writes_snapshot(self, database_service, song_factory, variant_factory):
        song = await song_factory()
        variants = variants_from_raw([variant_factory("a", stream=True)])

        assert await database_service.update_database(song.id, SongStatus.STREAM_AVAILABLE, variants)

        updated = await database_service.fetch_updated_song(song.id)
        assert updated.status == "STREAM_AVAILABLE"
        assert updated.song_variants[0]["variantStatus"] == "STREAM_READY"
        assert updated.song_variants[0]["duration"] == 180

    @pytest.mark.asyncio
    async def test_update_database_missing_row(self, database_service):
        assert not await database_service.update_database(999, SongStatus.PENDING, [])

    @pytest.mark.asyncio
    async def test_update_database_retries_then_gives_up(self, database_service, song_factory):
        song = await song_factory()
        failing = AsyncMock(return_value=Result.err("database is locked"))

        with patch(
            "melodia.services.song_status_database_service.SongRepository.update_status_and_variants",
            failing
        ):
            ok = await database_service.update_database(song.id, SongStatus.PENDING, [])

        assert not ok
        assert failing.await_count == database_service.max_retries

    @pytest.mark.asyncio
    async def test_update_database_recovers_on_retry(self, database_service, song_factory):
        song = await song_factory()
        flaky = AsyncMock(side_effect=[Result.err("timeout"), Result.ok(song)])

        with patch(
            "melodia.services.song_status_database_service.SongRepository.update_status_and_variants",
            flaky
        ):
            assert await database_service.update_database(song.id, SongStatus.PENDING, [])

        assert flaky.await_count == 2

    @pytest.mark.asyncio
    async def test_mark_failed(self, database_service, song_factory):
        song = await song_factory(status="STREAM_AVAILABLE")

        assert await database_service.mark_failed(song.id, "Sensitive words detected")

        updated = await database_service.fetch_updated_song(song.id)
        assert updated.status == "FAILED"
        assert updated.error_message == "Sensitive words detected"

    @pytest.mark.asyncio
    async def test_mark_failed_keeps_completed_song(self, database_service, song_factory):
        song = await song_factory(status="COMPLETED")

        assert await database_service.mark_failed(song.id, "late failure report")

        updated = await database_service.fetch_updated_song(song.id)
        assert updated.status == "COMPLETED"
        assert updated.error_message is None

    @pytest.mark.asyncio
    async def test_update_database_never_reverts_failed(self, database_service, song_factory, variant_factory):
        song = await song_factory(status="FAILED")
        variant = Variant.from_raw(variant_factory("a", stream=True))

        assert await database_service.update_database(song.id, SongStatus.STREAM_AVAILABLE, [variant])

        updated = await database_service.fetch_updated_song(song.id)
        assert updated.status == "FAILED"
        assert updated.song_variants == []


@pytest.mark.unit
def test_serialize_variants_recomputes_status():
    variant = Variant(id="a", audioUrl="https://cdn/a.mp3", duration=181.88)

    raw = serialize_variants([variant])[0]

    assert raw["variantStatus"] == "DOWNLOAD_READY"
    assert raw["duration"] == 182
    assert raw["audioUrl"] == "https://cdn/a.mp3"
