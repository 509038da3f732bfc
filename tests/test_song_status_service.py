"""
Tests for the song status service and background refresh
"""
import pytest
from unittest.mock import AsyncMock

from melodia.core.job_source import DemoJob, ProductionJob
from melodia.services.song_status_background_refresh import BackgroundRefresher
from melodia.services.song_status_service import MissingTaskError, SongStatusService
from melodia.services.suno_client import JobStatusResponse


def _record_info(suno_data):
    return JobStatusResponse.model_validate({
        "code": 200,
        "msg": "success",
        "data": {"taskId": "task-123", "status": "SUCCESS", "response": {"sunoData": suno_data}},
    })


@pytest.fixture
def suno_client():
    client = AsyncMock()
    client.get_record_info = AsyncMock(return_value=_record_info([]))
    return client


@pytest.fixture
def service(session_factory, suno_client):
    status_service = SongStatusService.build(session_factory, suno_client)
    status_service.database_service.retry_delay = 0
    return status_service


@pytest.mark.integration
class TestBackgroundRefresher:

    @pytest.mark.asyncio
    async def test_dispatches_by_job_source(self):
        demo_handler, production_handler = AsyncMock(), AsyncMock()
        refresher = BackgroundRefresher(demo_handler, production_handler)
        demo_job = DemoJob(task_id="demo-task-1", started_at_ms=1)
        production_job = ProductionJob(task_id="task-1")

        refresher.refresh_in_background(1, demo_job)
        refresher.refresh_in_background(2, production_job)
        await refresher.drain()

        demo_handler.refresh.assert_awaited_once_with(1, demo_job)
        production_handler.refresh.assert_awaited_once_with(2, production_job)
        assert refresher.pending == 0

    @pytest.mark.asyncio
    async def test_exceptions_are_swallowed(self):
        production_handler = AsyncMock()
        production_handler.refresh.side_effect = RuntimeError("database went away")
        refresher = BackgroundRefresher(AsyncMock(), production_handler)

        task = refresher.refresh_in_background(1, ProductionJob(task_id="task-1"))
        await refresher.drain()

        assert task.done()
        assert task.exception() is None


@pytest.mark.integration
class TestSongStatusService:

    @pytest.mark.asyncio
    async def test_not_found_makes_no_write(self, service, suno_client):
        service.database_service.update_database = AsyncMock()

        envelope = await service.get_status(4242)

        assert envelope.code == 404
        assert envelope.data.status == "NOT_FOUND"
        service.database_service.update_database.assert_not_awaited()
        suno_client.get_record_info.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_cold_start_answers_then_refreshes(self, service, song_factory, suno_client):
        song = await song_factory(status="PENDING", suno_task_id="task-123", generation_mode="production")

        envelope = await service.get_status(song.id)

        assert envelope.code == 200
        assert envelope.data.status == "PENDING"
        assert envelope.data.response.song_variant_data == []
        await service.shutdown()
        suno_client.get_record_info.assert_awaited_once_with("task-123")

    @pytest.mark.asyncio
    async def test_partial_readiness(self, service, song_factory, variant_factory):
        song = await song_factory(
            status="STREAM_AVAILABLE",
            song_variants=[variant_factory("a", stream=True, download=True), variant_factory("b", stream=True)]
        )

        envelope = await service.get_status(song.id)
        await service.shutdown()

        assert envelope.data.status == "STREAM_AVAILABLE"
        statuses = [v["variantStatus"] for v in envelope.data.response.song_variant_data]
        assert statuses == ["DOWNLOAD_READY", "STREAM_READY"]

    @pytest.mark.asyncio
    async def test_completed_song_makes_no_external_call(self, service, song_factory, variant_factory, suno_client):
        song = await song_factory(
            status="COMPLETED",
            song_variants=[variant_factory("a", download=True), variant_factory("b", download=True)]
        )
        service.refresher.refresh_in_background = AsyncMock()

        envelope = await service.get_status(song.id)

        assert envelope.data.status == "COMPLETED"
        service.refresher.refresh_in_background.assert_not_called()
        suno_client.get_record_info.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_failed_song_is_terminal(self, service, song_factory, suno_client):
        song = await song_factory(status="FAILED")

        envelope = await service.refresh_now(song.id)

        assert envelope.data.status == "FAILED"
        assert envelope.data.error_code == "GENERATION_FAILED"
        suno_client.get_record_info.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_song_without_task_is_not_refreshed(self, service, song_factory, suno_client):
        song = await song_factory(status="PENDING", suno_task_id=None)

        envelope = await service.get_status(song.id)
        await service.shutdown()

        assert envelope.data.status == "PENDING"
        suno_client.get_record_info.assert_not_awaited()
        with pytest.raises(MissingTaskError):
            await service.refresh_now(song.id)

    @pytest.mark.asyncio
    async def test_background_refresh_updates_row(self, service, song_factory, variant_factory, suno_client):
        song = await song_factory(
            status="STREAM_AVAILABLE",
            song_variants=[variant_factory("a", download=True), variant_factory("b", download=True)]
        )
        suno_client.get_record_info.return_value = _record_info(
            [variant_factory("a", download=True), variant_factory("b", download=True)]
        )

        await service.get_status(song.id)
        await service.shutdown()

        stored = await service.database_service.fetch_song_by_id(song.id)
        assert stored.status == "COMPLETED"

    @pytest.mark.asyncio
    async def test_demo_song_refreshes_without_suno(self, service, song_factory, suno_client):
        song = await song_factory(status="PENDING", suno_task_id="demo-task-1000", generation_mode="demo")

        envelope = await service.refresh_now(song.id)

        # Demo task started at epoch 1s, so it is long complete
        assert envelope.data.status == "COMPLETED"
        suno_client.get_record_info.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_refresh_now_runs_production_handler(self, service, song_factory, variant_factory, suno_client):
        song = await song_factory(status="PENDING", generation_mode="production")
        suno_client.get_record_info.return_value = _record_info([variant_factory("a", stream=True)])

        envelope = await service.refresh_now(song.id)

        assert envelope.data.status == "PENDING"
        assert envelope.data.response.song_variant_data[0]["id"] == "a"
        suno_client.get_record_info.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_scheduled_refresh_never_reverts_failure(self, service, suno_client, song_factory, variant_factory):
        stored = [variant_factory("a", stream=True)]
        song = await song_factory(status="STREAM_AVAILABLE", song_variants=stored)
        suno_client.get_record_info.return_value = _record_info([variant_factory("a", stream=True, download=True)])

        service.refresher.refresh_in_background(song.id, ProductionJob(task_id="task-123"))
        await service.database_service.mark_failed(song.id, "boom")
        await service.shutdown()

        updated = await service.database_service.fetch_song_by_id(song.id)
        assert updated.status == "FAILED"

    @pytest.mark.asyncio
    async def test_scheduled_demo_refresh_never_reverts_failure(self, service, song_factory):
        song = await song_factory(status="PENDING", suno_task_id="demo-task-1", generation_mode="demo")

        service.refresher.refresh_in_background(song.id, DemoJob(task_id="demo-task-1", started_at_ms=1))
        await service.database_service.mark_failed(song.id, "boom")
        await service.shutdown()

        updated = await service.database_service.fetch_song_by_id(song.id)
        assert updated.status == "FAILED"
