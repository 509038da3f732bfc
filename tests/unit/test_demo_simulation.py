"""
Unit tests for demo task ids and demo variant simulation
"""
import pytest
from unittest.mock import patch

from melodia.core.job_source import (
    DemoJob,
    ProductionJob,
    extract_task_timestamp,
    is_demo_task,
    make_demo_task_id,
    resolve_job_source,
)
from melodia.core.song_status import SongStatus, calculate_song_status, variants_from_raw
from melodia.services.demo_data_service import generate_demo_variants


@pytest.mark.unit
class TestJobSource:
    """Task id convention and job source resolution"""

    def test_demo_task_id_format(self):
        assert make_demo_task_id(1700000000000) == "demo-task-1700000000000"

    def test_demo_prefix_detection(self):
        assert is_demo_task("demo-task-1700000000000")
        assert not is_demo_task("5c2f0e51a7d94b1e")

    def test_extract_timestamp(self):
        assert extract_task_timestamp("demo-task-1700000000000") == 1700000000000

    def test_extract_timestamp_falls_back_to_now(self):
        with patch("melodia.core.job_source.now_ms", return_value=42):
            assert extract_task_timestamp("demo-task-notanumber") == 42
            assert extract_task_timestamp("demo") == 42

    def test_resolve_from_prefix(self):
        job = resolve_job_source("demo-task-1700000000000")
        assert job == DemoJob(task_id="demo-task-1700000000000", started_at_ms=1700000000000)
        assert job.mode == "demo"

        assert resolve_job_source("abc123") == ProductionJob(task_id="abc123")

    def test_persisted_mode_overrides_prefix(self):
        job = resolve_job_source("demo-lookalike-id", generation_mode="production")
        assert isinstance(job, ProductionJob)


@pytest.mark.unit
class TestDemoDataSimulation:
    """Demo variants grow more complete with elapsed time"""

    def test_cold_start_has_no_urls(self):
        variants = generate_demo_variants(5000)

        assert len(variants) == 2
        for variant in variants:
            assert variant["audioUrl"] == ""
            assert variant["streamAudioUrl"] == ""
            assert variant["sourceStreamAudioUrl"] == ""
        assert calculate_song_status(variants_from_raw(variants)).song_status == SongStatus.PENDING

    def test_thresholds_are_exclusive(self):
        at_stream = calculate_song_status(variants_from_raw(generate_demo_variants(20000)))
        at_complete = calculate_song_status(variants_from_raw(generate_demo_variants(40000)))

        assert at_stream.song_status == SongStatus.PENDING
        assert at_complete.song_status == SongStatus.STREAM_AVAILABLE

    def test_partial_stage(self):
        variants = generate_demo_variants(30000)
        result = calculate_song_status(variants_from_raw(variants))

        assert variants[0]["audioUrl"]
        assert variants[1]["audioUrl"] == ""
        assert variants[1]["sourceAudioUrl"] == ""
        assert variants[1]["streamAudioUrl"]
        assert result.song_status == SongStatus.STREAM_AVAILABLE
        assert result.has_any_download_ready
        assert not result.all_download_ready

    def test_complete_stage(self):
        result = calculate_song_status(variants_from_raw(generate_demo_variants(45000)))

        assert result.song_status == SongStatus.COMPLETED
        assert result.all_download_ready

    def test_deterministic(self):
        assert generate_demo_variants(30000) == generate_demo_variants(30000)

    def test_returned_data_is_a_copy(self):
        first = generate_demo_variants(45000)
        first[0]["audioUrl"] = "changed"

        assert generate_demo_variants(45000)[0]["audioUrl"] != "changed"

    def test_custom_thresholds(self):
        variants = generate_demo_variants(150, stream_after_ms=100, complete_after_ms=200)
        assert calculate_song_status(variants_from_raw(variants)).song_status == SongStatus.STREAM_AVAILABLE
