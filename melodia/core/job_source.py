"""
Generation job source
Which data source backs a song's generation job: the demo simulator or the Suno API.
"""

import time
from dataclasses import dataclass
from typing import Optional, Union

from .config import get_settings

DEMO_MODE = "demo"
PRODUCTION_MODE = "production"


@dataclass(frozen=True)
class DemoJob:
    """Simulated job; progress is a function of time elapsed since started_at_ms"""
    task_id: str
    started_at_ms: int

    @property
    def mode(self) -> str:
        return DEMO_MODE


@dataclass(frozen=True)
class ProductionJob:
    """Real Suno generation task"""
    task_id: str

    @property
    def mode(self) -> str:
        return PRODUCTION_MODE


JobSource = Union[DemoJob, ProductionJob]


def now_ms() -> int:
    return int(time.time() * 1000)


def is_demo_task(task_id: str) -> bool:
    return task_id.startswith(get_settings().DEMO_TASK_PREFIX)


def make_demo_task_id(timestamp_ms: Optional[int] = None) -> str:
    """Demo task ids have the form demo-task-<epoch ms>"""
    return f"{get_settings().DEMO_TASK_PREFIX}task-{timestamp_ms if timestamp_ms is not None else now_ms()}"


def extract_task_timestamp(task_id: str) -> int:
    """Read the creation timestamp out of a demo task id, falling back to now"""
    parts = task_id.split("-")
    if len(parts) > 2 and parts[2].isdigit():
        return int(parts[2])
    return now_ms()


def resolve_job_source(task_id: str, generation_mode: Optional[str] = None) -> JobSource:
    """Build the JobSource for a task.

    generation_mode is recorded when the job is created; rows written before
    that column existed fall back to the task id prefix.
    """
    mode = generation_mode or (DEMO_MODE if is_demo_task(task_id) else PRODUCTION_MODE)
    if mode == DEMO_MODE:
        return DemoJob(task_id=task_id, started_at_ms=extract_task_timestamp(task_id))
    return ProductionJob(task_id=task_id)
