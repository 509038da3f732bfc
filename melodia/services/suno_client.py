"""
Suno API Client for Melodia
Starts song generation jobs and reads their status from the Suno API
"""

import time
from typing import Any, Dict, List, Optional

import httpx
from pydantic import BaseModel, ConfigDict, Field

from ..core.config import get_settings
from ..core.job_source import make_demo_task_id
from ..core.logging import performance_logger, status_logger
from ..core.result import Result

SUCCESS_CODES = (0, 200)

# Job statuses after which Suno will not produce any more audio
FAILURE_STATUSES = frozenset({
    "CREATE_TASK_FAILED",
    "GENERATE_AUDIO_FAILED",
    "CALLBACK_EXCEPTION",
    "SENSITIVE_WORD_ERROR",
})


class SunoAPIError(Exception):
    """Transport-level failure talking to Suno"""
    pass


class JobStatusPayload(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    suno_data: Optional[List[Dict[str, Any]]] = Field(default=None, alias="sunoData")


class JobStatusData(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    task_id: Optional[str] = Field(None, alias="taskId")
    status: Optional[str] = None
    response: Optional[JobStatusPayload] = None
    error_message: Optional[str] = Field(None, alias="errorMessage")

    @property
    def variants(self) -> List[Dict[str, Any]]:
        if self.response is None:
            return []
        return self.response.suno_data or []

    @property
    def is_failed(self) -> bool:
        return self.status in FAILURE_STATUSES


class JobStatusResponse(BaseModel):
    """Record-info response; data is absent while the job is still queued"""
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    code: int
    msg: str = ""
    data: Optional[JobStatusData] = None

    @property
    def is_success(self) -> bool:
        return self.code in SUCCESS_CODES


class SunoClient:
    """Suno API client"""

    SERVICE_NAME = "suno"

    def __init__(
        self,
        api_url: Optional[str] = None,
        api_key: Optional[str] = None,
        timeout: Optional[float] = None,
        demo_mode: Optional[bool] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None
    ):
        config = get_settings().get_suno_config()
        self.api_url = (api_url or config["api_url"]).rstrip("/")
        self.api_key = api_key if api_key is not None else config["api_key"]
        self.timeout = timeout or config["timeout"]
        self.demo_mode = config["demo_mode"] if demo_mode is None else demo_mode
        self.callback_url = config["callback_url"]
        self.model = config["model"]
        self._transport = transport
        self._client: Optional[httpx.AsyncClient] = None

    def _get_client(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient(
                base_url=self.api_url,
                timeout=httpx.Timeout(self.timeout),
                transport=self._transport,
                headers={
                    "Authorization": f"Bearer {self.api_key}",
                    "Content-Type": "application/json",
                    "User-Agent": "Melodia/1.0"
                }
            )
        return self._client

    async def generate_song(self, title: str, lyrics: str, style: Optional[str] = None) -> Result[str]:
        """Start a generation job and return its task id"""

        if self.demo_mode:
            task_id = make_demo_task_id()
            status_logger.logger.info("Demo generation task created", task_id=task_id, title=title)
            return Result.ok(task_id)

        if not self.api_key:
            return Result.err("SUNO_API_KEY is required outside demo mode")

        request_data = {
            "prompt": lyrics,
            "style": style or "",
            "title": title,
            "customMode": True,
            "instrumental": False,
            "model": self.model,
        }
        if self.callback_url:
            request_data["callBackUrl"] = self.callback_url

        start = time.perf_counter()
        try:
            response = await self._get_client().post("/generate", json=request_data)
        except httpx.RequestError as e:
            return Result.err(f"Suno API request failed: {e}")
        finally:
            performance_logger.log_external_call(
                service=self.SERVICE_NAME,
                operation="generate",
                duration_ms=(time.perf_counter() - start) * 1000
            )

        if response.status_code != 200:
            return Result.err(f"Suno API error: {response.status_code} - {response.text}")

        body = response.json()
        if body.get("code") not in SUCCESS_CODES:
            return Result.err(f"Suno API error: {body.get('code')} - {body.get('msg')}")

        task_id = (body.get("data") or {}).get("taskId")
        if not task_id:
            return Result.err("Suno API response did not include a taskId")
        return Result.ok(task_id)

    async def get_record_info(self, task_id: str) -> JobStatusResponse:
        """Fetch the current status and variant data for a task.

        HTTP error statuses are returned as a failed JobStatusResponse;
        network failures raise SunoAPIError.
        """
        start = time.perf_counter()
        status_code = None
        try:
            response = await self._get_client().get(
                "/generate/record-info",
                params={"taskId": task_id}
            )
            status_code = response.status_code
        except httpx.RequestError as e:
            raise SunoAPIError(f"Suno API request failed: {e}") from e
        finally:
            performance_logger.log_external_call(
                service=self.SERVICE_NAME,
                operation="record-info",
                duration_ms=(time.perf_counter() - start) * 1000,
                status_code=status_code
            )

        if response.status_code != 200:
            return JobStatusResponse(code=response.status_code, msg=response.text or "Suno API error")

        try:
            return JobStatusResponse.model_validate(response.json())
        except ValueError as e:
            raise SunoAPIError(f"Invalid Suno API response: {e}") from e

    async def close(self) -> None:
        if self._client is not None:
            await self._client.aclose()
            self._client = None
