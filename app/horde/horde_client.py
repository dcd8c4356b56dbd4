# -*- coding: utf-8 -*-
"""
@Time    : 2025/8/20 15:48
@Author  : QIN2DIM
@GitHub  : https://github.com/QIN2DIM
@Desc    :
"""
from typing import List

from loguru import logger
from pydantic import ValidationError as PayloadValidationError

from errors import TransportError, SubmissionError, PollError, FetchError
from horde.models import GenerationPayload, AsyncSubmitResponse, RequestCheck, RequestStatus
from horde.transport import RetryingTransport
from models import JobStatus, WorkerResult
from settings import settings


def _remote_message(err: TransportError) -> str:
    """Stable Horde 的错误响应形如 {"message": "..."}"""
    if err.body:
        try:
            message = AsyncSubmitResponse.model_validate_json(err.body).message
        except PayloadValidationError:
            message = None
        if message:
            return message
    if err.status_code:
        return f"HTTP {err.status_code}"
    return str(err)


class HordeJobClient:
    def __init__(
        self,
        api_key: str = settings.STABLEHORDE_API_KEY.get_secret_value(),
        base_url: str = settings.STABLEHORDE_BASE_URL,
        client_agent: str = settings.STABLEHORDE_CLIENT_AGENT,
        images_per_job: int = settings.STABLEHORDE_IMAGES_PER_JOB,
        transport: RetryingTransport | None = None,
    ):
        headers = {"apikey": api_key, "Client-Agent": client_agent}
        self.images_per_job = images_per_job
        self._transport = transport or RetryingTransport(base_url=base_url, headers=headers)

    async def aclose(self):
        await self._transport.aclose()

    async def submit(self, prompt: str, model: str, size: int) -> str:
        """
        提交异步生成任务

        Returns:
            Stable Horde 分配的 request id
        """
        payload = GenerationPayload.build(prompt, model, size, n=self.images_per_job)

        try:
            response = await self._transport.post(
                "/generate/async", json=payload.model_dump(mode="json")
            )
        except TransportError as err:
            raise SubmissionError(_remote_message(err)) from err

        try:
            result = AsyncSubmitResponse.model_validate(response.json())
        except (ValueError, PayloadValidationError) as err:
            raise SubmissionError(f"unexpected response: {response.text[:200]}") from err

        if not result.id:
            raise SubmissionError(result.message or "request was rejected")

        logger.debug(f"Submitted horde job {result.id} - model={model} size={size}")
        return result.id

    async def poll(self, job_id: str) -> JobStatus:
        try:
            response = await self._transport.get(f"/generate/check/{job_id}")
        except TransportError as err:
            raise PollError(_remote_message(err), job_id=job_id) from err

        try:
            check = RequestCheck.model_validate(response.json())
        except (ValueError, PayloadValidationError) as err:
            raise PollError(f"unexpected response: {response.text[:200]}", job_id=job_id) from err

        if check.faulted:
            raise PollError("generation faulted on the horde", job_id=job_id)

        return check.to_status()

    async def fetch_results(self, job_id: str) -> List[WorkerResult]:
        """Only meaningful once ``poll`` has reported the job as done"""
        try:
            response = await self._transport.get(f"/generate/status/{job_id}")
        except TransportError as err:
            raise FetchError(_remote_message(err), job_id=job_id) from err

        try:
            status = RequestStatus.model_validate(response.json())
        except (ValueError, PayloadValidationError) as err:
            raise FetchError(f"unexpected response: {response.text[:200]}", job_id=job_id) from err

        return [generation.to_result() for generation in status.generations]
