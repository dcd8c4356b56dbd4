# -*- coding: utf-8 -*-
import json
from unittest.mock import AsyncMock

import httpx
import pytest

from errors import SubmissionError, PollError, FetchError
from horde import HordeJobClient, RetryingTransport
from models import JobStatus, WorkerResult


def _client(handler, retries=0) -> HordeJobClient:
    http_client = httpx.AsyncClient(
        transport=httpx.MockTransport(handler), base_url="https://stablehorde.test/api/v2"
    )
    transport = RetryingTransport(client=http_client, retries=retries, sleep=AsyncMock())
    return HordeJobClient(transport=transport, images_per_job=4)


class TestSubmit:
    @pytest.mark.asyncio
    async def test_submit_sends_generation_payload(self):
        seen = {}

        def handler(request: httpx.Request) -> httpx.Response:
            seen["path"] = request.url.path
            seen["body"] = json.loads(request.content)
            return httpx.Response(202, json={"id": "job-1", "kudos": 10})

        job_id = await _client(handler).submit("a cat", "stable_diffusion", 512)

        assert job_id == "job-1"
        assert seen["path"] == "/api/v2/generate/async"
        assert seen["body"]["prompt"] == "a cat"
        assert seen["body"]["models"] == ["stable_diffusion"]
        assert seen["body"]["params"] == {"width": 512, "height": 512, "n": 4}
        assert seen["body"]["r2"] is False

    @pytest.mark.asyncio
    async def test_rejected_prompt_raises_submission_error_with_remote_message(self):
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(400, json={"message": "Input payload validation failed"})

        with pytest.raises(SubmissionError, match="Input payload validation failed"):
            await _client(handler).submit("a cat", "stable_diffusion", 512)

    @pytest.mark.asyncio
    async def test_missing_id_raises_submission_error(self):
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(200, json={"message": "no workers"})

        with pytest.raises(SubmissionError, match="no workers"):
            await _client(handler).submit("a cat", "stable_diffusion", 512)


class TestPoll:
    @pytest.mark.asyncio
    async def test_poll_maps_check_response(self):
        def handler(request: httpx.Request) -> httpx.Response:
            assert request.url.path.endswith("/generate/check/job-1")
            return httpx.Response(
                200,
                json={
                    "finished": 1,
                    "processing": 2,
                    "restarted": 0,
                    "waiting": 1,
                    "done": False,
                    "faulted": False,
                    "wait_time": 42,
                    "queue_position": 7,
                    "kudos": 20.0,
                    "is_possible": True,
                },
            )

        status = await _client(handler).poll("job-1")

        assert status == JobStatus(
            waiting=1, processing=2, finished=1, queue_position=7, wait_time=42, done=False
        )

    @pytest.mark.asyncio
    async def test_poll_exhausted_retries_raise_poll_error(self):
        calls = []

        def handler(request: httpx.Request) -> httpx.Response:
            calls.append(request)
            return httpx.Response(503, text="Service Unavailable")

        with pytest.raises(PollError) as exc_info:
            await _client(handler, retries=3).poll("job-1")

        assert len(calls) == 4
        assert exc_info.value.job_id == "job-1"

    @pytest.mark.asyncio
    async def test_faulted_job_raises_poll_error(self):
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(200, json={"faulted": True, "done": False})

        with pytest.raises(PollError, match="faulted"):
            await _client(handler).poll("job-1")


class TestFetchResults:
    @pytest.mark.asyncio
    async def test_fetch_results_returns_worker_results_in_order(self):
        def handler(request: httpx.Request) -> httpx.Response:
            assert request.url.path.endswith("/generate/status/job-1")
            return httpx.Response(
                200,
                json={
                    "done": True,
                    "generations": [
                        {"worker_id": "w1", "worker_name": "A", "img": "aaa", "seed": "1"},
                        {"worker_id": "w2", "worker_name": "B", "img": "bbb", "seed": "2"},
                    ],
                },
            )

        results = await _client(handler).fetch_results("job-1")

        assert results == [
            WorkerResult(worker_name="A", image_base64="aaa"),
            WorkerResult(worker_name="B", image_base64="bbb"),
        ]

    @pytest.mark.asyncio
    async def test_fetch_failure_raises_fetch_error(self):
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(404, json={"message": "request not found"})

        with pytest.raises(FetchError, match="request not found"):
            await _client(handler).fetch_results("job-1")
