# -*- coding: utf-8 -*-
from unittest.mock import AsyncMock

import httpx
import pytest
from loguru import logger

from errors import TransportError
from horde.transport import RetryingTransport


def _transport(handler, sleep, retries=3, delay=2.0) -> RetryingTransport:
    client = httpx.AsyncClient(
        transport=httpx.MockTransport(handler), base_url="https://remote.test"
    )
    return RetryingTransport(client=client, retries=retries, delay=delay, sleep=sleep)


def _scripted(statuses):
    calls = []
    statuses = iter(statuses)

    def handler(request: httpx.Request) -> httpx.Response:
        calls.append(request)
        return httpx.Response(next(statuses), json={"attempt": len(calls)})

    return handler, calls


class TestRetryingTransport:
    @pytest.mark.asyncio
    async def test_success_does_not_retry(self):
        handler, calls = _scripted([200])
        sleep = AsyncMock()

        response = await _transport(handler, sleep).get("/ok")

        assert response.json() == {"attempt": 1}
        assert len(calls) == 1
        sleep.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_three_failures_then_success(self):
        handler, calls = _scripted([500, 502, 503, 200])
        sleep = AsyncMock()

        response = await _transport(handler, sleep).post("/flaky", json={})

        assert response.status_code == 200
        assert len(calls) == 4
        assert sleep.await_count == 3
        sleep.assert_awaited_with(2.0)

    @pytest.mark.asyncio
    async def test_four_failures_propagate_last_error(self):
        handler, calls = _scripted([500, 500, 500, 503])
        sleep = AsyncMock()

        with pytest.raises(TransportError) as exc_info:
            await _transport(handler, sleep).get("/down")

        assert len(calls) == 4
        assert sleep.await_count == 3
        assert exc_info.value.status_code == 503
        assert isinstance(exc_info.value.__cause__, httpx.HTTPStatusError)
        assert '"attempt":4' in exc_info.value.body.replace(" ", "")

    @pytest.mark.asyncio
    async def test_connection_errors_are_retried(self):
        attempts = []

        def handler(request: httpx.Request) -> httpx.Response:
            attempts.append(request)
            if len(attempts) < 3:
                raise httpx.ConnectError("connection refused", request=request)
            return httpx.Response(200, json={})

        sleep = AsyncMock()
        response = await _transport(handler, sleep).get("/")

        assert response.status_code == 200
        assert len(attempts) == 3

    @pytest.mark.asyncio
    async def test_connection_error_exhaustion_has_no_status(self):
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ReadTimeout("timed out", request=request)

        with pytest.raises(TransportError) as exc_info:
            await _transport(handler, AsyncMock(), retries=1).get("/")

        assert exc_info.value.status_code is None
        assert isinstance(exc_info.value.__cause__, httpx.ReadTimeout)

    @pytest.mark.asyncio
    async def test_zero_retries_fails_fast(self):
        handler, calls = _scripted([500])
        sleep = AsyncMock()

        with pytest.raises(TransportError):
            await _transport(handler, sleep, retries=0).get("/")

        assert len(calls) == 1
        sleep.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_non_http_errors_are_not_retried(self):
        calls = []

        def handler(request: httpx.Request) -> httpx.Response:
            calls.append(request)
            raise RuntimeError("bug in request building")

        sleep = AsyncMock()

        with pytest.raises(RuntimeError):
            await _transport(handler, sleep).get("/")

        assert len(calls) == 1
        sleep.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_each_failed_attempt_is_logged(self):
        handler, _ = _scripted([500, 502, 200])
        messages = []
        sink_id = logger.add(lambda message: messages.append(message.record), level="INFO")

        try:
            await _transport(handler, AsyncMock()).get("/flaky")
        finally:
            logger.remove(sink_id)

        warnings = [record["message"] for record in messages if record["level"].name == "WARNING"]
        retries = [record["message"] for record in messages if record["level"].name == "INFO"]
        assert warnings == ["HTTP error: 500 - GET /flaky", "HTTP error: 502 - GET /flaky"]
        assert retries == ["Retrying (1)… - GET /flaky", "Retrying (2)… - GET /flaky"]
