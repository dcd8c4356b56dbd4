# -*- coding: utf-8 -*-
import json
from unittest.mock import AsyncMock

import httpx
import pytest

from errors import TransportError
from horde.transport import RetryingTransport
from plugins.craiyon import CraiyonClient
from plugins.google_palm import PalmClient, GenerateTextResponse, PalmErrorResponse


def _transport(handler, base_url, retries=0):
    client = httpx.AsyncClient(transport=httpx.MockTransport(handler), base_url=base_url)
    return RetryingTransport(client=client, retries=retries, sleep=AsyncMock())


class TestPalmClient:
    @pytest.mark.asyncio
    async def test_generate_text(self):
        requests = []

        def handler(request: httpx.Request) -> httpx.Response:
            requests.append(request)
            return httpx.Response(200, json={"candidates": [{"output": "hi there"}]})

        client = PalmClient(
            api_key="secret", transport=_transport(handler, "https://palm.test/v1beta2")
        )

        response = await client.generate_text("say hi", max_output_tokens=256)

        assert isinstance(response, GenerateTextResponse)
        assert response.candidates[0].output == "hi there"
        request = requests[0]
        assert request.url.path == "/v1beta2/models/text-bison-001:generateText"
        assert request.url.params["key"] == "secret"
        assert json.loads(request.content) == {
            "prompt": {"text": "say hi"},
            "maxOutputTokens": 256,
        }

    @pytest.mark.asyncio
    async def test_filtered_response(self):
        def handler(request):
            return httpx.Response(
                200,
                json={"filters": [{"reason": "SAFETY", "message": "unsafe"}, {"reason": "OTHER"}]},
            )

        client = PalmClient(api_key="k", transport=_transport(handler, "https://palm.test"))

        response = await client.generate_text("something")

        assert response.candidates is None
        assert response.filter_reasons() == "SAFETY: unsafe, OTHER"

    @pytest.mark.asyncio
    async def test_api_error_is_returned_not_raised(self):
        def handler(request):
            return httpx.Response(
                400,
                json={
                    "error": {
                        "code": 400,
                        "message": "API key not valid.",
                        "status": "INVALID_ARGUMENT",
                    }
                },
            )

        client = PalmClient(api_key="bad", transport=_transport(handler, "https://palm.test"))

        response = await client.generate_text("hello")

        assert isinstance(response, PalmErrorResponse)
        assert (response.error.code, response.error.message) == (400, "API key not valid.")

    @pytest.mark.asyncio
    async def test_unparseable_error_is_raised(self):
        def handler(request):
            return httpx.Response(502, text="<html>bad gateway</html>")

        client = PalmClient(api_key="k", transport=_transport(handler, "https://palm.test"))

        with pytest.raises(TransportError) as exc_info:
            await client.generate_text("hello")
        assert exc_info.value.status_code == 502

    def test_is_configured(self):
        assert PalmClient(api_key="", transport=AsyncMock()).is_configured is False
        assert PalmClient(api_key="k", transport=AsyncMock()).is_configured is True


class TestCraiyonClient:
    @pytest.mark.asyncio
    async def test_generate(self):
        requests = []

        def handler(request: httpx.Request) -> httpx.Response:
            requests.append(request)
            return httpx.Response(200, json={"images": ["aGVs\nbG8=", "d29ybGQ="]})

        client = CraiyonClient(transport=_transport(handler, "https://craiyon.test"))

        result = await client.generate("a cat")

        assert result.images == ["aGVs\nbG8=", "d29ybGQ="]
        assert result.duration >= 0
        assert requests[0].url.path == "/generate"
        assert json.loads(requests[0].content) == {"prompt": "a cat"}

    @pytest.mark.asyncio
    async def test_generate_retries_then_raises(self):
        calls = []

        def handler(request):
            calls.append(request)
            return httpx.Response(503)

        client = CraiyonClient(transport=_transport(handler, "https://craiyon.test", retries=3))

        with pytest.raises(TransportError):
            await client.generate("a cat")
        assert len(calls) == 4
