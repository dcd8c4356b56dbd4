# -*- coding: utf-8 -*-
"""
@Time    : 2025/8/22 09:41
@Author  : QIN2DIM
@GitHub  : https://github.com/QIN2DIM
@Desc    :
"""
import time
from typing import List

from loguru import logger
from pydantic import BaseModel, Field

from horde.transport import RetryingTransport
from settings import settings


class CraiyonPayload(BaseModel):
    prompt: str


class CraiyonResult(BaseModel):
    images: List[str] = Field(default_factory=list, description="base64 编码的图片，可能包含换行")
    duration: float = Field(default=0.0, description="生成耗时（秒）")


class CraiyonClient:
    def __init__(
        self, base_url: str = settings.CRAIYON_BASE_URL, transport: RetryingTransport | None = None
    ):
        self._transport = transport or RetryingTransport(base_url=base_url, timeout=300)

    async def aclose(self):
        await self._transport.aclose()

    async def generate(self, prompt: str) -> CraiyonResult:
        """
        Craiyon 是同步接口，一次请求通常需要 1-2 分钟

        Raises:
            TransportError: the request kept failing after every retry
        """
        start = time.monotonic()
        response = await self._transport.post(
            "/generate", json=CraiyonPayload(prompt=prompt).model_dump()
        )
        duration = time.monotonic() - start

        result = CraiyonResult(images=response.json().get("images", []), duration=duration)
        logger.debug(f"Craiyon returned {len(result.images)} images in {duration:.1f}s")
        return result
