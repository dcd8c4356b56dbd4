# -*- coding: utf-8 -*-
"""
@Time    : 2025/8/22 11:05
@Author  : QIN2DIM
@GitHub  : https://github.com/QIN2DIM
@Desc    :
"""
from typing import List

from loguru import logger
from pydantic import BaseModel, Field, ValidationError as PayloadValidationError

from errors import TransportError
from horde.transport import RetryingTransport
from settings import settings

PALM_MODEL = "text-bison-001"


class TextPrompt(BaseModel):
    text: str


class GenerateTextPayload(BaseModel):
    prompt: TextPrompt
    maxOutputTokens: int = 256


class TextCompletion(BaseModel):
    output: str


class ContentFilter(BaseModel):
    reason: str
    message: str | None = None


class GenerateTextResponse(BaseModel):
    candidates: List[TextCompletion] | None = None
    filters: List[ContentFilter] | None = None

    def filter_reasons(self) -> str:
        reasons = []
        for content_filter in self.filters or []:
            if content_filter.message:
                reasons.append(f"{content_filter.reason}: {content_filter.message}")
            else:
                reasons.append(content_filter.reason)
        return ", ".join(reasons)


class PalmError(BaseModel):
    code: int
    message: str
    status: str | None = None


class PalmErrorResponse(BaseModel):
    error: PalmError = Field(description="Google API 的标准错误体")


class PalmClient:
    def __init__(
        self,
        api_key: str = settings.GOOGLE_PALM_API_KEY.get_secret_value(),
        base_url: str = settings.GOOGLE_PALM_BASE_URL,
        transport: RetryingTransport | None = None,
    ):
        self._api_key = api_key
        self._transport = transport or RetryingTransport(base_url=base_url)

    @property
    def is_configured(self) -> bool:
        return bool(self._api_key)

    async def aclose(self):
        await self._transport.aclose()

    async def generate_text(
        self, prompt: str, max_output_tokens: int = 256
    ) -> GenerateTextResponse | PalmErrorResponse:
        """
        API 层面的错误（例如 key 无效）以 PalmErrorResponse 返回，网络错误继续抛出 TransportError
        """
        payload = GenerateTextPayload(
            prompt=TextPrompt(text=prompt), maxOutputTokens=max_output_tokens
        )

        try:
            response = await self._transport.post(
                f"/models/{PALM_MODEL}:generateText",
                params={"key": self._api_key},
                json=payload.model_dump(),
            )
        except TransportError as err:
            if not err.body:
                raise
            try:
                error_response = PalmErrorResponse.model_validate_json(err.body)
            except PayloadValidationError:
                raise err
            error = error_response.error
            logger.warning(f"PaLM error {error.code}: {error.message}")
            return error_response

        return GenerateTextResponse.model_validate(response.json())
