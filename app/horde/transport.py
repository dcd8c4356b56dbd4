# -*- coding: utf-8 -*-
"""
@Time    : 2025/8/20 15:31
@Author  : QIN2DIM
@GitHub  : https://github.com/QIN2DIM
@Desc    : httpx client wrapper with a bounded, fixed-delay retry policy
"""
import asyncio
from typing import Any, Awaitable, Callable

from httpx import AsyncClient, HTTPError, HTTPStatusError, Response
from loguru import logger
from tenacity import (
    AsyncRetrying,
    RetryCallState,
    RetryError,
    retry_if_exception_type,
    stop_after_attempt,
    wait_fixed,
)

from errors import TransportError
from settings import settings

Sleeper = Callable[[float], Awaitable[Any]]


class RetryingTransport:
    """
    Every remote call of the bot goes through ``call``.

    A transport error or a non-2xx response is retried ``retries`` times with a
    fixed ``delay`` in between. Once the retries are used up the last error is
    raised as :class:`TransportError` (chained to the original httpx error).
    """

    def __init__(
        self,
        base_url: str = "",
        headers: dict | None = None,
        *,
        retries: int = settings.RETRY_COUNT,
        delay: float = settings.RETRY_DELAY,
        timeout: float = settings.HTTP_REQUEST_TIMEOUT,
        client: AsyncClient | None = None,
        sleep: Sleeper = asyncio.sleep,
    ):
        self.retries = retries
        self.delay = delay
        self._sleep = sleep
        self._client = client or AsyncClient(base_url=base_url, headers=headers, timeout=timeout)

    async def __aenter__(self):
        return self

    async def __aexit__(self, *exc):
        await self.aclose()

    async def aclose(self):
        await self._client.aclose()

    def _retrying(self, method: str, url: str) -> AsyncRetrying:
        def log_failure(retry_state: RetryCallState):
            err = retry_state.outcome.exception()
            if isinstance(err, HTTPStatusError):
                logger.warning(f"HTTP error: {err.response.status_code} - {method} {url}")
            else:
                logger.warning(f"Transport error: {err!r} - {method} {url}")

        def log_retry(retry_state: RetryCallState):
            logger.info(f"Retrying ({retry_state.attempt_number})… - {method} {url}")

        return AsyncRetrying(
            stop=stop_after_attempt(self.retries + 1),
            wait=wait_fixed(self.delay),
            retry=retry_if_exception_type(HTTPError),
            sleep=self._sleep,
            after=log_failure,
            before_sleep=log_retry,
        )

    async def call(self, method: str, url: str, **kwargs) -> Response:
        try:
            async for attempt in self._retrying(method, url):
                with attempt:
                    response = await self._client.request(method, url, **kwargs)
                    response.raise_for_status()
        except RetryError as retry_error:
            err = retry_error.last_attempt.exception()
            logger.error(f"Failed after {self.retries} retries - {method} {url}")

            status_code, body = None, None
            if isinstance(err, HTTPStatusError):
                status_code, body = err.response.status_code, err.response.text
            raise TransportError(str(err), status_code=status_code, body=body) from err

        return response

    async def get(self, url: str, **kwargs) -> Response:
        return await self.call("GET", url, **kwargs)

    async def post(self, url: str, **kwargs) -> Response:
        return await self.call("POST", url, **kwargs)
