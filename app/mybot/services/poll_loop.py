# -*- coding: utf-8 -*-
"""
@Time    : 2025/8/21 11:40
@Author  : QIN2DIM
@GitHub  : https://github.com/QIN2DIM
@Desc    : Poll a Stable Horde job until it is done, emitting debounced progress updates
"""
import asyncio
import time
from typing import Awaitable, Callable, Protocol

from loguru import logger

from models import JobStatus, PollState, ProgressUpdate
from settings import settings


class StatusSource(Protocol):
    async def poll(self, job_id: str) -> JobStatus: ...


class ProgressPolicy:
    """
    Decide which observed statuses are worth showing to the user

    - a status equal to the last shown one is never shown twice
    - after the first update, updates are at least ``debounce`` seconds apart;
      a change inside that window is dropped and only the latest status wins
    - once a wait time of ``long_wait_threshold`` seconds or more has been seen,
      every later update carries the long wait notice
    """

    def __init__(
        self,
        debounce: float = settings.PROGRESS_DEBOUNCE,
        long_wait_threshold: int = settings.LONG_WAIT_THRESHOLD,
    ):
        self.debounce = debounce
        self.long_wait_threshold = long_wait_threshold

        self.long_wait = False
        self.last_status: JobStatus | None = None
        self.last_emitted_at: float | None = None

    def observe(self, status: JobStatus, now: float) -> ProgressUpdate | None:
        if status.wait_time >= self.long_wait_threshold:
            self.long_wait = True

        if self.last_status == status:
            return None

        if self.last_emitted_at is not None and now - self.last_emitted_at < self.debounce:
            return None

        first = self.last_emitted_at is None
        self.last_status = status
        self.last_emitted_at = now
        return ProgressUpdate(status=status, long_wait=self.long_wait, first=first)


class PollLoop:
    """
    One instance per job. There is no deadline: the loop ends when the horde
    reports the job as done, when ``poll`` raises, or when the surrounding task
    is cancelled.
    """

    def __init__(
        self,
        client: StatusSource,
        policy: ProgressPolicy | None = None,
        *,
        interval: float = settings.POLL_INTERVAL,
        clock: Callable[[], float] = time.monotonic,
        sleep: Callable[[float], Awaitable] = asyncio.sleep,
    ):
        self.client = client
        self.policy = policy or ProgressPolicy()
        self.interval = interval
        self.state = PollState.POLLING
        self._clock = clock
        self._sleep = sleep

    async def run(
        self, job_id: str, on_progress: Callable[[ProgressUpdate], Awaitable] | None = None
    ) -> JobStatus:
        while True:
            status = await self.client.poll(job_id)

            if status.done:
                self.state = PollState.DONE
                logger.debug(f"Horde job {job_id} is done")
                return status

            update = self.policy.observe(status, self._clock())
            if update and on_progress:
                await on_progress(update)

            await self._sleep(self.interval)
