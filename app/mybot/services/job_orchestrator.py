# -*- coding: utf-8 -*-
"""
@Time    : 2025/8/21 17:12
@Author  : QIN2DIM
@GitHub  : https://github.com/QIN2DIM
@Desc    : Drive one Stable Horde job from admission to the delivered collage
"""
import asyncio
import tempfile
import time
from dataclasses import dataclass
from typing import Awaitable, Callable, IO, List, Protocol

from loguru import logger
from telegram import Message

from errors import AdmissionDenied, ValidationError, FetchError
from models import Job, JobStatus, ProgressUpdate, WorkerResult
from mybot.common import check_prompt, escape_markdown, format_duration
from mybot.services.poll_loop import PollLoop, ProgressPolicy
from mybot.services.rate_limiter import RateLimiter
from mybot.services.result_aggregator import ResultAggregator
from settings import settings

ATTRIBUTION_BUTTON_TEXT = "generated thanks to Stable Horde"


class JobClient(Protocol):
    async def submit(self, prompt: str, model: str, size: int) -> str: ...

    async def poll(self, job_id: str) -> JobStatus: ...

    async def fetch_results(self, job_id: str) -> List[WorkerResult]: ...


class Messenger(Protocol):
    async def send_status(self, text: str) -> Message: ...

    async def edit_status(self, handle: Message, text: str) -> Message: ...

    async def send_final(
        self, image: IO[bytes], caption: str, attribution_link: tuple[str, str] | None = None
    ) -> Message: ...

    async def delete(self, handle: Message) -> None: ...


def worker_progress_bar(waiting: int, processing: int, finished: int) -> str:
    """five characters per image: '=' finished, '-' processing, ' ' waiting"""
    return (
        "["
        + "=" * (5 * abs(finished))
        + "-" * (5 * abs(processing))
        + " " * (5 * abs(waiting))
        + "]"
    )


def format_status(
    status: JobStatus,
    escaped_prompt: str,
    long_wait: bool,
    site_url: str = settings.STABLEHORDE_SITE_URL,
) -> str:
    queue_info = f"queue position: {status.queue_position}\n" if status.queue_position > 0 else ""
    bar = worker_progress_bar(status.waiting, status.processing, status.finished)

    text = (
        f"generating {escaped_prompt}…\n"
        f"{queue_info}`{bar}` ETA: {format_duration(status.wait_time)}"
    )

    if long_wait:
        text += (
            "\n\nStable Horde is run by volunteers\\. "
            "to make waiting times shorter, "
            f"[consider joining yourself]({site_url})\\!"
        )

    return text


def format_caption(escaped_prompt: str, duration: float, attribution: str) -> str:
    return (
        f"generated *{escaped_prompt}* in {format_duration(duration)} "
        f"by {escape_markdown(attribution)}\\."
    )


@dataclass
class JobContext:
    """State owned by a single job for as long as it runs"""

    job: Job
    messenger: Messenger
    escaped_prompt: str
    status_message: Message | None = None


class JobOrchestrator:
    def __init__(
        self,
        client: JobClient,
        rate_limiter: RateLimiter,
        aggregator: ResultAggregator | None = None,
        *,
        site_url: str = settings.STABLEHORDE_SITE_URL,
        poll_interval: float = settings.POLL_INTERVAL,
        debounce: float = settings.PROGRESS_DEBOUNCE,
        long_wait_threshold: int = settings.LONG_WAIT_THRESHOLD,
        clock: Callable[[], float] = time.monotonic,
        sleep: Callable[[float], Awaitable] = asyncio.sleep,
    ):
        self.client = client
        self.rate_limiter = rate_limiter
        self.aggregator = aggregator or ResultAggregator()
        self.site_url = site_url
        self.poll_interval = poll_interval
        self.debounce = debounce
        self.long_wait_threshold = long_wait_threshold
        self._clock = clock
        self._sleep = sleep

    async def _show_progress(self, ctx: JobContext, update: ProgressUpdate) -> None:
        text = format_status(update.status, ctx.escaped_prompt, update.long_wait, self.site_url)
        if ctx.status_message is None:
            ctx.status_message = await ctx.messenger.send_status(text)
        else:
            ctx.status_message = await ctx.messenger.edit_status(ctx.status_message, text)

    async def run(
        self, user_id: int | str, prompt: str, model: str, size: int, messenger: Messenger
    ) -> Message:
        """
        Run one job to completion and deliver the collage

        Raises:
            AdmissionDenied: the user is over the rate limit, nothing was sent to the horde
            ValidationError: the prompt is too long or has too many lines
            SubmissionError | PollError | FetchError: the job failed at that stage;
                the progress message, if any, is left in place
        """
        if not await self.rate_limiter.try_acquire(user_id):
            logger.info(f"Admission denied for user {user_id}")
            raise AdmissionDenied(user_id)

        if issue := check_prompt(prompt):
            logger.info(f"prompt rejected: {issue}")
            raise ValidationError(issue)

        job_id = await self.client.submit(prompt, model, size)
        job = Job(id=job_id, user_id=user_id, prompt=prompt, model=model, size=size)
        logger.info(f"Horde job {job.id} submitted by {user_id} - model={model}")

        ctx = JobContext(job=job, messenger=messenger, escaped_prompt=escape_markdown(prompt))
        start = self._clock()

        poll_loop = PollLoop(
            self.client,
            ProgressPolicy(debounce=self.debounce, long_wait_threshold=self.long_wait_threshold),
            interval=self.poll_interval,
            clock=self._clock,
            sleep=self._sleep,
        )
        await poll_loop.run(job.id, on_progress=lambda update: self._show_progress(ctx, update))

        duration = self._clock() - start
        results = await self.client.fetch_results(job.id)
        aggregated = self.aggregator.aggregate(results, job.size)

        if not aggregated.decoded:
            raise FetchError("the horde did not return any usable image", job_id=job.id)

        caption = format_caption(ctx.escaped_prompt, duration, aggregated.attribution)

        with tempfile.NamedTemporaryFile(suffix=".png") as artifact:
            aggregated.image.save(artifact, format="PNG")
            artifact.seek(0)
            message = await messenger.send_final(
                artifact, caption, (ATTRIBUTION_BUTTON_TEXT, self.site_url)
            )

        if ctx.status_message is not None:
            await messenger.delete(ctx.status_message)

        logger.success(
            f"Horde job {job.id} delivered - images={aggregated.decoded} "
            f"duration={format_duration(duration)}"
        )
        return message
