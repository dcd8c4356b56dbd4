# -*- coding: utf-8 -*-
"""
@Time    : 2025/8/22 19:40
@Author  : QIN2DIM
@GitHub  : https://github.com/QIN2DIM
@Desc    : Long-running commands run as background jobs tagged with their command and user
"""
import asyncio
import functools
from contextlib import suppress
from dataclasses import dataclass, field
from typing import Callable, Dict, List

from loguru import logger

GENERIC_ERROR_TEXT = "something went wrong while processing this command, please try again later."


@dataclass(eq=False)
class BackgroundJob:
    command: str
    user_id: int | None
    task: asyncio.Task = field(repr=False)


# 持有引用，避免任务被垃圾回收
_jobs: Dict[asyncio.Task, BackgroundJob] = {}


def active_jobs(command: str | None = None) -> List[BackgroundJob]:
    return [job for job in _jobs.values() if command is None or job.command == command]


def get_active_tasks_count() -> int:
    return len(_jobs)


def _forget(task: asyncio.Task) -> None:
    _jobs.pop(task, None)


async def _reply_generic_error(update, context) -> None:
    chat = update.effective_chat if update else None
    if not chat:
        return

    message = update.effective_message
    with suppress(Exception):
        await context.bot.send_message(
            chat_id=chat.id,
            text=GENERIC_ERROR_TEXT,
            reply_to_message_id=message.message_id if message else None,
        )


async def _run_job(handler_func: Callable, update, context, command: str) -> None:
    try:
        await handler_func(update, context)
    except asyncio.CancelledError:
        logger.warning(f"/{command} job was cancelled")
        raise
    except Exception as err:
        logger.exception(f"/{command} job failed: {err}")
        await _reply_generic_error(update, context)
    else:
        logger.debug(f"/{command} job finished")


def non_blocking_handler(command: str):
    """
    Run the decorated handler as a background job and return its task.

    A Stable Horde job can take minutes; the update loop moves on to other
    users while it runs.
    """

    def decorator(handler_func: Callable):
        @functools.wraps(handler_func)
        async def wrapper(update, context):
            user = update.effective_user if update else None
            user_id = user.id if user else None

            task = asyncio.create_task(_run_job(handler_func, update, context, command))
            _jobs[task] = BackgroundJob(command=command, user_id=user_id, task=task)
            task.add_done_callback(_forget)

            logger.info(f"/{command} started for user {user_id} (active jobs: {len(_jobs)})")
            return task

        return wrapper

    return decorator


def cancel_all_tasks() -> int:
    """Cancel every running job; a cancelled Stable Horde job stops polling at once"""
    running = [job for job in _jobs.values() if not job.task.done()]
    for job in running:
        logger.warning(f"Cancelling /{job.command} job of user {job.user_id}")
        job.task.cancel()
    return len(running)
