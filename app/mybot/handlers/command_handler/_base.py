# -*- coding: utf-8 -*-
"""
Base command handler with per-user rate limiting
"""
from typing import Callable, Optional, Awaitable

from loguru import logger
from telegram import Update, Message, Chat
from telegram.ext import CommandHandler, ContextTypes

from errors import AdmissionDenied
from mybot.services.rate_limiter import RateLimiter


def match_context(update: Update) -> tuple[Message | None, Chat | None]:
    """Find the message and chat a command should reply to"""
    message = None
    chat = None

    if update.message:
        message = update.message
        chat = update.message.chat
    elif update.callback_query:
        message = update.callback_query.message
        chat = update.callback_query.message.chat if update.callback_query.message else None

    # Fallback to effective_* methods
    if not message or not chat:
        message = update.effective_message
        chat = update.effective_chat

    return message, chat


class RateLimitedCommandHandler(CommandHandler):
    """
    Command handler wrapper that enforces a per-user rate limit

    Denied users get a short reply and the original callback is never invoked.
    Commands that run a Stable Horde job do their admission check inside the
    job orchestrator instead and use the plain CommandHandler.
    """

    def __init__(
        self,
        command: str | list[str],
        callback: Callable[[Update, ContextTypes.DEFAULT_TYPE], Awaitable[None]],
        rate_limiter: RateLimiter,
        filters=None,
        block: bool = True,
        has_args: Optional[bool | int] = None,
    ):
        """
        Args:
            command: Command or list of commands
            callback: Original callback function
            rate_limiter: Limiter shared by every alias of this command
            filters: Additional filters
            block: Whether to run blocking or non-blocking
            has_args: Whether command expects arguments
        """
        self._original_callback = callback
        self.rate_limiter = rate_limiter

        super().__init__(
            command=command,
            callback=self._rate_limited_callback,
            filters=filters,
            block=block,
            has_args=has_args,
        )

    async def _rate_limited_callback(
        self, update: Update, context: ContextTypes.DEFAULT_TYPE
    ) -> None:
        message = update.effective_message
        command = message.text.split()[0] if message and message.text else "unknown"

        user = update.effective_user
        if not user:
            logger.warning(f"No effective user for command {command}")
            return

        if not await self.rate_limiter.try_acquire(user.id):
            logger.info(f"Rate limited command {command} from user {user.id}")
            if message:
                try:
                    await message.reply_text(str(AdmissionDenied(user.id)))
                except Exception as e:
                    logger.error(f"Failed to send rate limit message: {e}")
            return

        await self._original_callback(update, context)
