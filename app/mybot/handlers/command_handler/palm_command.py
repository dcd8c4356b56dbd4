# -*- coding: utf-8 -*-
"""
@Time    : 2025/8/22 17:30
@Author  : QIN2DIM
@GitHub  : https://github.com/QIN2DIM
@Desc    : /palm 命令，向 Google PaLM 提问
"""
from loguru import logger
from telegram import Update
from telegram.ext import ContextTypes

from errors import CommandError, TransportError
from mybot.arguments import Argument, ArgumentShape, resolve_argument
from mybot.common import get_command_arguments
from mybot.handlers.command_handler._base import match_context
from mybot.services.message_delivery import TelegramMessenger
from mybot.task_manager import non_blocking_handler
from plugins.google_palm import PalmClient, PalmErrorResponse

PALM_RATE_LIMIT = (3, 45)
MAX_OUTPUT_TOKENS = 256

PROMPT_ARGUMENT = Argument(ArgumentShape.STRING_GREEDY_OR_REPLY, name="prompt")

_client: PalmClient | None = None


def _get_client() -> PalmClient:
    global _client
    if _client is None:
        _client = PalmClient()
    return _client


async def close_client() -> None:
    global _client
    if _client is not None:
        await _client.aclose()
        _client = None


async def run_palm_command(
    update: Update, context: ContextTypes.DEFAULT_TYPE, client: PalmClient
) -> None:
    message, chat = match_context(update)
    if not message or not chat:
        logger.warning("palm 命令：无法找到有效的消息或聊天信息进行回复")
        return

    messenger = TelegramMessenger(context.bot, chat.id, message.message_id)

    try:
        prompt, _ = resolve_argument(PROMPT_ARGUMENT, get_command_arguments(message), message)
    except CommandError as command_error:
        await messenger.send_text(str(command_error))
        return

    if not client.is_configured:
        await messenger.send_text("❌ Google PaLM is not configured on this bot.")
        return

    await messenger.send_typing()

    try:
        response = await client.generate_text(prompt, MAX_OUTPUT_TOKENS)
    except TransportError as transport_error:
        logger.error(f"PaLM request failed: {transport_error}")
        await messenger.send_text("❌ Google PaLM is not responding, please try again later.")
        return

    if isinstance(response, PalmErrorResponse):
        text = f"error {response.error.code}: {response.error.message}"
    elif response.filters:
        text = f"request filtered by Google: {response.filter_reasons()}."
    elif response.candidates:
        text = response.candidates[0].output
    else:
        text = "Google PaLM returned an empty response."

    await messenger.send_text(text)


@non_blocking_handler("google_palm")
async def palm_command(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    """Ask Google PaLM"""
    await run_palm_command(update, context, _get_client())
