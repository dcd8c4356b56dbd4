# -*- coding: utf-8 -*-
"""
@Time    : 2025/8/22 16:02
@Author  : QIN2DIM
@GitHub  : https://github.com/QIN2DIM
@Desc    : /craiyon 命令，生成一组图片并拼成一张图
"""
import tempfile

from loguru import logger
from telegram import Update
from telegram.ext import ContextTypes

from errors import CommandError, TransportError, ValidationError
from mybot.arguments import Argument, ArgumentShape, resolve_argument
from mybot.common import check_prompt, escape_markdown, format_duration, get_command_arguments
from mybot.handlers.command_handler._base import match_context
from mybot.services.message_delivery import TelegramMessenger
from mybot.services.result_aggregator import ResultAggregator, compose_grid
from mybot.task_manager import non_blocking_handler
from plugins.craiyon import CraiyonClient

CRAIYON_RATE_LIMIT = (3, 120)
CRAIYON_COLUMNS = 3
CRAIYON_SITE = ("generated thanks to Craiyon", "https://www.craiyon.com/")

PROMPT_ARGUMENT = Argument(ArgumentShape.STRING_GREEDY_OR_REPLY, name="prompt to generate")

_client: CraiyonClient | None = None


def _get_client() -> CraiyonClient:
    global _client
    if _client is None:
        _client = CraiyonClient()
    return _client


async def close_client() -> None:
    global _client
    if _client is not None:
        await _client.aclose()
        _client = None


async def run_craiyon_command(
    update: Update, context: ContextTypes.DEFAULT_TYPE, client: CraiyonClient
) -> None:
    message, chat = match_context(update)
    if not message or not chat:
        logger.warning("craiyon 命令：无法找到有效的消息或聊天信息进行回复")
        return

    messenger = TelegramMessenger(context.bot, chat.id, message.message_id)

    try:
        prompt, _ = resolve_argument(PROMPT_ARGUMENT, get_command_arguments(message), message)
        if issue := check_prompt(prompt):
            logger.info(f"prompt rejected: {issue}")
            raise ValidationError(issue)
    except CommandError as command_error:
        await messenger.send_text(str(command_error))
        return

    await messenger.send_typing()

    try:
        result = await client.generate(prompt)
    except TransportError as transport_error:
        logger.error(f"Craiyon request failed: {transport_error}")
        await messenger.send_text("❌ Craiyon is not responding, please try again later.")
        return

    images = ResultAggregator().decode_all(result.images)
    if not images:
        await messenger.send_text("❌ Craiyon did not return any image.")
        return

    collage = compose_grid(images, images[0].size, CRAIYON_COLUMNS, padding=8)
    caption = (
        f"generated *{escape_markdown(prompt)}* in {format_duration(result.duration)}\\."
    )

    with tempfile.NamedTemporaryFile(suffix=".png") as artifact:
        collage.save(artifact, format="PNG")
        artifact.seek(0)
        await messenger.send_final(artifact, caption, CRAIYON_SITE)


@non_blocking_handler("craiyon")
async def craiyon_command(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    """Generate images using Craiyon"""
    await run_craiyon_command(update, context, _get_client())
