# -*- coding: utf-8 -*-
"""
@Time    : 2025/8/22 15:20
@Author  : QIN2DIM
@GitHub  : https://github.com/QIN2DIM
@Desc    : Stable Horde image generation commands (/sd, /sd2, /wd, /fd)
"""
from typing import List

from loguru import logger
from telegram import Update
from telegram.ext import CommandHandler, ContextTypes

from errors import CommandError, HordeError
from models import HordeModelPreset
from mybot.arguments import Argument, ArgumentShape, resolve_argument
from mybot.common import get_command_arguments
from mybot.handlers.command_handler._base import match_context
from mybot.services.job_orchestrator import JobOrchestrator, JobClient
from mybot.services.message_delivery import TelegramMessenger
from mybot.services.rate_limiter import RateLimiter
from mybot.task_manager import non_blocking_handler

# 3 jobs per user every 5 minutes, per command
HORDE_RATE_LIMIT = (3, 300)

PROMPT_ARGUMENT = Argument(ArgumentShape.STRING_GREEDY_OR_REPLY, name="prompt to generate")

STABLE_HORDE_PRESETS: List[HordeModelPreset] = [
    HordeModelPreset(
        command_names=["stable_diffusion_2", "sd2"],
        description="generate images using Stable Diffusion 2.0",
        model="stable_diffusion_2.0",
        size=768,
    ),
    HordeModelPreset(
        command_names=["stable_diffusion", "sd"],
        description="generate images using Stable Diffusion",
        model="stable_diffusion",
        size=512,
    ),
    HordeModelPreset(
        command_names=["waifu_diffusion", "wd"],
        description="generate images using Waifu Diffusion",
        model="waifu_diffusion",
        size=512,
    ),
    HordeModelPreset(
        command_names=["furry_diffusion", "fd"],
        description="generate images using Furry Epoch",
        model="Furry Epoch",
        size=512,
    ),
]


async def run_stablehorde_command(
    update: Update,
    context: ContextTypes.DEFAULT_TYPE,
    preset: HordeModelPreset,
    orchestrator: JobOrchestrator,
) -> None:
    message, chat = match_context(update)
    if not message or not chat:
        logger.warning(f"{preset.command_names[0]} 命令：无法找到有效的消息或聊天信息进行回复")
        return

    user = update.effective_user
    user_id = user.id if user else chat.id
    messenger = TelegramMessenger(context.bot, chat.id, message.message_id)

    try:
        prompt, _ = resolve_argument(PROMPT_ARGUMENT, get_command_arguments(message), message)
        logger.debug(f"Invoke {preset.model}: {prompt[:100]}")
        await orchestrator.run(user_id, prompt, preset.model, preset.size, messenger)

    except CommandError as command_error:
        await messenger.send_text(str(command_error))

    except HordeError as horde_error:
        logger.error(f"Stable Horde job failed at {horde_error.stage}: {horde_error}")
        await messenger.send_text(f"❌ Stable Horde error ({horde_error.stage}): {horde_error}")


def make_stablehorde_command(preset: HordeModelPreset, orchestrator: JobOrchestrator):
    @non_blocking_handler(preset.command_names[0])
    async def stablehorde_command(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
        await run_stablehorde_command(update, context, preset, orchestrator)

    return stablehorde_command


def build_stablehorde_handlers(client: JobClient) -> List[CommandHandler]:
    """One handler per preset, each with its own rate limiter and a shared horde client"""
    handlers = []
    for preset in STABLE_HORDE_PRESETS:
        orchestrator = JobOrchestrator(client, RateLimiter(*HORDE_RATE_LIMIT))
        handlers.append(
            CommandHandler(preset.command_names, make_stablehorde_command(preset, orchestrator))
        )
    return handlers
