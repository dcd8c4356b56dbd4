# -*- coding: utf-8 -*-
"""
@Time    : 2025/7/7 05:40
@Author  : QIN2DIM
@GitHub  : https://github.com/QIN2DIM
@Desc    :
"""
import json
import signal
import sys

from loguru import logger
from telegram import Update, BotCommand
from telegram.ext import CommandHandler, Application

from horde import HordeJobClient
from mybot.handlers.command_handler import (
    STABLE_HORDE_PRESETS,
    CRAIYON_RATE_LIMIT,
    PALM_RATE_LIMIT,
    build_stablehorde_handlers,
    charinfo_command,
    close_craiyon_client,
    close_palm_client,
    craiyon_command,
    delete_command,
    palm_command,
    ping_command,
)
from mybot.handlers.command_handler._base import RateLimitedCommandHandler
from mybot.services.rate_limiter import RateLimiter
from mybot.task_manager import cancel_all_tasks
from settings import settings, LOG_DIR
from utils import init_log

init_log(
    runtime=LOG_DIR.joinpath("runtime.log"),
    error=LOG_DIR.joinpath("error.log"),
    serialize=LOG_DIR.joinpath("serialize.log"),
)

horde_client = HordeJobClient()


async def setup_bot_commands(application: Application):
    """设置机器人的命令菜单"""
    commands = [
        BotCommand(preset.command_names[0], preset.description) for preset in STABLE_HORDE_PRESETS
    ]
    commands += [
        BotCommand("craiyon", "generate images using Craiyon"),
        BotCommand("google_palm", "ask Google PaLM"),
        BotCommand("charinfo", "show the code points of characters"),
        BotCommand("ping", "measure the bot's latency"),
    ]

    try:
        await application.bot.set_my_commands(commands)
        logger.success(f"已设置机器人命令菜单: {[f'/{cmd.command}' for cmd in commands]}")
    except Exception as e:
        logger.error(f"设置机器人命令菜单失败: {e}")


async def shutdown_jobs(application: Application):
    """取消仍在轮询的任务并关闭所有 HTTP 连接"""
    if cancelled := cancel_all_tasks():
        logger.warning(f"Shutting down with {cancelled} running jobs")

    await horde_client.aclose()
    await close_craiyon_client()
    await close_palm_client()


def main() -> None:
    """Start the bot."""
    sp = settings.model_dump(mode="json")

    s = json.dumps(sp, indent=2, ensure_ascii=False)
    logger.success(f"Loading settings: {s}")

    application = settings.get_default_application()

    application.post_init = setup_bot_commands
    application.post_shutdown = shutdown_jobs

    for handler in build_stablehorde_handlers(horde_client):
        application.add_handler(handler)

    application.add_handler(
        RateLimitedCommandHandler("craiyon", craiyon_command, RateLimiter(*CRAIYON_RATE_LIMIT))
    )
    application.add_handler(
        RateLimitedCommandHandler(
            ["google_palm", "palm"], palm_command, RateLimiter(*PALM_RATE_LIMIT)
        )
    )
    application.add_handler(CommandHandler("charinfo", charinfo_command))
    application.add_handler(CommandHandler("ping", ping_command))
    application.add_handler(CommandHandler(["delete", "del"], delete_command))

    # Setting up a graceful shutdown
    def shutdown_handler(signum, frame):
        logger.info("Receiving a shutdown signal that is stopping the bot...")
        sys.exit(0)

    signal.signal(signal.SIGINT, shutdown_handler)
    signal.signal(signal.SIGTERM, shutdown_handler)

    # Run the bot until the user presses Ctrl-C
    application.run_polling(allowed_updates=Update.ALL_TYPES)


if __name__ == "__main__":
    main()
