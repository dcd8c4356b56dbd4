# -*- coding: utf-8 -*-
import time

from telegram import Update
from telegram.ext import ContextTypes


async def ping_command(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    """Measure the round trip of sending a message"""
    message = update.effective_message
    if not message:
        return

    start = time.monotonic()
    reply = await message.reply_text("Measuring…")
    duration = time.monotonic() - start

    await reply.edit_text(f"Ping: {int(duration * 1000)}ms")
