# -*- coding: utf-8 -*-
from contextlib import suppress

from telegram import Update
from telegram.ext import ContextTypes

from settings import settings


async def delete_command(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    """Owner only: delete the message this command replies to"""
    user = update.effective_user
    if not user or not settings.OWNER_ID or user.id != settings.OWNER_ID:
        # Not the owner, ignore command silently
        return

    message = update.effective_message
    if message and message.reply_to_message:
        with suppress(Exception):
            await message.reply_to_message.delete()
