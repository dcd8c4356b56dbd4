# -*- coding: utf-8 -*-
"""
@Time    : 2025/8/22 18:10
@Author  : QIN2DIM
@GitHub  : https://github.com/QIN2DIM
@Desc    : 显示字符的 Unicode 码位
"""
from telegram import Update
from telegram.constants import ParseMode
from telegram.ext import ContextTypes

from errors import CommandError
from mybot.arguments import Argument, ArgumentShape, resolve_argument
from mybot.common import escape_markdown, get_command_arguments, ELLIPSIS

MAX_CHARS = 10

CHARS_ARGUMENT = Argument(ArgumentShape.STRING_GREEDY_OR_REPLY, name="characters")


def format_charinfo(chars: str) -> str:
    lines = [
        "" if char.isspace() else f"`{escape_markdown(char)}` `U\\+{ord(char):04X}`"
        for char in chars
    ]

    if len(lines) > MAX_CHARS:
        lines = lines[:MAX_CHARS]
        lines.append(ELLIPSIS)

    return "\n".join(lines)


async def charinfo_command(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    message = update.effective_message
    if not message:
        return

    try:
        chars, _ = resolve_argument(CHARS_ARGUMENT, get_command_arguments(message), message)
    except CommandError as command_error:
        await message.reply_text(str(command_error))
        return

    await message.reply_text(format_charinfo(chars), parse_mode=ParseMode.MARKDOWN_V2)
