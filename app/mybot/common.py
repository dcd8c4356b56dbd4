# -*- coding: utf-8 -*-
"""
@Time    : 2025/8/20 16:20
@Author  : QIN2DIM
@GitHub  : https://github.com/QIN2DIM
@Desc    : Text helpers shared by the command handlers
"""
from telegram import Message

# Characters that must be escaped in Telegram MarkdownV2
MARKDOWN_CHARS = frozenset("_*[]()~`>#+-=|{}.!\\")

ELLIPSIS = "…"

MAX_PROMPT_LENGTH = 1024
MAX_PROMPT_LINES = 8


def escape_markdown(text: str) -> str:
    return "".join(f"\\{char}" if char in MARKDOWN_CHARS else char for char in text)


def truncate_with_ellipsis(text: str, max_len: int) -> str:
    if len(text) > max_len:
        return text[: max_len - 1] + ELLIPSIS
    return text


def format_duration(seconds: int | float) -> str:
    """12 -> 12s, 75 -> 1m 15s, 3700 -> 1h 1m"""
    seconds = max(int(seconds), 0)
    hours = (seconds // 3600) % 60
    minutes = (seconds // 60) % 60
    seconds = seconds % 60

    if hours > 0:
        return f"{hours}h {minutes}m"
    if minutes > 0:
        return f"{minutes}m {seconds}s"
    return f"{seconds}s"


def check_prompt(prompt: str) -> str | None:
    """Returns the reason the prompt is rejected, or None if it is acceptable"""
    if len(prompt) > MAX_PROMPT_LENGTH:
        return f"this prompt is too long (>{MAX_PROMPT_LENGTH})."
    if len(prompt.splitlines()) > MAX_PROMPT_LINES:
        return f"this prompt has too many lines (>{MAX_PROMPT_LINES})."
    return None


def get_message_text(message: Message | None) -> str | None:
    if not message:
        return None
    return message.text or message.caption


def get_command_arguments(message: Message | None) -> str:
    """Everything after `/command@bot` in the message text"""
    text = get_message_text(message) or ""
    if not text.startswith("/"):
        return ""
    parts = text.split(maxsplit=1)
    return parts[1] if len(parts) > 1 else ""
