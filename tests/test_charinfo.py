# -*- coding: utf-8 -*-
from unittest.mock import AsyncMock

import pytest
from telegram import Message, Update
from telegram.constants import ParseMode

from mybot.handlers.command_handler.charinfo_command import charinfo_command, format_charinfo


def test_format_charinfo():
    assert format_charinfo("a.") == "`a` `U\\+0061`\n`\\.` `U\\+002E`"


def test_format_charinfo_blank_line_for_whitespace():
    assert format_charinfo("a b").split("\n") == ["`a` `U\\+0061`", "", "`b` `U\\+0062`"]


def test_format_charinfo_truncates():
    lines = format_charinfo("abcdefghijkl").split("\n")
    assert len(lines) == 11
    assert lines[-1] == "…"
    assert lines[-2] == "`j` `U\\+006A`"


@pytest.mark.asyncio
async def test_charinfo_command_replies_with_markdown():
    message = AsyncMock(spec=Message)
    message.text = "/charinfo é"
    message.caption = None
    message.reply_to_message = None
    update = AsyncMock(spec=Update)
    update.effective_message = message

    await charinfo_command(update, AsyncMock())

    message.reply_text.assert_awaited_once_with(
        "`é` `U\\+00E9`", parse_mode=ParseMode.MARKDOWN_V2
    )


@pytest.mark.asyncio
async def test_charinfo_command_without_characters():
    message = AsyncMock(spec=Message)
    message.text = "/charinfo"
    message.caption = None
    message.reply_to_message = None
    update = AsyncMock(spec=Update)
    update.effective_message = message

    await charinfo_command(update, AsyncMock())

    message.reply_text.assert_awaited_once_with("missing characters.")
