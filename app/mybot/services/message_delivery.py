# -*- coding: utf-8 -*-
"""
@Time    : 2025/8/21 16:30
@Author  : QIN2DIM
@GitHub  : https://github.com/QIN2DIM
@Desc    : Send, edit and delete the messages of one command invocation
"""
from typing import IO

from loguru import logger
from telegram import Bot, Message, InlineKeyboardMarkup, InlineKeyboardButton
from telegram.constants import ParseMode, ChatAction


class TelegramMessenger:
    """
    Messages are sent as MarkdownV2 replies to the message that triggered the
    command. Callers are responsible for escaping the text.
    """

    def __init__(self, bot: Bot, chat_id: int, reply_to_message_id: int | None = None):
        self.bot = bot
        self.chat_id = chat_id
        self.reply_to_message_id = reply_to_message_id

    async def send_typing(self) -> None:
        await self.bot.send_chat_action(chat_id=self.chat_id, action=ChatAction.TYPING)

    async def send_text(self, text: str, parse_mode: str | None = None) -> Message:
        return await self.bot.send_message(
            chat_id=self.chat_id,
            text=text,
            parse_mode=parse_mode,
            reply_to_message_id=self.reply_to_message_id,
        )

    async def send_status(self, text: str) -> Message:
        return await self.send_text(text, parse_mode=ParseMode.MARKDOWN_V2)

    async def edit_status(self, handle: Message, text: str) -> Message:
        edited = await self.bot.edit_message_text(
            chat_id=self.chat_id,
            message_id=handle.message_id,
            text=text,
            parse_mode=ParseMode.MARKDOWN_V2,
        )
        # edit_message_text 对 inline 消息返回 True
        return edited if isinstance(edited, Message) else handle

    async def send_final(
        self,
        image: IO[bytes] | bytes,
        caption: str,
        attribution_link: tuple[str, str] | None = None,
    ) -> Message:
        """
        Args:
            image: the rendered collage
            caption: MarkdownV2 caption
            attribution_link: (button text, url) shown under the photo
        """
        reply_markup = None
        if attribution_link:
            text, url = attribution_link
            reply_markup = InlineKeyboardMarkup([[InlineKeyboardButton(text=text, url=url)]])

        return await self.bot.send_photo(
            chat_id=self.chat_id,
            photo=image,
            caption=caption,
            parse_mode=ParseMode.MARKDOWN_V2,
            reply_markup=reply_markup,
            reply_to_message_id=self.reply_to_message_id,
        )

    async def delete(self, handle: Message) -> None:
        try:
            await self.bot.delete_message(chat_id=self.chat_id, message_id=handle.message_id)
        except Exception as err:
            logger.debug(f"无法删除消息 {handle.message_id}: {err}")
