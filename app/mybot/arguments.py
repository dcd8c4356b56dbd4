# -*- coding: utf-8 -*-
"""
@Time    : 2025/8/21 10:12
@Author  : QIN2DIM
@GitHub  : https://github.com/QIN2DIM
@Desc    : Typed command arguments

Each command declares the shape of the arguments it expects, and
``resolve_arguments`` consumes the raw text after the command one shape at a
time. A shape may fall back to the text of the replied-to message.
"""
from dataclasses import dataclass
from enum import Enum
from typing import List, Sequence, Tuple

from telegram import Message

from errors import MissingArgument, ArgumentParseError, CommandError
from mybot.common import get_message_text


class ArgumentShape(str, Enum):
    WORD = "word"
    """
    一个以空白分隔的单词
    """

    STRING_GREEDY = "string_greedy"
    """
    剩余的全部文本
    """

    REPLY = "reply"
    """
    被回复消息的文本
    """

    STRING_GREEDY_OR_REPLY = "string_greedy_or_reply"
    """
    剩余文本，为空时使用被回复消息的文本
    """


@dataclass(frozen=True)
class Argument:
    shape: ArgumentShape
    name: str = "argument"
    optional: bool = False


def _resolve_word(argument: Argument, arguments: str) -> Tuple[str, str]:
    parts = arguments.split(maxsplit=1)
    if not parts:
        raise MissingArgument(argument.name)
    return parts[0], parts[1] if len(parts) > 1 else ""


def _resolve_greedy(argument: Argument, arguments: str) -> Tuple[str, str]:
    text = arguments.strip()
    if not text:
        raise MissingArgument(argument.name)
    return text, ""


def _resolve_reply(argument: Argument, arguments: str, message: Message | None) -> Tuple[str, str]:
    replied = message.reply_to_message if message else None
    if not replied:
        raise MissingArgument(argument.name)

    text = get_message_text(replied)
    if not text:
        raise ArgumentParseError("replied message doesn't contain any text.")
    return text, arguments


def resolve_argument(
    argument: Argument, arguments: str, message: Message | None = None
) -> Tuple[str | None, str]:
    """
    Consume one argument from ``arguments``

    Returns:
        The resolved value (None when an optional argument is absent) and the
        text left for the following arguments.
    """
    try:
        match argument.shape:
            case ArgumentShape.WORD:
                return _resolve_word(argument, arguments)
            case ArgumentShape.STRING_GREEDY:
                return _resolve_greedy(argument, arguments)
            case ArgumentShape.REPLY:
                return _resolve_reply(argument, arguments, message)
            case ArgumentShape.STRING_GREEDY_OR_REPLY:
                try:
                    return _resolve_greedy(argument, arguments)
                except MissingArgument:
                    return _resolve_reply(argument, arguments, message)
    except CommandError:
        if argument.optional:
            return None, arguments
        raise

    raise ValueError(f"unknown argument shape: {argument.shape}")


def resolve_arguments(
    shapes: Sequence[Argument], arguments: str, message: Message | None = None
) -> List[str | None]:
    values = []
    for argument in shapes:
        value, arguments = resolve_argument(argument, arguments, message)
        values.append(value)
    return values
