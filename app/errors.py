# -*- coding: utf-8 -*-
"""
@Time    : 2025/8/20 14:02
@Author  : QIN2DIM
@GitHub  : https://github.com/QIN2DIM
@Desc    : Exceptions raised by commands and remote generation services
"""
from __future__ import annotations


class BotError(Exception):
    """Base class for every error this bot raises on purpose"""


class CommandError(BotError):
    """An error whose message can be shown to the user as-is"""


class MissingArgument(CommandError):
    def __init__(self, what: str = "argument"):
        self.what = what
        super().__init__(f"missing {what}.")


class ArgumentParseError(CommandError):
    pass


class AdmissionDenied(CommandError):
    def __init__(self, user_id: int | str):
        self.user_id = user_id
        super().__init__("you are being rate limited, try again later.")


class ValidationError(CommandError):
    def __init__(self, reason: str):
        self.reason = reason
        super().__init__(reason)


class TransportError(BotError):
    """A remote call that kept failing after every retry"""

    def __init__(self, message: str, status_code: int | None = None, body: str | None = None):
        self.status_code = status_code
        self.body = body
        super().__init__(message)


class HordeError(BotError):
    """Failure at one stage of a Stable Horde job"""

    stage = "job"

    def __init__(self, message: str, job_id: str | None = None):
        self.job_id = job_id
        super().__init__(message)


class SubmissionError(HordeError):
    stage = "submit"


class PollError(HordeError):
    stage = "poll"


class FetchError(HordeError):
    stage = "fetch"


class DecodeError(BotError):
    """A single worker payload that is not a readable image"""
