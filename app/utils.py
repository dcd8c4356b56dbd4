# -*- coding: utf-8 -*-
# Time       : 2023/8/19 17:19
# Author     : QIN2DIM
# GitHub     : https://github.com/QIN2DIM
# Description:
from __future__ import annotations

import os
import sys
from zoneinfo import ZoneInfo

from loguru import logger

LOG_TIMEZONE = ZoneInfo(os.getenv("LOG_TIMEZONE", "UTC"))

STDOUT_FORMAT = (
    "<g>{time:YYYY-MM-DD HH:mm:ss}</g> | "
    "<lvl>{level:<8}</lvl>    | "
    "<c>{name}</c>:<c>{function}</c>:<c>{line}</c> | "
    "<n>{message}</n>"
)

# sink 名称 -> loguru.add 的参数
FILE_SINKS = {
    "error": {"level": "ERROR", "rotation": "5 MB", "retention": "7 days"},
    "runtime": {"level": "TRACE", "rotation": "5 MB", "retention": "7 days"},
    "serialize": {"level": "DEBUG", "serialize": True},
}


def timezone_filter(record):
    record["time"] = record["time"].astimezone(LOG_TIMEZONE)
    return record


def init_log(**sink_channel):
    """
    stdout at LOG_LEVEL plus one file sink per keyword, e.g.
    ``init_log(error=LOG_DIR / "error.log", runtime=LOG_DIR / "runtime.log")``
    """
    logger.remove()
    logger.add(
        sink=sys.stdout,
        colorize=True,
        level=os.getenv("LOG_LEVEL", "DEBUG").upper(),
        format=STDOUT_FORMAT,
        diagnose=False,
        filter=timezone_filter,
    )

    for channel, options in FILE_SINKS.items():
        if sink := sink_channel.get(channel):
            logger.add(
                sink=sink, encoding="utf8", diagnose=False, filter=timezone_filter, **options
            )

    return logger
