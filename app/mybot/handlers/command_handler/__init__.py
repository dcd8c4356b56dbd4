# -*- coding: utf-8 -*-
"""
@Time    : 2025/7/13 13:58
@Author  : QIN2DIM
@GitHub  : https://github.com/QIN2DIM
@Desc    :
"""
from .charinfo_command import charinfo_command
from .craiyon_command import craiyon_command, CRAIYON_RATE_LIMIT
from .craiyon_command import close_client as close_craiyon_client
from .delete_command import delete_command
from .palm_command import palm_command, PALM_RATE_LIMIT
from .palm_command import close_client as close_palm_client
from .ping_command import ping_command
from .stablehorde_command import build_stablehorde_handlers, STABLE_HORDE_PRESETS

__all__ = [
    "charinfo_command",
    "craiyon_command",
    "CRAIYON_RATE_LIMIT",
    "close_craiyon_client",
    "delete_command",
    "palm_command",
    "PALM_RATE_LIMIT",
    "close_palm_client",
    "ping_command",
    "build_stablehorde_handlers",
    "STABLE_HORDE_PRESETS",
]
