# -*- coding: utf-8 -*-
"""
@Time    : 2025/8/22 09:40
@Author  : QIN2DIM
@GitHub  : https://github.com/QIN2DIM
@Desc    : Craiyon image generation
"""

from .node import CraiyonClient, CraiyonResult

__all__ = ["CraiyonClient", "CraiyonResult"]
