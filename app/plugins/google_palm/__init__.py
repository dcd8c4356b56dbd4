# -*- coding: utf-8 -*-
"""
@Time    : 2025/8/22 11:03
@Author  : QIN2DIM
@GitHub  : https://github.com/QIN2DIM
@Desc    : Google PaLM text generation
"""

from .node import PalmClient, GenerateTextResponse, PalmErrorResponse

__all__ = ["PalmClient", "GenerateTextResponse", "PalmErrorResponse"]
