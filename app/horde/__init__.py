# -*- coding: utf-8 -*-
from .horde_client import HordeJobClient
from .transport import RetryingTransport

__all__ = ["HordeJobClient", "RetryingTransport"]
