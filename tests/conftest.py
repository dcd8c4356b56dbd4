# -*- coding: utf-8 -*-
import base64
from io import BytesIO

import pytest
from PIL import Image


class FakeClock:
    """Monotonic clock that only moves when told to"""

    def __init__(self, now: float = 0.0):
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


def make_image_base64(color, size=(64, 64), fmt="PNG") -> str:
    buffer = BytesIO()
    Image.new("RGB", size, color).save(buffer, format=fmt)
    return base64.b64encode(buffer.getvalue()).decode()


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def advancing_sleep(clock):
    """asyncio.sleep replacement that moves the fake clock forward instead of waiting"""

    calls = []

    async def _sleep(seconds: float):
        calls.append(seconds)
        clock.advance(seconds)

    _sleep.calls = calls
    return _sleep
