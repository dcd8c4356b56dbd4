# -*- coding: utf-8 -*-
"""
Fixed-window admission control keyed by user id
"""
import asyncio
import time
from dataclasses import dataclass
from typing import Callable, Dict, Hashable

from loguru import logger


@dataclass
class RateLimitState:
    count: int
    window_start: float


class RateLimiter:
    """
    Allow ``max_uses`` actions per ``window`` seconds for every user

    Each user id owns its own state and its own lock, so users never wait on
    each other. State is created lazily and kept for the lifetime of the process.
    """

    def __init__(
        self, max_uses: int, window: float, clock: Callable[[], float] = time.monotonic
    ):
        self.max_uses = max_uses
        self.window = window
        self._clock = clock
        self._states: Dict[Hashable, RateLimitState] = {}
        self._locks: Dict[Hashable, asyncio.Lock] = {}

    def _get_lock(self, user_id: Hashable) -> asyncio.Lock:
        lock = self._locks.get(user_id)
        if lock is None:
            lock = asyncio.Lock()
            self._locks[user_id] = lock
        return lock

    async def try_acquire(self, user_id: Hashable) -> bool:
        async with self._get_lock(user_id):
            now = self._clock()
            state = self._states.get(user_id)

            if state is None or now - state.window_start >= self.window:
                self._states[user_id] = RateLimitState(count=1, window_start=now)
                return True

            state.count += 1
            if state.count <= self.max_uses:
                return True

        logger.debug(f"Rate limited user {user_id} ({self.max_uses} per {self.window}s)")
        return False
