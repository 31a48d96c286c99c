"""Cosmetic "noise reduction" stage shown before analysis.

No pixels are touched: the stage only waits, and the same image is
submitted downstream.
"""

import asyncio
from typing import Awaitable, Callable

Sleep = Callable[[float], Awaitable[None]]


async def simulate_noise_reduction(delay: float, sleep: Sleep = asyncio.sleep) -> None:
    """Wait `delay` seconds to stand in for image enhancement."""
    if delay > 0:
        await sleep(delay)
