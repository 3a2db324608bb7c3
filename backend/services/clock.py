from __future__ import annotations

import asyncio
from typing import Protocol


class Clock(Protocol):
    async def sleep(self, seconds: float) -> None: ...


class SystemClock:
    """Sleeps on the running event loop."""

    async def sleep(self, seconds: float) -> None:
        await asyncio.sleep(seconds)
