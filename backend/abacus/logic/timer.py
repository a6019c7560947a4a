"""
Cooldown guard for game mode switches.

A swipe or a tap on the mode button can fire several times in a row. After
each accepted switch the guard engages, and a fire-once task releases it when
the cooldown has elapsed. The release task is never cancelled; switches that
arrive while the guard is engaged are simply refused.
"""

import asyncio

import structlog
from pydantic import BaseModel, Field

logger = structlog.get_logger()


class CooldownConfig(BaseModel):
    """Configuration for the mode switch cooldown."""

    seconds: float = Field(default=0.5, gt=0)


class ModeSwitchCooldown:
    """Two-state guard: idle, or engaged until a scheduled release fires."""

    def __init__(self, config: CooldownConfig | None = None) -> None:
        self._config = config or CooldownConfig()
        self._engaged = False
        self._release_task: asyncio.Task[None] | None = None

    @property
    def seconds(self) -> float:
        return self._config.seconds

    @property
    def is_engaged(self) -> bool:
        return self._engaged

    def try_engage(self) -> bool:
        """
        Engage the guard if it is idle.

        Returns False when a previous switch is still cooling down. Must be
        called from a running event loop, which owns the release task.

        Raises:
            RuntimeError: If no event loop is running; the guard stays idle

        """
        if self._engaged:
            return False
        loop = asyncio.get_running_loop()
        self._release_task = loop.create_task(self._release_after(self._config.seconds))
        self._engaged = True
        return True

    async def wait_released(self) -> None:
        """Wait until the pending release task (if any) has fired."""
        if self._release_task is not None:
            await self._release_task

    async def _release_after(self, seconds: float) -> None:
        await asyncio.sleep(seconds)
        self._engaged = False
        logger.debug("mode switch cooldown released", seconds=seconds)
