import asyncio
from typing import Optional, Set

from constants import EMPTY_ROOM_GRACE_SECONDS, SWEEP_INTERVAL_SECONDS
from logging_config import get_logger

logger = get_logger(__name__)


class LifecycleReaper:
    """Background cleanup for a RoomRegistry.

    Runs a periodic TTL sweep and, whenever a room loses its last viewer, a
    one-shot grace check. Grace checks are never cancelled; the registry
    re-validates the room when they fire.
    """

    def __init__(self, registry, sweep_interval: float = SWEEP_INTERVAL_SECONDS,
                 grace_period: float = EMPTY_ROOM_GRACE_SECONDS):
        self.registry = registry
        self.sweep_interval = sweep_interval
        self.grace_period = grace_period
        self._sweep_task: Optional[asyncio.Task] = None
        self._grace_tasks: Set[asyncio.Task] = set()
        registry.on_room_empty = self.schedule_empty_check

    def start(self):
        if self._sweep_task is None or self._sweep_task.done():
            self._sweep_task = asyncio.create_task(self._sweep_loop())
            logger.info(f"Room sweeper started: interval={self.sweep_interval}s, ttl={self.registry.room_ttl}s")

    async def stop(self):
        tasks = list(self._grace_tasks)
        if self._sweep_task is not None:
            tasks.append(self._sweep_task)
            self._sweep_task = None
        for task in tasks:
            task.cancel()
        if tasks:
            await asyncio.gather(*tasks, return_exceptions=True)
        self._grace_tasks.clear()
        logger.info(f"Reaper stopped, cancelled {len(tasks)} tasks")

    def schedule_empty_check(self, code: str, generation: int):
        task = asyncio.create_task(self._empty_check(code, generation))
        self._grace_tasks.add(task)
        task.add_done_callback(self._grace_tasks.discard)
        logger.debug(f"Room {code} is empty, checking again in {self.grace_period}s ({self.pending_checks} checks pending)")

    @property
    def pending_checks(self) -> int:
        return len(self._grace_tasks)

    async def _empty_check(self, code: str, generation: int):
        await asyncio.sleep(self.grace_period)
        try:
            await self.registry.expire_if_empty(code, generation)
        except Exception as e:
            logger.error(f"Error in grace check for room {code}: {e}", exc_info=True)

    async def _sweep_loop(self):
        while True:
            await asyncio.sleep(self.sweep_interval)
            try:
                expired = await self.registry.sweep_expired()
                if expired:
                    logger.info(f"Sweep removed {len(expired)} expired rooms")
            except Exception as e:
                logger.error(f"Error during room sweep: {e}", exc_info=True)
