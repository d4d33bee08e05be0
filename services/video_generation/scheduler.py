"""
Deferred execution of poll cycles.

The orchestrator never sleeps between status checks. It hands each next cycle
to a scheduler as a PollTask (job id, attempt number, provider handle) and
returns. AsyncioScheduler runs tasks on the event loop via timers; tests swap
in a scheduler they drive by hand.
"""

import asyncio
import logging
from dataclasses import dataclass
from typing import Awaitable, Callable, Optional, Protocol

from .models import ProviderJobHandle

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PollTask:
    """State carried from one poll cycle to the next."""
    job_id: str
    attempt: int
    handle: ProviderJobHandle


PollCallback = Callable[[PollTask], Awaitable[None]]


class Scheduler(Protocol):
    """Anything that can run a poll callback after a delay."""

    def schedule(self, delay: float, callback: PollCallback, task: PollTask) -> None:
        ...


class AsyncioScheduler:
    """
    Timer-based scheduler on the running asyncio loop.

    Usage:
        scheduler = AsyncioScheduler()
        scheduler.schedule(2.0, orchestrator.poll, PollTask(job_id, 1, handle))

        # On shutdown
        await scheduler.shutdown()
    """

    def __init__(self, loop: Optional[asyncio.AbstractEventLoop] = None):
        self._loop = loop
        self._timers: set[asyncio.TimerHandle] = set()
        # Strong references so running cycles are not garbage collected
        self._running: set[asyncio.Task] = set()
        self._closed = False

    def schedule(self, delay: float, callback: PollCallback, task: PollTask) -> None:
        if self._closed:
            logger.warning(f"Scheduler closed, dropping poll for job {task.job_id}")
            return

        loop = self._loop or asyncio.get_running_loop()
        timer: Optional[asyncio.TimerHandle] = None

        def fire():
            self._timers.discard(timer)
            running = loop.create_task(self._run(callback, task))
            self._running.add(running)
            running.add_done_callback(self._running.discard)

        timer = loop.call_later(max(0.0, delay), fire)
        self._timers.add(timer)
        logger.debug(f"Poll {task.attempt} for job {task.job_id} scheduled in {delay:.1f}s")

    async def _run(self, callback: PollCallback, task: PollTask):
        try:
            await callback(task)
        except asyncio.CancelledError:
            raise
        except Exception as e:
            # Callbacks record their own failures; this only keeps the loop clean
            logger.error(f"Unhandled error in poll for job {task.job_id}: {type(e).__name__}: {e}")

    def pending(self) -> int:
        """Number of scheduled or running poll cycles."""
        return len(self._timers) + len(self._running)

    async def shutdown(self):
        """Cancel every outstanding timer and running cycle."""
        self._closed = True
        for timer in list(self._timers):
            timer.cancel()
        self._timers.clear()

        running = list(self._running)
        for task in running:
            task.cancel()
        if running:
            await asyncio.gather(*running, return_exceptions=True)
        self._running.clear()

        logger.info("Poll scheduler stopped")
