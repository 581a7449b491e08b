import asyncio
import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Awaitable, Callable, Optional

UTC = timezone.utc
logger = logging.getLogger("uvicorn")


@dataclass
class Job:
    seconds: int
    coro: Callable[..., Awaitable[Any]]
    args: tuple = ()
    kwargs: dict = field(default_factory=dict)
    last_run: Optional[datetime] = None

    def due(self, now: datetime) -> bool:
        return self.last_run is None or (now - self.last_run).total_seconds() >= self.seconds


class Scheduler:
    """
    In-process interval scheduler.
    Usage:
        sched = Scheduler()
        sched.every(3600, coro, arg1, arg2=...)
        await sched.run_forever()
    """
    def __init__(self, tick: float = 1.0):
        self.jobs: list[Job] = []
        self.tick = tick
        self._running: set[asyncio.Task] = set()

    def every(self, seconds: int, coro, *args, **kwargs) -> Job:
        job = Job(seconds, coro, args, kwargs)
        self.jobs.append(job)
        return job

    def run_pending(self, now: Optional[datetime] = None) -> int:
        """Start every due job; returns how many were started."""
        now = now or datetime.now(tz=UTC)
        started = 0
        for job in self.jobs:
            if job.due(now):
                task = asyncio.create_task(job.coro(*job.args, **job.kwargs))
                # held until done
                self._running.add(task)
                task.add_done_callback(self._running.discard)
                job.last_run = now
                started += 1
        return started

    async def run_forever(self):
        while True:
            self.run_pending()
            await asyncio.sleep(self.tick)
