import asyncio
import logging
from typing import Awaitable, Callable, List, Optional, Sequence, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")
R = TypeVar("R")

ProgressCallback = Callable[[int, int, str], None]


class StageQueue:
    """
    Work queue that lets at most `concurrency` external calls of one stage run at once.

    The pipeline uses concurrency=1 for the image and speech stages so that each
    request completes before the next one starts and "N of M" progress stays exact.
    The first failing job propagates and the remaining jobs are never started.
    """

    def __init__(self, name: str, concurrency: int = 1):
        if concurrency < 1:
            raise ValueError("concurrency must be at least 1")
        self.name = name
        self.concurrency = concurrency
        self._semaphore = asyncio.Semaphore(concurrency)
        self.in_flight = 0
        self.peak_in_flight = 0
        self.completed = 0

    async def submit(self, call: Callable[..., Awaitable[R]], *args) -> R:
        async with self._semaphore:
            self.in_flight += 1
            self.peak_in_flight = max(self.peak_in_flight, self.in_flight)
            try:
                result = await call(*args)
            finally:
                self.in_flight -= 1
            self.completed += 1
            return result

    async def run(self, jobs: Sequence[T], worker: Callable[[T], Awaitable[R]],
                  progress: Optional[ProgressCallback] = None) -> List[R]:
        results = []
        total = len(jobs)
        for number, job in enumerate(jobs, start=1):
            if progress:
                progress(number, total, self.name)
            results.append(await self.submit(worker, job))
        logger.info(f"{self.name}: {len(results)} job(s) done.")
        return results
