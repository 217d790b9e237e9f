import asyncio

import pytest

from screenplay_gen.core.stage_queue import StageQueue

class TestStageQueue:
    def test_runs_jobs_in_order_one_at_a_time(self):
        queue = StageQueue("image")
        order = []

        async def worker(job):
            order.append(("start", job))
            await asyncio.sleep(0)
            order.append(("end", job))
            return job * 10

        results = asyncio.run(queue.run([1, 2, 3], worker))
        assert results == [10, 20, 30]
        assert order == [("start", 1), ("end", 1), ("start", 2), ("end", 2), ("start", 3), ("end", 3)]
        assert queue.peak_in_flight == 1
        assert queue.completed == 3

    def test_submit_bounds_concurrent_callers(self):
        queue = StageQueue("speech", concurrency=1)

        async def call(x):
            await asyncio.sleep(0.01)
            return x

        async def main():
            return await asyncio.gather(*(queue.submit(call, i) for i in range(5)))

        assert asyncio.run(main()) == [0, 1, 2, 3, 4]
        assert queue.peak_in_flight == 1

    def test_progress_reports(self):
        queue = StageQueue("image")
        seen = []

        async def worker(job):
            return job

        asyncio.run(queue.run(["a", "b"], worker, lambda n, total, name: seen.append((n, total, name))))
        assert seen == [(1, 2, "image"), (2, 2, "image")]

    def test_first_failure_stops_remaining_jobs(self):
        queue = StageQueue("image")
        started = []

        async def worker(job):
            started.append(job)
            if job == 2:
                raise RuntimeError("boom")
            return job

        with pytest.raises(RuntimeError, match="boom"):
            asyncio.run(queue.run([1, 2, 3], worker))
        assert started == [1, 2]
        assert queue.in_flight == 0

    def test_invalid_concurrency(self):
        with pytest.raises(ValueError):
            StageQueue("image", concurrency=0)
