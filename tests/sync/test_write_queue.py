import asyncio
import unittest

from project_control.sync.write_queue import WriteQueue


class WriteQueueTests(unittest.IsolatedAsyncioTestCase):
    async def test_jobs_run_one_at_a_time_in_order(self):
        queue = WriteQueue()
        events = []

        def make_job(name, pauses):
            async def job():
                events.append(f"{name}:start")
                for _ in range(pauses):
                    await asyncio.sleep(0)
                events.append(f"{name}:end")
                return name

            return job

        first = queue.enqueue(make_job("first", 5), "first job")
        second = queue.enqueue(make_job("second", 0), "second job")
        third = queue.enqueue(make_job("third", 2), "third job")

        results = await asyncio.gather(first, second, third)

        self.assertEqual(results, ["first", "second", "third"])
        self.assertEqual(
            events,
            ["first:start", "first:end", "second:start", "second:end", "third:start", "third:end"],
        )

    async def test_failure_is_reported_and_queue_continues(self):
        notices = []
        queue = WriteQueue(notify=notices.append)
        ran = []

        async def broken():
            raise OSError("disk full")

        async def healthy():
            ran.append("healthy")
            return True

        failed = queue.enqueue(broken, "save Alpha")
        succeeded = queue.enqueue(healthy, "save Beta")

        with self.assertLogs("project_control.sync.write_queue", level="ERROR"):
            self.assertIsNone(await failed)
        self.assertTrue(await succeeded)
        self.assertEqual(ran, ["healthy"])
        self.assertEqual(notices, ["Failed to save Alpha: disk full"])

    async def test_drain_waits_for_everything_queued(self):
        queue = WriteQueue()
        done = []

        async def slow():
            for _ in range(3):
                await asyncio.sleep(0)
            done.append("slow")

        queue.enqueue(slow)
        queue.enqueue(slow)
        self.assertEqual(queue.pending, 2)

        await queue.drain()

        self.assertEqual(done, ["slow", "slow"])
        self.assertEqual(queue.pending, 0)

    async def test_drain_on_empty_queue_returns(self):
        await WriteQueue().drain()


if __name__ == "__main__":
    unittest.main()
