import asyncio
import logging
from collections.abc import Awaitable, Callable
from typing import Any, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")
Notifier = Callable[[str], None]


def log_notice(message: str) -> None:
    logger.info("%s", message)


class WriteQueue:
    """Runs read-modify-write jobs against one document strictly one at a time.

    Each job waits for the previously queued job to finish, whether it
    succeeded or failed. A failing job is logged and reported through the
    notifier; later jobs still run.
    """

    def __init__(self, notify: Notifier | None = None) -> None:
        self._notify = notify or log_notice
        self._tail: asyncio.Task | None = None
        self._pending = 0

    @property
    def pending(self) -> int:
        return self._pending

    def enqueue(self, job: Callable[[], Awaitable[T]], description: str = "save changes") -> "asyncio.Task[T | None]":
        previous = self._tail
        loop = asyncio.get_running_loop()
        task = loop.create_task(self._run(previous, job, description))
        self._tail = task
        self._pending += 1
        return task

    async def drain(self) -> None:
        while self._tail is not None and not self._tail.done():
            await asyncio.wait({self._tail})

    async def _run(self, previous: asyncio.Task | None, job: Callable[[], Awaitable[Any]], description: str) -> Any:
        if previous is not None:
            await asyncio.wait({previous})
        logger.debug("Running write job: %s", description)
        try:
            return await job()
        except Exception as exc:
            logger.exception("Write job failed: %s", description)
            self._notify(f"Failed to {description}: {exc}")
            return None
        finally:
            self._pending -= 1
