"""
Fire-and-forget execution for GET submissions.

Spawned tasks are kept in a module-level set so the event loop does not drop
them, and their failures only ever reach the log.
"""
import asyncio
import logging
from typing import Coroutine, Set

logger = logging.getLogger("loadgen.tasks")

_background_tasks: Set[asyncio.Task] = set()


def _on_done(task: asyncio.Task):
    _background_tasks.discard(task)
    if task.cancelled():
        logger.info(f"Background task {task.get_name()} cancelled")
        return
    exc = task.exception()
    if exc is not None:
        logger.error(
            f"Error during {task.get_name()}: {exc}",
            exc_info=(type(exc), exc, exc.__traceback__),
        )


def spawn(coro: Coroutine, name: str) -> asyncio.Task:
    task = asyncio.create_task(coro, name=name)
    _background_tasks.add(task)
    task.add_done_callback(_on_done)
    return task


def running_tasks():
    return [t for t in _background_tasks if not t.done()]


async def cancel_all():
    """Cancel every still-running background task (used on app shutdown)."""
    pending = running_tasks()
    for task in pending:
        task.cancel()
    if pending:
        await asyncio.gather(*pending, return_exceptions=True)
    return len(pending)
