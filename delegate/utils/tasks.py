"""
Background task helpers for the orchestrator's detached work.

The ticker loop and the persistence worker both run as long-lived
asyncio tasks; an exception escaping either must show up in the logs
rather than vanish with the task object.
"""

import asyncio
import contextlib
import logging

logger = logging.getLogger(__name__)


def safe_create_task(coro, *, name: str = None) -> asyncio.Task:
    """Schedule ``coro`` and log (with traceback) if it dies unexpectedly.

    Args:
        coro: The coroutine to schedule.
        name: Human-readable task name used in log messages.

    Returns:
        The created ``asyncio.Task``.
    """
    task = asyncio.create_task(coro, name=name)
    task.add_done_callback(_log_task_exception)
    return task


async def cancel_and_wait(task: asyncio.Task | None) -> None:
    """Cancel ``task`` and wait until it has actually finished.

    Safe to call with ``None``, with a finished task, or from inside a
    different task than the one being cancelled.
    """
    if task is None or task.done():
        return
    if task is asyncio.current_task():
        # A task cannot await its own cancellation; let it unwind itself.
        return
    task.cancel()
    with contextlib.suppress(asyncio.CancelledError):
        await task


def _log_task_exception(task: asyncio.Task) -> None:
    """Done-callback that logs unhandled task exceptions."""
    if task.cancelled():
        return
    exc = task.exception()
    if exc:
        logger.error(
            "Background task '%s' failed: %s",
            task.get_name(),
            exc,
            exc_info=exc,
        )
