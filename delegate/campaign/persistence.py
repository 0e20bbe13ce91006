"""Ordered, detached session saves.

Saves leave the cycle's critical path but never reorder: each request
snapshots the session at enqueue time and a single worker drains the
queue FIFO, so an older state can never overwrite a newer one.
"""

import asyncio
import copy
import logging
from collections.abc import Callable
from datetime import datetime

from ..enums import Collaborator
from ..utils.tasks import cancel_and_wait, safe_create_task
from .collaborators import CollaboratorFailure, PersistenceGateway
from .models import CampaignSession

logger = logging.getLogger(__name__)


class PersistenceWriter:
    """Single-worker save queue in front of a ``PersistenceGateway``.

    ``on_failure`` is called with every failed save, in addition to the
    record kept in ``failures``.
    """

    def __init__(
        self,
        gateway: PersistenceGateway | None,
        now: Callable[[], datetime],
        *,
        name: str = "campaign-saver",
        on_failure: Callable[[CollaboratorFailure], None] | None = None,
    ):
        self.gateway = gateway
        self._now = now
        self._name = name
        self._on_failure = on_failure
        self._queue: asyncio.Queue[CampaignSession] | None = None
        self._worker: asyncio.Task | None = None
        self.saved = 0
        self.failures: list[CollaboratorFailure] = []

    @property
    def pending(self) -> int:
        return self._queue.qsize() if self._queue is not None else 0

    @property
    def running(self) -> bool:
        """True while a save worker task is alive."""
        return self._worker is not None and not self._worker.done()

    def submit(self, session: CampaignSession) -> bool:
        """Queue a snapshot of ``session``. Returns False if no gateway."""
        if self.gateway is None:
            return False
        if self._queue is None:
            self._queue = asyncio.Queue()
        self._queue.put_nowait(copy.deepcopy(session))
        if self._worker is None or self._worker.done():
            self._worker = safe_create_task(self._drain(), name=self._name)
        return True

    async def flush(self) -> None:
        """Wait until every queued snapshot has been handled."""
        if self._queue is not None:
            await self._queue.join()

    async def close(self) -> None:
        """Drain pending saves, then stop the worker. Safe to call twice."""
        await self.flush()
        worker, self._worker = self._worker, None
        await cancel_and_wait(worker)

    async def _drain(self) -> None:
        queue = self._queue
        while True:
            snapshot = await queue.get()
            try:
                await self._save(snapshot)
            finally:
                queue.task_done()

    async def _save(self, snapshot: CampaignSession) -> None:
        try:
            ok = await self.gateway.save(snapshot)
        except Exception as e:
            logger.error(f"Failed to save campaign state for {snapshot.id}: {e}")
            self._record(CollaboratorFailure.from_exception(Collaborator.PERSISTENCE, "save", e, self._now()))
            return
        if ok is False:
            logger.warning(f"Persistence gateway rejected save for {snapshot.id}")
            self._record(
                CollaboratorFailure.from_exception(
                    Collaborator.PERSISTENCE, "save", None, self._now(), message="save returned False"
                )
            )
            return
        self.saved += 1

    def _record(self, failure: CollaboratorFailure) -> None:
        self.failures.append(failure)
        if self._on_failure is not None:
            self._on_failure(failure)
