"""Campaign Store: SQLAlchemy persistence gateway for campaign sessions.

Sessions are stored as JSON blobs in the ``campaign_sessions`` table so a
concluded campaign (log, outcomes, final score) survives restarts.
"""

import asyncio
import json
import logging
from functools import partial

from sqlalchemy.engine import Engine

from ..campaign.models import CampaignSession
from .models import CampaignSessionRecord
from .session import build_engine, init_db, make_session_factory, session_scope

logger = logging.getLogger(__name__)


class SqlCampaignStore:
    """Persists ``CampaignSession`` documents to the configured database.

    Implements the orchestrator's persistence gateway (``save``); the
    blocking ORM work runs in the default executor.
    """

    def __init__(self, engine: Engine | None = None):
        self.engine = engine or build_engine()
        init_db(self.engine)
        self._factory = make_session_factory(self.engine)

    async def _run(self, fn, *args):
        loop = asyncio.get_running_loop()
        return await loop.run_in_executor(None, partial(fn, *args))

    # -- gateway ------------------------------------------------------------

    async def save(self, session: CampaignSession) -> bool:
        await self._run(self.save_sync, session)
        return True

    async def load(self, session_id: str) -> CampaignSession | None:
        return await self._run(self.load_sync, session_id)

    # -- blocking implementations -------------------------------------------

    def save_sync(self, session: CampaignSession) -> None:
        """Save or update a session."""
        data = json.dumps(session.to_dict())
        resolution_type = session.player_stats.get("resolutionType")
        with session_scope(self._factory) as db:
            existing = db.query(CampaignSessionRecord).filter(
                CampaignSessionRecord.session_id == session.id
            ).first()

            if existing:
                existing.data = data
                existing.title = session.title
                existing.session_state = session.session_state
                existing.resolution_type = resolution_type
                existing.save_count = (existing.save_count or 0) + 1
            else:
                db.add(CampaignSessionRecord(
                    session_id=session.id,
                    title=session.title,
                    session_state=session.session_state,
                    resolution_type=resolution_type,
                    data=data,
                    save_count=1,
                ))

    def load_sync(self, session_id: str) -> CampaignSession | None:
        """Load a session by ID, or None if it was never saved."""
        with session_scope(self._factory) as db:
            entry = db.query(CampaignSessionRecord).filter(
                CampaignSessionRecord.session_id == session_id
            ).first()
            if entry is None:
                return None
            return CampaignSession.from_dict(json.loads(entry.data))

    def delete(self, session_id: str) -> bool:
        """Delete a session. Returns True if it existed."""
        with session_scope(self._factory) as db:
            count = db.query(CampaignSessionRecord).filter(
                CampaignSessionRecord.session_id == session_id
            ).delete()
        return count > 0

    def list_sessions(self) -> list[dict]:
        """All stored sessions, most recently updated first."""
        with session_scope(self._factory) as db:
            entries = (
                db.query(CampaignSessionRecord)
                .order_by(CampaignSessionRecord.updated_at.desc())
                .all()
            )
            return [
                {
                    "session_id": e.session_id,
                    "title": e.title,
                    "session_state": e.session_state,
                    "resolution_type": e.resolution_type,
                    "save_count": e.save_count,
                }
                for e in entries
            ]
