"""Append-only campaign log backed by the session document."""

from datetime import datetime

from ..enums import ActionType, LogEntryType
from .models import AutonomousAction, CampaignSession, Character, LogEntry

# Log type tag per action kind; anything else is a plain autonomous action.
_ACTION_LOG_TYPES = {
    ActionType.PHASE_TRANSITION: LogEntryType.PHASE_TRANSITION,
}


class CampaignLog:
    """Ordered ``LogEntry`` records on ``session.campaign_log``.

    The only write path for the orchestrator; entries are never removed
    or rewritten.
    """

    def __init__(self, session: CampaignSession):
        self._session = session

    def __len__(self) -> int:
        return len(self._session.campaign_log)

    @property
    def entries(self) -> tuple[LogEntry, ...]:
        return tuple(self._session.campaign_log)

    @property
    def last(self) -> LogEntry | None:
        return self._session.campaign_log[-1] if self._session.campaign_log else None

    def append(
        self,
        title: str,
        content: str,
        entry_type: LogEntryType,
        timestamp: datetime,
        character: Character | None = None,
    ) -> LogEntry:
        entry = LogEntry(
            title=title,
            content=content,
            timestamp=timestamp,
            type=entry_type,
            character=character,
        )
        self._session.campaign_log.append(entry)
        return entry

    def append_action(self, action: AutonomousAction) -> LogEntry:
        return self.append(
            title=action.title,
            content=action.description,
            entry_type=_ACTION_LOG_TYPES.get(action.type, LogEntryType.AUTONOMOUS_ACTION),
            timestamp=action.timestamp,
            character=action.character,
        )

    def tail(self, n: int = 10) -> list[LogEntry]:
        """The most recent ``n`` entries, oldest first."""
        if n <= 0:
            return []
        return list(self._session.campaign_log[-n:])

    def to_dicts(self, limit: int | None = None) -> list[dict]:
        entries = self._session.campaign_log if limit is None else self.tail(limit)
        return [entry.to_dict() for entry in entries]
