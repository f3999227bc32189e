"""In-memory session repository."""

import copy
import logging
from datetime import datetime
from typing import Dict, List, Optional
from uuid import UUID

from ...domain.entities import TestSession
from ...domain.exceptions import ActiveSessionExistsError, SessionNotCompletedError
from ...domain.repositories import ISessionRepository

logger = logging.getLogger(__name__)


class InMemorySessionRepository(ISessionRepository):
    """Process-local implementation of the session repository.

    Sessions are deep-copied on the way in and out, so callers never share
    state with the stored value.
    """

    def __init__(self):
        self._active: Dict[UUID, TestSession] = {}
        self._completed: Dict[UUID, TestSession] = {}

    async def get_active_by_id(self, session_id: UUID) -> Optional[TestSession]:
        return copy.deepcopy(self._active.get(session_id))

    async def get_active_by_user_id(self, user_id: int) -> Optional[TestSession]:
        for session in self._active.values():
            if session.user_id == user_id and not session.is_completed:
                return copy.deepcopy(session)
        return None

    async def get_all_active(self) -> List[TestSession]:
        return [copy.deepcopy(session) for session in self._active.values()]

    async def save_active(self, session: TestSession) -> None:
        for other in self._active.values():
            if other.user_id == session.user_id and other.id != session.id:
                raise ActiveSessionExistsError(session.user_id, other.id)

        self._active[session.id] = copy.deepcopy(session)
        logger.debug(f"Saved active session {session.id} for user {session.user_id}")

    async def remove_active(self, session_id: UUID) -> bool:
        removed = self._active.pop(session_id, None) is not None
        if removed:
            logger.debug(f"Removed active session {session_id}")
        return removed

    async def save_completed(self, session: TestSession) -> None:
        if not session.is_completed:
            raise SessionNotCompletedError(session.id)

        self._completed[session.id] = copy.deepcopy(session)
        logger.debug(f"Saved completed session {session.id} for user {session.user_id}")

    async def archive(self, session: TestSession) -> None:
        await self.save_completed(session)
        self._active.pop(session.id, None)

    async def get_completed_by_id(self, session_id: UUID) -> Optional[TestSession]:
        return copy.deepcopy(self._completed.get(session_id))

    async def get_completed(
        self,
        date_from: Optional[datetime] = None,
        date_to: Optional[datetime] = None
    ) -> List[TestSession]:
        sessions = [
            s for s in self._completed.values()
            if (date_from is None or s.completed_at >= date_from)
            and (date_to is None or s.completed_at <= date_to)
        ]
        sessions.sort(key=lambda s: s.completed_at, reverse=True)
        return copy.deepcopy(sessions)

    async def count_completed(self) -> int:
        return len(self._completed)

    async def purge_stale_active(self, older_than: datetime) -> int:
        stale = [sid for sid, s in self._active.items() if s.started_at < older_than]
        for session_id in stale:
            del self._active[session_id]
        return len(stale)
